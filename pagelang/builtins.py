from __future__ import annotations
from typing import Callable, Dict, Optional

from .ast import Position
from .errors import TypeMismatch
from .schemas import Text
from .types import Value, ValueKind

Builtin = Callable[[Value, Optional[Position]], Value]


def _text(value: Value, pos: Optional[Position]) -> Value:
    # Str -> Text node, List of Str -> List of Text nodes, Node passes through
    if value.kind is ValueKind.Str:
        return Value.node(Text(value=value.data))
    if value.kind is ValueKind.Node:
        return value
    if value.kind is ValueKind.List:
        return Value.list(_text(item, pos) for item in value.items)
    raise TypeMismatch(f"text expects Str, Node or List, got {value.describe()}", pos)


def _join(value: Value, pos: Optional[Position]) -> Value:
    if value.kind is ValueKind.Str:
        return value
    if value.kind is not ValueKind.List:
        raise TypeMismatch(f"join expects a List of Str, got {value.describe()}", pos)
    parts = []
    for item in value.items:
        if item.kind is not ValueKind.Str:
            raise TypeMismatch(f"join expects a List of Str, found {item.describe()}", pos)
        parts.append(item.data)
    return Value.string("".join(parts))


def _string_op(name: str, op: Callable[[str], str]) -> Builtin:
    def apply(value: Value, pos: Optional[Position]) -> Value:
        if value.kind is not ValueKind.Str:
            raise TypeMismatch(f"{name} expects Str, got {value.describe()}", pos)
        return Value.string(op(value.data))
    return apply


BUILTINS: Dict[str, Builtin] = {
    "text": _text,
    "join": _join,
    "upper": _string_op("upper", str.upper),
    "lower": _string_op("lower", str.lower),
}
