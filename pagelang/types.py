from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Tuple

from .schemas import Element, Text


class ValueKind(str, Enum):
    Str = "Str"
    List = "List"
    Node = "Node"
    Empty = "Empty"
    Int = "Int"  # only from `.|` and integer literals; index/slice operand


@dataclass(frozen=True)
class Value:
    """Runtime value produced by the evaluator.

    Values are immutable and compared structurally. ``data`` holds a ``str``
    for Str, a tuple of Values for List, an Element/Text model for Node,
    an ``int`` for Int and ``None`` for Empty.
    """
    kind: ValueKind
    data: Any = None

    @classmethod
    def string(cls, text: str) -> "Value":
        return cls(ValueKind.Str, text)

    @classmethod
    def list(cls, items: Iterable["Value"] = ()) -> "Value":
        return cls(ValueKind.List, tuple(items))

    @classmethod
    def node(cls, node: Element | Text) -> "Value":
        return cls(ValueKind.Node, node)

    @classmethod
    def integer(cls, n: int) -> "Value":
        return cls(ValueKind.Int, n)

    @property
    def is_empty(self) -> bool:
        return self.kind is ValueKind.Empty

    @property
    def is_list(self) -> bool:
        return self.kind is ValueKind.List

    @property
    def is_scalar(self) -> bool:
        return self.kind in (ValueKind.Str, ValueKind.Node)

    @property
    def items(self) -> Tuple["Value", ...]:
        return self.data if self.kind is ValueKind.List else ()

    def describe(self) -> str:
        if self.kind is ValueKind.Node:
            return f"Node<{self.data.kind}>"
        if self.kind is ValueKind.List:
            return f"List[{len(self.data)}]"
        return self.kind.value


EMPTY = Value(ValueKind.Empty)
