from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from . import ast
from .builtins import BUILTINS
from .config import Settings
from .errors import CallDepthExceeded, IndexOutOfRange, TypeMismatch, UnknownMacro
from .parser import parse
from .schemas import Element, Text
from .semantic import SourceUnit, SemanticAnalyzer, check_construct
from .tables import MacroRegistry
from .types import EMPTY, Value, ValueKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Environment:
    """Per-evaluation state: the value bound to `$` and the macros in scope."""
    implicit: Value
    registry: MacroRegistry
    depth: int = 0

    def rebind(self, value: Value) -> "Environment":
        return Environment(value, self.registry, self.depth)

    def enter_call(self, value: Value) -> "Environment":
        # macro bodies see only their argument, never the caller's `$`
        return Environment(value, self.registry, self.depth + 1)


class Evaluator:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def evaluate(self, expr: ast.Expr, env: Environment) -> Value:
        if isinstance(expr, ast.Literal):
            return Value.string(expr.value)
        if isinstance(expr, ast.IntLiteral):
            return Value.integer(expr.value)
        if isinstance(expr, ast.EmptyLiteral):
            return EMPTY
        if isinstance(expr, ast.Implicit):
            return env.implicit
        if isinstance(expr, ast.ListLiteral):
            return Value.list(self.evaluate(item, env) for item in expr.items)
        if isinstance(expr, ast.Call):
            return self._call(expr, env)
        if isinstance(expr, ast.Index):
            items = self._list(expr.base, env, "index")
            if expr.index < 0 or expr.index >= len(items):
                raise IndexOutOfRange(f"Index {expr.index} out of range for list of length {len(items)}", expr.pos)
            return items[expr.index]
        if isinstance(expr, ast.Length):
            return Value.integer(len(self._list(expr.base, env, "length")))
        if isinstance(expr, ast.Slice):
            return self._slice(expr, env)
        if isinstance(expr, ast.Concat):
            return self._concat(self.evaluate(expr.left, env), self.evaluate(expr.right, env), expr.pos)
        if isinstance(expr, ast.Coalesce):
            left = self.evaluate(expr.left, env)
            if not left.is_empty:
                return left
            return self.evaluate(expr.right, env)
        if isinstance(expr, ast.Pipe):
            left = self.evaluate(expr.left, env)
            return self.evaluate(expr.right, env.rebind(left))
        if isinstance(expr, ast.Construct):
            return self._construct(expr, env)
        raise TypeMismatch(f"Unsupported expression node: {expr!r}", getattr(expr, "pos", None))

    # ---------- Operators ----------
    def _call(self, expr: ast.Call, env: Environment) -> Value:
        arg = self.evaluate(expr.arg, env)
        if expr.name in env.registry:
            if env.depth >= self.settings.max_call_depth:
                raise CallDepthExceeded(
                    f"Macro call depth exceeded {self.settings.max_call_depth} calling '{expr.name}'", expr.pos
                )
            macro = env.registry.resolve(expr.name, expr.pos)
            return self.evaluate(macro.body, env.enter_call(arg))
        builtin = BUILTINS.get(expr.name)
        if builtin is None:
            raise UnknownMacro(f"Unknown macro '{expr.name}'", expr.pos)
        return builtin(arg, expr.pos)

    def _list(self, base: ast.Expr, env: Environment, op: str):
        value = self.evaluate(base, env)
        if not value.is_list:
            raise TypeMismatch(f"{op} expects a List, got {value.describe()}", base.pos)
        return value.items

    def _bound(self, expr: ast.Expr, env: Environment) -> int:
        value = self.evaluate(expr, env)
        if value.kind is not ValueKind.Int:
            raise TypeMismatch(f"slice bound must be an integer, got {value.describe()}", expr.pos)
        return value.data

    def _slice(self, expr: ast.Slice, env: Environment) -> Value:
        items = self._list(expr.base, env, "slice")
        lo = self._bound(expr.lo, env)
        hi = self._bound(expr.hi, env)
        if lo < 0 or hi > len(items) or lo > hi:
            raise IndexOutOfRange(f"Invalid slice {lo}..<{hi} for list of length {len(items)}", expr.pos)
        return Value.list(items[lo:hi])

    def _concat(self, left: Value, right: Value, pos) -> Value:
        if left.is_empty:
            return right
        if right.is_empty:
            return left
        if left.kind is ValueKind.Str and right.kind is ValueKind.Str:
            return Value.string(left.data + right.data)
        if left.kind is ValueKind.Node and right.kind is ValueKind.Node:
            return Value.list((left, right))
        if left.is_list and (right.is_list or right.is_scalar):
            return Value.list(left.items + (right.items if right.is_list else (right,)))
        if right.is_list and left.is_scalar:
            return Value.list((left,) + right.items)
        raise TypeMismatch(f"Cannot concatenate {left.describe()} with {right.describe()}", pos)

    def _construct(self, expr: ast.Construct, env: Environment) -> Value:
        variant = check_construct(expr)
        fields = {name: self.evaluate(value, env) for name, value in expr.fields}
        if variant == "Text":
            value = self._field(fields, "value", variant, expr)
            if value.kind is not ValueKind.Str:
                raise TypeMismatch(f"Text.value must be Str, got {value.describe()}", expr.pos)
            return Value.node(Text(value=value.data))

        tag = self._field(fields, "tag", variant, expr)
        children = self._field(fields, "children", variant, expr)
        if tag.kind is not ValueKind.Str:
            raise TypeMismatch(f"Element.tag must be Str, got {tag.describe()}", expr.pos)
        if not children.is_list:
            raise TypeMismatch(f"Element.children must be a List of Node, got {children.describe()}", expr.pos)
        nodes = []
        for i, child in enumerate(children.items):
            if child.kind is not ValueKind.Node:
                raise TypeMismatch(f"Element.children[{i}] must be a Node, got {child.describe()}", expr.pos)
            nodes.append(child.data)
        try:
            return Value.node(Element(tag=tag.data, children=tuple(nodes)))
        except ValidationError as e:
            raise TypeMismatch(f"Invalid Element: {e.errors()[0]['msg']}", expr.pos) from e

    @staticmethod
    def _field(fields: Dict[str, Value], name: str, variant: str, expr: ast.Construct) -> Value:
        if name not in fields:
            raise TypeMismatch(f"{variant} is missing field '{name}'", expr.pos)
        return fields[name]


class Page:
    """A compiled page unit ready to render requests.

    The compiled state is read-only; each render builds its own Environment,
    so one Page may serve concurrent requests.
    """

    def __init__(self, unit: SourceUnit, settings: Optional[Settings] = None):
        self.unit = unit
        self.settings = settings or Settings()
        self.evaluator = Evaluator(self.settings)

    @property
    def name(self) -> str:
        return self.unit.name

    def dispatch(self, method: Optional[str] = None) -> ast.Expr:
        return self.unit.methods.dispatch(method)

    def evaluate(self, method: Optional[str] = None) -> Value:
        expr = self.dispatch(method)
        logger.debug("Rendering %s for method %s", self.name, method)
        try:
            return self.evaluator.evaluate(expr, Environment(EMPTY, self.unit.macros))
        except RecursionError as e:
            raise CallDepthExceeded(f"Evaluation of {self.name} nested too deeply", expr.pos) from e

    def render(self, method: Optional[str] = None) -> Union[Element, Text]:
        value = self.evaluate(method)
        if value.kind is not ValueKind.Node:
            raise TypeMismatch(
                f"page body must produce a renderable node, got {value.describe()}", self.dispatch(method).pos
            )
        return value.data

    def describe(self) -> Dict[str, Any]:
        return self.unit.describe()


def compile_program(program: ast.Program, settings: Optional[Settings] = None, name: str = "<page>") -> SourceUnit:
    return SemanticAnalyzer(program, settings, name).analyze()


def load(source: str | Path, *, name: Optional[str] = None, settings: Optional[Settings] = None) -> Page:
    """Parse and compile a page from source text or a Path to a page file."""
    settings = settings or Settings.from_env()
    if name is None:
        name = str(source) if isinstance(source, Path) else "<page>"
    logger.debug("Compiling page: %s", name)
    program = parse(source, encoding=settings.source_encoding)
    return Page(compile_program(program, settings, name), settings)
