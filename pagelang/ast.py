# AST types for page sources
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Position:
    line: int
    column: int


def _pos():
    # source positions are diagnostics only; two trees with the same shape compare equal
    return field(default=None, compare=False, repr=False)


class Expr:
    """Marker base for expression nodes."""
    pos: Optional[Position]


@dataclass(frozen=True)
class Literal(Expr):
    value: str
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class IntLiteral(Expr):
    value: int
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class EmptyLiteral(Expr):
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class Implicit(Expr):
    """`$`, the current pipeline value."""
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class ListLiteral(Expr):
    items: Tuple[Expr, ...] = ()
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class Index(Expr):
    base: Expr
    index: int
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class Length(Expr):
    base: Expr
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class Slice(Expr):
    """base ~ lo..<hi, hi exclusive."""
    base: Expr
    lo: Expr
    hi: Expr
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class Concat(Expr):
    left: Expr
    right: Expr
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class Pipe(Expr):
    left: Expr
    right: Expr
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class Coalesce(Expr):
    left: Expr
    right: Expr
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class Call(Expr):
    name: str
    arg: Expr
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class Construct(Expr):
    variant: str
    fields: Tuple[Tuple[str, Expr], ...] = ()
    pos: Optional[Position] = _pos()

    def field_map(self):
        return dict(self.fields)


# Top-level declarations
@dataclass(frozen=True)
class Directive:
    """@Method "GET" { ... } or @Def "name" { ... }"""
    kind: str
    key: str
    body: Expr
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class RootDecl:
    body: Expr
    pos: Optional[Position] = _pos()


@dataclass(frozen=True)
class Program:
    items: Tuple[object, ...] = ()
