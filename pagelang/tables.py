"""Compiled lookup tables for a page unit.

Both tables are filled once by the semantic pass and then sealed; after
that they are read-only and safe to share between concurrent renders.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from .ast import Expr, Position
from .errors import CompileError, DuplicateMacro, DuplicateMethod, NoDefaultResponse, UnknownMacro

DEFAULT_METHOD = "default"


@dataclass(frozen=True)
class MacroDef:
    name: str
    body: Expr
    pos: Optional[Position] = field(default=None, compare=False)


class MacroRegistry:
    def __init__(self):
        self._macros: Dict[str, MacroDef] = {}
        self._sealed = False

    def register(self, name: str, body: Expr, pos: Optional[Position] = None) -> MacroDef:
        if self._sealed:
            raise CompileError(f"Macro registry is sealed; cannot register '{name}'", pos)
        if name in self._macros:
            raise DuplicateMacro(f"Duplicate macro '{name}'", pos)
        macro = MacroDef(name, body, pos)
        self._macros[name] = macro
        return macro

    def resolve(self, name: str, pos: Optional[Position] = None) -> MacroDef:
        try:
            return self._macros[name]
        except KeyError:
            raise UnknownMacro(f"Unknown macro '{name}'", pos) from None

    def seal(self) -> "MacroRegistry":
        self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    def names(self):
        return sorted(self._macros)

    def __contains__(self, name: object) -> bool:
        return name in self._macros

    def __iter__(self) -> Iterator[MacroDef]:
        return iter(self._macros.values())

    def __len__(self) -> int:
        return len(self._macros)


class MethodTable:
    """Maps HTTP method names (exact, case-sensitive) to response expressions."""

    def __init__(self):
        self._overrides: Dict[str, Expr] = {}
        self._root: Optional[Expr] = None
        self._sealed = False

    def _check_open(self, what: str, pos: Optional[Position]):
        if self._sealed:
            raise CompileError(f"Method table is sealed; cannot register {what}", pos)

    def register(self, method: str, body: Expr, pos: Optional[Position] = None):
        self._check_open(f"method '{method}'", pos)
        if method in self._overrides:
            raise DuplicateMethod(f"Duplicate response for method '{method}'", pos)
        self._overrides[method] = body

    def set_root(self, body: Expr, pos: Optional[Position] = None):
        self._check_open("the root response", pos)
        if self._root is not None:
            raise DuplicateMethod(f"Duplicate root response ('{DEFAULT_METHOD}')", pos)
        self._root = body

    def dispatch(self, method: Optional[str]) -> Expr:
        """Return the override for ``method``, falling back to the root expression.

        ``None`` selects the root directly.
        """
        if method is not None and method in self._overrides:
            return self._overrides[method]
        if self._root is None:
            raise NoDefaultResponse(f"No response declared for method '{method or DEFAULT_METHOD}' and no root response")
        return self._root

    def seal(self) -> "MethodTable":
        self._sealed = True
        return self

    @property
    def root(self) -> Optional[Expr]:
        return self._root

    @property
    def overrides(self) -> Mapping[str, Expr]:
        return MappingProxyType(self._overrides)

    def methods(self):
        return list(self._overrides)
