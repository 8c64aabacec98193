from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from . import ast
from .builtins import BUILTINS
from .config import Settings
from .errors import DuplicateField, UnknownField, UnknownMacro, UnknownVariant
from .schemas import VARIANT_FIELDS, resolve_variant
from .tables import MacroRegistry, MethodTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceUnit:
    """A compiled page: sealed macro registry plus sealed method table."""
    name: str
    methods: MethodTable
    macros: MacroRegistry

    @property
    def root(self) -> Optional[ast.Expr]:
        return self.methods.root

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "root": self.root is not None,
            "methods": self.methods.methods(),
            "macros": self.macros.names(),
        }


def iter_children(expr: ast.Expr) -> Iterator[ast.Expr]:
    if isinstance(expr, (ast.Concat, ast.Pipe, ast.Coalesce)):
        yield expr.left
        yield expr.right
    elif isinstance(expr, (ast.Index, ast.Length)):
        yield expr.base
    elif isinstance(expr, ast.Slice):
        yield expr.base
        yield expr.lo
        yield expr.hi
    elif isinstance(expr, ast.Call):
        yield expr.arg
    elif isinstance(expr, ast.ListLiteral):
        yield from expr.items
    elif isinstance(expr, ast.Construct):
        for _, value in expr.fields:
            yield value


class SemanticAnalyzer:
    """Compiles a parsed Program into a SourceUnit and performs static checks:
    - at most one root and one override per method, unique macro names
    - constructs name a known variant and only its fields, each at most once
    - calls name a declared macro or a builtin (when strict_macros is on)
    """

    def __init__(self, program: ast.Program, settings: Optional[Settings] = None, name: str = "<page>"):
        self.program = program
        self.settings = settings or Settings()
        self.name = name
        self.macros = MacroRegistry()
        self.methods = MethodTable()

    def analyze(self) -> SourceUnit:
        # first pass: collect declarations so macros may be used before they are declared
        for item in self.program.items:
            if isinstance(item, ast.RootDecl):
                self.methods.set_root(item.body, item.pos)
            elif item.kind == "Method":
                self.methods.register(item.key, item.body, item.pos)
            else:
                self.macros.register(item.key, item.body, item.pos)

        # second pass: validate every expression tree
        for item in self.program.items:
            self._check(item.body)

        if not self.program.items:
            logger.warning("No declarations found in %s; every render will fail", self.name)
        logger.info(
            "Compiled %s: root=%s methods=%s macros=%d",
            self.name, self.methods.root is not None, self.methods.methods(), len(self.macros),
        )
        return SourceUnit(self.name, self.methods.seal(), self.macros.seal())

    def _check(self, expr: ast.Expr) -> None:
        stack = [expr]
        while stack:
            node = stack.pop()
            if isinstance(node, ast.Construct):
                check_construct(node)
            elif isinstance(node, ast.Call) and self.settings.strict_macros:
                if node.name not in self.macros and node.name not in BUILTINS:
                    raise UnknownMacro(f"Unknown macro '{node.name}'", node.pos)
            stack.extend(iter_children(node))


def check_construct(node: ast.Construct) -> str:
    """Validate a construct's variant and field names; returns the canonical variant."""
    variant = resolve_variant(node.variant)
    if variant is None:
        raise UnknownVariant(f"Unknown variant '{node.variant}'", node.pos)
    allowed = VARIANT_FIELDS[variant]
    seen = set()
    for fname, value in node.fields:
        if fname not in allowed:
            raise UnknownField(f"Unknown field '{fname}' for {variant}; expected one of {list(allowed)}", value.pos or node.pos)
        if fname in seen:
            raise DuplicateField(f"Field '{fname}' given twice for {variant}", value.pos or node.pos)
        seen.add(fname)
    return variant
