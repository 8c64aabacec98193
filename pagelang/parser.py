from __future__ import annotations
import ast as py_ast
import logging
from pathlib import Path
from typing import Optional

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError

from . import ast
from .ast import Position
from .errors import ParseError

logger = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

DIRECTIVES = ("Method", "Def")

_parser = None


def _load_parser() -> Lark:
    global _parser
    if _parser is None:
        grammar = GRAMMAR_PATH.read_text(encoding="utf-8")
        _parser = Lark(grammar, start="start", parser="lalr", propagate_positions=True, maybe_placeholders=True)
    return _parser


def _at(meta_like) -> Optional[Position]:
    line = getattr(meta_like, "line", None)
    column = getattr(meta_like, "column", None)
    if line is None:
        return None
    return Position(line, column)


def _unquote(token: Token) -> str:
    try:
        return py_ast.literal_eval(str(token))
    except (SyntaxError, ValueError) as e:
        raise ParseError(f"invalid string literal {token}", _at(token)) from e


@v_args(meta=True, inline=True)
class ASTBuilder(Transformer):
    """Folds the lark parse tree into pagelang.ast nodes."""

    def start(self, meta, *items):
        return ast.Program(items=tuple(items))

    def directive(self, meta, keyword, key, body):
        return ast.Directive(kind=str(keyword)[1:], key=_unquote(key), body=body, pos=_at(keyword))

    def root(self, meta, body):
        return ast.RootDecl(body=body, pos=_at(meta))

    def pipe(self, meta, left, right):
        return ast.Pipe(left, right, pos=_at(meta))

    def coalesce(self, meta, left, right):
        return ast.Coalesce(left, right, pos=_at(meta))

    def concat(self, meta, left, right):
        return ast.Concat(left, right, pos=_at(meta))

    def call(self, meta, name, arg):
        return ast.Call(str(name), arg, pos=_at(name))

    def bare_call(self, meta, name):
        return ast.Call(str(name), ast.EmptyLiteral(pos=_at(name)), pos=_at(name))

    def index(self, meta, base, i):
        return ast.Index(base, int(i), pos=_at(meta))

    def length(self, meta, base):
        return ast.Length(base, pos=_at(meta))

    def slice(self, meta, base, lo, hi):
        return ast.Slice(base, lo, hi, pos=_at(meta))

    def string(self, meta, token):
        return ast.Literal(_unquote(token), pos=_at(token))

    def integer(self, meta, token):
        return ast.IntLiteral(int(token), pos=_at(token))

    def implicit(self, meta, token):
        return ast.Implicit(pos=_at(token))

    def empty(self, meta):
        return ast.EmptyLiteral(pos=_at(meta))

    def list_literal(self, meta, *items):
        # maybe_placeholders leaves a None for an empty list
        return ast.ListLiteral(tuple(i for i in items if i is not None), pos=_at(meta))

    def construct(self, meta, variant, *fields):
        return ast.Construct(variant, tuple(fields), pos=_at(meta))

    def variant(self, meta, *names):
        return "::".join(str(n) for n in names)

    def field(self, meta, name, value):
        return (str(name), value)


def _describe(e: UnexpectedInput) -> str:
    if isinstance(e, UnexpectedEOF):
        return "unterminated construct: input ended early"
    if isinstance(e, UnexpectedToken):
        if e.token.type == "$END":
            return "unterminated construct: input ended early"
        return f"unexpected token {str(e.token)!r}"
    if isinstance(e, UnexpectedCharacters):
        if e.char == '"':
            return "unterminated string literal"
        return f"unexpected character {e.char!r}"
    return str(e)


def parse(source: str | Path, encoding: str = "utf-8") -> ast.Program:
    """Parse page source text (or a Path to a page file) into a Program."""
    try:
        text = Path(source).read_text(encoding=encoding) if isinstance(source, Path) else str(source)
    except (UnicodeDecodeError, LookupError) as e:
        raise ParseError(f"cannot decode {source} as {encoding}", None) from e
    try:
        tree = _load_parser().parse(text)
    except UnexpectedInput as e:
        line = getattr(e, "line", None)
        column = getattr(e, "column", None)
        position = Position(line, column) if isinstance(line, int) and line > 0 else None
        raise ParseError(_describe(e), position) from e
    try:
        program = ASTBuilder().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ParseError):
            raise e.orig_exc from None
        if isinstance(e.orig_exc, RecursionError):
            raise ParseError("expression nesting too deep", None) from e
        raise
    except RecursionError as e:
        raise ParseError("expression nesting too deep", None) from e
    for item in program.items:
        if isinstance(item, ast.Directive) and item.kind not in DIRECTIVES:
            raise ParseError(f"unknown directive @{item.kind}", item.pos)
    logger.debug("Parsed %d top-level items", len(program.items))
    return program
