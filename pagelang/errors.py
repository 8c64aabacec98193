from __future__ import annotations
from typing import Any, Dict, Optional

from .ast import Position


class PageLangError(Exception):
    """Base class for every error raised while compiling or rendering a page."""

    def __init__(self, message: str, position: Optional[Position] = None):
        self.message = message
        self.position = position
        if position is not None:
            message = f"{message} (line {position.line}, column {position.column})"
        super().__init__(message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Structured form handed to the transport layer."""
        return {
            "kind": self.kind,
            "message": self.message,
            "line": self.position.line if self.position else None,
            "column": self.position.column if self.position else None,
        }


class ParseError(PageLangError):
    pass


class CompileError(PageLangError):
    pass


class DuplicateMacro(CompileError):
    pass


class DuplicateMethod(CompileError):
    pass


class UnknownVariant(CompileError):
    pass


class UnknownField(CompileError):
    pass


class DuplicateField(CompileError):
    pass


class UnknownMacro(PageLangError):
    """Raised at compile time in strict mode, otherwise on the first call that reaches it."""
    pass


class EvaluationError(PageLangError):
    pass


class TypeMismatch(EvaluationError):
    pass


class IndexOutOfRange(EvaluationError):
    pass


class NoDefaultResponse(EvaluationError):
    pass


class CallDepthExceeded(EvaluationError):
    """Raised when nested macro calls exceed the configured depth."""
    pass
