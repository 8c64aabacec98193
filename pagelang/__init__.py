import logging

from .config import Settings
from .errors import PageLangError
from .parser import parse
from .runtime import Environment, Evaluator, Page, compile_program, load
from .schemas import Element, Text
from .types import EMPTY, Value, ValueKind

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "EMPTY",
    "Element",
    "Environment",
    "Evaluator",
    "Page",
    "PageLangError",
    "Settings",
    "Text",
    "Value",
    "ValueKind",
    "compile_program",
    "load",
    "parse",
]
