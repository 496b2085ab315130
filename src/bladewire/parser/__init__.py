"""Directive parser: token stream → ParsedTemplate."""

from bladewire.parser.core import Parser, parse
from bladewire.parser.errors import ParseError

__all__ = ["ParseError", "Parser", "parse"]
