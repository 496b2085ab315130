"""Token types shared by the lexer and parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Kinds of spans produced by the lexer."""

    DATA = "data"
    DIRECTIVE = "directive"
    VARIABLE = "variable"  # {{ expr }}
    RAW_VARIABLE = "raw_variable"  # {!! expr !!}
    EXPRESSION = "expression"  # ${ expr }
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexed span.

    For DIRECTIVE tokens ``value`` is the directive name and ``args`` holds
    the raw text between the parentheses (``None`` when the directive was
    written without them).

    Attributes:
        type: Span kind
        value: Literal text, directive name, or interpolated expression
        lineno: 1-based line of the span start
        col_offset: 0-based column of the span start
        offset: Absolute character offset of the span start
        args: Directive argument text
        depth: Include nesting level of the source the token came from
    """

    type: TokenType
    value: str
    lineno: int
    col_offset: int
    offset: int = 0
    args: str | None = None
    depth: int = 0

    def __repr__(self) -> str:
        if self.type is TokenType.DIRECTIVE:
            return f"Token(@{self.value}, {self.lineno}:{self.col_offset})"
        return f"Token({self.type.value}, {self.value!r}, {self.lineno}:{self.col_offset})"
