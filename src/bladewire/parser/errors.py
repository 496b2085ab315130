"""Parser error handling.

Provides ParseError, a TemplateSyntaxError that knows the offending token
and can carry a suggestion.
"""

from __future__ import annotations

from bladewire._types import Token, TokenType
from bladewire.environment.exceptions import ErrorCode, TemplateSyntaxError


class ParseError(TemplateSyntaxError):
    """Parser error with source context.

    Displays errors with source snippets and a pointer at the directive,
    matching the format used by the lexer for consistency.
    """

    def __init__(
        self,
        message: str,
        token: Token,
        source: str | None = None,
        filename: str | None = None,
        name: str | None = None,
        suggestion: str | None = None,
        code: ErrorCode | None = None,
    ):
        self.token = token
        self.suggestion = suggestion
        super().__init__(
            message,
            lineno=token.lineno,
            name=name,
            filename=filename,
            source=source,
            col_offset=token.col_offset,
            directive=token.value if token.type is TokenType.DIRECTIVE else None,
            offset=token.offset,
            code=code,
        )

    def _format_message(self) -> str:
        msg = super()._format_message()
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg
