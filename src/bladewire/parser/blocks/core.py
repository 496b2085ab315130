"""Block stack management shared by the directive parsing mixins."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bladewire._types import Token, TokenType
from bladewire.environment.exceptions import ErrorCode

if TYPE_CHECKING:
    from bladewire.parser.errors import ParseError

# Opening directive → the directive that closes it
END_DIRECTIVES: dict[str, str] = {
    "if": "endif",
    "foreach": "endforeach",
    "section": "endsection",
    "component": "endcomponent",
    "slot": "endslot",
}

# Directives that only make sense while a block is open
CONTINUATIONS: frozenset[str] = frozenset(
    {"elseif", "else", "slot", *END_DIRECTIVES.values()}
)


class BlockStackMixin:
    """Explicit stack of open block directives.

    Every opener is pushed with its token, so an unterminated block or a
    stray closer can be reported against the directive that caused it.

    Required Host Attributes:
        - _block_stack: list[tuple[str, Token]]
        - _current: property
        - _advance: method
        - _error: method
    """

    _block_stack: list[tuple[str, Token]]

    if TYPE_CHECKING:

        @property
        def _current(self) -> Token: ...

        def _advance(self) -> Token: ...

        def _error(
            self,
            message: str,
            token: Token | None = None,
            *,
            code: ErrorCode = ...,
            suggestion: str | None = None,
        ) -> ParseError: ...

    def _push_block(self, name: str, token: Token) -> None:
        self._block_stack.append((name, token))

    def _consume_end(self, name: str) -> Token:
        """Consume the closer for the innermost block, which must be ``name``."""
        expected = END_DIRECTIVES[name]
        token = self._current
        if token.type is not TokenType.DIRECTIVE or token.value != expected:
            raise self._unexpected(token)
        self._block_stack.pop()
        return self._advance()

    def _unclosed(self) -> ParseError:
        name, opener = self._block_stack[-1]
        return self._error(
            f"Unclosed @{name}: reached end of template without @{END_DIRECTIVES[name]}",
            opener,
            code=ErrorCode.UNCLOSED_BLOCK,
            suggestion=f"Add @{END_DIRECTIVES[name]} after the @{name} body",
        )

    def _unexpected(self, token: Token) -> ParseError:
        if self._block_stack:
            name, opener = self._block_stack[-1]
            return self._error(
                f"Unexpected @{token.value}; @{name} opened at line {opener.lineno} "
                f"expects @{END_DIRECTIVES[name]}",
                token,
                code=ErrorCode.UNEXPECTED_DIRECTIVE,
            )
        return self._error(
            f"Unexpected @{token.value} with no open block",
            token,
            code=ErrorCode.UNEXPECTED_DIRECTIVE,
        )
