"""Parser: token stream → ParsedTemplate.

A recursive-descent walk over the lexer's tokens with an explicit stack of
open block directives. Nested constructs (conditionals inside loops inside
component bodies) are matched structurally, never by scanning text.

Loop-bound names are threaded through ``_parse_body`` as an immutable
``excluded`` set, so each block sees exactly the names bound around it and
nothing is shared between parses.

Example:
    >>> parsed = Parser(Lexer("@foreach(items as item)${item.name}@endforeach").tokenize()).parse()
    >>> parsed.body[0].body[0].expr
    'item.name'

"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from bladewire._types import Token, TokenType
from bladewire.environment.exceptions import ErrorCode
from bladewire.lexer import Lexer
from bladewire.nodes import ComponentCall, Data, Node, Output, ParsedTemplate
from bladewire.parser.blocks import (
    ComponentBlockParsingMixin,
    ControlFlowBlockParsingMixin,
    TemplateStructureBlockParsingMixin,
)
from bladewire.parser.blocks.core import CONTINUATIONS
from bladewire.parser.errors import ParseError
from bladewire.translator import translate

_OUTPUT_TOKENS = {
    TokenType.VARIABLE: True,
    TokenType.RAW_VARIABLE: False,
    TokenType.EXPRESSION: False,
}


class Parser(
    ControlFlowBlockParsingMixin,
    TemplateStructureBlockParsingMixin,
    ComponentBlockParsingMixin,
):
    """Parse one template's tokens.

    A Parser instance is single-use: create one per ``parse()``.

    Attributes:
        _tokens: Token list (includes are spliced in as they are reached)
        _pos: Cursor into ``_tokens``
        _load_include: Returns the source of an included template, raising
            TemplateNotFoundError when it does not exist
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
        *,
        load_include: Callable[[str], str] | None = None,
        max_include_depth: int = 50,
    ):
        self._tokens = list(tokens)
        self._pos = 0
        self._name = name
        self._filename = filename
        self._source = source
        self._load_include = load_include
        self._max_include_depth = max_include_depth
        self._block_stack: list[tuple[str, Token]] = []
        self._extends: str | None = None
        self._sections: dict[str, tuple[Node, ...]] = {}
        self._components: dict[str, ComponentCall] = {}
        self._component_ends: dict[int, int] | None = None
        self._dispatch: dict[str, Callable[[frozenset[str]], Node | None]] = {
            "extends": self._parse_extends,
            "section": self._parse_section,
            "yield": self._parse_yield,
            "content": self._parse_content,
            "component": self._parse_component,
            "if": self._parse_if,
            "foreach": self._parse_foreach,
            "include": self._parse_include,
            "wireState": self._parse_wire_state,
            "nodewireState": self._parse_wire_state,
        }

    def parse(self) -> ParsedTemplate:
        """Parse the whole token stream."""
        body = self._parse_body(frozenset())
        return ParsedTemplate(
            name=self._name,
            body=tuple(body),
            extends=self._extends,
            sections=dict(self._sections),
            components=dict(self._components),
        )

    # -- navigation ------------------------------------------------------

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type is not TokenType.EOF:
            self._pos += 1
        return token

    def _error(
        self,
        message: str,
        token: Token | None = None,
        *,
        code: ErrorCode = ErrorCode.UNEXPECTED_DIRECTIVE,
        suggestion: str | None = None,
    ) -> ParseError:
        token = token or self._current
        # tokens spliced in from an include carry positions in that source
        source = self._source if token.depth == 0 else None
        return ParseError(
            message,
            token,
            source=source,
            filename=self._filename,
            name=self._name,
            suggestion=suggestion,
            code=code,
        )

    # -- body ------------------------------------------------------------

    def _parse_body(
        self,
        excluded: frozenset[str],
        end: frozenset[str] = frozenset(),
    ) -> list[Node]:
        """Parse nodes until a directive in ``end`` (left unconsumed) or EOF.

        Reaching EOF while ``end`` is non-empty means the innermost open
        block was never closed.
        """
        nodes: list[Node] = []
        while True:
            token = self._current
            if token.type is TokenType.EOF:
                if end:
                    raise self._unclosed()
                return nodes

            if token.type is TokenType.DATA:
                self._advance()
                nodes.append(Data(token.lineno, token.col_offset, token.value))
            elif token.type in _OUTPUT_TOKENS:
                self._advance()
                nodes.append(
                    Output(
                        lineno=token.lineno,
                        col_offset=token.col_offset,
                        expr=translate(token.value, excluded),
                        source=token.value,
                        escape=_OUTPUT_TOKENS[token.type],
                    )
                )
            elif token.value in end:
                return nodes
            elif token.value in CONTINUATIONS:
                raise self._unexpected(token)
            else:
                node = self._dispatch[token.value](excluded)
                if node is not None:
                    nodes.append(node)


def parse(
    source: str,
    name: str | None = None,
    *,
    load_include: Callable[[str], str] | None = None,
) -> ParsedTemplate:
    """Lex and parse ``source`` in one call."""
    tokens = Lexer(source, name).tokenize()
    return Parser(tokens, name, source=source, load_include=load_include).parse()
