"""Template structure parsing: layouts, sections, yields, includes."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence

from bladewire._types import Token
from bladewire.environment.exceptions import ErrorCode, TemplateNotFoundError
from bladewire.lexer import Lexer
from bladewire.nodes import Content, Node, Output, Prop, SectionRef, WireState, Yield
from bladewire.parser.arguments import parse_props, split_arguments, string_literal
from bladewire.parser.blocks.core import BlockStackMixin
from bladewire.translator import translate

logger = logging.getLogger(__name__)

_SECTION_END = frozenset({"endsection"})


def substitute_props(source: str, props: Sequence[Prop]) -> str:
    """Replace ``${key}`` in included source with each prop's value.

    Literal strings are inserted as text. Expression props become an
    ``${expr}`` span so they are evaluated in the including template's scope.

    Example:
        >>> substitute_props("<h1>${title}</h1>", [Prop("title", "Hi", "'Hi'")])
        '<h1>Hi</h1>'
    """
    for prop in props:
        if prop.is_expr:
            replacement = "${" + prop.source + "}"
        elif isinstance(prop.value, str):
            replacement = prop.value
        else:
            replacement = prop.source
        pattern = re.compile(r"\$\{\s*" + re.escape(prop.name) + r"\s*\}")
        source = pattern.sub(lambda _m, r=replacement: r, source)
    return source


class TemplateStructureBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing template structure directives.

    Required Host Attributes:
        - All from BlockStackMixin
        - _tokens, _pos: token list and cursor (includes are spliced in)
        - _extends, _sections: parse results
        - _load_include: Callable[[str], str] | None
        - _component_ends: cached component closers, invalidated on splice
        - _max_include_depth: int
        - _name: template name
        - _parse_body: method
    """

    _tokens: list[Token]
    _pos: int
    _extends: str | None
    _sections: dict[str, tuple[Node, ...]]
    _load_include: Callable[[str], str] | None
    _component_ends: dict[int, int] | None
    _max_include_depth: int
    _name: str | None

    def _name_argument(self, token: Token, text: str | None) -> str:
        name = string_literal(text or "")
        if name is None:
            raise self._error(
                f"@{token.value} expects a quoted name, got {text!r}",
                token,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        return name

    def _parse_extends(self, excluded: frozenset[str]) -> None:
        """Parse @extends('layouts/app'); records the parent, emits nothing."""
        token = self._advance()
        parent = self._name_argument(token, token.args)
        if self._extends is not None and self._extends != parent:
            raise self._error(
                f"Template already extends '{self._extends}'",
                token,
                code=ErrorCode.UNEXPECTED_DIRECTIVE,
            )
        self._extends = parent

    def _parse_section(self, excluded: frozenset[str]) -> SectionRef | None:
        """Parse @section('name')...@endsection or inline @section('name', value).

        A repeated section name replaces the earlier body (last wins) and
        keeps the first declaration's position.
        """
        token = self._advance()
        if self._block_stack:
            open_name = self._block_stack[-1][0]
            raise self._error(
                f"@section cannot be declared inside @{open_name}",
                token,
                code=ErrorCode.MISPLACED_SECTION,
                suggestion="Declare sections at the top level of the template",
            )
        args = split_arguments(token.args or "")
        name = self._name_argument(token, args[0] if args else None)

        body: tuple[Node, ...]
        if len(args) > 1:
            expr = ", ".join(args[1:])
            body = (
                Output(
                    lineno=token.lineno,
                    col_offset=token.col_offset,
                    expr=translate(expr, excluded),
                    source=expr,
                ),
            )
        else:
            self._push_block("section", token)
            body = tuple(self._parse_body(excluded, _SECTION_END))
            self._consume_end("section")

        first = name not in self._sections
        if not first:
            logger.debug("Section '%s' redefined in %s; last definition wins", name, self._name)
        self._sections[name] = body
        if not first:
            return None
        return SectionRef(lineno=token.lineno, col_offset=token.col_offset, name=name)

    def _parse_yield(self, excluded: frozenset[str]) -> Yield:
        """Parse @yield('name') or @yield('name', default)."""
        token = self._advance()
        args = split_arguments(token.args or "")
        name = self._name_argument(token, args[0] if args else None)
        default = translate(", ".join(args[1:]), excluded) if len(args) > 1 else None
        return Yield(lineno=token.lineno, col_offset=token.col_offset, name=name, default=default)

    def _parse_content(self, excluded: frozenset[str]) -> Content:
        token = self._advance()
        return Content(lineno=token.lineno, col_offset=token.col_offset)

    def _parse_wire_state(self, excluded: frozenset[str]) -> WireState:
        token = self._advance()
        if not token.args:
            raise self._error(
                f"@{token.value} expects a component expression",
                token,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        return WireState(
            lineno=token.lineno,
            col_offset=token.col_offset,
            expr=translate(token.args, excluded),
        )

    def _parse_include(self, excluded: frozenset[str]) -> None:
        """Inline @include('name', [key => value]) into the token stream.

        The included source (after ``${key}`` substitution) is lexed and
        spliced in at the cursor, so its directives take part in parsing as
        if written in place. A missing include renders as nothing.
        """
        token = self._advance()
        args = split_arguments(token.args or "")
        name = self._name_argument(token, args[0] if args else None)
        props: list[Prop] | None = []
        if len(args) > 1:
            props = parse_props(args[1], excluded)
        if props is None or len(args) > 2:
            raise self._error(
                f"Invalid @include arguments: {token.args!r}",
                token,
                code=ErrorCode.INVALID_ARGUMENTS,
                suggestion="Use @include('name') or @include('name', [key => value])",
            )

        if token.depth >= self._max_include_depth:
            raise self._error(
                f"Maximum include depth exceeded ({self._max_include_depth}) "
                f"when including '{name}'",
                token,
                code=ErrorCode.INCLUDE_DEPTH,
                suggestion="Check for circular includes: A → B → A",
            )

        if self._load_include is None:
            logger.warning("Include '%s' in %s has no loader; rendering empty", name, self._name)
            return
        try:
            source = self._load_include(name)
        except TemplateNotFoundError:
            logger.warning("Include '%s' in %s not found; rendering empty", name, self._name)
            return

        included = Lexer(
            substitute_props(source, props),
            name=name,
            depth=token.depth + 1,
        ).tokenize()
        self._tokens[self._pos : self._pos] = included[:-1]
        # spliced tokens shift every index after the cursor
        self._component_ends = None
