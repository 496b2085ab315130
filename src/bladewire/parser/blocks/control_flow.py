"""Control flow block parsing: @if chains and @foreach."""

from __future__ import annotations

import keyword
import re

from bladewire._types import Token
from bladewire.environment.exceptions import ErrorCode
from bladewire.nodes import For, If, Node
from bladewire.parser.blocks.core import BlockStackMixin
from bladewire.translator import CONTEXT_NAME, translate

_IF_END = frozenset({"elseif", "else", "endif"})
_FOREACH_END = frozenset({"endforeach"})

_FOREACH_RE = re.compile(
    r"^(?P<iter>.+?)\s+as\s+(?P<first>\$?[A-Za-z_]\w*)"
    r"(?:\s*=>\s*(?P<second>\$?[A-Za-z_]\w*))?$",
    re.DOTALL,
)


class ControlFlowBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing conditionals and loops.

    Required Host Attributes:
        - All from BlockStackMixin
        - _parse_body: method
    """

    def _condition(self, token: Token, excluded: frozenset[str]) -> str:
        if not token.args:
            raise self._error(
                f"@{token.value} requires a condition",
                token,
                code=ErrorCode.INVALID_ARGUMENTS,
            )
        return translate(token.args, excluded)

    def _parse_if(self, excluded: frozenset[str]) -> If:
        """Parse @if(cond)...[@elseif(cond)...]*[@else...]@endif."""
        start = self._advance()
        self._push_block("if", start)
        test = self._condition(start, excluded)
        body = self._parse_body(excluded, _IF_END)

        elif_: list[tuple[str, tuple[Node, ...]]] = []
        else_: tuple[Node, ...] | None = None
        while self._current.value != "endif":
            branch = self._advance()
            if else_ is not None:
                raise self._error(
                    f"@{branch.value} after @else",
                    branch,
                    code=ErrorCode.UNEXPECTED_DIRECTIVE,
                    suggestion="@else must be the last branch before @endif",
                )
            if branch.value == "elseif":
                cond = self._condition(branch, excluded)
                elif_.append((cond, tuple(self._parse_body(excluded, _IF_END))))
            else:
                else_ = tuple(self._parse_body(excluded, _IF_END))

        self._consume_end("if")
        return If(
            lineno=start.lineno,
            col_offset=start.col_offset,
            test=test,
            body=tuple(body),
            elif_=tuple(elif_),
            else_=else_,
        )

    def _parse_foreach(self, excluded: frozenset[str]) -> For:
        """Parse @foreach(items as item) or @foreach(items as key => value)."""
        start = self._advance()
        self._push_block("foreach", start)

        match = _FOREACH_RE.match(start.args or "")
        if match is None:
            raise self._error(
                f"Invalid @foreach header: {start.args!r}",
                start,
                code=ErrorCode.INVALID_ARGUMENTS,
                suggestion="Use @foreach(items as item) or @foreach(items as key => value)",
            )
        first = match["first"].lstrip("$")
        second = match["second"].lstrip("$") if match["second"] else None
        key, target = (first, second) if second else (None, first)
        for name in (key, target):
            if name is not None:
                self._check_loop_name(name, start)

        iter_expr = translate(match["iter"], excluded)
        bound = {target, "loop"} if key is None else {key, target, "loop"}
        body = self._parse_body(excluded | bound, _FOREACH_END)
        self._consume_end("foreach")
        return For(
            lineno=start.lineno,
            col_offset=start.col_offset,
            iter=iter_expr,
            target=target,
            key=key,
            body=tuple(body),
        )

    def _check_loop_name(self, name: str, token: Token) -> None:
        if keyword.iskeyword(name) or name.startswith("_") or name in (CONTEXT_NAME, "loop"):
            raise self._error(
                f"'{name}' cannot be used as a loop variable",
                token,
                code=ErrorCode.INVALID_ARGUMENTS,
                suggestion="Loop variables must be plain names that do not start with '_'",
            )
