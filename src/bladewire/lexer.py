"""Lexer: one linear scan from template source to a token stream.

Produces four kinds of span: literal text (DATA), directives
(``@name`` with optional balanced ``(...)`` arguments), escaped
interpolation ``{{ expr }}``, and raw interpolation ``{!! expr !!}`` /
``${ expr }``. Comments ``{{-- ... --}}`` are dropped.

Only known directive names are recognized, so ``@media`` in a stylesheet
or ``user@example.com`` stay literal text. An ``@name`` joining a local
part to a dotted domain, as in ``info@content.io``, is an address too.
``@@if`` emits ``@if`` and ``@{{ x }}`` emits ``{{ x }}`` without interpreting them.

Literal text also gets event-binding attributes normalized:
``(click)="save"`` becomes ``data-nw-event-click="save"``.

Example:
    >>> [t.type.value for t in Lexer("Hi {{ name }}@if(x)!@endif").tokenize()]
    ['data', 'variable', 'directive', 'data', 'directive', 'eof']

"""

from __future__ import annotations

import bisect
import re

from bladewire._types import Token, TokenType
from bladewire.environment.exceptions import ErrorCode, TemplateSyntaxError
from bladewire.utils.constants import EVENT_ATTR_PREFIX

# Directive name → takes a parenthesized argument list
DIRECTIVES: dict[str, bool] = {
    "extends": True,
    "section": True,
    "endsection": False,
    "yield": True,
    "content": False,
    "component": True,
    "endcomponent": False,
    "slot": True,
    "endslot": False,
    "if": True,
    "elseif": True,
    "else": False,
    "endif": False,
    "foreach": True,
    "endforeach": False,
    "include": True,
    "wireState": True,
    "nodewireState": True,
}

_SPECIAL_RE = re.compile(
    r"(?P<comment>\{\{--)"
    r"|(?P<escaped_at>@@)"
    r"|(?P<escaped_var>@\{\{)"
    r"|(?P<raw>\{!!)"
    r"|(?P<var>\{\{)"
    r"|(?P<expr>\$\{)"
    r"|@(?P<directive>[A-Za-z]+)\b"
)

# ``info@content.io``: an @name between a local part and a dotted domain
_ADDRESS_LOCAL = frozenset("._%+-")
_ADDRESS_DOMAIN_RE = re.compile(r"\.[A-Za-z0-9]")

_EVENT_RE = re.compile(r"(?<=\s)\(([A-Za-z][\w:.-]*)\)=(?!=)")

_OPENERS = "([{"
_CLOSERS = ")]}"


def _is_address(src: str, start: int, end: int) -> bool:
    """True when the @ at ``start`` sits inside an e-mail address."""
    if start == 0:
        return False
    before = src[start - 1]
    if not (before.isalnum() or before in _ADDRESS_LOCAL):
        return False
    return _ADDRESS_DOMAIN_RE.match(src, end) is not None


def rewrite_event_bindings(text: str) -> str:
    """Normalize ``(event)="action"`` attributes to data attributes.

    Example:
        >>> rewrite_event_bindings('<button (click)="inc" (mouseover)="peek">')
        '<button data-nw-event-click="inc" data-nw-event-mouseover="peek">'
    """
    if "(" not in text:
        return text
    return _EVENT_RE.sub(lambda m: f"{EVENT_ATTR_PREFIX}{m.group(1)}=", text)


class Lexer:
    """Tokenize one template source.

    Attributes:
        source: Template text
        name: Template name (for error messages)
        depth: Include nesting level stamped on every token
    """

    __slots__ = ("_line_starts", "_tokens", "depth", "filename", "name", "source")

    def __init__(
        self,
        source: str,
        name: str | None = None,
        filename: str | None = None,
        depth: int = 0,
    ):
        self.source = source
        self.name = name
        self.filename = filename
        self.depth = depth
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", source)]
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Scan the whole source; the last token is always EOF."""
        src = self.source
        pos = 0
        data_start = 0  # where the current literal run began
        copy_from = 0  # first source char not yet copied into pending
        pending: list[str] = []

        while True:
            match = _SPECIAL_RE.search(src, pos)
            if match is None:
                break
            kind = match.lastgroup
            start = match.start()

            if kind == "directive" and (
                match.group("directive") not in DIRECTIVES
                or _is_address(src, start, match.end())
            ):
                pos = match.end()
                continue

            pending.append(src[copy_from:start])
            if kind in ("escaped_at", "escaped_var"):
                pending.append("@" if kind == "escaped_at" else "{{")
                pos = copy_from = match.end()
                continue

            self._flush_data(pending, data_start)
            pending = []

            if kind == "comment":
                end = src.find("--}}", match.end())
                if end == -1:
                    raise self._error(
                        "Unclosed comment", start, code=ErrorCode.UNCLOSED_COMMENT
                    )
                pos = end + 4
            elif kind == "var":
                pos = self._interpolation(TokenType.VARIABLE, start, match.end(), "}}")
            elif kind == "raw":
                pos = self._interpolation(TokenType.RAW_VARIABLE, start, match.end(), "!!}")
            elif kind == "expr":
                pos = self._expression_span(start, match.end())
            else:
                pos = self._directive(match.group("directive"), start, match.end())
            data_start = copy_from = pos

        pending.append(src[copy_from:])
        self._flush_data(pending, data_start)
        lineno, col = self._location(len(src))
        self._tokens.append(Token(TokenType.EOF, "", lineno, col, len(src), depth=self.depth))
        return self._tokens

    # -- spans -----------------------------------------------------------

    def _flush_data(self, pending: list[str], offset: int) -> None:
        text = "".join(pending)
        if not text:
            return
        lineno, col = self._location(offset)
        self._tokens.append(
            Token(
                TokenType.DATA,
                rewrite_event_bindings(text),
                lineno,
                col,
                offset,
                depth=self.depth,
            )
        )

    def _interpolation(self, kind: TokenType, start: int, inner: int, closer: str) -> int:
        end = self._find_closer(inner, closer)
        if end == -1:
            raise self._error(
                f"Unclosed interpolation, expected '{closer}'",
                start,
                code=ErrorCode.UNCLOSED_INTERPOLATION,
            )
        self._emit(kind, self.source[inner:end].strip(), start)
        return end + len(closer)

    def _expression_span(self, start: int, inner: int) -> int:
        end = self._find_balanced(inner, "{")
        if end == -1:
            raise self._error(
                "Unclosed expression, expected '}'",
                start,
                code=ErrorCode.UNCLOSED_INTERPOLATION,
            )
        self._emit(TokenType.EXPRESSION, self.source[inner:end].strip(), start)
        return end + 1

    def _directive(self, name: str, start: int, after_name: int) -> int:
        src = self.source
        if not DIRECTIVES[name]:
            self._emit(TokenType.DIRECTIVE, name, start)
            return after_name

        paren = after_name
        while paren < len(src) and src[paren] in " \t":
            paren += 1
        if paren >= len(src) or src[paren] != "(":
            raise self._error(
                f"@{name} requires arguments in parentheses",
                start,
                code=ErrorCode.MISSING_ARGUMENTS,
                directive=name,
            )
        end = self._find_balanced(paren + 1, "(")
        if end == -1:
            raise self._error(
                f"Unclosed arguments for @{name}",
                start,
                code=ErrorCode.UNCLOSED_ARGUMENTS,
                directive=name,
            )
        self._emit(TokenType.DIRECTIVE, name, start, args=src[paren + 1 : end].strip())
        return end + 1

    # -- scanning --------------------------------------------------------

    def _skip_string(self, pos: int) -> int:
        """Index just past the string literal starting at ``pos``."""
        src = self.source
        quote = src[pos]
        pos += 1
        while pos < len(src):
            if src[pos] == "\\":
                pos += 2
            elif src[pos] == quote:
                return pos + 1
            else:
                pos += 1
        return len(src)

    def _find_closer(self, pos: int, closer: str) -> int:
        src = self.source
        while pos < len(src):
            if src.startswith(closer, pos):
                return pos
            if src[pos] in "'\"":
                pos = self._skip_string(pos)
            else:
                pos += 1
        return -1

    def _find_balanced(self, pos: int, opener: str) -> int:
        """Index of the bracket closing ``opener``, skipping nested pairs and strings."""
        src = self.source
        stack = [_CLOSERS[_OPENERS.index(opener)]]
        while pos < len(src):
            ch = src[pos]
            if ch in "'\"`":
                pos = self._skip_string(pos)
                continue
            if ch in _OPENERS:
                stack.append(_CLOSERS[_OPENERS.index(ch)])
            elif ch in _CLOSERS:
                if ch != stack[-1]:
                    return -1
                stack.pop()
                if not stack:
                    return pos
            pos += 1
        return -1

    # -- helpers ---------------------------------------------------------

    def _location(self, offset: int) -> tuple[int, int]:
        line_index = bisect.bisect_right(self._line_starts, offset) - 1
        return line_index + 1, offset - self._line_starts[line_index]

    def _emit(self, kind: TokenType, value: str, offset: int, args: str | None = None) -> None:
        lineno, col = self._location(offset)
        self._tokens.append(Token(kind, value, lineno, col, offset, args, self.depth))

    def _error(
        self,
        message: str,
        offset: int,
        *,
        code: ErrorCode,
        directive: str | None = None,
    ) -> TemplateSyntaxError:
        lineno, col = self._location(offset)
        return TemplateSyntaxError(
            message,
            lineno=lineno,
            name=self.name,
            filename=self.filename,
            source=self.source,
            col_offset=col,
            directive=directive,
            offset=offset,
            code=code,
        )


def tokenize(source: str, name: str | None = None) -> list[Token]:
    """Convenience wrapper: ``Lexer(source, name).tokenize()``."""
    return Lexer(source, name).tokenize()
