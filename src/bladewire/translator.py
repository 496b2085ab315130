"""Expression translation for template directives.

Templates write expressions in a small dialect: bare names, dotted paths,
``$``-prefixed variables with ``->`` accessors, and C-style boolean
operators. `translate()` rewrites that dialect into Python expression text
in which every free data reference goes through ``context``:

    >>> translate("user.name")
    'context.user.name'
    >>> translate("$user->name && !$hidden")
    'context.user.name and not context.hidden'
    >>> translate("item.price * qty", frozenset({"item"}))
    'item.price * context.qty'

Left alone:
- reserved words (Python keywords and ``context``)
- names in ``excluded`` (loop-bound names), with their sub-paths
- names right after a member-access ``.`` (already part of a path)
- names directly followed by ``(`` (helper calls resolved from globals)
  or by ``=`` (keyword arguments)
- anything inside string literals

The translator is a text transform, not a validator. It never raises; a
malformed expression comes out malformed and fails when it is compiled
or evaluated.

"""

from __future__ import annotations

import keyword
from collections.abc import Iterable

CONTEXT_NAME = "context"

RESERVED: frozenset[str] = frozenset(keyword.kwlist) | {CONTEXT_NAME}

# Dialect literals and their Python spelling
LITERALS: dict[str, str] = {
    "true": "True",
    "false": "False",
    "null": "None",
    "undefined": "None",
}

# Dialect operators, longest first
OPERATORS: tuple[tuple[str, str], ...] = (
    ("===", "=="),
    ("!==", "!="),
    ("!=", "!="),
    ("&&", "and"),
    ("||", "or"),
    ("!", "not"),
)

_QUOTES = "'\"`"
_WORD_OPERATORS = frozenset({"and", "or", "not"})


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


class _Scanner:
    """Single left-to-right pass over one expression.

    At each identifier the longest dotted chain is taken first, so a
    sub-path is never qualified on its own.
    """

    __slots__ = ("_excluded", "_out", "_pos", "_src")

    def __init__(self, src: str, excluded: frozenset[str]):
        self._src = src
        self._excluded = excluded
        self._pos = 0
        self._out: list[str] = []

    def run(self) -> str:
        src = self._src
        while self._pos < len(src):
            ch = src[self._pos]
            if ch in _QUOTES:
                self._copy_string(ch)
            elif ch == "$" and self._ident_starts_at(self._pos + 1):
                self._dollar_reference()
            elif _is_ident_start(ch):
                self._identifier()
            elif ch.isdigit():
                self._number()
            elif not self._operator():
                self._out.append(ch)
                self._pos += 1
        return "".join(self._out)

    # -- scanning helpers ------------------------------------------------

    def _ident_starts_at(self, idx: int) -> bool:
        return idx < len(self._src) and _is_ident_start(self._src[idx])

    def _read_ident(self) -> str:
        start = self._pos
        src = self._src
        while self._pos < len(src) and _is_ident_char(src[self._pos]):
            self._pos += 1
        return src[start : self._pos]

    def _prev_significant(self, start: int) -> str:
        """Last non-blank source character before ``start``."""
        idx = start - 1
        while idx >= 0 and self._src[idx] in " \t":
            idx -= 1
        return self._src[idx] if idx >= 0 else ""

    def _next_significant(self) -> str:
        idx = self._pos
        while idx < len(self._src) and self._src[idx] in " \t":
            idx += 1
        return self._src[idx] if idx < len(self._src) else ""

    def _copy_string(self, quote: str) -> None:
        src = self._src
        end = self._pos + 1
        while end < len(src):
            if src[end] == "\\":
                end += 2
                continue
            if src[end] == quote:
                end += 1
                break
            end += 1
        end = min(end, len(src))
        self._out.append(src[self._pos : end])
        self._pos = end

    def _number(self) -> None:
        src = self._src
        start = self._pos
        while self._pos < len(src):
            ch = src[self._pos]
            if _is_ident_char(ch):
                self._pos += 1
            elif ch == "." and self._pos + 1 < len(src) and src[self._pos + 1].isdigit():
                self._pos += 1
            else:
                break
        self._out.append(src[start : self._pos])

    def _operator(self) -> bool:
        for dialect, python in OPERATORS:
            if self._src.startswith(dialect, self._pos):
                self._pos += len(dialect)
                if python in _WORD_OPERATORS:
                    self._emit_word(python)
                else:
                    self._out.append(python)
                return True
        return False

    def _emit_word(self, word: str) -> None:
        """Emit a word operator, padding with spaces only where needed."""
        if self._out and not self._out[-1][-1:].isspace() and self._out[-1][-1:] != "(":
            self._out.append(" ")
        self._out.append(word)
        nxt = self._src[self._pos : self._pos + 1]
        if not nxt.isspace():
            self._out.append(" ")

    # -- references ------------------------------------------------------

    def _dollar_reference(self) -> None:
        """``$name`` with optional ``->attr``, ``.attr`` and ``['key']`` accessors."""
        self._pos += 1  # consume '$'
        head = self._read_ident()
        parts = [head if head in self._excluded else f"{CONTEXT_NAME}.{head}"]
        src = self._src
        while self._pos < len(src):
            if src.startswith("->", self._pos) and self._ident_starts_at(self._pos + 2):
                self._pos += 2
                parts.append("." + self._read_ident())
            elif src[self._pos] == "." and self._ident_starts_at(self._pos + 1):
                self._pos += 1
                parts.append("." + self._read_ident())
            elif src[self._pos] == "[" and (key := self._bracket_key()):
                parts.append("." + key[0])
                self._pos = key[1]
            else:
                break
        self._out.append("".join(parts))

    def _bracket_key(self) -> tuple[str, int] | None:
        """Parse ``['key']`` at the cursor when ``key`` is a plain identifier."""
        src = self._src
        idx = self._pos + 1
        if idx >= len(src) or src[idx] not in "'\"":
            return None
        quote = src[idx]
        close = src.find(quote, idx + 1)
        if close == -1 or close + 1 >= len(src) or src[close + 1] != "]":
            return None
        key = src[idx + 1 : close]
        if not key.isidentifier():
            return None
        return key, close + 2

    def _identifier(self) -> None:
        src = self._src
        start = self._pos
        head = self._read_ident()

        if head in LITERALS and self._prev_significant(start) != ".":
            self._out.append(LITERALS[head])
            return

        end = self._pos
        while end + 1 < len(src) and src[end] == "." and _is_ident_start(src[end + 1]):
            end += 1
            while end < len(src) and _is_ident_char(src[end]):
                end += 1
        chain = src[start:end]
        self._pos = end

        if self._should_qualify(head, start, is_chain=chain != head):
            self._out.append(f"{CONTEXT_NAME}.{chain}")
        else:
            self._out.append(chain)

    def _should_qualify(self, head: str, start: int, *, is_chain: bool) -> bool:
        if head in RESERVED or head in self._excluded:
            return False
        if self._prev_significant(start) == ".":
            return False
        if is_chain:
            return True
        following = self._next_significant()
        if following == "(":
            return False
        if following == "=":
            # keyword argument unless it is a comparison
            eq = self._src.find("=", self._pos)
            return self._src[eq + 1 : eq + 2] == "="
        return True


def translate(expr: str, excluded: Iterable[str] = frozenset()) -> str:
    """Rewrite a dialect expression into Python expression text.

    Args:
        expr: Expression as written in the template
        excluded: Names that must not be qualified (loop-bound names)

    Returns:
        Python expression text referencing data through ``context``
    """
    if not isinstance(excluded, frozenset):
        excluded = frozenset(excluded)
    return _Scanner(expr.strip(), excluded).run()
