"""Directive argument helpers.

Directive arguments are short comma-separated lists: a quoted name,
optionally followed by a ``[key => value, ...]`` prop list or a default
expression. Splitting respects nested brackets and string literals.
"""

from __future__ import annotations

import ast
import re
from typing import Any

from bladewire.nodes import Prop
from bladewire.translator import translate

_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?")
_BOOL_NULL: dict[str, Any] = {"true": True, "false": False, "null": None}


def split_arguments(text: str, separator: str = ",") -> list[str]:
    """Split on top-level ``separator``, ignoring nested brackets and strings.

    Example:
        >>> split_arguments("'card', [title => 'A, B', n => f(1, 2)]")
        ["'card'", "[title => 'A, B', n => f(1, 2)]"]
    """
    parts: list[str] = []
    depth = 0
    quote = ""
    start = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = ""
        elif ch in "'\"":
            quote = ch
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif depth == 0 and text.startswith(separator, i):
            parts.append(text[start:i].strip())
            start = i + len(separator)
            i = start
            continue
        i += 1
    tail = text[start:].strip()
    if tail or parts:
        parts.append(tail)
    return parts


def string_literal(text: str) -> str | None:
    """Decode a single- or double-quoted literal, or None if ``text`` is not one."""
    text = text.strip()
    if len(text) < 2 or text[0] not in "'\"" or text[-1] != text[0]:
        return None
    try:
        value = ast.literal_eval(text)
    except (SyntaxError, ValueError):
        return None
    return value if isinstance(value, str) else None


def parse_props(text: str, excluded: frozenset[str]) -> list[Prop] | None:
    """Parse ``[key => value, ...]``; None when ``text`` is not a prop list.

    Keys may be bare, ``$``-prefixed or quoted. Values that are string,
    number, boolean or null literals are decoded; anything else is
    translated as an expression.
    """
    text = text.strip()
    if not (text.startswith("[") and text.endswith("]")):
        return None
    props: list[Prop] = []
    for entry in split_arguments(text[1:-1]):
        if not entry:
            continue
        pair = split_arguments(entry, "=>")
        if len(pair) != 2 or not pair[0]:
            return None
        key = string_literal(pair[0])
        if key is None:
            key = pair[0].lstrip("$")
        props.append(_prop(key, pair[1], excluded))
    return props


def _prop(name: str, raw: str, excluded: frozenset[str]) -> Prop:
    literal = string_literal(raw)
    if literal is not None:
        return Prop(name=name, value=literal, source=raw)
    if raw in _BOOL_NULL:
        return Prop(name=name, value=_BOOL_NULL[raw], source=raw)
    if _NUMBER_RE.fullmatch(raw):
        value: Any = float(raw) if "." in raw else int(raw)
        return Prop(name=name, value=value, source=raw)
    return Prop(name=name, value=translate(raw, excluded), source=raw, is_expr=True)
