"""HTML escaping and the Markup safe-string type.

Escaping is a single pass through ``str.translate()``. Values that
implement ``__html__`` (Markup, or objects from other libraries following
the same protocol) are trusted and emitted unchanged.

"""

from __future__ import annotations

from typing import Any

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#x27;",
    }
)


class Markup(str):
    """String already safe for HTML output.

    Example:
        >>> html_escape(Markup("<b>ok</b>"))
        '<b>ok</b>'
    """

    __slots__ = ()

    def __html__(self) -> str:
        return str(self)

    def __add__(self, other: str) -> Markup:
        return Markup(str.__add__(self, html_escape(other)))

    def __repr__(self) -> str:
        return f"Markup({str.__repr__(self)})"


def to_text(value: Any) -> str:
    """Stringify a value for template output.

    ``None`` becomes the empty string. Everything else uses ``str()``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def html_escape(value: Any) -> str:
    """HTML-escape a value for template output.

    Complexity: O(n) single pass.
    """
    if value is None:
        return ""
    if hasattr(value, "__html__"):
        return value.__html__()
    return to_text(value).translate(_ESCAPE_TABLE)
