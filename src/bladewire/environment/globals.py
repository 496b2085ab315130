"""Default global functions available in all templates.

Compiled templates run without Python builtins. A name followed by ``(``
in an expression (``count(items)``) is looked up here, or in the globals
passed to ``Environment(globals=...)``, which take precedence.

Usage:
    @if(count(cart.items) > 0)
        <p>{{ count(cart.items) }} items, total {{ round(cart.total, 2) }}</p>
    @endif
"""

from __future__ import annotations

import json as _json
from collections.abc import Sized
from typing import Any

from bladewire.utils.html import Markup


def count(value: Any) -> int:
    """Length of ``value``; 0 for None and for objects without a length."""
    if isinstance(value, Sized):
        return len(value)
    return 0


def isset(value: Any) -> bool:
    """True when ``value`` resolved to something other than None."""
    return value is not None


def empty(value: Any) -> bool:
    return not value


def to_json(value: Any) -> Markup:
    """Serialize ``value`` as JSON safe to embed inside ``<script>``."""
    return Markup(_json.dumps(value, default=str).replace("</", "<\\/"))


DEFAULT_GLOBALS: dict[str, Any] = {
    "count": count,
    "isset": isset,
    "empty": empty,
    "json": to_json,
    # builtins commonly used in expressions
    "abs": abs,
    "bool": bool,
    "dict": dict,
    "enumerate": enumerate,
    "float": float,
    "int": int,
    "len": len,
    "list": list,
    "max": max,
    "min": min,
    "range": range,
    "round": round,
    "sorted": sorted,
    "str": str,
    "sum": sum,
}
