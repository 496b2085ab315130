"""Pure runtime helper functions injected into the template namespace.

These functions are called by compiled template code at render time.
None of them close over Environment state; helpers that need the
environment (layouts, components) are closures built by Template.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from bladewire.render_context import get_render_context_required
from bladewire.template.loop_context import LoopContext
from bladewire.utils.constants import CONTENT_KEY, SECTIONS_KEY
from bladewire.utils.html import Markup, html_escape, to_text


def safe_getattr(obj: Any, name: str) -> Any:
    """Tolerant member access used for every ``a.b`` in a template.

    Resolution order:
    - Mappings: key first (user data), attribute fallback (methods).
      Keeps keys like ``items`` or ``count`` from resolving to dict methods.
    - Objects: attribute first, key fallback.

    Missing members and access on ``None`` give ``None``, which renders as
    the empty string.
    """
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        try:
            return obj[name]
        except KeyError:
            return getattr(obj, name, None)
    try:
        return getattr(obj, name)
    except AttributeError:
        try:
            return obj[name]
        except (KeyError, IndexError, TypeError):
            return None


def render_loop(iterable: Any, body: Callable[..., str], keyed: bool = False) -> str:
    """Render a ``@foreach`` body once per item.

    Mappings iterate values, or ``(key, value)`` pairs when ``keyed``.
    Other iterables bind the 0-based index as the key. ``None`` renders
    nothing.
    """
    if iterable is None:
        return ""
    if isinstance(iterable, Mapping):
        items: list[Any] = list(iterable.items()) if keyed else list(iterable.values())
    elif keyed:
        items = list(enumerate(iterable))
    else:
        items = list(iterable)
    loop = LoopContext(items)
    if keyed:
        return "".join(body(key, value, loop) for key, value in loop)
    return "".join(body(item, loop) for item in loop)


def yield_section(ctx: Mapping[str, Any], name: str, default: Any = None) -> Any:
    """Resolve ``@yield``: the child's rendered section, else ``default``.

    An empty section counts as absent.
    """
    sections = ctx.get(SECTIONS_KEY) or {}
    value = sections.get(name)
    if value:
        return Markup(value)
    return default


def inherited_content(ctx: Mapping[str, Any]) -> Markup:
    """Resolve ``@content``: the child body handed to a layout."""
    return Markup(ctx.get(CONTENT_KEY) or "")


def wire_state(component: Any) -> Markup:
    """Resolve ``@wireState(component)`` to the component's state script."""
    script = getattr(component, "state_script", None)
    if script is None:
        raise TypeError(f"@wireState expects a component, got {type(component).__name__}")
    return script()


def invalid_expression(source: str, message: str) -> Any:
    """Stand-in for an expression that failed to compile; raises when evaluated."""
    raise ValueError(f"Invalid expression {source!r}: {message}")


# =============================================================================
# Shared Base Namespace
# =============================================================================
# Static entries shared across all Template instances, copied once per
# Template.__init__. Read-only after module load.
# =============================================================================

STATIC_NAMESPACE: dict[str, Any] = {
    "__builtins__": {},
    "_escape": html_escape,
    "_str": to_text,
    "_getattr": safe_getattr,
    "_loop": render_loop,
    "_yield": yield_section,
    "_content": inherited_content,
    "_wire_state": wire_state,
    "_invalid_expression": invalid_expression,
    "_get_render_ctx": get_render_context_required,
}
