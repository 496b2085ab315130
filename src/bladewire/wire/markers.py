"""Marker correlation: tag rendered HTML with component/property markers.

After a component renders, the client patcher needs to find which element
shows which state property. `auto_mark()` parses the HTML once into a
lightweight element tree (stdlib `html.parser`), picks elements by node
identity, and splices the marker attributes into the original start tags.
Everything else in the document is left byte-for-byte unchanged.

Rules:
- each state property marks the first eligible element, in document
  order, whose own trimmed text equals, starts with or ends with the
  value's text form
- an element carrying a property marker is never marked again, so
  running `auto_mark()` twice adds nothing the second time
- a property already marked for this component is skipped
- elements with an event binding (``data-nw-event-*``) get the component
  id and type name
- only the region after this component's state script and before the
  next state script is considered; text inside ``script``, ``style`` and
  ``template`` is never matched

Example:
    >>> auto_mark("<p><b>3</b> clicks</p>", "c1", "Counter", {"count": 3})
    '<p><b data-nodewire-id="c1" data-nodewire-prop="count">3</b> clicks</p>'

"""

from __future__ import annotations

import bisect
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from html import escape
from html.parser import HTMLParser
from typing import Any

from bladewire.utils.constants import (
    EVENT_ATTR_PREFIX,
    MARKER_COMPONENT_ATTR,
    MARKER_ID_ATTR,
    MARKER_PROP_ATTR,
    RAW_TEXT_ELEMENTS,
    STATE_ATTR,
    VOID_ELEMENTS,
)


@dataclass(eq=False, slots=True)
class Element:
    """One element of the parsed document.

    Attributes:
        tag: Lowercased tag name
        attrs: Attributes as written in the source
        start: Offset of the start tag's ``<``
        insert_at: Offset where new attributes are spliced in
        raw: Inside a raw-text element (never matched)
        text: Text chunks that are direct children of this element
        added: Marker attributes to add
    """

    tag: str
    attrs: dict[str, str | None]
    start: int
    insert_at: int
    parent: Element | None = None
    raw: bool = False
    children: list[Element] = field(default_factory=list)
    text: list[str] = field(default_factory=list)
    added: dict[str, str] = field(default_factory=dict)

    def attr(self, name: str) -> str | None:
        """Attribute value including markers added in this pass."""
        if name in self.added:
            return self.added[name]
        return self.attrs.get(name)

    def has_attr(self, name: str) -> bool:
        return name in self.added or name in self.attrs

    @property
    def own_text(self) -> str:
        return "".join(self.text).strip()

    @property
    def has_event_binding(self) -> bool:
        return any(name.startswith(EVENT_ATTR_PREFIX) for name in self.attrs)


class _TreeBuilder(HTMLParser):
    """Build the element tree, tolerating unclosed and stray tags."""

    def __init__(self, html: str):
        super().__init__(convert_charrefs=True)
        self._line_starts = [0]
        for i, ch in enumerate(html):
            if ch == "\n":
                self._line_starts.append(i + 1)
        self.elements: list[Element] = []
        self._stack: list[Element] = []

    def _offset(self) -> int:
        lineno, col = self.getpos()
        return self._line_starts[lineno - 1] + col

    def _open(self, tag: str, attrs: list[tuple[str, str | None]]) -> Element:
        start = self._offset()
        source = self.get_starttag_text() or ""
        end = start + len(source)
        insert_at = end - 2 if source.endswith("/>") else end - 1
        parent = self._stack[-1] if self._stack else None
        element = Element(
            tag=tag,
            attrs=dict(attrs),
            start=start,
            insert_at=insert_at,
            parent=parent,
            raw=bool(parent and (parent.raw or parent.tag in RAW_TEXT_ELEMENTS)),
        )
        if parent is not None:
            parent.children.append(element)
        self.elements.append(element)
        return element

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = self._open(tag, attrs)
        if tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._open(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        # close up to the nearest matching open element; ignore stray closers
        for i in range(len(self._stack) - 1, -1, -1):
            if self._stack[i].tag == tag:
                del self._stack[i:]
                return

    def handle_data(self, data: str) -> None:
        # text outside any element belongs to no marker candidate
        if self._stack:
            self._stack[-1].text.append(data)


def parse_elements(html: str) -> list[Element]:
    """Parse ``html`` into elements in document order."""
    builder = _TreeBuilder(html)
    builder.feed(html)
    builder.close()
    return builder.elements


def _scalar_text(value: Any) -> str | None:
    """Text form of a state value as templates render it; None if unmatchable."""
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    text = str(value).strip()
    return text or None


def _region(elements: list[Element], component_id: str) -> Iterator[Element]:
    """Elements between this component's state script and the next one."""
    scripts = [i for i, el in enumerate(elements) if el.tag == "script" and el.has_attr(STATE_ATTR)]
    own = [i for i in scripts if elements[i].attrs.get(STATE_ATTR) == component_id]
    if own:
        begin = own[0] + 1
        following = scripts[bisect.bisect_right(scripts, own[0]) :]
        end = following[0] if following else len(elements)
    else:
        begin, end = 0, len(elements)
    for element in elements[begin:end]:
        if not element.raw and element.tag not in RAW_TEXT_ELEMENTS:
            yield element


def _matches(text: str, value: str) -> bool:
    return bool(text) and (text == value or text.startswith(value) or text.endswith(value))


def _mark(element: Element, name: str, value: str) -> None:
    if not element.has_attr(name):
        element.added[name] = value


def auto_mark(
    html: str,
    component_id: str,
    component_name: str,
    state: Mapping[str, Any],
) -> str:
    """Attach (component id, property) and event markers to ``html``.

    Args:
        html: Rendered component HTML (state script included)
        component_id: Component instance id
        component_name: Component type name, for event-bound elements
        state: Public component state

    Returns:
        ``html`` with marker attributes added to the chosen start tags
    """
    elements = parse_elements(html)
    region = list(_region(elements, component_id))

    marked = {
        el.attrs.get(MARKER_PROP_ATTR)
        for el in elements
        if el.attrs.get(MARKER_ID_ATTR) == component_id and el.has_attr(MARKER_PROP_ATTR)
    }

    for prop, value in state.items():
        text = _scalar_text(value)
        if text is None or prop in marked:
            continue
        for element in region:
            if element.has_attr(MARKER_PROP_ATTR):
                continue
            owner = element.attr(MARKER_ID_ATTR)
            if owner is not None and owner != component_id:
                continue
            if _matches(element.own_text, text):
                _mark(element, MARKER_ID_ATTR, component_id)
                element.added[MARKER_PROP_ATTR] = prop
                marked.add(prop)
                break

    for element in region:
        if not element.has_event_binding:
            continue
        owner = element.attr(MARKER_ID_ATTR)
        if owner is not None and owner != component_id:
            continue
        _mark(element, MARKER_ID_ATTR, component_id)
        _mark(element, MARKER_COMPONENT_ATTR, component_name)

    return _splice(html, elements)


def _splice(html: str, elements: list[Element]) -> str:
    edits = [el for el in elements if el.added]
    if not edits:
        return html
    parts: list[str] = []
    pos = 0
    for element in sorted(edits, key=lambda el: el.insert_at):
        parts.append(html[pos : element.insert_at])
        if parts[-1] and not parts[-1][-1].isspace():
            parts.append(" ")
        parts.append(
            " ".join(f'{name}="{escape(value, quote=True)}"' for name, value in element.added.items())
        )
        pos = element.insert_at
    parts.append(html[pos:])
    return "".join(parts)
