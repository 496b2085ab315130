"""Attribute names shared with the client runtime.

The client patcher locates components, properties and event handlers
through these attributes only. Renaming any of them breaks deployed
clients.
"""

from __future__ import annotations

# State script: <script type="application/json" data-nodewire-state="{id}" ...>
STATE_ATTR = "data-nodewire-state"
COMPONENT_NAME_ATTR = "data-component-name"

# Element markers
MARKER_ID_ATTR = "data-nodewire-id"
MARKER_PROP_ATTR = "data-nodewire-prop"
MARKER_COMPONENT_ATTR = "data-nodewire-component"

# Event bindings: (click)="increment" -> data-nw-event-click="increment"
EVENT_ATTR_PREFIX = "data-nw-event-"

# Volatile (reactively polled) component properties
VOLATILE_PREFIX = "live_"

# Keys the engine adds to a render context
CONTENT_KEY = "_content"
SECTIONS_KEY = "_sections"
RESERVED_CONTEXT_KEYS: frozenset[str] = frozenset({CONTENT_KEY, SECTIONS_KEY})

# Elements whose text is never matched against component state
RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"script", "style", "template"})

# Elements without end tags
VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)
