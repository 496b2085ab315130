"""bladewire wire: reactive components on top of the template engine.

Public API:
    Component: Base class for stateful components with a view and actions
    WireManager, Param: Component registry, lifetime and action execution
    ActionRequest, ActionResult, ReactiveUpdate: Action protocol values
    ActionDispatcher: Adapter for request/response and push transports
    auto_mark: Marker correlation for rendered component HTML
    diff_state, snapshot, VolatilePoller: Change detection

"""

from bladewire.wire.changes import VolatilePoller, diff_state, snapshot
from bladewire.wire.component import Component
from bladewire.wire.manager import MISSING, Param, WireManager
from bladewire.wire.markers import auto_mark
from bladewire.wire.protocol import (
    ActionDispatcher,
    ActionRequest,
    ActionResult,
    ProtocolError,
    ReactiveUpdate,
)

__all__ = [
    "MISSING",
    "ActionDispatcher",
    "ActionRequest",
    "ActionResult",
    "Component",
    "Param",
    "ProtocolError",
    "ReactiveUpdate",
    "VolatilePoller",
    "WireManager",
    "auto_mark",
    "diff_state",
    "snapshot",
]
