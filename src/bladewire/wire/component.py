"""Component: server-side state with a view and callable actions.

A component is a plain Python object. Its public state is every instance
attribute that does not start with ``_`` and is not an identity field
(``id``, ``name``). Attributes prefixed with ``live_`` are volatile: they
are polled while an asynchronous action runs.

Example:
    ```python
    class Counter(Component):
        view = "components/counter"

        def __init__(self, start: int = 0):
            super().__init__()
            self.count = start
            self.live_busy = False

        def increment(self, step: int = 1) -> None:
            self.count += step
    ```

"""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable, Mapping
from html import escape
from typing import TYPE_CHECKING, Any, ClassVar

from bladewire.environment.exceptions import ActionNotFoundError, ComponentError
from bladewire.utils.constants import COMPONENT_NAME_ATTR, STATE_ATTR, VOLATILE_PREFIX
from bladewire.utils.html import Markup
from bladewire.wire.markers import auto_mark

if TYPE_CHECKING:
    from bladewire.environment import Environment

_IDENTITY = frozenset({"id", "name"})


class Component:
    """Base class for reactive components.

    Attributes:
        view: Template name rendered by `render()`; required
        id: Opaque unique identifier (``uuid4().hex`` unless given)
        name: Component type name (defaults to the class name)
    """

    view: ClassVar[str | None] = None

    # Not callable as actions from the client
    API: ClassVar[frozenset[str]] = frozenset(
        {"action", "render", "get_state", "set_state", "volatile_properties", "state_script"}
    )

    def __init__(self, name: str | None = None, id: str | None = None):
        self.id = id or uuid.uuid4().hex
        self.name = name or type(self).__name__

    # -- state -----------------------------------------------------------

    def get_state(self) -> dict[str, Any]:
        """Public state: non-private, non-identity instance attributes."""
        return {
            key: value
            for key, value in vars(self).items()
            if not key.startswith("_") and key not in _IDENTITY and not callable(value)
        }

    def set_state(self, state: Mapping[str, Any]) -> None:
        """Overwrite known state keys from ``state``; unknown keys are ignored."""
        for key in self.get_state():
            if key in state:
                setattr(self, key, state[key])

    def volatile_properties(self) -> list[str]:
        return [key for key in self.get_state() if key.startswith(VOLATILE_PREFIX)]

    def state_script(self) -> Markup:
        """``<script type="application/json" data-nodewire-state=...>`` with the state."""
        payload = json.dumps(self.get_state(), default=str).replace("</", "<\\/")
        return Markup(
            f'<script type="application/json" {STATE_ATTR}="{escape(self.id)}" '
            f'{COMPONENT_NAME_ATTR}="{escape(self.name)}">{payload}</script>'
        )

    # -- rendering -------------------------------------------------------

    def render(self, env: Environment, **extra: Any) -> Markup:
        """Render the view with the state script prepended and markers applied.

        The view sees every state property by name, ``component`` (this
        instance) and any ``extra`` values (slots).

        Raises:
            ComponentError: The component has no view
        """
        view = (self.view or "").strip()
        if not view:
            raise ComponentError(
                f"Component '{self.name}' must define a view (e.g. view = 'components/{self.name.lower()}')"
            )
        state = self.get_state()
        html = env.get_template(view).render({**state, **extra, "component": self})
        document = f"{self.state_script()}{html}"
        return Markup(auto_mark(document, self.id, self.name, state))

    # -- actions ---------------------------------------------------------

    def action(self, method: str) -> Callable[..., Any]:
        """Resolve a client-callable action.

        Raises:
            ActionNotFoundError: Private, part of the Component API, or
                not a method of this component's class
        """
        if method.startswith("_") or method in self.API:
            raise ActionNotFoundError(method, self.name)
        if not callable(getattr(type(self), method, None)):
            raise ActionNotFoundError(method, self.name)
        return getattr(self, method)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} id={self.id}>"
