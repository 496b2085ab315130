"""Action protocol shared by the request/response and push transports.

Wire names are the ones the client runtime sends and reads:

    request   {"id", "component", "method", "args", "state", "requestId"?}
    response  {"success", "html", "newState", "updates", "error", "requestId"?}
    interim   {"type": "update", "id", "html", "newState", "updates", "requestId"?}

On the push channel the final response carries ``"type": "result"``.
Transports themselves (HTTP handlers, sockets) live outside this package;
they hand payloads to `ActionDispatcher` and deliver what it returns.
"""

from __future__ import annotations

import inspect
import json
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bladewire.wire.manager import WireManager


class ProtocolError(ValueError):
    """Payload does not have the shape of an action request."""


@dataclass(frozen=True, slots=True)
class ActionRequest:
    """One client-initiated action invocation.

    Attributes:
        id: Component instance id
        component: Component type name (used if the instance must be recreated)
        method: Action name
        args: Positional action arguments
        state: Client's view of the component state, restored before the action
        request_id: Correlation token echoed back (push channel)
    """

    id: str
    component: str
    method: str
    args: tuple[Any, ...] = ()
    state: Mapping[str, Any] = field(default_factory=dict)
    request_id: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ActionRequest:
        """Validate and convert a decoded request payload.

        Raises:
            ProtocolError: A required field is missing or has the wrong type
        """
        if not isinstance(payload, Mapping):
            raise ProtocolError("Action request must be a JSON object")
        for key in ("id", "component", "method"):
            if not isinstance(payload.get(key), str) or not payload[key]:
                raise ProtocolError(f"Action request field '{key}' must be a non-empty string")
        args = payload.get("args") or []
        if not isinstance(args, list):
            raise ProtocolError("Action request field 'args' must be a list")
        state = payload.get("state") or {}
        if not isinstance(state, Mapping):
            raise ProtocolError("Action request field 'state' must be an object")
        request_id = payload.get("requestId")
        return cls(
            id=payload["id"],
            component=payload["component"],
            method=payload["method"],
            args=tuple(args),
            state=dict(state),
            request_id=str(request_id) if request_id is not None else None,
        )


def _with_request_id(payload: dict[str, Any], request_id: str | None) -> dict[str, Any]:
    if request_id is not None:
        payload["requestId"] = request_id
    return payload


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of one action invocation.

    ``updates`` maps each key whose value changed during the action to its
    new value.
    """

    success: bool
    html: str | None = None
    new_state: dict[str, Any] | None = None
    updates: dict[str, Any] | None = None
    error: str | None = None
    request_id: str | None = None

    @property
    def changed_keys(self) -> set[str]:
        return set(self.updates or ())

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.success:
            payload.update(html=self.html, newState=self.new_state, updates=self.updates)
        else:
            payload["error"] = self.error
        return _with_request_id(payload, self.request_id)


@dataclass(frozen=True, slots=True)
class ReactiveUpdate:
    """Interim update pushed while an asynchronous action is still running."""

    id: str
    updates: dict[str, Any]
    html: str
    new_state: dict[str, Any]
    request_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = {
            "type": "update",
            "id": self.id,
            "html": self.html,
            "newState": self.new_state,
            "updates": self.updates,
        }
        return _with_request_id(payload, self.request_id)


Send = Callable[[str], Awaitable[None] | None]


def _dumps(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, default=str)


class ActionDispatcher:
    """Adapt transports to `WireManager.call`.

    Example:
        ```python
        dispatcher = ActionDispatcher(manager)

        # request/response: decoded JSON body in, JSON-ready dict out
        body = await dispatcher.handle_request(payload)

        # push channel: raw text frames in, frames delivered through send
        await dispatcher.handle_message(frame, websocket.send)
        ```
    """

    __slots__ = ("manager",)

    def __init__(self, manager: WireManager):
        self.manager = manager

    async def handle_request(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Run one action for a request/response transport."""
        try:
            request = ActionRequest.from_payload(payload)
        except ProtocolError as e:
            return ActionResult(success=False, error=str(e)).to_payload()
        result = await self.manager.call(request)
        return result.to_payload()

    async def handle_message(self, text: str, send: Send) -> None:
        """Run one action for a push transport.

        Interim updates and the final result are delivered through ``send``,
        which may be a plain or an async callable.
        """

        async def deliver(payload: Mapping[str, Any]) -> None:
            outcome = send(_dumps(payload))
            if inspect.isawaitable(outcome):
                await outcome

        async def fail(message: str, request_id: Any = None) -> None:
            error = ActionResult(
                success=False,
                error=message,
                request_id=str(request_id) if request_id is not None else None,
            )
            await deliver({"type": "result", **error.to_payload()})

        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as e:
            await fail(f"Invalid JSON message: {e}")
            return
        try:
            request = ActionRequest.from_payload(decoded)
        except ProtocolError as e:
            await fail(str(e), decoded.get("requestId") if isinstance(decoded, dict) else None)
            return

        async def push(update: ReactiveUpdate) -> None:
            await deliver(update.to_payload())

        result = await self.manager.call(request, on_update=push)
        await deliver({"type": "result", **result.to_payload()})
