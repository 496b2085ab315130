"""WireManager: component registry, instance lifetime and action execution.

Component types are registered by name with an explicit constructor
parameter schema. Instances live in an in-memory registry keyed by id for
the lifetime of the manager. An evicted instance is recreated from the
arguments it was first built with and gets its original id back, so
client-held ids keep working.

Thread-Safety:
    Registry mutations hold a lock. Actions on the same instance are not
    serialized; the last writer wins.

"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from bladewire.environment.exceptions import ComponentError, ComponentNotFoundError
from bladewire.wire.changes import VolatilePoller, diff_state, snapshot
from bladewire.wire.component import Component
from bladewire.wire.protocol import ActionRequest, ActionResult, ReactiveUpdate

if TYPE_CHECKING:
    from bladewire.environment import Environment

logger = logging.getLogger(__name__)


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

UpdateCallback = Callable[[ReactiveUpdate], Awaitable[None] | None]


@dataclass(frozen=True, slots=True)
class Param:
    """One constructor parameter of a registered component type.

    ``default`` is passed when a named-option construction does not supply
    the parameter. Leave it MISSING to fall back on the constructor's own
    default.
    """

    name: str
    default: Any = MISSING

    @property
    def key(self) -> str:
        return _option_key(self.name)


@dataclass(frozen=True, slots=True)
class _Registration:
    cls: type[Component]
    params: tuple[Param, ...] = ()


@dataclass(frozen=True, slots=True)
class _Origin:
    """How an instance was first constructed."""

    name: str
    args: tuple[Any, ...] = ()
    options: Mapping[str, Any] | None = field(default=None)


def _option_key(name: str) -> str:
    return name.lower().replace("_", "").replace("-", "")


class WireManager:
    """Registry and action runner for reactive components.

    Args:
        env: Environment used to render component views. If it has no
            manager yet, this one is attached so ``@component`` directives
            can instantiate registered types.
        poll_interval: Seconds between volatile-property checks while an
            asynchronous action runs

    Example:
        >>> wire = WireManager(env)
        >>> wire.register("Counter", Counter, params=[Param("start", 0)])
        >>> counter = wire.create_with_options("Counter", {"start": 5})
        >>> result = await wire.call(ActionRequest(counter.id, "Counter", "increment"))
        >>> result.updates
        {'count': 6}

    """

    def __init__(self, env: Environment, poll_interval: float = 0.05):
        self.env = env
        self.poll_interval = poll_interval
        if env.wire is None:
            env.wire = self
        self._types: dict[str, _Registration] = {}
        self._instances: dict[str, Component] = {}
        self._origins: dict[str, _Origin] = {}
        self._lock = threading.Lock()

    # -- registration ----------------------------------------------------

    def register(
        self,
        name: str,
        cls: type[Component],
        params: Iterable[Param | str] = (),
    ) -> None:
        """Register a component type under ``name``.

        Args:
            name: Type name used by templates and the client
            cls: Component subclass
            params: Constructor parameters in order; plain strings are
                parameters without a declared default
        """
        if not (isinstance(cls, type) and issubclass(cls, Component)):
            raise ComponentError(f"Cannot register '{name}': {cls!r} is not a Component subclass")
        schema = tuple(p if isinstance(p, Param) else Param(p) for p in params)
        with self._lock:
            self._types[name] = _Registration(cls, schema)

    def is_registered(self, name: str) -> bool:
        return name in self._types

    def registered_names(self) -> list[str]:
        return sorted(self._types)

    def _registration(self, name: str) -> _Registration:
        registration = self._types.get(name)
        if registration is None:
            raise ComponentNotFoundError(name, self.registered_names())
        return registration

    # -- instances -------------------------------------------------------

    def _track(self, component: Component, origin: _Origin) -> Component:
        with self._lock:
            self._instances[component.id] = component
            self._origins[component.id] = origin
        logger.debug("Created component %s (%s)", component.id, origin.name)
        return component

    def _build(self, name: str, args: tuple[Any, ...], options: Mapping[str, Any] | None) -> Component:
        registration = self._registration(name)
        if options is None:
            component = registration.cls(*args)
        else:
            supplied = {_option_key(key): value for key, value in options.items()}
            kwargs: dict[str, Any] = {}
            for param in registration.params:
                if param.key in supplied:
                    kwargs[param.name] = supplied[param.key]
                elif param.default is not MISSING:
                    kwargs[param.name] = param.default
            component = registration.cls(**kwargs)
        component.name = name
        return component

    def create(self, name: str, *args: Any) -> Component:
        """Instantiate a registered type with positional constructor arguments.

        Raises:
            ComponentNotFoundError: ``name`` is not registered
        """
        component = self._build(name, args, None)
        return self._track(component, _Origin(name, args=args))

    def create_with_options(self, name: str, options: Mapping[str, Any]) -> Component:
        """Instantiate a registered type from named options.

        Option keys are matched to declared parameters ignoring case,
        ``_`` and ``-``, so ``initial-count``, ``initialCount`` and
        ``initial_count`` all reach the ``initial_count`` parameter.
        Options without a matching parameter are ignored.

        Raises:
            ComponentNotFoundError: ``name`` is not registered
        """
        options = dict(options)
        component = self._build(name, (), options)
        return self._track(component, _Origin(name, options=options))

    def get(self, component_id: str) -> Component | None:
        return self._instances.get(component_id)

    def get_or_recreate(self, component_id: str, name: str) -> Component:
        """Return the live instance, recreating it if it was evicted.

        A recreated instance is built from its original construction
        arguments when known, otherwise from the registered type with no
        arguments. Either way it keeps ``component_id``.

        Raises:
            ComponentNotFoundError: Not live and ``name`` is not registered
        """
        component = self._instances.get(component_id)
        if component is not None:
            return component
        origin = self._origins.get(component_id) or _Origin(name)
        component = self._build(origin.name, origin.args, origin.options)
        component.id = component_id
        logger.debug("Recreated component %s (%s)", component_id, origin.name)
        return self._track(component, origin)

    def evict(self, component_id: str) -> bool:
        """Drop a live instance; its construction arguments are kept."""
        with self._lock:
            removed = self._instances.pop(component_id, None)
        if removed is not None:
            logger.debug("Evicted component %s", component_id)
        return removed is not None

    def cleanup(self) -> None:
        """Forget every instance and its construction arguments."""
        with self._lock:
            self._instances.clear()
            self._origins.clear()

    def render(self, component: Component) -> str:
        return component.render(self.env)

    # -- actions ---------------------------------------------------------

    async def call(
        self,
        request: ActionRequest,
        on_update: UpdateCallback | None = None,
    ) -> ActionResult:
        """Run one action and report what changed.

        The client's state is restored onto the instance, the action runs,
        and the result carries the re-rendered HTML, the full new state and
        each changed key with its new value. When the action is a coroutine
        and ``on_update`` is given, volatile properties are polled while it
        runs and every observed change is pushed as a `ReactiveUpdate`.

        Any exception, including a missing component or action, is reported
        as ``success=False``; it is never raised to the caller.
        """
        try:
            component = self.get_or_recreate(request.id, request.component)
            component.set_state(request.state)
            action = component.action(request.method)
            before = snapshot(component.get_state())

            poller = None
            if on_update is not None:
                poller = self._poller(component, request, on_update)

            outcome = action(*request.args)
            if inspect.isawaitable(outcome):
                if poller is not None:
                    poller.start()
                    try:
                        await outcome
                    finally:
                        await poller.stop()
                else:
                    await outcome

            after = component.get_state()
            return ActionResult(
                success=True,
                html=self.render(component),
                new_state=after,
                updates=diff_state(before, after),
                request_id=request.request_id,
            )
        except Exception as e:
            logger.exception("Action %s.%s failed", request.component, request.method)
            return ActionResult(
                success=False,
                error=str(e) or type(e).__name__,
                request_id=request.request_id,
            )

    def _poller(
        self,
        component: Component,
        request: ActionRequest,
        on_update: UpdateCallback,
    ) -> VolatilePoller:
        volatile = component.volatile_properties()

        def read() -> dict[str, Any]:
            state = component.get_state()
            return {key: state.get(key) for key in volatile}

        async def push(changes: dict[str, Any]) -> None:
            update = ReactiveUpdate(
                id=component.id,
                updates=changes,
                html=self.render(component),
                new_state=component.get_state(),
                request_id=request.request_id,
            )
            logger.debug("Pushing update for %s: %s", component.id, sorted(changes))
            result = on_update(update)
            if inspect.isawaitable(result):
                await result

        return VolatilePoller(read, push, interval=self.poll_interval)

    def __repr__(self) -> str:
        return f"<WireManager types={self.registered_names()} instances={len(self._instances)}>"
