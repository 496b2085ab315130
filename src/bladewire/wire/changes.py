"""Change detection for component state.

State is compared by JSON serialization, never by identity: a new list
with the same contents is unchanged, a mutated list is changed.

`VolatilePoller` watches the volatile (``live_``) properties of a
component while an asynchronous action is outstanding and reports each
observed change, so a loading flag can reach the client before the action
finishes.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

logger = logging.getLogger(__name__)


def snapshot(state: Mapping[str, Any]) -> dict[str, Any]:
    """Deep copy of ``state``, detached from later mutation."""
    return copy.deepcopy(dict(state))


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def diff_state(old: Mapping[str, Any], new: Mapping[str, Any]) -> dict[str, Any]:
    """Keys of ``new`` whose value differs structurally from ``old``.

    Returns:
        Changed key → new value, in ``new``'s key order

    Example:
        >>> diff_state({"count": 0, "items": [1, 2]}, {"count": 1, "items": [1, 2]})
        {'count': 1}
    """
    changed: dict[str, Any] = {}
    for key, value in new.items():
        if key not in old or _canonical(old[key]) != _canonical(value):
            changed[key] = value
    return changed


class VolatilePoller:
    """Poll a set of properties at a fixed interval until stopped.

    The first check runs as soon as polling starts; later checks run every
    ``interval`` seconds. `stop()` sets the single settle flag that the
    polling loop waits on, waits for the loop to exit and then runs one
    final check, so a change made right before the action completed is
    still reported. Calling `stop()` again does nothing.

    Args:
        read: Returns the current values of the watched properties
        on_change: Called with changed key → new value; may be async
        interval: Seconds between checks
    """

    __slots__ = ("_interval", "_last", "_on_change", "_read", "_settled", "_stopped", "_task")

    def __init__(
        self,
        read: Callable[[], Mapping[str, Any]],
        on_change: Callable[[dict[str, Any]], Awaitable[None] | None],
        interval: float = 0.05,
    ):
        self._read = read
        self._on_change = on_change
        self._interval = interval
        self._last = snapshot(read())
        self._settled = asyncio.Event()
        self._stopped = False
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is None and not self._stopped:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._settled.set()
        if self._task is not None:
            await self._task
        await self.check()

    async def _run(self) -> None:
        while not self._settled.is_set():
            await self.check()
            try:
                await asyncio.wait_for(self._settled.wait(), self._interval)
            except TimeoutError:
                continue

    async def check(self) -> dict[str, Any]:
        """Compare against the last observed values and report changes."""
        current = self._read()
        changes = diff_state(self._last, current)
        if not changes:
            return changes
        self._last = snapshot(current)
        logger.debug("Volatile properties changed: %s", sorted(changes))
        try:
            result = self._on_change(changes)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Volatile update callback failed")
        return changes
