"""Loop iteration metadata for ``@foreach`` blocks."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any


class LoopContext:
    """Loop metadata bound as ``loop`` inside every ``@foreach`` body.

    Properties:
        index: 0-based position (0, 1, 2, ...)
        iteration: 1-based position (1, 2, 3, ...)
        remaining: Iterations left after this one
        count: Total number of items
        first: True on the first iteration
        last: True on the final iteration
        even / odd: Parity of ``iteration``

    Example:
            ```
            @foreach(users as user)
                <li>{{ loop.iteration }}/{{ loop.count }} {{ user.name }}@if(loop.last) (last)@endif</li>
            @endforeach
            ```

    """

    __slots__ = ("_index", "_items", "_length")

    def __init__(self, items: Sequence[Any]) -> None:
        self._items = items
        self._length = len(items)
        self._index = 0

    def __iter__(self) -> Iterator[Any]:
        """Iterate through items, updating the position for each."""
        for i, item in enumerate(self._items):
            self._index = i
            yield item

    @property
    def index(self) -> int:
        return self._index

    @property
    def iteration(self) -> int:
        return self._index + 1

    @property
    def remaining(self) -> int:
        return self._length - self._index - 1

    @property
    def count(self) -> int:
        return self._length

    @property
    def first(self) -> bool:
        return self._index == 0

    @property
    def last(self) -> bool:
        return self._index == self._length - 1

    @property
    def even(self) -> bool:
        return self.iteration % 2 == 0

    @property
    def odd(self) -> bool:
        return self.iteration % 2 == 1

    def __repr__(self) -> str:
        return f"<LoopContext {self.iteration}/{self.count}>"
