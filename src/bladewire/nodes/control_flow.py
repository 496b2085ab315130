"""Control flow nodes: conditionals and iteration."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from bladewire.nodes.base import Node


@dataclass(frozen=True, slots=True)
class If(Node):
    """``@if(test) ... @elseif(test) ... @else ... @endif``

    Tests are translated Python expression text.
    """

    test: str
    body: Sequence[Node]
    elif_: Sequence[tuple[str, Sequence[Node]]] = ()
    else_: Sequence[Node] | None = None


@dataclass(frozen=True, slots=True)
class For(Node):
    """``@foreach(iter as target)`` or ``@foreach(iter as key => target)``

    ``target`` and ``key`` are the loop-bound names; inside ``body`` they
    (and ``loop``) are never qualified by the translator.
    """

    iter: str
    target: str
    body: Sequence[Node]
    key: str | None = None

    @property
    def bound_names(self) -> tuple[str, ...]:
        if self.key is None:
            return (self.target, "loop")
        return (self.key, self.target, "loop")
