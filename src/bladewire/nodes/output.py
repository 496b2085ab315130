"""Output nodes: literal text and interpolations."""

from __future__ import annotations

from dataclasses import dataclass

from bladewire.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Data(Node):
    """Literal template text, emitted verbatim."""

    value: str


@dataclass(frozen=True, slots=True)
class Output(Node):
    """Interpolation: ``{{ expr }}`` (escaped), ``{!! expr !!}`` / ``${ expr }`` (raw).

    Attributes:
        expr: Translated Python expression text
        source: Expression as written in the template (for error messages)
        escape: HTML-escape the value before output
    """

    expr: str
    source: str
    escape: bool = True
