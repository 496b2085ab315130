"""Template structure nodes: layouts, sections, components."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from bladewire.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Yield(Node):
    """``@yield('name', default)``: a child-supplied section or the default.

    ``default`` is translated Python expression text, or None.
    """

    name: str
    default: str | None = None


@dataclass(frozen=True, slots=True)
class Content(Node):
    """``@content``: the inherited child body inside a layout."""


@dataclass(frozen=True, slots=True)
class SectionRef(Node):
    """Placeholder left where ``@section('name')`` was declared."""

    name: str


@dataclass(frozen=True, slots=True)
class ComponentRef(Node):
    """Placeholder left where a component was invoked."""

    placeholder: str


@dataclass(frozen=True, slots=True)
class WireState(Node):
    """``@wireState(component)``: the component's JSON state script."""

    expr: str


@dataclass(frozen=True, slots=True)
class Prop:
    """One ``key => value`` entry of a component or include prop list.

    Literal values (strings, numbers, booleans, null) are stored decoded in
    ``value``. Anything else is an expression: ``value`` then holds the
    translated Python text and ``source`` the text as written.
    """

    name: str
    value: Any
    source: str
    is_expr: bool = False


@dataclass(frozen=True, slots=True)
class ComponentCall(Node):
    """A sub-component invocation.

    Attributes:
        type_name: Component type or view name
        props: Prop list in declaration order
        slot: Default slot body, or None for a bodiless invocation
        slots: Named ``@slot('name')`` bodies
    """

    type_name: str
    props: Sequence[Prop] = ()
    slot: Sequence[Node] | None = None
    slots: Mapping[str, Sequence[Node]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ParsedTemplate:
    """Parser output consumed by the compiler.

    ``body`` is the node sequence with placeholders (SectionRef,
    ComponentRef) standing in for constructs stored separately. Includes
    are already inlined.

    Attributes:
        name: Template name (for error messages)
        body: Top-level nodes
        extends: Parent layout name, if declared
        sections: Section name → body, in declaration order
        components: Placeholder id → invocation
    """

    name: str | None
    body: Sequence[Node]
    extends: str | None = None
    sections: Mapping[str, Sequence[Node]] = field(default_factory=dict)
    components: Mapping[str, ComponentCall] = field(default_factory=dict)
