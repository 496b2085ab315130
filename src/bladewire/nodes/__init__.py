"""Directive-tree nodes produced by the parser.

Node Categories:
- **Output**: Data, Output
- **Control flow**: If, For
- **Structure**: Yield, Content, SectionRef, ComponentRef, WireState
- **Parser result**: ParsedTemplate, ComponentCall, Prop

"""

from bladewire.nodes.base import Node
from bladewire.nodes.control_flow import For, If
from bladewire.nodes.output import Data, Output
from bladewire.nodes.structure import (
    ComponentCall,
    ComponentRef,
    Content,
    ParsedTemplate,
    Prop,
    SectionRef,
    WireState,
    Yield,
)

__all__ = [
    "ComponentCall",
    "ComponentRef",
    "Content",
    "Data",
    "For",
    "If",
    "Node",
    "Output",
    "ParsedTemplate",
    "Prop",
    "SectionRef",
    "WireState",
    "Yield",
]
