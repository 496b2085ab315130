"""Directive parsing mixins for the Parser."""

from bladewire.parser.blocks.components import ComponentBlockParsingMixin
from bladewire.parser.blocks.control_flow import ControlFlowBlockParsingMixin
from bladewire.parser.blocks.core import BlockStackMixin
from bladewire.parser.blocks.template_structure import TemplateStructureBlockParsingMixin

__all__ = [
    "BlockStackMixin",
    "ComponentBlockParsingMixin",
    "ControlFlowBlockParsingMixin",
    "TemplateStructureBlockParsingMixin",
]
