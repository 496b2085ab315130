"""bladewire Template package: compiled template objects ready for rendering."""

from bladewire.template.core import Template
from bladewire.template.loop_context import LoopContext
from bladewire.utils.html import Markup

__all__ = [
    "LoopContext",
    "Markup",
    "Template",
]
