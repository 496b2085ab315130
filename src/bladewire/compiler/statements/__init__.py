"""Statement lowering for the bladewire compiler.

Each mixin turns one family of directive-tree nodes into operations
(see `bladewire.compiler.operations`):

- basic: literal text and interpolations
- control_flow: @if chains and @foreach
- template_structure: sections, @yield, @content, @wireState
- components: @component placeholders

Uses inline TYPE_CHECKING declarations for host attributes.

"""

from __future__ import annotations

from bladewire.compiler.statements.basic import BasicStatementMixin
from bladewire.compiler.statements.components import ComponentMixin
from bladewire.compiler.statements.control_flow import ControlFlowMixin
from bladewire.compiler.statements.template_structure import TemplateStructureMixin


class StatementCompilationMixin(
    BasicStatementMixin,
    ControlFlowMixin,
    TemplateStructureMixin,
    ComponentMixin,
):
    """Combined mixin for lowering all node types."""
