"""Basic statement lowering: literal text and interpolations.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING

from bladewire.compiler.operations import EmitExpression, EmitLiteral

if TYPE_CHECKING:
    from bladewire.compiler.operations import Operation
    from bladewire.nodes import Data, Output


class BasicStatementMixin:
    """Mixin for lowering Data and Output nodes."""

    if TYPE_CHECKING:
        # From ExpressionCompilationMixin
        def _compile_expr(self, text: str, source: str | None = None) -> ast.expr: ...

        # From Compiler core
        def _emit(self, op: Operation) -> None: ...

    def _lower_data(self, node: Data) -> None:
        if node.value:
            self._emit(EmitLiteral(node.value))

    def _lower_output(self, node: Output) -> None:
        """``{{ expr }}`` → ``_append(_e(expr))``; raw forms → ``_append(_s(expr))``."""
        self._emit(
            EmitExpression(
                self._compile_expr(node.expr, node.source),
                node.lineno,
                escape=node.escape,
            )
        )
