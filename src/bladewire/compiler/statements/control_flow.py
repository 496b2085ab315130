"""Control flow lowering: @if chains and @foreach.

Neither construct adds an operation kind. Each lowers to a single
EmitExpression over fragments:

    @if(a) A @elseif(b) B @else C @endif
        → _append(_if_0() if a else (_if_1() if b else _if_2()))

    @foreach(items as item) ... @endforeach
        → _append(_loop(items, _for_3, False))

Branches made only of literal text fold to constants, so a plain
``@if(x)yes@endif`` compiles to ``'yes' if x else ''``.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING

from bladewire.compiler.operations import EmitExpression

if TYPE_CHECKING:
    from bladewire.compiler.operations import Fragment, Operation
    from bladewire.nodes import For, If, Node


class ControlFlowMixin:
    """Mixin for lowering conditionals and loops."""

    if TYPE_CHECKING:
        # From ExpressionCompilationMixin
        def _compile_expr(self, text: str, source: str | None = None) -> ast.expr: ...

        @staticmethod
        def _call(func: str, *args: ast.expr) -> ast.Call: ...

        # From Compiler core
        def _emit(self, op: Operation) -> None: ...

        def _lower_fragment(
            self, prefix: str, nodes: Sequence[Node], params: tuple[str, ...] = ()
        ) -> Fragment: ...

        def _fragment_value(self, fragment: Fragment) -> ast.expr: ...

    def _branch(self, nodes: Sequence[Node]) -> ast.expr:
        return self._fragment_value(self._lower_fragment("if", nodes))

    def _lower_if(self, node: If) -> None:
        value: ast.expr = (
            self._branch(node.else_) if node.else_ is not None else ast.Constant(value="")
        )
        for test, body in reversed(node.elif_):
            value = ast.IfExp(
                test=self._compile_expr(test),
                body=self._branch(body),
                orelse=value,
            )
        value = ast.IfExp(
            test=self._compile_expr(node.test),
            body=self._branch(node.body),
            orelse=value,
        )
        self._emit(EmitExpression(value, node.lineno, trusted=True))

    def _lower_for(self, node: For) -> None:
        body = self._lower_fragment("for", node.body, node.bound_names)
        value = self._call(
            "_loop",
            self._compile_expr(node.iter),
            ast.Name(id=body.name, ctx=ast.Load()),
            ast.Constant(value=node.key is not None),
        )
        self._emit(EmitExpression(value, node.lineno, trusted=True))
