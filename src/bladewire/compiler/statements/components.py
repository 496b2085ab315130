"""Component invocation lowering.

A component placeholder becomes one call resolved at render time:

    _append(_component(_ctx, 'Card', {'title': _getattr(_ctx, 'title')}, _slot_0(), {}))

Slot bodies are rendered eagerly in the caller's scope (loop-bound names
included) and passed as strings.

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING

from bladewire.compiler.operations import EmitExpression

if TYPE_CHECKING:
    from bladewire.compiler.operations import Fragment, Operation
    from bladewire.nodes import ComponentCall, ComponentRef, Node, ParsedTemplate


class ComponentMixin:
    """Mixin for lowering ComponentRef placeholders."""

    if TYPE_CHECKING:
        _parsed: ParsedTemplate
        _consumed_components: set[str]

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

        def _placeholder_error(self, message: str, node: Node) -> Exception: ...

    def _lower_component_ref(self, node: ComponentRef) -> None:
        call = self._parsed.components.get(node.placeholder)
        if call is None:
            raise self._placeholder_error(
                f"Component placeholder '{node.placeholder}' has no invocation", node
            )
        if node.placeholder in self._consumed_components:
            raise self._placeholder_error(
                f"Component placeholder '{node.placeholder}' placed twice", node
            )
        self._consumed_components.add(node.placeholder)

        value = self._call(
            "_component",
            ast.Name(id="_ctx", ctx=ast.Load()),
            ast.Constant(value=call.type_name),
            self._props(call),
            self._slot(call.slot),
            ast.Dict(
                keys=[ast.Constant(value=name) for name in call.slots],
                values=[self._slot(body) for body in call.slots.values()],
            ),
        )
        self._emit(EmitExpression(value, node.lineno, trusted=True))

    def _props(self, call: ComponentCall) -> ast.Dict:
        return ast.Dict(
            keys=[ast.Constant(value=prop.name) for prop in call.props],
            values=[
                self._compile_expr(prop.value, prop.source)
                if prop.is_expr
                else ast.Constant(value=prop.value)
                for prop in call.props
            ],
        )

    def _slot(self, body: Sequence[Node] | None) -> ast.expr:
        if body is None:
            return ast.Constant(value=None)
        return self._fragment_value(self._lower_fragment("slot", body))
