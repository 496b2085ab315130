"""Template structure lowering: sections, yields, @content, @wireState.

Section placeholders depend on whether the template extends a layout:

- extending: the placeholder emits nothing; the section body is rendered
  separately and handed to the parent (see `Compiler._make_render_function`)
- standalone: the body renders in place, unless a child already supplied a
  section of the same name, which wins

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from typing import TYPE_CHECKING

from bladewire.compiler.operations import EmitExpression

if TYPE_CHECKING:
    from bladewire.compiler.operations import Fragment, Operation
    from bladewire.nodes import Content, Node, ParsedTemplate, SectionRef, WireState, Yield


class TemplateStructureMixin:
    """Mixin for lowering layout and state-script nodes."""

    if TYPE_CHECKING:
        _parsed: ParsedTemplate
        _consumed_sections: set[str]

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

    @staticmethod
    def _ctx() -> ast.Name:
        return ast.Name(id="_ctx", ctx=ast.Load())

    def _lower_yield(self, node: Yield) -> None:
        default: ast.expr = (
            self._compile_expr(node.default) if node.default is not None else ast.Constant(None)
        )
        value = self._call("_yield", self._ctx(), ast.Constant(value=node.name), default)
        self._emit(EmitExpression(value, node.lineno, escape=True))

    def _lower_content(self, node: Content) -> None:
        self._emit(EmitExpression(self._call("_content", self._ctx()), node.lineno, trusted=True))

    def _lower_wire_state(self, node: WireState) -> None:
        value = self._call("_wire_state", self._compile_expr(node.expr))
        self._emit(EmitExpression(value, node.lineno, trusted=True))

    def _lower_section_ref(self, node: SectionRef) -> None:
        if node.name not in self._parsed.sections:
            raise self._placeholder_error(f"Section placeholder '{node.name}' has no body", node)
        if node.name in self._consumed_sections:
            raise self._placeholder_error(f"Section '{node.name}' placed twice", node)
        self._consumed_sections.add(node.name)
        if self._parsed.extends is not None:
            return

        body = self._lower_fragment("section", self._parsed.sections[node.name])
        value = ast.BoolOp(
            op=ast.Or(),
            values=[
                self._call("_yield", self._ctx(), ast.Constant(value=node.name), ast.Constant(None)),
                self._fragment_value(body),
            ],
        )
        self._emit(EmitExpression(value, node.lineno, trusted=True))
