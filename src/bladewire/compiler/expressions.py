"""Expression compilation for the bladewire compiler.

Translated expression text (see `bladewire.translator`) is parsed with
`ast.parse(mode="eval")` and rewritten for the render function:

- ``context`` becomes the ``_ctx`` parameter
- every attribute load ``a.b`` becomes ``_getattr(a, 'b')``, so dotted
  paths work on mappings and objects alike and missing members give None

Text that does not parse is not an error at compile time. It compiles to
a call that raises when evaluated, so a malformed expression in a branch
that never runs does not break the template.

"""

from __future__ import annotations

import ast

from bladewire.translator import CONTEXT_NAME


class _ContextRewriter(ast.NodeTransformer):
    def visit_Name(self, node: ast.Name) -> ast.expr:
        if node.id == CONTEXT_NAME and isinstance(node.ctx, ast.Load):
            return ast.copy_location(ast.Name(id="_ctx", ctx=ast.Load()), node)
        return node

    def visit_Attribute(self, node: ast.Attribute) -> ast.expr:
        self.generic_visit(node)
        if not isinstance(node.ctx, ast.Load):
            return node
        return ast.copy_location(
            ast.Call(
                func=ast.Name(id="_getattr", ctx=ast.Load()),
                args=[node.value, ast.Constant(value=node.attr)],
                keywords=[],
            ),
            node,
        )


class ExpressionCompilationMixin:
    """Mixin turning translated expression text into Python AST nodes."""

    def _compile_expr(self, text: str, source: str | None = None) -> ast.expr:
        """Compile translated expression ``text``.

        Args:
            text: Python expression text produced by the translator
            source: Expression as written in the template, for the deferred
                error message
        """
        text = text.strip()
        if "\n" in text:
            # multi-line interpolations parse as one parenthesized expression
            text = f"({text})"
        try:
            tree = ast.parse(text, mode="eval")
        except SyntaxError as e:
            return self._deferred_error(source if source is not None else text, e.msg)
        return _ContextRewriter().visit(tree.body)

    def _deferred_error(self, source: str, message: str) -> ast.expr:
        return ast.Call(
            func=ast.Name(id="_invalid_expression", ctx=ast.Load()),
            args=[ast.Constant(value=source), ast.Constant(value=message)],
            keywords=[],
        )

    @staticmethod
    def _call(func: str, *args: ast.expr) -> ast.Call:
        """``func(*args)`` where ``func`` is a namespace name."""
        return ast.Call(
            func=ast.Name(id=func, ctx=ast.Load()),
            args=list(args),
            keywords=[],
        )
