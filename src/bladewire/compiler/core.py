"""bladewire Compiler core: ParsedTemplate → Python code object.

The Compiler works in two steps:

1. **Lower**: walk the directive tree and produce a linear operation list
   (`EmitLiteral` / `EmitExpression`) per fragment.
2. **Generate**: turn every fragment into a Python function built with the
   `ast` module, using the StringBuilder pattern.

Design Principles:
1. **AST-to-AST**: Generate `ast.Module`, not source strings
2. **StringBuilder**: Output via `_append()`, join at end
3. **Local caching**: `_escape` and `_str` bound as `_e` / `_s` locals
4. **O(1) dispatch**: Dict-based node type → handler lookup

Generated shape for a template that extends a layout:

    ```python
    def render(_ctx):
        _e = _escape
        _s = _str
        _buf = []
        _append = _buf.append

        def _section_0():
            _buf = []
            _append = _buf.append
            _append('<h1>')
            _get_render_ctx().line = 2
            _append(_e(_getattr(_ctx, 'title')))
            _append('</h1>')
            return ''.join(_buf)

        _append('ignored by most layouts')
        return _extends('layouts/app', _ctx, ''.join(_buf), {'header': _section_0()})
    ```

"""

from __future__ import annotations

import ast
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from bladewire.compiler.expressions import ExpressionCompilationMixin
from bladewire.compiler.operations import EmitExpression, EmitLiteral, Fragment, Operation
from bladewire.compiler.statements import StatementCompilationMixin
from bladewire.environment.exceptions import TemplateSyntaxError

if TYPE_CHECKING:
    import types

    from bladewire.nodes import Node, ParsedTemplate


class Compiler(ExpressionCompilationMixin, StatementCompilationMixin):
    """Compile a ParsedTemplate to a Python code object.

    The generated module defines ``render(_ctx)``, where ``_ctx`` is the
    render data dict. Every placeholder left by the parser (section and
    component references) must be consumed exactly once; anything else is
    a TemplateSyntaxError raised here, never at render time.

    A Compiler holds per-compile state only and is reset by `compile()`,
    so one instance must not be shared between threads.

    Attributes:
        _parsed: Template being compiled
        _scope: Stack of fragments being filled; the last one receives ops
        _counter: Counter for unique fragment names
    """

    __slots__ = (
        "_consumed_components",
        "_consumed_sections",
        "_counter",
        "_filename",
        "_name",
        "_node_dispatch",
        "_parsed",
        "_scope",
    )

    def __init__(self) -> None:
        self._name: str | None = None
        self._filename: str | None = None
        self._parsed: ParsedTemplate | None = None
        self._scope: list[Fragment] = []
        self._counter = 0
        self._consumed_sections: set[str] = set()
        self._consumed_components: set[str] = set()
        self._node_dispatch: dict[str, Callable[[Node], None]] = {
            "Data": self._lower_data,
            "Output": self._lower_output,
            "If": self._lower_if,
            "For": self._lower_for,
            "Yield": self._lower_yield,
            "Content": self._lower_content,
            "SectionRef": self._lower_section_ref,
            "ComponentRef": self._lower_component_ref,
            "WireState": self._lower_wire_state,
        }

    def compile(
        self,
        parsed: ParsedTemplate,
        name: str | None = None,
        filename: str | None = None,
    ) -> types.CodeType:
        """Compile ``parsed`` to a code object ready for exec().

        Raises:
            TemplateSyntaxError: A placeholder is unresolved or unused
        """
        self._name = name if name is not None else parsed.name
        self._filename = filename
        module = ast.Module(body=[self._make_render_function(parsed)], type_ignores=[])
        ast.fix_missing_locations(module)
        return compile(module, filename or "<template>", "exec")

    # -- lowering --------------------------------------------------------

    def lower(self, parsed: ParsedTemplate) -> Fragment:
        """Lower ``parsed`` to the root fragment without generating code."""
        self._parsed = parsed
        self._scope = []
        self._counter = 0
        self._consumed_sections = set()
        self._consumed_components = set()
        root = Fragment("render", ("_ctx",))
        self._scope.append(root)
        self._lower_nodes(parsed.body)
        self._scope.pop()
        return root

    def _emit(self, op: Operation) -> None:
        ops = self._scope[-1].ops
        # coalesce adjacent literals
        if isinstance(op, EmitLiteral) and ops and isinstance(ops[-1], EmitLiteral):
            ops[-1] = EmitLiteral(ops[-1].text + op.text)
        else:
            ops.append(op)

    def _lower_nodes(self, nodes: Sequence[Node]) -> None:
        for node in nodes:
            self._node_dispatch[type(node).__name__](node)

    def _lower_fragment(
        self,
        prefix: str,
        nodes: Sequence[Node],
        params: tuple[str, ...] = (),
    ) -> Fragment:
        """Lower ``nodes`` into a new child fragment of the current one."""
        fragment = Fragment(f"_{prefix}_{self._counter}", params)
        self._counter += 1
        self._scope[-1].children.append(fragment)
        self._scope.append(fragment)
        try:
            self._lower_nodes(nodes)
        finally:
            self._scope.pop()
        return fragment

    def _fragment_value(self, fragment: Fragment) -> ast.expr:
        """Expression producing a parameterless fragment's output."""
        literal = fragment.literal
        if literal is not None:
            return ast.Constant(value=literal)
        return self._call(fragment.name)

    def _placeholder_error(self, message: str, node: Node) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message,
            lineno=node.lineno,
            name=self._name,
            filename=self._filename,
            col_offset=node.col_offset,
        )

    def _check_placeholders(self, parsed: ParsedTemplate) -> None:
        unused = sorted(set(parsed.components) - self._consumed_components)
        if unused:
            call = parsed.components[unused[0]]
            raise self._placeholder_error(
                f"Component '{call.type_name}' ({unused[0]}) is never placed", call
            )
        missing = sorted(set(parsed.sections) - self._consumed_sections)
        if missing:
            raise TemplateSyntaxError(
                f"Section '{missing[0]}' is never placed",
                name=self._name,
                filename=self._filename,
            )

    # -- generation ------------------------------------------------------

    def _make_render_function(self, parsed: ParsedTemplate) -> ast.FunctionDef:
        root = self.lower(parsed)

        returns: ast.expr = self._join()
        if parsed.extends is not None:
            sections: dict[str, ast.expr] = {}
            self._scope.append(root)
            for name, body in parsed.sections.items():
                sections[name] = self._fragment_value(self._lower_fragment("section", body))
            self._scope.pop()
            returns = self._call(
                "_extends",
                ast.Constant(value=parsed.extends),
                ast.Name(id="_ctx", ctx=ast.Load()),
                self._join(),
                ast.Dict(
                    keys=[ast.Constant(value=name) for name in sections],
                    values=list(sections.values()),
                ),
            )
        self._check_placeholders(parsed)

        prelude: list[ast.stmt] = [
            self._assign("_e", ast.Name(id="_escape", ctx=ast.Load())),
            self._assign("_s", ast.Name(id="_str", ctx=ast.Load())),
        ]
        return self._make_function(root, prelude, returns)

    def _make_function(
        self,
        fragment: Fragment,
        prelude: list[ast.stmt] | None = None,
        returns: ast.expr | None = None,
    ) -> ast.FunctionDef:
        body: list[ast.stmt] = list(prelude or [])
        body.append(self._assign("_buf", ast.List(elts=[], ctx=ast.Load())))
        body.append(
            self._assign(
                "_append",
                ast.Attribute(
                    value=ast.Name(id="_buf", ctx=ast.Load()),
                    attr="append",
                    ctx=ast.Load(),
                ),
            )
        )

        for child in fragment.children:
            # literal-only parameterless fragments were folded into constants
            if child.params or child.literal is None:
                body.append(self._make_function(child))

        last_line = 0
        for op in fragment.ops:
            if isinstance(op, EmitLiteral):
                body.append(self._append(ast.Constant(value=op.text)))
                continue
            if op.lineno and op.lineno != last_line:
                body.append(self._line_marker(op.lineno))
                last_line = op.lineno
            body.append(self._append(self._wrap(op)))

        body.append(ast.Return(value=returns if returns is not None else self._join()))
        return ast.FunctionDef(
            name=fragment.name,
            args=ast.arguments(
                posonlyargs=[],
                args=[ast.arg(arg=param) for param in fragment.params],
                vararg=None,
                kwonlyargs=[],
                kw_defaults=[],
                kwarg=None,
                defaults=[],
            ),
            body=body,
            decorator_list=[],
            returns=None,
            type_params=[],
        )

    def _wrap(self, op: EmitExpression) -> ast.expr:
        if op.trusted:
            return op.value
        return self._call("_e" if op.escape else "_s", op.value)

    def _append(self, value: ast.expr) -> ast.stmt:
        return ast.Expr(value=self._call("_append", value))

    @staticmethod
    def _assign(name: str, value: ast.expr) -> ast.stmt:
        return ast.Assign(targets=[ast.Name(id=name, ctx=ast.Store())], value=value)

    @staticmethod
    def _join() -> ast.expr:
        return ast.Call(
            func=ast.Attribute(value=ast.Constant(value=""), attr="join", ctx=ast.Load()),
            args=[ast.Name(id="_buf", ctx=ast.Load())],
            keywords=[],
        )

    @staticmethod
    def _line_marker(lineno: int) -> ast.stmt:
        """``_get_render_ctx().line = lineno``"""
        return ast.Assign(
            targets=[
                ast.Attribute(
                    value=ast.Call(
                        func=ast.Name(id="_get_render_ctx", ctx=ast.Load()),
                        args=[],
                        keywords=[],
                    ),
                    attr="line",
                    ctx=ast.Store(),
                )
            ],
            value=ast.Constant(value=lineno),
        )
