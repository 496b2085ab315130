"""bladewire Template: compiled template object ready for rendering.

The Template class wraps a compiled code object and provides the
``render()`` API. Templates are immutable and thread-safe for concurrent
rendering.

Architecture:
    ```
    Template
    ├── _env_ref: WeakRef[Environment]  # Prevents circular refs
    ├── _code: code object              # Compiled Python bytecode
    ├── _render_func: callable          # Extracted render() function
    └── _name, _filename, _source       # For error messages
    ```

Memory Safety:
Uses ``weakref.ref(env)`` to break potential cycles:
``Template → (weak) → Environment → cache → Template``

Thread-Safety:
- Templates are immutable after construction
- ``render()`` creates only local state (the output buffer)
- Multiple threads can call ``render()`` concurrently

"""

from __future__ import annotations

import weakref
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from bladewire.environment.exceptions import (
    ReservedKeyError,
    TemplateError,
    TemplateRuntimeError,
    build_source_snippet,
)
from bladewire.render_context import (
    get_render_context,
    render_context,
    reset_render_context,
    set_render_context,
)
from bladewire.template.helpers import STATIC_NAMESPACE
from bladewire.utils.constants import CONTENT_KEY, RESERVED_CONTEXT_KEYS, SECTIONS_KEY
from bladewire.utils.html import Markup

if TYPE_CHECKING:
    import types

    from bladewire.environment import Environment
    from bladewire.nodes import ParsedTemplate
    from bladewire.render_context import RenderContext


class Template:
    """Compiled template ready for rendering.

    Wraps a compiled code object containing a ``render(_ctx)`` function.

    Attributes:
        name: Template identifier (for error messages)
        filename: Source file path (for error messages)
        parsed: Directive tree the template was compiled from

    Error Enhancement:
        Runtime errors are caught and enhanced with template context:
            ```
            Runtime Error: unsupported operand type(s) for +: 'int' and 'str'
              Location: pages/cart:15
               |
            >15 | <p>{{ total + label }}</p>
               |
            ```

    Example:
            >>> env = Environment()
            >>> t = env.from_string("Hello, {{ name }}!")
            >>> t.render(name="<World>")
            'Hello, &lt;World&gt;!'

            >>> t.render({"name": "World"})  # Dict context also works
            'Hello, World!'

    """

    __slots__ = (
        "_code",
        "_env_ref",
        "_filename",
        "_name",
        "_namespace",
        "_parsed",
        "_render_func",
        "_source",
    )

    def __init__(
        self,
        env: Environment,
        code: types.CodeType,
        name: str | None,
        filename: str | None,
        source: str | None = None,
        parsed: ParsedTemplate | None = None,
    ):
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._code = code
        self._name = name
        self._filename = filename
        self._source = source
        self._parsed = parsed

        env_ref = self._env_ref

        def _environment(action: str) -> Environment:
            _env = env_ref()
            if _env is None:
                raise RuntimeError(f"Environment has been garbage collected while {action}")
            return _env

        # Layout helper: render the parent with this template's body and sections
        def _extends(
            template_name: str,
            context: dict[str, Any],
            body: str,
            sections: dict[str, str],
        ) -> str:
            parent = _environment(f"extending '{template_name}'").get_template(template_name)
            # sections already supplied by a child win over this template's own
            inherited = context.get(SECTIONS_KEY) or {}
            parent_ctx = {
                **context,
                CONTENT_KEY: Markup(body),
                SECTIONS_KEY: {**sections, **inherited},
            }
            return parent._render(parent_ctx)

        # Component helper: resolve and render an embedded component
        def _component(
            context: dict[str, Any],
            type_name: str,
            props: dict[str, Any],
            slot: str | None,
            slots: dict[str, str],
        ) -> str:
            _env = _environment(f"rendering component '{type_name}'")
            return _env.render_component(type_name, props, context, slot=slot, slots=slots)

        namespace: dict[str, Any] = {
            **STATIC_NAMESPACE,
            **env.globals,
            "_extends": _extends,
            "_component": _component,
        }
        exec(code, namespace)
        self._namespace = namespace
        self._render_func = namespace["render"]

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def filename(self) -> str | None:
        return self._filename

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def parsed(self) -> ParsedTemplate | None:
        return self._parsed

    def render(self, *args: Mapping[str, Any], **kwargs: Any) -> str:
        """Render template with given context.

        Args:
            *args: Single mapping of context variables
            **kwargs: Context variables as keyword arguments

        Raises:
            ReservedKeyError: The data uses ``_content`` or ``_sections``
            TemplateRuntimeError: An expression failed while rendering

        Example:
            >>> t.render(name="World")
            'Hello, World!'
        """
        ctx: dict[str, Any] = {}
        if args:
            if len(args) != 1 or not isinstance(args[0], Mapping):
                raise TypeError(
                    f"render() takes at most 1 positional argument (a mapping), got {len(args)}"
                )
            ctx.update(args[0])
        ctx.update(kwargs)

        reserved = RESERVED_CONTEXT_KEYS & ctx.keys()
        if reserved:
            raise ReservedKeyError(reserved, self._name)
        return self._render(ctx)

    def _render(self, ctx: dict[str, Any]) -> str:
        """Render ``ctx`` without the reserved-key check.

        Used for layouts and components rendered from inside another
        template, which get a child render context (nesting depth and
        template stack) instead of a fresh one.
        """
        parent = get_render_context()
        if parent is None:
            env = self._env_ref()
            max_depth = env.max_include_depth if env is not None else 50
            with render_context(
                template_name=self._name,
                filename=self._filename,
                source=self._source,
                max_depth=max_depth,
            ) as render_ctx:
                return self._run(ctx, render_ctx)

        parent.check_depth(self._name or "<string>")
        child = parent.child_context(self._name, self._filename, self._source)
        token = set_render_context(child)
        try:
            return self._run(ctx, child)
        finally:
            reset_render_context(token)

    def _run(self, ctx: dict[str, Any], render_ctx: RenderContext) -> str:
        try:
            result: str = self._render_func(ctx)
            return result
        except TemplateError:
            raise
        except Exception as e:
            raise self._enhance_error(e, render_ctx) from e

    def _enhance_error(self, error: Exception, render_ctx: RenderContext) -> TemplateRuntimeError:
        """Convert a generic exception into TemplateRuntimeError with template context."""
        lineno = render_ctx.line
        error_str = str(error).strip() or f"{type(error).__name__} (no details available)"
        if not error_str.startswith(type(error).__name__):
            error_str = f"{type(error).__name__}: {error_str}"

        snippet = None
        if self._source and lineno:
            snippet = build_source_snippet(self._source, lineno)

        suggestion = None
        if isinstance(error, NameError):
            suggestion = "Helper functions must be registered in Environment(globals=...)"

        return TemplateRuntimeError(
            error_str,
            template_name=render_ctx.template_name,
            lineno=lineno,
            suggestion=suggestion,
            source_snippet=snippet,
            template_stack=render_ctx.template_stack,
        )

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"
