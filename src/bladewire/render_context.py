"""RenderContext: per-render state isolated from user data.

Template name, current source line and nesting depth live in a ContextVar
instead of the user's data dict, so they never collide with user keys.

Thread Safety:
    Each thread and async task sees its own RenderContext.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field


@dataclass
class RenderContext:
    """Per-render state isolated from user context.

    Attributes:
        template_name: Current template name for error messages
        filename: Source file path for error messages
        source: Template source for runtime error snippets
        line: Current line number (updated during render by generated code)
        depth: Current layout/component nesting depth
        max_depth: Maximum allowed nesting depth
        template_stack: Stack of (template_name, line) for error traces
    """

    template_name: str | None = None
    filename: str | None = None
    source: str | None = None

    # Current source position (updated during render by generated code)
    line: int = 0

    # 50 is deep enough for any real layout chain while catching
    # A extends B extends A early.
    depth: int = 0
    max_depth: int = 50

    template_stack: list[tuple[str, int]] = field(default_factory=list)

    def check_depth(self, template_name: str) -> None:
        """Raise TemplateRuntimeError if entering ``template_name`` would nest too deep."""
        if self.depth >= self.max_depth:
            from bladewire.environment.exceptions import ErrorCode, TemplateRuntimeError

            raise TemplateRuntimeError(
                f"Maximum nesting depth exceeded ({self.max_depth}) "
                f"when rendering '{template_name}'",
                template_name=self.template_name,
                suggestion="Check for circular layouts or components: A → B → A",
                code=ErrorCode.LAYOUT_DEPTH,
            )

    def child_context(
        self,
        template_name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ) -> RenderContext:
        """Create the context for a nested layout or component render.

        Appends the current location to template_stack for error traces.
        """
        new_stack = self.template_stack.copy()
        if self.template_name and self.line > 0:
            new_stack.append((self.template_name, self.line))

        return RenderContext(
            template_name=template_name or self.template_name,
            filename=filename,
            source=source,
            line=0,
            depth=self.depth + 1,
            max_depth=self.max_depth,
            template_stack=new_stack,
        )


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in render)."""
    return _render_context.get()


def get_render_context_required() -> RenderContext:
    """Get current render context, raise if not in render.

    Used by generated code for line tracking.
    """
    ctx = _render_context.get()
    if ctx is None:
        raise RuntimeError("Not in a render context")
    return ctx


def set_render_context(ctx: RenderContext) -> Token[RenderContext | None]:
    return _render_context.set(ctx)


def reset_render_context(token: Token[RenderContext | None]) -> None:
    _render_context.reset(token)


@contextmanager
def render_context(
    template_name: str | None = None,
    filename: str | None = None,
    source: str | None = None,
    max_depth: int = 50,
) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Creates a new RenderContext, sets it as current for the duration of the
    with block, and restores the previous one on exit.

    Example:
        with render_context(template_name="pages/home") as ctx:
            html = template._render_func(data)
            # ctx.line updated during render for error tracking
    """
    ctx = RenderContext(
        template_name=template_name,
        filename=filename,
        source=source,
        max_depth=max_depth,
    )
    token = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)
