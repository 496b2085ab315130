"""bladewire: Blade-style directive templates with reactive components.

Templates use ``@``-directives and ``${...}`` interpolation. Components are
Python objects whose state is rendered through a view and kept in sync
with the browser by the NodeWire client runtime.

Quickstart:
    >>> from bladewire import Environment
    >>> env = Environment()
    >>> env.from_string("Hello, ${name}!").render(name="World")
    'Hello, World!'

File-based templates:
    >>> from bladewire import Environment, FileSystemLoader
    >>> env = Environment(loader=FileSystemLoader("views/"))
    >>> env.render("pages/home", {"user": user})

Components:
    >>> from bladewire import Component, WireManager
    >>> wire = WireManager(env)
    >>> wire.register("Counter", Counter, params=["start"])
    >>> env.from_string("@component('Counter', ['start' => 3])").render()

Architecture:
Template Source → Lexer → Parser → Nodes → Compiler → operations → Python AST → exec()

Pipeline stages:
1. **Lexer**: Splits source into text, interpolations and directives,
   expanding includes and rewriting event bindings
2. **Parser**: Builds immutable nodes and validates block structure
3. **Compiler**: Lowers nodes to a linear operation list per fragment,
   then to a Python function using the StringBuilder pattern
4. **Template**: Wraps compiled code with render() and error enhancement

Thread-Safety:
- Compiled templates are immutable and can render concurrently
- Render state lives in a ContextVar (`bladewire.render_context`)
- The Environment cache and WireManager registry are lock-guarded

"""

from bladewire._types import Token, TokenType
from bladewire.environment import (
    ActionNotFoundError,
    ComponentError,
    ComponentNotFoundError,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    ReservedKeyError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)
from bladewire.render_context import (
    RenderContext,
    get_render_context,
    get_render_context_required,
    render_context,
)
from bladewire.template import LoopContext, Markup, Template
from bladewire.translator import translate
from bladewire.wire import (
    ActionDispatcher,
    ActionRequest,
    ActionResult,
    Component,
    Param,
    ProtocolError,
    ReactiveUpdate,
    WireManager,
    auto_mark,
)

__version__ = "0.1.0"

__all__ = [
    "ActionDispatcher",
    "ActionNotFoundError",
    "ActionRequest",
    "ActionResult",
    "Component",
    "ComponentError",
    "ComponentNotFoundError",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "LoopContext",
    "Markup",
    "Param",
    "ProtocolError",
    "ReactiveUpdate",
    "RenderContext",
    "ReservedKeyError",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "WireManager",
    "__version__",
    "auto_mark",
    "get_render_context",
    "get_render_context_required",
    "render_context",
    "translate",
]
