"""Core Environment class for bladewire.

The Environment is the central configuration and rendering object. It
orchestrates parse → compile → execute, owns the name-keyed cache of
compiled templates and resolves embedded components.

Thread-Safety:
- The template cache is a dict guarded by a lock
- Parsing and compiling use per-call state only
- Multiple threads can render concurrently

"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from bladewire.compiler import Compiler
from bladewire.environment.exceptions import ComponentNotFoundError, TemplateNotFoundError
from bladewire.environment.globals import DEFAULT_GLOBALS
from bladewire.environment.loaders import DEFAULT_EXTENSION, Loader, normalize_name
from bladewire.lexer import Lexer
from bladewire.parser import Parser
from bladewire.template import Template
from bladewire.utils.html import Markup

if TYPE_CHECKING:
    from bladewire.nodes import ParsedTemplate
    from bladewire.wire.manager import WireManager

logger = logging.getLogger(__name__)


@dataclass
class Environment:
    """Central configuration and template management for bladewire.

    Attributes:
        loader: Template source provider (FileSystemLoader, DictLoader)
        cache: Keep compiled templates by name until `clear_cache()`
        max_include_depth: Maximum include and layout/component nesting depth
        globals: Helper functions and values available to every template,
            merged over the defaults in `bladewire.environment.globals`
        wire: WireManager used to instantiate registered components

    Example:
            >>> env = Environment(loader=FileSystemLoader("views/"))
            >>> env.render("pages/home", {"user": user})

            >>> env = Environment()
            >>> env.from_string("Count: ${count}").render(count=3)
            'Count: 3'

    """

    loader: Loader | None = None
    cache: bool = True
    max_include_depth: int = 50
    globals: dict[str, Any] = field(default_factory=dict)
    wire: WireManager | None = None

    _cache: dict[str, Template] = field(init=False, default_factory=dict, repr=False)
    _cache_lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        self.globals = {**DEFAULT_GLOBALS, **self.globals}

    # -- loading ---------------------------------------------------------

    def _normalize(self, name: str) -> str:
        extension = self.loader.extension if self.loader is not None else DEFAULT_EXTENSION
        return normalize_name(name, extension)

    def _load_source(self, name: str) -> tuple[str, str | None]:
        if self.loader is None:
            raise TemplateNotFoundError(f"Template not found: {name} (no loader configured)")
        return self.loader.get_source(name)

    def _load_include(self, name: str) -> str:
        source, _ = self._load_source(self._normalize(name))
        return source

    def exists(self, name: str) -> bool:
        """True if the loader can provide ``name``."""
        if self.loader is None:
            return False
        return self.loader.exists(self._normalize(name))

    def get_template(self, name: str) -> Template:
        """Load, compile and (when caching) remember a template.

        Raises:
            TemplateNotFoundError: The loader has no such template
            TemplateSyntaxError: The template source is malformed
        """
        name = self._normalize(name)
        if self.cache:
            with self._cache_lock:
                cached = self._cache.get(name)
            if cached is not None:
                logger.debug("Template cache hit: %s", name)
                return cached
            logger.debug("Template cache miss: %s", name)

        source, filename = self._load_source(name)
        template = self._from_source(source, name, filename)

        if self.cache:
            with self._cache_lock:
                # another thread may have compiled it first; keep that one
                template = self._cache.setdefault(name, template)
        return template

    def clear_cache(self) -> None:
        """Drop every cached template."""
        with self._cache_lock:
            count = len(self._cache)
            self._cache.clear()
        logger.debug("Template cache cleared (%d entries)", count)

    # -- compiling -------------------------------------------------------

    def parse(
        self,
        source: str,
        name: str | None = None,
        filename: str | None = None,
    ) -> ParsedTemplate:
        """Lex and parse ``source``, inlining includes through the loader."""
        tokens = Lexer(source, name, filename).tokenize()
        return Parser(
            tokens,
            name,
            filename,
            source,
            load_include=self._load_include,
            max_include_depth=self.max_include_depth,
        ).parse()

    def compile(
        self,
        parsed: ParsedTemplate,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ) -> Template:
        """Compile a parsed template into a renderable Template."""
        code = Compiler().compile(parsed, name, filename)
        return Template(self, code, name, filename, source=source, parsed=parsed)

    def _from_source(self, source: str, name: str | None, filename: str | None) -> Template:
        logger.debug("Compiling template %s", name or "<string>")
        return self.compile(self.parse(source, name, filename), name, filename, source)

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Compile a template from a string; never cached."""
        return self._from_source(source, name, None)

    # -- rendering -------------------------------------------------------

    def render(
        self,
        name: str,
        context: Mapping[str, Any] | None = None,
        /,
        **kwargs: Any,
    ) -> str:
        """Render the named template.

        ``name`` and ``context`` are positional-only, so template variables
        may use those names as keyword arguments.

        Example:
            >>> env.render("counter", {"count": 3})
            'Count: 3'
        """
        template = self.get_template(name)
        if context is None:
            return template.render(**kwargs)
        return template.render(context, **kwargs)

    def render_component(
        self,
        type_name: str,
        props: Mapping[str, Any],
        context: Mapping[str, Any],
        *,
        slot: str | None = None,
        slots: Mapping[str, str] | None = None,
    ) -> str:
        """Render an embedded ``@component('type_name', props)``.

        Resolution order:
        1. a Component instance found in ``context`` under ``type_name``
        2. a component type registered with ``wire``, created from ``props``
        3. a view template named ``type_name``, rendered with ``props``
           plus ``slot`` and the named slots

        Raises:
            ComponentNotFoundError: None of the above exists
        """
        from bladewire.wire.component import Component

        slot_values = {name: Markup(body) for name, body in (slots or {}).items()}
        if slot is not None:
            slot_values["slot"] = Markup(slot)

        value = context.get(type_name)
        if isinstance(value, Component):
            return value.render(self, **slot_values)

        if self.wire is not None and self.wire.is_registered(type_name):
            component = self.wire.create_with_options(type_name, props)
            return component.render(self, **slot_values)

        if self.exists(type_name):
            view_ctx = {**props, "slot": Markup(""), **slot_values}
            return self.get_template(type_name)._render(view_ctx)

        available = self.wire.registered_names() if self.wire is not None else []
        raise ComponentNotFoundError(type_name, available)
