"""Exceptions for the bladewire template and component system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Template not found by loader
├── TemplateSyntaxError       # Lex/parse-time error (ParseError subclasses it)
├── TemplateRuntimeError      # Render-time error with context
├── ReservedKeyError          # User data collides with engine-owned keys
└── ComponentError            # Component layer failures
    ├── ComponentNotFoundError   # No registered type / view for a component
    └── ActionNotFoundError      # Missing or non-callable action

Error Messages:
Template exceptions carry the template name and line, and where the source
is known, a snippet of the offending line:

    ```
    Runtime Error: division by zero
      Location: pages/stats:3
       |
     3 | <p>{{ total / count }}</p>
       |
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for bladewire errors.

    Format: BW-{CATEGORY}-{NUMBER}
    Categories: LEX (lexer), PAR (parser), RUN (runtime), TPL (template
    loading), CMP (components)
    """

    # Lexer errors (BW-LEX-xxx)
    UNCLOSED_INTERPOLATION = "BW-LEX-001"
    UNCLOSED_COMMENT = "BW-LEX-002"
    UNCLOSED_ARGUMENTS = "BW-LEX-003"
    MISSING_ARGUMENTS = "BW-LEX-004"

    # Parser errors (BW-PAR-xxx)
    UNEXPECTED_DIRECTIVE = "BW-PAR-001"
    UNCLOSED_BLOCK = "BW-PAR-002"
    INVALID_ARGUMENTS = "BW-PAR-003"
    MISPLACED_SECTION = "BW-PAR-004"
    INCLUDE_DEPTH = "BW-PAR-005"

    # Runtime errors (BW-RUN-xxx)
    RUNTIME_ERROR = "BW-RUN-001"
    LAYOUT_DEPTH = "BW-RUN-002"
    RESERVED_KEY = "BW-RUN-003"

    # Template loading errors (BW-TPL-xxx)
    TEMPLATE_NOT_FOUND = "BW-TPL-001"
    SYNTAX_ERROR = "BW-TPL-002"

    # Component errors (BW-CMP-xxx)
    COMPONENT_ERROR = "BW-CMP-001"
    COMPONENT_NOT_FOUND = "BW-CMP-002"
    ACTION_NOT_FOUND = "BW-CMP-003"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'lexer', 'parser', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
            "CMP": "component",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


def format_template_stack(stack: list[tuple[str, int]] | None) -> str:
    """Format the include/layout chain for error messages.

    Example:
        >>> print(format_template_stack([("pages/home", 4), ("layouts/app", 12)]))
        Template stack:
          • pages/home:4
          • layouts/app:12
    """
    if not stack:
        return ""

    lines = ["Template stack:"]
    for template_name, line_num in stack:
        lines.append(f"  • {template_name}:{line_num}")
    return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet with line numbers, marking the error line."""
        parts: list[str] = ["   |"]
        for lineno, content in self.lines:
            marker = ">" if lineno == self.error_line else " "
            parts.append(f"{marker}{lineno:>2} | {content}")
        if self.column is not None:
            parts.append(f"   | {' ' * self.column}^")
        parts.append("   |")
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all bladewire errors.

    Enables broad exception handling:

        >>> try:
        ...     env.render("pages/home", data)
        ... except TemplateError as e:
        ...     log.error("Template error: %s", e)

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a one-header summary without traceback noise."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class TemplateNotFoundError(TemplateError):
    """Template not found by the configured loader.

    Example:
        >>> env.render("missing", {})
        TemplateNotFoundError: Template not found: views/missing.view
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Lex/parse-time error in template source.

    When ``source`` and ``lineno`` are provided, the error message includes
    a source snippet with the offending line. If ``col_offset`` is also
    given, a caret (``^``) points at the exact column.

    Attributes:
        directive: Directive kind involved (``"if"``, ``"component"``, ...)
        offset: Approximate absolute character offset in the source
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        *,
        directive: str | None = None,
        offset: int | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.filename = filename
        self.source = source
        self.col_offset = col_offset
        self.directive = directive
        self.offset = offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _location(self) -> str:
        location = self.filename or self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"
        return location

    def _format_message(self) -> str:
        header = f"Syntax Error: {self.message}\n  --> {self._location()}"
        if self.offset is not None:
            header += f" (offset {self.offset})"

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                error_line = lines[self.lineno - 1]
                snippet = f"\n   |\n{self.lineno:>3} | {error_line}"
                if self.col_offset is not None:
                    snippet += f"\n   | {' ' * self.col_offset}^"
                return header + snippet

        return header

    def format_compact(self) -> str:
        """Format syntax error as structured terminal diagnostic."""
        code_prefix = f"{self.code.value}: " if self.code else ""
        return f"{code_prefix}{self.message}\n  --> {self._location()}"


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Output Format:
            ```
            Runtime Error: unsupported operand type(s) for +: 'int' and 'str'
              Location: pages/cart:15
               |
            >15 | <p>{{ total + label }}</p>
               |
            ```

    Attributes:
        message: Error description
        template_name: Name of the template
        lineno: Line number in template source
        suggestion: Actionable fix suggestion
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        template_stack: list[tuple[str, int]] | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        self.template_stack = template_stack or []
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _location(self) -> str:
        loc = self.template_name or "<template>"
        if self.lineno:
            loc += f":{self.lineno}"
        return loc

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            parts.append(f"  Location: {self._location()}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        if self.suggestion:
            parts.append(f"\n  Suggestion: {self.suggestion}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format runtime error as structured terminal diagnostic."""
        code_prefix = f"{self.code.value}: " if self.code else ""
        parts = [f"{code_prefix}{self.message}", f"  Location: {self._location()}"]
        if self.source_snippet:
            parts.append(self.source_snippet.format())
        if self.suggestion:
            parts.append(f"  Hint: {self.suggestion}")
        return "\n".join(parts)


class ReservedKeyError(TemplateError):
    """User-supplied render data uses a key the engine owns.

    ``_content`` and ``_sections`` carry layout state between a child
    template and its parent. Accepting them from callers would let user
    data silently replace a child's rendered body.
    """

    code: ErrorCode | None = ErrorCode.RESERVED_KEY

    def __init__(self, keys: set[str] | frozenset[str], template_name: str | None = None):
        self.keys = frozenset(keys)
        self.template_name = template_name
        names = ", ".join(sorted(self.keys))
        target = f" for '{template_name}'" if template_name else ""
        super().__init__(f"Render data{target} uses reserved key(s): {names}")


class ComponentError(TemplateError):
    """Base class for component layer failures."""

    code: ErrorCode | None = ErrorCode.COMPONENT_ERROR


class ComponentNotFoundError(ComponentError):
    """No component type is registered under the requested name.

    Attributes:
        component: Requested component type name
        available: Registered names (used for the suggestion)
    """

    code: ErrorCode | None = ErrorCode.COMPONENT_NOT_FOUND

    def __init__(self, component: str, available: list[str] | None = None):
        import difflib

        self.component = component
        self.available = sorted(available or [])
        message = f"Component '{component}' is not registered"
        matches = difflib.get_close_matches(component, self.available, n=1, cutoff=0.6)
        if matches:
            message += f". Did you mean '{matches[0]}'?"
        super().__init__(message)


class ActionNotFoundError(ComponentError):
    """Requested action is missing or is not a callable public method."""

    code: ErrorCode | None = ErrorCode.ACTION_NOT_FOUND

    def __init__(self, action: str, component: str):
        self.action = action
        self.component = component
        super().__init__(f"Method {action} does not exist in {component}")
