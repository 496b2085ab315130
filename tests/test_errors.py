"""Tests for error codes, messages and the render-time error boundary."""

from __future__ import annotations

import pytest

from bladewire import (
    ComponentNotFoundError,
    Environment,
    ErrorCode,
    TemplateError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)
from bladewire.environment.exceptions import ActionNotFoundError, ReservedKeyError


class TestErrorCodes:
    def test_categories(self) -> None:
        assert ErrorCode.UNCLOSED_INTERPOLATION.category == "lexer"
        assert ErrorCode.UNCLOSED_BLOCK.category == "parser"
        assert ErrorCode.LAYOUT_DEPTH.category == "runtime"
        assert ErrorCode.TEMPLATE_NOT_FOUND.category == "template"
        assert ErrorCode.ACTION_NOT_FOUND.category == "component"

    def test_values_unique(self) -> None:
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))
        assert all(value.startswith("BW-") for value in values)

    def test_hierarchy(self) -> None:
        for cls in (
            TemplateSyntaxError,
            TemplateRuntimeError,
            ReservedKeyError,
            ComponentNotFoundError,
            ActionNotFoundError,
        ):
            assert issubclass(cls, TemplateError)


class TestSyntaxErrorMessages:
    def test_snippet_and_caret(self, env: Environment) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env.from_string("ok\n  @if(x) open", name="page")
        message = str(exc_info.value)
        assert "page:2" in message
        assert "@if(x) open" in message
        assert "^" in message

    def test_format_compact_has_code(self, env: Environment) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env.from_string("{{ x")
        assert exc_info.value.format_compact().startswith("BW-LEX-001")


class TestRuntimeErrors:
    def test_wraps_with_location(self, env: Environment) -> None:
        tmpl = env.from_string("a\nb ${1 / zero}", name="calc")
        with pytest.raises(TemplateRuntimeError) as exc_info:
            tmpl.render(zero=0)
        error = exc_info.value
        assert error.template_name == "calc"
        assert error.lineno == 2
        assert isinstance(error.__cause__, ZeroDivisionError)
        assert "ZeroDivisionError" in error.format_compact()

    def test_snippet_shows_line(self, env: Environment) -> None:
        tmpl = env.from_string("first\n${missing.call()}", name="t")
        with pytest.raises(TemplateRuntimeError) as exc_info:
            tmpl.render()
        assert "${missing.call()}" in str(exc_info.value)

    def test_message_layout(self) -> None:
        error = TemplateRuntimeError("boom", template_name="cart", lineno=3, suggestion="check total")
        assert str(error).splitlines() == [
            "Runtime Error: boom",
            "  Location: cart:3",
            "",
            "  Suggestion: check total",
        ]


class TestComponentErrors:
    def test_not_found_suggests(self) -> None:
        error = ComponentNotFoundError("Countr", ["Counter", "Card"])
        assert "Did you mean 'Counter'?" in str(error)
        assert error.code is ErrorCode.COMPONENT_NOT_FOUND

    def test_action_not_found_message(self) -> None:
        error = ActionNotFoundError("explode", "Counter")
        assert str(error) == "Method explode does not exist in Counter"
