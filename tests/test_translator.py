"""Tests for expression translation into context-qualified Python text."""

from __future__ import annotations

from hypothesis import given, settings

from bladewire.translator import translate

from .strategies import arbitrary_expression, dotted_path, safe_identifier


class TestQualification:
    """Free names are routed through ``context``."""

    def test_bare_identifier(self) -> None:
        assert translate("count") == "context.count"

    def test_dotted_chain_qualified_once(self) -> None:
        assert translate("user.profile.name") == "context.user.profile.name"

    def test_method_call_on_chain(self) -> None:
        assert translate("user.display_name()") == "context.user.display_name()"

    def test_helper_call_not_qualified(self) -> None:
        assert translate("count(items) > 0") == "count(context.items) > 0"

    def test_keyword_argument_not_qualified(self) -> None:
        assert translate("round(total, ndigits=2)") == "round(context.total, ndigits=2)"

    def test_comparison_is_not_keyword_argument(self) -> None:
        assert translate("flag == true") == "context.flag == True"

    def test_surrounding_whitespace_stripped(self) -> None:
        assert translate("  name  ") == "context.name"

    def test_already_qualified(self) -> None:
        assert translate("context.x") == "context.x"


class TestExcluded:
    """Loop-bound names are left alone, with their sub-paths."""

    def test_excluded_name(self) -> None:
        assert translate("item.price * qty", frozenset({"item"})) == "item.price * context.qty"

    def test_loop_name(self) -> None:
        assert translate("loop.index", {"loop"}) == "loop.index"

    def test_excluded_accepts_any_iterable(self) -> None:
        assert translate("a + b", ["a"]) == "a + context.b"


class TestDialect:
    """Dialect operators, literals and ``$`` variables."""

    def test_dollar_arrow(self) -> None:
        assert translate("$user->name && !$hidden") == "context.user.name and not context.hidden"

    def test_dollar_bracket_key(self) -> None:
        assert translate("$post['title']") == "context.post.title"

    def test_dollar_excluded(self) -> None:
        assert translate("$item->name", {"item"}) == "item.name"

    def test_strict_equality(self) -> None:
        assert translate("a === b") == "context.a == context.b"
        assert translate("a !== b") == "context.a != context.b"

    def test_or_operator(self) -> None:
        assert translate("a || b") == "context.a or context.b"

    def test_null_and_undefined(self) -> None:
        assert translate("x === null") == "context.x == None"
        assert translate("undefined") == "None"

    def test_booleans(self) -> None:
        assert translate("true && false") == "True and False"

    def test_python_keywords_reserved(self) -> None:
        assert translate("a if b else c") == "context.a if context.b else context.c"
        assert translate("x is not None") == "context.x is not None"

    def test_literal_name_after_dot_kept(self) -> None:
        assert translate("options.null") == "context.options.null"


class TestStrings:
    """String contents are never rewritten."""

    def test_single_quoted(self) -> None:
        assert translate("'hello world' + name") == "'hello world' + context.name"

    def test_operators_inside_string(self) -> None:
        assert translate('"a && b" + c') == '"a && b" + context.c'

    def test_escaped_quote(self) -> None:
        assert translate(r"'it\'s' + x") == r"'it\'s' + context.x"

    def test_numbers_untouched(self) -> None:
        assert translate("price * 1.5") == "context.price * 1.5"


class TestTranslatorProperties:
    """Invariants that hold for all inputs."""

    @given(expr=arbitrary_expression)
    @settings(max_examples=300)
    def test_never_raises(self, expr: str) -> None:
        assert isinstance(translate(expr), str)

    @given(path=dotted_path)
    def test_path_qualified_exactly_once(self, path: str) -> None:
        result = translate(path)
        assert result == f"context.{path}"
        assert result.count("context.") == 1

    @given(name=safe_identifier, path=dotted_path)
    def test_excluded_head_never_qualified(self, name: str, path: str) -> None:
        result = translate(f"{name}.{path}", {name})
        assert result == f"{name}.{path}"
