"""Tests for compiled rendering: output, control flow, loops and helpers."""

from __future__ import annotations

import ast

import pytest
from hypothesis import given, settings

from bladewire import Environment, Markup, ReservedKeyError, TemplateRuntimeError
from bladewire.compiler import Compiler, EmitExpression, EmitLiteral
from bladewire.parser import parse

from .strategies import plain_text


class TestIdentity:
    @given(text=plain_text)
    @settings(max_examples=200)
    def test_plain_text_renders_to_itself(self, text: str) -> None:
        """A template with no directives or interpolations is its own output."""
        assert Environment().from_string(text).render() == text

    def test_empty_template(self, env: Environment) -> None:
        assert env.from_string("").render() == ""


class TestOutput:
    def test_interpolation(self, env: Environment) -> None:
        assert env.from_string("Count: ${count}").render(count=3) == "Count: 3"

    def test_escaped(self, env: Environment) -> None:
        assert env.from_string("{{ v }}").render(v="<b>it's</b>") == "&lt;b&gt;it&#x27;s&lt;/b&gt;"

    def test_raw(self, env: Environment) -> None:
        assert env.from_string("{!! v !!}").render(v="<b>") == "<b>"

    def test_markup_not_escaped_twice(self, env: Environment) -> None:
        assert env.from_string("{{ v }}").render(v=Markup("<b>ok</b>")) == "<b>ok</b>"

    def test_none_and_missing_render_empty(self, env: Environment) -> None:
        assert env.from_string("[{{ a }}][${b}][${c.d.e}]").render(a=None) == "[][][]"

    def test_host_stringification(self, env: Environment) -> None:
        assert env.from_string("${flag} ${n} ${x}").render(flag=True, n=0, x=1.5) == "True 0 1.5"

    def test_dict_keys_win_over_methods(self, env: Environment) -> None:
        assert env.from_string("${data.items}").render(data={"items": 5}) == "5"

    def test_object_attributes(self, env: Environment) -> None:
        class User:
            name = "Ada"

        assert env.from_string("${user.name}").render(user=User()) == "Ada"

    def test_dollar_dialect(self, env: Environment) -> None:
        tmpl = env.from_string("${$user->name}@if($user->admin && !$banned)*@endif")
        assert tmpl.render(user={"name": "Ada", "admin": True}, banned=False) == "Ada*"

    def test_multiline_expression(self, env: Environment) -> None:
        assert env.from_string("{{ a\n + b }}").render(a=1, b=2) == "3"

    def test_positional_mapping_and_kwargs(self, env: Environment) -> None:
        assert env.from_string("${a}${b}").render({"a": 1}, b=2) == "12"


class TestConditionals:
    @pytest.mark.parametrize(
        ("show", "expected"),
        [(True, "A"), (False, " B")],
    )
    def test_if_else(self, env: Environment, show: bool, expected: str) -> None:
        assert env.from_string("@if(show)A@else B@endif").render(show=show) == expected

    @pytest.mark.parametrize(
        ("n", "expected"),
        [(0, "zero"), (1, "one"), (5, "many")],
    )
    def test_elseif_chain(self, env: Environment, n: int, expected: str) -> None:
        tmpl = env.from_string("@if(n === 0)zero@elseif(n == 1)one@else many@endif")
        assert tmpl.render(n=n).strip() == expected

    def test_if_without_else_renders_nothing(self, env: Environment) -> None:
        assert env.from_string("[@if(x)yes@endif]").render(x=False) == "[]"

    def test_nested(self, env: Environment) -> None:
        tmpl = env.from_string("@if(a)@if(b)AB@else A@endif@endif")
        assert tmpl.render(a=True, b=True) == "AB"
        assert tmpl.render(a=True, b=False) == " A"
        assert tmpl.render(a=False, b=True) == ""


class TestLoops:
    def test_sequence(self, env: Environment) -> None:
        tmpl = env.from_string("@foreach(items as item)<li>{{ item }}</li>@endforeach")
        assert tmpl.render(items=["a", "<b>"]) == "<li>a</li><li>&lt;b&gt;</li>"

    @pytest.mark.parametrize("items", [[], None, ()])
    def test_empty_or_none(self, env: Environment, items: object) -> None:
        assert env.from_string("@foreach(items as item)x@endforeach").render(items=items) == ""

    def test_loop_context(self, env: Environment) -> None:
        tmpl = env.from_string(
            "@foreach(items as item)${loop.iteration}:${item}@if(!loop.last),@endif@endforeach"
        )
        assert tmpl.render(items=["a", "b", "c"]) == "1:a,2:b,3:c"

    def test_loop_index_is_zero_based(self, env: Environment) -> None:
        tmpl = env.from_string("@foreach(xs as x)${loop.index}/${loop.count} @endforeach")
        assert tmpl.render(xs="ab") == "0/2 1/2 "

    def test_mapping_values(self, env: Environment) -> None:
        tmpl = env.from_string("@foreach(m as v)${v}@endforeach")
        assert tmpl.render(m={"a": 1, "b": 2}) == "12"

    def test_mapping_key_value(self, env: Environment) -> None:
        tmpl = env.from_string("@foreach(scores as name => score)${name}=${score};@endforeach")
        assert tmpl.render(scores={"a": 1, "b": 2}) == "a=1;b=2;"

    def test_sequence_key_is_index(self, env: Environment) -> None:
        tmpl = env.from_string("@foreach(xs as i => x)${i}${x}@endforeach")
        assert tmpl.render(xs=["a", "b"]) == "0a1b"

    def test_loop_names_shadow_context_only_inside_body(self, env: Environment) -> None:
        tmpl = env.from_string("@foreach(items as item)${item}@endforeach|${item}")
        assert tmpl.render(items=[1, 2], item="outer") == "12|outer"

    def test_nested_loops(self, env: Environment) -> None:
        tmpl = env.from_string(
            "@foreach(rows as row)[@foreach(row.cells as cell)${row.id}${cell}@endforeach]@endforeach"
        )
        rows = [{"id": "r", "cells": [1, 2]}, {"id": "s", "cells": []}]
        assert tmpl.render(rows=rows) == "[r1r2][]"


class TestHelpers:
    def test_default_globals(self, env: Environment) -> None:
        tmpl = env.from_string("${count(items)} ${isset(x)} ${empty(items)} ${max(1, 4)}")
        assert tmpl.render(items=[1, 2]) == "2 False False 4"

    def test_json_is_markup(self, env: Environment) -> None:
        assert env.from_string("{{ json(data) }}").render(data={"a": "</script>"}) == (
            '{"a": "<\\/script>"}'
        )

    def test_custom_globals(self) -> None:
        env = Environment(globals={"shout": lambda s: s.upper()})
        assert env.from_string("${shout(name)}").render(name="hi") == "HI"

    def test_builtins_unavailable(self, env: Environment) -> None:
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.from_string("${open('/etc/passwd')}").render()
        assert "NameError" in str(exc_info.value)
        assert "globals" in (exc_info.value.suggestion or "")

    def test_markup_constructor_unavailable(self, env: Environment) -> None:
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.from_string("{{ _Markup(html) }}").render(html="<b>")
        assert "NameError" in str(exc_info.value)


class TestDeferredErrors:
    def test_malformed_expression_in_dead_branch(self, env: Environment) -> None:
        assert env.from_string("@if(false){{ a + }}@endif ok").render() == " ok"

    def test_malformed_expression_raises_when_run(self, env: Environment) -> None:
        with pytest.raises(TemplateRuntimeError, match="Invalid expression"):
            env.from_string("{{ a + }}", name="broken").render()


class TestReservedKeys:
    @pytest.mark.parametrize("key", ["_content", "_sections"])
    def test_rejected(self, env: Environment, key: str) -> None:
        with pytest.raises(ReservedKeyError) as exc_info:
            env.from_string("x", name="page").render({key: "user data"})
        assert exc_info.value.keys == frozenset({key})
        assert "page" in str(exc_info.value)


class TestLowering:
    """The linear operation list produced before code generation."""

    def test_literal_and_expression_ops(self) -> None:
        root = Compiler().lower(parse("a${x}b"))
        assert [type(op) for op in root.ops] == [EmitLiteral, EmitExpression, EmitLiteral]
        assert root.ops[1].escape is False

    def test_adjacent_literals_coalesce(self) -> None:
        root = Compiler().lower(parse("a{{-- note --}}b"))
        assert root.ops == [EmitLiteral("ab")]

    def test_literal_branches_fold_to_constants(self) -> None:
        root = Compiler().lower(parse("@if(x)yes@endif"))
        (op,) = root.ops
        assert isinstance(op.value, ast.IfExp)
        assert isinstance(op.value.body, ast.Constant)
        assert op.value.body.value == "yes"

    def test_loop_body_takes_bound_names(self) -> None:
        root = Compiler().lower(parse("@foreach(m as k => v)${k}@endforeach"))
        (fragment,) = root.children
        assert fragment.params == ("k", "v", "loop")
