"""Tests for @include: inlining, key substitution and leniency."""

from __future__ import annotations

import logging

import pytest

from bladewire import DictLoader, Environment, ErrorCode, TemplateSyntaxError


class TestInclude:
    def test_key_substitution(self, env_with_loader: Environment) -> None:
        tmpl = env_with_loader.from_string("@include('partials/nav', [brand => 'Acme'])")
        assert tmpl.render() == "<nav>Acme</nav>"

    def test_shares_render_data(self, env_with_loader: Environment) -> None:
        tmpl = env_with_loader.from_string("@include('partials/greeting')")
        assert tmpl.render(name="<Bob>") == "Hello, &lt;Bob&gt;!"

    def test_loop_variable_prop(self, env_with_loader: Environment) -> None:
        tmpl = env_with_loader.from_string(
            "@foreach(users as u)@include('partials/nav', [brand => u])@endforeach"
        )
        assert tmpl.render(users=["A", "B"]) == "<nav>A</nav><nav>B</nav>"

    def test_included_directives_take_part(self) -> None:
        env = Environment(
            loader=DictLoader({"row": "@foreach(xs as x)<td>${x}</td>@endforeach"})
        )
        assert env.from_string("<tr>@include('row')</tr>").render(xs=[1, 2]) == (
            "<tr><td>1</td><td>2</td></tr>"
        )

    def test_missing_include_renders_empty(
        self, env_with_loader: Environment, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="bladewire"):
            result = env_with_loader.from_string("a@include('partials/none')b").render()
        assert result == "ab"
        assert "partials/none" in caplog.text

    def test_recursive_include_is_syntax_error(self, env_with_loader: Environment) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            env_with_loader.get_template("partials/self")
        assert exc_info.value.code is ErrorCode.INCLUDE_DEPTH

    def test_depth_limit_follows_environment(self) -> None:
        env = Environment(
            loader=DictLoader({"a": "@include('b')", "b": "@include('c')", "c": "deep"}),
            max_include_depth=1,
        )
        with pytest.raises(TemplateSyntaxError):
            env.render("a")
