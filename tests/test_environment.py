"""Tests for Environment: loaders, caching, name normalization and config."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from bladewire import DictLoader, Environment, FileSystemLoader, Template, TemplateNotFoundError
from bladewire.environment import normalize_name


class TestNormalizeName:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("pages/home", "pages/home"),
            ("pages/home.view", "pages/home"),
            ("\\pages\\home", "pages/home"),
            ("/../../etc/passwd", "etc/passwd"),
            ("./a//b/", "a/b"),
        ],
    )
    def test_normalize(self, name: str, expected: str) -> None:
        assert normalize_name(name) == expected

    def test_lookup_uses_normalized_name(self, env_with_loader: Environment) -> None:
        assert env_with_loader.render("/partials\\greeting.view", name="x") == "Hello, x!"


class TestLoaders:
    def test_filesystem_loader(self, tmp_path: Path) -> None:
        (tmp_path / "pages").mkdir()
        (tmp_path / "pages" / "home.view").write_text("Hi ${name}", encoding="utf-8")
        env = Environment(loader=FileSystemLoader(tmp_path))
        assert env.exists("pages/home")
        assert not env.exists("pages/missing")
        assert env.render("pages/home", {"name": "Ada"}) == "Hi Ada"
        assert env.get_template("pages/home").filename == str(tmp_path / "pages" / "home.view")

    def test_filesystem_search_order(self, tmp_path: Path) -> None:
        first, second = tmp_path / "a", tmp_path / "b"
        first.mkdir()
        second.mkdir()
        (first / "t.view").write_text("first")
        (second / "t.view").write_text("second")
        (second / "only.view").write_text("only")
        env = Environment(loader=FileSystemLoader([first, second]))
        assert env.render("t") == "first"
        assert env.render("only") == "only"

    def test_filesystem_missing_names_path(self, tmp_path: Path) -> None:
        env = Environment(loader=FileSystemLoader(tmp_path))
        with pytest.raises(TemplateNotFoundError, match="nope.view"):
            env.get_template("nope")

    def test_custom_extension(self, tmp_path: Path) -> None:
        (tmp_path / "page.blade.html").write_text("ok")
        env = Environment(loader=FileSystemLoader(tmp_path, extension=".blade.html"))
        assert env.render("page") == "ok"

    def test_list_templates(self, tmp_path: Path) -> None:
        (tmp_path / "x").mkdir()
        (tmp_path / "x" / "a.view").write_text("")
        (tmp_path / "b.view").write_text("")
        assert FileSystemLoader(tmp_path).list_templates() == ["b", "x/a"]
        assert DictLoader({"b": "", "x/a.view": ""}).list_templates() == ["b", "x/a"]

    def test_no_loader(self, env: Environment) -> None:
        assert env.exists("anything") is False
        with pytest.raises(TemplateNotFoundError, match="no loader"):
            env.get_template("anything")


class TestCache:
    def test_cached_until_cleared(self, env_with_loader: Environment) -> None:
        first = env_with_loader.get_template("partials/greeting")
        assert env_with_loader.get_template("partials/greeting") is first
        env_with_loader.clear_cache()
        assert env_with_loader.get_template("partials/greeting") is not first

    def test_cache_disabled(self, templates: dict[str, str]) -> None:
        env = Environment(loader=DictLoader(templates), cache=False)
        assert env.get_template("partials/greeting") is not env.get_template("partials/greeting")

    def test_from_string_not_cached(self, env: Environment) -> None:
        assert env.from_string("x") is not env.from_string("x")

    def test_cache_logging(
        self, env_with_loader: Environment, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="bladewire.environment.core"):
            env_with_loader.get_template("partials/nav")
            env_with_loader.get_template("partials/nav")
        messages = [r.getMessage() for r in caplog.records]
        assert "Template cache miss: partials/nav" in messages
        assert "Template cache hit: partials/nav" in messages

    def test_concurrent_renders(self, env_with_loader: Environment) -> None:
        def render(i: int) -> str:
            return env_with_loader.render("partials/greeting", name=str(i))

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(render, range(64)))
        assert results == [f"Hello, {i}!" for i in range(64)]


class TestRender:
    def test_name_is_a_template_variable(self) -> None:
        env = Environment(loader=DictLoader({"hello": "Hello, {{ name }}!"}))
        assert env.render("hello", name="Ada") == "Hello, Ada!"

    def test_keywords_override_mapping(self) -> None:
        env = Environment(loader=DictLoader({"hello": "Hello, {{ name }}!"}))
        assert env.render("hello", {"name": "Bo"}, name="Ada") == "Hello, Ada!"


class TestCompilePipeline:
    def test_parse_then_compile(self, env: Environment) -> None:
        parsed = env.parse("Hi ${name}", name="greeting")
        template = env.compile(parsed, name="greeting")
        assert isinstance(template, Template)
        assert template.parsed is parsed
        assert template.render(name="Ada") == "Hi Ada"

    def test_template_repr(self, env: Environment) -> None:
        assert repr(env.from_string("x", name="t")) == "<Template t>"
        assert repr(env.from_string("x")) == "<Template (inline)>"
