"""Pytest configuration and fixtures for bladewire tests."""

import pytest

from bladewire import DictLoader, Environment


@pytest.fixture
def env():
    """Create a basic bladewire Environment (no loader)."""
    return Environment()


@pytest.fixture
def templates() -> dict[str, str]:
    """Template sources shared by layout, include and component tests."""
    return {
        "layouts/base": (
            "<html><head><title>@yield('title', 'Untitled')</title></head>"
            "<body>@content<footer>@yield('footer')</footer></body></html>"
        ),
        "layouts/page": (
            "@extends('layouts/base')"
            "@section('title')Page@endsection"
            "<main>@content</main>"
        ),
        "pages/home": (
            "@extends('layouts/base')"
            "@section('title'){{ title }}@endsection"
            "<h1>Home</h1>"
        ),
        "pages/about": (
            "@extends('layouts/page')"
            "@section('title')About@endsection"
            "<h1>About</h1>"
        ),
        "partials/nav": "<nav>${brand}</nav>",
        "partials/greeting": "Hello, {{ name }}!",
        "partials/self": "@include('partials/self')",
        "components/card": (
            "<div class=\"card\"><h2>{{ title }}</h2>{!! slot !!}"
            "<footer>{!! footer !!}</footer></div>"
        ),
        "components/counter": (
            "<div><span>{{ count }}</span>"
            "<button (click)=\"increment\">+</button></div>"
        ),
    }


@pytest.fixture
def env_with_loader(templates: dict[str, str]):
    """Create an Environment with a DictLoader holding the shared templates."""
    return Environment(loader=DictLoader(templates))


def assert_contains(result: str, *expected_parts: str) -> None:
    """Assert the rendered result contains all expected parts."""
    for part in expected_parts:
        assert part in result, (
            f"Template output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {result!r}"
        )


@pytest.fixture
def wire_env():
    """Environment holding the component views used by the wire tests."""
    from .components import COMPONENT_VIEWS

    return Environment(loader=DictLoader(COMPONENT_VIEWS))


@pytest.fixture
def wire(wire_env):
    """WireManager with the test component types registered."""
    from bladewire import Param, WireManager

    from .components import Counter, Loader, Todo

    manager = WireManager(wire_env, poll_interval=0.005)
    manager.register("Counter", Counter, params=[Param("start", 0)])
    manager.register("Todo", Todo, params=["initial_title", Param("items", None)])
    manager.register("Loader", Loader, params=["delay"])
    return manager
