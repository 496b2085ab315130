"""Fixtures for running the bladewire examples.

``example_app`` executes the ``app.py`` beside the requesting test in a
fresh module, so component ids and instance registries never leak from
one test into the next. Apps that expose a ``wire`` manager get it
cleaned up on teardown; ``example_wire`` hands that manager to tests
that drive components directly.
"""

from __future__ import annotations

import importlib.util
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType

import pytest

from bladewire import WireManager


def _load_app(test_path: Path) -> ModuleType:
    app_path = test_path.parent / "app.py"
    spec = importlib.util.spec_from_file_location(f"bladewire_example_{app_path.parent.name}", app_path)
    if spec is None or spec.loader is None:
        pytest.fail(f"cannot load example app: {app_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> Iterator[ModuleType]:
    module = _load_app(Path(request.path))
    yield module
    wire = getattr(module, "wire", None)
    if isinstance(wire, WireManager):
        wire.cleanup()


@pytest.fixture
def example_wire(example_app: ModuleType) -> WireManager:
    """The example's component manager; skips apps without one."""
    wire = getattr(example_app, "wire", None)
    if not isinstance(wire, WireManager):
        pytest.skip("example has no wire manager")
    return wire
