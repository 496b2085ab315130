"""Template loaders for the bladewire environment.

Loaders provide template source to the Environment. They implement
`get_source(name)` returning `(source, filename)` and `exists(name)`.

Built-in Loaders:
- `FileSystemLoader`: Load ``<root>/<name><extension>`` files
- `DictLoader`: Load from in-memory dictionary (testing/embedded)

Names are logical and path-like (``"layouts/app"``). Before resolution
every name goes through `normalize_name()`, which removes traversal
segments and leading separators so a name can never escape the root.

Thread-Safety:
Loaders should be thread-safe for concurrent `get_source()` calls.
Both built-in loaders are (files are read atomically, the dict mapping is
never mutated after construction).

"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from bladewire.environment.exceptions import TemplateNotFoundError

DEFAULT_EXTENSION = ".view"


def normalize_name(name: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Normalize a logical template name.

    Backslashes become ``/``, ``..`` and empty segments are dropped (which
    also strips leading separators), and a trailing ``extension`` is removed.

    Example:
        >>> normalize_name("/../users\\\\list.view")
        'users/list'
    """
    parts = [p for p in name.replace("\\", "/").split("/") if p and p not in ("..", ".")]
    normalized = "/".join(parts)
    if extension and normalized.endswith(extension):
        normalized = normalized[: -len(extension)]
    return normalized


class FileSystemLoader:
    """Load templates from filesystem directories.

    Searches one or more roots for ``<name><extension>``. The first
    matching file is returned.

    Example:
            >>> loader = FileSystemLoader("views/")
            >>> source, filename = loader.get_source("users/list")
            >>> print(filename)
            'views/users/list.view'

    Raises:
        TemplateNotFoundError: If the template is not found in any root

    """

    __slots__ = ("_encoding", "_extension", "_paths")

    def __init__(
        self,
        paths: str | Path | list[str | Path],
        extension: str = DEFAULT_EXTENSION,
        encoding: str = "utf-8",
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._extension = extension
        self._encoding = encoding

    @property
    def extension(self) -> str:
        return self._extension

    def _resolve(self, name: str) -> list[Path]:
        relative = normalize_name(name, self._extension) + self._extension
        return [base / relative for base in self._paths]

    def get_source(self, name: str) -> tuple[str, str]:
        """Load template source from filesystem."""
        candidates = self._resolve(name)
        for path in candidates:
            if path.is_file():
                return path.read_text(self._encoding), str(path)

        raise TemplateNotFoundError(
            f"Template not found: {', '.join(str(p) for p in candidates)}"
        )

    def exists(self, name: str) -> bool:
        return any(path.is_file() for path in self._resolve(name))

    def list_templates(self) -> list[str]:
        """List all template names in the search roots."""
        templates = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob(f"*{self._extension}"):
                    templates.add(normalize_name(path.relative_to(base).as_posix(), self._extension))
        return sorted(templates)


class DictLoader:
    """Load templates from an in-memory dictionary.

    Maps logical template names to source strings. Useful for testing,
    embedded templates, or generated templates.

    Note:
        Returns `None` as filename since templates are not file-backed.

    Example:
            >>> loader = DictLoader({
            ...     "layouts/app": "<main>@yield('body', 'empty')</main>",
            ...     "home": "@extends('layouts/app')@section('body')Hi@endsection",
            ... })
            >>> Environment(loader=loader).render("home")
            '<main>Hi</main>'

    """

    __slots__ = ("_extension", "_mapping")

    def __init__(self, mapping: Mapping[str, str], extension: str = DEFAULT_EXTENSION):
        self._extension = extension
        self._mapping = {normalize_name(k, extension): v for k, v in mapping.items()}

    @property
    def extension(self) -> str:
        return self._extension

    def get_source(self, name: str) -> tuple[str, None]:
        key = normalize_name(name, self._extension)
        if key in self._mapping:
            return self._mapping[key], None
        raise TemplateNotFoundError(f"Template not found: {key}")

    def exists(self, name: str) -> bool:
        return normalize_name(name, self._extension) in self._mapping

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class Loader(Protocol):
    """Interface the Environment expects from a loader."""

    @property
    def extension(self) -> str: ...

    def get_source(self, name: str) -> tuple[str, str | None]: ...

    def exists(self, name: str) -> bool: ...
