"""Per-document resolution of the workspace descriptor to read."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Union

from jinja2 import Environment

from .models import Document, ProjectModel

if TYPE_CHECKING:
    from .context import ExecutionContext

Locator = Union[Path, ProjectModel]
LocatorFunc = Callable[[Document, "ExecutionContext"], Union[Path, str, ProjectModel, None]]

_TEMPLATE_ENV = Environment(autoescape=False, keep_trailing_newline=False)


class PathResolver:
    """Turns an input document into a descriptor path, a prepared project, or ``None``."""

    def __init__(self, func: LocatorFunc, description: str) -> None:
        self._func = func
        self.description = description

    def resolve(self, document: Document, context: "ExecutionContext") -> Optional[Locator]:
        return _coerce_locator(self._func(document, context))

    @classmethod
    def constant(cls, value: Union[Path, str, ProjectModel]) -> "PathResolver":
        locator = _coerce_locator(value)
        return cls(lambda _document, _context: locator, f"constant {value}")

    @classmethod
    def from_callable(cls, func: LocatorFunc) -> "PathResolver":
        name = getattr(func, "__qualname__", None) or repr(func)
        return cls(func, f"callable {name}")

    @classmethod
    def template(cls, source: str) -> "PathResolver":
        """Render ``source`` as a Jinja2 template against each document's metadata.

        The metadata keys are available as variables alongside ``source`` (the
        document's own path) and ``document``. A blank rendering means no workspace.
        """
        compiled = _TEMPLATE_ENV.from_string(source)

        def _render(document: Document, _context: "ExecutionContext") -> str:
            variables: Dict[str, Any] = dict(document.metadata)
            variables["source"] = document.source
            variables["document"] = document
            return compiled.render(**variables)

        return cls(_render, f"template {source!r}")

    @classmethod
    def coerce(cls, value: Any) -> "PathResolver":
        """Accept a resolver, a callable, a template string, a path, or a project model."""
        if value is None:
            raise ValueError("A workspace path is required")
        if isinstance(value, PathResolver):
            return value
        if isinstance(value, str) and "{{" in value:
            return cls.template(value)
        if isinstance(value, (str, Path, ProjectModel)):
            return cls.constant(value)
        if callable(value):
            return cls.from_callable(value)
        raise TypeError(f"Unsupported workspace path expression: {value!r}")

    def __repr__(self) -> str:
        return f"PathResolver({self.description})"


def _coerce_locator(value: Union[Path, str, ProjectModel, None]) -> Optional[Locator]:
    if value is None or isinstance(value, ProjectModel):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        return Path(value)
    if isinstance(value, Path):
        return value
    raise TypeError(f"Path expression returned unsupported value {value!r}")


__all__ = ["Locator", "LocatorFunc", "PathResolver"]
