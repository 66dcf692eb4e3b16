"""Core data models shared across projdocs components."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from types import MappingProxyType
from typing import Any, BinaryIO, Dict, Mapping, Optional, Protocol, Tuple

_IDENTITY_LIMIT = 80


class ContentProvider(Protocol):
    """Anything that can open a fresh binary stream over a document body."""

    def open(self) -> BinaryIO:
        ...


class FileContentProvider:
    """Defers reading a file until a consumer asks for the document body."""

    def __init__(self, handle: ContentProvider) -> None:
        self._handle = handle

    def open(self) -> BinaryIO:
        return self._handle.open()

    def __repr__(self) -> str:
        return f"FileContentProvider({self._handle!r})"


@dataclass(frozen=True)
class Document:
    """Immutable metadata record with a lazily-read body."""

    source: Optional[Path] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    content_provider: Optional[ContentProvider] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def __hash__(self) -> int:
        # Metadata values may be unhashable; equal documents still share source and keys.
        return hash((self.source, tuple(sorted(self.metadata))))

    def __getitem__(self, key: str) -> Any:
        return self.metadata[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    @property
    def identity(self) -> str:
        """Human readable name used when tracing failures for this document."""
        if self.source is not None:
            return str(self.source)
        if not self.metadata:
            return "<document>"
        summary = ", ".join(f"{key}={value!r}" for key, value in sorted(self.metadata.items()))
        if len(summary) > _IDENTITY_LIMIT:
            summary = summary[: _IDENTITY_LIMIT - 3] + "..."
        return f"<document {summary}>"

    def open(self) -> BinaryIO:
        if self.content_provider is None:
            return io.BytesIO(b"")
        return self.content_provider.open()

    @property
    def content(self) -> str:
        with self.open() as stream:
            return stream.read().decode("utf-8-sig", errors="replace")

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly view of the source and metadata."""
        metadata = {
            key: str(value) if isinstance(value, PurePath) else value
            for key, value in self.metadata.items()
        }
        return {
            "source": str(self.source) if self.source is not None else None,
            "metadata": metadata,
        }


@dataclass(frozen=True)
class ProjectDocument:
    """A single source entry listed by a compiled project."""

    path: str
    is_generated: bool = False


@dataclass(frozen=True)
class ProjectModel:
    """In-memory view of one compiled project."""

    name: str
    assembly_name: str
    project_file: Optional[Path] = None
    documents: Tuple[ProjectDocument, ...] = ()


@dataclass(frozen=True)
class BuildArtifact:
    """What the toolchain reports back for one build of a project."""

    project_file: Path
    succeeded: bool
    assembly_name: Optional[str] = None
    project_name: Optional[str] = None
    documents: Tuple[ProjectDocument, ...] = ()


__all__ = [
    "BuildArtifact",
    "ContentProvider",
    "Document",
    "FileContentProvider",
    "ProjectDocument",
    "ProjectModel",
]
