"""Project and source file filters applied while reading a workspace."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .filesystem import FileHandle

ProjectPredicate = Callable[[str], bool]
FilePredicate = Callable[[FileHandle], bool]


def normalize_extension(extension: str) -> str:
    """Return ``extension`` with a leading dot."""
    extension = extension.strip()
    return extension if extension.startswith(".") else f".{extension}"


@dataclass(frozen=True)
class WorkspaceFilters:
    """Frozen filter configuration read by a pipeline run."""

    project_predicates: Tuple[ProjectPredicate, ...] = ()
    file_predicates: Tuple[FilePredicate, ...] = ()
    extensions: Optional[FrozenSet[str]] = None

    def accepts_project(self, name: str) -> bool:
        return all(predicate(name) for predicate in self.project_predicates)

    def accepts_extension(self, extension: str) -> bool:
        if not self.extensions:
            return True
        return extension in self.extensions

    def accepts_file(self, handle: FileHandle) -> bool:
        """Existence, registered predicates and the extension list, in that order."""
        if not handle.exists():
            return False
        if not all(predicate(handle) for predicate in self.file_predicates):
            return False
        return self.accepts_extension(handle.path.suffix)


class FilterChain:
    """Fluent builder for :class:`WorkspaceFilters`.

    Every call adds to what was registered before: predicates of the same kind
    are combined with logical AND and extension lists are merged.
    """

    def __init__(self) -> None:
        self._project_predicates: List[ProjectPredicate] = []
        self._file_predicates: List[FilePredicate] = []
        self._extensions: Optional[List[str]] = None

    def where_project(self, predicate: ProjectPredicate) -> "FilterChain":
        """Keep only projects whose name satisfies ``predicate``."""
        self._project_predicates.append(predicate)
        return self

    def where_file(self, predicate: FilePredicate) -> "FilterChain":
        """Keep only source files whose handle satisfies ``predicate``."""
        self._file_predicates.append(predicate)
        return self

    def with_extensions(self, *extensions: str) -> "FilterChain":
        """Restrict source files to the given extensions (with or without the dot)."""
        if self._extensions is None:
            self._extensions = []
        for extension in extensions:
            normalized = normalize_extension(extension)
            if normalized != "." and normalized not in self._extensions:
                self._extensions.append(normalized)
        return self

    def freeze(self) -> WorkspaceFilters:
        return WorkspaceFilters(
            project_predicates=tuple(self._project_predicates),
            file_predicates=tuple(self._file_predicates),
            extensions=frozenset(self._extensions) if self._extensions is not None else None,
        )


def project_globs(
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
) -> ProjectPredicate:
    """Build a project name predicate from include/exclude glob patterns."""
    include_patterns = [pattern for pattern in (include or []) if pattern]
    exclude_patterns = [pattern for pattern in (exclude or []) if pattern]

    def _predicate(name: str) -> bool:
        if include_patterns and not _matches_any(name, include_patterns):
            return False
        return not _matches_any(name, exclude_patterns)

    return _predicate


def file_globs(exclude: Sequence[str]) -> FilePredicate:
    """Build a file predicate rejecting paths that match any glob in ``exclude``."""
    patterns = [pattern for pattern in exclude if pattern]

    def _predicate(handle: FileHandle) -> bool:
        posix = handle.path.as_posix()
        if _matches_any(posix, patterns):
            return False
        return not _matches_any(handle.path.name, patterns)

    return _predicate


def _matches_any(value: str, patterns: Iterable[str]) -> bool:
    return any(fnmatchcase(value, pattern) for pattern in patterns)


__all__ = [
    "FilePredicate",
    "FilterChain",
    "ProjectPredicate",
    "WorkspaceFilters",
    "file_globs",
    "normalize_extension",
    "project_globs",
]
