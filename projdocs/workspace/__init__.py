"""Workspace enumeration strategies: a solution or a single project."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Literal

from .base import LazyProject, PreparedProject, ProjectSource, WorkspaceEnumerator
from .project import ProjectEnumerator
from .solution import SolutionEnumerator

WorkspaceKind = Literal["solution", "project"]

SOLUTION_EXTENSIONS = frozenset({".sln", ".slnx"})

_ENUMERATORS: Dict[str, type[WorkspaceEnumerator]] = {
    "solution": SolutionEnumerator,
    "project": ProjectEnumerator,
}


def detect_kind(path: Path) -> WorkspaceKind:
    """Guess the workspace kind from the descriptor's extension."""
    if path.suffix.lower() in SOLUTION_EXTENSIONS:
        return "solution"
    return "project"


def enumerator_for(kind: str) -> WorkspaceEnumerator:
    """Return the strategy for ``kind``; only ``solution`` and ``project`` exist."""
    factory = _ENUMERATORS.get(kind.lower())
    if factory is None:
        raise ValueError(f"Unknown workspace kind '{kind}' (expected 'solution' or 'project')")
    return factory()


__all__ = [
    "LazyProject",
    "PreparedProject",
    "ProjectEnumerator",
    "ProjectSource",
    "SOLUTION_EXTENSIONS",
    "SolutionEnumerator",
    "WorkspaceEnumerator",
    "WorkspaceKind",
    "detect_kind",
    "enumerator_for",
]
