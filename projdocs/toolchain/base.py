"""Contracts between the build adapter and a build toolchain."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from ..models import BuildArtifact


@runtime_checkable
class ProjectAnalyzer(Protocol):
    """Builds one project and keeps the build output in ``log``."""

    project_file: Path
    log: io.StringIO

    def build(self) -> Sequence[BuildArtifact]:
        """Run the build and return the artifacts, first one wins; empty on failure."""
        ...


@runtime_checkable
class Toolchain(Protocol):
    """Hands out analyzers for project descriptors."""

    def analyze(self, project_file: Path) -> ProjectAnalyzer:
        ...
