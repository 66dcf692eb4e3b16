"""Timed, logged project builds with failure classification."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .logging import get_logger
from .models import ProjectDocument, ProjectModel
from .toolchain import ProjectAnalyzer


@dataclass(frozen=True)
class BuildResult:
    """Successful build of a single project."""

    project_file: Path
    project_name: str
    assembly_name: str
    documents: Tuple[ProjectDocument, ...]
    succeeded: bool
    elapsed_ms: int

    def to_model(self) -> ProjectModel:
        return ProjectModel(
            name=self.project_name,
            assembly_name=self.assembly_name,
            project_file=self.project_file,
            documents=self.documents,
        )


class ProjectBuildAdapter:
    """Runs toolchain builds and turns failures into ``None`` instead of errors.

    Builds of the same project file are serialized because the toolchain writes
    into the project's output folders.
    """

    def __init__(self) -> None:
        self.logger = get_logger("build")
        self._locks: Dict[Path, threading.Lock] = {}
        self._guard = threading.Lock()
        self._failed: List[Path] = []

    @property
    def failed_projects(self) -> List[Path]:
        with self._guard:
            return list(self._failed)

    def build(self, analyzer: ProjectAnalyzer) -> Optional[BuildResult]:
        project_file = analyzer.project_file
        with self._lock_for(project_file):
            analyzer.log.seek(0)
            analyzer.log.truncate()
            self.logger.debug("Building project %s", project_file)
            started = time.perf_counter()
            artifacts = analyzer.build()
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            self.logger.debug("Project %s built in %d ms", project_file, elapsed_ms)
            artifact = next(iter(artifacts or ()), None)
            if artifact is None or not artifact.succeeded:
                with self._guard:
                    self._failed.append(project_file)
                self.logger.error("Could not compile project at %s", project_file)
                self.logger.warning("Build log for %s:\n%s", project_file, analyzer.log.getvalue().rstrip())
                return None

        project_name = artifact.project_name or project_file.stem
        return BuildResult(
            project_file=project_file,
            project_name=project_name,
            assembly_name=artifact.assembly_name or project_name,
            documents=tuple(artifact.documents),
            succeeded=True,
            elapsed_ms=elapsed_ms,
        )

    def _lock_for(self, project_file: Path) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(project_file)
            if lock is None:
                lock = threading.Lock()
                self._locks[project_file] = lock
            return lock


__all__ = ["BuildResult", "ProjectBuildAdapter"]
