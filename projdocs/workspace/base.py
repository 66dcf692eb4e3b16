"""Base classes for workspace enumeration strategies."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

from ..build import ProjectBuildAdapter
from ..filesystem import FileHandle
from ..models import ProjectModel
from ..toolchain import Toolchain

if TYPE_CHECKING:
    from ..context import ExecutionContext


class ProjectSource(ABC):
    """A project known by name whose model may still need a build."""

    name: str

    @abstractmethod
    def load(self) -> Optional[ProjectModel]:
        """Return the project model, or ``None`` when it cannot be produced."""


class PreparedProject(ProjectSource):
    """A project model that is already available; nothing gets built."""

    def __init__(self, model: ProjectModel) -> None:
        self.name = model.name
        self._model = model

    def load(self) -> Optional[ProjectModel]:
        return self._model

    def __repr__(self) -> str:
        return f"PreparedProject({self.name!r})"


class LazyProject(ProjectSource):
    """Builds its project on first :meth:`load` and remembers the outcome."""

    def __init__(
        self,
        name: str,
        project_file: Path,
        toolchain: Toolchain,
        adapter: ProjectBuildAdapter,
    ) -> None:
        self.name = name
        self.project_file = project_file
        self._toolchain = toolchain
        self._adapter = adapter
        self._lock = threading.Lock()
        self._loaded = False
        self._model: Optional[ProjectModel] = None

    def load(self) -> Optional[ProjectModel]:
        with self._lock:
            if not self._loaded:
                result = self._adapter.build(self._toolchain.analyze(self.project_file))
                self._model = result.to_model() if result is not None else None
                self._loaded = True
            return self._model

    def __repr__(self) -> str:
        return f"LazyProject({self.name!r}, {str(self.project_file)!r})"


class WorkspaceEnumerator(ABC):
    """Contract for turning a workspace descriptor into project sources."""

    kind: str

    @abstractmethod
    def get_projects(
        self, context: "ExecutionContext", descriptor: FileHandle
    ) -> Sequence[ProjectSource]:
        """Return the projects the descriptor stands for, without building them."""
