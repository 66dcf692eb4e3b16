"""Single project workspace strategy."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..filesystem import FileHandle
from .base import LazyProject, ProjectSource, WorkspaceEnumerator

if TYPE_CHECKING:
    from ..context import ExecutionContext


class ProjectEnumerator(WorkspaceEnumerator):
    """Treats the descriptor itself as the one project in the workspace."""

    kind = "project"

    def get_projects(self, context: "ExecutionContext", descriptor: FileHandle) -> List[ProjectSource]:
        return [
            LazyProject(
                descriptor.path.stem,
                descriptor.path,
                context.toolchain,
                context.build_adapter,
            )
        ]
