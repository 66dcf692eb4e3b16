"""Solution workspace strategy."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..filesystem import FileHandle
from ..logging import get_logger
from ..toolchain import parse_solution
from .base import LazyProject, ProjectSource, WorkspaceEnumerator

if TYPE_CHECKING:
    from ..context import ExecutionContext


class SolutionEnumerator(WorkspaceEnumerator):
    """Expands a solution descriptor into one lazily-built source per member project."""

    kind = "solution"

    def __init__(self) -> None:
        self.logger = get_logger("workspace.solution")

    def get_projects(self, context: "ExecutionContext", descriptor: FileHandle) -> List[ProjectSource]:
        entries = parse_solution(descriptor.path, descriptor.read_text())
        self.logger.debug("Solution %s lists %d projects", descriptor.path, len(entries))
        return [
            LazyProject(
                entry.name,
                context.file_system.get_input_file(entry.path).path,
                context.toolchain,
                context.build_adapter,
            )
            for entry in entries
        ]
