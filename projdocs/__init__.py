"""Read the source files of MSBuild solutions and projects as documents."""

from .context import ExecutionContext, RunCancelled
from .filesystem import FileHandle, LocalFileSystem
from .filters import FilterChain, WorkspaceFilters
from .models import Document, ProjectDocument, ProjectModel
from .paths import PathResolver
from .pipeline import ReadOutcome, ReadProject, ReadSolution, ReadWorkspace

__all__ = [
    "Document",
    "ExecutionContext",
    "FileHandle",
    "FilterChain",
    "LocalFileSystem",
    "PathResolver",
    "ProjectDocument",
    "ProjectModel",
    "ReadOutcome",
    "ReadProject",
    "ReadSolution",
    "ReadWorkspace",
    "RunCancelled",
    "WorkspaceFilters",
]
