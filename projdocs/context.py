"""Execution context shared by every branch of a workspace read."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional

from .build import ProjectBuildAdapter
from .filesystem import LocalFileSystem
from .toolchain import MSBuildToolchain, Toolchain

DEFAULT_MAX_WORKERS = 4


class RunCancelled(RuntimeError):
    """Raised when a run is aborted through its cancellation event."""


@dataclass
class ExecutionContext:
    """Collaborators and limits for one pipeline run."""

    file_system: LocalFileSystem = field(default_factory=LocalFileSystem)
    toolchain: Toolchain = field(default_factory=MSBuildToolchain)
    # None gives every run its own adapter.
    build_adapter: Optional[ProjectBuildAdapter] = None
    max_workers: int = DEFAULT_MAX_WORKERS
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancel_event.is_set():
            raise RunCancelled("Workspace read cancelled")


__all__ = ["DEFAULT_MAX_WORKERS", "ExecutionContext", "RunCancelled"]
