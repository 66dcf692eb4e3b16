from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from projdocs.context import ExecutionContext
from tests._fixtures.workspace_builder import FakeToolchain, WorkspaceBuilder


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a workspace builder rooted at the pytest tmp_path."""
    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def toolchain() -> FakeToolchain:
    return FakeToolchain()


@pytest.fixture
def context(workspace: WorkspaceBuilder, toolchain: FakeToolchain) -> ExecutionContext:
    """Execution context over ``workspace/input`` with the fake toolchain."""
    return ExecutionContext(file_system=workspace.file_system(), toolchain=toolchain, max_workers=2)


@pytest.fixture(autouse=True)
def _restore_projdocs_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog keeps seeing projdocs records."""
    yield
    logger = logging.getLogger("projdocs")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
