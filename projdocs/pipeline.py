"""Pipeline orchestration for reading source documents out of a workspace."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar

from .build import ProjectBuildAdapter
from .config import ConfigError, ProjectDocsConfig
from .context import ExecutionContext, RunCancelled
from .filesystem import FileHandle, LocalFileSystem
from .filters import (
    FilePredicate,
    FilterChain,
    ProjectPredicate,
    WorkspaceFilters,
    file_globs,
    project_globs,
)
from .logging import get_logger
from .materializer import DocumentMaterializer
from .models import Document, ProjectModel
from .paths import PathResolver
from .toolchain import MSBuildToolchain
from .workspace import PreparedProject, ProjectSource, WorkspaceKind, detect_kind, enumerator_for

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class InputFailure:
    """An input whose branch raised; it contributed no documents."""

    identity: str
    error: str


@dataclass
class ReadOutcome:
    """Documents produced by a run plus the tally of what went wrong."""

    documents: List[Document] = field(default_factory=list)
    failures: List[InputFailure] = field(default_factory=list)
    failed_projects: List[Path] = field(default_factory=list)
    inputs_total: int = 0
    inputs_empty: int = 0

    @property
    def inputs_failed(self) -> int:
        return len(self.failures)

    @property
    def succeeded(self) -> bool:
        return not self.failures and not self.failed_projects


@dataclass
class _Run:
    context: ExecutionContext
    filters: WorkspaceFilters
    project_pool: Executor
    file_pool: Executor


class ReadWorkspace:
    """Reads an MSBuild solution or project and returns its source files as documents.

    ``path`` is evaluated once per input document and may be a constant path, a
    Jinja2 template over the input's metadata, a callable, or a
    :class:`~projdocs.pipeline.PathResolver`. Inputs whose path evaluates to
    ``None`` contribute nothing. When ``kind`` is omitted it is picked from the
    descriptor's extension.
    """

    kind: Optional[WorkspaceKind] = None

    def __init__(self, path: Any, *, kind: Optional[WorkspaceKind] = None) -> None:
        if path is None:
            raise ValueError("ReadWorkspace requires a path")
        self._resolver = PathResolver.coerce(path)
        if kind is not None:
            enumerator_for(kind)
            self.kind = kind.lower()  # type: ignore[assignment]
        self._chain = FilterChain()
        self.logger = get_logger("pipeline")

    def where_project(self, predicate: ProjectPredicate) -> "ReadWorkspace":
        """Filters projects by name; repeated calls must all pass."""
        self._chain.where_project(predicate)
        return self

    def where_file(self, predicate: FilePredicate) -> "ReadWorkspace":
        """Filters source files by handle; repeated calls must all pass."""
        self._chain.where_file(predicate)
        return self

    def with_extensions(self, *extensions: str) -> "ReadWorkspace":
        """Keeps only source files with one of the extensions (cumulative)."""
        self._chain.with_extensions(*extensions)
        return self

    @property
    def filters(self) -> WorkspaceFilters:
        return self._chain.freeze()

    def execute(
        self,
        inputs: Optional[Iterable[Document]] = None,
        context: Optional[ExecutionContext] = None,
    ) -> List[Document]:
        """Return the documents for every input; failures are only logged."""
        return self.run(inputs, context).documents

    def run(
        self,
        inputs: Optional[Iterable[Document]] = None,
        context: Optional[ExecutionContext] = None,
    ) -> ReadOutcome:
        """Read all inputs in parallel and report documents together with failures."""
        base_context = context or ExecutionContext()
        adapter = base_context.build_adapter
        if adapter is None:
            adapter = ProjectBuildAdapter()
        failed_before = len(adapter.failed_projects)
        run_context = replace(base_context, build_adapter=adapter)
        documents = list(inputs) if inputs is not None else [Document()]
        workers = max(1, run_context.max_workers)
        outcome = ReadOutcome(inputs_total=len(documents))
        outcome_lock = threading.Lock()

        input_pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="projdocs-input")
        project_pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="projdocs-project")
        file_pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="projdocs-file")
        pools = (input_pool, project_pool, file_pool)
        state = _Run(
            context=run_context,
            filters=self._chain.freeze(),
            project_pool=project_pool,
            file_pool=file_pool,
        )

        def _supervise(document: Document) -> List[Document]:
            try:
                produced = self._read_input(state, document)
            except RunCancelled:
                raise
            except Exception as exc:
                self._log_exception(f"Failed to read workspace for {document.identity}", exc)
                with outcome_lock:
                    outcome.failures.append(InputFailure(identity=document.identity, error=str(exc)))
                return []
            if produced is None:
                with outcome_lock:
                    outcome.inputs_empty += 1
                return []
            return produced

        self.logger.info("Reading workspace for %d input(s) via %s", len(documents), self._resolver.description)
        cancelled = False
        try:
            per_input = _fan_out(input_pool, _supervise, documents, run_context)
        except RunCancelled:
            cancelled = True
            raise
        finally:
            for pool in pools:
                pool.shutdown(wait=not cancelled, cancel_futures=cancelled)

        outcome.documents = [document for produced in per_input for document in produced]
        outcome.failed_projects = adapter.failed_projects[failed_before:]
        self.logger.info(
            "Read %d document(s); %d input(s) failed, %d project(s) did not build",
            len(outcome.documents),
            outcome.inputs_failed,
            len(outcome.failed_projects),
        )
        return outcome

    def _read_input(self, state: _Run, document: Document) -> Optional[List[Document]]:
        context = state.context
        locator = self._resolver.resolve(document, context)
        if locator is None:
            self.logger.debug("No workspace path for %s; skipping", document.identity)
            return None

        sources: Sequence[Optional[ProjectSource]]
        if isinstance(locator, ProjectModel):
            sources = [PreparedProject(locator)]
            descriptor = locator.project_file
        else:
            descriptor_file = context.file_system.get_input_file(locator)
            descriptor = descriptor_file.path
            kind = self.kind or detect_kind(descriptor)
            sources = enumerator_for(kind).get_projects(context, descriptor_file)

        selected = [
            source
            for source in sources
            if source is not None and state.filters.accepts_project(source.name)
        ]
        self.logger.debug("Selected %d of %d project(s) from %s", len(selected), len(sources), descriptor)
        materializer = DocumentMaterializer(context.file_system, descriptor)

        def _read_project(source: ProjectSource) -> List[Document]:
            return self._read_project(state, source, materializer)

        per_project = _fan_out(state.project_pool, _read_project, selected, context)
        return [item for produced in per_project for item in produced]

    def _read_project(
        self, state: _Run, source: ProjectSource, materializer: DocumentMaterializer
    ) -> List[Document]:
        model = source.load()
        if model is None:
            return []
        self.logger.debug("Read project %s", model.name)
        file_system = state.context.file_system
        handles = [
            file_system.get_input_file(entry.path)
            for entry in model.documents
            if entry.path and entry.path.strip()
        ]

        def _materialize(handle: FileHandle) -> Optional[Document]:
            if not state.filters.accepts_file(handle):
                return None
            return materializer.materialize(model, handle)

        produced = _fan_out(state.file_pool, _materialize, handles, state.context)
        return [document for document in produced if document is not None]

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


class ReadSolution(ReadWorkspace):
    """Reads every project referenced by a solution file."""

    kind: Optional[WorkspaceKind] = "solution"


class ReadProject(ReadWorkspace):
    """Reads the single project a project file describes."""

    kind: Optional[WorkspaceKind] = "project"


def _fan_out(
    executor: Executor,
    func: Callable[[T], R],
    items: Sequence[T],
    context: ExecutionContext,
) -> List[R]:
    """Run ``func`` over ``items`` on ``executor`` and return results in item order.

    The first exception cancels the branches that have not started yet and is
    re-raised. Cancellation is checked before each branch starts.
    """
    context.raise_if_cancelled()
    if not items:
        return []

    def _branch(item: T) -> R:
        context.raise_if_cancelled()
        return func(item)

    futures: List[Future[R]] = [executor.submit(_branch, item) for item in items]
    _, pending = wait(futures, return_when=FIRST_EXCEPTION)
    if pending:
        for future in pending:
            future.cancel()
        # Branches already running are allowed to finish before the error surfaces.
        wait(pending)

    errors = [
        error
        for error in (future.exception() for future in futures if not future.cancelled())
        if error is not None
    ]
    if errors:
        raise next((error for error in errors if isinstance(error, RunCancelled)), errors[0])
    if any(future.cancelled() for future in futures):
        raise RunCancelled("Workspace read cancelled")
    return [future.result() for future in futures]


def context_from_config(config: ProjectDocsConfig) -> ExecutionContext:
    """Build the file system, toolchain and limits described by ``config``."""
    return ExecutionContext(
        file_system=LocalFileSystem(config.root, config.input_paths),
        toolchain=MSBuildToolchain(
            config.build.executable,
            configuration=config.build.configuration,
            timeout=config.build.timeout,
            restore=config.build.restore,
        ),
        max_workers=config.max_workers,
    )


def pipeline_from_config(
    config: ProjectDocsConfig,
    *,
    path: Any = None,
    kind: Optional[WorkspaceKind] = None,
) -> ReadWorkspace:
    """Create a pipeline for ``config``; ``path`` and ``kind`` override the file.

    Relative descriptor paths from the config file are taken relative to the
    directory holding it. Templates are left for the file system to resolve.
    """
    if path is None:
        configured = config.workspace.path
        if configured is None:
            raise ConfigError("No workspace path given and none configured in .projdocs.yml")
        path = configured if "{{" in configured else config.root / configured
    chosen_kind = kind or config.workspace.kind
    pipeline = ReadWorkspace(path, kind=chosen_kind)  # type: ignore[arg-type]

    filters = config.filters
    if filters.extensions:
        pipeline.with_extensions(*filters.extensions)
    if filters.include_projects or filters.exclude_projects:
        pipeline.where_project(project_globs(filters.include_projects, filters.exclude_projects))
    if filters.exclude_files:
        pipeline.where_file(file_globs(filters.exclude_files))
    return pipeline


__all__ = [
    "InputFailure",
    "PathResolver",
    "ReadOutcome",
    "ReadProject",
    "ReadSolution",
    "ReadWorkspace",
    "context_from_config",
    "pipeline_from_config",
]
