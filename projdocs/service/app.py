"""FastAPI application entrypoint for projdocs service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import ConfigError, ProjectDocsConfig, load_config
from ..filters import file_globs, project_globs
from ..pipeline import ReadOutcome, context_from_config, pipeline_from_config


class ReadRequest(BaseModel):
    path: str
    kind: Optional[str] = None
    config_path: Optional[str] = None
    extensions: List[str] = Field(default_factory=list)
    include_projects: List[str] = Field(default_factory=list)
    exclude_projects: List[str] = Field(default_factory=list)
    exclude_files: List[str] = Field(default_factory=list)


class DocumentPayload(BaseModel):
    source: Optional[str] = None
    metadata: Dict[str, Any]


class FailurePayload(BaseModel):
    identity: str
    error: str


class ReadResponse(BaseModel):
    status: str
    documents: List[DocumentPayload]
    failures: List[FailurePayload] = Field(default_factory=list)
    failed_projects: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str


ReadRunner = Callable[[ReadRequest], ReadOutcome]


def _run_read(payload: ReadRequest) -> ReadOutcome:
    descriptor = Path(payload.path).expanduser().resolve()
    config_path = Path(payload.config_path) if payload.config_path else descriptor.parent
    config: ProjectDocsConfig = load_config(config_path)

    pipeline = pipeline_from_config(config, path=descriptor, kind=payload.kind)  # type: ignore[arg-type]
    if payload.extensions:
        pipeline.with_extensions(*payload.extensions)
    if payload.include_projects or payload.exclude_projects:
        pipeline.where_project(project_globs(payload.include_projects, payload.exclude_projects))
    if payload.exclude_files:
        pipeline.where_file(file_globs(payload.exclude_files))
    return pipeline.run(context=context_from_config(config))


def _default_runner() -> ReadRunner:
    return _run_read


def create_app(runner_factory: Callable[[], ReadRunner] = _default_runner) -> FastAPI:
    """Create the FastAPI application exposing workspace reads."""

    app = FastAPI(title="projdocs", version="1.0.0")

    async def get_runner() -> ReadRunner:
        return runner_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/read", response_model=ReadResponse)
    async def read_workspace(
        payload: ReadRequest,
        runner: ReadRunner = Depends(get_runner),
    ) -> ReadResponse:
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, runner, payload)
        return ReadResponse(
            status="ok" if outcome.succeeded else "partial",
            documents=[DocumentPayload(**document.to_dict()) for document in outcome.documents],
            failures=[
                FailurePayload(identity=failure.identity, error=failure.error)
                for failure in outcome.failures
            ],
            failed_projects=[str(path) for path in outcome.failed_projects],
        )

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
