"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from projdocs.config import ConfigError
from projdocs.models import Document
from projdocs.pipeline import InputFailure, ReadOutcome
from projdocs.service import create_app
from projdocs.service.app import ReadRequest


class _StubRunner:
    def __init__(self, outcome: ReadOutcome | None = None, error: Exception | None = None) -> None:
        self.requests: list[ReadRequest] = []
        self.outcome = outcome or ReadOutcome()
        self.error = error

    def __call__(self, payload: ReadRequest) -> ReadOutcome:
        self.requests.append(payload)
        if self.error is not None:
            raise self.error
        return self.outcome


def _client(runner: _StubRunner) -> TestClient:
    return TestClient(create_app(lambda: runner))


def test_health_endpoint() -> None:
    response = _client(_StubRunner()).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_read_endpoint_returns_documents() -> None:
    document = Document(
        source=Path("/repo/src/A.cs"),
        metadata={"AssemblyName": "Acme", "RelativeFilePath": Path("src/A.cs")},
    )
    runner = _StubRunner(ReadOutcome(documents=[document], inputs_total=1))

    response = _client(runner).post(
        "/read", json={"path": "/repo/App.sln", "extensions": ["cs"], "exclude_projects": ["*.Tests"]}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["documents"] == [
        {"source": "/repo/src/A.cs", "metadata": {"AssemblyName": "Acme", "RelativeFilePath": "src/A.cs"}}
    ]
    assert runner.requests[0].extensions == ["cs"]
    assert runner.requests[0].exclude_projects == ["*.Tests"]


def test_read_endpoint_reports_partial_results() -> None:
    outcome = ReadOutcome(
        failures=[InputFailure(identity="<document>", error="boom")],
        failed_projects=[Path("/repo/Bad/Bad.csproj")],
        inputs_total=1,
    )

    response = _client(_StubRunner(outcome)).post("/read", json={"path": "/repo/App.sln"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "partial"
    assert data["failures"] == [{"identity": "<document>", "error": "boom"}]
    assert data["failed_projects"] == ["/repo/Bad/Bad.csproj"]


@pytest.mark.parametrize("error", [ConfigError("bad yaml"), ValueError("Unknown workspace kind")])
def test_read_endpoint_maps_configuration_errors(error: Exception) -> None:
    response = _client(_StubRunner(error=error)).post("/read", json={"path": "/repo/App.sln"})

    assert response.status_code == 400
    assert response.json() == {"detail": str(error)}


def test_read_endpoint_requires_path() -> None:
    response = _client(_StubRunner()).post("/read", json={})

    assert response.status_code == 422


def test_read_endpoint_rejects_unknown_kind(tmp_path: Path) -> None:
    (tmp_path / "App.sln").write_text("", encoding="utf-8")
    client = TestClient(create_app())

    response = client.post("/read", json={"path": str(tmp_path / "App.sln"), "kind": "bogus"})

    assert response.status_code == 400
    assert "Unknown workspace kind" in response.json()["detail"]
