"""CLI parser and read command tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from projdocs import cli
from projdocs.cli import _build_parser
from projdocs.context import ExecutionContext
from tests._fixtures.workspace_builder import FakeProject, FakeToolchain, WorkspaceBuilder


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "read", "App.sln"])
    assert args.verbose is True
    assert args.command == "read"
    assert args.path == "App.sln"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["read", "--verbose"])
    assert args.verbose is True
    assert args.path is None


def test_cli_collects_repeatable_filters() -> None:
    args = _build_parser().parse_args(
        ["read", "App.sln", "-e", "cs", "--extension", "vb", "--exclude-project", "*.Tests", "--kind", "solution"]
    )
    assert args.extensions == ["cs", "vb"]
    assert args.exclude_projects == ["*.Tests"]
    assert args.kind == "solution"


def test_cli_rejects_unknown_kind() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["read", "App.sln", "--kind", "folder"])


def test_cli_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve"])
    assert args.host == "127.0.0.1"
    assert args.port == 8000


@pytest.fixture
def fake_context(monkeypatch: pytest.MonkeyPatch, workspace: WorkspaceBuilder) -> FakeToolchain:
    toolchain = FakeToolchain()

    def _context_from_config(config) -> ExecutionContext:
        return ExecutionContext(
            file_system=workspace.file_system(config.input_paths),
            toolchain=toolchain,
            max_workers=config.max_workers,
        )

    monkeypatch.setattr(cli, "context_from_config", _context_from_config)
    return toolchain


def test_read_writes_json_lines(
    workspace: WorkspaceBuilder,
    fake_context: FakeToolchain,
    capsys: pytest.CaptureFixture[str],
) -> None:
    workspace.write({"input/Lib/Lib.csproj": "<Project />", "input/Lib/A.cs": "class A {}", "input/Lib/B.txt": "x"})
    fake_context.add(workspace.path("input/Lib/Lib.csproj"), FakeProject(files=["A.cs", "B.txt"]))

    cli.main(["read", str(workspace.path("input/Lib/Lib.csproj")), "-e", "cs", "--config", str(workspace.root)])

    captured = capsys.readouterr()
    lines = [json.loads(line) for line in captured.out.splitlines()]
    assert len(lines) == 1
    assert lines[0]["metadata"]["RelativeFilePath"] == str(Path("Lib/A.cs"))
    assert lines[0]["metadata"]["SourceFileExt"] == ".cs"
    assert "1 document(s)" in captured.err


def test_read_uses_configured_workspace_and_output_file(
    workspace: WorkspaceBuilder,
    fake_context: FakeToolchain,
    capsys: pytest.CaptureFixture[str],
) -> None:
    workspace.write(
        {
            ".projdocs.yml": "workspace:\n  path: input/Lib/Lib.csproj\n",
            "input/Lib/A.cs": "class A {}",
        }
    )
    fake_context.add(workspace.path("input/Lib/Lib.csproj"), FakeProject(files=["A.cs", "missing.cs"]))
    output = workspace.path("out.jsonl")

    cli.main(["read", "--config", str(workspace.root), "--output", str(output)])

    assert capsys.readouterr().out == ""
    lines = output.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["metadata"]["SourceFileName"] == "A.cs"


def test_read_without_any_workspace_path_exits(
    workspace: WorkspaceBuilder, fake_context: FakeToolchain, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["read", "--config", str(workspace.root)])

    assert excinfo.value.code == 1
    assert "No workspace path" in capsys.readouterr().err


def test_read_exits_with_two_when_an_input_fails(
    workspace: WorkspaceBuilder, fake_context: FakeToolchain, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["read", str(workspace.path("input/Missing.sln")), "--config", str(workspace.root)])

    assert excinfo.value.code == 2
    assert "1 input(s) failed" in capsys.readouterr().err


def test_read_writes_debug_trace_to_log_file(
    workspace: WorkspaceBuilder, fake_context: FakeToolchain, capsys: pytest.CaptureFixture[str]
) -> None:
    workspace.write({"input/Lib/A.cs": "class A {}"})
    fake_context.add(workspace.path("input/Lib/Lib.csproj"), FakeProject(files=["A.cs"]))
    log_file = workspace.path("trace.log")

    cli.main(
        [
            "read",
            str(workspace.path("input/Lib/Lib.csproj")),
            "--config",
            str(workspace.root),
            "--log-file",
            str(log_file),
        ]
    )

    trace = log_file.read_text(encoding="utf-8")
    assert "projdocs.build: Building project" in trace
    assert "projdocs.materializer: Read file" in trace
    assert "Building project" not in capsys.readouterr().err
