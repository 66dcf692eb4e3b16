"""Tests for the dotnet msbuild toolchain wrapper."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, List

import pytest

from projdocs.toolchain import (
    ENV_EXECUTABLE_KEY,
    MSBuildToolchain,
    parse_build_payload,
    split_build_output,
)


def _payload(items: List[Dict[str, str]], **properties: str) -> Dict[str, Any]:
    return {
        "Properties": {"MSBuildProjectName": "Lib", **properties},
        "Items": {"Compile": items},
        "TargetResults": {"Build": {"Result": "Success", "Items": []}},
    }


class RecordingRunner:
    def __init__(self, stdout: str = "", stderr: str = "", returncode: int = 0) -> None:
        self.calls: list[dict[str, object]] = []
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode

    def __call__(self, args, *, cwd, timeout=None):
        self.calls.append({"args": list(args), "cwd": cwd, "timeout": timeout})
        return subprocess.CompletedProcess(args, self.returncode, self.stdout, self.stderr)


def test_command_queries_properties_and_compile_items(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_EXECUTABLE_KEY, raising=False)
    toolchain = MSBuildToolchain(configuration="Release")

    args = toolchain.command(Path("/src/Lib/Lib.csproj"))

    assert args[:3] == ["dotnet", "msbuild", "/src/Lib/Lib.csproj"]
    assert "-restore" in args
    assert "-property:Configuration=Release" in args
    assert "-getProperty:AssemblyName" in args
    assert "-getItem:Compile" in args
    assert "-getTargetResult:Build" in args


def test_executable_can_come_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_EXECUTABLE_KEY, "/opt/dotnet/dotnet")

    assert MSBuildToolchain().executable == "/opt/dotnet/dotnet"
    assert MSBuildToolchain("custom").executable == "custom"


def test_analyzer_splits_payload_from_build_log(tmp_path: Path) -> None:
    project_file = tmp_path / "Lib" / "Lib.csproj"
    payload = _payload(
        [{"Identity": "A.cs", "FullPath": str(tmp_path / "Lib" / "A.cs")}],
        AssemblyName="Acme.Lib",
    )
    runner = RecordingRunner(
        stdout="  Restored Lib.csproj\n" + json.dumps(payload, indent=2) + "\n",
        stderr="warning NU1603: approximate match\n",
    )
    analyzer = MSBuildToolchain("dotnet", runner=runner, timeout=30).analyze(project_file)

    artifacts = analyzer.build()

    assert len(artifacts) == 1
    artifact = artifacts[0]
    assert artifact.succeeded
    assert artifact.assembly_name == "Acme.Lib"
    assert [entry.path for entry in artifact.documents] == [str(tmp_path / "Lib" / "A.cs")]
    log = analyzer.log.getvalue()
    assert "Restored Lib.csproj" in log
    assert "NU1603" in log
    assert runner.calls[0]["cwd"] == project_file.parent
    assert runner.calls[0]["timeout"] == 30


def test_analyzer_without_payload_reports_nothing(tmp_path: Path) -> None:
    runner = RecordingRunner(stdout="error MSB1009: Project file does not exist.\n", returncode=1)
    analyzer = MSBuildToolchain("dotnet", runner=runner).analyze(tmp_path / "Gone.csproj")

    assert analyzer.build() == []
    assert "MSB1009" in analyzer.log.getvalue()


def test_analyzer_timeout_is_written_to_log(tmp_path: Path) -> None:
    def _runner(args, *, cwd, timeout=None):
        raise subprocess.TimeoutExpired(args, timeout)

    analyzer = MSBuildToolchain("dotnet", runner=_runner, timeout=5).analyze(tmp_path / "Slow.csproj")

    assert analyzer.build() == []
    assert "timed out" in analyzer.log.getvalue()


def test_missing_executable_raises_runtime_error(tmp_path: Path) -> None:
    def _runner(args, *, cwd, timeout=None):
        raise FileNotFoundError(args[0])

    analyzer = MSBuildToolchain("dotnet", runner=_runner).analyze(tmp_path / "Lib.csproj")

    with pytest.raises(RuntimeError, match=ENV_EXECUTABLE_KEY):
        analyzer.build()


def test_parse_payload_marks_generated_and_keeps_blank_items(tmp_path: Path) -> None:
    project_file = tmp_path / "Lib.csproj"
    payload = _payload(
        [
            {"Identity": "Program.cs"},
            {"Identity": "obj\\Debug\\net8.0\\Lib.AssemblyInfo.cs"},
            {"Identity": "Views\\Index.g.cs"},
            {"Identity": ""},
        ],
        IntermediateOutputPath="obj\\Debug\\net8.0\\",
    )

    artifact = parse_build_payload(project_file, payload, 0)

    paths = [entry.path for entry in artifact.documents]
    assert paths[0] == str(tmp_path / "Program.cs")
    assert paths[3] == ""
    assert [entry.is_generated for entry in artifact.documents] == [False, True, True, False]
    assert artifact.assembly_name == "Lib"


def test_parse_payload_failed_target_is_not_success(tmp_path: Path) -> None:
    payload = _payload([{"Identity": "A.cs"}])
    payload["TargetResults"]["Build"]["Result"] = "Failure"

    assert not parse_build_payload(tmp_path / "Lib.csproj", payload, 0).succeeded
    assert not parse_build_payload(tmp_path / "Lib.csproj", _payload([]), 1).succeeded


def test_split_build_output_skips_non_json_braces() -> None:
    stdout = "{not json\n" + json.dumps({"Properties": {}}) + "\ntrailer\n"

    payload, remainder = split_build_output(stdout)

    assert payload == {"Properties": {}}
    assert "{not json" in remainder
    assert "trailer" in remainder
