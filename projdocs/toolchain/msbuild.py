"""MSBuild toolchain driven through the ``dotnet`` command line."""

from __future__ import annotations

import io
import json
import os
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..models import BuildArtifact, ProjectDocument

ENV_EXECUTABLE_KEY = "PROJDOCS_DOTNET"
DEFAULT_EXECUTABLE = "dotnet"

_QUERIED_PROPERTIES = (
    "MSBuildProjectName",
    "AssemblyName",
    "IntermediateOutputPath",
    "BaseIntermediateOutputPath",
)
_GENERATED_SUFFIXES = (".g.cs", ".g.i.cs", ".g.vb", ".g.fs")

CommandRunner = Callable[..., "subprocess.CompletedProcess[str]"]


def _default_runner(
    args: Sequence[str], *, cwd: Path, timeout: Optional[float] = None
) -> "subprocess.CompletedProcess[str]":
    return subprocess.run(
        list(args),
        cwd=str(cwd),
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )


class MSBuildToolchain:
    """Builds projects with ``dotnet msbuild`` and reads back the compile items."""

    def __init__(
        self,
        executable: str | None = None,
        *,
        configuration: str | None = None,
        timeout: float | None = None,
        restore: bool = True,
        runner: CommandRunner | None = None,
    ) -> None:
        self.executable = executable or os.environ.get(ENV_EXECUTABLE_KEY) or DEFAULT_EXECUTABLE
        self.configuration = configuration
        self.timeout = timeout
        self.restore = restore
        self._runner = runner or _default_runner

    def analyze(self, project_file: Path) -> "MSBuildProjectAnalyzer":
        return MSBuildProjectAnalyzer(self, Path(project_file))

    def command(self, project_file: Path) -> List[str]:
        """Return the argument vector used to build ``project_file``."""
        args = [self.executable, "msbuild", str(project_file), "-nologo", "-target:Build"]
        if self.restore:
            args.append("-restore")
        if self.configuration:
            args.append(f"-property:Configuration={self.configuration}")
        args.extend(f"-getProperty:{name}" for name in _QUERIED_PROPERTIES)
        args.extend(["-getItem:Compile", "-getTargetResult:Build"])
        return args

    def run(self, project_file: Path) -> "subprocess.CompletedProcess[str]":
        args = self.command(project_file)
        try:
            return self._runner(args, cwd=project_file.parent, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise RuntimeError(
                f"Unable to locate '{self.executable}'. Install the .NET SDK or set {ENV_EXECUTABLE_KEY}."
            ) from exc


class MSBuildProjectAnalyzer:
    """One project's build; the combined build output ends up in ``log``."""

    def __init__(self, toolchain: MSBuildToolchain, project_file: Path) -> None:
        self.project_file = project_file
        self.log = io.StringIO()
        self._toolchain = toolchain

    def build(self) -> List[BuildArtifact]:
        try:
            completed = self._toolchain.run(self.project_file)
        except subprocess.TimeoutExpired as exc:
            self.log.write(f"Build of {self.project_file} timed out after {exc.timeout} seconds\n")
            return []

        payload, remainder = split_build_output(completed.stdout or "")
        if remainder.strip():
            self.log.write(remainder)
        if completed.stderr:
            self.log.write(completed.stderr)
        if payload is None:
            return []
        return [parse_build_payload(self.project_file, payload, completed.returncode)]

    def __repr__(self) -> str:
        return f"MSBuildProjectAnalyzer({str(self.project_file)!r})"


def split_build_output(stdout: str) -> Tuple[Optional[Dict[str, Any]], str]:
    """Separate the JSON result document from the surrounding build log text."""
    decoder = json.JSONDecoder()
    offset = 0
    for line in stdout.splitlines(keepends=True):
        stripped = line.lstrip()
        if stripped.startswith("{"):
            start = offset + len(line) - len(stripped)
            try:
                payload, end = decoder.raw_decode(stdout, start)
            except json.JSONDecodeError:
                offset += len(line)
                continue
            if isinstance(payload, dict):
                return payload, stdout[:start] + stdout[end:]
        offset += len(line)
    return None, stdout


def parse_build_payload(
    project_file: Path, payload: Mapping[str, Any], returncode: int
) -> BuildArtifact:
    """Convert the ``-getProperty``/``-getItem`` JSON document into a build artifact."""
    raw_properties = payload.get("Properties")
    properties: Dict[str, str] = {}
    if isinstance(raw_properties, dict):
        properties = {str(key): str(value) for key, value in raw_properties.items() if value is not None}

    project_dir = project_file.parent
    intermediate = properties.get("IntermediateOutputPath") or properties.get("BaseIntermediateOutputPath")
    intermediate_dir = project_dir / _normalise_separators(intermediate) if intermediate else None

    documents: List[ProjectDocument] = []
    raw_items = payload.get("Items")
    compile_items = raw_items.get("Compile") if isinstance(raw_items, dict) else None
    for item in compile_items or []:
        if not isinstance(item, dict):
            continue
        raw_path = str(item.get("FullPath") or item.get("Identity") or "")
        if not raw_path.strip():
            documents.append(ProjectDocument(path=raw_path))
            continue
        path = Path(_normalise_separators(raw_path))
        if not path.is_absolute():
            path = project_dir / path
        documents.append(
            ProjectDocument(path=str(path), is_generated=_is_generated(path, intermediate_dir))
        )

    project_name = properties.get("MSBuildProjectName") or project_file.stem
    return BuildArtifact(
        project_file=project_file,
        succeeded=returncode == 0 and _target_succeeded(payload),
        assembly_name=properties.get("AssemblyName") or project_name,
        project_name=project_name,
        documents=tuple(documents),
    )


def _target_succeeded(payload: Mapping[str, Any]) -> bool:
    results = payload.get("TargetResults")
    if not isinstance(results, dict):
        return True
    build = results.get("Build")
    if not isinstance(build, dict):
        return True
    return str(build.get("Result", "Success")).lower() == "success"


def _is_generated(path: Path, intermediate_dir: Optional[Path]) -> bool:
    if path.name.lower().endswith(_GENERATED_SUFFIXES):
        return True
    if intermediate_dir is None:
        return False
    return os.path.normpath(path).startswith(os.path.normpath(intermediate_dir) + os.sep)


def _normalise_separators(value: str) -> str:
    if os.name == "nt":
        return value
    return value.replace("\\", "/")


__all__ = [
    "DEFAULT_EXECUTABLE",
    "ENV_EXECUTABLE_KEY",
    "MSBuildProjectAnalyzer",
    "MSBuildToolchain",
    "parse_build_payload",
    "split_build_output",
]
