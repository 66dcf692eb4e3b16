"""Configuration loading for projdocs (.projdocs.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .context import DEFAULT_MAX_WORKERS
from .filesystem import DEFAULT_INPUT_PATHS

CONFIG_FILENAME = ".projdocs.yml"

_WORKSPACE_KINDS = {"solution", "project"}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class WorkspaceConfig:
    """Which descriptor to read and how to treat it."""

    path: Optional[str] = None
    kind: Optional[str] = None


@dataclass
class FilterConfig:
    """Project and file filters expressed as globs and extensions."""

    extensions: List[str] = field(default_factory=list)
    include_projects: List[str] = field(default_factory=list)
    exclude_projects: List[str] = field(default_factory=list)
    exclude_files: List[str] = field(default_factory=list)


@dataclass
class BuildConfig:
    """Toolchain invocation settings."""

    executable: Optional[str] = None
    configuration: Optional[str] = None
    timeout: Optional[float] = None
    restore: bool = True


@dataclass
class ProjectDocsConfig:
    """Represents the settings defined in .projdocs.yml."""

    root: Path
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    input_paths: List[str] = field(default_factory=lambda: list(DEFAULT_INPUT_PATHS))
    filters: FilterConfig = field(default_factory=FilterConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    max_workers: int = DEFAULT_MAX_WORKERS


def load_config(config_path: Path) -> ProjectDocsConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProjectDocsConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    workspace_data = _as_dict(data.get("workspace"))
    workspace = WorkspaceConfig(
        path=_as_str(workspace_data.get("path")),
        kind=_as_str(workspace_data.get("kind")),
    )
    if workspace.kind is not None:
        workspace.kind = workspace.kind.lower()
        if workspace.kind not in _WORKSPACE_KINDS:
            raise ConfigError(
                f"workspace.kind must be 'solution' or 'project', got '{workspace.kind}'"
            )

    filter_data = _as_dict(data.get("filters"))
    filters = FilterConfig(
        extensions=_as_str_list(filter_data.get("extensions")),
        include_projects=_as_str_list(filter_data.get("include_projects")),
        exclude_projects=_as_str_list(filter_data.get("exclude_projects")),
        exclude_files=_as_str_list(filter_data.get("exclude_files")),
    )

    build_data = _as_dict(data.get("build"))
    build = BuildConfig(
        executable=_as_str(build_data.get("executable")),
        configuration=_as_str(build_data.get("configuration")),
        timeout=_as_float(build_data.get("timeout")),
    )
    restore = _as_bool(build_data.get("restore"))
    if restore is not None:
        build.restore = restore

    input_paths = _as_str_list(data.get("input_paths")) or list(DEFAULT_INPUT_PATHS)

    max_workers = _as_int(data.get("max_workers"))
    if max_workers is not None and max_workers < 1:
        raise ConfigError("max_workers must be a positive integer")

    return ProjectDocsConfig(
        root=root,
        workspace=workspace,
        input_paths=input_paths,
        filters=filters,
        build=build,
        max_workers=max_workers or DEFAULT_MAX_WORKERS,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "BuildConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "FilterConfig",
    "ProjectDocsConfig",
    "WorkspaceConfig",
    "load_config",
]
