"""Build toolchains that turn project descriptors into compiled project models."""

from __future__ import annotations

from .base import ProjectAnalyzer, Toolchain
from .msbuild import (
    DEFAULT_EXECUTABLE,
    ENV_EXECUTABLE_KEY,
    MSBuildProjectAnalyzer,
    MSBuildToolchain,
    parse_build_payload,
    split_build_output,
)
from .solution import SolutionParseError, SolutionProject, parse_solution

__all__ = [
    "DEFAULT_EXECUTABLE",
    "ENV_EXECUTABLE_KEY",
    "MSBuildProjectAnalyzer",
    "MSBuildToolchain",
    "ProjectAnalyzer",
    "SolutionParseError",
    "SolutionProject",
    "Toolchain",
    "parse_build_payload",
    "parse_solution",
    "split_build_output",
]
