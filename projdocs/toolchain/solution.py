"""Solution descriptor parsing (.sln and .slnx)."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import List

SUPPORTED_PROJECT_EXTENSIONS = frozenset({".csproj", ".vbproj", ".fsproj"})

_SOLUTION_FOLDER_TYPE = "2150E333-8FDC-42A3-9474-1A3956D46DE8"

_PROJECT_LINE = re.compile(
    r'^Project\("\{(?P<type>[0-9A-Fa-f-]+)\}"\)\s*=\s*'
    r'"(?P<name>[^"]*)"\s*,\s*"(?P<path>[^"]*)"\s*,\s*"\{(?P<guid>[0-9A-Fa-f-]+)\}"'
)


class SolutionParseError(ValueError):
    """Raised when a solution descriptor cannot be read."""


@dataclass(frozen=True)
class SolutionProject:
    """A project entry listed by a solution."""

    name: str
    path: Path


def parse_solution(solution_file: Path, text: str) -> List[SolutionProject]:
    """Return the buildable projects referenced by a solution, in file order."""
    if solution_file.suffix.lower() == ".slnx":
        entries = _parse_slnx(solution_file, text)
    else:
        entries = _parse_sln(solution_file, text)
    return [entry for entry in entries if entry.path.suffix.lower() in SUPPORTED_PROJECT_EXTENSIONS]


def _parse_sln(solution_file: Path, text: str) -> List[SolutionProject]:
    projects: List[SolutionProject] = []
    for line in text.splitlines():
        match = _PROJECT_LINE.match(line.strip())
        if match is None:
            continue
        if match.group("type").upper() == _SOLUTION_FOLDER_TYPE:
            continue
        projects.append(
            SolutionProject(
                name=match.group("name"),
                path=_member_path(solution_file, match.group("path")),
            )
        )
    return projects


def _parse_slnx(solution_file: Path, text: str) -> List[SolutionProject]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise SolutionParseError(f"Failed to parse {solution_file.name}: {exc}") from exc

    projects: List[SolutionProject] = []
    for element in root.iter("Project"):
        raw_path = element.get("Path")
        if not raw_path:
            continue
        path = _member_path(solution_file, raw_path)
        projects.append(
            SolutionProject(
                name=element.get("DisplayName") or path.stem,
                path=path,
            )
        )
    return projects


def _member_path(solution_file: Path, raw: str) -> Path:
    # Solution files always use Windows separators.
    return solution_file.parent / raw.strip().replace("\\", "/")


__all__ = [
    "SUPPORTED_PROJECT_EXTENSIONS",
    "SolutionParseError",
    "SolutionProject",
    "parse_solution",
]
