"""File system access for workspace descriptors and source files."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence

DEFAULT_INPUT_PATHS: tuple[str, ...] = ("input",)


class FileHandle:
    """A file reference bound to an absolute path; nothing is read until asked."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def open(self) -> BinaryIO:
        return self.path.open("rb")

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def read_text(self, encoding: str = "utf-8-sig") -> str:
        return self.path.read_text(encoding=encoding)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileHandle):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"FileHandle({str(self.path)!r})"


class LocalFileSystem:
    """Resolves paths against a root directory and its configured input paths."""

    def __init__(
        self,
        root: Path | str | None = None,
        input_paths: Sequence[Path | str] = DEFAULT_INPUT_PATHS,
    ) -> None:
        self.root = Path(root if root is not None else Path.cwd()).expanduser().resolve()
        self._input_paths = tuple(input_paths) or (".",)

    @property
    def input_directories(self) -> List[Path]:
        """Absolute input directories in registration order."""
        return [self._absolute(Path(entry)) for entry in self._input_paths]

    def get_input_file(self, path: Path | str) -> FileHandle:
        """Return a handle for ``path``, searching input directories for relative paths.

        Later input directories take precedence. When the file exists in none of
        them the handle points into the first input directory.
        """
        candidate = Path(path).expanduser()
        if candidate.is_absolute():
            return FileHandle(candidate.resolve())

        directories = self.input_directories
        for directory in reversed(directories):
            target = (directory / candidate).resolve()
            if target.is_file():
                return FileHandle(target)
        return FileHandle((directories[0] / candidate).resolve())

    def get_containing_input_path(self, path: Path | str) -> Optional[Path]:
        """Return the input directory holding ``path`` or ``None`` when outside all of them."""
        candidate = Path(path).expanduser()
        directories = self.input_directories
        if not candidate.is_absolute():
            for directory in reversed(directories):
                if (directory / candidate).exists():
                    return directory
            return None

        resolved = candidate.resolve()
        matches = [directory for directory in directories if resolved.is_relative_to(directory)]
        if not matches:
            return None
        # Nested input paths: the innermost directory wins.
        return max(matches, key=lambda directory: len(directory.parts))

    def _absolute(self, path: Path) -> Path:
        path = path.expanduser()
        if path.is_absolute():
            return path.resolve()
        return (self.root / path).resolve()


__all__ = ["DEFAULT_INPUT_PATHS", "FileHandle", "LocalFileSystem"]
