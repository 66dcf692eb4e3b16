"""Turns a (project, source file) pair into a document with provenance metadata."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from . import keys
from .filesystem import FileHandle, LocalFileSystem
from .logging import get_logger
from .models import Document, FileContentProvider, ProjectModel


def first_available(*candidates: Optional[Path]) -> Optional[Path]:
    """Return the first candidate that is not ``None``."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


class DocumentMaterializer:
    """Builds output documents for one workspace descriptor.

    Relative paths are computed against the input directory that contains the
    file. Files outside every input directory fall back to the descriptor's
    folder, then to the file's own folder when no descriptor is known.
    """

    def __init__(self, file_system: LocalFileSystem, descriptor: Optional[Path]) -> None:
        self.file_system = file_system
        self.descriptor = descriptor
        self.logger = get_logger("materializer")

    def relative_root(self, path: Path, input_path: Optional[Path]) -> Path:
        descriptor_dir = self.descriptor.parent if self.descriptor is not None else None
        return first_available(input_path, descriptor_dir) or path.parent

    def materialize(self, project: ProjectModel, file: FileHandle) -> Document:
        path = file.path
        self.logger.debug("Read file %s", path)
        input_path = self.file_system.get_containing_input_path(path)
        relative_path = Path(os.path.relpath(path, self.relative_root(path, input_path)))

        metadata: Dict[str, Any] = {
            keys.ASSEMBLY_NAME: project.assembly_name,
            keys.SOURCE_FILE_ROOT: first_available(input_path, path.parent),
            keys.SOURCE_FILE_BASE: path.stem,
            keys.SOURCE_FILE_EXT: path.suffix,
            keys.SOURCE_FILE_NAME: path.name,
            keys.SOURCE_FILE_DIR: path.parent,
            keys.SOURCE_FILE_PATH: path,
            keys.SOURCE_FILE_PATH_BASE: path.parent / path.stem,
            keys.RELATIVE_FILE_PATH: relative_path,
            keys.RELATIVE_FILE_PATH_BASE: relative_path.parent / path.stem,
            keys.RELATIVE_FILE_DIR: relative_path.parent,
        }
        return Document(source=path, metadata=metadata, content_provider=FileContentProvider(file))


__all__ = ["DocumentMaterializer", "first_available"]
