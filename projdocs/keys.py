"""Metadata keys attached to every document read from a workspace."""

from __future__ import annotations

from typing import Tuple

ASSEMBLY_NAME = "AssemblyName"

SOURCE_FILE_ROOT = "SourceFileRoot"
SOURCE_FILE_BASE = "SourceFileBase"
SOURCE_FILE_EXT = "SourceFileExt"
SOURCE_FILE_NAME = "SourceFileName"
SOURCE_FILE_DIR = "SourceFileDir"
SOURCE_FILE_PATH = "SourceFilePath"
SOURCE_FILE_PATH_BASE = "SourceFilePathBase"

RELATIVE_FILE_PATH = "RelativeFilePath"
RELATIVE_FILE_PATH_BASE = "RelativeFilePathBase"
RELATIVE_FILE_DIR = "RelativeFileDir"

# Downstream stages rely on every one of these being present.
DOCUMENT_KEYS: Tuple[str, ...] = (
    ASSEMBLY_NAME,
    SOURCE_FILE_ROOT,
    SOURCE_FILE_BASE,
    SOURCE_FILE_EXT,
    SOURCE_FILE_NAME,
    SOURCE_FILE_DIR,
    SOURCE_FILE_PATH,
    SOURCE_FILE_PATH_BASE,
    RELATIVE_FILE_PATH,
    RELATIVE_FILE_PATH_BASE,
    RELATIVE_FILE_DIR,
)

__all__ = [
    "ASSEMBLY_NAME",
    "DOCUMENT_KEYS",
    "RELATIVE_FILE_DIR",
    "RELATIVE_FILE_PATH",
    "RELATIVE_FILE_PATH_BASE",
    "SOURCE_FILE_BASE",
    "SOURCE_FILE_DIR",
    "SOURCE_FILE_EXT",
    "SOURCE_FILE_NAME",
    "SOURCE_FILE_PATH",
    "SOURCE_FILE_PATH_BASE",
    "SOURCE_FILE_ROOT",
]
