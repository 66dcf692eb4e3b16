"""Logging for projdocs runs.

Every module logs under the ``projdocs`` hierarchy (``projdocs.pipeline``,
``projdocs.build`` ...). Workspace reads fan out over thread pools, so the
verbose format names the worker thread (``projdocs-input_0``,
``projdocs-project_1`` ...) that emitted each record.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Optional

_LOGGER_NAME = "projdocs"

CONSOLE_FORMAT = "[projdocs] %(levelname)s %(message)s"
VERBOSE_FORMAT = "[projdocs] %(levelname)s [%(threadName)s] %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``projdocs.<name>``, or the package logger when ``name`` is empty."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Send projdocs records to ``stream`` (stderr by default) and optionally a file.

    Verbose mode lowers the level to DEBUG, which traces every project build
    and file read. The file sink always records at DEBUG. Handlers installed by
    an earlier call are replaced.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(VERBOSE_FORMAT if verbose else CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if log_file is not None else level)
    return logger


__all__ = ["CONSOLE_FORMAT", "FILE_FORMAT", "VERBOSE_FORMAT", "configure_logging", "get_logger"]
