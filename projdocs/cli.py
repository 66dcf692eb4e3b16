"""CLI entrypoints for projdocs commands."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import IO, Iterable

from .config import ConfigError, load_config
from .filters import file_globs, project_globs
from .logging import configure_logging
from .models import Document
from .pipeline import ReadOutcome, context_from_config, pipeline_from_config


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Log every project build and file read.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projdocs",
        description="Read the source files of an MSBuild solution or project as documents.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    read_parser = subparsers.add_parser(
        "read",
        help="Build the workspace and print one JSON line per source document.",
    )
    _add_verbose_option(read_parser, suppress_default=True)
    read_parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Solution or project file (defaults to workspace.path from .projdocs.yml).",
    )
    read_parser.add_argument(
        "--kind",
        choices=("solution", "project"),
        default=None,
        help="Treat the descriptor as a solution or a project (detected from the extension by default).",
    )
    read_parser.add_argument(
        "-e",
        "--extension",
        dest="extensions",
        action="append",
        default=[],
        help="Only include source files with this extension; repeatable.",
    )
    read_parser.add_argument(
        "--project",
        dest="include_projects",
        action="append",
        default=[],
        help="Glob of project names to include; repeatable.",
    )
    read_parser.add_argument(
        "--exclude-project",
        dest="exclude_projects",
        action="append",
        default=[],
        help="Glob of project names to skip; repeatable.",
    )
    read_parser.add_argument(
        "--exclude-file",
        dest="exclude_files",
        action="append",
        default=[],
        help="Glob of source file paths to skip; repeatable.",
    )
    read_parser.add_argument(
        "--input-path",
        dest="input_paths",
        action="append",
        default=[],
        help="Input directory used for relative paths; repeatable (overrides the config file).",
    )
    read_parser.add_argument(
        "--root",
        default=None,
        help="Root directory input paths are relative to (defaults to the config file's directory).",
    )
    read_parser.add_argument(
        "--config",
        default=".",
        help="Path to .projdocs.yml or the directory holding it.",
    )
    read_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Maximum parallel branches per level.",
    )
    read_parser.add_argument(
        "--output",
        default=None,
        help="Write JSON lines to this file instead of stdout.",
    )
    read_parser.add_argument(
        "--log-file",
        default=None,
        help="Also write a DEBUG-level trace of the run to this file.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for projdocs commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = getattr(args, "log_file", None)
    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(log_file) if log_file else None,
        stream=sys.stderr,
    )

    if args.command == "read":
        try:
            outcome = _run_read(args)
        except (ConfigError, ValueError) as exc:
            parser.exit(1, f"projdocs read failed: {exc}\n")
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"projdocs read failed: {exc}\nRun with --verbose for more details.\n")
        if args.output:
            with open(args.output, "w", encoding="utf-8") as handle:
                _write_documents(outcome.documents, handle)
        else:
            _write_documents(outcome.documents, sys.stdout)
        print(_summary(outcome), file=sys.stderr)
        if outcome.failures:
            parser.exit(2)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_read(args: argparse.Namespace) -> ReadOutcome:
    config = load_config(Path(args.config))
    if args.input_paths:
        config.input_paths = list(args.input_paths)
    if args.root:
        config = replace(config, root=Path(args.root).expanduser().resolve())
    if args.workers is not None:
        if args.workers < 1:
            raise ValueError("--workers must be a positive integer")
        config.max_workers = args.workers

    path = Path(args.path).expanduser().resolve() if args.path else None
    pipeline = pipeline_from_config(config, path=path, kind=args.kind)
    if args.extensions:
        pipeline.with_extensions(*args.extensions)
    if args.include_projects or args.exclude_projects:
        pipeline.where_project(project_globs(args.include_projects, args.exclude_projects))
    if args.exclude_files:
        pipeline.where_file(file_globs(args.exclude_files))

    return pipeline.run(context=context_from_config(config))


def _write_documents(documents: Iterable[Document], stream: IO[str]) -> None:
    for document in documents:
        stream.write(json.dumps(document.to_dict(), sort_keys=True))
        stream.write("\n")


def _summary(outcome: ReadOutcome) -> str:
    parts = [f"{len(outcome.documents)} document(s)"]
    if outcome.failed_projects:
        parts.append(f"{len(outcome.failed_projects)} project(s) failed to build")
    if outcome.failures:
        parts.append(f"{outcome.inputs_failed} input(s) failed")
    return "projdocs: " + ", ".join(parts)


if __name__ == "__main__":
    main(sys.argv[1:])
