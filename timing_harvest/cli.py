from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from timing_harvest import __version__ as TOOL_VERSION
from timing_harvest.contracts import build_run_summary
from timing_harvest.converter import ConversionConfig, ConversionStats, convert_file
from timing_harvest.transforms import ConversionError


EXIT_SUCCESS = 0
EXIT_COMMAND_ERROR = 1
EXIT_PARSE_FAILED = 2

USAGE = """Usage: timing-harvest [path] [first-name] [last-name]

  path        Path to a CSV export from Timing.
  first-name  First name of the user this timesheet belongs to.
  last-name   Last name of the user this timesheet belongs to.
"""


class CliError(Exception):
    def __init__(self, message: str, code: int = EXIT_COMMAND_ERROR) -> None:
        super().__init__(message)
        self.code = code


class TimingHarvestArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise CliError(message, EXIT_COMMAND_ERROR)


def eprint(message: str) -> None:
    print(message, file=sys.stderr)


def emit_human(message: str, *, quiet: bool = False) -> None:
    if not quiet:
        eprint(message)


def json_dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json_dumps(payload), encoding="utf-8")


def safe_output_path(path: Path) -> Path:
    if path.exists():
        raise CliError(f"Refusing to overwrite existing output: {path}", EXIT_COMMAND_ERROR)
    return path


def classify_exception(exc: Exception) -> int:
    if isinstance(exc, CliError):
        return exc.code
    if isinstance(exc, FileNotFoundError):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, (ConversionError, UnicodeDecodeError, ValueError)):
        return EXIT_PARSE_FAILED
    return EXIT_COMMAND_ERROR


def build_parser() -> argparse.ArgumentParser:
    parser = TimingHarvestArgumentParser(
        prog="timing-harvest",
        description="Convert a Timing CSV export into a file Harvest can import.",
    )
    parser.add_argument("path", nargs="?", help="Path to a CSV export from Timing")
    parser.add_argument("first_name", nargs="?", help="First name of the user this timesheet belongs to")
    parser.add_argument("last_name", nargs="?", help="Last name of the user this timesheet belongs to")
    parser.add_argument("-o", "--output", help="Write the Harvest CSV to this file instead of stdout")
    parser.add_argument("--encoding", help="Force the input text encoding instead of detecting it")
    parser.add_argument("--summary", help="Write a JSON run summary to this path")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")
    parser.add_argument("-v", "--verbose", action="store_true", help="More human logs")
    parser.add_argument("--version", action="store_true", help="Print version")
    return parser


def render_verbose(stats: ConversionStats) -> str:
    metrics = stats.as_metrics()
    lines = [
        "timing-harvest convert",
        f"Format: {metrics['detected_format'] or '[unknown]'}",
        f"Encoding: {metrics['detected_encoding'] or '[n/a]'}",
        f"Duration format: {metrics['duration_format'] or '[not detected]'}",
        f"Rows read: {metrics['rows_read']}",
        f"Rows written: {metrics['rows_written']}",
    ]
    return "\n".join(lines)


def run_convert(args: argparse.Namespace) -> int:
    input_path = Path(args.path)
    if not input_path.exists():
        eprint(f"Could not find file at: {input_path.resolve()}")
        return EXIT_COMMAND_ERROR

    config = ConversionConfig(first_name=args.first_name, last_name=args.last_name)
    stats = ConversionStats()
    output_path = safe_output_path(Path(args.output)) if args.output else None

    code = EXIT_SUCCESS
    error: str | None = None
    try:
        if output_path is not None:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with output_path.open("w", encoding="utf-8", newline="") as handle:
                convert_file(input_path, config, handle, encoding=args.encoding, stats=stats)
        else:
            convert_file(input_path, config, sys.stdout, encoding=args.encoding, stats=stats)
    except Exception as exc:
        error = str(exc)
        eprint(error)
        code = classify_exception(exc)

    for warning in stats.warnings:
        emit_human(f"Warning: {warning}", quiet=args.quiet)
    if args.verbose:
        emit_human(render_verbose(stats), quiet=args.quiet)
    if output_path is not None and code == EXIT_SUCCESS:
        emit_human(f"Harvest CSV written: {output_path}", quiet=args.quiet)

    if args.summary:
        summary = build_run_summary(
            tool="timing-harvest",
            script="convert",
            input_path=input_path,
            status="ok" if code == EXIT_SUCCESS else "failed",
            output_path=output_path,
            metrics=stats.as_metrics(),
            warnings=stats.warnings,
            error=error,
        )
        summary["tool_version"] = TOOL_VERSION
        summary_path = Path(args.summary)
        write_json(summary_path, summary)
        emit_human(f"Run summary: {summary_path}", quiet=args.quiet)
    return code


def run_version() -> int:
    print(TOOL_VERSION)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        if args.version:
            return run_version()
        if args.path is None or args.first_name is None or args.last_name is None:
            print(USAGE)
            return EXIT_SUCCESS
        return run_convert(args)
    except CliError as exc:
        eprint(str(exc))
        return exc.code


if __name__ == "__main__":
    raise SystemExit(main())
