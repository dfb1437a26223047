"""Command-line interface for Media Assistant.

WHY: Users need a simple way to run the tools on a handful of files from
the terminal, the same way they would drop them on the desktop app: pick a
tool, hand over files, get fixed copies next to the originals.

HOW: Uses argparse subcommands, one per tool (reflow, extract, fix-project)
plus preview. Files are queued as FileTasks and processed sequentially by
batch.process_batch(). Status messages go to stderr; preview text goes to
stdout.

RULES:
- Positional arguments: one or more input file paths
- --min-length / --max-length are validated (1 <= min <= max <= 50)
  before any file is read
- Output naming: FIXED_<stem>.srt|.txt, TEXT_<stem>.txt, FIXED_<name>.prproj;
  numeric suffix on conflict (FIXED_a-2.srt)
- Exit code 1 if any file failed or nothing was processed, else 0
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from reflow import mode_from_name, preview_text
from reflow.presets import LENGTH_LIMIT, MODE_NAMES, validate_bounds

from media_assistant.batch import FileStatus, FileTask, process_batch
from media_assistant.config import (
    DEFAULT_FIX_DIRECTION,
    DEFAULT_MAX_LENGTH_SETTING,
    DEFAULT_MIN_LENGTH_SETTING,
)
from media_assistant.processors import create_processor

# CLI command → processor registry key
_COMMAND_TOOLS = {
    "reflow": "reformat",
    "extract": "extract",
    "fix-project": "fix_project",
}


def _status(msg: str) -> None:
    """Print a status message to stderr (keeps stdout pipeable)."""
    print(msg, file=sys.stderr, flush=True)


def _report(task: FileTask) -> None:
    if task.status is FileStatus.PROCESSING:
        _status("Processing {}...".format(task.original_name))
    elif task.status is FileStatus.COMPLETED:
        _status("  {}: saved {}".format(task.result_message, task.output_path.name))
    elif task.status is FileStatus.ERROR:
        _status("  Error: {}".format(task.error_message))


def _add_length_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--min-length",
        type=int,
        default=DEFAULT_MIN_LENGTH_SETTING,
        help="Merge lines at or below this many characters (default: %(default)s).",
    )
    parser.add_argument(
        "--max-length",
        type=int,
        default=DEFAULT_MAX_LENGTH_SETTING,
        help="Split lines above this many characters, max {} (default: %(default)s).".format(
            LENGTH_LIMIT
        ),
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Separate from main() so tests can inspect the parser without running
    any tool.
    """
    parser = argparse.ArgumentParser(
        prog="media_assistant",
        description="Reflow subtitle/text line lengths, extract plain text, "
                    "and repair Premiere Pro project filename encoding.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug details (dropped subtitle blocks, malformed timestamps).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    reflow_cmd = sub.add_parser("reflow", help="Merge short lines and split long ones (.srt, .txt).")
    _add_length_options(reflow_cmd)

    extract_cmd = sub.add_parser("extract", help="Extract plain text from subtitles (.srt, .txt).")

    fix_cmd = sub.add_parser("fix-project", help="Fix NFC/NFD filename encoding in .prproj files.")
    fix_cmd.add_argument(
        "--direction",
        choices=["mac-to-win", "win-to-mac"],
        default=DEFAULT_FIX_DIRECTION.replace("_", "-"),
        help="Target system for the project file (default: %(default)s).",
    )

    for cmd in (reflow_cmd, extract_cmd, fix_cmd):
        cmd.add_argument("files", nargs="+", help="Input file path(s).")
        cmd.add_argument(
            "--output-dir",
            default=None,
            help="Directory to save output files (default: next to each input file).",
        )

    preview_cmd = sub.add_parser("preview", help="Show the first lines of the result for one file.")
    preview_cmd.add_argument("file", help="Input .srt or .txt file.")
    preview_cmd.add_argument(
        "--mode",
        choices=list(MODE_NAMES),
        default="reformat",
        help="Processing mode (default: %(default)s).",
    )
    _add_length_options(preview_cmd)

    return parser


def _run_preview(args: argparse.Namespace) -> int:
    path = Path(args.file)
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        return 1
    mode = mode_from_name(args.mode, args.min_length, args.max_length)
    print(preview_text(raw, mode))
    return 0


def _run_tool(args: argparse.Namespace) -> int:
    output_dir: Optional[Path] = None
    if args.output_dir:
        output_dir = Path(args.output_dir).resolve()
        if not output_dir.is_dir():
            print("Error: Output directory does not exist: {}".format(output_dir), file=sys.stderr)
            return 1

    processor = create_processor(
        _COMMAND_TOOLS[args.command],
        min_length=getattr(args, "min_length", None),
        max_length=getattr(args, "max_length", None),
        direction=getattr(args, "direction", "").replace("-", "_") or None,
    )

    tasks: List[FileTask] = [FileTask(path=Path(p).resolve()) for p in args.files]
    process_batch(tasks, processor, output_dir=output_dir, on_status=_report)

    done = [t for t in tasks if t.status is FileStatus.COMPLETED]
    failed = [t for t in tasks if t.status is FileStatus.ERROR]
    _status("")
    _status("Done! {} file(s) processed, {} failed.".format(len(done), len(failed)))
    return 1 if failed or not done else 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    Args:
        argv: Arguments (None means sys.argv, explicit lists are for tests).

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if hasattr(args, "min_length"):
        try:
            validate_bounds(args.min_length, args.max_length)
        except ValueError as e:
            print("Error: {}".format(e), file=sys.stderr)
            return 1

    if args.command == "preview":
        return _run_preview(args)
    return _run_tool(args)


if __name__ == "__main__":
    sys.exit(main())
