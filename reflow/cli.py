"""CLI wrapper for the reflow library.

WHY: Reflowing a single file from a shell or a pipeline should not need
the full media_assistant application. This module gives the library its
own small command line, runnable as `python -m reflow`.

HOW: Parses sys.argv for input path, output path, --mode, --min-length and
--max-length, validates the bounds, then delegates to process_text().

RULES:
- Usage:
    python -m reflow input.srt output.srt [--mode reformat]
    python -m reflow input.txt  (outputs to stdout)
    cat input.srt | python -m reflow - output.srt --mode extract
- Exit codes: 0 = success, 1 = error.
- Progress messages go to stderr; text goes to stdout (if no output file).
"""

import sys
from typing import List

from . import EmptyInputError, Reformat, mode_from_name, process_text
from .presets import DEFAULT_MAX_LENGTH, DEFAULT_MIN_LENGTH, LENGTH_LIMIT, validate_bounds

HELP_TEXT = """reflow: subtitle and plain text line-length optimizer

Usage:
    python -m reflow input.srt output.srt
    python -m reflow input.srt output.txt --mode extract
    python -m reflow input.txt --min-length 8 --max-length 28
    cat input.srt | python -m reflow - output.srt

Options:
    --mode reformat      (default) merge short lines, split long ones
    --mode extract       plain text only (timecodes and tags removed)
    --min-length N       merge lines at or below N characters (default {min})
    --max-length N       split lines above N characters (default {max}, limit {limit})
""".format(min=DEFAULT_MIN_LENGTH, max=DEFAULT_MAX_LENGTH, limit=LENGTH_LIMIT)

_VALUE_FLAGS = ("--mode", "--min-length", "--max-length")


def main(argv: "List[str]" = None) -> None:
    """Run the reflow CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
    """
    if argv is None:
        argv = sys.argv[1:]

    args = list(argv)

    if not args or args[0] in ("-h", "--help"):
        print(HELP_TEXT)
        sys.exit(0)

    options = {
        "--mode": "reformat",
        "--min-length": str(DEFAULT_MIN_LENGTH),
        "--max-length": str(DEFAULT_MAX_LENGTH),
    }
    filtered_args = []  # type: List[str]
    i = 0
    while i < len(args):
        flag, eq, value = args[i].partition("=")
        if flag in _VALUE_FLAGS and eq:
            options[flag] = value
            i += 1
        elif args[i] in _VALUE_FLAGS and i + 1 < len(args):
            options[args[i]] = args[i + 1]
            i += 2
        else:
            filtered_args.append(args[i])
            i += 1

    try:
        min_length = int(options["--min-length"])
        max_length = int(options["--max-length"])
        validate_bounds(min_length, max_length)
        mode = mode_from_name(options["--mode"], min_length, max_length)
    except ValueError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    input_path = filtered_args[0] if filtered_args else "-"
    output_path = filtered_args[1] if len(filtered_args) > 1 else None

    try:
        if input_path == "-":
            raw = sys.stdin.read()
        else:
            with open(input_path, "r", encoding="utf-8-sig") as f:
                raw = f.read()
    except (OSError, UnicodeDecodeError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    try:
        result = process_text(raw, mode)
    except EmptyInputError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    if output_path:
        try:
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(result.output_text)
        except OSError as e:
            print("Error: {}".format(e), file=sys.stderr)
            sys.exit(1)
        kind = "cues" if result.is_subtitle and isinstance(mode, Reformat) else "lines"
        print(
            "Wrote {} {} to {}".format(result.unit_count, kind, output_path),
            file=sys.stderr,
        )
    else:
        print(result.output_text)


if __name__ == "__main__":
    main()
