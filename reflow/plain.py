"""Plain text adapter: the same reflow engine, without timing.

Lines are split on newlines, trimmed, and blank lines discarded. Reformat
runs the plain split pass and the merge/balance engine from core.py;
extraction is a pass-through of the cleaned lines.
"""

from typing import List

from .core import optimize, split_long
from .models import Line
from .subtitles import normalize_newlines


def parse_lines(content: str) -> List[Line]:
    lines = (raw.strip() for raw in normalize_newlines(content).split("\n"))
    return [Line(text=text) for text in lines if text]


def serialize_lines(lines: List[Line]) -> str:
    return "\n".join(line.text for line in lines)


def reformat_lines(lines: List[Line], min_length: int, max_length: int) -> List[Line]:
    return optimize(split_long(lines, max_length), min_length, max_length)
