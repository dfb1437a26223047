"""Media Assistant: subtitle/text reflow and project-file repair tools.

WHY: Editors move subtitle files, transcripts and project files between
tools and operating systems. Subtitles arrive with fragments that are too
short or lines that are too long, and project files saved on one OS show
broken (decomposed) Korean filenames on the other. This package wraps those
fixes as file processors behind a CLI and an HTTP API.

HOW: Three layers: processors (one per tool, all with the same interface),
batch (sequential queue with per-file status), surfaces (CLI, FastAPI).
The line-length algorithm itself lives in the separate `reflow` library.

RULES:
- Every tool is a BaseProcessor registered in processors.PROCESSORS
- Adding a tool = one new processor module, no batch/CLI/API changes
- One failing file never aborts a batch
"""

__version__ = "0.1.0"
