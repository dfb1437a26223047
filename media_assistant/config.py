"""Configuration defaults, supported file types, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Default line lengths, the default project-fix
direction and job-store limits are plain data, not buried in logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level sets and values read with os.getenv() defaults.

RULES:
- TEXT_FORMATS / PROJECT_FORMATS list accepted extensions (lowercase, with dot)
- Line-length defaults fall back to the reflow library presets
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

from reflow.presets import DEFAULT_MAX_LENGTH, DEFAULT_MIN_LENGTH

# Load .env from the project root (where the app is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Supported file extensions
# ---------------------------------------------------------------------------

TEXT_FORMATS: set[str] = {".srt", ".txt"}
"""Subtitle and plain text files accepted by the reflow tools."""

PROJECT_FORMATS: set[str] = {".prproj"}
"""Adobe Premiere Pro project files accepted by the project fixer."""

# ---------------------------------------------------------------------------
# Tool defaults
# ---------------------------------------------------------------------------

DEFAULT_MIN_LENGTH_SETTING = int(os.getenv("MEDIA_ASSISTANT_MIN_LENGTH", str(DEFAULT_MIN_LENGTH)))
DEFAULT_MAX_LENGTH_SETTING = int(os.getenv("MEDIA_ASSISTANT_MAX_LENGTH", str(DEFAULT_MAX_LENGTH)))
DEFAULT_FIX_DIRECTION = os.getenv("MEDIA_ASSISTANT_FIX_DIRECTION", "mac_to_win").lower()

# ---------------------------------------------------------------------------
# HTTP job store
# ---------------------------------------------------------------------------

MAX_JOBS = int(os.getenv("MEDIA_ASSISTANT_MAX_JOBS", "100"))
JOB_TTL_SECONDS = int(os.getenv("MEDIA_ASSISTANT_JOB_TTL", "3600"))

API_HOST = os.getenv("MEDIA_ASSISTANT_HOST", "0.0.0.0")
API_PORT = int(os.getenv("MEDIA_ASSISTANT_PORT", "8000"))
