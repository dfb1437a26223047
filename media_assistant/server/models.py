"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for response serialization
and automatic OpenAPI documentation. Pydantic models enforce field types
at runtime and generate JSON Schema that appears in the /docs UI.

HOW: Each endpoint has its own response model. Enums represent closed sets
like tool names and processing modes. All models include Field
descriptions for rich OpenAPI docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Enum values match internal constants exactly (processor keys, mode names)
- ToolOptions carries the length-bound check shared by /jobs and /preview
- Response models never expose internal paths
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from reflow.presets import DEFAULT_MAX_LENGTH, DEFAULT_MIN_LENGTH, LENGTH_LIMIT


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Tool(str, Enum):
    """Available tool identifiers (keys of processors.PROCESSORS)."""

    reformat = "reformat"
    extract = "extract"
    fix_project = "fix_project"


class PreviewMode(str, Enum):
    """Processing modes available for previews."""

    reformat = "reformat"
    extract = "extract"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ToolOptions(BaseModel):
    """Line-length options sent as form fields alongside uploads.

    RULES:
    - 1 <= min_length <= max_length <= 50
    """

    min_length: int = Field(
        default=DEFAULT_MIN_LENGTH,
        ge=1,
        le=LENGTH_LIMIT,
        description="Merge lines at or below this many characters.",
    )
    max_length: int = Field(
        default=DEFAULT_MAX_LENGTH,
        ge=1,
        le=LENGTH_LIMIT,
        description="Split lines above this many characters.",
    )

    @model_validator(mode="after")
    def _check_order(self) -> "ToolOptions":
        if self.min_length > self.max_length:
            raise ValueError(
                "min_length ({}) must not exceed max_length ({})".format(
                    self.min_length, self.max_length
                )
            )
        return self


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class JobResponse(BaseModel):
    """Processing job status response.

    RULES:
    - error is only set when status is 'failed'
    - output_file, count and message are only set when status is 'completed'
    """

    id: str = Field(description="Unique job identifier (UUID).")
    status: str = Field(description="Current job status.")
    filename: str = Field(description="Original uploaded filename.")
    created_at: float = Field(description="Job creation timestamp (Unix epoch seconds).")
    config: Dict[str, Any] = Field(description="Tool and options used for this job.")
    error: Optional[str] = Field(
        default=None,
        description="Error message, only present when status is 'failed'.",
    )
    output_file: Optional[str] = Field(
        default=None,
        description="Download filename, only present when status is 'completed'.",
    )
    count: Optional[int] = Field(
        default=None,
        description="Number of cues/lines produced (or 1/0 changed for project fixes).",
    )
    message: Optional[str] = Field(
        default=None,
        description="Human-readable result summary.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "id": "550e8400e29b41d4a716446655440000",
                "status": "completed",
                "filename": "episode01.srt",
                "created_at": 1739959200.0,
                "config": {"tool": "reformat", "min_length": 10, "max_length": 32},
                "error": None,
                "output_file": "FIXED_episode01.srt",
                "count": 212,
                "message": "Subtitle reformatted (212 cues)",
            }
        ]
    }}


class JobCreatedResponse(BaseModel):
    """One job created by POST /jobs (status is always 'pending')."""

    id: str = Field(description="Unique job identifier (UUID) for polling status.")
    status: str = Field(description="Initial job status (always 'pending').")
    filename: str = Field(description="Original uploaded filename.")


class BatchCreatedResponse(BaseModel):
    """Jobs created for a multi-file upload, in upload (= processing) order."""

    jobs: List[JobCreatedResponse] = Field(description="One job per uploaded file.")


class PreviewResponse(BaseModel):
    """First lines of the processed output for quick display."""

    preview: str = Field(description="Up to 5 output lines, '...' appended when truncated.")


class ToolInfo(BaseModel):
    """Description of an available tool."""

    key: str = Field(description="Tool identifier used in API requests.")
    name: str = Field(description="Human-readable tool name.")
    extensions: List[str] = Field(description="Accepted input file extensions.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
