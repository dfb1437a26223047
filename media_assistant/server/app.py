"""FastAPI application exposing the file tools over HTTP.

WHY: Colleagues on other machines (and automation such as n8n or curl
scripts) need the same tools the desktop workflow offers: drop files, pick a
tool, poll until done, download the fixed copy. FastAPI provides request
validation, OpenAPI docs and background task support.

HOW: POST /jobs accepts one or more files plus tool options, creates one
job per file and processes the whole upload in a single background task,
file after file. Other endpoints provide polling, download, deletion,
interactive previews, tool listing and health.

RULES:
- Error responses use the ErrorResponse schema (400/404/409/422/429)
- Transforms never run concurrently: batches share one processing lock
- A failing file marks only its own job as failed
- Uploaded filenames are reduced to their basename before use
"""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, List, Optional

from fastapi import BackgroundTasks, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError

from reflow import mode_from_name, preview_text

from media_assistant import __version__
from media_assistant.config import (
    API_HOST,
    API_PORT,
    DEFAULT_FIX_DIRECTION,
    DEFAULT_MAX_LENGTH_SETTING,
    DEFAULT_MIN_LENGTH_SETTING,
    TEXT_FORMATS,
)
from media_assistant.processors import PROCESSORS, create_processor
from media_assistant.processors.project_fixer import FixDirection
from media_assistant.server.jobs import Job, JobStatus, JobStore
from media_assistant.server.models import (
    BatchCreatedResponse,
    ErrorResponse,
    HealthResponse,
    JobCreatedResponse,
    JobResponse,
    PreviewMode,
    PreviewResponse,
    Tool,
    ToolInfo,
    ToolOptions,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

job_store = JobStore()

_processing_lock = threading.Lock()

CLEANUP_INTERVAL_SECONDS = 300


async def _periodic_cleanup() -> None:
    """Run job cleanup every 5 minutes."""
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
        removed = job_store.cleanup_expired()
        if removed:
            logger.info("Cleaned up %d expired job(s)", removed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Media Assistant API",
    description=(
        "Reflow subtitle and transcript line lengths, extract plain text from "
        "subtitles, and repair filename encoding in Premiere Pro projects. "
        "Upload files, poll for status, and download the results."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _job_to_response(job: Job) -> JobResponse:
    """Convert an internal Job dataclass to a JobResponse Pydantic model."""
    return JobResponse(
        id=job.id,
        status=job.status.value,
        filename=job.filename,
        created_at=job.created_at,
        config=job.config,
        error=job.error,
        output_file=job.output_file,
        count=job.count,
        message=job.message,
    )


def _get_job_or_404(job_id: str) -> Job:
    job = job_store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
    return job


def _validate_file_extension(filename: str, extensions: set) -> None:
    """Raise HTTPException if the file extension is not accepted by the tool."""
    ext = Path(filename).suffix.lower()
    if ext not in extensions:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(extensions))
            ),
        )


def _validate_options(min_length: int, max_length: int) -> ToolOptions:
    try:
        return ToolOptions(min_length=min_length, max_length=max_length)
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        raise HTTPException(status_code=422, detail="Invalid line lengths: {}".format(messages))


def _infer_media_type(filename: str) -> str:
    """Infer MIME type from filename extension.

    RULES:
    - .srt → application/x-subrip
    - .txt → text/plain
    - .prproj → application/x-premiere-project
    - fallback → application/octet-stream
    """
    ext = Path(filename).suffix.lower()
    mapping = {
        ".srt": "application/x-subrip",
        ".txt": "text/plain",
        ".prproj": "application/x-premiere-project",
    }
    return mapping.get(ext, "application/octet-stream")


def _process_job(job_id: str, store: JobStore) -> None:
    """Run the job's tool on its uploaded file and record the outcome.

    RULES:
    - Catches all exceptions and marks the job as failed
    - The output file is saved next to the input in the job's output_dir
    """
    job = store.get_job(job_id)
    if job is None:
        # Deleted while queued
        return

    store.update_job(job_id, status=JobStatus.PROCESSING)
    config = job.config

    try:
        processor = create_processor(
            config["tool"],
            min_length=config.get("min_length"),
            max_length=config.get("max_length"),
            direction=config.get("direction"),
        )
        output = processor.process(job.filename, job.input_path.read_bytes())

        out_path = job.output_dir / output.filename
        if isinstance(output.content, bytes):
            out_path.write_bytes(output.content)
        else:
            out_path.write_text(output.content, encoding="utf-8")
    except Exception as exc:
        logger.exception("Processing failed for job %s", job_id)
        store.update_job(
            job_id, status=JobStatus.FAILED, error=str(exc) or type(exc).__name__
        )
        return

    store.update_job(
        job_id,
        status=JobStatus.COMPLETED,
        output_file=output.filename,
        count=output.count,
        message=output.message,
    )
    logger.info("Job %s completed: %s", job_id, output.message)


def _run_batch_sync(job_ids: List[str], store: JobStore) -> None:
    """Process the jobs of one upload strictly in order.

    WHY: FastAPI runs synchronous background tasks in a thread pool, so two
    uploads could otherwise be processed at the same time. The module lock
    serializes every batch.
    """
    with _processing_lock:
        for job_id in job_ids:
            _process_job(job_id, store)


# ---------------------------------------------------------------------------
# Endpoints: Jobs
# ---------------------------------------------------------------------------


@app.post(
    "/jobs",
    response_model=BatchCreatedResponse,
    status_code=201,
    tags=["jobs"],
    summary="Submit files for processing",
    description=(
        "Upload one or more files and choose a tool. One job is created per "
        "file and the files are processed one after another in the background. "
        "Poll GET /jobs/{id} for status updates."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid file type, tool or direction"},
        422: {"model": ErrorResponse, "description": "Invalid line lengths"},
        429: {"model": ErrorResponse, "description": "Too many concurrent jobs"},
    },
)
async def create_jobs(
    background_tasks: BackgroundTasks,
    files: Annotated[
        List[UploadFile],
        File(description="Files to process (.srt/.txt for text tools, .prproj for fix_project)."),
    ],
    tool: Annotated[
        str,
        Form(description="Tool to run: reformat, extract or fix_project."),
    ] = Tool.reformat.value,
    min_length: Annotated[
        int,
        Form(description="Merge lines at or below this many characters (reformat only)."),
    ] = DEFAULT_MIN_LENGTH_SETTING,
    max_length: Annotated[
        int,
        Form(description="Split lines above this many characters, max 50 (reformat only)."),
    ] = DEFAULT_MAX_LENGTH_SETTING,
    direction: Annotated[
        str,
        Form(description="Project fix direction: mac_to_win or win_to_mac (fix_project only)."),
    ] = DEFAULT_FIX_DIRECTION,
) -> BatchCreatedResponse:
    if tool not in PROCESSORS:
        raise HTTPException(
            status_code=400,
            detail="Unknown tool '{}'. Available: {}".format(tool, ", ".join(sorted(PROCESSORS))),
        )

    config = {"tool": tool}
    if tool == Tool.reformat.value:
        options = _validate_options(min_length, max_length)
        config.update(options.model_dump())
    elif tool == Tool.fix_project.value:
        try:
            config["direction"] = FixDirection(direction).value
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail="Unknown direction '{}'. Available: {}".format(
                    direction, ", ".join(d.value for d in FixDirection)
                ),
            )

    extensions = create_processor(tool).extensions
    # Sanitize filenames to prevent path traversal
    filenames = [Path(f.filename or "upload").name for f in files]
    for filename in filenames:
        _validate_file_extension(filename, extensions)

    jobs: List[Job] = []
    for upload, filename in zip(files, filenames):
        try:
            job = job_store.create_job(filename=filename, config=dict(config))
        except ValueError as exc:
            for created in jobs:
                job_store.delete_job(created.id)
            raise HTTPException(status_code=429, detail=str(exc))
        job.input_path.write_bytes(await upload.read())
        jobs.append(job)

    background_tasks.add_task(_run_batch_sync, [job.id for job in jobs], job_store)

    return BatchCreatedResponse(
        jobs=[
            JobCreatedResponse(id=job.id, status=job.status.value, filename=job.filename)
            for job in jobs
        ]
    )


@app.get(
    "/jobs/{job_id}",
    response_model=JobResponse,
    tags=["jobs"],
    summary="Get job status",
    description=(
        "Poll this endpoint to track a job. Returns the current status, the "
        "options used, and the result summary when complete."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Job not found"},
    },
)
async def get_job(job_id: str) -> JobResponse:
    return _job_to_response(_get_job_or_404(job_id))


@app.get(
    "/jobs/{job_id}/download",
    tags=["jobs"],
    summary="Download the processed file",
    description=(
        "Download the output of a completed job. The attachment name carries "
        "the FIXED_ or TEXT_ prefix."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Job or output file not found"},
        409: {"model": ErrorResponse, "description": "Job not yet completed"},
    },
)
async def download_job_output(job_id: str) -> Response:
    job = _get_job_or_404(job_id)

    if job.status != JobStatus.COMPLETED or not job.output_file:
        raise HTTPException(
            status_code=409,
            detail="Job is not completed (current status: {}).".format(job.status.value),
        )

    fpath = job.output_dir / job.output_file
    if not fpath.exists():
        raise HTTPException(
            status_code=404,
            detail="File '{}' not found on disk.".format(job.output_file),
        )

    return Response(
        content=fpath.read_bytes(),
        media_type=_infer_media_type(job.output_file),
        headers={
            "Content-Disposition": 'attachment; filename="{}"'.format(job.output_file)
        },
    )


@app.delete(
    "/jobs/{job_id}",
    status_code=204,
    tags=["jobs"],
    summary="Delete a job",
    description=(
        "Delete a job and its files. Can be used to drop a queued file or "
        "clean up after downloading."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Job not found"},
    },
)
async def delete_job(job_id: str) -> Response:
    if not job_store.delete_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Preview
# ---------------------------------------------------------------------------


@app.post(
    "/preview",
    response_model=PreviewResponse,
    tags=["preview"],
    summary="Preview the first lines of a result",
    description=(
        "Process a bounded prefix of a subtitle or text file and return the "
        "first few output lines. Empty files give an empty preview."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid file type or encoding"},
        422: {"model": ErrorResponse, "description": "Invalid line lengths"},
    },
)
async def preview(
    file: Annotated[UploadFile, File(description="Subtitle (.srt) or text (.txt) file.")],
    mode: Annotated[
        PreviewMode,
        Form(description="Processing mode: reformat or extract."),
    ] = PreviewMode.reformat,
    min_length: Annotated[
        int,
        Form(description="Merge lines at or below this many characters."),
    ] = DEFAULT_MIN_LENGTH_SETTING,
    max_length: Annotated[
        int,
        Form(description="Split lines above this many characters, max 50."),
    ] = DEFAULT_MAX_LENGTH_SETTING,
) -> PreviewResponse:
    filename = Path(file.filename or "upload").name
    _validate_file_extension(filename, TEXT_FORMATS)
    options = _validate_options(min_length, max_length)

    data = await file.read()
    try:
        raw = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File is not valid UTF-8 text.")

    text_mode = mode_from_name(mode.value, options.min_length, options.max_length)
    return PreviewResponse(preview=preview_text(raw, text_mode))


# ---------------------------------------------------------------------------
# Endpoints: Tools
# ---------------------------------------------------------------------------


@app.get(
    "/tools",
    response_model=List[ToolInfo],
    tags=["tools"],
    summary="List available tools",
    description="Returns every tool with its identifier, name and accepted extensions.",
)
async def list_tools() -> List[ToolInfo]:
    result = []
    for key in sorted(PROCESSORS):
        processor = create_processor(key)
        result.append(ToolInfo(
            key=key,
            name=processor.name,
            extensions=sorted(processor.extensions),
        ))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Entry point for the media-assistant-api console script."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(
        app,
        host=host or API_HOST,
        port=port or API_PORT,
    )
