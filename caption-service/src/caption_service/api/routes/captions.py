"""Caption generation API routes."""

from __future__ import annotations

import asyncio
import json
import logging
import mimetypes
from typing import Any, AsyncIterator

from fastapi import APIRouter, File, Header, HTTPException, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from ...captions import SUPPORTED_CONTENT_TYPES, is_supported_content_type, to_display
from ...config import get_settings
from ...pipeline.progress import StepTracker, format_pipeline_error
from ...pipeline.runner import MISSING_TOKEN_MESSAGE, run_caption_pipeline
from ...pipeline.types import STEP_LABELS, PipelineError, StepUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


class StepStateResponse(BaseModel):
    """Response model for step state."""

    step: int
    label: str
    status: str
    message: str | None = None


class CaptionDisplayResponse(BaseModel):
    """Response model for a displayable caption."""

    id: str
    text: str


class CaptionsResponse(BaseModel):
    """Response model for a completed caption run."""

    cdnUrl: str
    imageId: str
    captions: list[dict[str, Any]]
    display: list[CaptionDisplayResponse]
    steps: list[StepStateResponse]


def _bearer_token(authorization: str | None) -> str:
    """Extract the bearer token, or raise 401."""
    scheme, _, token = (authorization or "").strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail=MISSING_TOKEN_MESSAGE)
    return token.strip()


async def _read_upload(file: UploadFile) -> tuple[bytes, str]:
    """Read an uploaded image and resolve its content type."""
    settings = get_settings()

    content_type = file.content_type or "application/octet-stream"
    if content_type == "application/octet-stream" and file.filename:
        guessed_type, _ = mimetypes.guess_type(file.filename)
        if guessed_type:
            logger.info(f"Resolved MIME type from extension: {guessed_type} (was {content_type})")
            content_type = guessed_type

    if not is_supported_content_type(content_type):
        raise HTTPException(
            status_code=415,
            detail=(
                f"Unsupported file type: {content_type or 'unknown'}. "
                f"Supported: {', '.join(sorted(SUPPORTED_CONTENT_TYPES))}"
            ),
        )

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {settings.max_upload_bytes} byte limit",
        )

    return content, content_type


@router.post("", response_model=CaptionsResponse)
async def create_captions(
    file: UploadFile = File(...),
    authorization: str | None = Header(default=None),
):
    """
    Upload an image and generate captions for it.

    - Requests a presigned upload URL
    - Uploads the image bytes
    - Registers the uploaded image
    - Generates captions
    """
    token = _bearer_token(authorization)
    content, content_type = await _read_upload(file)

    tracker = StepTracker()
    try:
        result = await run_caption_pipeline(content, content_type, token, tracker)
    except PipelineError as e:
        logger.warning(f"Caption pipeline failed for {file.filename}: {format_pipeline_error(e)}")
        return JSONResponse(
            status_code=502,
            content={
                "error": format_pipeline_error(e),
                "step": int(e.step),
                "stepLabel": STEP_LABELS[e.step],
                "message": e.message,
                "steps": tracker.to_list(),
            },
        )

    return CaptionsResponse(
        cdnUrl=result.cdn_url,
        imageId=result.image_id,
        captions=result.captions,
        display=[CaptionDisplayResponse(**entry) for entry in to_display(result.captions)],
        steps=[StepStateResponse(**state) for state in tracker.to_list()],
    )


async def _pipeline_events(content: bytes, content_type: str, token: str) -> AsyncIterator[str]:
    """Run the pipeline and yield its updates as NDJSON lines."""
    queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()

    def on_step_update(update: StepUpdate) -> None:
        queue.put_nowait({"type": "step", **update.to_dict()})

    async def run() -> None:
        try:
            result = await run_caption_pipeline(content, content_type, token, on_step_update)
            queue.put_nowait(
                {"type": "result", **result.to_dict(), "display": to_display(result.captions)}
            )
        except PipelineError as e:
            queue.put_nowait({"type": "error", "step": int(e.step), "error": e.message})
        except Exception as e:
            logger.exception(f"Unexpected caption pipeline failure: {e}")
            queue.put_nowait({"type": "error", "step": None, "error": format_pipeline_error(e)})
        finally:
            queue.put_nowait(None)

    task = asyncio.create_task(run())
    try:
        while True:
            event = await queue.get()
            if event is None:
                break
            yield json.dumps(event) + "\n"
    finally:
        # Client went away before the run finished
        if not task.done():
            task.cancel()


@router.post("/stream")
async def stream_captions(
    file: UploadFile = File(...),
    authorization: str | None = Header(default=None),
):
    """Upload an image and stream step updates followed by the result."""
    token = _bearer_token(authorization)
    content, content_type = await _read_upload(file)

    return StreamingResponse(
        _pipeline_events(content, content_type, token),
        media_type="application/x-ndjson",
    )
