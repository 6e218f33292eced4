"""Caption pipeline orchestrator."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

import httpx

from ..config import get_settings
from .steps import (
    generate_captions,
    generate_presigned_url,
    register_image_url,
    upload_image_bytes,
)
from .types import (
    STEP_LABELS,
    PipelineContext,
    PipelineError,
    PipelineResult,
    PipelineStep,
    StepObserver,
    StepStatus,
    StepUpdate,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

MISSING_TOKEN_MESSAGE = "Missing access token. Please sign in again."


async def _run_step(
    step: PipelineStep,
    operation: Callable[[], Awaitable[T]],
    notify: StepObserver,
) -> T:
    """Run one step, reporting running then success or error."""
    notify(StepUpdate(step=step, status=StepStatus.RUNNING))
    logger.info(f"Step {int(step)} ({STEP_LABELS[step]}) started")

    try:
        result = await operation()
    except PipelineError as e:
        logger.warning(f"Step {int(step)} failed: {e.message}")
        notify(StepUpdate(step=step, status=StepStatus.ERROR, message=e.message))
        raise
    except Exception as e:
        message = str(e) or "Unknown error"
        logger.warning(f"Step {int(step)} failed with {type(e).__name__}: {message}")
        notify(StepUpdate(step=step, status=StepStatus.ERROR, message=message))
        raise PipelineError(step, message) from e

    notify(StepUpdate(step=step, status=StepStatus.SUCCESS))
    logger.info(f"Step {int(step)} ({STEP_LABELS[step]}) succeeded")
    return result


async def run_caption_pipeline(
    file_content: bytes,
    content_type: str,
    token: str,
    on_step_update: StepObserver | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    base_url: str | None = None,
) -> PipelineResult:
    """
    Upload an image and generate captions for it.

    Steps run strictly in order and the first failure ends the run:

    1. Obtain a presigned upload URL and CDN URL
    2. PUT the image bytes to the presigned URL
    3. Register the CDN URL as an image
    4. Generate captions for the registered image

    Args:
        file_content: Raw image bytes
        content_type: MIME type declared for the image
        token: Bearer token for the caption API
        on_step_update: Optional observer called on every step transition
        client: HTTP client to use; a private one is opened when omitted
        base_url: Caption API origin; defaults to the configured one

    Returns:
        PipelineResult with the CDN URL, image ID and caption records

    Raises:
        PipelineError: Attributed to the step that failed

    The observer is called inline. An exception raised by the observer is
    not caught and propagates in place of the step's own result, including
    while an ``error`` update is being reported.
    """
    if not token.strip():
        raise PipelineError(PipelineStep.PRESIGN, MISSING_TOKEN_MESSAGE)

    if client is None:
        async with httpx.AsyncClient() as owned_client:
            return await run_caption_pipeline(
                file_content,
                content_type,
                token,
                on_step_update,
                client=owned_client,
                base_url=base_url,
            )

    settings = get_settings()
    notify: StepObserver = on_step_update or (lambda update: None)
    context = PipelineContext(
        client=client,
        base_url=(base_url or settings.pipeline_api_base_url).rstrip("/"),
        token=token,
        request_timeout=settings.request_timeout_seconds,
        upload_timeout=settings.upload_timeout_seconds,
    )

    presigned_url, cdn_url = await _run_step(
        PipelineStep.PRESIGN,
        lambda: generate_presigned_url(context, content_type),
        notify,
    )
    await _run_step(
        PipelineStep.UPLOAD,
        lambda: upload_image_bytes(context, presigned_url, file_content, content_type),
        notify,
    )
    image_id = await _run_step(
        PipelineStep.REGISTER,
        lambda: register_image_url(context, cdn_url),
        notify,
    )
    captions = await _run_step(
        PipelineStep.CAPTIONS,
        lambda: generate_captions(context, image_id),
        notify,
    )

    logger.info(f"Caption pipeline finished for image {image_id} with {len(captions)} captions")
    return PipelineResult(cdn_url=cdn_url, image_id=image_id, captions=captions)
