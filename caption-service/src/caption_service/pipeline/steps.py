"""The four remote operations of a caption pipeline run."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from .client import post_json, read_error_message, require_string
from .types import CaptionRecord, PipelineContext, PipelineError, PipelineStep

logger = logging.getLogger(__name__)

PRESIGNED_URL_PATH = "/pipeline/generate-presigned-url"
REGISTER_IMAGE_PATH = "/pipeline/upload-image-from-url"
GENERATE_CAPTIONS_PATH = "/pipeline/generate-captions"


async def generate_presigned_url(context: PipelineContext, content_type: str) -> tuple[str, str]:
    """
    Request an upload destination for a file of ``content_type``.

    Returns:
        Tuple of (presigned_url, cdn_url)
    """
    step = PipelineStep.PRESIGN
    data = await post_json(context, PRESIGNED_URL_PATH, {"contentType": content_type}, step)
    if not isinstance(data, dict):
        data = {}

    presigned_url = require_string(data.get("presignedUrl"), "presignedUrl", step)
    cdn_url = require_string(data.get("cdnUrl"), "cdnUrl", step)
    return presigned_url, cdn_url


async def upload_image_bytes(
    context: PipelineContext,
    presigned_url: str,
    file_content: bytes,
    content_type: str,
) -> None:
    """
    PUT the raw image bytes to a presigned URL.

    The presigned URL authorizes the write, so no bearer token is sent.
    Transport failures are wrapped as step 2 errors.
    """
    step = PipelineStep.UPLOAD
    # Query string carries the signature
    logger.debug(f"Uploading {len(file_content)} bytes to {urlsplit(presigned_url).path}")

    try:
        response = await context.client.put(
            presigned_url,
            headers={"Content-Type": content_type},
            content=file_content,
            timeout=context.upload_timeout,
        )
        if not response.is_success:
            message = await read_error_message(response)
            raise PipelineError(step, message)
    except PipelineError:
        raise
    except Exception as e:
        raise PipelineError(step, str(e) or "Upload failed") from e


async def register_image_url(context: PipelineContext, cdn_url: str) -> str:
    """Register an uploaded image with the service and return its image ID."""
    step = PipelineStep.REGISTER
    data = await post_json(
        context,
        REGISTER_IMAGE_PATH,
        {"imageUrl": cdn_url, "isCommonUse": False},
        step,
    )
    if not isinstance(data, dict):
        data = {}

    return require_string(data.get("imageId"), "imageId", step)


async def generate_captions(context: PipelineContext, image_id: str) -> list[CaptionRecord]:
    """Generate captions for a registered image, dropping non-record entries."""
    step = PipelineStep.CAPTIONS
    data = await post_json(context, GENERATE_CAPTIONS_PATH, {"imageId": image_id}, step)

    if not isinstance(data, list):
        raise PipelineError(step, "Invalid captions response returned by API.")

    captions = [item for item in data if isinstance(item, dict)]
    if len(captions) != len(data):
        logger.debug(f"Dropped {len(data) - len(captions)} non-record caption entries")
    return captions
