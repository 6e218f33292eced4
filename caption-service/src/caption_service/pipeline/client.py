"""HTTP helpers for the remote caption pipeline API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .types import PipelineContext, PipelineError, PipelineStep

logger = logging.getLogger(__name__)


async def read_error_message(response: httpx.Response) -> str:
    """
    Turn a failed response into a single displayable message.

    JSON bodies are searched for a non-empty ``message`` then ``error``
    field; any other body is used as trimmed text. When nothing usable is
    found, or the body cannot be read, the result is ``"<status> <reason>"``.
    Never raises.
    """
    fallback = f"{response.status_code} {response.reason_phrase}".strip()

    try:
        await response.aread()
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            data = response.json()
            if isinstance(data, dict):
                for key in ("message", "error"):
                    value = data.get(key)
                    if isinstance(value, str) and value.strip():
                        return value
            return fallback

        text = response.text.strip()
        return text or fallback
    except Exception as e:
        logger.debug(f"Could not read error body ({response.status_code}): {e}")
        return fallback


async def post_json(
    context: PipelineContext,
    path: str,
    body: Any,
    step: PipelineStep,
) -> Any:
    """
    POST a JSON body with bearer auth and return the decoded JSON response.

    Args:
        context: Run context (client, base URL, token, timeouts)
        path: Path relative to the API base URL
        body: JSON-serializable request body
        step: Step to attribute failures to

    Raises:
        PipelineError: If the response is not 2xx
    """
    response = await context.client.post(
        f"{context.base_url}{path}",
        headers={
            "Authorization": f"Bearer {context.token}",
            "Content-Type": "application/json",
        },
        json=body,
        timeout=context.request_timeout,
    )

    if not response.is_success:
        message = await read_error_message(response)
        logger.debug(f"POST {path} failed ({response.status_code}): {message}")
        raise PipelineError(step, message)

    return response.json()


def require_string(value: Any, label: str, step: PipelineStep) -> str:
    """Return ``value`` unchanged if it is a non-blank string."""
    if not isinstance(value, str) or not value.strip():
        raise PipelineError(step, f"Invalid {label} returned by API.")
    return value
