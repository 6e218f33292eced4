"""Helpers for accepting images and presenting caption records."""

from __future__ import annotations

import json
from typing import Any

from .pipeline.types import CaptionRecord

SUPPORTED_CONTENT_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
        "image/gif",
        "image/heic",
    }
)

# Checked in order when picking the display text of a record
_TEXT_FIELDS = ("caption", "content", "text", "title")


def is_supported_content_type(content_type: str | None) -> bool:
    return content_type in SUPPORTED_CONTENT_TYPES


def caption_text(record: CaptionRecord) -> str:
    """Pick the human-readable text of a caption record.

    Falls back to the JSON form of the record when no text field is set.
    """
    for key in _TEXT_FIELDS:
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return json.dumps(record, separators=(",", ":"), ensure_ascii=False, default=str)


def caption_id(record: CaptionRecord, index: int) -> str:
    for key in ("id", "captionId"):
        value = record.get(key)
        if value is not None:
            return str(value)
    return str(index)


def to_display(captions: list[CaptionRecord]) -> list[dict[str, Any]]:
    """Convert caption records to ``{id, text}`` entries."""
    return [
        {"id": caption_id(record, index), "text": caption_text(record)}
        for index, record in enumerate(captions)
    ]
