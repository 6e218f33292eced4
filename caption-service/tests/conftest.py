"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from caption_service.config import get_settings
from tests.helpers import FakePipelineApi


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_api():
    """A pipeline API where every step succeeds."""
    return FakePipelineApi()


@pytest.fixture
def png_bytes():
    """Small fake PNG payload."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def sample_captions():
    """Caption records as returned by the remote service."""
    return [
        {"id": 11, "content": "A cat asleep on a keyboard"},
        {"captionId": "cap-2", "caption": "When the deploy is Friday"},
        {"title": "   ", "text": "Mondays"},
        {"score": 3},
    ]
