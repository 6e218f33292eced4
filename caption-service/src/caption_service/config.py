"""Runtime configuration for the caption service."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the caption service."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Remote caption pipeline API
    pipeline_api_base_url: str = Field(default="https://api.almostcrackd.ai", alias="PIPELINE_API_BASE_URL")
    request_timeout_seconds: float = Field(default=60.0, alias="PIPELINE_REQUEST_TIMEOUT_SECONDS", gt=0)
    # Presigned uploads carry the whole image body
    upload_timeout_seconds: float = Field(default=120.0, alias="PIPELINE_UPLOAD_TIMEOUT_SECONDS", gt=0)

    # Uploads accepted by the HTTP API
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, alias="MAX_UPLOAD_BYTES", ge=1)

    # FastAPI
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8083, alias="APP_PORT")
    debug: bool = Field(default=False, alias="DEBUG")

    @field_validator("pipeline_api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
