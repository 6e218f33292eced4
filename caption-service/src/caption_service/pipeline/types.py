"""Pipeline type definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable

import httpx


class PipelineStep(IntEnum):
    """Ordered stages of a caption pipeline run."""

    PRESIGN = 1
    UPLOAD = 2
    REGISTER = 3
    CAPTIONS = 4


class StepStatus(str, Enum):
    """Pipeline step status."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


STEP_LABELS: dict[PipelineStep, str] = {
    PipelineStep.PRESIGN: "Generate presigned upload URL",
    PipelineStep.UPLOAD: "Upload image bytes",
    PipelineStep.REGISTER: "Register uploaded image URL",
    PipelineStep.CAPTIONS: "Generate captions",
}

# Caption schema belongs to the remote service
CaptionRecord = dict[str, Any]


class PipelineError(Exception):
    """A pipeline failure attributed to the step that produced it."""

    def __init__(self, step: PipelineStep | int, message: str):
        super().__init__(message)
        self.step = PipelineStep(step)
        self.message = message

    def __repr__(self) -> str:
        return f"PipelineError(step={int(self.step)}, message={self.message!r})"


@dataclass(frozen=True)
class StepUpdate:
    """A status transition emitted while a run progresses."""

    step: PipelineStep
    status: StepStatus
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"step": int(self.step), "status": self.status.value}
        if self.message is not None:
            result["message"] = self.message
        return result


StepObserver = Callable[[StepUpdate], None]


@dataclass(frozen=True)
class PipelineContext:
    """Per-run values shared by the step functions."""

    client: httpx.AsyncClient
    base_url: str
    token: str
    request_timeout: float = 60.0
    upload_timeout: float = 120.0


@dataclass
class PipelineResult:
    """Output of a successful run."""

    cdn_url: str
    image_id: str
    captions: list[CaptionRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (camelCase to match the remote API)."""
        return {
            "cdnUrl": self.cdn_url,
            "imageId": self.image_id,
            "captions": self.captions,
        }


@dataclass
class PipelineStepState:
    """Display state of a single pipeline step."""

    step: PipelineStep
    label: str
    status: StepStatus = StepStatus.IDLE
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "step": int(self.step),
            "label": self.label,
            "status": self.status.value,
        }
        if self.message:
            result["message"] = self.message
        return result
