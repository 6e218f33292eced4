"""Pipeline module."""

from .types import (
    STEP_LABELS,
    CaptionRecord,
    PipelineError,
    PipelineResult,
    PipelineStep,
    PipelineStepState,
    StepStatus,
    StepUpdate,
)
from .client import read_error_message, post_json, require_string
from .progress import StepTracker, format_pipeline_error, initial_step_states
from .runner import run_caption_pipeline

__all__ = [
    "STEP_LABELS",
    "CaptionRecord",
    "PipelineError",
    "PipelineResult",
    "PipelineStep",
    "PipelineStepState",
    "StepStatus",
    "StepUpdate",
    "read_error_message",
    "post_json",
    "require_string",
    "StepTracker",
    "format_pipeline_error",
    "initial_step_states",
    "run_caption_pipeline",
]
