"""Step progress tracking for callers of the caption pipeline."""

from __future__ import annotations

from typing import Any

from .types import STEP_LABELS, PipelineError, PipelineStep, PipelineStepState, StepUpdate


def initial_step_states() -> list[PipelineStepState]:
    """Return one idle state per step, in run order."""
    return [PipelineStepState(step=step, label=STEP_LABELS[step]) for step in PipelineStep]


class StepTracker:
    """Observer that folds step updates into per-step display state."""

    def __init__(self) -> None:
        self._states = {state.step: state for state in initial_step_states()}

    def __call__(self, update: StepUpdate) -> None:
        self.apply(update)

    def apply(self, update: StepUpdate) -> None:
        state = self._states[update.step]
        state.status = update.status
        state.message = update.message

    def get(self, step: PipelineStep | int) -> PipelineStepState:
        return self._states[PipelineStep(step)]

    @property
    def states(self) -> list[PipelineStepState]:
        return [self._states[step] for step in PipelineStep]

    def to_list(self) -> list[dict[str, Any]]:
        return [state.to_dict() for state in self.states]


def format_pipeline_error(error: BaseException) -> str:
    """Render a failure the way it is shown to users."""
    if isinstance(error, PipelineError):
        return f"Step {int(error.step)} failed: {error.message}"
    return str(error) or "Unknown error"
