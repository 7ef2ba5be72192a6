"""Session workflow and its state machine."""

from tmaxfit.workflows.pipeline import (
    PlotOutcome,
    PrepareOutcome,
    RunOutcome,
    RunStatus,
    SamplingSession,
)
from tmaxfit.workflows.state import PipelineState, PipelineStateMachine

__all__ = [
    "SamplingSession",
    "RunOutcome",
    "RunStatus",
    "PrepareOutcome",
    "PlotOutcome",
    "PipelineState",
    "PipelineStateMachine",
]
