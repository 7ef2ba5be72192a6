"""Unit tests for the session state machine."""

import pytest

from tmaxfit.exceptions import StateTransitionError
from tmaxfit.workflows.state import (
    HISTORY_LIMIT,
    TRANSITIONS,
    PipelineState,
    PipelineStateMachine,
)


class TestPipelineStateMachine:
    def test_starts_idle_with_controls_enabled(self):
        machine = PipelineStateMachine()
        assert machine.state is PipelineState.IDLE
        assert machine.controls_enabled
        assert not machine.busy

    def test_run_cycle(self):
        machine = PipelineStateMachine()
        for target in (PipelineState.SAMPLING, PipelineState.RENDERING, PipelineState.IDLE):
            machine.transition(target)
        assert [t.target for t in machine.history] == [
            PipelineState.SAMPLING,
            PipelineState.RENDERING,
            PipelineState.IDLE,
        ]

    def test_busy_while_sampling(self):
        machine = PipelineStateMachine()
        machine.transition(PipelineState.SAMPLING)
        assert machine.busy
        assert not machine.controls_enabled

    @pytest.mark.parametrize(
        "source,target",
        [
            (PipelineState.IDLE, PipelineState.ERROR),
            (PipelineState.IDLE, PipelineState.IDLE),
            (PipelineState.PREPARING, PipelineState.SAMPLING),
            (PipelineState.RENDERING, PipelineState.SAMPLING),
        ],
    )
    def test_undefined_transitions_rejected(self, source, target):
        machine = PipelineStateMachine()
        machine.state = source
        with pytest.raises(StateTransitionError):
            machine.transition(target)
        assert machine.state is source

    def test_error_is_recoverable(self):
        machine = PipelineStateMachine()
        machine.transition(PipelineState.SAMPLING)
        machine.fail("chain 1 failed")
        assert machine.state is PipelineState.ERROR
        assert machine.controls_enabled
        assert machine.last_error == "chain 1 failed"

        machine.transition(PipelineState.SAMPLING)
        assert machine.last_error is None

    def test_every_working_state_can_fail(self):
        for state in (PipelineState.PREPARING, PipelineState.SAMPLING, PipelineState.RENDERING):
            assert PipelineState.ERROR in TRANSITIONS[state]

    def test_reset(self):
        machine = PipelineStateMachine()
        machine.transition(PipelineState.PREPARING)
        machine.reset()
        assert machine.state is PipelineState.IDLE
        machine.reset()
        assert machine.state is PipelineState.IDLE

    def test_history_is_bounded(self):
        machine = PipelineStateMachine(history_limit=4)
        for _ in range(10):
            machine.transition(PipelineState.SAMPLING)
            machine.transition(PipelineState.IDLE, "cancelled")
        assert len(machine.history) == 4
        assert machine.history[-1].reason == "cancelled"

    def test_default_history_limit(self):
        machine = PipelineStateMachine()
        for _ in range(HISTORY_LIMIT):
            machine.transition(PipelineState.PREPARING)
            machine.transition(PipelineState.IDLE)
        assert len(machine.history) == HISTORY_LIMIT
