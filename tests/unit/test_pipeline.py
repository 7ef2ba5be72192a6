"""Unit tests for the sampling session and the stateless API.

Test Coverage:
- prepare / plot / run_with outcomes and state after each call
- Scenario B (no sampling draws) and Scenario C (cancellation) at session level
- Error recovery: parse, model and sampler failures leave controls enabled
- Render failures reported without discarding the numeric result
"""

import pytest

from tests.factories.data_factory import SCENARIO_A_TEXT, sample_ghcn_export
from tests.factories.sampler_factory import FailingSampler, FakeSampler
from tmaxfit.api import fit_dataset, plot, prepare, run_with
from tmaxfit.data.types import Dataset, Observation
from tmaxfit.exceptions import ParseError
from tmaxfit.optimization.mcmc.orchestrator import CancellationToken
from tmaxfit.workflows import PipelineState, RunStatus, SamplingSession


@pytest.fixture
def session(surfaces):
    return SamplingSession(surfaces=surfaces, sampler=FakeSampler())


def _run(session, text=SCENARIO_A_TEXT, **kwargs):
    params = dict(seed=42, chain_count=2, tuning_steps=50, sample_steps=50)
    params.update(kwargs)
    return session.run_with(
        "trace",
        "fit",
        params.pop("seed"),
        text,
        params.pop("chain_count"),
        params.pop("tuning_steps"),
        params.pop("sample_steps"),
        **params,
    )


class TestPrepare:
    def test_success(self, session):
        outcome = session.prepare(SCENARIO_A_TEXT)
        assert outcome.success
        assert outcome.prepared.n_observations == 4
        assert session.state is PipelineState.IDLE

    def test_ghcn(self, session):
        outcome = session.prepare(sample_ghcn_export())
        assert outcome.prepared.source_format == "ghcn"

    def test_failure_enters_error_state(self, session):
        outcome = session.prepare("x,y\n")
        assert not outcome.success
        assert "No usable data rows" in outcome.error
        assert session.state is PipelineState.ERROR
        assert session.controls_enabled
        assert session.machine.last_error == outcome.error

    def test_rejected_while_busy(self, session):
        session.machine.transition(PipelineState.SAMPLING)
        outcome = session.prepare(SCENARIO_A_TEXT)
        assert not outcome.success
        assert session.state is PipelineState.SAMPLING


class TestPlot:
    def test_observations_only(self, session, surfaces):
        outcome = session.plot("fit", None, SCENARIO_A_TEXT)
        assert outcome.success
        assert len(surfaces.get("fit").axes) == 1
        assert session.state is PipelineState.IDLE

    def test_unknown_surface(self, session):
        outcome = session.plot("missing", None, SCENARIO_A_TEXT)
        assert not outcome.success
        assert "missing" in outcome.error
        assert session.state is PipelineState.ERROR


class TestRunWith:
    def test_scenario_a(self, session, surfaces):
        outcome = _run(session, keep_draws=True)
        assert outcome.status is RunStatus.OK
        assert outcome.success
        assert outcome.error is None
        assert outcome.elapsed_ms >= 0
        assert len(outcome.run_result.sampling_draws()) == 100
        assert outcome.summary.fit_mean_at(2.5) == pytest.approx(13.0, abs=0.5)
        assert len(outcome.posterior_text.strip().splitlines()) == 11
        assert outcome.render_errors == ()
        assert len(surfaces.get("trace").axes) == 6
        assert session.state is PipelineState.IDLE

    def test_draws_not_kept_by_default(self, session):
        assert _run(session).run_result is None

    def test_scenario_b_reports_empty_draws(self, session):
        outcome = _run(session, sample_steps=0)
        assert outcome.status is RunStatus.ERROR
        assert "No sampling draws" in outcome.error
        assert session.state is PipelineState.ERROR
        assert session.controls_enabled

    def test_scenario_c_cancel_after_first_chain(self, session, surfaces):
        token = CancellationToken()

        def cancel_after_first(progress):
            if progress.chain_index == 0:
                session.cancel()

        outcome = _run(session, cancel_token=token, on_yield=cancel_after_first)
        assert outcome.status is RunStatus.CANCELLED
        assert outcome.summary is None
        assert outcome.run_result is None
        assert token.cancelled
        # nothing drawn on the trace surface
        assert surfaces.get("trace").axes == []
        assert session.state is PipelineState.IDLE

    def test_cancel_without_run(self, session):
        assert session.cancel() is False

    def test_parse_error(self, session):
        outcome = _run(session, text="garbage")
        assert outcome.status is RunStatus.ERROR
        assert session.state is PipelineState.ERROR

    def test_model_error_for_identical_x(self, session):
        dataset = Dataset((Observation(1.0, 10.0), Observation(1.0, 12.0)))
        outcome = _run(session, text=dataset)
        assert outcome.status is RunStatus.ERROR
        assert "zero variance" in outcome.error

    def test_sampler_failure_names_chain(self, surfaces):
        session = SamplingSession(surfaces=surfaces, sampler=FailingSampler(fail_on_call=1))
        outcome = _run(session)
        assert outcome.status is RunStatus.ERROR
        assert "Chain 1" in outcome.error
        assert session.state is PipelineState.ERROR

    def test_invalid_run_config(self, session):
        outcome = _run(session, chain_count=0)
        assert outcome.status is RunStatus.ERROR
        assert "chain_count" in outcome.error

    def test_recovers_after_error(self, session):
        assert _run(session, text="garbage").status is RunStatus.ERROR
        assert _run(session).status is RunStatus.OK
        assert session.state is PipelineState.IDLE

    def test_render_error_keeps_numeric_result(self, session):
        outcome = session.run_with("missing", "fit", 42, SCENARIO_A_TEXT, 2, 10, 10)
        assert outcome.status is RunStatus.OK
        assert outcome.summary is not None
        assert len(outcome.render_errors) == 1
        assert "missing" in outcome.render_errors[0]
        assert session.state is PipelineState.IDLE

    def test_rejected_while_busy(self, session):
        session.machine.transition(PipelineState.RENDERING)
        outcome = _run(session)
        assert outcome.status is RunStatus.ERROR
        assert session.state is PipelineState.RENDERING

    def test_progress_events(self, session):
        events = []
        _run(session, chain_count=3, on_yield=events.append)
        assert [e.completed_chains for e in events] == [1, 2, 3]

    def test_deterministic(self, surfaces):
        first = _run(SamplingSession(surfaces=surfaces, sampler=FakeSampler()), keep_draws=True)
        second = _run(SamplingSession(surfaces=surfaces, sampler=FakeSampler()), keep_draws=True)
        assert first.run_result == second.run_result
        assert first.posterior_text == second.posterior_text

    def test_prepare_and_run(self, session, surfaces):
        outcome = session.prepare_and_run(SCENARIO_A_TEXT, "trace", "fit", 7, 2, 10, 10)
        assert outcome.success
        assert len(surfaces.get("fit").axes) == 1
        assert [t.target for t in session.machine.history] == [
            PipelineState.PREPARING,
            PipelineState.IDLE,
            PipelineState.RENDERING,
            PipelineState.IDLE,
            PipelineState.SAMPLING,
            PipelineState.RENDERING,
            PipelineState.IDLE,
        ]


class TestStatelessApi:
    def test_prepare(self):
        assert prepare(SCENARIO_A_TEXT).prepared.n_observations == 4

    def test_plot(self, surfaces):
        assert plot(surfaces, "fit", None, SCENARIO_A_TEXT).success

    def test_run_with(self, surfaces):
        outcome = run_with(
            surfaces, "trace", "fit", 42, SCENARIO_A_TEXT, 2, 20, 20, sampler=FakeSampler()
        )
        assert outcome.status is RunStatus.OK

    def test_fit_dataset(self):
        result, summary = fit_dataset(
            SCENARIO_A_TEXT, seed=1, chain_count=2, tuning_steps=5, sample_steps=5,
            sampler=FakeSampler(),
        )
        assert len(result) == 20
        assert summary.n_draws == 10

    def test_fit_dataset_raises(self):
        with pytest.raises(ParseError):
            fit_dataset("", sampler=FakeSampler())
