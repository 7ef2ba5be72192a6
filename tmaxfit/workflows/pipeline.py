"""
Sampling Session
================

Host-facing controller for the prepare -> plot -> run -> plot cycle.

Every entry point returns an outcome object carrying either a payload or a
human-readable error string; none of them raise into the host. Progress is
tracked by :class:`~tmaxfit.workflows.state.PipelineStateMachine`, so after
any request the session is back in IDLE or ERROR with controls enabled.

Workflow of ``run_with``:
1. Resolve the input into a dataset
2. Build the regression model
3. Run the chains (cooperative, cancellable between chains)
4. Summarize the sampling draws
5. Render the trace plot and the fit plot
"""

from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from tmaxfit.config.manager import ConfigManager
from tmaxfit.core.model import build_model
from tmaxfit.data.preparation import prepare, resolve_dataset
from tmaxfit.data.types import Dataset, PreparedInput
from tmaxfit.exceptions import (
    RenderError,
    RunCancelledError,
    StateTransitionError,
    TmaxFitError,
)
from tmaxfit.optimization.mcmc.orchestrator import (
    CancellationToken,
    ChainOrchestrator,
    ChainProgress,
)
from tmaxfit.optimization.mcmc.result import RunResult
from tmaxfit.optimization.mcmc.sampler import NumPyroNUTSSampler, Sampler
from tmaxfit.results.summarizers import PosteriorSummary, summarize
from tmaxfit.utils.logging import get_logger, log_operation
from tmaxfit.viz.fit_plots import draw_fit
from tmaxfit.viz.mcmc_plots import draw_trace
from tmaxfit.viz.surfaces import SurfaceRegistry
from tmaxfit.workflows.state import PipelineState, PipelineStateMachine

logger = get_logger(__name__)

InputData = Union[str, PreparedInput, Dataset]


class RunStatus(str, Enum):
    OK = "ok"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PrepareOutcome:
    prepared: Optional[PreparedInput] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PlotOutcome:
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RunOutcome:
    """What ``run_with`` reports back to the host.

    Render failures are listed in ``render_errors`` but leave ``status`` at
    OK: the numeric result stays valid even when drawing fails.
    """

    status: RunStatus
    elapsed_ms: float
    error: Optional[str] = None
    summary: Optional[PosteriorSummary] = None
    run_result: Optional[RunResult] = None
    posterior_text: str = ""
    render_errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return self.status is RunStatus.OK


class SamplingSession:
    """Stateful controller used by a UI or the CLI.

    Parameters
    ----------
    surfaces : SurfaceRegistry, optional
        Drawing surfaces addressed by id in ``plot`` and ``run_with``
    sampler : Sampler, optional
        Defaults to NUTS with the configured sampler settings
    config : ConfigManager, optional
        Defaults to the package defaults
    """

    def __init__(
        self,
        surfaces: Optional[SurfaceRegistry] = None,
        sampler: Optional[Sampler] = None,
        config: Optional[ConfigManager] = None,
    ):
        self.surfaces = surfaces if surfaces is not None else SurfaceRegistry()
        self.config = config if config is not None else ConfigManager()
        self.sampler = sampler or NumPyroNUTSSampler(self.config.get_sampler_settings())
        self.machine = PipelineStateMachine()
        self._cancel_token: Optional[CancellationToken] = None

    @property
    def state(self) -> PipelineState:
        return self.machine.state

    @property
    def controls_enabled(self) -> bool:
        return self.machine.controls_enabled

    def cancel(self, reason: str = "Run cancelled by user") -> bool:
        """Request cancellation of the run in progress; False if none is running."""
        if self._cancel_token is None:
            return False
        self._cancel_token.cancel(reason)
        logger.info("Cancellation requested")
        return True

    def _fail(self, error: Exception) -> str:
        message = str(error)
        logger.error(message)
        self.machine.fail(message)
        return message

    def _fail_unexpected(self, error: Exception) -> str:
        logger.debug(f"Full traceback:\n{traceback.format_exc()}")
        return self._fail(error if str(error) else RuntimeError(repr(error)))

    def prepare(self, raw_text: str) -> PrepareOutcome:
        """Parse raw input and return its normalized text form."""
        try:
            self.machine.transition(PipelineState.PREPARING)
        except StateTransitionError as e:
            return PrepareOutcome(error=str(e))

        try:
            prepared = prepare(raw_text, min_observations=self.config.min_observations)
        except TmaxFitError as e:
            return PrepareOutcome(error=self._fail(e))
        except Exception as e:
            return PrepareOutcome(error=self._fail_unexpected(e))

        self.machine.transition(PipelineState.IDLE, "prepared")
        return PrepareOutcome(prepared=prepared)

    def plot(
        self,
        fit_surface_id: str,
        summary: Optional[PosteriorSummary],
        input_data: InputData,
    ) -> PlotOutcome:
        """Draw the fit plot; with no summary only the observations are drawn."""
        try:
            self.machine.transition(PipelineState.RENDERING)
        except StateTransitionError as e:
            return PlotOutcome(error=str(e))

        try:
            dataset = resolve_dataset(input_data, self.config.min_observations)
            error = self._render_fit(fit_surface_id, dataset, summary)
        except TmaxFitError as e:
            return PlotOutcome(error=self._fail(e))
        except Exception as e:
            return PlotOutcome(error=self._fail_unexpected(e))

        if error is not None:
            return PlotOutcome(error=self._fail(RenderError(error)))
        self.machine.transition(PipelineState.IDLE, "plotted")
        return PlotOutcome()

    def run_with(
        self,
        trace_surface_id: str,
        posterior_surface_id: str,
        seed: int,
        input_data: InputData,
        chain_count: int,
        tuning_steps: int,
        sample_steps: int,
        on_yield: Optional[Callable[[ChainProgress], None]] = None,
        cancel_token: Optional[CancellationToken] = None,
        keep_draws: bool = False,
    ) -> RunOutcome:
        """Model -> chains -> summary -> plots, timed end to end."""
        start = time.perf_counter()

        def elapsed_ms() -> float:
            return (time.perf_counter() - start) * 1000.0

        try:
            self.machine.transition(PipelineState.SAMPLING)
        except StateTransitionError as e:
            return RunOutcome(RunStatus.ERROR, elapsed_ms(), error=str(e))

        self._cancel_token = cancel_token or CancellationToken()
        try:
            dataset = resolve_dataset(input_data, self.config.min_observations)
            run_config = self.config.get_run_config(
                seed=seed,
                chain_count=chain_count,
                tuning_steps=tuning_steps,
                sample_steps=sample_steps,
            )
            model = build_model(dataset, priors=self.config.get_prior_spec())
            result = ChainOrchestrator(self.sampler).run(
                model, run_config, cancel_token=self._cancel_token, on_yield=on_yield
            )
            summary = summarize(result, dataset, self.config.get_summary_settings())
        except RunCancelledError as e:
            self.machine.transition(PipelineState.IDLE, "cancelled")
            return RunOutcome(RunStatus.CANCELLED, elapsed_ms(), error=str(e))
        except TmaxFitError as e:
            return RunOutcome(RunStatus.ERROR, elapsed_ms(), error=self._fail(e))
        except Exception as e:
            return RunOutcome(RunStatus.ERROR, elapsed_ms(), error=self._fail_unexpected(e))
        finally:
            self._cancel_token = None

        self.machine.transition(PipelineState.RENDERING)
        with log_operation("render plots", logger, logging.DEBUG):
            render_errors = [
                error
                for error in (
                    self._render_trace(trace_surface_id, summary),
                    self._render_fit(posterior_surface_id, dataset, summary),
                )
                if error is not None
            ]
        for error in render_errors:
            logger.warning(error)
        self.machine.transition(PipelineState.IDLE, "run complete")

        outcome = RunOutcome(
            RunStatus.OK,
            elapsed_ms(),
            summary=summary,
            run_result=result if keep_draws else None,
            posterior_text=summary.posterior_csv(),
            render_errors=tuple(render_errors),
        )
        logger.info(f"Elapsed: {outcome.elapsed_ms:.0f}ms")
        return outcome

    def prepare_and_run(
        self,
        raw_text: str,
        trace_surface_id: str,
        posterior_surface_id: str,
        seed: int,
        chain_count: int,
        tuning_steps: int,
        sample_steps: int,
        on_yield: Optional[Callable[[ChainProgress], None]] = None,
    ) -> RunOutcome:
        """prepare -> clear trace -> plot observations -> run (which plots again)."""
        prepared = self.prepare(raw_text)
        if not prepared.success:
            return RunOutcome(RunStatus.ERROR, 0.0, error=prepared.error)

        if trace_surface_id in self.surfaces:
            self.surfaces.clear(trace_surface_id)
        self.plot(posterior_surface_id, None, prepared.prepared)

        return self.run_with(
            trace_surface_id,
            posterior_surface_id,
            seed,
            prepared.prepared,
            chain_count,
            tuning_steps,
            sample_steps,
            on_yield=on_yield,
        )

    def _render_trace(self, surface_id: str, summary: PosteriorSummary) -> Optional[str]:
        try:
            surface = self.surfaces.get(surface_id)
        except RenderError as e:
            return str(e)
        if not draw_trace(surface, summary.per_chain_traces):
            return f"Trace plot failed on surface '{surface_id}'"
        return None

    def _render_fit(
        self,
        surface_id: str,
        dataset: Dataset,
        summary: Optional[PosteriorSummary],
    ) -> Optional[str]:
        try:
            surface = self.surfaces.get(surface_id)
        except RenderError as e:
            return str(e)
        ok = draw_fit(
            surface,
            dataset,
            fit_curve=summary.fit_curve if summary is not None else None,
            posterior_samples=summary.posterior_samples if summary is not None else (),
            credible_interval=summary.credible_interval if summary is not None else None,
        )
        if not ok:
            return f"Fit plot failed on surface '{surface_id}'"
        return None


__all__ = [
    "SamplingSession",
    "RunOutcome",
    "RunStatus",
    "PrepareOutcome",
    "PlotOutcome",
]
