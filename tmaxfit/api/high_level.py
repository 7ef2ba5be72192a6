"""
High-Level Python API for tmaxfit
=================================

Stateless entry points for hosts that manage their own drawing surfaces.
Each call builds a fresh :class:`~tmaxfit.workflows.pipeline.SamplingSession`
around the surfaces it is given, so calls never share state.

Key Features:
- ``prepare``: raw text (or a GHCN-Daily export) to a dataset
- ``plot``: observations, optionally with a fitted curve
- ``run_with``: sample, summarize and render in one call
- ``fit_dataset``: sampling and summary only, for scripting
"""

from typing import Optional, Union

from tmaxfit.config.manager import ConfigManager
from tmaxfit.core.model import build_model
from tmaxfit.data.preparation import resolve_dataset
from tmaxfit.data.types import Dataset, PreparedInput
from tmaxfit.optimization.mcmc.orchestrator import (
    CancellationToken,
    ChainOrchestrator,
)
from tmaxfit.optimization.mcmc.result import RunResult
from tmaxfit.optimization.mcmc.sampler import NumPyroNUTSSampler, Sampler
from tmaxfit.results.summarizers import PosteriorSummary, summarize
from tmaxfit.utils.logging import get_logger
from tmaxfit.viz.surfaces import SurfaceRegistry
from tmaxfit.workflows.pipeline import (
    PlotOutcome,
    PrepareOutcome,
    RunOutcome,
    SamplingSession,
)

logger = get_logger(__name__)

InputData = Union[str, PreparedInput, Dataset]


def prepare(raw_text: str, config: Optional[ConfigManager] = None) -> PrepareOutcome:
    """
    Parse raw input into a dataset plus its normalized text.

    Args:
        raw_text: Two-column delimited text or a raw GHCN-Daily CSV export
        config: Configuration (defaults used when omitted)

    Returns:
        PrepareOutcome with either ``prepared`` or ``error`` set

    Example:
        >>> outcome = prepare("x,y\\n1,10\\n2,12\\n3,14\\n")
        >>> outcome.prepared.n_observations
        3
    """
    return SamplingSession(config=config).prepare(raw_text)


def plot(
    surfaces: SurfaceRegistry,
    fit_surface_id: str,
    summary: Optional[PosteriorSummary],
    input_data: InputData,
    config: Optional[ConfigManager] = None,
) -> PlotOutcome:
    """Draw the observations (and the fit, when a summary is given)."""
    return SamplingSession(surfaces=surfaces, config=config).plot(
        fit_surface_id, summary, input_data
    )


def run_with(
    surfaces: SurfaceRegistry,
    trace_surface_id: str,
    posterior_surface_id: str,
    seed: int,
    input_data: InputData,
    chain_count: int,
    tuning_steps: int,
    sample_steps: int,
    sampler: Optional[Sampler] = None,
    config: Optional[ConfigManager] = None,
    cancel_token: Optional[CancellationToken] = None,
    keep_draws: bool = False,
) -> RunOutcome:
    """
    Run the full model -> chains -> summary -> plots cycle.

    Args:
        surfaces: Registry holding both target surfaces
        trace_surface_id: Surface receiving the trace plot
        posterior_surface_id: Surface receiving the fit plot
        seed: Base seed, fanned out into per-chain seeds
        input_data: Raw text, PreparedInput or Dataset
        chain_count: Number of chains
        tuning_steps: Warm-up steps per chain
        sample_steps: Retained draws per chain
        sampler: Sampler override (NUTS by default)
        config: Configuration (defaults used when omitted)
        cancel_token: Token checked between chains
        keep_draws: Attach the RunResult to the outcome

    Returns:
        RunOutcome; ``status`` tells success, error or cancellation apart
    """
    session = SamplingSession(surfaces=surfaces, sampler=sampler, config=config)
    return session.run_with(
        trace_surface_id,
        posterior_surface_id,
        seed,
        input_data,
        chain_count,
        tuning_steps,
        sample_steps,
        cancel_token=cancel_token,
        keep_draws=keep_draws,
    )


def fit_dataset(
    input_data: InputData,
    seed: Optional[int] = None,
    chain_count: Optional[int] = None,
    tuning_steps: Optional[int] = None,
    sample_steps: Optional[int] = None,
    sampler: Optional[Sampler] = None,
    config: Optional[ConfigManager] = None,
) -> tuple[RunResult, PosteriorSummary]:
    """
    Sample and summarize without rendering.

    Unlike the other entry points this raises: errors surface as
    :class:`~tmaxfit.exceptions.TmaxFitError` subclasses.

    Example:
        >>> result, summary = fit_dataset(text, seed=42, chain_count=2)
        >>> summary.fit_mean_at(2.5)
    """
    config = config or ConfigManager()
    dataset = resolve_dataset(input_data, config.min_observations)
    run_config = config.get_run_config(
        seed=seed,
        chain_count=chain_count,
        tuning_steps=tuning_steps,
        sample_steps=sample_steps,
    )
    logger.info(
        f"Fitting {len(dataset)} observations: {run_config.chain_count} chain(s), "
        f"seed {run_config.base_seed}"
    )
    model = build_model(dataset, priors=config.get_prior_spec())
    sampler = sampler or NumPyroNUTSSampler(config.get_sampler_settings())
    result = ChainOrchestrator(sampler).run(model, run_config)
    return result, summarize(result, dataset, config.get_summary_settings())


__all__ = ["prepare", "plot", "run_with", "fit_dataset"]
