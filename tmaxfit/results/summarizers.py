"""
Posterior Summarizer
====================

Reduces a RunResult into what the renderer needs:

- per-chain traces of the sampling draws (tuning draws are discarded)
- the regression fit curve: mean and credible band of
  ``intercept + slope * x`` over a grid spanning the observed x range
- per-parameter statistics and convergence diagnostics (split R-hat, ESS)
- a small, evenly thinned set of posterior draws for export and overlay
"""

from __future__ import annotations

import io
import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpyro.diagnostics import effective_sample_size, split_gelman_rubin

from tmaxfit.config.types import PARAMETER_NAMES, SummarySettings
from tmaxfit.data.types import Dataset
from tmaxfit.exceptions import SummaryError
from tmaxfit.optimization.mcmc.result import Draw, RunResult
from tmaxfit.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

# split R-hat halves each chain; shorter chains give meaningless diagnostics
_MIN_SAMPLES_FOR_DIAGNOSTICS = 4

POSTERIOR_CSV_HEADER = ("intercept", "slope", "noise_scale")


@dataclass(frozen=True)
class FitPoint:
    """Regression curve at one grid x: posterior mean and credible bounds."""

    x: float
    y_mean: float
    y_lower: float
    y_upper: float


@dataclass(frozen=True)
class ParameterStats:
    """Marginal posterior summary of one parameter."""

    mean: float
    std: float
    lower: float
    upper: float


@dataclass(frozen=True)
class PosteriorSummary:
    """Everything the renderer needs from a run.

    Attributes
    ----------
    per_chain_traces : dict
        chain_index -> sampling draws of that chain, in iteration order
    fit_curve : tuple of FitPoint
        Ascending in x over the observed x range
    credible_interval : float
        Mass of the symmetric band, e.g. 0.90 for 5th/95th percentiles
    """

    per_chain_traces: dict[int, tuple[Draw, ...]]
    fit_curve: tuple[FitPoint, ...]
    credible_interval: float
    n_draws: int
    parameter_stats: dict[str, ParameterStats] = field(default_factory=dict)
    r_hat: Optional[dict[str, float]] = None
    ess: Optional[dict[str, float]] = None
    posterior_samples: tuple[Draw, ...] = ()

    @property
    def chain_indices(self) -> list[int]:
        return sorted(self.per_chain_traces)

    def trace_series(self, parameter: str) -> dict[int, tuple[np.ndarray, np.ndarray]]:
        """chain_index -> (iteration indices, parameter values)."""
        if parameter not in PARAMETER_NAMES:
            raise KeyError(parameter)
        series = {}
        for chain_index in self.chain_indices:
            draws = self.per_chain_traces[chain_index]
            iterations = np.array([d.iteration_index for d in draws], dtype=np.int64)
            values = np.array([d.value(parameter) for d in draws], dtype=np.float64)
            series[chain_index] = (iterations, values)
        return series

    def fit_arrays(self) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Fit curve as (x, mean, lower, upper) arrays."""
        arr = np.array(
            [(p.x, p.y_mean, p.y_lower, p.y_upper) for p in self.fit_curve],
            dtype=np.float64,
        ).reshape(-1, 4)
        return arr[:, 0], arr[:, 1], arr[:, 2], arr[:, 3]

    def fit_mean_at(self, x: float) -> float:
        """Posterior mean of the regression line at ``x`` (linear in x)."""
        grid, mean, _, _ = self.fit_arrays()
        return float(np.interp(x, grid, mean))

    def posterior_csv(self) -> str:
        """Thinned posterior draws as ``intercept,slope,noise_scale`` CSV."""
        buffer = io.StringIO()
        buffer.write(",".join(POSTERIOR_CSV_HEADER) + "\n")
        for draw in self.posterior_samples:
            buffer.write(f"{draw.intercept!r},{draw.slope!r},{draw.noise_scale!r}\n")
        return buffer.getvalue()


def sorted_percentile(sorted_values: np.ndarray, q: float) -> np.ndarray:
    """Percentile ``q`` (0-100) of data sorted along axis 0, linear interpolation."""
    n = sorted_values.shape[0]
    position = (q / 100.0) * (n - 1)
    lo = int(math.floor(position))
    hi = min(lo + 1, n - 1)
    frac = position - lo
    return sorted_values[lo] + (sorted_values[hi] - sorted_values[lo]) * frac


def compute_fit_curve(
    samples: np.ndarray, x_min: float, x_max: float, settings: SummarySettings
) -> tuple[FitPoint, ...]:
    """Mean and credible band of ``intercept + slope * x`` on an even grid."""
    grid = np.linspace(x_min, x_max, settings.grid_points)
    # (n_draws, n_grid)
    predictions = samples[:, 0:1] + samples[:, 1:2] * grid[np.newaxis, :]
    ordered = np.sort(predictions, axis=0)
    lower_q, upper_q = settings.percentiles
    mean = predictions.mean(axis=0)
    lower = sorted_percentile(ordered, lower_q)
    upper = sorted_percentile(ordered, upper_q)
    return tuple(
        FitPoint(float(x), float(m), float(lo), float(hi))
        for x, m, lo, hi in zip(grid, mean, lower, upper)
    )


def compute_parameter_stats(
    samples: np.ndarray, settings: SummarySettings
) -> dict[str, ParameterStats]:
    ordered = np.sort(samples, axis=0)
    lower_q, upper_q = settings.percentiles
    lower = sorted_percentile(ordered, lower_q)
    upper = sorted_percentile(ordered, upper_q)
    return {
        name: ParameterStats(
            mean=float(samples[:, i].mean()),
            std=float(samples[:, i].std()),
            lower=float(lower[i]),
            upper=float(upper[i]),
        )
        for i, name in enumerate(PARAMETER_NAMES)
    }


def compute_diagnostics(
    chain_samples: np.ndarray,
) -> tuple[Optional[dict[str, float]], Optional[dict[str, float]]]:
    """Split R-hat (needs >= 2 chains) and ESS per parameter.

    Args:
        chain_samples: Array of shape (n_chains, n_samples, n_params).
    """
    n_chains, n_samples, _ = chain_samples.shape
    if n_samples < _MIN_SAMPLES_FOR_DIAGNOSTICS:
        logger.debug(f"Skipping diagnostics: only {n_samples} samples per chain")
        return None, None

    ess = {
        name: float(effective_sample_size(chain_samples[:, :, i]))
        for i, name in enumerate(PARAMETER_NAMES)
    }
    r_hat = None
    if n_chains >= 2:
        r_hat = {
            name: float(split_gelman_rubin(chain_samples[:, :, i]))
            for i, name in enumerate(PARAMETER_NAMES)
        }
        worst = max(r_hat.values())
        if worst > 1.1:
            logger.warning(f"Chains may not have mixed: max R-hat = {worst:.3f}")
    return r_hat, ess


def thin_draws(draws: tuple[Draw, ...], count: int) -> tuple[Draw, ...]:
    """Pick ``count`` draws evenly spaced through the pooled sequence."""
    if count <= 0 or not draws:
        return ()
    indices = np.unique(np.linspace(0, len(draws) - 1, min(count, len(draws))).round())
    return tuple(draws[int(i)] for i in indices)


@log_performance()
def summarize(
    result: RunResult,
    dataset: Dataset,
    settings: Optional[SummarySettings] = None,
) -> PosteriorSummary:
    """Reduce a run to traces, fit curve and diagnostics.

    Raises:
        SummaryError: If the run holds no sampling draws or the dataset is empty.
    """
    settings = settings or SummarySettings()

    sampling = result.sampling_draws()
    if not sampling:
        raise SummaryError(
            "No sampling draws to summarize (sample_steps must be at least 1)",
            {
                "chain_count": result.chain_count,
                "tuning_draws": len(result.tuning_draws()),
            },
        )
    if dataset.x_range is None:
        raise SummaryError("Cannot build a fit curve for an empty dataset")

    samples = np.asarray([d.values for d in sampling], dtype=np.float64)
    x_min, x_max = dataset.x_range

    per_chain = {
        i: result.chain_draws(i) for i in range(result.chain_count)
    }
    fit_curve = compute_fit_curve(samples, x_min, x_max, settings)
    r_hat, ess = compute_diagnostics(result.chain_array())

    summary = PosteriorSummary(
        per_chain_traces=per_chain,
        fit_curve=fit_curve,
        credible_interval=settings.credible_interval,
        n_draws=len(sampling),
        parameter_stats=compute_parameter_stats(samples, settings),
        r_hat=r_hat,
        ess=ess,
        posterior_samples=thin_draws(sampling, settings.posterior_samples),
    )

    slope = summary.parameter_stats["slope"]
    logger.info(
        f"Posterior slope: {slope.mean:.4g} "
        f"[{slope.lower:.4g}, {slope.upper:.4g}] from {summary.n_draws} draws"
    )
    return summary


__all__ = [
    "FitPoint",
    "ParameterStats",
    "PosteriorSummary",
    "summarize",
    "sorted_percentile",
    "compute_fit_curve",
    "compute_diagnostics",
    "thin_draws",
]
