"""tmaxfit: Bayesian Linear Regression of Daily Maximum Temperature
================================================================

Fits ``y ~ Normal(intercept + slope * x, exp(log_noise_scale))`` to a
two-column series (typically years vs. TMAX in degrees C) with the NumPyro
No-U-Turn Sampler, and renders per-chain traces plus the posterior fit.

Pipeline:
    raw text -> Dataset -> RegressionModel -> chains -> RunResult
    -> PosteriorSummary -> trace plot + fit plot

Quick Start:
    >>> from tmaxfit import ConfigManager, fit_dataset
    >>>
    >>> text = open("station.csv").read()   # x,y or a GHCN-Daily export
    >>> result, summary = fit_dataset(text, seed=42, chain_count=2)
    >>> print(f"Trend: {summary.parameter_stats['slope'].mean:.3f} C/year")

Interactive hosts use :class:`tmaxfit.workflows.SamplingSession`; the
``tmaxfit`` console command wraps the same session.
"""

import logging

__version__ = "0.1.0"

# JAX backend discovery is chatty on CPU-only hosts
logging.getLogger("jax._src.xla_bridge").setLevel(logging.ERROR)
logging.getLogger("jax._src.compiler").setLevel(logging.ERROR)

from tmaxfit.api import fit_dataset, plot, prepare, run_with  # noqa: E402
from tmaxfit.config import ConfigManager, RunConfig  # noqa: E402
from tmaxfit.data import Dataset, Observation, PreparedInput  # noqa: E402
from tmaxfit.exceptions import TmaxFitError  # noqa: E402
from tmaxfit.results import PosteriorSummary, summarize  # noqa: E402
from tmaxfit.workflows import RunOutcome, RunStatus, SamplingSession  # noqa: E402

__all__ = [
    "__version__",
    "ConfigManager",
    "RunConfig",
    "Dataset",
    "Observation",
    "PreparedInput",
    "PosteriorSummary",
    "SamplingSession",
    "RunOutcome",
    "RunStatus",
    "TmaxFitError",
    "fit_dataset",
    "plot",
    "prepare",
    "run_with",
    "summarize",
]
