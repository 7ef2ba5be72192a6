"""Posterior sampling for tmaxfit."""

from tmaxfit.optimization.mcmc import (
    CancellationToken,
    ChainOrchestrator,
    NumPyroNUTSSampler,
    RunResult,
    Sampler,
    run_chains,
)

__all__ = [
    "CancellationToken",
    "ChainOrchestrator",
    "NumPyroNUTSSampler",
    "RunResult",
    "Sampler",
    "run_chains",
]
