"""MCMC subpackage: sampler boundary, chain orchestration and run results.

Structure:
- result.py: Draw, ChainStats and RunResult containers
- sampler.py: Sampler protocol and the NumPyro NUTS implementation
- orchestrator.py: seed fan-out, cooperative scheduling and cancellation
"""

from tmaxfit.optimization.mcmc.orchestrator import (
    CancellationToken,
    ChainOrchestrator,
    ChainProgress,
    ChainTask,
    CooperativeScheduler,
    derive_chain_seed,
    run_chains,
)
from tmaxfit.optimization.mcmc.result import ChainStats, Draw, RunResult
from tmaxfit.optimization.mcmc.sampler import NumPyroNUTSSampler, Sampler, seed_to_key

__all__ = [
    "CancellationToken",
    "ChainOrchestrator",
    "ChainProgress",
    "ChainTask",
    "CooperativeScheduler",
    "derive_chain_seed",
    "run_chains",
    "ChainStats",
    "Draw",
    "RunResult",
    "NumPyroNUTSSampler",
    "Sampler",
    "seed_to_key",
]
