"""MCMC run containers.

``Draw`` is one sampler step of one chain; ``RunResult`` owns every draw of
a run in chain-major, iteration-minor order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from tmaxfit.config.types import PARAMETER_NAMES, RunConfig


@dataclass(frozen=True)
class Draw:
    """One posterior parameter vector, in the data's original units."""

    intercept: float
    slope: float
    log_noise_scale: float
    chain_index: int = 0
    iteration_index: int = 0
    is_tuning: bool = False
    diverging: bool = False

    @property
    def noise_scale(self) -> float:
        return math.exp(self.log_noise_scale)

    @property
    def values(self) -> tuple[float, float, float]:
        return (self.intercept, self.slope, self.log_noise_scale)

    def value(self, parameter: str) -> float:
        if parameter not in PARAMETER_NAMES:
            raise KeyError(parameter)
        return getattr(self, parameter)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self.values)


@dataclass(frozen=True)
class ChainStats:
    """Per-chain bookkeeping collected by the orchestrator."""

    chain_index: int
    seed: int
    n_tuning: int
    n_sampling: int
    n_divergent: int
    elapsed_s: float = field(default=0.0, compare=False)


@dataclass(frozen=True)
class RunResult:
    """All draws of one run.

    Attributes
    ----------
    config : RunConfig
        Configuration the run was executed with
    draws : tuple of Draw
        Ordered by (chain_index, iteration_index)
    chain_stats : tuple of ChainStats
        One entry per chain, ascending chain index
    complete : bool
        Always True for results returned by the orchestrator; partial runs
        are never returned
    """

    config: RunConfig
    draws: tuple[Draw, ...]
    chain_stats: tuple[ChainStats, ...] = ()
    parameter_names: tuple[str, ...] = PARAMETER_NAMES
    complete: bool = True
    elapsed_s: float = field(default=0.0, compare=False)

    def __len__(self) -> int:
        return len(self.draws)

    def __iter__(self) -> Iterator[Draw]:
        return iter(self.draws)

    @property
    def chain_count(self) -> int:
        return self.config.chain_count

    @property
    def n_divergent(self) -> int:
        return sum(stats.n_divergent for stats in self.chain_stats)

    def sampling_draws(self) -> tuple[Draw, ...]:
        return tuple(d for d in self.draws if not d.is_tuning)

    def tuning_draws(self) -> tuple[Draw, ...]:
        return tuple(d for d in self.draws if d.is_tuning)

    def chain_draws(self, chain_index: int, include_tuning: bool = False) -> tuple[Draw, ...]:
        return tuple(
            d
            for d in self.draws
            if d.chain_index == chain_index and (include_tuning or not d.is_tuning)
        )

    def as_array(self, include_tuning: bool = False) -> np.ndarray:
        """Parameter values as an ``(n_draws, 3)`` array."""
        rows = [d.values for d in self.draws if include_tuning or not d.is_tuning]
        return np.asarray(rows, dtype=np.float64).reshape(-1, len(self.parameter_names))

    def chain_array(self) -> np.ndarray:
        """Sampling draws as ``(n_chains, n_samples, 3)``."""
        per_chain = [
            [d.values for d in self.chain_draws(i)] for i in range(self.chain_count)
        ]
        return np.asarray(per_chain, dtype=np.float64).reshape(
            self.chain_count, -1, len(self.parameter_names)
        )


__all__ = ["Draw", "ChainStats", "RunResult"]
