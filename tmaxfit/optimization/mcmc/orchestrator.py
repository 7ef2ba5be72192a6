"""Chain Orchestrator
==================

Runs one chain per unit of work, strictly sequentially, on a single thread.

Each chain is a :class:`ChainTask`. :meth:`ChainOrchestrator.iter_run` is a
generator that executes one task per step and yields a
:class:`ChainProgress` event between chains; :class:`CooperativeScheduler`
drives it, handing control to the host's ``on_yield`` callback at every
yield point and honouring a :class:`CancellationToken` before the next
chain starts. A sampler step is never interrupted.

Ordering guarantees:
- chains execute in ascending chain index
- draws are concatenated chain-major, iteration-minor
- no partial RunResult is ever returned: a failed or cancelled run raises
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Callable, Generator, Optional

from tmaxfit.config.types import RunConfig
from tmaxfit.core.model import RegressionModel
from tmaxfit.exceptions import RunCancelledError, SamplerError
from tmaxfit.optimization.mcmc.result import ChainStats, Draw, RunResult
from tmaxfit.optimization.mcmc.sampler import Sampler
from tmaxfit.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

_MASK64 = 0xFFFFFFFFFFFFFFFF
_GOLDEN_GAMMA = 0x9E3779B97F4A7C15


def _splitmix64_mix(z: int) -> int:
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK64
    return z ^ (z >> 31)


def derive_chain_seed(base_seed: int, chain_index: int) -> int:
    """Derive the 64-bit seed of one chain from the run's base seed.

    SplitMix64: the state advance by an odd constant and the output mix are
    both bijections on 64-bit integers, so distinct chain indices under one
    base seed always give distinct seeds.
    """
    if chain_index < 0:
        raise ValueError(f"chain_index must be non-negative, got {chain_index}")
    state = (int(base_seed) + (chain_index + 1) * _GOLDEN_GAMMA) & _MASK64
    return _splitmix64_mix(state)


class CancellationToken:
    """Cancellation flag checked by the scheduler between chains."""

    def __init__(self):
        self._cancelled = False
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "Run cancelled") -> None:
        self._cancelled = True
        self.reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(frozen=True)
class ChainProgress:
    """Event handed to the host after each chain completes."""

    chain_index: int
    chain_count: int
    n_draws: int
    elapsed_s: float

    @property
    def completed_chains(self) -> int:
        return self.chain_index + 1

    @property
    def fraction_complete(self) -> float:
        return self.completed_chains / self.chain_count


@dataclass(frozen=True)
class ChainTask:
    """One chain: its index and derived seed."""

    chain_index: int
    seed: int

    def execute(
        self, model: RegressionModel, sampler: Sampler, config: RunConfig
    ) -> tuple[tuple[Draw, ...], ChainStats]:
        """Run the sampler for this chain and tag its draws.

        Raises:
            SamplerError: If the sampler fails or breaks its output contract.
        """
        start = time.perf_counter()
        try:
            raw = sampler.sample(model, self.seed, config.tuning_steps, config.sample_steps)
        except SamplerError as e:
            raise SamplerError(
                f"Chain {self.chain_index} failed: {e.message}",
                chain_index=self.chain_index,
                error_context=e.error_context,
            ) from e
        except Exception as e:
            raise SamplerError(
                f"Chain {self.chain_index} failed: {e}", chain_index=self.chain_index
            ) from e

        draws = self._tag(list(raw), config)
        elapsed = time.perf_counter() - start
        stats = ChainStats(
            chain_index=self.chain_index,
            seed=self.seed,
            n_tuning=config.tuning_steps,
            n_sampling=config.sample_steps,
            n_divergent=sum(1 for d in draws if d.diverging and not d.is_tuning),
            elapsed_s=elapsed,
        )
        return draws, stats

    def _tag(self, raw: list[Draw], config: RunConfig) -> tuple[Draw, ...]:
        expected = config.draws_per_chain
        if len(raw) != expected:
            raise SamplerError(
                f"Chain {self.chain_index}: sampler returned {len(raw)} draws, "
                f"expected {expected}",
                chain_index=self.chain_index,
            )

        tagged = []
        for iteration, draw in enumerate(raw):
            is_tuning = iteration < config.tuning_steps
            if draw.is_tuning != is_tuning:
                raise SamplerError(
                    f"Chain {self.chain_index}: draw {iteration} has is_tuning="
                    f"{draw.is_tuning}, expected {is_tuning}",
                    chain_index=self.chain_index,
                )
            if not draw.is_finite():
                raise SamplerError(
                    f"Chain {self.chain_index}: non-finite draw at iteration {iteration}",
                    chain_index=self.chain_index,
                )
            tagged.append(
                replace(draw, chain_index=self.chain_index, iteration_index=iteration)
            )
        return tuple(tagged)


RunSteps = Generator[ChainProgress, None, RunResult]


class CooperativeScheduler:
    """Drives a step generator, yielding to the host between steps."""

    def __init__(
        self,
        cancel_token: Optional[CancellationToken] = None,
        on_yield: Optional[Callable[[ChainProgress], None]] = None,
    ):
        self.cancel_token = cancel_token or CancellationToken()
        self.on_yield = on_yield

    def _check_cancelled(self, steps: RunSteps, completed: int) -> None:
        if self.cancel_token.cancelled:
            steps.close()
            logger.info(f"Run cancelled after {completed} chain(s); discarding draws")
            raise RunCancelledError(
                self.cancel_token.reason or "Run cancelled", completed_chains=completed
            )

    def drive(self, steps: RunSteps) -> RunResult:
        completed = 0
        while True:
            self._check_cancelled(steps, completed)
            try:
                event = next(steps)
            except StopIteration as stop:
                return stop.value
            completed += 1
            if self.on_yield is not None:
                self.on_yield(event)


class ChainOrchestrator:
    """Fans one seed out over ``chain_count`` sequential chains."""

    def __init__(self, sampler: Sampler):
        self.sampler = sampler

    @staticmethod
    def plan(config: RunConfig) -> list[ChainTask]:
        """One task per chain, in ascending chain index."""
        return [
            ChainTask(chain_index=i, seed=derive_chain_seed(config.base_seed, i))
            for i in range(config.chain_count)
        ]

    def iter_run(self, model: RegressionModel, config: RunConfig) -> RunSteps:
        """Execute chains one per step; the generator's return value is the RunResult."""
        start = time.perf_counter()
        draws: list[Draw] = []
        stats: list[ChainStats] = []

        for task in self.plan(config):
            logger.info(
                f"Chain {task.chain_index + 1}/{config.chain_count}: "
                f"{config.tuning_steps} tuning + {config.sample_steps} sampling steps"
            )
            chain_draws, chain_stats = task.execute(model, self.sampler, config)
            # only the orchestrator appends, and only after a chain completes
            draws.extend(chain_draws)
            stats.append(chain_stats)
            yield ChainProgress(
                chain_index=task.chain_index,
                chain_count=config.chain_count,
                n_draws=len(chain_draws),
                elapsed_s=chain_stats.elapsed_s,
            )

        return RunResult(
            config=config,
            draws=tuple(draws),
            chain_stats=tuple(stats),
            parameter_names=model.parameter_names,
            elapsed_s=time.perf_counter() - start,
        )

    @log_performance()
    def run(
        self,
        model: RegressionModel,
        config: RunConfig,
        cancel_token: Optional[CancellationToken] = None,
        on_yield: Optional[Callable[[ChainProgress], None]] = None,
    ) -> RunResult:
        """Run every chain and return the pooled result.

        Raises:
            SamplerError: If any chain fails (the whole run is aborted).
            RunCancelledError: If the token is cancelled between chains.
        """
        scheduler = CooperativeScheduler(cancel_token=cancel_token, on_yield=on_yield)
        result = scheduler.drive(self.iter_run(model, config))
        logger.info(
            f"Run complete: {len(result)} draws over {config.chain_count} chain(s), "
            f"{result.n_divergent} divergent"
        )
        return result


def run_chains(
    model: RegressionModel,
    config: RunConfig,
    sampler: Sampler,
    cancel_token: Optional[CancellationToken] = None,
    on_yield: Optional[Callable[[ChainProgress], None]] = None,
) -> RunResult:
    """Functional shortcut for ``ChainOrchestrator(sampler).run(...)``."""
    return ChainOrchestrator(sampler).run(
        model, config, cancel_token=cancel_token, on_yield=on_yield
    )


__all__ = [
    "derive_chain_seed",
    "CancellationToken",
    "ChainProgress",
    "ChainTask",
    "CooperativeScheduler",
    "ChainOrchestrator",
    "run_chains",
]
