"""Sampler boundary and the NumPyro NUTS implementation.

The orchestrator only depends on the :class:`Sampler` protocol::

    sample(model, seed, tuning_steps, sample_steps) -> Sequence[Draw]

Any object with that method can drive a run. :class:`NumPyroNUTSSampler`
is the production implementation; tests plug in deterministic fakes.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

import jax.numpy as jnp
from jax import random
import numpy as np
from numpyro.infer import MCMC, NUTS

from tmaxfit.config.types import SamplerSettings
from tmaxfit.core.model import RegressionModel
from tmaxfit.exceptions import SamplerError
from tmaxfit.optimization.mcmc.result import Draw
from tmaxfit.utils.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Sampler(Protocol):
    """Anything able to produce one chain of draws for a model."""

    def sample(
        self,
        model: RegressionModel,
        seed: int,
        tuning_steps: int,
        sample_steps: int,
    ) -> Sequence[Draw]:
        """Return ``tuning_steps`` tuning draws followed by ``sample_steps`` draws."""
        ...


def seed_to_key(seed: int):
    """Pack a 64-bit seed into a raw ``uint32[2]`` threefry key."""
    seed = int(seed)
    return jnp.array([(seed >> 32) & 0xFFFFFFFF, seed & 0xFFFFFFFF], dtype=jnp.uint32)


def positions_to_draws(
    model: RegressionModel,
    positions: np.ndarray,
    diverging: np.ndarray | None,
    is_tuning: bool,
    start_index: int = 0,
) -> list[Draw]:
    """Decode standardized positions into tagged Draws (chain index 0)."""
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, model.dim)
    params = model.decode(positions)
    if diverging is None:
        diverging = np.zeros(len(params), dtype=bool)
    diverging = np.asarray(diverging, dtype=bool).reshape(-1)
    return [
        Draw(
            intercept=float(row[0]),
            slope=float(row[1]),
            log_noise_scale=float(row[2]),
            iteration_index=start_index + i,
            is_tuning=is_tuning,
            diverging=bool(div),
        )
        for i, (row, div) in enumerate(zip(params, diverging))
    ]


class NumPyroNUTSSampler:
    """Single-chain NUTS via NumPyro on the model's potential function.

    Warm-up draws are collected with ``MCMC.warmup(collect_warmup=True)``;
    ``MCMC.run`` then continues from the adapted post-warm-up state so the
    sampling draws share the tuned step size and mass matrix.

    The kernel and ``MCMC`` object are kept for the last
    ``(model, tuning_steps, sample_steps)`` seen, so chains after the first
    reuse NumPyro's compiled sample function instead of re-tracing it.
    """

    def __init__(self, settings: SamplerSettings | None = None):
        self.settings = settings or SamplerSettings()
        self._cached: tuple[RegressionModel, int, int, MCMC] | None = None

    def _kernel(self, model: RegressionModel) -> NUTS:
        return NUTS(
            potential_fn=model.potential_fn,
            target_accept_prob=self.settings.target_accept_prob,
            max_tree_depth=self.settings.max_tree_depth,
            dense_mass=self.settings.dense_mass,
            adapt_step_size=True,
            adapt_mass_matrix=True,
        )

    def _mcmc_for(self, model: RegressionModel, tuning_steps: int, sample_steps: int) -> MCMC:
        """Return the cached MCMC for this model and step counts, building it once."""
        if self._cached is not None:
            cached_model, cached_tuning, cached_samples, mcmc = self._cached
            if (
                cached_model is model
                and cached_tuning == tuning_steps
                and cached_samples == sample_steps
            ):
                return mcmc

        mcmc = MCMC(
            self._kernel(model),
            num_warmup=tuning_steps,
            num_samples=max(sample_steps, 1),
            num_chains=1,
            progress_bar=False,
        )
        self._cached = (model, tuning_steps, sample_steps, mcmc)
        logger.debug(
            f"Built NUTS kernel (tuning={tuning_steps}, samples={sample_steps})"
        )
        return mcmc

    def sample(
        self,
        model: RegressionModel,
        seed: int,
        tuning_steps: int,
        sample_steps: int,
    ) -> list[Draw]:
        init_params = jnp.asarray(model.initial_position())
        warmup_key, sample_key = random.split(seed_to_key(seed))

        try:
            mcmc = self._mcmc_for(model, tuning_steps, sample_steps)
            # Each chain starts from init_params, not the previous chain's state
            mcmc.post_warmup_state = None

            draws: list[Draw] = []
            if tuning_steps > 0:
                mcmc.warmup(
                    warmup_key,
                    init_params=init_params,
                    collect_warmup=True,
                    extra_fields=("diverging",),
                )
                draws.extend(
                    positions_to_draws(
                        model,
                        np.asarray(mcmc.get_samples()),
                        np.asarray(mcmc.get_extra_fields()["diverging"]),
                        is_tuning=True,
                    )
                )

            if sample_steps > 0:
                # After warmup() the run resumes from post_warmup_state
                mcmc.run(sample_key, init_params=init_params, extra_fields=("diverging",))
                draws.extend(
                    positions_to_draws(
                        model,
                        np.asarray(mcmc.get_samples()),
                        np.asarray(mcmc.get_extra_fields()["diverging"]),
                        is_tuning=False,
                        start_index=tuning_steps,
                    )
                )
        except (RuntimeError, ValueError, FloatingPointError, TypeError) as e:
            raise SamplerError(f"NUTS sampling failed: {e}") from e

        bad = sum(1 for d in draws if not d.is_finite())
        if bad:
            raise SamplerError(
                "NUTS produced non-finite draws", {"non_finite_draws": bad}
            )

        n_divergent = sum(1 for d in draws if d.diverging and not d.is_tuning)
        if n_divergent:
            logger.warning(
                f"{n_divergent} divergent transitions after warm-up; "
                "consider raising target_accept_prob"
            )
        return draws


__all__ = ["Sampler", "NumPyroNUTSSampler", "seed_to_key", "positions_to_draws"]
