"""Typed configuration objects for a sampling run.

These are the immutable values the pipeline stages consume. They are
usually built from a :class:`~tmaxfit.config.manager.ConfigManager`, but can
be constructed directly.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field

from tmaxfit.exceptions import ConfigurationError
from tmaxfit.utils.logging import get_logger

logger = get_logger(__name__)

UINT64_MAX = 2**64 - 1

PARAMETER_NAMES = ("intercept", "slope", "log_noise_scale")


@dataclass(frozen=True)
class RunConfig:
    """Seed and step counts for one multi-chain run.

    Attributes
    ----------
    base_seed : int
        User-supplied seed, fanned out into one seed per chain
    chain_count : int
        Number of chains (>= 1)
    tuning_steps : int
        Warm-up iterations per chain used for step-size adaptation
    sample_steps : int
        Post-warm-up draws per chain. Zero is accepted so that the
        summarizer can report the empty-draws error explicitly.
    """

    base_seed: int
    chain_count: int = 2
    tuning_steps: int = 500
    sample_steps: int = 500

    def __post_init__(self):
        for name in ("base_seed", "chain_count", "tuning_steps", "sample_steps"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ConfigurationError(
                    f"{name} must be an integer", {name: repr(value)}
                )
            object.__setattr__(self, name, int(value))
        if not 0 <= self.base_seed <= UINT64_MAX:
            raise ConfigurationError(
                "base_seed must fit in an unsigned 64-bit integer",
                {"base_seed": self.base_seed},
            )
        if self.chain_count < 1:
            raise ConfigurationError(
                "chain_count must be at least 1", {"chain_count": self.chain_count}
            )
        if self.tuning_steps < 0:
            raise ConfigurationError(
                "tuning_steps cannot be negative", {"tuning_steps": self.tuning_steps}
            )
        if self.sample_steps < 0:
            raise ConfigurationError(
                "sample_steps cannot be negative", {"sample_steps": self.sample_steps}
            )
        if self.sample_steps == 0:
            logger.warning("sample_steps=0: the run will produce no posterior draws")

    @property
    def draws_per_chain(self) -> int:
        return self.tuning_steps + self.sample_steps

    @property
    def total_draws(self) -> int:
        return self.chain_count * self.draws_per_chain


@dataclass(frozen=True)
class NormalPrior:
    """Normal prior on one parameter of the standardized model."""

    loc: float = 0.0
    scale: float = 10.0

    def __post_init__(self):
        if not self.scale > 0:
            raise ConfigurationError(
                "Prior scale must be positive", {"scale": self.scale}
            )


@dataclass(frozen=True)
class PriorSpec:
    """Weakly-informative priors, expressed in standardized units.

    The model standardizes x and y before sampling, so a slope prior of
    Normal(0, 10) allows correlations far beyond the physically possible
    range, and the noise prior centres sigma around exp(-1) of the y spread.
    """

    intercept: NormalPrior = field(default_factory=lambda: NormalPrior(0.0, 10.0))
    slope: NormalPrior = field(default_factory=lambda: NormalPrior(0.0, 10.0))
    log_noise_scale: NormalPrior = field(default_factory=lambda: NormalPrior(-1.0, 1.0))

    def as_tuple(self) -> tuple[NormalPrior, NormalPrior, NormalPrior]:
        return (self.intercept, self.slope, self.log_noise_scale)


@dataclass(frozen=True)
class SamplerSettings:
    """NUTS kernel settings passed to the NumPyro sampler."""

    target_accept_prob: float = 0.8
    max_tree_depth: int = 10
    dense_mass: bool = False

    def __post_init__(self):
        if not 0.0 < self.target_accept_prob < 1.0:
            raise ConfigurationError(
                "target_accept_prob must lie in (0, 1)",
                {"target_accept_prob": self.target_accept_prob},
            )
        if self.max_tree_depth < 1:
            raise ConfigurationError(
                "max_tree_depth must be at least 1",
                {"max_tree_depth": self.max_tree_depth},
            )


@dataclass(frozen=True)
class SummarySettings:
    """Controls for the posterior summary."""

    credible_interval: float = 0.90
    grid_points: int = 100
    posterior_samples: int = 10

    def __post_init__(self):
        if not 0.0 < self.credible_interval < 1.0:
            raise ConfigurationError(
                "credible_interval must lie in (0, 1)",
                {"credible_interval": self.credible_interval},
            )
        if self.grid_points < 2:
            raise ConfigurationError(
                "grid_points must be at least 2", {"grid_points": self.grid_points}
            )
        if self.posterior_samples < 0:
            raise ConfigurationError(
                "posterior_samples cannot be negative",
                {"posterior_samples": self.posterior_samples},
            )

    @property
    def percentiles(self) -> tuple[float, float]:
        """Lower/upper percentiles of the symmetric credible interval."""
        tail = (1.0 - self.credible_interval) / 2.0 * 100.0
        return tail, 100.0 - tail


__all__ = [
    "PARAMETER_NAMES",
    "RunConfig",
    "NormalPrior",
    "PriorSpec",
    "SamplerSettings",
    "SummarySettings",
]
