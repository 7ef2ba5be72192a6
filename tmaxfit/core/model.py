"""Model Builder: Bayesian linear regression on one covariate.

Likelihood and priors, evaluated on standardized data:

    y_s ~ Normal(intercept + slope * x_s, exp(log_noise_scale))
    intercept       ~ Normal(prior.intercept.loc, prior.intercept.scale)
    slope           ~ Normal(prior.slope.loc, prior.slope.scale)
    log_noise_scale ~ Normal(prior.log_noise_scale.loc, prior.log_noise_scale.scale)

Sampling on the log noise scale keeps the parameter space unconstrained,
so the gradient-based sampler never proposes a negative sigma.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
import numpy as np
from jax.scipy.stats import norm
from scipy import stats

from tmaxfit.config.types import PARAMETER_NAMES, PriorSpec
from tmaxfit.core.scaling import Standardizer
from tmaxfit.data.types import Dataset
from tmaxfit.exceptions import ModelError
from tmaxfit.utils.logging import get_logger

jax.config.update("jax_enable_x64", True)

logger = get_logger(__name__)

# Floor for the initial noise guess on perfectly linear data
_MIN_INITIAL_NOISE = 1e-2


class RegressionModel:
    """Target density over (intercept, slope, log_noise_scale).

    Positions handed to :meth:`log_density` live in standardized space; use
    :meth:`decode` / :meth:`encode` to move to and from original units.
    """

    parameter_names = PARAMETER_NAMES
    dim = len(PARAMETER_NAMES)

    def __init__(self, x: np.ndarray, y: np.ndarray, priors: PriorSpec | None = None):
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        if x.shape != y.shape or x.ndim != 1:
            raise ModelError(
                "x and y must be one-dimensional and of equal length",
                {"x_shape": x.shape, "y_shape": y.shape},
            )
        if x.size < 2:
            raise ModelError(
                "At least two observations are required", {"n_observations": int(x.size)}
            )

        self.priors = priors or PriorSpec()
        self.standardizer = Standardizer.fit(x, y)
        self.n_observations = int(x.size)

        self._xs = jnp.asarray(self.standardizer.scale_x(x))
        self._ys = jnp.asarray(self.standardizer.scale_y(y))
        self._prior_loc = jnp.asarray([p.loc for p in self.priors.as_tuple()])
        self._prior_scale = jnp.asarray([p.scale for p in self.priors.as_tuple()])

        self._value_and_grad = jax.jit(jax.value_and_grad(self.log_density))

    def log_density(self, position):
        """Unnormalized log posterior at a standardized-space position."""
        intercept, slope, log_noise = position[0], position[1], position[2]
        mu = intercept + slope * self._xs
        log_likelihood = jnp.sum(norm.logpdf(self._ys, mu, jnp.exp(log_noise)))
        log_prior = jnp.sum(norm.logpdf(position, self._prior_loc, self._prior_scale))
        return log_likelihood + log_prior

    def potential_fn(self, position):
        """Negative log density, the potential energy NUTS integrates."""
        return -self.log_density(position)

    def log_density_and_gradient(self, position) -> tuple[float, np.ndarray]:
        """Evaluate the log density and its gradient.

        Returns:
            ``(log_density, gradient)`` as a Python float and a numpy array.
        """
        value, grad = self._value_and_grad(jnp.asarray(position, dtype=jnp.float64))
        return float(value), np.asarray(grad)

    def decode(self, positions) -> np.ndarray:
        """Standardized-space positions to original-unit parameters."""
        return self.standardizer.unscale(positions)

    def encode(self, params) -> np.ndarray:
        """Original-unit parameters to standardized-space positions."""
        return self.standardizer.rescale(params)

    def initial_position(self) -> np.ndarray:
        """Least-squares starting point in standardized space."""
        xs = np.asarray(self._xs)
        ys = np.asarray(self._ys)
        fit = stats.linregress(xs, ys)
        residuals = ys - (fit.intercept + fit.slope * xs)
        noise = max(float(np.std(residuals)), _MIN_INITIAL_NOISE)
        return np.array([fit.intercept, fit.slope, np.log(noise)], dtype=np.float64)


def build_model(dataset: Dataset, priors: PriorSpec | None = None) -> RegressionModel:
    """Build the regression target for a parsed dataset.

    Raises:
        ModelError: If the dataset is too small or all x values are identical.
    """
    if len(dataset) < 2:
        raise ModelError(
            "At least two observations are required", {"n_observations": len(dataset)}
        )
    model = RegressionModel(dataset.x, dataset.y, priors=priors)
    scaler = model.standardizer
    logger.info(
        f"Built regression model on {model.n_observations} observations "
        f"(x: loc={scaler.x_loc:.4g}, scale={scaler.x_scale:.4g}; "
        f"y: loc={scaler.y_loc:.4g}, scale={scaler.y_scale:.4g})"
    )
    return model


__all__ = ["RegressionModel", "build_model"]
