"""Standardization of data and parameters.

The sampler works on standardized data, ``xs = (x - x_loc) / x_scale`` and
``ys = (y - y_loc) / y_scale``. A regression on the standardized data maps
back to the original units through a linear change of variables:

    slope           = slope_s * y_scale / x_scale
    intercept       = y_loc + y_scale * intercept_s - slope * x_loc
    log_noise_scale = log_noise_scale_s + log(y_scale)

``rescale`` and ``unscale`` implement this map in both directions on arrays
of shape ``(..., 3)`` ordered (intercept, slope, log_noise_scale).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from tmaxfit.exceptions import ModelError


@dataclass(frozen=True)
class Standardizer:
    """Affine scaling of x and y plus the induced parameter transform."""

    x_loc: float
    x_scale: float
    y_loc: float
    y_scale: float

    @classmethod
    def fit(cls, x: np.ndarray, y: np.ndarray) -> "Standardizer":
        """Derive location/scale from data.

        Raises:
            ModelError: If x has zero variance (undefined slope).
        """
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        x_scale = float(np.std(x))
        if not x_scale > 0.0 or not np.isfinite(x_scale):
            raise ModelError(
                "x has zero variance; the slope is undefined",
                {"n_observations": int(x.size)},
            )
        y_scale = float(np.std(y))
        if not y_scale > 0.0 or not np.isfinite(y_scale):
            y_scale = 1.0
        return cls(float(np.mean(x)), x_scale, float(np.mean(y)), y_scale)

    def scale_x(self, x):
        return (np.asarray(x, dtype=np.float64) - self.x_loc) / self.x_scale

    def scale_y(self, y):
        return (np.asarray(y, dtype=np.float64) - self.y_loc) / self.y_scale

    def unscale(self, scaled) -> np.ndarray:
        """Map standardized-space parameters to original units."""
        scaled = np.asarray(scaled, dtype=np.float64)
        intercept_s, slope_s, log_noise_s = scaled[..., 0], scaled[..., 1], scaled[..., 2]
        slope = slope_s * (self.y_scale / self.x_scale)
        intercept = self.y_loc + self.y_scale * intercept_s - slope * self.x_loc
        log_noise = log_noise_s + np.log(self.y_scale)
        return np.stack([intercept, slope, log_noise], axis=-1)

    def rescale(self, params) -> np.ndarray:
        """Map original-unit parameters to standardized space."""
        params = np.asarray(params, dtype=np.float64)
        intercept, slope, log_noise = params[..., 0], params[..., 1], params[..., 2]
        slope_s = slope * (self.x_scale / self.y_scale)
        intercept_s = (intercept + slope * self.x_loc - self.y_loc) / self.y_scale
        log_noise_s = log_noise - np.log(self.y_scale)
        return np.stack([intercept_s, slope_s, log_noise_s], axis=-1)


__all__ = ["Standardizer"]
