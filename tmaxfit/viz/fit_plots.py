"""Regression Fit Visualization

Scatter of the observations, the posterior mean regression line and the
shaded credible band, optionally with a handful of posterior draws drawn as
faint lines. Used both before a run (observations only) and after it.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
from matplotlib.figure import Figure

from tmaxfit.data.types import Dataset
from tmaxfit.optimization.mcmc.result import Draw
from tmaxfit.results.summarizers import FitPoint

logger = logging.getLogger(__name__)

OBSERVATION_COLOR = "tab:red"
FIT_COLOR = "tab:blue"


def draw_fit(
    surface: Figure,
    dataset: Optional[Dataset],
    fit_curve: Optional[Sequence[FitPoint]] = None,
    posterior_samples: Sequence[Draw] = (),
    credible_interval: Optional[float] = None,
    title: Optional[str] = None,
) -> bool:
    """Render the fit plot onto ``surface``.

    Parameters
    ----------
    surface : Figure
        Figure to draw on; its previous content is cleared
    dataset : Dataset or None
        Observations; with fewer than two points only the axes are drawn
    fit_curve : sequence of FitPoint, optional
        Mean line and credible band; omitted before a run
    posterior_samples : sequence of Draw
        Individual posterior draws overlaid as faint regression lines
    credible_interval : float, optional
        Band mass, used in the legend label

    Returns
    -------
    bool
        True on success, False if drawing failed (the error is logged)
    """
    try:
        surface.clear()
        ax = surface.add_subplot(1, 1, 1)

        x_label, y_label = dataset.columns if dataset is not None else ("x", "y")
        ax.set_xlabel(x_label)
        ax.set_ylabel(y_label)
        ax.set_title(title or f"{y_label} vs {x_label}")
        ax.grid(True, alpha=0.3)

        if dataset is None or len(dataset) < 2:
            logger.debug("Fit plot: fewer than two observations, drawing axes only")
            return True

        ax.scatter(
            dataset.x, dataset.y, s=6, color=OBSERVATION_COLOR, label="Observed", zorder=3
        )

        if posterior_samples:
            x_line = np.array([dataset.x[0], dataset.x[-1]])
            for i, draw in enumerate(posterior_samples):
                ax.plot(
                    x_line,
                    draw.intercept + draw.slope * x_line,
                    color=FIT_COLOR,
                    alpha=0.25,
                    linewidth=0.8,
                    label="Posterior draws" if i == 0 else None,
                )

        if fit_curve:
            grid = np.array([p.x for p in fit_curve])
            band_label = (
                f"{credible_interval:.0%} credible band"
                if credible_interval is not None
                else "Credible band"
            )
            ax.fill_between(
                grid,
                [p.y_lower for p in fit_curve],
                [p.y_upper for p in fit_curve],
                color=FIT_COLOR,
                alpha=0.2,
                label=band_label,
            )
            ax.plot(
                grid,
                [p.y_mean for p in fit_curve],
                color=FIT_COLOR,
                linewidth=2.0,
                label="Posterior mean",
            )

        ax.legend(loc="best", fontsize=8)
        surface.tight_layout()
        return True

    except Exception as e:
        logger.error(f"Fit plot failed: {e}")
        logger.debug("Full traceback:", exc_info=True)
        return False


__all__ = ["draw_fit"]
