"""MCMC Trace Visualization

Draws, for each parameter, a histogram of the sampling draws and the trace
(value vs. iteration) with one series per chain. Chains that mixed well look
like overlapping noise bands.

Chain colors come from a fixed palette indexed by chain index, so the same
chain always has the same color across redraws. Past the end of the palette
the colors repeat with the next line style and histogram hatch, which keeps
up to 40 chains apart.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

import numpy as np
from matplotlib.figure import Figure

from tmaxfit.config.types import PARAMETER_NAMES
from tmaxfit.optimization.mcmc.result import Draw

logger = logging.getLogger(__name__)

CHAIN_COLORS = (
    "tab:red",
    "tab:green",
    "tab:blue",
    "tab:purple",
    "tab:cyan",
    "tab:olive",
    "tab:orange",
    "tab:brown",
    "tab:pink",
    "tab:gray",
)

CHAIN_LINESTYLES = ("-", "--", ":", "-.")
CHAIN_HATCHES = (None, "//", "..", "xx")

PARAMETER_LABELS = {
    "intercept": "Intercept",
    "slope": "Slope",
    "log_noise_scale": "log(noise scale)",
}

_MAX_LEGEND_CHAINS = 10


def chain_color(chain_index: int) -> str:
    """Color assigned to a chain."""
    return CHAIN_COLORS[chain_index % len(CHAIN_COLORS)]


def chain_linestyle(chain_index: int) -> str:
    """Line style of a chain; changes each time the palette wraps."""
    cycle = chain_index // len(CHAIN_COLORS)
    return CHAIN_LINESTYLES[cycle % len(CHAIN_LINESTYLES)]


def chain_hatch(chain_index: int) -> Optional[str]:
    cycle = chain_index // len(CHAIN_COLORS)
    return CHAIN_HATCHES[cycle % len(CHAIN_HATCHES)]


def _histogram_bins(values: np.ndarray) -> np.ndarray | int:
    """Shared bin edges so every chain's histogram lines up."""
    finite = values[np.isfinite(values)]
    if finite.size == 0 or np.ptp(finite) == 0:
        return 10
    n_bins = int(np.clip(np.sqrt(finite.size), 10, 50))
    return np.linspace(finite.min(), finite.max(), n_bins + 1)


def draw_trace(
    surface: Figure,
    traces: Mapping[int, Sequence[Draw]],
    parameters: Sequence[str] = PARAMETER_NAMES,
    title: Optional[str] = "MCMC Trace Plots",
) -> bool:
    """Render histograms and traces for each parameter onto ``surface``.

    Parameters
    ----------
    surface : Figure
        Figure to draw on; its previous content is cleared
    traces : mapping
        chain_index -> sampling draws of that chain, in iteration order
    parameters : sequence of str
        Parameters to plot, one row each

    Returns
    -------
    bool
        True on success, False if drawing failed (the error is logged)
    """
    try:
        surface.clear()
        axes = surface.subplots(len(parameters), 2, squeeze=False)
        chain_indices = sorted(traces)

        if not any(traces[i] for i in chain_indices):
            for row in axes:
                for ax in row:
                    ax.set_axis_off()
            axes[0][0].text(0.5, 0.5, "No samples available", ha="center", va="center")
            return True

        for row, parameter in enumerate(parameters):
            hist_ax, trace_ax = axes[row]
            label = PARAMETER_LABELS.get(parameter, parameter)

            pooled = np.array(
                [d.value(parameter) for i in chain_indices for d in traces[i]]
            )
            bins = _histogram_bins(pooled)

            for chain_index in chain_indices:
                draws = traces[chain_index]
                if not draws:
                    continue
                color = chain_color(chain_index)
                values = np.array([d.value(parameter) for d in draws])
                iterations = np.array([d.iteration_index for d in draws])

                hist_ax.hist(
                    values,
                    bins=bins,
                    color=color,
                    alpha=0.3,
                    hatch=chain_hatch(chain_index),
                    label=f"Chain {chain_index}",
                )
                trace_ax.plot(
                    iterations,
                    values,
                    color=color,
                    linestyle=chain_linestyle(chain_index),
                    linewidth=0.7,
                    alpha=0.8,
                    label=f"Chain {chain_index}",
                )

            hist_ax.set_title(f"{label} (posterior)")
            hist_ax.set_ylabel("Count")
            trace_ax.set_title(f"{label} (trace)")
            trace_ax.set_xlabel("Iteration")
            trace_ax.set_ylabel(label)
            trace_ax.grid(True, alpha=0.3)

            if row == 0 and len(chain_indices) <= _MAX_LEGEND_CHAINS:
                trace_ax.legend(loc="upper right", fontsize=8)

        if title:
            surface.suptitle(title, fontsize=14, fontweight="bold")
        surface.tight_layout()
        return True

    except Exception as e:
        logger.error(f"Trace plot failed: {e}")
        logger.debug("Full traceback:", exc_info=True)
        return False


__all__ = [
    "draw_trace",
    "chain_color",
    "chain_linestyle",
    "chain_hatch",
    "CHAIN_COLORS",
    "CHAIN_LINESTYLES",
    "CHAIN_HATCHES",
    "PARAMETER_LABELS",
]
