"""Rendering onto matplotlib figures."""

from tmaxfit.viz.fit_plots import draw_fit
from tmaxfit.viz.mcmc_plots import (
    CHAIN_COLORS,
    chain_color,
    chain_hatch,
    chain_linestyle,
    draw_trace,
)
from tmaxfit.viz.surfaces import SurfaceRegistry

__all__ = [
    "draw_fit",
    "draw_trace",
    "chain_color",
    "chain_linestyle",
    "chain_hatch",
    "CHAIN_COLORS",
    "SurfaceRegistry",
]
