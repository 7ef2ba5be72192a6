"""Posterior summaries."""

from tmaxfit.results.summarizers import (
    FitPoint,
    ParameterStats,
    PosteriorSummary,
    summarize,
)

__all__ = ["FitPoint", "ParameterStats", "PosteriorSummary", "summarize"]
