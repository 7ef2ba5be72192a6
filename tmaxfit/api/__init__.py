"""
Python API for tmaxfit
======================

Stateless functions for hosts that own their drawing surfaces; see
:class:`tmaxfit.workflows.SamplingSession` for the stateful controller.
"""

from tmaxfit.api.high_level import fit_dataset, plot, prepare, run_with

__all__ = [
    "prepare",
    "plot",
    "run_with",
    "fit_dataset",
]
