"""Regression model and the data/parameter scaling it samples in."""

from tmaxfit.core.model import RegressionModel, build_model
from tmaxfit.core.scaling import Standardizer

__all__ = ["RegressionModel", "build_model", "Standardizer"]
