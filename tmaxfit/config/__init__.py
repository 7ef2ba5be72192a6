"""Configuration for tmaxfit runs."""

from tmaxfit.config.manager import DEFAULT_TEMPLATE, ConfigManager, get_default_config
from tmaxfit.config.types import (
    PARAMETER_NAMES,
    NormalPrior,
    PriorSpec,
    RunConfig,
    SamplerSettings,
    SummarySettings,
)

__all__ = [
    "ConfigManager",
    "DEFAULT_TEMPLATE",
    "get_default_config",
    "PARAMETER_NAMES",
    "NormalPrior",
    "PriorSpec",
    "RunConfig",
    "SamplerSettings",
    "SummarySettings",
]
