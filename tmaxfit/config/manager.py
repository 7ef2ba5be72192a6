"""Configuration Management for tmaxfit
======================================

YAML/JSON configuration loading with package defaults.

Every section is optional; missing keys fall back to the defaults returned
by :func:`get_default_config`. Typed run objects are built on demand by the
``get_*`` accessors.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any

import yaml

from tmaxfit.config.types import (
    NormalPrior,
    PriorSpec,
    RunConfig,
    SamplerSettings,
    SummarySettings,
)
from tmaxfit.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TEMPLATE = Path(__file__).parent / "templates" / "default.yaml"

_NUMERIC_KEYS = {
    "sampling": ("seed", "chain_count", "tuning_steps", "sample_steps", "max_tree_depth"),
    "summary": ("credible_interval", "grid_points", "posterior_samples"),
    "parser": ("min_observations",),
}

_DEFAULT_CONFIG: dict[str, Any] = {
    "metadata": {
        "config_version": "1.0",
        "description": "Default tmaxfit configuration",
    },
    "sampling": {
        "seed": 42,
        "chain_count": 2,
        "tuning_steps": 500,
        "sample_steps": 500,
        "target_accept_prob": 0.8,
        "max_tree_depth": 10,
        "dense_mass": False,
    },
    "summary": {
        "credible_interval": 0.90,
        "grid_points": 100,
        "posterior_samples": 10,
    },
    "priors": {
        "intercept": {"loc": 0.0, "scale": 10.0},
        "slope": {"loc": 0.0, "scale": 10.0},
        "log_noise_scale": {"loc": -1.0, "scale": 1.0},
    },
    "parser": {
        "min_observations": 2,
    },
    "plotting": {
        "dpi": 100,
        "trace_figsize": [12.0, 9.0],
        "fit_figsize": [10.0, 6.0],
    },
    "logging": {
        "level": "INFO",
    },
}


def get_default_config() -> dict[str, Any]:
    """Return a fresh copy of the default configuration."""
    return copy.deepcopy(_DEFAULT_CONFIG)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ConfigManager:
    """Configuration manager for tmaxfit runs.

    Key Features:
    - YAML/JSON configuration file loading
    - Defaults for every section, deep-merged under the loaded file
    - Typed accessors for the run, sampler, priors and summary settings

    Usage:
        config_manager = ConfigManager('tmaxfit.yaml')
        run_config = config_manager.get_run_config()
    """

    def __init__(
        self,
        config_file: str | Path | None = None,
        config_override: dict[str, Any] | None = None,
    ):
        """Initialize configuration manager.

        Parameters
        ----------
        config_file : str or Path, optional
            Path to YAML/JSON configuration file. Defaults are used if None.
        config_override : dict, optional
            Configuration data used instead of loading from file
        """
        self.config_file = config_file
        self.config: dict[str, Any] = get_default_config()

        if config_override is not None:
            self.config = _merge(self.config, config_override)
            logger.info("Configuration loaded from override data")
        elif config_file is not None:
            self.load_config()
        else:
            logger.debug("No configuration file given, using defaults")

    def load_config(self) -> None:
        """Load and parse the YAML/JSON configuration file.

        Falls back to the default configuration if loading fails.
        """
        try:
            config_path = Path(self.config_file)
            if not config_path.exists():
                raise FileNotFoundError(
                    f"Configuration file not found: {self.config_file}",
                )

            file_extension = config_path.suffix.lower()

            with open(config_path, encoding="utf-8") as f:
                if file_extension == ".json":
                    loaded = json.load(f)
                else:
                    loaded = yaml.safe_load(f)

            if loaded is None:
                loaded = {}
            if not isinstance(loaded, dict):
                raise ValueError(
                    f"Top-level configuration must be a mapping, got {type(loaded).__name__}"
                )

            self.config = _merge(get_default_config(), loaded)
            logger.info(f"Configuration loaded from: {self.config_file}")

            version = self.config["metadata"].get("config_version", "Unknown")
            logger.info(f"Configuration version: {version}")

            if os.environ.get("TMAXFIT_VALIDATE_CONFIG", "true").lower() == "true":
                self._validate_config()

        except json.JSONDecodeError as e:
            logger.error(f"JSON parsing error: {e}")
            logger.info("Using default configuration...")
            self.config = get_default_config()
        except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
            error_type = (
                "YAML parsing" if isinstance(e, yaml.YAMLError) else "Configuration parsing"
            )
            logger.error(f"{error_type} error: {e}")
            logger.info("Using default configuration...")
            self.config = get_default_config()

    def _validate_config(self) -> None:
        """Lightweight configuration validation.

        Warns about unknown sections and suspicious values. Can be disabled
        by setting TMAXFIT_VALIDATE_CONFIG=false.

        Raises:
            ValueError: If a section is not a mapping or a numeric setting
                holds something else, so that ``load_config`` falls back
                to the defaults.
        """
        known_sections = set(_DEFAULT_CONFIG)
        for section in self.config:
            if section not in known_sections:
                logger.warning(f"Unknown configuration section: '{section}'")

        for section, keys in _NUMERIC_KEYS.items():
            values = self.config.get(section)
            if not isinstance(values, dict):
                raise ValueError(f"Section '{section}' must be a mapping")
            for key in keys:
                value = values.get(key)
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"{section}.{key} must be a number, got {value!r}")

        sampling = self.config.get("sampling", {})
        if sampling.get("chain_count", 1) < 1:
            logger.warning("sampling.chain_count should be at least 1")
        if sampling.get("sample_steps", 1) == 0:
            logger.warning("sampling.sample_steps is 0; no posterior draws will be kept")

        interval = self.config.get("summary", {}).get("credible_interval", 0.9)
        if not 0.0 < interval < 1.0:
            logger.warning(f"summary.credible_interval out of range: {interval}")

        logger.debug("Configuration validation completed")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Return ``config[section][key]`` or ``default``."""
        return self.config.get(section, {}).get(key, default)

    def get_run_config(
        self,
        seed: int | None = None,
        chain_count: int | None = None,
        tuning_steps: int | None = None,
        sample_steps: int | None = None,
    ) -> RunConfig:
        """Build a :class:`RunConfig`, letting explicit arguments win over the file."""
        sampling = self.config["sampling"]
        return RunConfig(
            base_seed=seed if seed is not None else sampling["seed"],
            chain_count=chain_count if chain_count is not None else sampling["chain_count"],
            tuning_steps=tuning_steps if tuning_steps is not None else sampling["tuning_steps"],
            sample_steps=sample_steps if sample_steps is not None else sampling["sample_steps"],
        )

    def get_sampler_settings(self) -> SamplerSettings:
        sampling = self.config["sampling"]
        return SamplerSettings(
            target_accept_prob=float(sampling["target_accept_prob"]),
            max_tree_depth=int(sampling["max_tree_depth"]),
            dense_mass=bool(sampling["dense_mass"]),
        )

    def get_prior_spec(self) -> PriorSpec:
        priors = self.config["priors"]
        return PriorSpec(
            **{
                name: NormalPrior(float(spec["loc"]), float(spec["scale"]))
                for name, spec in priors.items()
            }
        )

    def get_summary_settings(self) -> SummarySettings:
        summary = self.config["summary"]
        return SummarySettings(
            credible_interval=float(summary["credible_interval"]),
            grid_points=int(summary["grid_points"]),
            posterior_samples=int(summary["posterior_samples"]),
        )

    @property
    def min_observations(self) -> int:
        return int(self.config["parser"]["min_observations"])

    @property
    def log_level(self) -> str:
        return str(self.config["logging"]["level"])

    def plotting_option(self, key: str) -> Any:
        return self.config["plotting"][key]
