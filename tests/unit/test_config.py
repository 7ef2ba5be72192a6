"""Unit tests for configuration loading and typed run settings."""

import json

import numpy as np
import pytest
import yaml

from tmaxfit.config import (
    DEFAULT_TEMPLATE,
    ConfigManager,
    NormalPrior,
    PriorSpec,
    RunConfig,
    SamplerSettings,
    get_default_config,
)
from tmaxfit.exceptions import ConfigurationError


class TestRunConfig:
    def test_defaults(self):
        config = RunConfig(base_seed=1)
        assert (config.chain_count, config.tuning_steps, config.sample_steps) == (2, 500, 500)
        assert config.draws_per_chain == 1000
        assert config.total_draws == 2000

    def test_accepts_numpy_integers(self):
        config = RunConfig(base_seed=np.uint64(7), chain_count=np.int64(3))
        assert config.base_seed == 7 and type(config.base_seed) is int

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"base_seed": -1},
            {"base_seed": 2**64},
            {"base_seed": 1, "chain_count": 0},
            {"base_seed": 1, "tuning_steps": -1},
            {"base_seed": 1, "sample_steps": -5},
            {"base_seed": 1.5},
            {"base_seed": True},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            RunConfig(**kwargs)

    def test_zero_sample_steps_allowed(self):
        assert RunConfig(base_seed=1, sample_steps=0).sample_steps == 0

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            RunConfig(base_seed=1, chain_count=0)


class TestPriorsAndSettings:
    def test_prior_scale_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            NormalPrior(0.0, 0.0)

    def test_default_priors(self):
        spec = PriorSpec()
        assert spec.as_tuple() == (
            NormalPrior(0.0, 10.0),
            NormalPrior(0.0, 10.0),
            NormalPrior(-1.0, 1.0),
        )

    def test_sampler_settings_validation(self):
        with pytest.raises(ConfigurationError):
            SamplerSettings(target_accept_prob=1.0)
        with pytest.raises(ConfigurationError):
            SamplerSettings(max_tree_depth=0)


class TestConfigManager:
    def test_defaults_without_file(self):
        manager = ConfigManager()
        assert manager.config == get_default_config()
        assert manager.get_run_config() == RunConfig(42, 2, 500, 500)

    def test_template_matches_defaults(self):
        assert ConfigManager(DEFAULT_TEMPLATE).config == get_default_config()

    def test_yaml_file_merged_over_defaults(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text(yaml.safe_dump({"sampling": {"chain_count": 4, "seed": 9}}))
        manager = ConfigManager(path)
        run = manager.get_run_config()
        assert run.chain_count == 4 and run.base_seed == 9
        assert run.tuning_steps == 500

    def test_json_file(self, tmp_path):
        path = tmp_path / "run.json"
        path.write_text(json.dumps({"summary": {"credible_interval": 0.8}}))
        assert ConfigManager(path).get_summary_settings().credible_interval == 0.8

    def test_explicit_arguments_win(self):
        run = ConfigManager().get_run_config(seed=5, sample_steps=10)
        assert run.base_seed == 5 and run.sample_steps == 10 and run.chain_count == 2

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("sampling: [unclosed\n")
        assert ConfigManager(path).config == get_default_config()

    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        assert ConfigManager(tmp_path / "absent.yaml").config == get_default_config()

    def test_non_mapping_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        assert ConfigManager(path).config == get_default_config()

    def test_override_data(self):
        manager = ConfigManager(
            config_override={"priors": {"slope": {"loc": 0.0, "scale": 2.0}}}
        )
        priors = manager.get_prior_spec()
        assert priors.slope == NormalPrior(0.0, 2.0)
        assert priors.intercept == NormalPrior(0.0, 10.0)

    def test_unknown_section_warns(self, tmp_path, caplog):
        path = tmp_path / "extra.yaml"
        path.write_text("mystery: {a: 1}\n")
        with caplog.at_level("WARNING", logger="tmaxfit"):
            ConfigManager(path)
        assert "mystery" in caplog.text

    def test_validation_can_be_disabled(self, tmp_path, caplog, monkeypatch):
        monkeypatch.setenv("TMAXFIT_VALIDATE_CONFIG", "false")
        path = tmp_path / "extra.yaml"
        path.write_text("mystery: {a: 1}\n")
        with caplog.at_level("WARNING", logger="tmaxfit"):
            ConfigManager(path)
        assert "mystery" not in caplog.text

    @pytest.mark.parametrize(
        "content",
        [
            "sampling: {chain_count: many}\n",
            "sampling: {seed: [1, 2]}\n",
            "summary: {credible_interval: wide}\n",
            "sampling: [1, 2]\n",
        ],
    )
    def test_non_numeric_settings_fall_back_to_defaults(self, tmp_path, content):
        path = tmp_path / "typed.yaml"
        path.write_text(content)
        manager = ConfigManager(path)
        assert manager.config == get_default_config()
        assert manager.get_run_config() == RunConfig(42, 2, 500, 500)

    def test_accessors(self):
        manager = ConfigManager()
        assert manager.min_observations == 2
        assert manager.log_level == "INFO"
        assert manager.plotting_option("dpi") == 100
        assert manager.get("sampling", "dense_mass") is False
        assert manager.get("sampling", "absent", "fallback") == "fallback"
        assert manager.get_sampler_settings() == SamplerSettings()
