"""
Pytest Configuration and Fixtures for tmaxfit
=============================================

Shared fixtures, markers and test utilities for the entire test suite.
"""

import matplotlib

# Non-interactive backend for every test that draws
matplotlib.use("Agg")

import pytest  # noqa: E402

from tests.factories.data_factory import (  # noqa: E402
    SCENARIO_A_TEXT,
    TemperatureDataFactory,
)
from tests.factories.sampler_factory import FakeSampler  # noqa: E402
from tmaxfit.config.types import RunConfig  # noqa: E402
from tmaxfit.core.model import build_model  # noqa: E402
from tmaxfit.data.parser import parse  # noqa: E402
from tmaxfit.viz.surfaces import SurfaceRegistry  # noqa: E402


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for workflows")
    config.addinivalue_line("markers", "mcmc: MCMC statistical tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "slow: Slow tests (> 5 seconds)")
    config.addinivalue_line(
        "markers", "visualization: Plotting and visualization tests"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "property" in path:
            item.add_marker(pytest.mark.property)


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def data_factory():
    return TemperatureDataFactory(seed=1234)


@pytest.fixture
def scenario_a_dataset():
    """Four perfectly linear points: y = 8 + 2x."""
    return parse(SCENARIO_A_TEXT)


@pytest.fixture
def scenario_a_model(scenario_a_dataset):
    return build_model(scenario_a_dataset)


@pytest.fixture
def scenario_a_config():
    return RunConfig(base_seed=42, chain_count=2, tuning_steps=50, sample_steps=50)


@pytest.fixture
def fake_sampler():
    return FakeSampler()


@pytest.fixture
def surfaces():
    """Registry with empty 'trace' and 'fit' figures."""
    registry = SurfaceRegistry()
    registry.create("trace", figsize=(8, 6), dpi=50)
    registry.create("fit", figsize=(6, 4), dpi=50)
    return registry
