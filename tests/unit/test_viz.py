"""Tests for trace and fit plotting on matplotlib surfaces.

Test Coverage:
- Trace plot layout (histogram + trace per parameter) and chain colors
- Fit plot with and without a posterior summary
- Edge cases: no samples, empty and single-point datasets
- Surface registry handles and error reporting
"""

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402
from matplotlib.colors import to_rgba  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from tests.factories.sampler_factory import FakeSampler  # noqa: E402
from tmaxfit.data.types import Dataset, Observation  # noqa: E402
from tmaxfit.exceptions import RenderError  # noqa: E402
from tmaxfit.optimization.mcmc.orchestrator import run_chains  # noqa: E402
from tmaxfit.results.summarizers import summarize  # noqa: E402
from tmaxfit.viz.fit_plots import draw_fit  # noqa: E402
from tmaxfit.viz.mcmc_plots import (  # noqa: E402
    CHAIN_COLORS,
    chain_color,
    chain_hatch,
    chain_linestyle,
    draw_trace,
)
from tmaxfit.viz.surfaces import SurfaceRegistry  # noqa: E402

pytestmark = pytest.mark.visualization


@pytest.fixture
def summary(scenario_a_model, scenario_a_dataset, scenario_a_config):
    result = run_chains(scenario_a_model, scenario_a_config, FakeSampler())
    return summarize(result, scenario_a_dataset)


class TestDrawTrace:
    def test_histogram_and_trace_per_parameter(self, summary):
        surface = Figure()
        assert draw_trace(surface, summary.per_chain_traces)
        assert len(surface.axes) == 6

    def test_one_series_per_chain(self, summary):
        surface = Figure()
        draw_trace(surface, summary.per_chain_traces)
        trace_ax = surface.axes[1]
        lines = trace_ax.get_lines()
        assert len(lines) == 2
        assert to_rgba(lines[0].get_color()) == to_rgba(chain_color(0))
        assert to_rgba(lines[1].get_color()) == to_rgba(chain_color(1))

    def test_palette_wraps(self):
        assert chain_color(len(CHAIN_COLORS)) == chain_color(0)

    def test_wrapped_chains_stay_distinct(self):
        styles = {
            (chain_color(i), chain_linestyle(i), chain_hatch(i))
            for i in range(4 * len(CHAIN_COLORS))
        }
        assert len(styles) == 4 * len(CHAIN_COLORS)
        assert chain_linestyle(len(CHAIN_COLORS)) != chain_linestyle(0)

    def test_wrapped_chain_drawn_with_other_linestyle(self, summary):
        draws = summary.per_chain_traces[0]
        surface = Figure()
        assert draw_trace(surface, {0: draws, len(CHAIN_COLORS): draws})
        first, wrapped = surface.axes[1].get_lines()
        assert to_rgba(first.get_color()) == to_rgba(wrapped.get_color())
        assert first.get_linestyle() != wrapped.get_linestyle()

    def test_redraw_replaces_content(self, summary):
        surface = Figure()
        draw_trace(surface, summary.per_chain_traces)
        draw_trace(surface, summary.per_chain_traces)
        assert len(surface.axes) == 6

    def test_no_samples(self):
        surface = Figure()
        assert draw_trace(surface, {0: (), 1: ()})
        texts = [t.get_text() for ax in surface.axes for t in ax.texts]
        assert "No samples available" in texts

    def test_failure_returns_false(self):
        assert draw_trace(None, {}) is False


class TestDrawFit:
    def test_observations_only(self, scenario_a_dataset):
        surface = Figure()
        assert draw_fit(surface, scenario_a_dataset)
        ax = surface.axes[0]
        assert len(ax.collections) == 1
        assert len(ax.get_lines()) == 0

    def test_with_summary(self, scenario_a_dataset, summary):
        surface = Figure()
        assert draw_fit(
            surface,
            scenario_a_dataset,
            fit_curve=summary.fit_curve,
            posterior_samples=summary.posterior_samples,
            credible_interval=summary.credible_interval,
        )
        ax = surface.axes[0]
        # scatter + band
        assert len(ax.collections) == 2
        # posterior draws + mean line
        assert len(ax.get_lines()) == len(summary.posterior_samples) + 1
        labels = [t.get_text() for t in ax.get_legend().get_texts()]
        assert "90% credible band" in labels

    def test_axis_labels_from_columns(self):
        dataset = Dataset(
            (Observation(2000.0, 10.0), Observation(2001.0, 11.0)), columns=("DATE", "TMAX")
        )
        surface = Figure()
        draw_fit(surface, dataset)
        assert surface.axes[0].get_xlabel() == "DATE"
        assert surface.axes[0].get_ylabel() == "TMAX"

    @pytest.mark.parametrize(
        "dataset", [Dataset(()), Dataset((Observation(1.0, 2.0),)), None]
    )
    def test_degenerate_datasets_draw_axes_only(self, dataset):
        surface = Figure()
        assert draw_fit(surface, dataset)
        assert len(surface.axes) == 1
        assert len(surface.axes[0].collections) == 0

    def test_failure_returns_false(self, scenario_a_dataset):
        assert draw_fit(object(), scenario_a_dataset) is False


class TestSurfaceRegistry:
    def test_create_and_get(self):
        registry = SurfaceRegistry()
        figure = registry.create("trace")
        assert registry.get("trace") is figure
        assert "trace" in registry
        assert list(registry) == ["trace"]

    def test_unknown_surface(self):
        with pytest.raises(RenderError, match="nope"):
            SurfaceRegistry().get("nope")

    def test_register_rejects_non_figures(self):
        with pytest.raises(RenderError):
            SurfaceRegistry().register("trace", "not a figure")

    def test_clear(self, surfaces, scenario_a_dataset):
        draw_fit(surfaces.get("fit"), scenario_a_dataset)
        surfaces.clear("fit")
        assert surfaces.get("fit").axes == []

    def test_save(self, surfaces, scenario_a_dataset, tmp_path):
        draw_fit(surfaces.get("fit"), scenario_a_dataset)
        path = surfaces.save("fit", tmp_path / "plots" / "fit.png")
        assert path.exists() and path.stat().st_size > 0
