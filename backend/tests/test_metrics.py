"""
Tests for PagefitMetrics.

- Label allowlists: invalid labels dropped, never raised
- snapshot() reflects counter increments
- Exposition contains every pagefit_ metric
"""
import pytest
from prometheus_client import CollectorRegistry

from pagefit.metrics import PagefitMetrics, get_metrics

pytestmark = pytest.mark.smoke


@pytest.fixture
def metrics():
    return PagefitMetrics(registry=CollectorRegistry())


class TestConversions:
    def test_increment(self, metrics):
        metrics.inc_conversion("vector", "succeeded")
        metrics.inc_conversion("vector", "succeeded")
        metrics.inc_conversion("raster", "failed")
        snap = metrics.snapshot()["conversions_total"]
        assert snap["vector:succeeded"] == 2
        assert snap["raster:failed"] == 1
        assert snap["raster:rejected"] == 0

    def test_invalid_labels_dropped(self, metrics):
        metrics.inc_conversion("bitmap", "succeeded")
        metrics.inc_conversion("vector", "exploded")
        assert sum(metrics.snapshot()["conversions_total"].values()) == 0

    def test_render_failure(self, metrics):
        metrics.inc_render_failure("CAPTURE_FAILURE")
        metrics.inc_render_failure("NOT_A_CODE")
        snap = metrics.snapshot()["render_failures_total"]
        assert snap["CAPTURE_FAILURE"] == 1
        assert "NOT_A_CODE" not in snap

    def test_load_timeouts(self, metrics):
        metrics.inc_load_timeout("raster")
        metrics.inc_load_timeout("bogus")
        assert metrics.snapshot()["load_timeouts_total"] == {"raster": 1, "vector": 0}


class TestExposition:
    def test_all_metrics_present(self, metrics):
        metrics.inc_conversion("vector", "succeeded")
        metrics.observe_render_duration("vector", 1.2)
        metrics.observe_fit_scale(0.5615)
        text = metrics.generate_metrics().decode()
        for name in (
            "pagefit_conversions_total",
            "pagefit_render_failures_total",
            "pagefit_render_duration_seconds",
            "pagefit_fit_scale",
            "pagefit_load_timeouts_total",
        ):
            assert name in text

    def test_fit_scale_bucketed(self, metrics):
        metrics.observe_fit_scale(0.5615)
        text = metrics.generate_metrics().decode()
        assert 'pagefit_fit_scale_bucket{le="0.6"} 1.0' in text
        assert 'pagefit_fit_scale_bucket{le="0.5"} 0.0' in text


class TestReset:
    def test_reset_clears(self, metrics):
        metrics.inc_conversion("vector", "succeeded")
        old_registry = metrics.registry
        metrics.reset()
        assert metrics.registry is not old_registry
        assert metrics.snapshot()["conversions_total"]["vector:succeeded"] == 0

    def test_singleton(self):
        assert get_metrics() is get_metrics()
