"""
Shared test configuration for backend tests.

Hypothesis settings:
- CI profile disables example database to prevent "Flaky" errors from stale examples
- Default profile keeps database for local development
"""

import pytest
from hypothesis import settings, HealthCheck

# CI profile: no example database → no stale example → no Flaky errors
settings.register_profile(
    "ci",
    database=None,
    suppress_health_check=[HealthCheck.too_slow],
)

# Default profile: keep database, suppress slow health check
settings.register_profile(
    "default",
    suppress_health_check=[HealthCheck.too_slow],
)

settings.load_profile("default")


# ── Test tier markers ─────────────────────────────────────────────────────────
# Usage: pytest -m smoke, pytest -m core, pytest -m browser

def pytest_configure(config):
    config.addinivalue_line("markers", "smoke: pure functions (fit, sanitizer, config)")
    config.addinivalue_line("markers", "core: renderers with fakes, pipeline, API")
    config.addinivalue_line("markers", "browser: needs a real Chromium (playwright install chromium)")


# ── Metrics singleton isolation ───────────────────────────────────────────────
# The metrics singleton is module-level; reset it so counters do not leak
# between tests.

@pytest.fixture(autouse=True)
def _reset_metrics_singleton():
    from pagefit.metrics import get_metrics
    get_metrics().reset()
    yield
    get_metrics().reset()
