"""
Pagefit Metrics - Prometheus-compatible observability.

All metrics use the `pagefit_` namespace prefix.

Tracks:
- pagefit_conversions_total{strategy,outcome}: conversion outcomes
- pagefit_render_failures_total{error_code}: fatal failures by taxonomy code
- pagefit_render_duration_seconds{strategy}: end-to-end render duration
- pagefit_fit_scale: applied downscale factor (1.0 = content fit)
- pagefit_load_timeouts_total{strategy}: recoverable settle timeouts
"""

import logging
from typing import Dict

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from .models import RenderStrategy
from .services.render_errors import RenderErrorCode

logger = logging.getLogger(__name__)

SCALE_BUCKETS = (0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 0.99, 1.0)


class PagefitMetrics:
    """
    Prometheus metrics for the conversion pipeline.

    Uses instance-level CollectorRegistry for test isolation.
    Every public call is fail-open from the caller's side: labels outside
    the allowlists are logged and dropped, never raised.
    """

    _VALID_STRATEGIES = frozenset(s.value for s in RenderStrategy)
    _VALID_OUTCOMES = frozenset({"succeeded", "failed", "rejected"})
    _VALID_ERROR_CODES = frozenset(c.value for c in RenderErrorCode)

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()
        self._init_metrics()

    def _init_metrics(self) -> None:
        """Register all prometheus metrics on the current registry."""
        self._conversions_total = Counter(
            "pagefit_conversions_total",
            "HTML → PDF conversions",
            labelnames=["strategy", "outcome"],
            registry=self._registry,
        )
        self._render_failures_total = Counter(
            "pagefit_render_failures_total",
            "Fatal render failures",
            labelnames=["error_code"],
            registry=self._registry,
        )
        self._render_duration = Histogram(
            "pagefit_render_duration_seconds",
            "Render duration (sanitize → artifact)",
            labelnames=["strategy"],
            registry=self._registry,
        )
        self._fit_scale = Histogram(
            "pagefit_fit_scale",
            "Applied downscale factor",
            buckets=SCALE_BUCKETS,
            registry=self._registry,
        )
        self._load_timeouts_total = Counter(
            "pagefit_load_timeouts_total",
            "Loads that hit the settle bound and proceeded",
            labelnames=["strategy"],
            registry=self._registry,
        )

    # ── Conversions ───────────────────────────────────────────────────────

    def inc_conversion(self, strategy: str, outcome: str) -> None:
        """outcome: succeeded | failed | rejected."""
        if strategy not in self._VALID_STRATEGIES or outcome not in self._VALID_OUTCOMES:
            logger.warning(f"[METRICS] Invalid conversion labels: strategy={strategy}, outcome={outcome}")
            return
        self._conversions_total.labels(strategy=strategy, outcome=outcome).inc()

    def inc_render_failure(self, error_code: str) -> None:
        if error_code not in self._VALID_ERROR_CODES:
            logger.warning(f"[METRICS] Invalid error_code: {error_code}")
            return
        self._render_failures_total.labels(error_code=error_code).inc()

    def observe_render_duration(self, strategy: str, duration: float) -> None:
        if strategy not in self._VALID_STRATEGIES:
            return
        self._render_duration.labels(strategy=strategy).observe(duration)

    def observe_fit_scale(self, scale: float) -> None:
        self._fit_scale.observe(scale)

    def inc_load_timeout(self, strategy: str) -> None:
        if strategy not in self._VALID_STRATEGIES:
            return
        self._load_timeouts_total.labels(strategy=strategy).inc()

    # ── Snapshot (test/debug only) ────────────────────────────────────────

    def snapshot(self) -> Dict:
        """Counter values as a plain dict. Test/debug only."""
        return {
            "conversions_total": {
                f"{s}:{o}": self._get_counter_value(self._conversions_total, {"strategy": s, "outcome": o})
                for s in sorted(self._VALID_STRATEGIES)
                for o in sorted(self._VALID_OUTCOMES)
            },
            "render_failures_total": {
                c: self._get_counter_value(self._render_failures_total, {"error_code": c})
                for c in sorted(self._VALID_ERROR_CODES)
            },
            "load_timeouts_total": {
                s: self._get_counter_value(self._load_timeouts_total, {"strategy": s})
                for s in sorted(self._VALID_STRATEGIES)
            },
        }

    @staticmethod
    def _get_counter_value(counter: Counter, labels: Dict[str, str]) -> int:
        """Read current value of a labeled counter. Returns 0 if label combo not yet initialized."""
        try:
            return int(counter.labels(**labels)._value.get())
        except Exception:
            return 0

    # ── Reset (test only) ─────────────────────────────────────────────────

    def reset(self) -> None:
        """Fresh CollectorRegistry. Test environments only."""
        self._registry = CollectorRegistry()
        self._init_metrics()

    # ── Prometheus exposition ─────────────────────────────────────────────

    def generate_metrics(self) -> bytes:
        """Generate Prometheus text exposition format output."""
        return generate_latest(self._registry)

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry


# ═══════════════════════════════════════════════════════════════════════════════
# SINGLETON INSTANCE
# ═══════════════════════════════════════════════════════════════════════════════

_metrics = PagefitMetrics()


def get_metrics() -> PagefitMetrics:
    """Get singleton PagefitMetrics instance."""
    return _metrics
