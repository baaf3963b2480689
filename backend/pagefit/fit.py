"""
Fit Calculator - uniform downscale so content never exceeds one page.

Two halves of the same rule:
- compute_scale / fit: Python side, used by the vector renderer after it
  measures the loaded page.
- render_fit_script: the in-page routine the sanitizer injects; the raster
  renderer waits for it and reads back the scale it applied.

Rule:
    scale = target / measured   if measured > target
    scale = 1                   otherwise (also for 0 / unknown heights)
    scale = max(scale, SCALE_FLOOR)

Never scales up.
"""
from __future__ import annotations

import json
import math
from string import Template
from typing import Optional, Sequence, Union

from .config import FIT, PAGE
from .models import FitResult


def _parse_height(value) -> float:
    """Height in px; missing, non-numeric, NaN or negative → 0."""
    try:
        height = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(height) or height < 0:
        return 0.0
    return height


def compute_scale(measured_height: Optional[float], target_height: float = PAGE.HEIGHT_PX) -> float:
    """Raw downscale factor (no floor). Missing or non-positive heights → 1."""
    measured = _parse_height(measured_height)
    if measured > target_height:
        return target_height / measured
    return 1.0


def fit(
    measured_height: Union[float, str, None],
    target_height: float = PAGE.HEIGHT_PX,
    floor: float = FIT.SCALE_FLOOR,
) -> FitResult:
    """Build a FitResult with the scale floor applied."""
    measured = _parse_height(measured_height)
    scale = max(floor, compute_scale(measured, target_height))
    return FitResult(measured_height=measured, target_height=float(target_height), scale=scale)


# ---------------------------------------------------------------------------
# In-page fit routine
# ---------------------------------------------------------------------------

SETTLED_FLAG = "__pagefitSettled"
SCALE_ATTR = "data-pagefit-scale"
HEIGHT_ATTR = "data-pagefit-height"

_FIT_SCRIPT = Template("""\
(function () {
  var TARGET = $target, FLOOR = $floor, DELAYS = $delays;
  var disabled = false;
  function measure() {
    var b = document.body, d = document.documentElement;
    return Math.max(b ? b.scrollHeight : 0, d ? d.scrollHeight : 0);
  }
  function reset() {
    var b = document.body;
    if (!b) return;
    b.style.removeProperty('transform');
    b.style.removeProperty('transform-origin');
    b.style.removeProperty('width');
  }
  function fitToPage() {
    if (disabled || !document.body) return 1;
    reset();
    var h = measure(), s = 1;
    if (h > TARGET) {
      s = Math.max(FLOOR, TARGET / h);
      var b = document.body;
      b.style.setProperty('transform-origin', 'top left', 'important');
      b.style.setProperty('transform', 'scale(' + s + ')', 'important');
      b.style.setProperty('width', (100 / s) + '%', 'important');
    }
    document.documentElement.setAttribute('$scale_attr', String(s));
    document.documentElement.setAttribute('$height_attr', String(h));
    return s;
  }
  window.__pagefit = {
    fit: fitToPage,
    reset: reset,
    measure: measure,
    disable: function () { disabled = true; reset(); }
  };
  window.addEventListener('load', function () {
    DELAYS.forEach(function (ms, i) {
      setTimeout(function () {
        fitToPage();
        if (i === DELAYS.length - 1) window.$settled = true;
      }, ms);
    });
  });
})();""")


def render_fit_script(
    target_height: int = PAGE.HEIGHT_PX,
    floor: float = FIT.SCALE_FLOOR,
    delays_ms: Sequence[int] = FIT.RETRY_DELAYS_MS,
) -> str:
    """JavaScript source of the fit routine (without the <script> wrapper)."""
    return _FIT_SCRIPT.substitute(
        target=int(target_height),
        floor=json.dumps(float(floor)),
        delays=json.dumps([int(d) for d in delays_ms]),
        scale_attr=SCALE_ATTR,
        height_attr=HEIGHT_ATTR,
        settled=SETTLED_FLAG,
    )


# Vector renderer: stop the in-page routine, undo its transform, then measure.
MEASURE_JS = """\
() => {
  const pf = window.__pagefit;
  if (pf) { pf.disable(); }
  const b = document.body, d = document.documentElement;
  return Math.max(b ? b.scrollHeight : 0, d ? d.scrollHeight : 0);
}"""

SETTLED_JS = f"() => window.{SETTLED_FLAG} === true"

READ_FIT_JS = f"""\
() => {{
  const d = document.documentElement;
  return [d.getAttribute('{SCALE_ATTR}'), d.getAttribute('{HEIGHT_ATTR}')];
}}"""


def fit_from_page_attributes(scale_attr: Optional[str], height_attr: Optional[str]) -> FitResult:
    """
    FitResult from what the in-page routine recorded.

    The routine never ran (no attributes) → treated as an unscaled page.
    """
    result = fit(height_attr)
    if scale_attr is not None:
        try:
            applied = float(scale_attr)
        except ValueError:
            applied = None
        if applied is not None and 0 < applied <= 1:
            return FitResult(
                measured_height=result.measured_height,
                target_height=result.target_height,
                scale=applied,
            )
    return result
