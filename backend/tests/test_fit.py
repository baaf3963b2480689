"""
Property-based tests for the fit calculator.

Uses Hypothesis for property-based testing.

CONTRACT:
═══════════════════════════════════════════════════════════════════════════════
- measured <= target        → scale == 1 (never scales up)
- measured >  target        → scale == max(FLOOR, target / measured)
- measured 0 / None / NaN   → scale == 1
- scale ∈ [FLOOR, 1] always
═══════════════════════════════════════════════════════════════════════════════
"""
import pytest
from hypothesis import given, strategies as st

from pagefit.config import FIT, PAGE
from pagefit.fit import (
    HEIGHT_ATTR,
    SCALE_ATTR,
    SETTLED_FLAG,
    compute_scale,
    fit,
    fit_from_page_attributes,
    render_fit_script,
)

pytestmark = pytest.mark.smoke

heights = st.floats(min_value=0, max_value=1e7, allow_nan=False, allow_infinity=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Property 1: content that fits is never scaled
# ═══════════════════════════════════════════════════════════════════════════════

class TestPropertyNoUpscale:
    @given(measured=st.floats(min_value=0, max_value=PAGE.HEIGHT_PX, allow_nan=False))
    def test_short_content_scale_is_one(self, measured):
        assert compute_scale(measured) == 1.0
        assert fit(measured).scale == 1.0

    @given(measured=heights)
    def test_scale_in_range(self, measured):
        result = fit(measured)
        assert FIT.SCALE_FLOOR <= result.scale <= 1.0


# ═══════════════════════════════════════════════════════════════════════════════
# Property 2: tall content shrinks to exactly one page, floored
# ═══════════════════════════════════════════════════════════════════════════════

class TestPropertyDownscale:
    @given(measured=st.floats(min_value=PAGE.HEIGHT_PX + 0.001, max_value=1e7, allow_nan=False))
    def test_tall_content(self, measured):
        expected = max(FIT.SCALE_FLOOR, PAGE.HEIGHT_PX / measured)
        assert fit(measured).scale == pytest.approx(expected)
        assert fit(measured).scale >= FIT.SCALE_FLOOR

    @given(measured=st.floats(min_value=PAGE.HEIGHT_PX + 0.001, max_value=PAGE.HEIGHT_PX / FIT.SCALE_FLOOR))
    def test_scaled_height_equals_page(self, measured):
        assert measured * fit(measured).scale == pytest.approx(PAGE.HEIGHT_PX)

    def test_2000px_fixture(self):
        result = fit(2000)
        assert result.scale == pytest.approx(1123 / 2000)
        assert result.scale == pytest.approx(0.5615)
        assert result.is_scaled

    def test_floor_applies(self):
        assert compute_scale(100_000) == pytest.approx(0.01123)
        assert fit(100_000).scale == FIT.SCALE_FLOOR

    def test_custom_target_and_floor(self):
        assert fit(400, target_height=200, floor=0.25).scale == 0.5
        assert fit(4000, target_height=200, floor=0.25).scale == 0.25


# ═══════════════════════════════════════════════════════════════════════════════
# Edge cases: missing / degenerate measurements
# ═══════════════════════════════════════════════════════════════════════════════

class TestDegenerateHeights:
    @pytest.mark.parametrize("measured", [0, 0.0, -5, None, float("nan"), "abc"])
    def test_defaults_to_one(self, measured):
        assert compute_scale(measured) == 1.0
        assert fit(measured).scale == 1.0

    def test_measured_height_normalized(self):
        assert fit(None).measured_height == 0.0
        assert fit(float("nan")).measured_height == 0.0
        assert fit(-3).measured_height == 0.0
        assert fit(1500).measured_height == 1500.0

    def test_numeric_string_height(self):
        result = fit("2000")
        assert result.measured_height == 2000.0
        assert result.scale == pytest.approx(0.5615)
        assert fit(" 1500.5 ").measured_height == 1500.5

    @pytest.mark.parametrize("measured", ["abc", "", "-10", "nan"])
    def test_unparseable_string_height(self, measured):
        assert fit(measured).measured_height == 0.0

    def test_exactly_target(self):
        assert fit(PAGE.HEIGHT_PX).scale == 1.0
        assert not fit(PAGE.HEIGHT_PX).is_scaled


# ═══════════════════════════════════════════════════════════════════════════════
# Reading back what the in-page routine recorded
# ═══════════════════════════════════════════════════════════════════════════════

class TestFitFromPageAttributes:
    def test_uses_applied_scale(self):
        result = fit_from_page_attributes("0.5615", "2000")
        assert result.scale == pytest.approx(0.5615)
        assert result.measured_height == 2000.0

    def test_routine_never_ran(self):
        result = fit_from_page_attributes(None, None)
        assert result.scale == 1.0
        assert result.measured_height == 0.0

    def test_height_only_recomputes(self):
        assert fit_from_page_attributes(None, "2246").scale == pytest.approx(0.5)

    @pytest.mark.parametrize("bad", ["0", "-1", "2", "nope"])
    def test_out_of_range_scale_ignored(self, bad):
        assert fit_from_page_attributes(bad, "2000").scale == pytest.approx(0.5615)


# ═══════════════════════════════════════════════════════════════════════════════
# In-page routine source
# ═══════════════════════════════════════════════════════════════════════════════

class TestFitScript:
    def test_constants_embedded(self):
        js = render_fit_script()
        assert "TARGET = 1123" in js
        assert "FLOOR = 0.1" in js
        assert "DELAYS = [300, 1000, 2500]" in js

    def test_resets_before_measuring(self):
        js = render_fit_script()
        body = js[js.index("function fitToPage"):]
        assert body.index("reset()") < body.index("measure()")

    def test_compensating_width_and_origin(self):
        js = render_fit_script()
        assert "'top left'" in js
        assert "(100 / s) + '%'" in js

    def test_records_scale_and_settled_signal(self):
        js = render_fit_script()
        assert SCALE_ATTR in js
        assert HEIGHT_ATTR in js
        assert f"window.{SETTLED_FLAG} = true" in js

    def test_does_not_clobber_onload(self):
        js = render_fit_script()
        assert "addEventListener('load'" in js
        assert "window.onload =" not in js

    def test_custom_parameters(self):
        js = render_fit_script(target_height=500, floor=0.25, delays_ms=(10, 20))
        assert "TARGET = 500" in js
        assert "FLOOR = 0.25" in js
        assert "DELAYS = [10, 20]" in js

    def test_no_template_leftovers(self):
        assert "$" not in render_fit_script()
