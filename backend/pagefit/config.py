"""
Config Module - page geometry and fit constants.

Single source for every page-size number in the pipeline.

RULE: no hard-coded 794 / 1123 outside this file.
- from .config import PAGE, FIT
- Grep gate: grep -rn "1123" --include="*.py" | grep -v config.py | grep -v test_

INVARIANTS (validated at startup):
- G1: all dimensions > 0
- G2: WIDTH_PX matches WIDTH_MM at DPI (±1 px)
- G3: HEIGHT_PX matches HEIGHT_MM at DPI (±1 px)
- F1: 0 < SCALE_FLOOR <= 1
- F2: RETRY_DELAYS_MS strictly increasing
- F3: 0 < JPEG_QUALITY <= 100
"""

from dataclasses import dataclass
from typing import List, Tuple

MM_PER_INCH = 25.4


# ═══════════════════════════════════════════════════════════════════════════════
# GEOMETRY DATACLASSES
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PageGeometry:
    """
    Target page: A4 at 96 DPI.

    Not user-configurable. Pixel sizes are CSS pixels.
    """
    WIDTH_PX: int = 794
    HEIGHT_PX: int = 1123
    WIDTH_MM: float = 210.0
    HEIGHT_MM: float = 297.0
    DPI: int = 96
    FORMAT: str = "A4"

    @property
    def width_pt(self) -> float:
        return self.WIDTH_MM / MM_PER_INCH * 72

    @property
    def height_pt(self) -> float:
        return self.HEIGHT_MM / MM_PER_INCH * 72


@dataclass(frozen=True)
class FitConstants:
    """
    Fit / capture constants.

    SCALE_FLOOR: minimum downscale (prevents microscopic output)
    RETRY_DELAYS_MS: fit routine re-runs after load (async reflow)
    SUPERSAMPLE: raster capture device scale factor
    JPEG_QUALITY: raster encode quality (0-100)
    LOAD_TIMEOUT_MS: upper bound for network quiescence wait
    """
    SCALE_FLOOR: float = 0.1
    RETRY_DELAYS_MS: Tuple[int, ...] = (300, 1000, 2500)
    SUPERSAMPLE: int = 2
    JPEG_QUALITY: int = 95
    LOAD_TIMEOUT_MS: int = 15000


# Singletons - import these!
PAGE = PageGeometry()
FIT = FitConstants()


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIG VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════


class ConfigValidationError(Exception):
    """Raised when config validation fails at startup."""
    pass


def validate_config(page: PageGeometry = PAGE, fit: FitConstants = FIT) -> None:
    """
    Validate geometry invariants at startup.

    Raises:
        ConfigValidationError: If any invariant is violated
    """
    errors: List[str] = []

    # G1: positive dimensions
    positive_checks: List[Tuple[str, float]] = [
        ("PAGE.WIDTH_PX", page.WIDTH_PX),
        ("PAGE.HEIGHT_PX", page.HEIGHT_PX),
        ("PAGE.WIDTH_MM", page.WIDTH_MM),
        ("PAGE.HEIGHT_MM", page.HEIGHT_MM),
        ("PAGE.DPI", page.DPI),
    ]
    for name, value in positive_checks:
        if value <= 0:
            errors.append(f"G1 FAIL: {name} ({value}) must be > 0")

    if page.DPI > 0:
        # G2 / G3: px and mm describe the same page
        expected_w = page.WIDTH_MM / MM_PER_INCH * page.DPI
        if abs(expected_w - page.WIDTH_PX) > 1:
            errors.append(
                f"G2 FAIL: WIDTH_PX ({page.WIDTH_PX}) != WIDTH_MM at {page.DPI} DPI ({expected_w:.1f})"
            )
        expected_h = page.HEIGHT_MM / MM_PER_INCH * page.DPI
        if abs(expected_h - page.HEIGHT_PX) > 1:
            errors.append(
                f"G3 FAIL: HEIGHT_PX ({page.HEIGHT_PX}) != HEIGHT_MM at {page.DPI} DPI ({expected_h:.1f})"
            )

    # F1
    if not (0 < fit.SCALE_FLOOR <= 1):
        errors.append(f"F1 FAIL: SCALE_FLOOR ({fit.SCALE_FLOOR}) must be in range (0, 1]")

    # F2
    delays = list(fit.RETRY_DELAYS_MS)
    if not delays or any(b <= a for a, b in zip(delays, delays[1:])):
        errors.append(f"F2 FAIL: RETRY_DELAYS_MS {fit.RETRY_DELAYS_MS} must be non-empty and increasing")

    # F3
    if not (0 < fit.JPEG_QUALITY <= 100):
        errors.append(f"F3 FAIL: JPEG_QUALITY ({fit.JPEG_QUALITY}) must be in range (0, 100]")

    if errors:
        raise ConfigValidationError(
            f"Config validation failed with {len(errors)} error(s):\n" +
            "\n".join(f"  - {e}" for e in errors)
        )


def get_config_summary() -> dict:
    """Config summary for the /health endpoint."""
    return {
        "page": {
            "width_px": PAGE.WIDTH_PX,
            "height_px": PAGE.HEIGHT_PX,
            "width_mm": PAGE.WIDTH_MM,
            "height_mm": PAGE.HEIGHT_MM,
            "dpi": PAGE.DPI,
        },
        "fit": {
            "scale_floor": FIT.SCALE_FLOOR,
            "retry_delays_ms": list(FIT.RETRY_DELAYS_MS),
            "supersample": FIT.SUPERSAMPLE,
            "jpeg_quality": FIT.JPEG_QUALITY,
        },
    }
