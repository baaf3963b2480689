"""
Playwright PDF Renderer - server-side, vector output.

Chromium prints the page itself, so text stays selectable.

State machine (single direction):
    LAUNCH → PAGE_OPEN → CONTENT_LOADED → MEASURED → EXPORTED → CLOSED
    any step → FAILED (browser still closed)

RULES:
- viewport = 794×1123 (A4 @ 96 DPI)
- emulate_media("screen") so backgrounds match what the author saw
- networkidle wait bounded by load_timeout_ms; hitting it is NOT fatal
- scale = max(SCALE_FLOOR, fit scale), page_ranges = "1", margin = 0
- the in-page fit routine is disabled before measuring; the engine scales
"""
import logging
from typing import Optional

from ..config import PAGE
from ..core.config import settings
from ..fit import MEASURE_JS, fit
from ..models import RenderArtifact, RenderStrategy
from .browser_env import EnvironmentFactory, browser_environment
from .render_errors import RenderError, RenderErrorCode
from .renderer import Renderer, RenderState, is_timeout

logger = logging.getLogger(__name__)

ZERO_MARGIN = {"top": "0", "right": "0", "bottom": "0", "left": "0"}


class VectorRenderer(Renderer):
    """Load → settle → measure → engine PDF export at the fitted scale."""

    strategy = RenderStrategy.VECTOR

    def __init__(
        self,
        environment: EnvironmentFactory = browser_environment,
        load_timeout_ms: Optional[int] = None,
    ) -> None:
        self._environment = environment
        self.load_timeout_ms = settings.load_timeout_ms if load_timeout_ms is None else load_timeout_ms

    def render(self, sanitized_html: str) -> RenderArtifact:
        states = [RenderState.LAUNCH]
        timed_out = False
        try:
            with self._environment() as browser:
                page = browser.new_page(viewport={"width": PAGE.WIDTH_PX, "height": PAGE.HEIGHT_PX})
                page.emulate_media(media="screen")
                states.append(RenderState.PAGE_OPEN)

                try:
                    page.set_content(sanitized_html, wait_until="networkidle", timeout=self.load_timeout_ms)
                except Exception as e:
                    if not is_timeout(e):
                        raise
                    timed_out = True
                    logger.warning(
                        f"{RenderErrorCode.RENDER_TIMEOUT.value}: network not idle after "
                        f"{self.load_timeout_ms}ms, rendering current content"
                    )
                states.append(RenderState.CONTENT_LOADED)

                result = fit(page.evaluate(MEASURE_JS))
                states.append(RenderState.MEASURED)
                logger.info(f"Measured height={result.measured_height:.0f}px → scale={result.scale:.4f}")

                pdf_bytes = page.pdf(
                    format=PAGE.FORMAT,
                    print_background=True,
                    margin=ZERO_MARGIN,
                    scale=result.scale,
                    page_ranges="1",
                )
                states.append(RenderState.EXPORTED)
            states.append(RenderState.CLOSED)

        except RenderError:
            states.append(RenderState.FAILED)
            logger.warning(f"Vector render failed after {[s.value for s in states]}")
            raise
        except Exception as e:
            states.append(RenderState.FAILED)
            logger.warning(f"Vector render failed after {[s.value for s in states]}: {e}")
            raise RenderError(RenderErrorCode.RENDER_FAILURE, str(e)) from e

        return RenderArtifact(
            pdf_bytes=pdf_bytes,
            strategy=self.strategy,
            fit=result,
            timed_out=timed_out,
            states=tuple(s.value for s in states),
        )
