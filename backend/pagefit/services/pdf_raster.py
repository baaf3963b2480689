"""
Raster PDF Renderer - client-side strategy, image output.

Pipeline:
    Chromium (viewport 794×1123, device_scale_factor=2)
      → wait for the in-page fit routine to signal it settled
      → screenshot clipped to the page (1588×2246 px)
      → Pillow: flatten transparency onto white, JPEG q=95
      → img2pdf: one 210×297 mm page, image fills it, no margin

The settle wait is best effort: when the routine never signals within
settle_timeout_ms the current layout is captured.
"""
import io
import logging
from typing import Optional

import img2pdf
from PIL import Image

from ..config import FIT, PAGE
from ..core.config import settings
from ..fit import READ_FIT_JS, SETTLED_JS, fit_from_page_attributes
from ..models import RenderArtifact, RenderStrategy
from .browser_env import EnvironmentFactory, browser_environment
from .render_errors import RenderError, RenderErrorCode
from .renderer import Renderer, RenderState, is_timeout

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)


# ---------------------------------------------------------------------------
# Image → PDF (pure, no browser)
# ---------------------------------------------------------------------------

def flatten_to_white(image: Image.Image) -> Image.Image:
    """Composite any transparency onto a white background, return RGB."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, WHITE)
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def encode_page_image(
    png_bytes: bytes,
    supersample: int = FIT.SUPERSAMPLE,
    quality: int = FIT.JPEG_QUALITY,
) -> bytes:
    """Screenshot bytes → JPEG bytes at exactly page size × supersample."""
    expected = (PAGE.WIDTH_PX * supersample, PAGE.HEIGHT_PX * supersample)
    with Image.open(io.BytesIO(png_bytes)) as captured:
        image = flatten_to_white(captured)
        if image.size != expected:
            logger.info(f"Capture resized: {image.size[0]}x{image.size[1]} → {expected[0]}x{expected[1]}")
            image = image.resize(expected, Image.Resampling.LANCZOS)
        out = io.BytesIO()
        image.save(out, format="JPEG", quality=quality)
    return out.getvalue()


def image_to_pdf(jpeg_bytes: bytes) -> bytes:
    """Embed one JPEG as the sole content of an A4 page with no margin."""
    layout = img2pdf.get_layout_fun(
        pagesize=(img2pdf.mm_to_pt(PAGE.WIDTH_MM), img2pdf.mm_to_pt(PAGE.HEIGHT_MM)),
        fit=img2pdf.FitMode.exact,
    )
    return img2pdf.convert(jpeg_bytes, layout_fun=layout)


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------

class RasterRenderer(Renderer):
    """Load → wait for fit routine → capture bitmap → embed in PDF."""

    strategy = RenderStrategy.RASTER

    def __init__(
        self,
        environment: EnvironmentFactory = browser_environment,
        load_timeout_ms: Optional[int] = None,
        settle_timeout_ms: Optional[int] = None,
        supersample: int = FIT.SUPERSAMPLE,
    ) -> None:
        self._environment = environment
        self.load_timeout_ms = settings.load_timeout_ms if load_timeout_ms is None else load_timeout_ms
        self.settle_timeout_ms = settings.settle_timeout_ms if settle_timeout_ms is None else settle_timeout_ms
        self.supersample = supersample

    def render(self, sanitized_html: str) -> RenderArtifact:
        states = [RenderState.LAUNCH]
        timed_out = False
        try:
            with self._environment() as browser:
                context = browser.new_context(
                    viewport={"width": PAGE.WIDTH_PX, "height": PAGE.HEIGHT_PX},
                    device_scale_factor=self.supersample,
                )
                page = context.new_page()
                states.append(RenderState.PAGE_OPEN)

                try:
                    page.set_content(sanitized_html, wait_until="load", timeout=self.load_timeout_ms)
                except Exception as e:
                    if not is_timeout(e):
                        raise
                    timed_out = True
                    logger.warning(
                        f"{RenderErrorCode.RENDER_TIMEOUT.value}: load event not fired after "
                        f"{self.load_timeout_ms}ms, capturing current content"
                    )
                self._wait_for_fit(page)
                states.append(RenderState.CONTENT_LOADED)

                scale_attr, height_attr = page.evaluate(READ_FIT_JS)
                result = fit_from_page_attributes(scale_attr, height_attr)
                states.append(RenderState.MEASURED)

                png_bytes = self._capture(page)
            states.append(RenderState.CLOSED)

            pdf_bytes = self._encode(png_bytes)
            states.append(RenderState.EXPORTED)

        except RenderError:
            states.append(RenderState.FAILED)
            logger.warning(f"Raster render failed after {[s.value for s in states]}")
            raise
        except Exception as e:
            states.append(RenderState.FAILED)
            logger.warning(f"Raster render failed after {[s.value for s in states]}: {e}")
            raise RenderError(RenderErrorCode.RENDER_FAILURE, str(e)) from e

        logger.info(f"Raster capture done: scale={result.scale:.4f}, pdf={len(pdf_bytes)} bytes")
        return RenderArtifact(
            pdf_bytes=pdf_bytes,
            strategy=self.strategy,
            fit=result,
            timed_out=timed_out,
            states=tuple(s.value for s in states),
        )

    def _wait_for_fit(self, page) -> None:
        try:
            page.wait_for_function(SETTLED_JS, timeout=self.settle_timeout_ms)
        except Exception as e:
            if not is_timeout(e):
                raise
            logger.info(f"Fit routine did not signal within {self.settle_timeout_ms}ms, using current layout")

    def _capture(self, page) -> bytes:
        try:
            return page.screenshot(
                type="png",
                clip={"x": 0, "y": 0, "width": PAGE.WIDTH_PX, "height": PAGE.HEIGHT_PX},
                omit_background=False,
            )
        except Exception as e:
            raise RenderError(RenderErrorCode.CAPTURE_FAILURE, f"Screenshot failed: {e}") from e

    def _encode(self, png_bytes: bytes) -> bytes:
        try:
            jpeg_bytes = encode_page_image(png_bytes, supersample=self.supersample)
            return image_to_pdf(jpeg_bytes)
        except Exception as e:
            raise RenderError(RenderErrorCode.CAPTURE_FAILURE, f"Encoding failed: {e}") from e
