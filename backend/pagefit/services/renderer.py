"""
Renderer interface - sanitized HTML in, single-page PDF out.

Implementations:
- VectorRenderer: Chromium prints the page (pdf_playwright.py)
- RasterRenderer: screenshot embedded in one PDF page (pdf_raster.py)
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from ..models import RenderArtifact, RenderStrategy


class RenderState(str, Enum):
    LAUNCH = "launch"
    PAGE_OPEN = "page_open"
    CONTENT_LOADED = "content_loaded"
    MEASURED = "measured"
    EXPORTED = "exported"
    CLOSED = "closed"
    FAILED = "failed"


class Renderer(ABC):
    """Abstract renderer."""

    strategy: RenderStrategy

    @abstractmethod
    def render(self, sanitized_html: str) -> RenderArtifact:
        """
        Render sanitized HTML to a one-page PDF.

        Raises:
            RenderError: on any fatal failure (no partial artifact)
        """
        ...


def is_timeout(exc: BaseException) -> bool:
    """Playwright TimeoutError (or builtin TimeoutError)."""
    if isinstance(exc, TimeoutError):
        return True
    from .browser_env import is_playwright_available

    if not is_playwright_available():
        return False
    from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

    return isinstance(exc, PlaywrightTimeoutError)


def get_renderer(strategy: Optional[str] = None) -> Renderer:
    """Renderer for a strategy name; None → settings.default_strategy."""
    from ..core.config import settings
    from .pdf_playwright import VectorRenderer
    from .pdf_raster import RasterRenderer

    name = (strategy or settings.default_strategy).strip().lower()
    try:
        kind = RenderStrategy(name)
    except ValueError:
        raise ValueError(f"Unknown render strategy: {name!r}") from None

    if kind == RenderStrategy.RASTER:
        return RasterRenderer()
    return VectorRenderer()
