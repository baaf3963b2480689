"""
Rendering environment - one headless Chromium per conversion.

    with browser_environment() as browser:
        page = browser.new_page(...)

Released exactly once on every exit path (success, RenderError, anything
else). No pooling: each conversion launches and tears down its own browser.

Setup (one-time):
    python -m playwright install chromium
"""
import logging
from contextlib import closing, contextmanager
from typing import Any, Callable, ContextManager, Iterator, Optional, Sequence

from ..core.config import settings
from .render_errors import RenderError, RenderErrorCode

logger = logging.getLogger(__name__)

_playwright_available: Optional[bool] = None

# () -> context manager yielding a Browser-like object
EnvironmentFactory = Callable[[], ContextManager[Any]]


def is_playwright_available() -> bool:
    """Check if playwright is installed and usable."""
    global _playwright_available
    if _playwright_available is None:
        try:
            from playwright.sync_api import sync_playwright  # noqa: F401
            _playwright_available = True
        except ImportError:
            _playwright_available = False
            logger.warning("Playwright not installed. Run: pip install playwright && python -m playwright install chromium")
    return _playwright_available


@contextmanager
def browser_environment(
    headless: Optional[bool] = None,
    args: Optional[Sequence[str]] = None,
) -> Iterator[Any]:
    """Launch Chromium, yield it, close it."""
    if not is_playwright_available():
        raise RenderError(RenderErrorCode.UNSUPPORTED_PLATFORM, "Playwright not installed")

    from playwright.sync_api import Error as PlaywrightError, sync_playwright

    launch_args = list(settings.browser_args if args is None else args)
    with sync_playwright() as p:
        try:
            browser = p.chromium.launch(
                headless=settings.headless if headless is None else headless,
                args=launch_args,
            )
        except PlaywrightError as e:
            raise RenderError(RenderErrorCode.BROWSER_LAUNCH_FAILED, str(e)) from e

        logger.debug(f"Browser launched (args={launch_args})")
        with closing(browser):
            yield browser
        logger.debug("Browser closed")
