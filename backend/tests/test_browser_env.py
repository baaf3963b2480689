"""
Browser environment tests - launch, release, error mapping.

sync_playwright is replaced by a recording double so no Chromium is needed.

B1) Browser closed and playwright stopped exactly once on every exit path
B2) Launch failure → BROWSER_LAUNCH_FAILED
B3) Playwright missing → UNSUPPORTED_PLATFORM
"""
from __future__ import annotations

from typing import Optional

import pytest

from pagefit.core.config import settings
from pagefit.services import browser_env
from pagefit.services.browser_env import browser_environment
from pagefit.services.render_errors import RenderError, RenderErrorCode

sync_api = pytest.importorskip("playwright.sync_api")

pytestmark = pytest.mark.core


class RecordingBrowser:
    def __init__(self):
        self.closed = 0

    def close(self):
        self.closed += 1


class RecordingChromium:
    def __init__(self, launch_exc: Optional[BaseException] = None):
        self.browser = RecordingBrowser()
        self.launch_exc = launch_exc
        self.launch_kwargs: Optional[dict] = None

    def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        if self.launch_exc is not None:
            raise self.launch_exc
        return self.browser


class RecordingPlaywright:
    """Context manager shaped like sync_playwright()."""

    def __init__(self, launch_exc: Optional[BaseException] = None):
        self.chromium = RecordingChromium(launch_exc)
        self.started = 0
        self.stopped = 0

    def __call__(self):
        return self

    def __enter__(self):
        self.started += 1
        return self

    def __exit__(self, *exc_info):
        self.stopped += 1
        return False


@pytest.fixture
def playwright_double(monkeypatch):
    double = RecordingPlaywright()
    monkeypatch.setattr(browser_env, "_playwright_available", True)
    monkeypatch.setattr(sync_api, "sync_playwright", double)
    return double


# ═══════════════════════════════════════════════════════════════════════════════
# B1) Release
# ═══════════════════════════════════════════════════════════════════════════════

class TestRelease:
    def test_yields_launched_browser(self, playwright_double):
        with browser_environment() as browser:
            assert browser is playwright_double.chromium.browser
            assert browser.closed == 0
        assert browser.closed == 1
        assert playwright_double.stopped == 1

    def test_body_error_still_releases(self, playwright_double):
        with pytest.raises(ValueError, match="page crashed"):
            with browser_environment():
                raise ValueError("page crashed")
        assert playwright_double.chromium.browser.closed == 1
        assert playwright_double.stopped == 1

    def test_render_error_still_releases(self, playwright_double):
        with pytest.raises(RenderError):
            with browser_environment():
                raise RenderError(RenderErrorCode.CAPTURE_FAILURE, "no pixels")
        assert playwright_double.chromium.browser.closed == 1
        assert playwright_double.stopped == 1

    def test_launch_options_from_settings(self, playwright_double):
        with browser_environment():
            pass
        assert playwright_double.chromium.launch_kwargs == {
            "headless": settings.headless,
            "args": list(settings.browser_args),
        }

    def test_launch_options_override(self, playwright_double):
        with browser_environment(headless=False, args=["--disable-gpu"]):
            pass
        assert playwright_double.chromium.launch_kwargs == {"headless": False, "args": ["--disable-gpu"]}


# ═══════════════════════════════════════════════════════════════════════════════
# B2-B3) Failures
# ═══════════════════════════════════════════════════════════════════════════════

class TestFailures:
    def test_launch_error_mapped(self, monkeypatch):
        double = RecordingPlaywright(launch_exc=sync_api.Error("Executable doesn't exist"))
        monkeypatch.setattr(browser_env, "_playwright_available", True)
        monkeypatch.setattr(sync_api, "sync_playwright", double)

        with pytest.raises(RenderError) as exc_info:
            with browser_environment():
                pytest.fail("body must not run")

        assert exc_info.value.error_code == RenderErrorCode.BROWSER_LAUNCH_FAILED
        assert "Executable doesn't exist" in exc_info.value.message
        assert double.chromium.browser.closed == 0
        assert double.stopped == 1

    def test_playwright_missing(self, playwright_double, monkeypatch):
        monkeypatch.setattr(browser_env, "_playwright_available", False)

        with pytest.raises(RenderError) as exc_info:
            with browser_environment():
                pytest.fail("body must not run")

        assert exc_info.value.error_code == RenderErrorCode.UNSUPPORTED_PLATFORM
        assert playwright_double.started == 0
