"""
Render error taxonomy.

Fatal (invocation returns no artifact):
    INPUT_MISSING          no HTML supplied; rejected before any render work
    RENDER_FAILURE         engine threw during load / measure / export
    CAPTURE_FAILURE        raster capture or encoding failed
    BROWSER_LAUNCH_FAILED  rendering environment could not be acquired
    UNSUPPORTED_PLATFORM   playwright not installed

Recoverable (recorded, never raised out of convert()):
    RENDER_TIMEOUT         content did not settle within the load bound

No code is retried automatically.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RenderErrorCode(str, Enum):
    INPUT_MISSING = "INPUT_MISSING"
    RENDER_TIMEOUT = "RENDER_TIMEOUT"
    RENDER_FAILURE = "RENDER_FAILURE"
    CAPTURE_FAILURE = "CAPTURE_FAILURE"
    BROWSER_LAUNCH_FAILED = "BROWSER_LAUNCH_FAILED"
    UNSUPPORTED_PLATFORM = "UNSUPPORTED_PLATFORM"


RECOVERABLE_ERRORS: frozenset[RenderErrorCode] = frozenset({
    RenderErrorCode.RENDER_TIMEOUT,
})

# error_code → HTTP status for the API layer
HTTP_STATUS: dict[RenderErrorCode, int] = {
    RenderErrorCode.INPUT_MISSING: 400,
    RenderErrorCode.RENDER_TIMEOUT: 500,
    RenderErrorCode.RENDER_FAILURE: 500,
    RenderErrorCode.CAPTURE_FAILURE: 500,
    RenderErrorCode.BROWSER_LAUNCH_FAILED: 500,
    RenderErrorCode.UNSUPPORTED_PLATFORM: 500,
}


@dataclass
class RenderError(Exception):
    """Typed render failure with error_code from taxonomy."""
    error_code: RenderErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    @property
    def http_status(self) -> int:
        return HTTP_STATUS.get(self.error_code, 500)

    def to_dict(self) -> dict:
        return {"error": self.error_code.value, "message": self.message}


class ConversionInProgressError(Exception):
    """A conversion is already running for this session."""
