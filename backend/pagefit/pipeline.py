"""
Conversion pipeline - single entrypoint for HTML → single-page PDF.

    raw HTML → sanitize → renderer.render → inspect → RenderArtifact

1. Reject empty input (INPUT_MISSING) before any render work
2. Sanitize (override styles + fit routine)
3. Render with the chosen strategy (browser released inside the renderer)
4. Verify the engine output is a one-page PDF
5. Emit metrics (fail-open) and log the outcome

Either a complete artifact is returned or RenderError is raised.
No retries here: callers re-invoke the whole pipeline.
"""
from __future__ import annotations

import logging
import time
from typing import Optional, Union

from .metrics import get_metrics
from .models import Document, RenderArtifact
from .sanitizer import sanitize_document
from .services.pdf_inspect import inspect_pdf
from .services.render_errors import RenderError, RenderErrorCode
from .services.renderer import Renderer, get_renderer

logger = logging.getLogger(__name__)


def convert(
    document: Union[Document, str],
    renderer: Optional[Renderer] = None,
) -> RenderArtifact:
    """
    Convert one document.

    Args:
        document: Document or raw HTML text.
        renderer: Renderer instance. None → settings.default_strategy.

    Raises:
        RenderError: INPUT_MISSING, RENDER_FAILURE, CAPTURE_FAILURE, ...
    """
    if not isinstance(document, Document):
        document = Document(html=document or "")
    if renderer is None:
        renderer = get_renderer()
    strategy = renderer.strategy.value

    if document.is_empty:
        _emit_failure(strategy, RenderErrorCode.INPUT_MISSING, outcome="rejected")
        raise RenderError(RenderErrorCode.INPUT_MISSING, "No HTML content supplied")

    start_time = time.monotonic()
    sanitized = sanitize_document(document)
    logger.info(
        f"Converting {document.filename or '<inline>'} via {strategy} "
        f"({len(document.html)} → {len(sanitized.html)} chars)"
    )

    try:
        artifact = renderer.render(sanitized.html)
        _verify_single_page(artifact)
    except RenderError as e:
        _emit_failure(strategy, e.error_code)
        logger.warning(f"Conversion failed: {e}")
        raise

    duration = time.monotonic() - start_time
    try:
        metrics = get_metrics()
        metrics.inc_conversion(strategy, "succeeded")
        metrics.observe_render_duration(strategy, duration)
        metrics.observe_fit_scale(artifact.fit.scale)
        if artifact.timed_out:
            metrics.inc_load_timeout(strategy)
    except Exception:
        pass  # fail-open: metrics never block pipeline

    logger.info(
        f"Converted {document.filename or '<inline>'}: scale={artifact.fit.scale:.4f}, "
        f"size={artifact.size}, timed_out={artifact.timed_out}, duration={duration:.2f}s"
    )
    return artifact


def _verify_single_page(artifact: RenderArtifact) -> None:
    try:
        info = inspect_pdf(artifact.pdf_bytes)
    except Exception as e:
        raise RenderError(RenderErrorCode.RENDER_FAILURE, f"Renderer produced an unreadable PDF: {e}") from e
    if info.page_count != 1:
        raise RenderError(
            RenderErrorCode.RENDER_FAILURE,
            f"Renderer produced {info.page_count} pages, expected 1",
        )


def _emit_failure(strategy: str, error_code: RenderErrorCode, outcome: str = "failed") -> None:
    try:
        metrics = get_metrics()
        metrics.inc_conversion(strategy, outcome)
        metrics.inc_render_failure(error_code.value)
    except Exception:
        pass  # fail-open


def convert_html(html: Optional[str], strategy: Optional[str] = None, filename: str = "") -> RenderArtifact:
    """Convenience wrapper: raw HTML + strategy name."""
    renderer = get_renderer(strategy)
    return convert(Document(html=html or "", filename=filename), renderer)
