"""
PDF API - convert HTML to a single-page A4 PDF.

Endpoints:
    POST /api/pdf           JSON {html, filename?, strategy?} → application/pdf
    POST /api/pdf/upload    multipart file (.html/.htm/text/html) → application/pdf

Errors (detail = {"error": <code>, "message": <cause>}):
    400 INPUT_MISSING       html absent / empty
    413 PAYLOAD_TOO_LARGE   html larger than settings.max_html_bytes
    422 UNKNOWN_STRATEGY    strategy not vector | raster
    500 <RenderErrorCode>   render failure (no partial PDF)

Non-HTML uploads are ignored (204, no body).
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, Field

from .core.config import settings
from .exporter import PDF_CONTENT_TYPE, content_disposition, export
from .models import Document
from .pipeline import convert
from .services.render_errors import RenderError
from .services.renderer import Renderer, get_renderer
from .session import decode_html, is_html_upload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ConvertRequest(BaseModel):
    html: Optional[str] = None
    filename: Optional[str] = Field(default=None, max_length=255)
    strategy: Optional[str] = None


# ---------------------------------------------------------------------------
# Dependency injection helpers
# ---------------------------------------------------------------------------

_renderer_factory: Callable[[Optional[str]], Renderer] = get_renderer


def configure_pdf_api(renderer_factory: Optional[Callable[[Optional[str]], Renderer]] = None) -> None:
    """Wire the renderer factory at app startup (tests inject fakes)."""
    global _renderer_factory
    _renderer_factory = renderer_factory or get_renderer


def _resolve_renderer(strategy: Optional[str]) -> Renderer:
    try:
        return _renderer_factory(strategy)
    except ValueError as e:
        raise HTTPException(status_code=422, detail={
            "error": "UNKNOWN_STRATEGY",
            "message": str(e),
        })


def _too_large(size: int) -> HTTPException:
    return HTTPException(status_code=413, detail={
        "error": "PAYLOAD_TOO_LARGE",
        "message": f"HTML size {size} exceeds limit {settings.max_html_bytes}",
    })


def _render_response(document: Document, strategy: Optional[str]) -> Response:
    if document.is_empty:
        raise HTTPException(status_code=400, detail={
            "error": "INPUT_MISSING",
            "message": "No HTML",
        })

    html_bytes = len(document.html.encode("utf-8"))
    if html_bytes > settings.max_html_bytes:
        raise _too_large(html_bytes)

    renderer = _resolve_renderer(strategy)
    try:
        artifact = convert(document, renderer)
    except RenderError as e:
        logger.error(f"PDF render failed: {e}")
        raise HTTPException(status_code=e.http_status, detail=e.to_dict())

    exported = export(artifact, document.filename)
    return Response(
        content=exported.content,
        media_type=PDF_CONTENT_TYPE,
        headers={
            "Content-Disposition": content_disposition(exported.filename),
            "X-Pagefit-Scale": f"{artifact.fit.scale:.6f}",
            "X-Pagefit-Strategy": artifact.strategy.value,
        },
    )


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api", tags=["pdf"])


@router.post("/pdf")
def create_pdf(body: ConvertRequest):
    """
    Convert inline HTML.

    Sync endpoint: runs in the FastAPI threadpool, each call owns its browser.
    """
    document = Document(html=body.html or "", filename=body.filename or "")
    return _render_response(document, body.strategy)


@router.post("/pdf/upload")
def upload_pdf(file: UploadFile = File(...), strategy: Optional[str] = None):
    """Convert an uploaded HTML file. Non-HTML files are ignored."""
    if not is_html_upload(file.filename, file.content_type):
        logger.debug(f"Ignoring non-HTML upload: {file.filename!r} ({file.content_type})")
        return Response(status_code=204)

    # Read at most one byte past the limit so oversized uploads never load whole
    data = file.file.read(settings.max_html_bytes + 1)
    if len(data) > settings.max_html_bytes:
        logger.warning(f"Rejecting upload {file.filename!r}: larger than {settings.max_html_bytes} bytes")
        raise _too_large(len(data))

    document = Document(html=decode_html(data), filename=file.filename or "")
    return _render_response(document, strategy)
