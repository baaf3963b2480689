"""
Conversion session - the upload side of the client strategy.

Holds the currently selected document. Selecting a non-HTML file is a
silent no-op. One conversion in flight per session; a second download()
while one runs raises ConversionInProgressError.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from .exporter import ExportedFile, export
from .models import Document, SanitizedDocument
from .pipeline import convert
from .sanitizer import sanitize_document
from .services.render_errors import ConversionInProgressError, RenderError, RenderErrorCode
from .services.pdf_raster import RasterRenderer
from .services.renderer import Renderer

logger = logging.getLogger(__name__)

HTML_EXTENSIONS = (".html", ".htm")
HTML_MIME_TYPE = "text/html"

GENERIC_FAILURE_MESSAGE = "PDF could not be created. Please try again."


def is_html_upload(filename: Optional[str], content_type: Optional[str] = None) -> bool:
    """HTML by extension or by media type (parameters like charset ignored)."""
    name = (filename or "").lower()
    if name.endswith(HTML_EXTENSIONS):
        return True
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    return mime == HTML_MIME_TYPE


def decode_html(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


class ConversionSession:
    """Current document + in-flight guard for one user."""

    def __init__(self) -> None:
        self._document: Optional[Document] = None
        self._lock = threading.Lock()

    @property
    def document(self) -> Optional[Document]:
        return self._document

    @property
    def sanitized(self) -> Optional[SanitizedDocument]:
        """Re-derived from the current document on every access."""
        if self._document is None:
            return None
        return sanitize_document(self._document)

    @property
    def generating(self) -> bool:
        return self._lock.locked()

    def load_file(self, filename: str, data: bytes, content_type: Optional[str] = None) -> bool:
        """Select a file. Returns False (state unchanged) for non-HTML files."""
        if not is_html_upload(filename, content_type):
            logger.debug(f"Ignoring non-HTML file: {filename!r} ({content_type})")
            return False
        self._document = Document(html=decode_html(data), filename=filename)
        return True

    def reset(self) -> None:
        self._document = None

    def download(self, renderer: Optional[Renderer] = None) -> ExportedFile:
        """
        Convert the current document and return the PDF file.
        Defaults to the raster strategy.

        Raises:
            ConversionInProgressError: another download() is running
            RenderError: INPUT_MISSING when nothing is selected, otherwise a
                         generic failure (cause is logged, not surfaced)
        """
        if not self._lock.acquire(blocking=False):
            raise ConversionInProgressError("A conversion is already in progress")
        try:
            document = self._document
            if document is None:
                raise RenderError(RenderErrorCode.INPUT_MISSING, "No document selected")
            try:
                artifact = convert(document, renderer or RasterRenderer())
            except RenderError as e:
                if e.error_code == RenderErrorCode.INPUT_MISSING:
                    raise
                logger.error(f"PDF generation error: {e}")
                raise RenderError(e.error_code, GENERIC_FAILURE_MESSAGE) from e
            return export(artifact, document.filename)
        finally:
            self._lock.release()
