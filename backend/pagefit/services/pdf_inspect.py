"""
PDF artifact inspection.
Uses pypdfium2: reads back page count and first-page size (pt).
"""
import io
import logging

import pypdfium2 as pdfium

from ..models import PdfInfo

logger = logging.getLogger(__name__)


def inspect_pdf(pdf_bytes: bytes) -> PdfInfo:
    """
    Read page count and first-page size.

    Raises:
        ValueError: PDF has no pages
        pypdfium2.PdfiumError: bytes are not a readable PDF
    """
    pdf = pdfium.PdfDocument(pdf_bytes)
    try:
        page_count = len(pdf)
        if page_count < 1:
            raise ValueError("PDF is empty (no pages)")
        page = pdf[0]
        try:
            width, height = page.get_size()
        finally:
            page.close()
    finally:
        pdf.close()

    return PdfInfo(page_count=page_count, width_pt=width, height_pt=height)


def render_preview_png(pdf_bytes: bytes, scale: float = 1.0) -> bytes:
    """First page as PNG bytes (CLI --preview)."""
    pdf = pdfium.PdfDocument(pdf_bytes)
    try:
        page = pdf[0]
        try:
            pil_image = page.render(scale=scale).to_pil()
        finally:
            page.close()
    finally:
        pdf.close()

    if pil_image.mode not in ("RGB", "L"):
        pil_image = pil_image.convert("RGB")
    out = io.BytesIO()
    pil_image.save(out, format="PNG", optimize=True)
    return out.getvalue()
