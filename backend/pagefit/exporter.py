"""
Exporter - hand a rendered artifact to the caller as "<basename>.pdf".

Bytes are never transformed here.
"""
from __future__ import annotations

import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote

from .core.config import settings
from .models import RenderArtifact

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
_HTML_EXT_RE = re.compile(r"\.(html|htm)$", re.IGNORECASE)
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


def output_name(source_name: Optional[str], default_basename: Optional[str] = None) -> str:
    """
    Derive the PDF filename from the uploaded file's name.

    Control characters (CR/LF included) are dropped.
    Example: reports/rapor.HTML → rapor.pdf, "" → belge.pdf
    """
    fallback = default_basename or settings.default_basename
    cleaned = _CONTROL_CHARS_RE.sub("", source_name or "").strip()
    base = _HTML_EXT_RE.sub("", Path(cleaned).name)
    return f"{base or fallback}.pdf"


def content_disposition(filename: str) -> str:
    """
    attachment header with a quoted ASCII filename plus an RFC 5987 filename*.

    Example: q3; "final".pdf →
        attachment; filename="q3; \\"final\\".pdf"; filename*=UTF-8''q3%3B%20%22final%22.pdf
    """
    filename = _CONTROL_CHARS_RE.sub("", filename)
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").strip() or "document.pdf"
    escaped = ascii_name.replace("\\", "\\\\").replace('"', '\\"')
    return f"attachment; filename=\"{escaped}\"; filename*=UTF-8''{quote(filename, safe='')}"


@dataclass(frozen=True)
class ExportedFile:
    filename: str
    content: bytes = field(repr=False)
    media_type: str = PDF_CONTENT_TYPE

    def save(self, directory: Union[str, Path, None] = None) -> Path:
        """
        Atomically write to directory/filename (mkstemp → replace).
        Returns the final path.
        """
        base = Path(directory if directory is not None else settings.output_dir)
        base.mkdir(parents=True, exist_ok=True)
        final_path = base / self.filename

        fd, tmp_path = tempfile.mkstemp(dir=str(base), suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(self.content)
            os.replace(tmp_path, str(final_path))
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info(f"Saved {final_path} ({len(self.content)} bytes)")
        return final_path


def export(artifact: RenderArtifact, source_name: Optional[str] = None) -> ExportedFile:
    return ExportedFile(filename=output_name(source_name), content=artifact.pdf_bytes)
