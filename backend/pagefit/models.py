"""
Data model for one conversion.

Document → SanitizedDocument → FitResult → RenderArtifact

Every object is produced once per conversion and never mutated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RenderStrategy(str, Enum):
    """Renderer variants."""
    VECTOR = "vector"  # engine-exported PDF (server-side)
    RASTER = "raster"  # screenshot embedded in a PDF page (client-side)


@dataclass(frozen=True)
class Document:
    """Raw HTML as submitted."""
    html: str
    filename: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.html or "").strip()


@dataclass(frozen=True)
class SanitizedDocument:
    """Document with override style block and fit script injected."""
    source: Document
    html: str


@dataclass(frozen=True)
class FitResult:
    """
    Measured content height and the uniform downscale derived from it.

    scale ∈ [floor, 1]; scale == 1 when content already fits.
    """
    measured_height: float
    target_height: float
    scale: float

    @property
    def is_scaled(self) -> bool:
        return self.scale < 1.0


@dataclass(frozen=True)
class RenderArtifact:
    """Single-page PDF bytes produced by a renderer."""
    pdf_bytes: bytes = field(repr=False)
    strategy: RenderStrategy
    fit: FitResult
    timed_out: bool = False
    states: tuple[str, ...] = ()

    @property
    def size(self) -> int:
        return len(self.pdf_bytes)


@dataclass(frozen=True)
class PdfInfo:
    """Basic facts read back from a PDF artifact."""
    page_count: int
    width_pt: float
    height_pt: float
