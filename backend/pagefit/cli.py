from __future__ import annotations
import argparse, logging, sys
from pathlib import Path

from .core.config import settings
from .exporter import export
from .models import Document
from .pipeline import convert
from .services.pdf_inspect import render_preview_png
from .services.render_errors import RenderError
from .services.renderer import get_renderer
from .session import decode_html, is_html_upload

logger = logging.getLogger("pagefit.cli")


def convert_file(path: Path, out_dir: Path, strategy: str | None, preview: bool = False) -> Path:
    document = Document(html=decode_html(path.read_bytes()), filename=path.name)
    artifact = convert(document, get_renderer(strategy))
    pdf_path = export(artifact, path.name).save(out_dir)
    if preview:
        png_path = pdf_path.with_suffix(".png")
        png_path.write_bytes(render_preview_png(artifact.pdf_bytes))
    print(f"{path} -> {pdf_path} (scale={artifact.fit.scale:.4f})")
    return pdf_path


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="pagefit", description="HTML -> single-page A4 PDF")
    ap.add_argument("inputs", nargs="+", help=".html / .htm files (others are skipped)")
    ap.add_argument("--out-dir", default=settings.output_dir)
    ap.add_argument("--strategy", choices=["vector", "raster"], default=None)
    ap.add_argument("--preview", action="store_true", help="also write a PNG of the page")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    failures = 0
    for raw in args.inputs:
        path = Path(raw)
        if not is_html_upload(path.name):
            continue
        try:
            convert_file(path, Path(args.out_dir), args.strategy, preview=args.preview)
        except (RenderError, OSError) as e:
            failures += 1
            print(f"{path}: {e}", file=sys.stderr)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
