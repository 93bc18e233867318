import asyncio
from pathlib import Path
from typing import List, Optional

import typer

from .config import Settings
from .errors import PageCutError, PageIndexError
from .geometry.types import Point
from .logging import get_logger
from .pdf.ingestion import EncryptedPdfError, PdfDocument, PdfOpenError
from .pdf.rendering import render_document, render_page_png
from .raster.overlay import render_overlay
from .session import ClipSession

app = typer.Typer(help="pagecut - clip polygon regions out of PDF pages and recompose them", no_args_is_help=True)


def parse_polygon(text: str) -> List[Point]:
    """
    Parse ``"x,y x,y x,y"`` into points.

    Raises:
        typer.BadParameter: If a vertex is not a pair of numbers
    """
    points = []
    for vertex in text.replace(";", " ").split():
        parts = vertex.split(",")
        if len(parts) != 2:
            raise typer.BadParameter(f"Expected 'x,y' but got '{vertex}'")
        try:
            points.append(Point(float(parts[0]), float(parts[1])))
        except ValueError as exc:
            raise typer.BadParameter(f"Invalid coordinate in '{vertex}'") from exc
    return points


def _load_pages(pdf_path: Path, zoom: float, page: Optional[int] = None) -> List[bytes]:
    """Render every page, or only ``page`` when one is given."""
    logger = get_logger(__name__)
    try:
        logger.info(f"Opening PDF: {pdf_path}")
        with PdfDocument(pdf_path) as doc:
            if page is None:
                return render_document(doc, zoom=zoom)
            return [render_page_png(doc, page, zoom=zoom)]
    except EncryptedPdfError as exc:
        logger.error(f"Cannot process encrypted PDF: {exc}")
        raise typer.Exit(code=2) from exc
    except PdfOpenError as exc:
        logger.error(f"Failed to open PDF: {exc}")
        raise typer.Exit(code=1) from exc
    except PageIndexError as exc:
        logger.error(f"No such page: {exc}")
        raise typer.Exit(code=1) from exc


@app.command()
def render(
    pdf_path: Path = typer.Argument(..., exists=True, readable=True, help="Path to the PDF file to rasterize"),
    out: Path = typer.Option(Path("output"), "--out", "-o", help="Output directory for page images"),
    zoom: float = typer.Option(3.0, help="Rasterization zoom factor (1.0 = 72 DPI)"),
) -> None:
    """Rasterize every page of a PDF to page-{index}.png."""
    logger = get_logger(__name__)
    try:
        Settings(output_dir=out, zoom=zoom).validate()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    pages = _load_pages(pdf_path, zoom)

    out.mkdir(parents=True, exist_ok=True)
    for index, raster in enumerate(pages):
        (out / f"page-{index}.png").write_bytes(raster)

    logger.info(f"Wrote {len(pages)} page images to {out}")
    typer.echo(f"Rendered {len(pages)} pages to {out}")


@app.command()
def clip(
    pdf_path: Path = typer.Argument(..., exists=True, readable=True, help="Path to the PDF file to clip from"),
    page: int = typer.Option(0, "--page", "-p", min=0, help="Zero-based page index"),
    polygon: List[str] = typer.Option(..., "--polygon", help="Polygon as 'x,y x,y x,y' in page pixels; repeat for more regions"),
    out: Path = typer.Option(Path("output"), "--out", "-o", help="Output directory"),
    zoom: float = typer.Option(3.0, help="Rasterization zoom factor (1.0 = 72 DPI)"),
    reconstruct: bool = typer.Option(True, "--reconstruct/--no-reconstruct", help="Also write the page rebuilt from the clipped regions"),
) -> None:
    """
    Clip one or more polygons from a PDF page.

    Each polygon becomes a region image. Regions are stacked in the order the
    polygons are given when the page is rebuilt.
    """
    logger = get_logger(__name__)
    outlines = [parse_polygon(text) for text in polygon]

    try:
        settings = Settings(output_dir=out, zoom=zoom).validate()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    pages = _load_pages(pdf_path, zoom)
    logger.info(f"Loaded {len(pages)} pages at zoom {zoom}")

    try:
        written, rebuilt = asyncio.run(_clip_pages(pages, page, outlines, settings, reconstruct))
    except PageCutError as exc:
        logger.error(f"Clipping failed: {exc}")
        raise typer.Exit(code=1) from exc

    typer.echo(f"Clipped {len(written)} regions from page {page}")
    for path in written:
        typer.echo(f"  {path}")
    if rebuilt is not None:
        typer.echo(f"Reconstructed page: {rebuilt}")


@app.command()
def preview(
    pdf_path: Path = typer.Argument(..., exists=True, readable=True, help="Path to the PDF file to preview"),
    page: int = typer.Option(0, "--page", "-p", min=0, help="Zero-based page index"),
    polygon: str = typer.Option(..., "--polygon", help="Working points as 'x,y x,y ...' in page pixels"),
    out: Path = typer.Option(Path("output"), "--out", "-o", help="Output directory"),
    zoom: float = typer.Option(3.0, help="Rasterization zoom factor (1.0 = 72 DPI)"),
) -> None:
    """Draw the working polygon and its numbered vertices over a page."""
    logger = get_logger(__name__)
    points = parse_polygon(polygon)

    try:
        settings = Settings(output_dir=out, zoom=zoom).validate()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    raster = _load_pages(pdf_path, zoom, page)[0]
    try:
        data = render_overlay(raster, points, settings.page_format)
    except PageCutError as exc:
        logger.error(f"Preview failed: {exc}")
        raise typer.Exit(code=1) from exc

    out.mkdir(parents=True, exist_ok=True)
    path = out / f"preview-page-{page}.{settings.page_format}"
    path.write_bytes(data)
    typer.echo(f"Preview of page {page} with {len(points)} points: {path}")


async def _clip_pages(
    pages: List[bytes],
    page_index: int,
    outlines: List[List[Point]],
    settings: Settings,
    reconstruct: bool,
) -> tuple[List[Path], Optional[Path]]:
    session = ClipSession(pages, settings)
    session.current_page = page_index
    out = settings.output_dir
    out.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    try:
        for outline in outlines:
            session.editor.replace_points(outline)
            region = await session.commit_clip(page_index)
            path = out / f"clipped-image-{page_index}-{region.insertion_index}.{settings.region_format}"
            path.write_bytes(region.extracted_raster)
            written.append(path)

        rebuilt = None
        if reconstruct:
            data = await session.reconstruct_page(page_index)
            if data is not None:
                rebuilt = out / f"reconstructed-page-{page_index}.{settings.page_format}"
                rebuilt.write_bytes(data)
        return written, rebuilt
    finally:
        session.close()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
