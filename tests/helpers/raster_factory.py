"""Helpers for building page rasters, region rasters and PDFs in memory."""

import io
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import fitz  # type: ignore[import]
import numpy as np
from PIL import Image

from pagecut.clipping.regions import ClippedRegion
from pagecut.geometry.types import BoundingBox, Point


def png_bytes(img: Image.Image) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


def open_png(data: bytes) -> Image.Image:
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        return img.copy()


def make_page(size: Tuple[int, int] = (100, 100),
              squares: Sequence[Tuple[Tuple[int, int, int, int], Tuple[int, int, int]]] = ()) -> Image.Image:
    """
    White RGB page with solid squares.

    Args:
        size: (width, height) of the page
        squares: ((left, top, right, bottom), color) pairs; right/bottom exclusive
    """
    page = Image.new('RGB', size, 'white')
    for box, color in squares:
        page.paste(color, box)
    return page


def make_black_square_page() -> Image.Image:
    """100x100 white page with a black 20x20 square at (40,40)-(60,60)."""
    return make_page((100, 100), [((40, 40, 60, 60), (0, 0, 0))])


def rect_polygon(left: float, top: float, right: float, bottom: float) -> List[Point]:
    return [Point(left, top), Point(right, top), Point(right, bottom), Point(left, bottom)]


def make_region(polygon: Sequence[Point],
                color: Tuple[int, int, int],
                insertion_index: int,
                page_index: int = 0,
                raster_size: Optional[Tuple[int, int]] = None) -> ClippedRegion:
    """Build a region whose extracted raster is a solid, opaque color."""
    bbox = BoundingBox.from_points(polygon)
    width, height = raster_size or bbox.pixel_box()[2:]
    raster = png_bytes(Image.new('RGBA', (width, height), color + (255,)))
    return ClippedRegion(
        source_raster=b'',
        bounding_box=bbox,
        polygon=tuple(polygon),
        page_index=page_index,
        insertion_index=insertion_index,
        extracted_raster=raster,
        width=width,
        height=height,
    )


def pixels(img: Image.Image, mode: str = 'RGB') -> np.ndarray:
    return np.asarray(img.convert(mode))


def make_pdf_with_square(tmp_path: Path, page_count: int = 1) -> Path:
    """
    Create a PDF whose pages are white with a filled black square.

    The square covers PDF points (40,40)-(60,60) on a 100x100 pt page.
    """
    pdf_path = tmp_path / "pages.pdf"

    doc = fitz.open()
    try:
        for _ in range(page_count):
            page = doc.new_page(width=100, height=100)
            page.draw_rect(fitz.Rect(40, 40, 60, 60), color=None, fill=(0, 0, 0))
        pdf_path.write_bytes(doc.tobytes())
    finally:
        doc.close()

    return pdf_path


def make_encrypted_pdf(tmp_path: Path) -> Path:
    """Create an encrypted PDF with proper file handle management."""
    pdf_path = tmp_path / "encrypted.pdf"

    doc = fitz.open()
    try:
        page = doc.new_page()
        page.insert_text((50, 50), "Encrypted content")
        pdf_bytes = doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, user_pw="test", owner_pw="test")
        pdf_path.write_bytes(pdf_bytes)
    finally:
        doc.close()

    return pdf_path
