"""
Page rasterization.

Renders PDF pages at a fixed zoom factor into PNG bytes. Every page raster
the editor works on comes from here, so one zoom value defines the source
pixel grid for the whole document.
"""

from typing import List

import fitz  # type: ignore[import]

from ..logging import get_logger
from .ingestion import PdfDocument

logger = get_logger(__name__)

DEFAULT_ZOOM = 3.0


def render_page_png(doc: PdfDocument, index: int, zoom: float = DEFAULT_ZOOM) -> bytes:
    """
    Render one page to PNG bytes.

    Args:
        doc: Open document
        index: Zero-based page index
        zoom: Scale relative to PDF points (1.0 = 72 DPI)

    Returns:
        PNG-encoded RGB raster of the whole page

    Raises:
        PageIndexError: If ``index`` is outside the document
    """
    if zoom <= 0:
        raise ValueError(f"zoom must be positive, got {zoom}")

    mat = fitz.Matrix(zoom, zoom)
    pix = doc.load_page(index).get_pixmap(matrix=mat, colorspace=fitz.csRGB, alpha=False)

    logger.debug(f"Rendered page {index} to {pix.width}x{pix.height} at zoom {zoom}")
    return pix.tobytes("png")


def render_document(doc: PdfDocument, zoom: float = DEFAULT_ZOOM) -> List[bytes]:
    """Render every page of ``doc``, in page order."""
    rasters = [render_page_png(doc, index, zoom) for index in range(doc.page_count)]
    logger.info(f"Rendered {len(rasters)} pages at zoom {zoom}")
    return rasters
