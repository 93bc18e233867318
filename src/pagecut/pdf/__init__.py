"""PDF page rasterization, the producer of source page rasters."""

from .ingestion import EncryptedPdfError, PdfDocument, PdfOpenError
from .rendering import render_document, render_page_png

__all__ = [
    'EncryptedPdfError',
    'PdfDocument',
    'PdfOpenError',
    'render_document',
    'render_page_png',
]
