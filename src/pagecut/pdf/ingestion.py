"""Opening PDFs for rasterization."""

from __future__ import annotations

from pathlib import Path

import fitz  # type: ignore[import]

from ..errors import PageIndexError


class PdfOpenError(Exception):
    """Raised when a PDF cannot be opened."""


class EncryptedPdfError(PdfOpenError):
    """Raised when a PDF is encrypted and cannot be read."""


class PdfDocument:
    """An open PDF whose pages are fetched by index for rendering."""

    def __init__(self, source: Path | str) -> None:
        self._doc = self._open_document(Path(source))

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def load_page(self, index: int) -> fitz.Page:
        """
        Fetch one page.

        Raises:
            PageIndexError: If ``index`` is outside the document
        """
        if not 0 <= index < self.page_count:
            raise PageIndexError(f"Page {index} out of range (document has {self.page_count})")
        return self._doc.load_page(index)

    def close(self) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None

    def __enter__(self) -> PdfDocument:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @staticmethod
    def _open_document(path: Path) -> fitz.Document:
        if not path.exists():
            raise PdfOpenError(f"PDF file does not exist: {path}")

        try:
            doc = fitz.open(path)
        except Exception as exc:
            raise PdfOpenError(f"Failed to open PDF: {path}") from exc

        if doc.needs_pass:
            doc.close()
            raise EncryptedPdfError(f"PDF is encrypted: {path}")

        return doc
