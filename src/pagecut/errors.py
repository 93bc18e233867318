"""Exceptions raised by the region capture and compositing engine."""


class PageCutError(Exception):
    """Base class for all pagecut failures."""


class InsufficientPointsError(PageCutError):
    """Raised when a clip is committed with fewer than three points."""

    def __init__(self, count: int) -> None:
        super().__init__(f"A clip needs at least 3 points, got {count}")
        self.count = count


class SourceUnavailableError(PageCutError):
    """Raised when raster bytes cannot be decoded."""


class ContextUnavailableError(PageCutError):
    """Raised when a drawing surface cannot be allocated."""


class SessionClosedError(PageCutError):
    """Raised when a discarded session is used or an operation outlives it."""


class PageIndexError(PageCutError, IndexError):
    """Raised for a page index outside the loaded document."""


class RegionIndexError(PageCutError, IndexError):
    """Raised when deleting a region that does not exist."""
