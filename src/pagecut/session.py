"""
Clip session: the operations a host UI drives.

A session holds the rendered pages of one document, the working polygon
editor and the collection of committed regions. It lives on a single event
loop. Point edits are synchronous; only raster decode/encode suspend.
"""

from __future__ import annotations

import dataclasses
from typing import Dict, List, Optional, Sequence, Tuple

from .clipping.extractor import PolygonClipExtractor
from .clipping.reconstruct import PageReconstructor
from .clipping.regions import MIN_POLYGON_POINTS, ClippedRegion, RegionCollection
from .config import Settings
from .editor.points import PointSetEditor
from .editor.state import CursorHint
from .errors import InsufficientPointsError, PageCutError, PageIndexError, SessionClosedError
from .geometry.types import Point
from .logging import get_logger
from .raster.overlay import draw_overlay
from .raster.surface import RasterCodec, flatten

logger = get_logger(__name__)


class ClipSession:
    def __init__(
        self,
        pages: Sequence[bytes],
        settings: Optional[Settings] = None,
        codec: Optional[RasterCodec] = None,
    ) -> None:
        self._settings = (settings or Settings()).validate()
        self._pages: List[bytes] = list(pages)
        self._codec = codec or RasterCodec()
        self._editor = PointSetEditor(hit_radius=self._settings.hit_radius)
        self._regions = RegionCollection()
        self._extractor = PolygonClipExtractor(self._codec, fmt=self._settings.region_format)
        self._reconstructor = PageReconstructor(
            self._codec,
            fmt=self._settings.page_format,
            background=self._settings.background,
        )
        self._page_sizes: Dict[int, Tuple[int, int]] = {}
        self._current_page = 0
        self._closed = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def editor(self) -> PointSetEditor:
        return self._editor

    @property
    def regions(self) -> RegionCollection:
        return self._regions

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def current_page(self) -> int:
        return self._current_page

    @current_page.setter
    def current_page(self, index: int) -> None:
        self._check_page(index)
        # Working points survive page switches.
        self._current_page = index

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._editor.points

    @property
    def cursor(self) -> CursorHint:
        return self._editor.cursor

    def page_raster(self, index: int) -> bytes:
        self._check_page(index)
        return self._pages[index]

    async def page_size(self, index: int) -> Tuple[int, int]:
        """Pixel size of a page raster, decoded once and cached."""
        if index not in self._page_sizes:
            image = await self._codec.decode(self.page_raster(index))
            self._page_sizes[index] = image.size
        return self._page_sizes[index]

    # Pointer events, positions already mapped to source pixels.

    def on_pointer_down(self, pos: Point) -> None:
        self._ensure_open()
        self._editor.on_pointer_down(pos)

    def on_pointer_move(self, pos: Point) -> None:
        self._ensure_open()
        self._editor.on_pointer_move(pos)

    def on_pointer_up(self) -> None:
        self._editor.on_pointer_up()

    def on_pointer_leave(self) -> None:
        self._editor.on_pointer_leave()

    def clear_points(self) -> None:
        self._editor.clear_all()

    async def preview_page(self, page_index: Optional[int] = None) -> bytes:
        """
        Render a page with the working polygon drawn over it.

        The points are read when the call starts, so edits made while the page
        decodes show up in the next preview only.

        Raises:
            PageIndexError: ``page_index`` is not a loaded page
            SourceUnavailableError: The page raster cannot be decoded
        """
        self._ensure_open()
        if page_index is None:
            page_index = self._current_page
        source = self.page_raster(page_index)
        points = self._editor.points

        page = await self._codec.decode(source)
        preview = flatten(draw_overlay(page, points), self._settings.background)
        return await self._codec.encode(preview, self._settings.page_format, self._settings.background)

    async def commit_clip(self, page_index: Optional[int] = None) -> ClippedRegion:
        """
        Extract the working polygon from a page and store it as a region.

        The working points are cleared only once the region is stored. On any
        failure both the points and the region collection are left as they
        were.

        Raises:
            InsufficientPointsError: Fewer than three working points
            PageIndexError: ``page_index`` is not a loaded page
            SourceUnavailableError: The page raster cannot be decoded
            ContextUnavailableError: The crop surface cannot be allocated
            SessionClosedError: The session was closed before or during the commit
        """
        self._ensure_open()
        if page_index is None:
            page_index = self._current_page
        source = self.page_raster(page_index)

        points = self._editor.points
        if len(points) < MIN_POLYGON_POINTS:
            logger.warning(f"Commit refused: {len(points)} points placed, need {MIN_POLYGON_POINTS}")
            raise InsufficientPointsError(len(points))

        try:
            region = await self._extractor.extract(
                source, points, page_index, self._regions.next_insertion_index
            )
        except PageCutError as exc:
            logger.warning(f"Commit on page {page_index} failed: {exc}")
            raise

        if self._closed:
            raise SessionClosedError("Session closed while the clip was being extracted")

        # Stamped after the await so concurrent commits never share an index.
        region = dataclasses.replace(region, insertion_index=self._regions.reserve_index())
        self._regions.add(region)
        self._editor.clear_all()
        return region

    def delete_region(self, index: int) -> ClippedRegion:
        self._ensure_open()
        return self._regions.delete(index)

    def clear_all_regions(self) -> None:
        self._ensure_open()
        self._regions.clear()

    async def reconstruct_page(self, page_index: int) -> Optional[bytes]:
        """
        Rebuild a page from its regions at the page's original size.

        Returns:
            Encoded page image, or None when the page has no regions or the
            session was closed before the result was ready
        """
        self._ensure_open()
        page_regions = self._regions.regions_for_page(page_index)
        if not page_regions:
            return None

        width, height = await self.page_size(page_index)
        result = await self._reconstructor.reconstruct(
            page_index,
            width,
            height,
            page_regions,
            is_alive=lambda: not self._closed,
        )
        if self._closed:
            return None
        return result

    def close(self) -> None:
        """Discard the session. Pending operations drop their results."""
        if not self._closed:
            logger.debug(f"Closing session with {len(self._regions)} regions")
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Session is closed")

    def _check_page(self, index: int) -> None:
        if not 0 <= index < len(self._pages):
            raise PageIndexError(f"Page {index} out of range (have {len(self._pages)} pages)")
