"""
Page reconstruction from committed regions.

All region rasters of a page are decoded concurrently, then drawn one by one
in ascending insertion index onto a blank page. The composite therefore
depends only on the regions, never on which decode finished first.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Iterable, Optional

from ..logging import get_logger
from ..raster.surface import Color, RasterCodec, create_surface, draw_image, flatten, polygon_mask
from .regions import ClippedRegion

logger = get_logger(__name__)


class PageReconstructor:
    def __init__(
        self,
        codec: Optional[RasterCodec] = None,
        fmt: str = "png",
        background: Color = "white",
    ) -> None:
        self._codec = codec or RasterCodec()
        self._fmt = fmt
        self._background = background

    async def reconstruct(
        self,
        page_index: int,
        page_width: int,
        page_height: int,
        regions: Iterable[ClippedRegion],
        is_alive: Optional[Callable[[], bool]] = None,
    ) -> Optional[bytes]:
        """
        Composite every region of ``page_index`` onto a blank page.

        Args:
            page_index: Page to rebuild
            page_width: Width of the original page raster
            page_height: Height of the original page raster
            regions: Any regions; those of other pages are ignored
            is_alive: Checked after decoding; when it returns False the
                decoded rasters are discarded and None is returned

        Returns:
            Encoded page image, or None when the page has no regions

        Raises:
            SourceUnavailableError: A region raster cannot be decoded
            ContextUnavailableError: The page surface cannot be allocated
        """
        page_regions = sorted(
            (r for r in regions if r.page_index == page_index),
            key=lambda r: r.insertion_index,
        )
        if not page_regions:
            logger.debug(f"No regions for page {page_index}, nothing to reconstruct")
            return None

        page = create_surface(page_width, page_height, self._background)

        # Decodes may finish in any order; results stay aligned with page_regions.
        decoded = await asyncio.gather(
            *(self._codec.decode(r.extracted_raster) for r in page_regions)
        )

        if is_alive is not None and not is_alive():
            logger.debug(f"Owner went away while decoding page {page_index}, dropping result")
            return None

        for region, image in zip(page_regions, decoded):
            left, top, width, height = region.bounding_box.pixel_box()
            mask = polygon_mask(page.size, region.polygon)
            draw_image(
                page,
                image,
                src_box=(0, 0, image.width, image.height),
                dst_box=(left, top, width, height),
                mask=mask,
            )

        logger.info(f"Reconstructed page {page_index} from {len(page_regions)} regions")
        return await self._codec.encode(flatten(page, self._background), self._fmt, self._background)
