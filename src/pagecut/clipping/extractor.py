"""
Polygon clip extraction.

Cuts the bounding box of a polygon out of a page raster, keeping only the
pixels inside the polygon. Everything outside the polygon is left fully
transparent.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ..errors import InsufficientPointsError
from ..geometry.types import BoundingBox, Point
from ..logging import get_logger
from ..raster.surface import RasterCodec, create_surface, draw_image, polygon_mask
from .regions import MIN_POLYGON_POINTS, ClippedRegion

logger = get_logger(__name__)


class PolygonClipExtractor:
    def __init__(self, codec: Optional[RasterCodec] = None, fmt: str = "png") -> None:
        self._codec = codec or RasterCodec()
        self._fmt = fmt

    async def extract(
        self,
        source_raster: bytes,
        polygon: Sequence[Point],
        page_index: int,
        insertion_index: int = 0,
    ) -> ClippedRegion:
        """
        Extract the polygon's region of ``source_raster``.

        Args:
            source_raster: Encoded page image
            polygon: Outline in source pixels, at least three points
            page_index: Page the raster belongs to
            insertion_index: Stacking position assigned by the caller

        Returns:
            A frozen ClippedRegion whose raster is sized like the polygon's
            bounding box and whose polygon is the untranslated input

        Raises:
            InsufficientPointsError: Fewer than three points
            SourceUnavailableError: ``source_raster`` cannot be decoded
            ContextUnavailableError: The crop surface cannot be allocated
        """
        # Copy before the first suspension point.
        outline = tuple(polygon)
        if len(outline) < MIN_POLYGON_POINTS:
            raise InsufficientPointsError(len(outline))

        bbox = BoundingBox.from_points(outline)
        left, top, width, height = bbox.pixel_box()
        surface = create_surface(width, height)

        source = await self._codec.decode(source_raster)

        crop_outline = [p.translated(-left, -top) for p in outline]
        mask = polygon_mask((width, height), crop_outline)
        draw_image(
            surface,
            source,
            src_box=(left, top, left + width, top + height),
            dst_box=(0, 0, width, height),
            mask=mask,
        )
        extracted = await self._codec.encode(surface, self._fmt)

        logger.debug(
            f"Extracted {width}x{height} region at ({left}, {top}) "
            f"from page {page_index} with {len(outline)} points"
        )
        return ClippedRegion(
            source_raster=source_raster,
            bounding_box=bbox,
            polygon=outline,
            page_index=page_index,
            insertion_index=insertion_index,
            extracted_raster=extracted,
            width=width,
            height=height,
        )
