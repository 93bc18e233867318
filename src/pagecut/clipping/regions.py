"""
Committed clip regions and the per-session collection holding them.

A ClippedRegion is frozen at commit time. Its polygon is a tuple copied from
the working points, so later edits never reach it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple

from ..errors import InsufficientPointsError, RegionIndexError
from ..geometry.types import BoundingBox, Point
from ..logging import get_logger

logger = get_logger(__name__)

MIN_POLYGON_POINTS = 3


@dataclass(frozen=True)
class ClippedRegion:
    """One extracted polygonal crop and everything needed to place it back."""
    source_raster: bytes           # Encoded page raster the crop came from
    bounding_box: BoundingBox      # Box of the polygon in page pixels
    polygon: Tuple[Point, ...]     # Outline in page pixels, input order
    page_index: int                # Page the region belongs to
    insertion_index: int           # Creation order, the stacking order
    extracted_raster: bytes        # Encoded crop sized like bounding_box
    width: int                     # Pixel size of extracted_raster
    height: int

    def __post_init__(self) -> None:
        if len(self.polygon) < MIN_POLYGON_POINTS:
            raise InsufficientPointsError(len(self.polygon))
        if self.page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {self.page_index}")
        # Accept any sequence but store an immutable copy.
        object.__setattr__(self, "polygon", tuple(self.polygon))

    def to_dict(self) -> dict:
        """Describe the region without its raster payloads."""
        box = self.bounding_box
        return {
            "page_index": self.page_index,
            "insertion_index": self.insertion_index,
            "bbox": {"min_x": box.min_x, "min_y": box.min_y, "max_x": box.max_x, "max_y": box.max_y},
            "polygon": [[p.x, p.y] for p in self.polygon],
            "dimensions": {"width": self.width, "height": self.height},
        }


class RegionCollection:
    """
    Insertion-ordered regions of one editing session.

    Regions are appended, so list order is creation order. Insertion indices
    come from a counter that only moves forward: deleting or clearing regions
    never lets a later region reuse an index.
    """

    def __init__(self) -> None:
        self._regions: List[ClippedRegion] = []
        self._next_index = 0

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[ClippedRegion]:
        return iter(list(self._regions))

    def __getitem__(self, index: int) -> ClippedRegion:
        return self._regions[index]

    @property
    def next_insertion_index(self) -> int:
        return self._next_index

    def reserve_index(self) -> int:
        """Hand out the next insertion index."""
        index = self._next_index
        self._next_index += 1
        return index

    def add(self, region: ClippedRegion) -> ClippedRegion:
        if any(r.insertion_index == region.insertion_index for r in self._regions):
            raise ValueError(f"Insertion index {region.insertion_index} is already in use")
        self._regions.append(region)
        self._next_index = max(self._next_index, region.insertion_index + 1)
        logger.info(
            f"Added region #{region.insertion_index} on page {region.page_index} "
            f"({region.width}x{region.height})"
        )
        return region

    def delete(self, index: int) -> ClippedRegion:
        """Remove and return the region at list position ``index``."""
        if not 0 <= index < len(self._regions):
            raise RegionIndexError(f"No region at position {index} (have {len(self._regions)})")
        region = self._regions.pop(index)
        logger.info(f"Deleted region #{region.insertion_index} from page {region.page_index}")
        return region

    def clear(self) -> None:
        count = len(self._regions)
        self._regions.clear()
        logger.info(f"Cleared {count} regions")

    def regions_for_page(self, page_index: int) -> List[ClippedRegion]:
        """Regions of one page, in stacking order."""
        return sorted(
            (r for r in self._regions if r.page_index == page_index),
            key=lambda r: r.insertion_index,
        )
