"""
Points and bounding boxes in source-pixel space.

All coordinates are expressed in the pixel grid of one page raster, never in
device or display pixels.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Tuple


@dataclass(frozen=True)
class Point:
    """A coordinate in a page's source-pixel space."""
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def translated(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle exactly containing a polygon's points."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "BoundingBox":
        """Compute the min/max box over a non-empty point sequence."""
        points = list(points)
        if not points:
            raise ValueError("Cannot compute a bounding box of zero points")
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min_x=min(xs), min_y=min(ys), max_x=max(xs), max_y=max(ys))

    def width(self) -> float:
        return self.max_x - self.min_x

    def height(self) -> float:
        return self.max_y - self.min_y

    def pixel_box(self) -> Tuple[int, int, int, int]:
        """
        Snap the box to the pixel grid.

        Returns:
            (left, top, width, height) in whole pixels. Width and height are
            rounded independently of the origin so an integer-aligned box
            keeps its exact size.
        """
        return (
            int(round(self.min_x)),
            int(round(self.min_y)),
            int(round(self.width())),
            int(round(self.height())),
        )
