from dataclasses import dataclass

from .types import Point


@dataclass(frozen=True)
class DisplayRect:
    """Where a page raster is shown on the device, and its backing size."""
    origin_x: float
    origin_y: float
    display_width: float
    display_height: float
    backing_width: float
    backing_height: float

    def to_source(self, device_x: float, device_y: float) -> Point:
        return map_to_source(
            device_x,
            device_y,
            self.origin_x,
            self.origin_y,
            self.display_width,
            self.display_height,
            self.backing_width,
            self.backing_height,
        )


def map_to_source(
    device_x: float,
    device_y: float,
    origin_x: float,
    origin_y: float,
    display_width: float,
    display_height: float,
    backing_width: float,
    backing_height: float,
) -> Point:
    """
    Convert a pointer position in device coordinates to source pixels.

    The horizontal and vertical scale factors are computed independently, so a
    raster displayed with a distorted aspect ratio still maps correctly.
    Callers guarantee that display_width and display_height are positive.
    """
    scale_x = backing_width / display_width
    scale_y = backing_height / display_height
    return Point(
        x=(device_x - origin_x) * scale_x,
        y=(device_y - origin_y) * scale_y,
    )
