"""
Preview of the working polygon drawn over its page.

The outline is stroked in page pixels, so the preview lines up with the page
raster at any display scale. Each vertex gets a filled dot labelled with its
1-based position in the outline.
"""

from __future__ import annotations

from typing import Sequence

from PIL import Image, ImageDraw

from ..geometry.types import Point
from ..logging import get_logger
from .surface import Color, decode_image, encode_image, flatten

logger = get_logger(__name__)

OUTLINE_COLOR: Color = (255, 0, 0, 255)
LABEL_COLOR: Color = (255, 255, 255, 255)
OUTLINE_WIDTH = 3
VERTEX_RADIUS = 5


def draw_overlay(image: Image.Image, points: Sequence[Point]) -> Image.Image:
    """
    Draw the working polygon onto a copy of ``image``.

    The outline joins the points in order and is closed back to the first
    point once there are more than two. With no points the copy is returned
    unchanged.
    """
    canvas = image.convert("RGBA")
    if not points:
        return canvas

    draw = ImageDraw.Draw(canvas)
    outline = [p.as_tuple() for p in points]
    if len(outline) > 2:
        outline.append(outline[0])
    if len(outline) > 1:
        draw.line(outline, fill=OUTLINE_COLOR, width=OUTLINE_WIDTH, joint="curve")

    for number, point in enumerate(points, start=1):
        x, y = point.as_tuple()
        draw.ellipse(
            (x - VERTEX_RADIUS, y - VERTEX_RADIUS, x + VERTEX_RADIUS, y + VERTEX_RADIUS),
            fill=OUTLINE_COLOR,
        )
        label = str(number)
        left, top, right, bottom = draw.textbbox((0, 0), label)
        draw.text(
            (x - (left + right) / 2, y - (top + bottom) / 2),
            label,
            fill=LABEL_COLOR,
        )

    return canvas


def render_overlay(page_raster: bytes, points: Sequence[Point], fmt: str = "png") -> bytes:
    """
    Decode a page, draw the working polygon over it and encode the result.

    Raises:
        SourceUnavailableError: If ``page_raster`` cannot be decoded
    """
    page = decode_image(page_raster)
    preview = draw_overlay(page, points)
    logger.debug(f"Drew {len(points)} points over a {page.width}x{page.height} page")
    return encode_image(flatten(preview), fmt)
