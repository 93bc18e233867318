"""
Raster surface operations used by extraction and reconstruction.

Surfaces are RGBA Pillow images. Drawing is restricted by an 8-bit polygon
mask and composited with straight alpha, so a fully opaque source drawn inside
a mask reproduces its pixels exactly.

Decoding and encoding block on Pillow, so RasterCodec runs them in an executor
and exposes them as coroutines.
"""

from __future__ import annotations

import asyncio
import io
from concurrent.futures import Executor
from functools import partial
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw

from ..errors import ContextUnavailableError, SourceUnavailableError
from ..geometry.types import Point
from ..logging import get_logger

logger = get_logger(__name__)

Color = Union[str, Tuple[int, int, int], Tuple[int, int, int, int]]
TRANSPARENT: Color = (0, 0, 0, 0)

# Pillow's encoder names differ from the file extensions we expose.
_PIL_FORMATS = {"png": "PNG", "jpeg": "JPEG", "jpg": "JPEG", "webp": "WEBP"}


def decode_image(data: bytes) -> Image.Image:
    """
    Decode encoded image bytes into an RGBA surface.

    Raises:
        SourceUnavailableError: If the bytes are empty or not a readable image
    """
    if not data:
        raise SourceUnavailableError("Cannot decode an empty raster buffer")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise SourceUnavailableError(f"Failed to decode raster: {exc}") from exc


def encode_image(image: Image.Image, fmt: str = "png", background: Color = "white") -> bytes:
    """
    Encode a surface to compressed bytes.

    Formats without an alpha channel (JPEG) are flattened onto ``background``.
    """
    pil_format = _PIL_FORMATS.get(fmt.lower())
    if pil_format is None:
        raise ValueError(f"Unsupported image format: {fmt}")

    if pil_format == "JPEG":
        image = flatten(image, background)

    buffer = io.BytesIO()
    image.save(buffer, format=pil_format)
    return buffer.getvalue()


def flatten(image: Image.Image, background: Color = "white") -> Image.Image:
    """Composite an RGBA surface onto an opaque background and drop alpha."""
    base = Image.new("RGBA", image.size, background)
    base.alpha_composite(image.convert("RGBA"))
    return base.convert("RGB")


def create_surface(width: int, height: int, fill: Color = TRANSPARENT) -> Image.Image:
    """
    Allocate an RGBA surface filled with ``fill``.

    Raises:
        ContextUnavailableError: If the size is not positive or allocation fails
    """
    if width < 1 or height < 1:
        raise ContextUnavailableError(f"Cannot allocate a {width}x{height} surface")
    try:
        return Image.new("RGBA", (width, height), fill)
    except (ValueError, MemoryError) as exc:
        raise ContextUnavailableError(f"Failed to allocate {width}x{height} surface: {exc}") from exc


def polygon_mask(
    size: Tuple[int, int],
    polygon: Sequence[Point],
) -> Image.Image:
    """
    Rasterize a closed polygon into an 8-bit mask of ``size``.

    The path joins the points in order and closes back to the first one.
    Non-convex and self-intersecting outlines are allowed. Pixels on the
    outline count as inside, so an axis-aligned rectangle covers every pixel
    of its own bounding raster.

    Args:
        size: (width, height) of the mask
        polygon: Outline points in the mask's own pixel grid
    """
    mask = Image.new("L", size, 0)
    outline = [p.as_tuple() for p in polygon]
    if len(outline) >= 2:
        ImageDraw.Draw(mask).polygon(outline, fill=255, outline=255)
    return mask


def draw_image(
    surface: Image.Image,
    image: Image.Image,
    src_box: Tuple[int, int, int, int],
    dst_box: Tuple[int, int, int, int],
    mask: Optional[Image.Image] = None,
) -> None:
    """
    Draw part of ``image`` onto ``surface`` in place.

    Args:
        surface: RGBA target
        image: Source image
        src_box: (left, top, right, bottom) rectangle of ``image`` to copy;
            parts outside the image read as transparent
        dst_box: (left, top, width, height) placement on ``surface``; the
            source rectangle is scaled when its size differs
        mask: Optional surface-sized "L" mask restricting where pixels land
    """
    dst_left, dst_top, dst_width, dst_height = dst_box
    if dst_width < 1 or dst_height < 1:
        return

    piece = image.convert("RGBA").crop(src_box)
    if piece.size != (dst_width, dst_height):
        logger.debug(f"Scaling {piece.size} to {(dst_width, dst_height)} before drawing")
        piece = piece.resize((dst_width, dst_height), Image.Resampling.LANCZOS)

    layer = Image.new("RGBA", surface.size, TRANSPARENT)
    layer.paste(piece, (dst_left, dst_top))

    if mask is not None:
        if mask.size != surface.size:
            raise ValueError(f"Mask size {mask.size} does not match surface {surface.size}")
        alpha = np.minimum(
            np.asarray(layer.getchannel("A"), dtype=np.uint8),
            np.asarray(mask.convert("L"), dtype=np.uint8),
        )
        layer.putalpha(Image.fromarray(alpha))

    surface.alpha_composite(layer)


class RasterCodec:
    """
    Asynchronous decode/encode of raster bytes.

    Each call runs in ``executor`` (the loop's default when None) and yields
    to the event loop while pending, so several decodes may overlap.
    """

    def __init__(self, executor: Optional[Executor] = None) -> None:
        self._executor = executor

    async def decode(self, data: bytes) -> Image.Image:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(decode_image, data))

    async def encode(self, image: Image.Image, fmt: str = "png", background: Color = "white") -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor, partial(encode_image, image, fmt, background)
        )
