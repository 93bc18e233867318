"""Pillow-backed raster surfaces with polygon clipping."""

from .overlay import draw_overlay, render_overlay
from .surface import (
    RasterCodec,
    create_surface,
    decode_image,
    draw_image,
    encode_image,
    polygon_mask,
)

__all__ = [
    'RasterCodec',
    'create_surface',
    'decode_image',
    'draw_image',
    'draw_overlay',
    'encode_image',
    'polygon_mask',
    'render_overlay',
]
