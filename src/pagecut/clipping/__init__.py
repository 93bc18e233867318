"""Polygon clip extraction and page reconstruction."""

from .regions import ClippedRegion, RegionCollection
from .extractor import PolygonClipExtractor
from .reconstruct import PageReconstructor

__all__ = [
    'ClippedRegion',
    'RegionCollection',
    'PolygonClipExtractor',
    'PageReconstructor',
]
