"""Geometry primitives and device-to-source coordinate mapping."""

from .types import Point, BoundingBox
from .mapping import DisplayRect, map_to_source

__all__ = [
    'Point',
    'BoundingBox',
    'DisplayRect',
    'map_to_source',
]
