import asyncio
import dataclasses

import numpy as np
import pytest
from hypothesis import assume, given, settings, strategies as st
from PIL import Image

from pagecut.clipping.extractor import PolygonClipExtractor
from pagecut.errors import ContextUnavailableError, InsufficientPointsError, SourceUnavailableError
from pagecut.geometry.types import BoundingBox, Point
from tests.helpers.raster_factory import (
    make_black_square_page,
    make_page,
    open_png,
    pixels,
    png_bytes,
    rect_polygon,
)


def extract(source, polygon, page_index=0, insertion_index=0):
    return asyncio.run(PolygonClipExtractor().extract(source, polygon, page_index, insertion_index))


class TestExtraction:
    def test_black_square(self):
        """Clipping the black square yields a 20x20 fully black raster."""
        source = png_bytes(make_black_square_page())
        region = extract(source, rect_polygon(40, 40, 60, 60))

        assert region.bounding_box == BoundingBox(40, 40, 60, 60)
        assert (region.width, region.height) == (20, 20)

        img = open_png(region.extracted_raster)
        assert img.size == (20, 20)
        assert img.convert('RGBA').getcolors() == [(400, (0, 0, 0, 255))]

    def test_rectangle_is_exact_crop(self):
        """For an axis-aligned rectangle the mask changes nothing."""
        page = make_page((60, 40), [((0, 0, 30, 40), (200, 10, 10)), ((30, 0, 60, 20), (10, 200, 10))])
        arr = np.asarray(page)
        # Add per-pixel variation so a shifted crop would be noticed.
        arr = arr.copy()
        arr[:, :, 2] = np.arange(60, dtype=np.uint8)[None, :]
        page = Image.fromarray(arr)

        region = extract(png_bytes(page), rect_polygon(12, 5, 47, 33))

        crop = page.crop((12, 5, 47, 33))
        assert np.array_equal(pixels(open_png(region.extracted_raster)), pixels(crop))
        assert np.all(pixels(open_png(region.extracted_raster), 'RGBA')[:, :, 3] == 255)

    def test_outside_polygon_is_transparent(self):
        """Pixels outside a triangle are left fully transparent."""
        source = png_bytes(make_page((50, 50), [((0, 0, 50, 50), (0, 0, 0))]))
        region = extract(source, [Point(10, 10), Point(40, 10), Point(10, 40)])

        img = open_png(region.extracted_raster).convert('RGBA')
        assert img.size == (30, 30)
        assert img.getpixel((2, 2)) == (0, 0, 0, 255)
        assert img.getpixel((28, 28))[3] == 0

    def test_polygon_kept_in_page_coordinates(self):
        """The stored polygon is the untranslated input, in input order."""
        polygon = [Point(60, 40), Point(40, 40), Point(50, 60)]
        region = extract(png_bytes(make_black_square_page()), polygon, page_index=3, insertion_index=7)

        assert region.polygon == tuple(polygon)
        assert region.page_index == 3
        assert region.insertion_index == 7

    def test_region_is_frozen(self):
        region = extract(png_bytes(make_black_square_page()), rect_polygon(40, 40, 60, 60))
        with pytest.raises(dataclasses.FrozenInstanceError):
            region.page_index = 2

    def test_input_list_edits_do_not_leak(self):
        """Editing the caller's list after extraction leaves the region untouched."""
        polygon = rect_polygon(40, 40, 60, 60)
        region = extract(png_bytes(make_black_square_page()), polygon)
        polygon[0] = Point(0, 0)
        polygon.append(Point(99, 99))

        assert region.polygon == tuple(rect_polygon(40, 40, 60, 60))

    def test_polygon_past_page_edge(self):
        """The part of a polygon hanging off the page comes out transparent."""
        region = extract(png_bytes(make_black_square_page()), rect_polygon(-10, -10, 50, 50))

        img = open_png(region.extracted_raster).convert('RGBA')
        assert img.size == (60, 60)
        assert img.getpixel((5, 5))[3] == 0
        assert img.getpixel((5, 30))[3] == 0
        assert img.getpixel((15, 15)) == (255, 255, 255, 255)
        assert img.getpixel((55, 55)) == (0, 0, 0, 255)

        arr = pixels(img, 'RGBA')
        assert np.count_nonzero(arr[:, :, 3] == 0) == 60 * 60 - 50 * 50

    def test_source_raster_is_kept(self):
        source = png_bytes(make_black_square_page())
        region = extract(source, rect_polygon(40, 40, 60, 60))
        assert region.source_raster == source


class TestExtractionFailures:
    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_too_few_points(self, count):
        """Fewer than three points is rejected before touching the raster."""
        polygon = [Point(i * 10, i * 5) for i in range(count)]
        with pytest.raises(InsufficientPointsError) as excinfo:
            extract(png_bytes(make_black_square_page()), polygon)
        assert excinfo.value.count == count

    def test_undecodable_source(self):
        with pytest.raises(SourceUnavailableError):
            extract(b"definitely not a png", rect_polygon(0, 0, 10, 10))

    def test_collinear_polygon_has_no_surface(self):
        """A polygon with zero-width bounds cannot be drawn."""
        polygon = [Point(10, 0), Point(10, 20), Point(10, 40)]
        with pytest.raises(ContextUnavailableError):
            extract(png_bytes(make_black_square_page()), polygon)


class TestExtractionProperties:
    """Bounding box and raster size follow the polygon exactly."""

    @settings(max_examples=25, deadline=None)
    @given(st.lists(st.tuples(st.integers(0, 99), st.integers(0, 99)), min_size=3, max_size=8))
    def test_bbox_and_raster_size(self, raw_points):
        """For any polygon with >= 3 points, the box is the exact min/max and the raster matches it."""
        xs = [x for x, _ in raw_points]
        ys = [y for _, y in raw_points]
        assume(max(xs) > min(xs) and max(ys) > min(ys))

        polygon = [Point(x, y) for x, y in raw_points]
        region = extract(png_bytes(make_black_square_page()), polygon)

        assert region.bounding_box == BoundingBox(min(xs), min(ys), max(xs), max(ys))
        img = open_png(region.extracted_raster)
        assert img.size == (max(xs) - min(xs), max(ys) - min(ys))
        assert img.size == (region.width, region.height)
