"""Unit tests for feature extraction."""

import math

import numpy as np
import pytest

from shape_detector.domain.entities.shape import Region
from shape_detector.domain.services.feature_extraction import (
    compute_features, contour_geometry, discovery_order_perimeter
)
from shape_detector.domain.value_objects.config import PerimeterMethod
from shape_detector.domain.value_objects.geometry import BoundingBox, Point


def _block(x, y, width, height):
    """Row-major pixel list of a filled rectangle."""
    return Region.from_pixels([
        (x + dx, y + dy) for dy in range(height) for dx in range(width)
    ])


class TestPerimeter:
    """Tests for the perimeter estimators."""

    def test_contour_geometry_of_block(self):
        region = _block(0, 0, 4, 3)
        perimeter, enclosed_area = contour_geometry(region, BoundingBox(0, 0, 4, 3))
        assert perimeter == pytest.approx(10.0)
        assert enclosed_area == pytest.approx(6.0)

    def test_contour_geometry_with_offset(self):
        region = _block(50, 70, 100, 50)
        bbox = BoundingBox(50, 70, 100, 50)
        perimeter, enclosed_area = contour_geometry(region, bbox)
        assert perimeter == pytest.approx(296.0)
        assert enclosed_area == pytest.approx(99 * 49)

    def test_discovery_order_perimeter(self):
        region = _block(0, 0, 4, 3)
        expected = 9 + 2 * math.sqrt(10) + math.sqrt(13)
        assert discovery_order_perimeter(region) == pytest.approx(expected)

    def test_discovery_order_single_pixel(self):
        assert discovery_order_perimeter(Region.from_pixels([(3, 3)])) == 0.0


class TestComputeFeatures:
    """Tests for compute_features."""

    def test_block_features(self):
        features = compute_features(_block(10, 20, 4, 3))

        assert features.area == 12
        assert features.bounding_box == BoundingBox(10, 20, 4, 3)
        assert features.centroid == Point(11.5, 21.0)
        assert features.aspect_ratio == pytest.approx(4 / 3)
        assert features.extent == pytest.approx(1.0)
        assert features.perimeter == pytest.approx(10.0)
        assert features.circularity == pytest.approx(4 * math.pi * 6 / 100)

    def test_rectangle_circularity(self):
        features = compute_features(_block(0, 0, 100, 50))
        assert features.circularity == pytest.approx(0.696, abs=0.001)

    @pytest.mark.parametrize("side", [10, 12, 16, 20, 25, 26, 60])
    def test_square_circularity_independent_of_size(self, side):
        features = compute_features(_block(5, 5, side, side))
        assert features.area == side * side
        assert features.circularity == pytest.approx(math.pi / 4)

    def test_discovery_order_uses_pixel_area(self):
        region = _block(0, 0, 4, 3)
        features = compute_features(region, perimeter_method=PerimeterMethod.DISCOVERY_ORDER)
        perimeter = discovery_order_perimeter(region)
        assert features.circularity == pytest.approx(4 * math.pi * 12 / perimeter ** 2)

    def test_centroid_is_pixel_mean(self):
        # L-shape: the mean differs from the box centre
        pixels = [(x, 0) for x in range(10)] + [(0, y) for y in range(1, 10)]
        features = compute_features(Region.from_pixels(pixels))

        assert features.centroid.x == pytest.approx(45 / 19)
        assert features.centroid.y == pytest.approx(45 / 19)
        assert features.bounding_box.center == Point(5.0, 5.0)
        assert features.extent == pytest.approx(19 / 100)

    def test_small_region_has_no_features(self):
        pixels = [(x, 0) for x in range(9)]
        assert compute_features(Region.from_pixels(pixels)) is None
        assert compute_features(Region.from_pixels(pixels + [(9, 0)])) is not None

    def test_custom_min_pixels(self):
        assert compute_features(_block(0, 0, 5, 5), min_pixels=26) is None

    def test_discovery_order_method(self):
        region = _block(0, 0, 4, 3)
        features = compute_features(region, perimeter_method=PerimeterMethod.DISCOVERY_ORDER)
        assert features.perimeter == pytest.approx(discovery_order_perimeter(region))

    def test_feature_ranges(self):
        rng = np.random.default_rng(3)
        coords = {(int(x), int(y)) for x, y in rng.integers(0, 30, size=(200, 2))}
        features = compute_features(Region.from_pixels(sorted(coords)))

        assert 0 < features.extent <= 1
        assert features.aspect_ratio > 0
        assert features.circularity >= 0
