"""Unit tests for region extraction."""

import numpy as np

from shape_detector.domain.entities.image import ForegroundMask
from shape_detector.domain.services.region_extraction import (
    NEIGHBOR_OFFSETS, VisitedMask, extract_regions, flood_fill
)


def _mask(rows):
    """Build a mask from strings where '#' is foreground."""
    return ForegroundMask.from_grid([[c == "#" for c in row] for row in rows])


class TestFloodFill:
    """Tests for flood_fill."""

    def test_neighbor_order(self):
        assert NEIGHBOR_OFFSETS == (
            (-1, -1), (0, -1), (1, -1),
            (-1, 0), (1, 0),
            (-1, 1), (0, 1), (1, 1),
        )

    def test_breadth_first_discovery_order(self):
        mask = _mask(["###", "###", "###"])
        visited = VisitedMask(3, 3)
        region = flood_fill(mask, visited, 0, 0)

        assert list(region) == [
            (0, 0), (1, 0), (0, 1), (1, 1),
            (2, 0), (2, 1), (0, 2), (1, 2), (2, 2),
        ]

    def test_marks_region_visited(self):
        mask = _mask(["##.", "...", "..#"])
        visited = VisitedMask(3, 3)
        region = flood_fill(mask, visited, 0, 0)

        assert len(region) == 2
        assert visited.count == 2
        assert visited.is_visited(1, 0)
        assert not visited.is_visited(2, 2)

    def test_diagonal_connectivity(self):
        mask = _mask(["#..", ".#.", "..#"])
        region = flood_fill(mask, VisitedMask(3, 3), 0, 0)
        assert len(region) == 3

    def test_single_pixel(self):
        region = flood_fill(_mask(["#"]), VisitedMask(1, 1), 0, 0)
        assert list(region) == [(0, 0)]

    def test_respects_image_border(self):
        mask = _mask(["#.#", "#.#"])
        region = flood_fill(mask, VisitedMask(3, 2), 2, 0)
        assert sorted(region) == [(2, 0), (2, 1)]


class TestExtractRegions:
    """Tests for extract_regions."""

    def test_empty_mask(self):
        mask = ForegroundMask.from_grid(np.zeros((10, 10), dtype=bool))
        assert extract_regions(mask) == []

    def test_raster_discovery_order(self):
        grid = np.zeros((20, 20), dtype=bool)
        grid[12:17, 1:6] = True   # lower left, seeded second
        grid[2:7, 10:15] = True   # upper right, seeded first
        regions = extract_regions(ForegroundMask.from_grid(grid), min_region_pixels=1)

        assert len(regions) == 2
        assert regions[0].xs.min() == 10
        assert regions[1].xs.min() == 1

    def test_min_region_size_is_inclusive(self):
        grid = np.zeros((10, 30), dtype=bool)
        grid[0, 0:20] = True    # exactly 20 pixels, kept
        grid[5, 0:19] = True    # 19 pixels, discarded
        regions = extract_regions(ForegroundMask.from_grid(grid))

        assert len(regions) == 1
        assert len(regions[0]) == 20

    def test_discarded_pixels_stay_visited(self):
        grid = np.zeros((5, 5), dtype=bool)
        grid[0, 0:3] = True
        visited = VisitedMask(5, 5)
        regions = extract_regions(ForegroundMask.from_grid(grid), visited=visited)

        assert regions == []
        assert visited.count == 3

    def test_regions_are_disjoint_and_cover_foreground(self):
        rng = np.random.default_rng(7)
        grid = rng.random((40, 40)) < 0.4
        mask = ForegroundMask.from_grid(grid)
        regions = extract_regions(mask, min_region_pixels=1)

        seen = set()
        for region in regions:
            pixels = set(region)
            assert len(pixels) == len(region)
            assert not seen & pixels
            seen |= pixels
        assert len(seen) == mask.count
        assert all(grid[y, x] for x, y in seen)

    def test_full_foreground(self):
        mask = ForegroundMask.from_grid(np.ones((8, 6), dtype=bool))
        regions = extract_regions(mask)
        assert len(regions) == 1
        assert len(regions[0]) == 48

    def test_mask_data_stays_an_array(self):
        mask = _mask(["##...", "##...", "...##"])
        visited = VisitedMask(mask.width, mask.height)
        regions = extract_regions(mask, min_region_pixels=1, visited=visited)

        assert isinstance(mask.data, np.ndarray)
        assert mask.data.dtype == bool
        assert [len(r) for r in regions] == [4, 2]
        # Same fill reached through the public single-seed entry point
        assert list(flood_fill(mask, VisitedMask(5, 3), 0, 0)) == list(regions[0])
