"""Region extraction service - 8-connected flood fill over a foreground mask."""

from __future__ import annotations

import logging
from collections import deque
from typing import Sequence

import numpy as np

from ...config import DETECTION_DEFAULTS
from ..entities.image import ForegroundMask
from ..entities.shape import Region

logger = logging.getLogger(__name__)

# (dx, dy) in the order neighbours are enqueued
NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)


class VisitedMask:
    """Flat visited flags for one extraction run.

    Flags only ever go from unvisited to visited; a mask is never reset or
    shared between runs.
    """

    __slots__ = ("width", "height", "flags")

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.flags = bytearray(width * height)

    def is_visited(self, x: int, y: int) -> bool:
        return bool(self.flags[y * self.width + x])

    @property
    def count(self) -> int:
        """Number of visited pixels."""
        return self.flags.count(1)


def _fill(
    foreground: Sequence[bool],
    width: int,
    height: int,
    flags: bytearray,
    start_x: int,
    start_y: int
) -> Region:
    start = start_y * width + start_x
    flags[start] = 1
    queue: deque[int] = deque([start])
    pixels: list[tuple[int, int]] = []

    while queue:
        index = queue.popleft()
        y, x = divmod(index, width)
        pixels.append((x, y))

        for dx, dy in NEIGHBOR_OFFSETS:
            nx = x + dx
            ny = y + dy
            if nx < 0 or nx >= width or ny < 0 or ny >= height:
                continue
            neighbor = ny * width + nx
            if foreground[neighbor] and not flags[neighbor]:
                flags[neighbor] = 1
                queue.append(neighbor)

    return Region.from_pixels(pixels)


def flood_fill(
    mask: ForegroundMask,
    visited: VisitedMask,
    start_x: int,
    start_y: int
) -> Region:
    """Collect the 8-connected component containing a start pixel.

    Breadth-first over an explicit queue. A pixel is marked visited when it
    is enqueued and appended to the region when it is dequeued, so each
    pixel enters at most one region.

    Args:
        mask: Foreground mask
        visited: Visited flags for the current run (mutated)
        start_x: Seed column (must be foreground and unvisited)
        start_y: Seed row

    Returns:
        Region in discovery order
    """
    return _fill(mask.data, mask.width, mask.height, visited.flags, start_x, start_y)


def extract_regions(
    mask: ForegroundMask,
    min_region_pixels: int = DETECTION_DEFAULTS.min_region_pixels,
    visited: VisitedMask | None = None
) -> list[Region]:
    """Group foreground pixels into connected regions.

    Scans row-major (y outer, x inner) and starts a flood fill at every
    foreground pixel not yet visited. Regions with fewer than
    ``min_region_pixels`` pixels are dropped; their pixels stay visited.

    Args:
        mask: Foreground mask
        min_region_pixels: Size filter for returned regions
        visited: Optional visited mask to fill (a fresh one is allocated
            otherwise)

    Returns:
        Regions in raster discovery order

    Complexity: O(width * height)
    """
    if visited is None:
        visited = VisitedMask(mask.width, mask.height)

    # Plain list for per-pixel lookups in the fill loop
    foreground = mask.data.tolist()

    regions: list[Region] = []
    discarded = 0

    # Flat indices of foreground pixels are already in row-major order
    for index in np.flatnonzero(mask.data):
        index = int(index)
        if visited.flags[index]:
            continue
        y, x = divmod(index, mask.width)
        region = _fill(foreground, mask.width, mask.height, visited.flags, x, y)
        if len(region) < min_region_pixels:
            discarded += 1
            continue
        regions.append(region)

    logger.debug(
        f"Extracted {len(regions)} regions "
        f"({discarded} below {min_region_pixels} pixels discarded)"
    )
    return regions
