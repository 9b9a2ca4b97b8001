"""Geometry value objects."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Point:
    """2D point, fractional for centroids."""
    x: float
    y: float

    def distance_to(self, other: Point) -> float:
        """Calculate Euclidean distance to another point."""
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned pixel bounding box.

    ``x``/``y`` is the top-left pixel; ``width``/``height`` count pixels, so a
    box spanning columns 10..19 has width 10.
    """
    x: int
    y: int
    width: int
    height: int

    @property
    def max_x(self) -> int:
        """Rightmost pixel column (inclusive)."""
        return self.x + self.width - 1

    @property
    def max_y(self) -> int:
        """Bottom pixel row (inclusive)."""
        return self.y + self.height - 1

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def diagonal(self) -> float:
        return math.sqrt(self.width ** 2 + self.height ** 2)

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    @classmethod
    def from_extents(cls, min_x: int, min_y: int, max_x: int, max_y: int) -> BoundingBox:
        """Create from inclusive pixel extents."""
        return cls(min_x, min_y, max_x - min_x + 1, max_y - min_y + 1)

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
