"""Shape entities - regions, their features and classified output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

import numpy as np
import numpy.typing as npt

from ..value_objects.config import ShapeType
from ..value_objects.geometry import BoundingBox, Point


@dataclass(frozen=True, slots=True, eq=False)
class Region:
    """Pixels collected by one flood fill.

    ``coords`` is an (N, 2) array of ``(x, y)`` rows in discovery order,
    not spatial order.
    """
    coords: npt.NDArray[np.int64]

    def __len__(self) -> int:
        return len(self.coords)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        for x, y in self.coords:
            yield int(x), int(y)

    @property
    def xs(self) -> npt.NDArray[np.int64]:
        return self.coords[:, 0]

    @property
    def ys(self) -> npt.NDArray[np.int64]:
        return self.coords[:, 1]

    @classmethod
    def from_pixels(cls, pixels: list[tuple[int, int]]) -> Region:
        """Create from a list of (x, y) tuples."""
        coords = np.array(pixels, dtype=np.int64).reshape(-1, 2)
        return cls(coords=coords)


@dataclass(frozen=True, slots=True)
class ShapeFeatures:
    """Geometric measurements of one region."""
    bounding_box: BoundingBox
    centroid: Point
    area: int
    perimeter: float
    aspect_ratio: float
    extent: float
    circularity: float


@dataclass(frozen=True, slots=True)
class Classification:
    """Shape label and confidence chosen for a feature vector."""
    shape_type: ShapeType
    confidence: float


@dataclass(frozen=True, slots=True)
class ClassifiedShape:
    """A detected shape - the only entity the pipeline emits."""
    shape_type: ShapeType
    confidence: float
    bounding_box: BoundingBox
    centroid: Point
    area: int

    @property
    def label(self) -> str:
        """Overlay label, e.g. ``circle (92%)``."""
        return f"{self.shape_type.value} ({round(self.confidence * 100)}%)"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.shape_type.value,
            "confidence": self.confidence,
            "boundingBox": self.bounding_box.to_dict(),
            "center": self.centroid.to_dict(),
            "area": self.area,
        }


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """Shapes found in one image, in raster discovery order."""
    shapes: tuple[ClassifiedShape, ...]
    image_width: int
    image_height: int
    processing_time_ms: float = 0.0

    def __len__(self) -> int:
        return len(self.shapes)

    def count_by_type(self) -> dict[ShapeType, int]:
        """Count detected shapes per type."""
        counts: dict[ShapeType, int] = {}
        for shape in self.shapes:
            counts[shape.shape_type] = counts.get(shape.shape_type, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "shapes": [shape.to_dict() for shape in self.shapes],
            "imageStats": {
                "width": self.image_width,
                "height": self.image_height,
                "processingTimeMs": self.processing_time_ms,
            },
        }
