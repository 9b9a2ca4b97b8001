"""Value objects - immutable data with validation."""

from .geometry import Point, BoundingBox
from .config import DetectionConfig, ShapeType, PerimeterMethod

__all__ = [
    'Point',
    'BoundingBox',
    'DetectionConfig',
    'ShapeType',
    'PerimeterMethod',
]
