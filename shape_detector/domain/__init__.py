"""Domain layer - detection entities, value objects and pure services."""

from .entities.image import PixelBuffer, ForegroundMask
from .entities.shape import (
    Region,
    ShapeFeatures,
    Classification,
    ClassifiedShape,
    DetectionResult,
)
from .value_objects.config import DetectionConfig, ShapeType, PerimeterMethod
from .value_objects.geometry import Point, BoundingBox

__all__ = [
    # Entities
    'PixelBuffer',
    'ForegroundMask',
    'Region',
    'ShapeFeatures',
    'Classification',
    'ClassifiedShape',
    'DetectionResult',
    # Value Objects
    'DetectionConfig',
    'ShapeType',
    'PerimeterMethod',
    'Point',
    'BoundingBox',
]
