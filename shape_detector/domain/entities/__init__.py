"""Domain entities."""

from .image import PixelBuffer, ForegroundMask
from .shape import Region, ShapeFeatures, Classification, ClassifiedShape, DetectionResult

__all__ = [
    'PixelBuffer',
    'ForegroundMask',
    'Region',
    'ShapeFeatures',
    'Classification',
    'ClassifiedShape',
    'DetectionResult',
]
