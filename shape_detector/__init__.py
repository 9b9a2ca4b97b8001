"""Shape Detector - connected-component shape detection and classification."""

__version__ = "1.0.0"

from .application import BatchDetector, ShapeDetectionService, detect_shapes
from .domain import (
    BoundingBox,
    ClassifiedShape,
    DetectionConfig,
    DetectionResult,
    PerimeterMethod,
    PixelBuffer,
    Point,
    ShapeType,
)
from .exceptions import (
    ShapeDetectorError,
    ConfigurationError,
    PixelBufferError,
    ImageIOError,
    EvaluationError,
)
from .utils.env import setup_logging

__all__ = [
    '__version__',
    'ShapeDetectionService',
    'BatchDetector',
    'detect_shapes',
    'DetectionConfig',
    'DetectionResult',
    'ClassifiedShape',
    'PixelBuffer',
    'ShapeType',
    'PerimeterMethod',
    'Point',
    'BoundingBox',
    'setup_logging',
    # Exceptions
    'ShapeDetectorError',
    'ConfigurationError',
    'PixelBufferError',
    'ImageIOError',
    'EvaluationError',
]
