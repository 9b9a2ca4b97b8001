"""Application layer - use cases and orchestration."""

from .services.shape_detection import ShapeDetectionService, detect_shapes
from .services.batch_detection import BatchDetector

__all__ = ['ShapeDetectionService', 'detect_shapes', 'BatchDetector']
