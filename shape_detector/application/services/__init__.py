"""Application services - orchestrate use cases."""

from .shape_detection import ShapeDetectionService, detect_shapes
from .batch_detection import BatchDetector, BatchResult
from .evaluation import EvaluationManager, calculate_metrics
from .reference_suite import run_reference_suite

__all__ = [
    'ShapeDetectionService',
    'detect_shapes',
    'BatchDetector',
    'BatchResult',
    'EvaluationManager',
    'calculate_metrics',
    'run_reference_suite',
]
