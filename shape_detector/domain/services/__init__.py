"""Domain services - pure detection steps."""

from .binarization import binarize
from .region_extraction import extract_regions, flood_fill, VisitedMask
from .feature_extraction import compute_features
from .classification import classify

__all__ = [
    'binarize',
    'extract_regions',
    'flood_fill',
    'VisitedMask',
    'compute_features',
    'classify',
]
