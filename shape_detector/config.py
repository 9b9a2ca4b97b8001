"""Configuration and constants for the Shape Detector project."""

from dataclasses import dataclass


# Detection constants
@dataclass(frozen=True)
class DetectionDefaults:
    """Default thresholds for the detection pipeline."""
    # Binarization
    brightness_threshold: int = 240  # Any RGB channel below this is foreground

    # Region extraction
    min_region_pixels: int = 20  # Smaller flood fills are discarded
    min_feature_pixels: int = 10  # Smaller regions yield no features

    # Classification branches
    circularity_threshold: float = 0.85
    square_aspect_tolerance: float = 0.2
    square_extent_threshold: float = 0.7
    rectangle_extent_threshold: float = 0.6  # Also the triangle upper bound

    # Branch confidence weights
    square_weight: float = 0.85
    rectangle_weight: float = 0.8
    triangle_weight: float = 0.7
    pentagon_confidence: float = 0.6

    # Size penalty: min(1, log10(area / reference) / divisor + offset)
    size_penalty_reference_area: float = 100.0
    size_penalty_divisor: float = 2.0
    size_penalty_offset: float = 0.8

    # Confidence bounds
    min_confidence: float = 0.6
    confidence_floor: float = 0.1
    confidence_ceiling: float = 0.99


DETECTION_DEFAULTS = DetectionDefaults()


# Image loading
DEFAULT_MAX_DIMENSION = 800  # Larger side is scaled to this before detection

# File handling - formats Pillow can decode
SUPPORTED_IMAGE_EXTENSIONS: tuple[str, ...] = (
    '.png',
    '.jpg', '.jpeg', '.jpe',
    '.bmp', '.dib',
    '.gif',
    '.tiff', '.tif',
    '.webp',
    '.pbm', '.pgm', '.ppm', '.pnm',
)


# Overlay rendering (BGR)
OVERLAY_BOX_COLOR: tuple[int, int, int] = (0, 255, 0)
OVERLAY_CENTER_COLOR: tuple[int, int, int] = (0, 0, 255)
OVERLAY_LABEL_COLOR: tuple[int, int, int] = (0, 0, 0)


# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
