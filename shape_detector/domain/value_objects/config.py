"""Configuration value objects with validation."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from ...config import DETECTION_DEFAULTS


class ShapeType(str, Enum):
    """Shape labels the classifier can emit."""
    CIRCLE = "circle"
    SQUARE = "square"
    RECTANGLE = "rectangle"
    TRIANGLE = "triangle"
    PENTAGON = "pentagon"


class PerimeterMethod(str, Enum):
    """Perimeter estimators for the circularity feature."""
    CONTOUR = "contour"  # Arc length of the outer boundary chain
    DISCOVERY_ORDER = "discovery_order"  # Step lengths in flood-fill order


class DetectionConfig(BaseModel):
    """Detection pipeline configuration with validation."""

    model_config = {"validate_assignment": True}

    # Binarization
    brightness_threshold: int = Field(
        default=DETECTION_DEFAULTS.brightness_threshold, ge=0, le=256
    )

    # Region extraction
    min_region_pixels: int = Field(default=DETECTION_DEFAULTS.min_region_pixels, ge=1)
    min_feature_pixels: int = Field(default=DETECTION_DEFAULTS.min_feature_pixels, ge=1)
    perimeter_method: PerimeterMethod = PerimeterMethod.CONTOUR

    # Classification
    circularity_threshold: float = Field(
        default=DETECTION_DEFAULTS.circularity_threshold, gt=0.0
    )
    square_aspect_tolerance: float = Field(
        default=DETECTION_DEFAULTS.square_aspect_tolerance, ge=0.0
    )
    square_extent_threshold: float = Field(
        default=DETECTION_DEFAULTS.square_extent_threshold, ge=0.0, le=1.0
    )
    rectangle_extent_threshold: float = Field(
        default=DETECTION_DEFAULTS.rectangle_extent_threshold, ge=0.0, le=1.0
    )

    # Confidence
    min_confidence: float = Field(default=DETECTION_DEFAULTS.min_confidence, ge=0.0, le=1.0)
    confidence_floor: float = Field(default=DETECTION_DEFAULTS.confidence_floor, ge=0.0, le=1.0)
    confidence_ceiling: float = Field(
        default=DETECTION_DEFAULTS.confidence_ceiling, ge=0.0, le=1.0
    )

    @model_validator(mode='after')
    def check_confidence_bounds(self) -> DetectionConfig:
        """Floor must not exceed ceiling."""
        if self.confidence_floor > self.confidence_ceiling:
            raise ValueError(
                f"confidence_floor ({self.confidence_floor}) > "
                f"confidence_ceiling ({self.confidence_ceiling})"
            )
        return self


__all__ = [
    'ShapeType',
    'PerimeterMethod',
    'DetectionConfig',
]
