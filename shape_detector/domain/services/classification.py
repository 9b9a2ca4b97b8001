"""Classification service - map region features to a shape label."""

from __future__ import annotations

import math

from ...config import DETECTION_DEFAULTS
from ..entities.shape import Classification, ShapeFeatures
from ..value_objects.config import DetectionConfig, ShapeType


def classify_features(
    features: ShapeFeatures,
    config: DetectionConfig | None = None
) -> Classification:
    """Pick a shape label with the raw (unpenalised) confidence.

    Branches are tried in order and the first match wins:

        1. circularity > 0.85                    -> circle
        2. |aspect - 1| < 0.2 and extent > 0.7   -> square
        3. extent > 0.6                          -> rectangle
        4. extent < 0.6                          -> triangle
        5. otherwise (extent exactly 0.6)        -> pentagon
    """
    config = config or DetectionConfig()
    extent = features.extent

    if features.circularity > config.circularity_threshold:
        return Classification(
            ShapeType.CIRCLE,
            min(config.confidence_ceiling, features.circularity)
        )
    if (abs(features.aspect_ratio - 1) < config.square_aspect_tolerance
            and extent > config.square_extent_threshold):
        return Classification(ShapeType.SQUARE, DETECTION_DEFAULTS.square_weight * extent)
    if extent > config.rectangle_extent_threshold:
        return Classification(ShapeType.RECTANGLE, DETECTION_DEFAULTS.rectangle_weight * extent)
    if extent < config.rectangle_extent_threshold:
        return Classification(
            ShapeType.TRIANGLE,
            DETECTION_DEFAULTS.triangle_weight * (1 - extent)
        )
    return Classification(ShapeType.PENTAGON, DETECTION_DEFAULTS.pentagon_confidence)


def size_penalty(area: int) -> float:
    """Confidence multiplier that shrinks for small regions (capped at 1)."""
    return min(
        1.0,
        math.log10(area / DETECTION_DEFAULTS.size_penalty_reference_area)
        / DETECTION_DEFAULTS.size_penalty_divisor
        + DETECTION_DEFAULTS.size_penalty_offset
    )


def classify(
    features: ShapeFeatures,
    config: DetectionConfig | None = None
) -> Classification | None:
    """Classify features, penalise small regions and drop weak results.

    Args:
        features: Region features
        config: Detection configuration

    Returns:
        Classification with confidence in [min_confidence, ceiling], or None
        when the shape should not be emitted
    """
    config = config or DetectionConfig()
    result = classify_features(features, config)

    confidence = result.confidence * size_penalty(features.area)
    confidence = max(config.confidence_floor, min(config.confidence_ceiling, confidence))

    if confidence < config.min_confidence:
        return None
    return Classification(result.shape_type, confidence)
