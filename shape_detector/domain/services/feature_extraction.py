"""Feature extraction service - geometric measurements of a region."""

from __future__ import annotations

import math

import cv2
import numpy as np

from ...config import DETECTION_DEFAULTS
from ..entities.shape import Region, ShapeFeatures
from ..value_objects.config import PerimeterMethod
from ..value_objects.geometry import BoundingBox, Point


def discovery_order_perimeter(region: Region) -> float:
    """Sum of step lengths between consecutive pixels, wrapping last to first.

    This is a traversal-order heuristic, not a geometric perimeter: flood
    fill discovery order jumps between rows, so the value grows roughly
    with area rather than with boundary length.
    """
    if len(region) < 2:
        return 0.0
    coords = region.coords.astype(np.float64)
    steps = np.roll(coords, -1, axis=0) - coords
    return float(np.hypot(steps[:, 0], steps[:, 1]).sum())


def contour_geometry(region: Region, bbox: BoundingBox) -> tuple[float, float]:
    """Arc length and enclosed area of the region's outer 8-connected boundary.

    The region is rasterised into a padded crop of its bounding box so the
    boundary never touches the crop edge. Both values are measured on the
    same polygon through the boundary pixel centres, so an axis-aligned
    square of any size scores a circularity of pi / 4.

    Returns:
        (perimeter, enclosed_area)
    """
    crop = np.zeros((bbox.height + 2, bbox.width + 2), dtype=np.uint8)
    crop[region.ys - bbox.y + 1, region.xs - bbox.x + 1] = 255

    contours, _ = cv2.findContours(crop, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)
    perimeter = sum(cv2.arcLength(contour, True) for contour in contours)
    enclosed_area = sum(cv2.contourArea(contour) for contour in contours)
    return float(perimeter), float(enclosed_area)


def compute_features(
    region: Region,
    perimeter_method: PerimeterMethod = PerimeterMethod.CONTOUR,
    min_pixels: int = DETECTION_DEFAULTS.min_feature_pixels
) -> ShapeFeatures | None:
    """Measure a region.

    Args:
        region: Pixels from one flood fill
        perimeter_method: Perimeter estimator feeding circularity
        min_pixels: Regions smaller than this yield no features

    Returns:
        Features, or None for degenerate regions
    """
    area = len(region)
    if area < min_pixels:
        return None

    xs = region.xs
    ys = region.ys
    bbox = BoundingBox.from_extents(
        int(xs.min()), int(ys.min()), int(xs.max()), int(ys.max())
    )
    # Mean of the filled pixels, not the box centre
    centroid = Point(float(xs.mean()), float(ys.mean()))

    if perimeter_method == PerimeterMethod.DISCOVERY_ORDER:
        perimeter = discovery_order_perimeter(region)
        shape_area = float(area)
    else:
        # Circularity compares the contour with its own enclosed area
        perimeter, shape_area = contour_geometry(region, bbox)

    aspect_ratio = bbox.width / max(1, bbox.height)
    extent = area / (bbox.width * bbox.height)
    circularity = (4 * math.pi * shape_area) / (perimeter * perimeter) if perimeter > 0 else 0.0

    return ShapeFeatures(
        bounding_box=bbox,
        centroid=centroid,
        area=area,
        perimeter=perimeter,
        aspect_ratio=aspect_ratio,
        extent=extent,
        circularity=circularity,
    )
