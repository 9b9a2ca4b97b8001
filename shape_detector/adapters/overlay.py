"""Overlay rendering - draw detections over the source image with OpenCV."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import cv2
import numpy as np
import numpy.typing as npt

from ..config import OVERLAY_BOX_COLOR, OVERLAY_CENTER_COLOR, OVERLAY_LABEL_COLOR
from ..domain.entities.image import PixelBuffer
from ..domain.entities.shape import ClassifiedShape
from ..exceptions import ImageIOError

logger = logging.getLogger(__name__)

ImageArray = npt.NDArray[np.uint8]  # HxWx3, BGR


def render_overlay(pixels: PixelBuffer, shapes: Iterable[ClassifiedShape]) -> ImageArray:
    """Draw bounding boxes, centroids and labels.

    Args:
        pixels: Source image
        shapes: Detections to draw

    Returns:
        BGR image array with the overlay applied
    """
    pixels.validate()
    rgb = pixels.to_array()[:, :, :3]
    canvas = cv2.cvtColor(np.ascontiguousarray(rgb), cv2.COLOR_RGB2BGR)

    for shape in shapes:
        bbox = shape.bounding_box
        cv2.rectangle(
            canvas,
            (bbox.x, bbox.y),
            (bbox.max_x, bbox.max_y),
            OVERLAY_BOX_COLOR,
            2
        )
        center = (int(round(shape.centroid.x)), int(round(shape.centroid.y)))
        cv2.circle(canvas, center, 3, OVERLAY_CENTER_COLOR, -1)
        cv2.putText(
            canvas,
            shape.label,
            (bbox.x + 5, max(10, bbox.y - 5)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            OVERLAY_LABEL_COLOR,
            1,
            cv2.LINE_AA
        )

    return canvas


def save_overlay(
    path: Path | str,
    pixels: PixelBuffer,
    shapes: Iterable[ClassifiedShape]
) -> Path:
    """Render the overlay and write it to ``path``.

    Raises:
        ImageIOError: If OpenCV cannot encode the output file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    canvas = render_overlay(pixels, shapes)
    try:
        written = cv2.imwrite(str(path), canvas)
    except cv2.error as e:
        raise ImageIOError(f"Could not write overlay image: {e}", image_path=str(path)) from e
    if not written:
        raise ImageIOError("Could not write overlay image", image_path=str(path))
    logger.debug(f"Saved overlay to {path}")
    return path
