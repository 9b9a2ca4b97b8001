"""Binarization service - separate shapes from a near-white background."""

from __future__ import annotations

import numpy as np

from ...config import DETECTION_DEFAULTS
from ...exceptions import PixelBufferError
from ..entities.image import ForegroundMask, PixelBuffer


def binarize(
    pixels: PixelBuffer | None,
    threshold: int = DETECTION_DEFAULTS.brightness_threshold
) -> ForegroundMask:
    """Mark every pixel darker than near-white as foreground.

    A pixel is foreground when any of its red, green or blue channels is
    below ``threshold``. Alpha is ignored.

    Args:
        pixels: Decoded RGB or RGBA buffer
        threshold: Brightness threshold per channel

    Returns:
        Foreground mask with the buffer's dimensions

    Raises:
        PixelBufferError: If the buffer is absent or malformed
    """
    if pixels is None:
        raise PixelBufferError("No pixel buffer supplied", field="data")
    pixels.validate()

    rgb = pixels.to_array()[:, :, :3]
    foreground = np.any(rgb < threshold, axis=2)

    return ForegroundMask(
        width=pixels.width,
        height=pixels.height,
        data=foreground.reshape(-1)
    )
