"""Image loading adapter - decode files into pixel buffers with Pillow."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..config import DEFAULT_MAX_DIMENSION, SUPPORTED_IMAGE_EXTENSIONS
from ..domain.entities.image import PixelBuffer
from ..exceptions import ImageIOError

logger = logging.getLogger(__name__)


def fit_to_dimension(image: Image.Image, max_dimension: int | None) -> Image.Image:
    """Scale so the larger side equals ``max_dimension``.

    Small images are scaled up as well as large ones scaled down. ``None``
    keeps the native size.
    """
    if max_dimension is None:
        return image

    ratio = min(max_dimension / image.width, max_dimension / image.height)
    size = (max(1, int(image.width * ratio)), max(1, int(image.height * ratio)))
    if size == image.size:
        return image

    logger.debug(f"Resizing {image.width}x{image.height} -> {size[0]}x{size[1]}")
    return image.resize(size, Image.Resampling.BILINEAR)


def pixel_buffer_from_image(
    image: Image.Image,
    max_dimension: int | None = None
) -> PixelBuffer:
    """Convert a Pillow image to an RGBA pixel buffer."""
    rgba = fit_to_dimension(image.convert("RGBA"), max_dimension)
    return PixelBuffer.from_array(np.asarray(rgba, dtype=np.uint8))


def load_pixel_buffer(
    path: Path | str,
    max_dimension: int | None = DEFAULT_MAX_DIMENSION
) -> PixelBuffer:
    """Decode an image file into an RGBA pixel buffer.

    Args:
        path: Image file
        max_dimension: Target size of the larger side (None for native size)

    Returns:
        Pixel buffer ready for detection

    Raises:
        ImageIOError: If the file is missing or cannot be decoded
    """
    path = Path(path)
    if not path.is_file():
        raise ImageIOError("Image file not found", image_path=str(path))
    if path.suffix.lower() not in SUPPORTED_IMAGE_EXTENSIONS:
        raise ImageIOError(
            f"Unsupported image format: {path.suffix}. "
            f"Supported formats: {', '.join(SUPPORTED_IMAGE_EXTENSIONS)}",
            image_path=str(path)
        )

    try:
        with Image.open(path) as image:
            image.load()
            return pixel_buffer_from_image(image, max_dimension)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageIOError(f"Could not decode image: {e}", image_path=str(path)) from e


def list_image_files(folder: Path | str) -> list[Path]:
    """Return supported image files in a folder, sorted by name."""
    folder = Path(folder)
    files = [
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS
    ]
    return sorted(files)
