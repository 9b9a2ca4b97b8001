"""Adapters - image file I/O around the detection core."""

from .image_loader import load_pixel_buffer, pixel_buffer_from_image, list_image_files
from .overlay import render_overlay, save_overlay

__all__ = [
    'load_pixel_buffer',
    'pixel_buffer_from_image',
    'list_image_files',
    'render_overlay',
    'save_overlay',
]
