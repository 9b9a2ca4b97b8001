"""Image entities - raw pixel buffers and the masks derived from them."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from ...exceptions import PixelBufferError

SUPPORTED_CHANNELS = (3, 4)


@dataclass(frozen=True, slots=True, eq=False)
class PixelBuffer:
    """Decoded image handed to the detector.

    ``data`` is a flat, row-major ``uint8`` array of ``width * height *
    channels`` values (RGB or RGBA). The detector only reads it.
    """
    width: int
    height: int
    data: npt.NDArray[np.uint8]
    channels: int = 4

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def validate(self) -> None:
        """Check that the buffer matches its declared dimensions.

        Raises:
            PixelBufferError: If the buffer is malformed
        """
        if self.width <= 0 or self.height <= 0:
            raise PixelBufferError(
                f"Invalid dimensions {self.width}x{self.height}",
                field="size"
            )
        if self.channels not in SUPPORTED_CHANNELS:
            raise PixelBufferError(
                f"Unsupported channel count {self.channels} (expected 3 or 4)",
                field="channels"
            )
        if self.data is None:
            raise PixelBufferError("Pixel data is missing", field="data")

        expected = self.width * self.height * self.channels
        actual = int(np.asarray(self.data).size)
        if actual != expected:
            raise PixelBufferError(
                f"Pixel data has {actual} values, expected {expected} "
                f"for {self.width}x{self.height}x{self.channels}",
                field="data"
            )

    def to_array(self) -> npt.NDArray[np.uint8]:
        """Return the pixels as an (height, width, channels) view."""
        return np.asarray(self.data).reshape(self.height, self.width, self.channels)

    @classmethod
    def from_array(cls, array: object) -> PixelBuffer:
        """Create from an (H, W, 3|4) or (H, W) array.

        Grayscale input is expanded to RGB. Non-``uint8`` input is clipped
        to 0..255.
        """
        arr = np.asarray(array)
        if arr.ndim == 2:
            arr = np.repeat(arr[:, :, np.newaxis], 3, axis=2)
        if arr.ndim != 3:
            raise PixelBufferError(
                f"Expected a 2D or 3D array, got shape {arr.shape}",
                field="data"
            )
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)

        height, width, channels = arr.shape
        buffer = cls(
            width=width,
            height=height,
            data=np.ascontiguousarray(arr).reshape(-1),
            channels=channels
        )
        buffer.validate()
        return buffer

    @classmethod
    def from_bytes(
        cls,
        data: bytes | bytearray | memoryview,
        width: int,
        height: int,
        channels: int = 4
    ) -> PixelBuffer:
        """Create from raw interleaved bytes (e.g. canvas ImageData)."""
        return cls(
            width=width,
            height=height,
            data=np.frombuffer(data, dtype=np.uint8),
            channels=channels
        )


@dataclass(frozen=True, slots=True, eq=False)
class ForegroundMask:
    """Boolean foreground grid, stored flat and indexed ``y * width + x``."""
    width: int
    height: int
    data: npt.NDArray[np.bool_]

    @property
    def count(self) -> int:
        """Number of foreground pixels."""
        return int(np.count_nonzero(self.data))

    def is_foreground(self, x: int, y: int) -> bool:
        return bool(self.data[y * self.width + x])

    def to_grid(self) -> npt.NDArray[np.bool_]:
        """Return an (height, width) view."""
        return self.data.reshape(self.height, self.width)

    @classmethod
    def from_grid(cls, grid: object) -> ForegroundMask:
        """Create from an (H, W) array of truthy values."""
        arr = np.asarray(grid, dtype=bool)
        height, width = arr.shape
        return cls(width=width, height=height, data=np.ascontiguousarray(arr).reshape(-1))
