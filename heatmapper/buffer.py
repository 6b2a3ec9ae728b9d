"""Immutable RGB pixel buffer used as the exchange unit between pipeline stages."""

from __future__ import annotations

from typing import Tuple

import numpy as np
from PIL import Image


class PixelBuffer:
    """A rectangular grid of 8-bit RGB samples.

    Pixels are stored row-major as a ``(height, width, 3)`` ``uint8`` array.
    The array is copied on construction and flagged read-only, so a buffer
    handed to the next stage can never be changed behind its back.
    """

    __slots__ = ("_pixels",)

    def __init__(self, pixels: np.ndarray):
        if not isinstance(pixels, np.ndarray):
            raise TypeError("pixels must be a NumPy array")
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(f"pixels must have shape (H, W, 3), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"pixels must have dtype uint8, got {pixels.dtype}")
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError("width and height must be positive")

        data = np.array(pixels, dtype=np.uint8, copy=True, order="C")
        data.setflags(write=False)
        self._pixels = data

    @classmethod
    def from_array(cls, array) -> "PixelBuffer":
        """Build a buffer from any integer array-like holding values in [0, 255]."""
        arr = np.asarray(array)
        if arr.dtype == np.uint8:
            return cls(arr)
        if not np.issubdtype(arr.dtype, np.integer):
            raise ValueError(f"Expected integer samples, got dtype {arr.dtype}")
        if arr.size and (arr.min() < 0 or arr.max() > 255):
            raise ValueError("Sample values must lie in [0, 255]")
        return cls(arr.astype(np.uint8))

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        if image.mode != "RGB":
            image = image.convert("RGB")
        return cls(np.asarray(image, dtype=np.uint8))

    @classmethod
    def filled(cls, width: int, height: int, rgb: Tuple[int, int, int]) -> "PixelBuffer":
        """Create a buffer of a single solid colour."""
        return cls.from_array(np.full((height, width, 3), rgb, dtype=np.int64))

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the underlying samples."""
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """``(width, height)``, matching Pillow's convention."""
        return self.width, self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        r, g, b = self._pixels[y, x]
        return int(r), int(g), int(b)

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self._pixels))

    def same_size(self, other: "PixelBuffer") -> bool:
        return self.size == other.size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.size == other.size and np.array_equal(self._pixels, other._pixels)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"
