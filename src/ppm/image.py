"""In-memory raster image."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Image:
    """Immutable RGB image with 8 bits per channel.

    Pixels are stored row-major, top row first, as a ``(height, width, 3)``
    ``uint8`` array.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}."
            )
        pixels = np.asarray(self.pixels)
        if pixels.shape != (self.height, self.width, 3):
            raise ValueError(
                f"Pixel array of shape {pixels.shape} does not match "
                f"{self.width}x{self.height} RGB image."
            )
        if pixels.dtype != np.uint8:
            raise ValueError(f"Pixel array must be uint8, got {pixels.dtype}.")
        if pixels.flags.writeable:
            pixels = pixels.copy()
            pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    @property
    def pixel_count(self) -> int:
        """Number of pixels, ``width * height``."""
        return self.width * self.height

    @property
    def size(self) -> tuple:
        """``(width, height)`` pair."""
        return self.width, self.height

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "Image":
        """Build an image from raw row-major RGB bytes.

        Args:
            width (int): Image width in pixels.
            height (int): Image height in pixels.
            data (bytes): Exactly ``width * height * 3`` bytes.
        """
        expected = width * height * 3
        if len(data) != expected:
            raise ValueError(f"Expected {expected} bytes of pixel data, got {len(data)}.")
        pixels = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 3)
        return cls(width, height, pixels)

    def to_bytes(self) -> bytes:
        """Return the pixels as raw row-major RGB bytes.

        Returns:
            bytes: ``width * height * 3`` bytes.
        """
        return self.pixels.tobytes()

