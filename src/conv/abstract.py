"""Abstract base classes for convolution operations."""

import numpy as np
from abc import ABC, abstractmethod

from conv.kernels import LAPLACIAN_KERNEL
from ppm.image import Image


class Conv2D(ABC):
    """Abstract base class for 2D convolution operations.

    Neighbours outside the image wrap around to the opposite edge, and each
    output channel is clamped to [0, 255].
    """

    kernel: np.ndarray

    def __init__(self, kernel=LAPLACIAN_KERNEL) -> None:
        """Initialize Conv2D class.

        Args:
            kernel (Sequence[Sequence[int]]): Square kernel with an odd side.
        """
        kernel = np.array(kernel, dtype=np.int32)
        if kernel.ndim != 2 or kernel.shape[0] != kernel.shape[1] or kernel.shape[0] % 2 == 0:
            raise ValueError(f"Kernel must be square with an odd side, got shape {kernel.shape}.")
        self.kernel = kernel

    @abstractmethod
    def run(self, image: Image) -> tuple[Image, float]:
        """Run convolution operation on the given image.

        Args:
            image (Image): Image to apply convolution on.

        Returns:
            tuple[Image, float]: Convolved image and elapsed seconds.
        """
        pass

    def pad(self, pixels: np.ndarray) -> np.ndarray:
        """Return a signed copy of ``pixels`` padded by wrapping around."""
        padding = self.kernel.shape[0] // 2
        return np.pad(
            pixels.astype(np.int32),
            ((padding, padding),
             (padding, padding),
             (0, 0)),
            mode="wrap",
        )

    def convolve_rows(self, padded: np.ndarray, output: np.ndarray, start: int, stop: int) -> None:
        """Compute output rows ``[start, stop)`` in place.

        Args:
            padded (np.ndarray): Input pixels as returned by ``pad``.
            output (np.ndarray): ``uint8`` output buffer of the image's shape.
            start (int): The first row of the block.
            stop (int): One past the last row of the block.
        """
        kernel_h, kernel_w = self.kernel.shape
        img_w = output.shape[1]
        acc = np.zeros((stop - start, img_w, 3), dtype=np.int32)
        for fy in range(kernel_h):
            for fx in range(kernel_w):
                weight = self.kernel[fy, fx]
                if weight:
                    acc += weight * padded[start + fy:stop + fy, fx:fx + img_w]
        output[start:stop] = np.clip(acc, 0, 255).astype(np.uint8)

    @staticmethod
    def to_image(output: np.ndarray) -> Image:
        """Freeze a filled output buffer into an image.

        Args:
            output (np.ndarray): ``uint8`` buffer of shape ``(height, width, 3)``.

        Returns:
            Image: Image backed by ``output``, now read-only.
        """
        output.flags.writeable = False
        height, width = output.shape[:2]
        return Image(width, height, output)
