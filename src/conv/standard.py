"""Module for convolution operations."""

import logging
import time

import numpy as np

from conv.abstract import Conv2D
from conv.exceptions import AllocationError
from ppm.image import Image

logger = logging.getLogger(__name__)


class Standard(Conv2D):
    """Single-threaded 2D convolution."""

    kernel: np.ndarray

    def run(self, image: Image) -> tuple[Image, float]:
        """Run convolution operation on the given image.

        Args:
            image (Image): Image to apply convolution on.

        Returns:
            tuple[Image, float]: Convolved image and elapsed seconds.
        """
        start_time = time.perf_counter()

        try:
            padded = self.pad(image.pixels)
            output = np.empty_like(image.pixels)
        except MemoryError as exc:
            raise AllocationError(
                f"Unable to allocate buffers for {image.width}x{image.height} image."
            ) from exc

        self.convolve_rows(padded, output, 0, image.height)

        elapsed = time.perf_counter() - start_time
        logger.debug("Standard convolution took %.6f seconds.", elapsed)

        return self.to_image(output), elapsed
