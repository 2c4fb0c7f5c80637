"""Module for convolution operations."""

import logging
import time

import numpy as np

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from conv.abstract import Conv2D
from conv.exceptions import AllocationError, WorkerFailure
from conv.kernels import LAPLACIAN_KERNEL
from conv.partition import partition_rows
from ppm.image import Image

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4


class Threaded(Conv2D):
    """2D convolution with the image rows split across a pool of threads."""

    kernel: np.ndarray
    num_workers: int

    def __init__(self, kernel=LAPLACIAN_KERNEL, num_workers: int = DEFAULT_WORKERS) -> None:
        """Initialize Threaded class.

        Args:
            kernel (Sequence[Sequence[int]]): Square kernel with an odd side.
            num_workers (int): Number of threads the rows are split across.
        """
        super().__init__(kernel)
        if num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}.")
        self.num_workers = num_workers

    def run(self, image: Image, num_workers: Optional[int] = None) -> tuple[Image, float]:
        """Run convolution operation on the given image.

        Each worker writes only its own rows of a freshly allocated output
        buffer, so no locking is needed.

        Args:
            image (Image): Image to apply convolution on.
            num_workers (int, optional): Overrides the instance worker count.

        Returns:
            tuple[Image, float]: Convolved image and the elapsed seconds of
            the whole operation, including setup and join.

        Raises:
            AllocationError: If the buffers cannot be allocated.
            WorkerFailure: If a worker cannot be started or fails.
            ValueError: If ``num_workers`` is less than 1.
        """
        if num_workers is None:
            num_workers = self.num_workers
        elif num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}.")
        start_time = time.perf_counter()

        try:
            padded = self.pad(image.pixels)
            output = np.empty_like(image.pixels)
        except MemoryError as exc:
            raise AllocationError(
                f"Unable to allocate buffers for {image.width}x{image.height} image."
            ) from exc

        blocks = [p for p in partition_rows(image.height, num_workers) if p]

        try:
            with ThreadPoolExecutor(max_workers=num_workers, thread_name_prefix="conv") as executor:
                futures = [
                    executor.submit(self.convolve_rows, padded, output, block.start, block.stop)
                    for block in blocks
                ]
                for future in as_completed(futures):
                    future.result()
        except Exception as exc:
            del output
            raise WorkerFailure(f"Convolution worker failed: {exc}") from exc

        elapsed = time.perf_counter() - start_time
        logger.debug(
            "Threaded convolution of %dx%d image with %d workers took %.6f seconds.",
            image.width, image.height, num_workers, elapsed,
        )

        return self.to_image(output), elapsed
