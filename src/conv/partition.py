"""Static row partitioning for parallel convolution."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WorkPartition:
    """Half-open range of rows ``[start, start + size)``."""

    start: int
    size: int

    @property
    def stop(self) -> int:
        """One past the last row."""
        return self.start + self.size

    def __bool__(self) -> bool:
        return self.size > 0


def partition_rows(height: int, num_workers: int) -> list[WorkPartition]:
    """Split ``height`` rows among ``num_workers`` workers.

    Each of the first ``num_workers - 1`` workers gets ``ceil(height / num_workers)``
    rows, capped by the rows still left, and the last worker takes the rest.
    When there are fewer rows than workers, the last worker takes every row
    and the others get empty ranges.

    Args:
        height (int): Number of rows in the image.
        num_workers (int): Number of workers, at least 1.

    Returns:
        list[WorkPartition]: Exactly ``num_workers`` contiguous partitions
        covering ``[0, height)``.
    """
    if num_workers < 1:
        raise ValueError(f"num_workers must be at least 1, got {num_workers}")
    if height < 0:
        raise ValueError(f"height must not be negative, got {height}")

    share = -(-height // num_workers) if height >= num_workers else 0
    partitions = []
    start = 0
    for _ in range(num_workers - 1):
        size = min(share, height - start)
        partitions.append(WorkPartition(start, size))
        start += size
    partitions.append(WorkPartition(start, height - start))
    return partitions
