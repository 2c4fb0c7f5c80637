"""Runs one image task per input file, concurrently."""

import logging
import threading

from dataclasses import dataclass
from typing import Optional

from batch.config import BatchConfig
from batch.task import ImageTask
from batch.timing import TimingAccumulator
from conv.abstract import Conv2D
from conv.exceptions import WorkerFailure
from conv.threaded import Threaded

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Outcome of a batch run.

    Fields:
        tasks: One task per input, in input order.
        total_elapsed: Sum of the filter times of every image that was filtered.
    """

    tasks: list
    total_elapsed: float

    @property
    def succeeded(self) -> list:
        """Tasks that wrote their output, in input order."""
        return [task for task in self.tasks if task.ok]

    @property
    def failed(self) -> list:
        """Tasks that stopped with an error, in input order."""
        return [task for task in self.tasks if not task.ok]

    @property
    def ok(self) -> bool:
        """True if no task failed."""
        return not self.failed

    def summary_line(self) -> str:
        """Return the total filter time, to four decimals.

        Returns:
            str: ``Total elapsed time: <seconds> s``.
        """
        return f"Total elapsed time: {self.total_elapsed:.4f} s"


class BatchOrchestrator:
    """Filters a batch of images, one thread per image."""

    def __init__(self, config: Optional[BatchConfig] = None, engine: Optional[Conv2D] = None) -> None:
        """Initialize BatchOrchestrator class.

        Args:
            config (BatchConfig, optional): Batch settings, defaults if omitted.
            engine (Conv2D, optional): Convolution to run, a ``Threaded``
                Laplacian with ``config.num_workers`` workers if omitted.
        """
        self.config = config or BatchConfig()
        self.engine = engine or Threaded(num_workers=self.config.num_workers)

    def create_tasks(self, paths) -> list:
        """Create one task per path, numbered from 1 in the given order."""
        return [
            ImageTask(index, path, self.config.output_path(index))
            for index, path in enumerate(paths, start=1)
        ]

    def run(self, paths) -> BatchReport:
        """Process every path and wait for all of them to finish.

        Args:
            paths (Iterable[str | Path]): Input files.

        Returns:
            BatchReport: Per-image outcome and the accumulated filter time.
        """
        tasks = self.create_tasks(paths)
        if not tasks:
            raise ValueError("At least one input file is required.")

        accumulator = TimingAccumulator()
        threads = []
        for task in tasks:
            thread = threading.Thread(
                target=task.run,
                args=(self.engine, accumulator),
                name=f"image-{task.index}",
            )
            try:
                thread.start()
            except RuntimeError as exc:
                task.fail(WorkerFailure(f"Unable to start task for {task.input_path}: {exc}"))
                logger.error("Unable to start task for %s: %s", task.input_path, exc)
                continue
            threads.append(thread)

        for thread in threads:
            thread.join()

        report = BatchReport(tasks, accumulator.total)
        logger.debug(
            "Batch finished: %d succeeded, %d failed",
            len(report.succeeded), len(report.failed),
        )
        return report
