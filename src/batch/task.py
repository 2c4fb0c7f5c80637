"""Per-image pipeline: decode, filter, encode."""

import enum
import logging

from pathlib import Path
from typing import Optional

from batch.timing import TimingAccumulator
from conv.abstract import Conv2D
from conv.exceptions import EngineError
from ppm.codec import PPMCodec
from ppm.exceptions import CodecError

logger = logging.getLogger(__name__)


class TaskState(enum.Enum):
    PENDING = "pending"
    DECODING = "decoding"
    FILTERING = "filtering"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"


class ImageTask:
    """Processes one input file into one output file.

    A task runs once. Any failure moves it to ``FAILED`` and keeps the error;
    nothing is retried.
    """

    def __init__(self, index: int, input_path, output_path) -> None:
        self.index = index
        self.input_path = Path(input_path)
        self.output_path = Path(output_path)
        self.state = TaskState.PENDING
        self.elapsed: Optional[float] = None
        self.error: Optional[BaseException] = None

    def __repr__(self) -> str:
        return f"ImageTask({self.index}, {str(self.input_path)!r}, state={self.state.value})"

    @property
    def ok(self) -> bool:
        """True once the output file has been written."""
        return self.state is TaskState.DONE

    def run(self, engine: Conv2D, accumulator: TimingAccumulator) -> None:
        """Run the pipeline, adding the filter time to ``accumulator``.

        Args:
            engine (Conv2D): Convolution used for the filter stage.
            accumulator (TimingAccumulator): Shared total of filter times.
        """
        try:
            self._transition(TaskState.DECODING)
            image = PPMCodec.decode(self.input_path)

            self._transition(TaskState.FILTERING)
            result, self.elapsed = engine.run(image)
            accumulator.add(self.elapsed)

            self._transition(TaskState.ENCODING)
            PPMCodec.encode(result, self.output_path)
        except (CodecError, EngineError, OSError) as exc:
            self.fail(exc)
            logger.error("Failed to process %s: %s", self.input_path, exc)
        except Exception as exc:
            self.fail(exc)
            logger.exception("Unexpected error while processing %s", self.input_path)
        else:
            self._transition(TaskState.DONE)
            logger.info(
                "Wrote %s (filtered in %.4f s)", self.output_path, self.elapsed
            )

    def fail(self, error: BaseException) -> None:
        """Mark the task as failed.

        Args:
            error (BaseException): Error that stopped the pipeline.
        """
        self.error = error
        self._transition(TaskState.FAILED)

    def _transition(self, state: TaskState) -> None:
        logger.debug("%s: %s -> %s", self.input_path, self.state.value, state.value)
        self.state = state
