"""Configuration for batch runs."""

import os

from dataclasses import dataclass
from pathlib import Path

from conv.threaded import DEFAULT_WORKERS
from ppm.codec import PPMCodec

WORKERS_ENV = "EDGE_DETECTOR_WORKERS"
OUTPUT_DIR_ENV = "EDGE_DETECTOR_OUTPUT_DIR"


@dataclass(frozen=True)
class BatchConfig:
    """Settings shared by every image task of a batch.

    Fields:
        num_workers: Threads used to filter a single image.
        output_prefix: Leading part of every output file name.
        output_dir: Directory the output files are written to.
        extension: Trailing part of every output file name.
    """

    num_workers: int = DEFAULT_WORKERS
    output_prefix: str = "laplacian"
    output_dir: Path = Path(".")
    extension: str = PPMCodec.EXTENSION

    def __post_init__(self) -> None:
        if self.num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {self.num_workers}.")
        object.__setattr__(self, "output_dir", Path(self.output_dir))

    def output_path(self, index: int) -> Path:
        """Path of the output for the ``index``-th input, counting from 1."""
        return self.output_dir / f"{self.output_prefix}{index}{self.extension}"

    @classmethod
    def from_env(cls, environ=None) -> "BatchConfig":
        """Build a config from the defaults and environment overrides.

        Args:
            environ (Mapping[str, str], optional): Defaults to ``os.environ``.
        """
        environ = os.environ if environ is None else environ
        kwargs = {}
        if environ.get(WORKERS_ENV):
            try:
                kwargs["num_workers"] = int(environ[WORKERS_ENV])
            except ValueError as exc:
                raise ValueError(
                    f"{WORKERS_ENV} must be an integer, got {environ[WORKERS_ENV]!r}."
                ) from exc
        if environ.get(OUTPUT_DIR_ENV):
            kwargs["output_dir"] = Path(environ[OUTPUT_DIR_ENV])
        return cls(**kwargs)
