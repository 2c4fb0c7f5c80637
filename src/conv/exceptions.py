"""Exceptions raised by the convolution engine."""


class EngineError(Exception):
    """Base class for convolution engine errors."""


class AllocationError(EngineError):
    """Raised when the output buffer cannot be allocated."""


class WorkerFailure(EngineError):
    """Raised when a worker cannot be started or does not finish cleanly."""
