"""Exceptions raised by the P6 codec."""


class CodecError(Exception):
    """Base class for codec errors."""


class FormatError(CodecError):
    """Raised when the header is not a supported P6 header."""


class TruncatedDataError(CodecError):
    """Raised when the file holds fewer pixel bytes than the header declares."""


class ImageIOError(CodecError, OSError):
    """Raised when the file cannot be opened, read or written."""
