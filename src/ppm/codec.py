"""Reader and writer for binary P6 raster files."""

import logging
import os
import uuid

from pathlib import Path

from ppm.exceptions import FormatError, ImageIOError, TruncatedDataError
from ppm.image import Image

logger = logging.getLogger(__name__)

MAGIC = b"P6"
MAX_CHANNEL_VALUE = 255
WHITESPACE = b" \t\n\r\v\f"


class PPMCodec:
    """Class for decoding and encoding P6 images."""

    EXTENSION = ".ppm"

    @classmethod
    def decode(cls, path) -> Image:
        """Read a P6 file into an image.

        Args:
            path (str | Path): Path to the file.

        Returns:
            Image: The decoded image.

        Raises:
            FormatError: If the header is malformed or the max value is not 255.
            TruncatedDataError: If the file ends before the last pixel.
            ImageIOError: If the file cannot be read.
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ImageIOError(exc.errno, f"Unable to read {path}: {exc.strerror}") from exc

        try:
            width, height, max_value, offset = cls.parse_header(data)
        except (FormatError, TruncatedDataError) as exc:
            raise type(exc)(f"{path}: {exc}") from exc

        if max_value != MAX_CHANNEL_VALUE:
            raise FormatError(
                f"{path}: unsupported max color value {max_value}, "
                f"only {MAX_CHANNEL_VALUE} is supported"
            )

        expected = width * height * 3
        available = len(data) - offset
        if available < expected:
            raise TruncatedDataError(
                f"{path}: expected {expected} bytes of pixel data, found {available}"
            )
        if available > expected:
            logger.debug("Ignoring %d trailing bytes in %s", available - expected, path)

        return Image.from_bytes(width, height, data[offset:offset + expected])

    @classmethod
    def encode(cls, image: Image, path) -> None:
        """Write an image as a P6 file.

        The data goes to a temporary file in the destination directory which
        is renamed over ``path`` once fully written.

        Args:
            image (Image): Image to write.
            path (str | Path): Destination path.

        Raises:
            ImageIOError: If the file cannot be created or fully written.
        """
        path = Path(path)
        header = f"P6\n{image.width} {image.height}\n{MAX_CHANNEL_VALUE}\n".encode("ascii")
        payload = header + image.to_bytes()

        tmp_name = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            fp = open(tmp_name, "xb")
        except OSError as exc:
            raise ImageIOError(exc.errno, f"Unable to create {path}: {exc.strerror}") from exc

        try:
            with fp:
                written = fp.write(payload)
            if written != len(payload):
                raise ImageIOError(
                    f"Short write to {path}: {written} of {len(payload)} bytes"
                )
            os.replace(tmp_name, path)
        except ImageIOError:
            _discard(tmp_name)
            raise
        except OSError as exc:
            _discard(tmp_name)
            raise ImageIOError(exc.errno, f"Unable to write {path}: {exc.strerror}") from exc

    @classmethod
    def parse_header(cls, data: bytes) -> tuple:
        """Parse the header of a P6 file.

        Comments start with ``#`` where a token is expected and run to the
        end of the line. The pixels start after the line holding the max
        value.

        Args:
            data (bytes): Contents of the file, or at least its header.

        Returns:
            tuple: ``(width, height, max_value, offset)`` where ``offset`` is
            the index of the first pixel byte.

        Raises:
            FormatError: If the header is malformed.
            TruncatedDataError: If the data ends right after the header fields.
        """
        if data[:2] != MAGIC:
            raise FormatError("invalid format, expected P6 magic number")
        pos = 2
        if pos >= len(data) or data[pos] not in WHITESPACE:
            raise FormatError("missing whitespace after magic number")

        values = []
        while len(values) < 3:
            while pos < len(data) and data[pos] in WHITESPACE:
                pos += 1
            if pos >= len(data):
                raise FormatError("unexpected end of file in header")
            if data[pos] == ord("#"):
                newline = data.find(b"\n", pos)
                if newline == -1:
                    raise FormatError("unexpected end of file in header comment")
                pos = newline + 1
                continue

            start = pos
            while pos < len(data) and data[pos] not in WHITESPACE:
                pos += 1
            token = data[start:pos]
            if not token.isdigit():
                raise FormatError(f"unparsable header field {token!r}")
            values.append(int(token))

        if pos >= len(data):
            raise TruncatedDataError("no pixel data after header")
        pos = cls._end_of_header(data, pos)

        width, height, max_value = values
        if width < 1 or height < 1:
            raise FormatError(f"invalid image size {width}x{height}")
        return width, height, max_value, pos

    @staticmethod
    def _end_of_header(data: bytes, pos: int) -> int:
        """Return the offset of the first pixel byte.

        ``pos`` points at the whitespace byte after the max value. The rest of
        that line, blanks and an optional comment, belongs to the header. When
        no newline ends the line, a single whitespace byte does.
        """
        if data[pos] == ord("\n"):
            return pos + 1
        scan = pos
        while scan < len(data) and data[scan] in b" \t\r":
            scan += 1
        if scan < len(data) and data[scan] == ord("#"):
            newline = data.find(b"\n", scan)
            if newline != -1:
                return newline + 1
        elif scan < len(data) and data[scan] == ord("\n"):
            return scan + 1
        return pos + 1


def _discard(name: Path) -> None:
    try:
        os.unlink(name)
    except FileNotFoundError:
        pass
