"""Byte stream and output sink adapters used by the container parser."""

from pathlib import Path
from typing import BinaryIO, Optional, Union
import logging
import struct

from .exceptions import EndOfStreamError, IOFailureError

logger = logging.getLogger(__name__)


class ByteStream:
    """
    Sequential, seekable reader over a binary file object.

    Reads are exact: a short read raises EndOfStreamError instead of returning
    fewer bytes. OSErrors raised by the file object surface as IOFailureError.
    """

    def __init__(self, fileobj: BinaryIO):
        self.fileobj = fileobj

    def read(self, amount: int) -> bytes:
        """Reads exactly `amount` bytes."""
        chunks = []
        remaining = amount
        while remaining > 0:
            try:
                chunk = self.fileobj.read(remaining)
            except OSError as e:
                raise IOFailureError(e.errno, f"read failed: {e}") from e
            if not chunk:
                raise EndOfStreamError(amount, amount - remaining)
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def read_uint8(self) -> int:
        return self.read(1)[0]

    def read_uint16(self) -> int:
        return struct.unpack("<H", self.read(2))[0]

    def read_uint32(self) -> int:
        return struct.unpack("<L", self.read(4))[0]

    def seek(self, offset: int):
        """Seeks to an absolute offset."""
        try:
            self.fileobj.seek(offset)
        except (OSError, ValueError) as e:
            raise IOFailureError(getattr(e, "errno", None), f"seek to {offset} failed: {e}") from e

    def tell(self) -> int:
        try:
            return self.fileobj.tell()
        except OSError as e:
            raise IOFailureError(e.errno, f"tell failed: {e}") from e

    def write(self, data: bytes):
        """Writes all of `data`."""
        view = memoryview(data)
        while view:
            try:
                written = self.fileobj.write(view)
            except OSError as e:
                raise IOFailureError(e.errno, f"write failed: {e}") from e
            if not written:
                raise EndOfStreamError(len(data), len(data) - len(view))
            view = view[written:]


class OutputSink:
    """
    Receives the decoded bytes of one entry.

    `append` is called once per decoded chunk, then either `finalize` when the
    entry is complete or `abort` when decoding failed part way.
    """

    def append(self, data: bytes):
        raise NotImplementedError

    def finalize(self):
        pass

    def abort(self):
        pass


class MemorySink(OutputSink):
    """Collects an entry's bytes in memory."""

    def __init__(self):
        self.buffer = bytearray()
        self.finalized = False

    def append(self, data: bytes):
        self.buffer.extend(data)

    def finalize(self):
        self.finalized = True

    def getvalue(self) -> bytes:
        return bytes(self.buffer)


class FileSink(OutputSink):
    """
    Writes an entry's bytes to a file on disk.

    The file is created (or truncated) on construction, so an empty entry still
    produces an empty file. An aborted entry removes its partial file.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._file: Optional[BinaryIO] = None
        self.bytes_written = 0
        try:
            self._file = open(self.path, "wb")
        except OSError as e:
            raise IOFailureError(e.errno, f"cannot create {self.path}: {e}") from e
        self._stream = ByteStream(self._file)

    def append(self, data: bytes):
        self._stream.write(data)
        self.bytes_written += len(data)

    def finalize(self):
        self._close()
        logger.debug(f"Wrote {self.bytes_written} bytes to {self.path}")

    def abort(self):
        self._close()
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial output {self.path}: {e}")

    def _close(self):
        if self._file is not None:
            try:
                self._file.close()
            except OSError as e:
                raise IOFailureError(e.errno, f"cannot close {self.path}: {e}") from e
            finally:
                self._file = None
