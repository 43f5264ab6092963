"""Sliding-window decompression for compressed bitmap list entries."""

from io import BytesIO
from typing import Iterator, Optional
import struct

from .exceptions import CompressedSizeExceededError, InvalidBackReferenceError
from .stream import ByteStream
from .window import SlidingWindow, WINDOW_SIZE

CHUNK_SIZE = 4096


class WindowDecompressor:
    """
    Decodes the LZ77-style token stream of a compressed entry.

    The stream is a sequence of 16-bit control words, each gating the next 16
    decisions, least significant bit first:

    - bit 0: literal, one byte copied to the output and the window
    - bit 1: back-reference, a 16-bit token

    Token layout (little-endian word):

        15..12  distance bits 11..8
        11..8   length - 1
         7..0   distance bits 7..0

    Copied bytes are written back into the window as they are emitted, so a
    reference whose distance is shorter than its length repeats the bytes it
    has just produced.

    Bytes are pulled from the stream only as far as needed for the requested
    output; a back-reference that crosses the end of a request is decoded in
    full and its surplus is returned first by the next call.
    """

    def __init__(self, stream: ByteStream, compressed_size: Optional[int] = None):
        self.stream = stream
        self.window = SlidingWindow()
        self.cursor = 0
        self.control_word = 0
        self.control_remaining = 0
        self.compressed_size = compressed_size
        self.consumed = 0
        self._pending = bytearray()

    def produce(self, amount: int) -> bytes:
        """Returns exactly `amount` decoded bytes."""
        output = self._pending
        while len(output) < amount:
            self._step(output)
        self._pending = output[amount:]
        return bytes(output[:amount])

    def iter_chunks(self, total: int, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        """Yields `total` decoded bytes in chunks of at most `chunk_size`."""
        remaining = total
        while remaining > 0:
            chunk = self.produce(min(remaining, chunk_size))
            remaining -= len(chunk)
            yield chunk

    def _step(self, output: bytearray):
        if self.control_remaining == 0:
            self.control_word = struct.unpack("<H", self._read(2))[0]
            self.control_remaining = 16

        if self.control_word & 0x1:
            token = struct.unpack("<H", self._read(2))[0]
            distance = ((token & 0xF000) >> 4) | (token & 0x00FF)
            length = ((token & 0x0F00) >> 8) + 1
            self._copy(distance, length, output)
        else:
            value = self._read(1)[0]
            output.append(value)
            self.window.write_at(self.cursor, value)
            self.window.mark_written(1)
            self.cursor = (self.cursor + 1) % WINDOW_SIZE

        self.control_word >>= 1
        self.control_remaining -= 1

    def _copy(self, distance: int, length: int, output: bytearray):
        # distance 0 wraps to the oldest byte in a full window
        if (distance or WINDOW_SIZE) > self.window.filled:
            raise InvalidBackReferenceError(distance, self.window.filled)

        base = (self.cursor + (WINDOW_SIZE - distance)) % WINDOW_SIZE
        for i in range(length):
            value = self.window.read_at(base + i)
            output.append(value)
            self.window.write_at(self.cursor + i, value)
            # each copied byte extends what later reads may reach
            self.window.mark_written(1)
        self.cursor = (self.cursor + length) % WINDOW_SIZE

    def _read(self, amount: int) -> bytes:
        if self.compressed_size is not None and self.consumed + amount > self.compressed_size:
            raise CompressedSizeExceededError(self.compressed_size)
        data = self.stream.read(amount)
        self.consumed += amount
        return data


def decompress(data: bytes, size: int, compressed_size: Optional[int] = None) -> bytes:
    """
    Decompresses a whole token stream held in memory.

    Args:
        data: The compressed token stream, starting at a control word.
        size: Number of decoded bytes to produce.
        compressed_size: Optional bound on token-stream bytes consumed.

    Returns:
        Exactly `size` decoded bytes.
    """
    if size == 0:
        return b""
    decompressor = WindowDecompressor(ByteStream(BytesIO(data)), compressed_size=compressed_size)
    return decompressor.produce(size)
