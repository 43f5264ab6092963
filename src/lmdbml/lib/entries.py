"""Decoders for the two kinds of bitmap list entry."""

from pydantic import BaseModel, Field
from typing import Iterator, Union
import logging
import struct

from .compression import CHUNK_SIZE, WindowDecompressor
from .stream import ByteStream, OutputSink

logger = logging.getLogger(__name__)

RAW_ENTRY = 8
COMPRESSED_ENTRY = 9


class RawEntryHeader(BaseModel):
    """
    Header of an entry stored verbatim.

    u8  Type             8
    u32 Size             number of bitmap bytes that follow
    """

    type_tag: int = RAW_ENTRY
    size: int = Field(..., description="Number of literal bytes following the header")
    raw_data: dict

    @property
    def decoded_size(self) -> int:
        return self.size


class CompressedEntryHeader(BaseModel):
    """
    Header of a compressed entry.

    u8  Type             9
    u32 DecompressedSize size of the bitmap once decoded
    u32 CompressedSize   size of the token stream
    u8  Reserved         unused
    """

    type_tag: int = COMPRESSED_ENTRY
    decompressed_size: int = Field(..., description="Number of bytes the token stream decodes to")
    stored_compressed_size: int = Field(..., description="Size of the token stream in the file")
    reserved: int
    raw_data: dict

    @property
    def decoded_size(self) -> int:
        return self.decompressed_size


EntryHeader = Union[RawEntryHeader, CompressedEntryHeader]


class EntryInfo(BaseModel):
    """
    Describes one entry of a container once its header has been read.
    """

    index: int
    offset: int = Field(..., description="Absolute offset of the entry's type byte")
    type_tag: int
    header: EntryHeader
    data_offset: int = Field(..., description="Absolute offset of the first payload byte")
    decoded_size: int


class EntryDecoder:
    """
    Base class for entry decoders.

    A decoder is handed the stream positioned just after the entry's type byte.
    """

    type_tag: int

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        self.chunk_size = chunk_size

    def read_header(self, stream: ByteStream) -> EntryHeader:
        raise NotImplementedError

    def iter_chunks(self, stream: ByteStream, header: EntryHeader) -> Iterator[bytes]:
        raise NotImplementedError

    def decode(self, stream: ByteStream, sink: OutputSink) -> EntryHeader:
        """Reads the entry header and streams the entry's bytes to `sink`."""
        header = self.read_header(stream)
        for chunk in self.iter_chunks(stream, header):
            sink.append(chunk)
        return header


class RawEntryDecoder(EntryDecoder):
    """Copies a stored bitmap through unchanged."""

    type_tag = RAW_ENTRY

    def read_header(self, stream: ByteStream) -> RawEntryHeader:
        raw_bytes = stream.read(4)
        (size,) = struct.unpack("<L", raw_bytes)
        parsed = {"size": size}
        return RawEntryHeader(**parsed, raw_data={"raw": raw_bytes, "parsed": parsed})

    def iter_chunks(self, stream: ByteStream, header: RawEntryHeader) -> Iterator[bytes]:
        remaining = header.size
        while remaining > 0:
            chunk = stream.read(min(remaining, self.chunk_size))
            remaining -= len(chunk)
            yield chunk


class CompressedEntryDecoder(EntryDecoder):
    """
    Decodes a compressed bitmap through a WindowDecompressor.

    With `verify_compressed_size` the decompressor may not read more token
    bytes than the header's stored compressed size.
    """

    type_tag = COMPRESSED_ENTRY

    def __init__(self, chunk_size: int = CHUNK_SIZE, verify_compressed_size: bool = True):
        super().__init__(chunk_size=chunk_size)
        self.verify_compressed_size = verify_compressed_size

    def read_header(self, stream: ByteStream) -> CompressedEntryHeader:
        raw_bytes = stream.read(9)
        decompressed_size, stored_compressed_size, reserved = struct.unpack("<LLB", raw_bytes)
        parsed = {
            "decompressed_size": decompressed_size,
            "stored_compressed_size": stored_compressed_size,
            "reserved": reserved,
        }
        return CompressedEntryHeader(**parsed, raw_data={"raw": raw_bytes, "parsed": parsed})

    def iter_chunks(self, stream: ByteStream, header: CompressedEntryHeader) -> Iterator[bytes]:
        limit = header.stored_compressed_size if self.verify_compressed_size else None
        decompressor = WindowDecompressor(stream, compressed_size=limit)
        yield from decompressor.iter_chunks(header.decompressed_size, self.chunk_size)
        logger.debug(
            f"Decoded {header.decompressed_size} bytes from {decompressor.consumed} of "
            f"{header.stored_compressed_size} compressed bytes"
        )
