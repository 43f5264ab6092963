"""Parses the header, offset table and entries of a bitmap list container."""

from pydantic import BaseModel, Field
from typing import Callable, Dict, Iterator, List, Optional, Tuple
import logging
import struct

from .compression import CHUNK_SIZE
from .entries import (
    COMPRESSED_ENTRY,
    RAW_ENTRY,
    CompressedEntryDecoder,
    EntryDecoder,
    EntryInfo,
    RawEntryDecoder,
)
from .exceptions import UnknownEntryTypeError, UnsupportedVersionError
from .stream import ByteStream, MemorySink, OutputSink

logger = logging.getLogger(__name__)

EXPECTED_VERSION = 8
BITMAP_LIST_MAGIC = b"LMDBML30"

SinkFactory = Callable[[int], OutputSink]


def _memory_sink(index: int) -> OutputSink:
    return MemorySink()


class ContainerHeader(BaseModel):
    """
    The structure at the start of a container file.

    u8     Version       8
    char   Magic[8]      "LMDBML30" for a bitmap list
    u32    Count         number of entries
    u32    Offsets[Count] absolute offset of each entry's type byte

    Count and Offsets are only present in a bitmap list. Any other magic is a
    container holding no images; it parses to zero entries.
    """

    version: int = Field(..., description="Container version, must be 8")
    magic: bytes = Field(..., description="8-byte signature, LMDBML30 for a bitmap list")
    entry_count: int = 0
    offsets: List[int] = []
    raw_data: dict

    @property
    def is_bitmap_list(self) -> bool:
        return self.magic == BITMAP_LIST_MAGIC


class ContainerParser:
    """
    Reads a container from a ByteStream and dispatches each entry to the
    decoder registered for its type byte.

    All entries share the one stream, so entries are decoded strictly one at a
    time in offset-table order.
    """

    def __init__(
        self,
        stream: ByteStream,
        verify_compressed_size: bool = True,
        chunk_size: int = CHUNK_SIZE,
    ):
        self.stream = stream
        self.header: Optional[ContainerHeader] = None
        self.decoders: Dict[int, EntryDecoder] = {
            RAW_ENTRY: RawEntryDecoder(chunk_size=chunk_size),
            COMPRESSED_ENTRY: CompressedEntryDecoder(
                chunk_size=chunk_size, verify_compressed_size=verify_compressed_size
            ),
        }

    def read_header(self) -> ContainerHeader:
        """
        Parses the version, magic and offset table.

        Raises UnsupportedVersionError before anything past the version byte
        is read.
        """
        version = self.stream.read_uint8()
        if version != EXPECTED_VERSION:
            raise UnsupportedVersionError(version)

        magic = self.stream.read(8)
        raw = bytearray([version]) + magic
        parsed = {"version": version, "magic": magic, "entry_count": 0, "offsets": []}

        if magic == BITMAP_LIST_MAGIC:
            count_bytes = self.stream.read(4)
            (entry_count,) = struct.unpack("<L", count_bytes)
            raw += count_bytes
            offsets = []
            for _ in range(entry_count):
                offset_bytes = self.stream.read(4)
                offsets.append(struct.unpack("<L", offset_bytes)[0])
                raw += offset_bytes
            parsed["entry_count"] = entry_count
            parsed["offsets"] = offsets
            logger.debug(f"Bitmap list with {entry_count} entries")
        else:
            logger.debug(f"Magic {magic!r} is not a bitmap list")

        self.header = ContainerHeader(**parsed, raw_data={"raw": bytes(raw), "parsed": parsed})
        return self.header

    def iter_entries(self) -> Iterator[Tuple[int, EntryInfo, Iterator[bytes]]]:
        """
        Yields (index, info, chunks) for every entry in offset-table order.

        `chunks` produces the entry's decoded bytes. It reads from the shared
        stream, so it has to be consumed before the next entry is requested;
        a producer that is not needed can simply be dropped.
        """
        if self.header is None:
            self.read_header()

        for index in range(len(self.header.offsets)):
            info, chunks = self.open_entry(index)
            yield index, info, chunks

    def open_entry(self, index: int) -> Tuple[EntryInfo, Iterator[bytes]]:
        """
        Seeks to entry `index`, reads its type byte and header.

        Returns:
            The entry's EntryInfo and a producer of its decoded bytes.
        """
        if self.header is None:
            self.read_header()

        offset = self.header.offsets[index]
        self.stream.seek(offset)
        type_tag = self.stream.read_uint8()
        decoder = self.decoders.get(type_tag)
        if decoder is None:
            raise UnknownEntryTypeError(type_tag, index)

        entry_header = decoder.read_header(self.stream)
        info = EntryInfo(
            index=index,
            offset=offset,
            type_tag=type_tag,
            header=entry_header,
            data_offset=self.stream.tell(),
            decoded_size=entry_header.decoded_size,
        )
        logger.debug(f"Entry {index} at {offset:#x}: type {type_tag}, {info.decoded_size} bytes")
        return info, decoder.iter_chunks(self.stream, entry_header)

    def parse(self, sink_factory: Optional[SinkFactory] = None) -> List[Tuple[EntryInfo, OutputSink]]:
        """
        Decodes every entry into the sink returned by `sink_factory(index)`.

        Entries finalized before a failure stay delivered; the sink of the
        failing entry is aborted and the error propagates.

        Args:
            sink_factory: Creates the sink for an entry index. Defaults to a
                fresh MemorySink per entry.

        Returns:
            (info, sink) for every decoded entry, in order.
        """
        sink_factory = sink_factory or _memory_sink
        entries = []
        for index, info, chunks in self.iter_entries():
            sink = sink_factory(index)
            try:
                for chunk in chunks:
                    sink.append(chunk)
                sink.finalize()
            except BaseException:
                sink.abort()
                raise
            entries.append((info, sink))
        return entries
