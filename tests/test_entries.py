"""Tests for raw and compressed entry decoding."""

from io import BytesIO
import struct

import pytest

from lmdbml.lib.entries import CompressedEntryDecoder, RawEntryDecoder
from lmdbml.lib.exceptions import CompressedSizeExceededError, EndOfStreamError
from lmdbml.lib.stream import ByteStream, MemorySink

from builders import build_token_stream, expected_output, literals, reference


class RecordingSink(MemorySink):
    """Memory sink that also remembers the size of each appended chunk."""

    def __init__(self):
        super().__init__()
        self.chunk_sizes = []

    def append(self, data):
        self.chunk_sizes.append(len(data))
        super().append(data)


@pytest.mark.parametrize("length", [0, 1, 4095, 4096, 4097, 10000])
def test_raw_entry_passes_bytes_through(length):
    """A raw entry decodes to exactly the stored bytes, in bounded chunks."""
    payload = bytes((i * 7) % 256 for i in range(length))
    stream = ByteStream(BytesIO(struct.pack("<L", length) + payload + b"trailing"))
    sink = RecordingSink()

    header = RawEntryDecoder().decode(stream, sink)

    assert header.size == length
    assert sink.getvalue() == payload
    assert all(size <= 4096 for size in sink.chunk_sizes)
    assert stream.read(8) == b"trailing"


def test_raw_entry_truncated():
    stream = ByteStream(BytesIO(struct.pack("<L", 10) + b"short"))

    with pytest.raises(EndOfStreamError) as excinfo:
        RawEntryDecoder().decode(stream, MemorySink())
    assert excinfo.value.available == 5


def test_raw_entry_truncated_size_field():
    with pytest.raises(EndOfStreamError):
        RawEntryDecoder().decode(ByteStream(BytesIO(b"\x01\x00")), MemorySink())


def test_compressed_entry_header():
    raw = struct.pack("<LLB", 1234, 567, 0x5A)
    header = CompressedEntryDecoder().read_header(ByteStream(BytesIO(raw)))

    assert header.type_tag == 9
    assert header.decompressed_size == 1234
    assert header.stored_compressed_size == 567
    assert header.reserved == 0x5A
    assert header.decoded_size == 1234
    assert header.raw_data["raw"] == raw


def test_compressed_entry_streams_to_sink():
    ops = literals(b"BM") + literals(bytes(range(32))) + [reference(32, 16)] * 400
    expected = expected_output(ops)
    tokens = build_token_stream(ops)
    stream = ByteStream(BytesIO(struct.pack("<LLB", len(expected), len(tokens), 0) + tokens))
    sink = RecordingSink()

    CompressedEntryDecoder(chunk_size=1000).decode(stream, sink)

    assert sink.getvalue() == expected
    assert max(sink.chunk_sizes) == 1000
    assert sum(sink.chunk_sizes) == len(expected)


def test_compressed_entry_of_zero_bytes_reads_no_tokens():
    stream = ByteStream(BytesIO(struct.pack("<LLB", 0, 0, 0)))
    sink = MemorySink()

    CompressedEntryDecoder().decode(stream, sink)

    assert sink.getvalue() == b""


def test_compressed_entry_bounded_by_stored_size():
    tokens = build_token_stream(literals(b"abcdef"))
    entry = struct.pack("<LLB", 6, len(tokens) - 2, 0) + tokens

    with pytest.raises(CompressedSizeExceededError):
        CompressedEntryDecoder().decode(ByteStream(BytesIO(entry)), MemorySink())

    sink = MemorySink()
    CompressedEntryDecoder(verify_compressed_size=False).decode(ByteStream(BytesIO(entry)), sink)
    assert sink.getvalue() == b"abcdef"
