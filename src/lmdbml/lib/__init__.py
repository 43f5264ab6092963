"""
lmdbml.lib - Core library components

Container parsing, entry decoding and window decompression.
"""

from .bitmap_list import BitmapList, extract_bitmaps
from .container import ContainerHeader, ContainerParser
from .entries import CompressedEntryDecoder, EntryInfo, RawEntryDecoder
from .compression import WindowDecompressor, decompress
from .stream import ByteStream, FileSink, MemorySink, OutputSink
from .window import SlidingWindow
from .exceptions import (
    BitmapListError,
    CompressedSizeExceededError,
    EndOfStreamError,
    InvalidBackReferenceError,
    IOFailureError,
    UnknownEntryTypeError,
    UnsupportedVersionError,
)

__all__ = [
    "BitmapList",
    "extract_bitmaps",
    "ContainerHeader",
    "ContainerParser",
    "CompressedEntryDecoder",
    "EntryInfo",
    "RawEntryDecoder",
    "WindowDecompressor",
    "decompress",
    "ByteStream",
    "FileSink",
    "MemorySink",
    "OutputSink",
    "SlidingWindow",
    "BitmapListError",
    "CompressedSizeExceededError",
    "EndOfStreamError",
    "InvalidBackReferenceError",
    "IOFailureError",
    "UnknownEntryTypeError",
    "UnsupportedVersionError",
]
