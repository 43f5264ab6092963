"""
lmdbml - LMDBML30 bitmap list extractor for Python

A pure Python library for extracting the raw and compressed bitmaps stored in
LMDBML30 bitmap list containers.
"""

from .lib.bitmap_list import BitmapList, extract_bitmaps
from .lib.exceptions import BitmapListError, UnsupportedVersionError, UnknownEntryTypeError

__version__ = "0.0.1"

__all__ = [
    "BitmapList",
    "extract_bitmaps",
    "BitmapListError",
    "UnsupportedVersionError",
    "UnknownEntryTypeError",
]
