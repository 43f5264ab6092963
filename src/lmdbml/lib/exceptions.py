"""Custom exceptions for the bitmap list reader library."""


class BitmapListError(Exception):
    """Base class for exceptions in this module."""

    pass


class UnsupportedVersionError(BitmapListError):
    """Raised when the container version byte is not the supported one."""

    def __init__(self, actual: int):
        self.actual = actual
        super().__init__(f"unknown version: {actual}")


class UnknownEntryTypeError(BitmapListError):
    """Raised when an entry starts with a type tag other than raw or compressed."""

    def __init__(self, actual: int, entry_index: int):
        self.actual = actual
        self.entry_index = entry_index
        super().__init__(f"unknown type: {actual} (entry {entry_index})")


class EndOfStreamError(BitmapListError):
    """Raised when fewer bytes are available than a field or copy demands."""

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(f"end of stream: wanted {requested} bytes, got {available}")


TruncatedStreamError = EndOfStreamError


class IOFailureError(BitmapListError):
    """Raised when the underlying file object fails to read, write or seek."""

    def __init__(self, errno, message: str):
        self.errno = errno
        super().__init__(message)


class InvalidBackReferenceError(BitmapListError):
    """Raised when a copy token reaches back past the bytes decoded so far."""

    def __init__(self, distance: int, available: int):
        self.distance = distance
        self.available = available
        super().__init__(f"back-reference distance {distance} exceeds {available} decoded bytes")


class CompressedSizeExceededError(BitmapListError):
    """Raised when a compressed entry reads past its stored compressed size."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"compressed stream overran its stored size of {limit} bytes")
