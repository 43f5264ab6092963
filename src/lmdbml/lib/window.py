"""Fixed-size circular buffer holding the most recently decoded bytes."""

WINDOW_SIZE = 0x1000


class SlidingWindow:
    """
    A 4096-byte ring buffer.

    Every index is reduced modulo the window size, so any integer is a valid
    position. `filled` counts how many positions have been written at least
    once, which lets the decompressor reject back-references into bytes that
    were never decoded.
    """

    def __init__(self, size: int = WINDOW_SIZE):
        self.size = size
        self.buffer = bytearray(size)
        self.filled = 0

    def write_at(self, index: int, value: int):
        self.buffer[index % self.size] = value

    def read_at(self, index: int) -> int:
        return self.buffer[index % self.size]

    def mark_written(self, count: int):
        self.filled = min(self.size, self.filled + count)

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, item):
        if isinstance(item, slice):
            return bytes(self.buffer[item])
        return self.read_at(item)
