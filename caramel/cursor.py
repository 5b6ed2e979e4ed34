"""
Bounds-checked big-endian reader over an immutable byte buffer.
"""

from .errors import UnexpectedEndOfInput


class ByteCursor:
    """Sequential reader; every read fails cleanly at the end of the buffer."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.pos = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def at_end(self) -> bool:
        return self.pos == len(self.data)

    def _require(self, count: int):
        if count > self.remaining:
            raise UnexpectedEndOfInput(self.pos, count, self.remaining)

    def read_u1(self) -> int:
        self._require(1)
        val = self.data[self.pos]
        self.pos += 1
        return val

    def read_u2(self) -> int:
        self._require(2)
        high = self.read_u1()
        low = self.read_u1()
        return (high << 8) | low

    def read_u4(self) -> int:
        self._require(4)
        high = self.read_u2()
        low = self.read_u2()
        return (high << 16) | low

    def read_bytes(self, length: int) -> bytes:
        self._require(length)
        val = self.data[self.pos:self.pos + length]
        self.pos += length
        return val
