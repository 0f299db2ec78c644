"""
Big-endian primitive reads over an immutable byte buffer.
"""

import struct
from typing import Optional

from .errors import TruncatedInput

_U2 = struct.Struct(">H")
_U4 = struct.Struct(">I")
_U8 = struct.Struct(">Q")
_I4 = struct.Struct(">i")
_I8 = struct.Struct(">q")


class ByteReader:
    """Forward-only cursor over a byte buffer.

    Reads never go past ``end``; a reader created by :meth:`fork` is bounded
    to a slice of its parent's buffer but reports absolute offsets.
    """

    def __init__(self, data: bytes, pos: int = 0, end: Optional[int] = None):
        self.data = bytes(data)
        self.pos = pos
        self.end = len(self.data) if end is None else end

    @property
    def remaining(self) -> int:
        return self.end - self.pos

    def _require(self, width: int):
        if self.pos + width > self.end:
            raise TruncatedInput(self.pos, width, max(self.remaining, 0))

    def _unpack(self, fmt: struct.Struct):
        self._require(fmt.size)
        val = fmt.unpack_from(self.data, self.pos)[0]
        self.pos += fmt.size
        return val

    def read_u1(self) -> int:
        self._require(1)
        val = self.data[self.pos]
        self.pos += 1
        return val

    def read_u2(self) -> int:
        return self._unpack(_U2)

    def read_u4(self) -> int:
        return self._unpack(_U4)

    def read_i4(self) -> int:
        return self._unpack(_I4)

    def read_i8(self) -> int:
        return self._unpack(_I8)

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_bytes(self, length: int) -> bytes:
        self._require(length)
        val = self.data[self.pos:self.pos + length]
        self.pos += length
        return val

    def fork(self, length: int) -> "ByteReader":
        """Return a reader over the next ``length`` bytes and skip past them."""
        self._require(length)
        sub = ByteReader.__new__(ByteReader)
        sub.data = self.data
        sub.pos = self.pos
        sub.end = self.pos + length
        self.pos += length
        return sub
