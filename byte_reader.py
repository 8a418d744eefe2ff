"""Cursor-based big-endian reader over an in-memory byte buffer."""

from __future__ import annotations

from typing import Union

from midi_errors import OutOfBounds

__all__ = ["ByteReader"]

BytesLike = Union[bytes, bytearray, memoryview]


class ByteReader:
    """Sequential/random-access reader.

    The cursor may be moved past the end with :meth:`seek`; only the next
    read fails in that case.
    """

    def __init__(self, data: BytesLike) -> None:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError("ByteReader expects a bytes-like object")
        self._data = bytes(data)
        self._pos = 0

    def __len__(self) -> int:
        return len(self._data)

    # ------------------------------------------------------------------
    # Cursor
    def get_position(self) -> int:
        return self._pos

    def seek(self, index: int) -> None:
        if index < 0:
            raise OutOfBounds(index, len(self._data), 0)
        self._pos = int(index)

    def remaining(self) -> int:
        return max(0, len(self._data) - self._pos)

    def _require(self, count: int) -> None:
        if self._pos + count > len(self._data):
            raise OutOfBounds(self._pos, len(self._data), count)

    # ------------------------------------------------------------------
    # Primitive reads
    def read_byte(self) -> int:
        self._require(1)
        value = self._data[self._pos]
        self._pos += 1
        return value

    def peek_byte(self) -> int:
        self._require(1)
        return self._data[self._pos]

    def read_bytes(self, count: int) -> bytes:
        if count < 0:
            raise ValueError("count must be non-negative")
        self._require(count)
        chunk = self._data[self._pos:self._pos + count]
        self._pos += count
        return chunk

    # ------------------------------------------------------------------
    # Big-endian integers, composed from single bytes
    def read_uint16_be(self) -> int:
        return (self.read_byte() << 8) | self.read_byte()

    def read_uint24_be(self) -> int:
        return (self.read_byte() << 16) | (self.read_byte() << 8) | self.read_byte()

    def read_uint32_be(self) -> int:
        value = 0
        for _ in range(4):
            value = (value << 8) | self.read_byte()
        return value

    def read_ascii_length(self, count: int) -> str:
        """Read ``count`` bytes, mapping each byte to the character of that code."""

        return self.read_bytes(count).decode("latin-1")
