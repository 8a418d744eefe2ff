"""Growable, seekable big-endian byte buffer builder.

Seeking past the current end zero-fills the buffer up to the new head.
The file encoder relies on this to reserve header padding and track
length fields before their content is known.
"""

from __future__ import annotations

import struct
from typing import Iterable

__all__ = ["ByteWriter"]


class ByteWriter:
    def __init__(self) -> None:
        self._buf = bytearray()
        self.head = 0

    def get_bytes(self) -> bytes:
        return bytes(self._buf)

    def get_length(self) -> int:
        return len(self._buf)

    def seek(self, index: int) -> None:
        if index < 0:
            raise ValueError("cannot seek to a negative offset")
        if index > len(self._buf):
            self._buf.extend(b"\x00" * (index - len(self._buf)))
        self.head = int(index)

    # ------------------------------------------------------------------
    # Bytes
    def write_byte(self, value: int) -> None:
        if self.head > len(self._buf):
            self._buf.extend(b"\x00" * (self.head - len(self._buf)))
        value = int(value) & 0xFF
        if self.head == len(self._buf):
            self._buf.append(value)
        else:
            self._buf[self.head] = value
        self.head += 1

    def write_signed_byte(self, value: int) -> None:
        self.write_byte(value if value >= 0 else 0x100 + value)

    def write_many_bytes(self, values: Iterable[int]) -> None:
        for value in values:
            self.write_byte(value)

    # ------------------------------------------------------------------
    # Big-endian integers
    def write_uint16_be(self, value: int) -> None:
        self.write_byte(value >> 8)
        self.write_byte(value)

    def write_uint24_be(self, value: int) -> None:
        self.write_byte(value >> 16)
        self.write_byte(value >> 8)
        self.write_byte(value)

    def write_uint32_be(self, value: int) -> None:
        self.write_byte(value >> 24)
        self.write_byte(value >> 16)
        self.write_byte(value >> 8)
        self.write_byte(value)

    def write_int16_be(self, value: int) -> None:
        self.write_uint16_be(value if value >= 0 else 0x10000 + value)

    def write_int32_be(self, value: int) -> None:
        self.write_uint32_be(value if value >= 0 else 0x100000000 + value)

    def write_float32(self, value: float) -> None:
        self.write_many_bytes(struct.pack(">f", float(value)))

    # ------------------------------------------------------------------
    # Text
    def write_ascii_fixed_length(self, text: str, length: int) -> None:
        """Write exactly ``length`` bytes: truncated, or zero-padded."""

        for ch in text[:length]:
            self.write_byte(ord(ch))
        for _ in range(len(text), length):
            self.write_byte(0)

    def write_ascii(self, text: str) -> None:
        for ch in text:
            self.write_byte(ord(ch))
