"""MIDI variable-length quantities (7 bits per byte, continuation bit set
on every byte but the last).

No maximum length is enforced on decode: a malformed stream made only of
continuation bytes keeps accumulating until the buffer runs out.
"""

from __future__ import annotations

from byte_reader import ByteReader
from byte_writer import ByteWriter

__all__ = ["read_vlq", "encode_vlq", "write_vlq"]


def read_vlq(reader: ByteReader) -> int:
    value = 0
    while True:
        byte = reader.read_byte()
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            return value


def encode_vlq(value: int) -> bytes:
    """Canonical (minimal-length) encoding; ``0`` encodes to ``b"\\x00"``."""

    value = int(value)
    if value < 0:
        raise ValueError("variable-length quantities must be non-negative")
    # shift of the most significant non-empty 7-bit group
    shift = 7 * ((value.bit_length() - 1) // 7) if value else 0
    out = bytearray()
    while shift:
        out.append(((value >> shift) & 0x7F) | 0x80)
        shift -= 7
    out.append(value & 0x7F)
    return bytes(out)


def write_vlq(writer: ByteWriter, value: int) -> None:
    writer.write_many_bytes(encode_vlq(value))
