"""Exceptions raised while decoding Standard MIDI Files.

Every failure is fatal to the current decode call: the partially built
model must be discarded. Each error keeps the byte offset where it was
detected (``offset``) and, where it helps, the offending value.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "MidiDecodeError",
    "BadMagic",
    "UnsupportedTimeDivision",
    "OutOfBounds",
    "InvalidEventCode",
    "MissingRunningStatus",
]


class MidiDecodeError(ValueError):
    """Base class for all structural decode failures."""

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        if offset is not None:
            message = f"{message} (offset {offset})"
        super().__init__(message)
        self.offset = offset


class BadMagic(MidiDecodeError):
    def __init__(self, expected: str, found: str, offset: Optional[int] = None) -> None:
        super().__init__(f"invalid chunk magic: expected {expected!r}, got {found!r}", offset)
        self.expected = expected
        self.found = found


class UnsupportedTimeDivision(MidiDecodeError):
    def __init__(self, raw: int, offset: Optional[int] = None) -> None:
        super().__init__(f"unsupported SMPTE time division 0x{raw:04x}", offset)
        self.raw = raw


class OutOfBounds(MidiDecodeError):
    def __init__(self, position: int, length: int, count: int = 1) -> None:
        super().__init__(
            f"read of {count} byte(s) past the end of data ending at offset {length}", position
        )
        self.position = position
        self.length = length
        self.count = count


class InvalidEventCode(MidiDecodeError):
    def __init__(self, code: int, offset: Optional[int] = None) -> None:
        super().__init__(f"invalid track event code 0x{code:02x}", offset)
        self.code = code


class MissingRunningStatus(MidiDecodeError):
    def __init__(self, data_byte: int, offset: Optional[int] = None) -> None:
        super().__init__(
            f"data byte 0x{data_byte:02x} without a status byte and no running status", offset
        )
        self.data_byte = data_byte
