"""Standard MIDI File model: header chunk plus track chunks.

``decode`` builds a :class:`MidiFile` from a fully buffered byte blob and
``encode`` walks it back into bytes. Header bytes past the six standard
ones are skipped on decode and re-emitted as zeros on encode.

By default ``encode`` writes each track's *declared* length unchanged, even
if the re-encoded events no longer add up to it (for instance after a
resample widened some delta-time VLQs). Pass ``recompute_lengths=True`` to
write the true byte count instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterator, List, Tuple, Union

from byte_reader import ByteReader
from byte_writer import ByteWriter
from midi_errors import BadMagic, UnsupportedTimeDivision
from midi_events import MidiEvent, decode_events, encode_events

__all__ = ["HEADER_MAGIC", "TRACK_MAGIC", "Header", "Track", "MidiFile", "decode", "encode"]

logger = logging.getLogger(__name__)

HEADER_MAGIC = "MThd"
TRACK_MAGIC = "MTrk"
SMPTE_BIT = 0x8000
# magic + length field
CHUNK_PREAMBLE = 8


@dataclass
class Header:
    declared_length: int = 6
    format: int = 0
    track_count: int = 0
    time_division_raw: int = 480

    @property
    def uses_smpte(self) -> bool:
        return bool(self.time_division_raw & SMPTE_BIT)

    @property
    def ticks_per_quarter_note(self) -> int:
        return self.time_division_raw & 0x7FFF


@dataclass
class Track:
    declared_length: int = 0
    events: List[MidiEvent] = field(default_factory=list)


def _expect_magic(reader: ByteReader, magic: str) -> None:
    offset = reader.get_position()
    found = reader.read_ascii_length(4)
    if found != magic:
        raise BadMagic(magic, found, offset)


class MidiFile:
    """Decoded SMF: one header and an ordered list of tracks."""

    def __init__(self, header: Header | None = None, tracks: List[Track] | None = None) -> None:
        self.header = header or Header()
        self.tracks: List[Track] = list(tracks or [])

    # ------------------------------------------------------------------
    # Decoding
    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "MidiFile":
        return cls.from_reader(ByteReader(data))

    @classmethod
    def from_reader(cls, reader: ByteReader) -> "MidiFile":
        midi = cls()
        midi._read_header(reader)
        midi._read_tracks(reader)
        return midi

    def _read_header(self, reader: ByteReader) -> None:
        _expect_magic(reader, HEADER_MAGIC)
        declared_length = reader.read_uint32_be()
        fmt = reader.read_uint16_be()
        track_count = reader.read_uint16_be()
        division_offset = reader.get_position()
        division = reader.read_uint16_be()
        if division & SMPTE_BIT:
            raise UnsupportedTimeDivision(division, division_offset)

        self.header = Header(declared_length, fmt, track_count, division)
        logger.debug(
            "MIDI header: format=%d tracks=%d ticks/quarter=%d header length=%d",
            fmt,
            track_count,
            self.header.ticks_per_quarter_note,
            declared_length,
        )
        reader.seek(CHUNK_PREAMBLE + declared_length)

    def _read_tracks(self, reader: ByteReader) -> None:
        self.tracks = [self._read_track(reader, index) for index in range(self.header.track_count)]

    def _read_track(self, reader: ByteReader, index: int) -> Track:
        _expect_magic(reader, TRACK_MAGIC)
        declared_length = reader.read_uint32_be()
        start = reader.get_position()
        end = start + declared_length
        events = decode_events(reader, end)
        reader.seek(end)
        logger.debug("Track %d: %d event(s) in %d byte(s)", index, len(events), declared_length)
        return Track(declared_length, events)

    # ------------------------------------------------------------------
    # Encoding
    def encode(self, recompute_lengths: bool = False) -> bytes:
        writer = ByteWriter()
        header = self.header
        writer.write_ascii(HEADER_MAGIC)
        writer.write_uint32_be(header.declared_length)
        writer.write_uint16_be(header.format)
        writer.write_uint16_be(header.track_count)
        writer.write_uint16_be(header.time_division_raw)
        writer.seek(CHUNK_PREAMBLE + header.declared_length)

        for index, track in enumerate(self.tracks):
            self._write_track(writer, index, track, recompute_lengths)
        return writer.get_bytes()

    def _write_track(self, writer: ByteWriter, index: int, track: Track, recompute_lengths: bool) -> None:
        writer.write_ascii(TRACK_MAGIC)
        length_pos = writer.head
        writer.write_uint32_be(track.declared_length)
        start = writer.head
        encode_events(writer, track.events)
        actual = writer.head - start

        if actual == track.declared_length:
            return
        if recompute_lengths:
            end = writer.head
            writer.seek(length_pos)
            writer.write_uint32_be(actual)
            writer.seek(end)
        else:
            logger.warning(
                "Track %d: declared length %d kept but events encode to %d byte(s)",
                index,
                track.declared_length,
                actual,
            )

    # ------------------------------------------------------------------
    # Queries
    def events(self) -> Iterator[Tuple[int, MidiEvent]]:
        for index, track in enumerate(self.tracks):
            for event in track.events:
                yield index, event

    @property
    def event_count(self) -> int:
        return sum(len(track.events) for track in self.tracks)


def decode(data: Union[bytes, bytearray, memoryview]) -> MidiFile:
    return MidiFile.from_bytes(data)


def encode(midi: MidiFile, recompute_lengths: bool = False) -> bytes:
    return midi.encode(recompute_lengths=recompute_lengths)
