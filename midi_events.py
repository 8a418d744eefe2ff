"""Track event codec.

An event is ``(delta time, [status byte], payload)``. The payload shape is
fully determined by the status byte in effect:

* ``0x80``-``0xEF`` channel voice: one data byte for program change and
  channel pressure (``0xC0``-``0xDF``), two otherwise;
* ``0xF0``-``0xFE`` system: VLQ length followed by opaque bytes;
* ``0xFF`` meta: type byte, VLQ length, then the payload bytes.

On decode a missing status byte (next byte below ``0x80``) means running
status: the previous event's status is reused. Every decoded event,
including system and meta events, becomes the running status for the next
one. On encode the status byte is always written explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Tuple, Union

from byte_reader import ByteReader
from byte_writer import ByteWriter
from midi_errors import InvalidEventCode, MissingRunningStatus, OutOfBounds
from vlq import read_vlq, write_vlq

__all__ = [
    "CHANNEL_VOICE",
    "SYSTEM",
    "META",
    "META_END_OF_TRACK",
    "META_SET_TEMPO",
    "META_SEQUENCER_SPECIFIC",
    "ChannelVoicePayload",
    "SystemPayload",
    "MetaPayload",
    "MidiEvent",
    "DecodeState",
    "event_family",
    "channel_data_length",
    "decode_event",
    "decode_events",
    "encode_event",
    "encode_events",
]

CHANNEL_VOICE = "channel_voice"
SYSTEM = "system"
META = "meta"

META_END_OF_TRACK = 0x2F
META_SET_TEMPO = 0x51
META_SEQUENCER_SPECIFIC = 0x7F

MAX_TEMPO = 0xFFFFFF


def event_family(status: int) -> str:
    """Map a status byte to its payload family or raise ``InvalidEventCode``."""

    if 0x80 <= status <= 0xEF:
        return CHANNEL_VOICE
    if 0xF0 <= status <= 0xFE:
        return SYSTEM
    if status == 0xFF:
        return META
    raise InvalidEventCode(status)


def channel_data_length(status: int) -> int:
    return 1 if 0xC0 <= status <= 0xDF else 2


@dataclass
class ChannelVoicePayload:
    data: bytes


@dataclass
class SystemPayload:
    data: bytes

    @property
    def length(self) -> int:
        return len(self.data)


@dataclass
class MetaPayload:
    """Meta payload; ``data`` is the single source of truth.

    Typed views (``tempo``, ``text``) are read from ``data`` on access and
    the ``tempo`` setter rewrites ``data``, so the two can never diverge.
    """

    meta_type: int
    data: bytes

    def __post_init__(self) -> None:
        if self.meta_type == META_SET_TEMPO:
            # fail fast on a truncated tempo payload
            ByteReader(self.data).read_uint24_be()

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def is_end_of_track(self) -> bool:
        return self.meta_type == META_END_OF_TRACK

    @property
    def tempo(self) -> Optional[int]:
        """Microseconds per quarter note for set-tempo events, else ``None``."""

        if self.meta_type != META_SET_TEMPO:
            return None
        return ByteReader(self.data).read_uint24_be()

    @tempo.setter
    def tempo(self, value: int) -> None:
        if self.meta_type != META_SET_TEMPO:
            raise ValueError(f"meta type 0x{self.meta_type:02x} carries no tempo")
        value = int(value)
        if not 0 <= value <= MAX_TEMPO:
            raise ValueError(f"tempo {value} does not fit in 24 bits")
        writer = ByteWriter()
        writer.write_uint24_be(value)
        self.data = writer.get_bytes()

    @property
    def text(self) -> Optional[str]:
        if self.meta_type != META_SEQUENCER_SPECIFIC:
            return None
        return ByteReader(self.data).read_ascii_length(len(self.data))


Payload = Union[ChannelVoicePayload, SystemPayload, MetaPayload]

_PAYLOAD_TYPES = {
    CHANNEL_VOICE: ChannelVoicePayload,
    SYSTEM: SystemPayload,
    META: MetaPayload,
}


@dataclass
class MidiEvent:
    delta_time: int
    absolute_time: int
    status: int
    payload: Payload

    def __post_init__(self) -> None:
        expected = _PAYLOAD_TYPES[event_family(self.status)]
        if not isinstance(self.payload, expected):
            raise ValueError(
                f"status 0x{self.status:02x} requires {expected.__name__}, "
                f"got {type(self.payload).__name__}"
            )

    @property
    def family(self) -> str:
        return event_family(self.status)

    @property
    def is_meta(self) -> bool:
        return self.status == 0xFF

    @property
    def channel(self) -> Optional[int]:
        if self.family != CHANNEL_VOICE:
            return None
        return self.status & 0x0F

    @property
    def kind(self) -> int:
        """High nibble of a channel-voice status (``0x90`` for note on, ...)."""

        return self.status & 0xF0

    @property
    def is_note_on(self) -> bool:
        return self.kind == 0x90

    @property
    def is_note_off(self) -> bool:
        return self.kind == 0x80

    @property
    def key(self) -> Optional[int]:
        if self.is_note_on or self.is_note_off:
            return self.payload.data[0]
        return None

    @property
    def velocity(self) -> Optional[int]:
        # velocity 0 note-ons are kept as note-ons
        if self.is_note_on or self.is_note_off:
            return self.payload.data[1]
        return None


class DecodeState(NamedTuple):
    running_status: Optional[int] = None
    absolute_time: int = 0


# ----------------------------------------------------------------------
# Decoding
def _read_status(reader: ByteReader, running_status: Optional[int]) -> int:
    offset = reader.get_position()
    byte = reader.peek_byte()
    if byte & 0x80:
        return reader.read_byte()
    if running_status is None:
        raise MissingRunningStatus(byte, offset)
    return running_status


def decode_event(reader: ByteReader, state: DecodeState) -> Tuple[MidiEvent, DecodeState]:
    """Decode one event at the reader's cursor.

    Returns the event and the state to thread into the next call.
    """

    delta_time = read_vlq(reader)
    absolute_time = state.absolute_time + delta_time
    status = _read_status(reader, state.running_status)
    family = event_family(status)

    payload: Payload
    if family == CHANNEL_VOICE:
        payload = ChannelVoicePayload(reader.read_bytes(channel_data_length(status)))
    elif family == SYSTEM:
        length = read_vlq(reader)
        payload = SystemPayload(reader.read_bytes(length))
    else:
        meta_type = reader.read_byte()
        length = read_vlq(reader)
        data_offset = reader.get_position()
        data = reader.read_bytes(length)
        if meta_type == META_SET_TEMPO and length < 3:
            raise OutOfBounds(data_offset, data_offset + length, 3)
        payload = MetaPayload(meta_type, data)

    event = MidiEvent(delta_time, absolute_time, status, payload)
    return event, DecodeState(status, absolute_time)


def decode_events(reader: ByteReader, end: int) -> List[MidiEvent]:
    """Decode events until the cursor reaches ``end``.

    The loop stops on the boundary, so an event straddling ``end`` is read
    completely; the caller repositions the cursor afterwards.
    """

    events: List[MidiEvent] = []
    state = DecodeState()
    while reader.get_position() < end:
        event, state = decode_event(reader, state)
        events.append(event)
    return events


# ----------------------------------------------------------------------
# Encoding
def encode_event(writer: ByteWriter, event: MidiEvent, previous_absolute: int) -> None:
    """Write one event; the delta is ``absolute_time - previous_absolute``."""

    family = event_family(event.status)
    write_vlq(writer, event.absolute_time - previous_absolute)
    writer.write_byte(event.status)
    payload = event.payload
    if family == CHANNEL_VOICE:
        writer.write_many_bytes(payload.data)
    elif family == SYSTEM:
        write_vlq(writer, len(payload.data))
        writer.write_many_bytes(payload.data)
    else:
        writer.write_byte(payload.meta_type)
        write_vlq(writer, len(payload.data))
        writer.write_many_bytes(payload.data)


def encode_events(writer: ByteWriter, events: Iterable[MidiEvent]) -> None:
    previous_absolute = 0
    for event in events:
        encode_event(writer, event, previous_absolute)
        previous_absolute = event.absolute_time
