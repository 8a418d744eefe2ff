"""Human-readable one-line descriptions of decoded events (display only)."""

from __future__ import annotations

from midi_events import (
    CHANNEL_VOICE,
    META_END_OF_TRACK,
    META_SEQUENCER_SPECIFIC,
    META_SET_TEMPO,
    MidiEvent,
)

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]


def note_name(key: int) -> str:
    # octave numbering starts at 0 for key 0
    return f"{NOTE_NAMES[key % 12]}{key // 12}"


def _hex(data: bytes) -> str:
    return " ".join(f"{b:02X}" for b in data)


def describe_event(event: MidiEvent) -> str:
    if event.is_note_on or event.is_note_off:
        prefix = "[9*] Note On: " if event.is_note_on else "[8*] Note Off: "
        return f"{prefix}{note_name(event.key)}, Velocity: {event.velocity}"

    payload = event.payload
    if event.is_meta:
        if payload.meta_type == META_END_OF_TRACK:
            return "[FF 2F] End of Track"
        if payload.meta_type == META_SET_TEMPO:
            return f"[FF 51] Set Tempo: {payload.tempo} µs/quarter note"
        if payload.meta_type == META_SEQUENCER_SPECIFIC:
            return f"[FF 7F] Sequencer-Specific: {payload.text}"
        return f"[FF {payload.meta_type:02X}] Meta: {_hex(payload.data)}".rstrip()

    if event.family == CHANNEL_VOICE:
        return f"[{event.kind >> 4:X}*] Channel {event.channel}: {_hex(payload.data)}"
    return f"[{event.status:02X}] System: {_hex(payload.data)}".rstrip()
