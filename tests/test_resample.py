import math
import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from midi_errors import OutOfBounds
from midi_file import decode, encode
from resample import resample, scale_ticks

from tests._test_utils import CANONICAL_FILE, END_OF_TRACK, smf, tempo_event


def _times(midi):
    return [[ev.absolute_time for ev in track.events] for track in midi.tracks]


def _tempos(midi):
    return [ev.payload.tempo for _, ev in midi.events() if ev.is_meta and ev.payload.tempo is not None]


def test_halving_ticks():
    midi = decode(CANONICAL_FILE)
    resample(midi, 0.5)
    note_off = midi.tracks[1].events[2]
    assert note_off.absolute_time == 240
    assert note_off.delta_time == 240
    assert _tempos(midi) == [1000000]


def test_doubling_halves_tempo():
    midi = decode(CANONICAL_FILE)
    resample(midi, 2.0)
    assert _tempos(midi) == [250000]
    assert midi.tracks[0].events[0].payload.data == b"\x03\xD0\x90"
    assert midi.tracks[1].events[2].absolute_time == 960


def test_ratio_one_is_identity():
    midi = decode(CANONICAL_FILE)
    before_times, before_tempos = _times(midi), _tempos(midi)
    resample(midi, 1.0)
    assert _times(midi) == before_times
    assert _tempos(midi) == before_tempos
    assert encode(midi) == CANONICAL_FILE


def test_flooring_is_per_event():
    body = b"\x01\x90\x3C\x64" b"\x02\x80\x3C\x00" b"\x01\x90\x3E\x64" + END_OF_TRACK
    midi = decode(smf(body))
    resample(midi, 0.5)
    events = midi.tracks[0].events
    # absolute 1, 3, 4, 4 -> 0, 1, 2, 2 (not the sum of floored deltas)
    assert [ev.absolute_time for ev in events] == [0, 1, 2, 2]
    assert [ev.delta_time for ev in events] == [0, 1, 0, 0]


def test_header_and_payloads_untouched():
    midi = decode(CANONICAL_FILE)
    resample(midi, 3.0)
    assert midi.header.ticks_per_quarter_note == 480
    statuses = [ev.status for _, ev in midi.events()]
    assert statuses == [0xFF, 0xFF, 0xC0, 0x90, 0x80, 0xFF, 0xF0, 0xFF]
    assert midi.tracks[1].events[3].payload.text == "ABC"


def test_invalid_multipliers():
    midi = decode(CANONICAL_FILE)
    for bad in (0, -1.0, math.nan, math.inf):
        with pytest.raises(ValueError):
            resample(midi, bad)
    assert _times(midi) == _times(decode(CANONICAL_FILE))


def test_tempo_overflow_rejected_without_touching_the_model():
    notes = b"\x83\x60\x90\x3C\x64" b"\x00\x80\x3C\x00" + END_OF_TRACK
    midi = decode(smf(notes, tempo_event(0xF00000) + END_OF_TRACK))
    with pytest.raises(ValueError):
        resample(midi, 0.5)
    assert _times(midi) == [[480, 480, 480], [0, 0]]
    assert [ev.delta_time for ev in midi.tracks[0].events] == [480, 0, 0]
    assert _tempos(midi) == [0xF00000]


def test_scale_ticks_floors():
    out = scale_ticks([0, 1, 3, 480], 0.5)
    assert out.dtype == np.int64
    assert out.tolist() == [0, 0, 1, 240]


def test_track_length_field_not_recomputed_by_default():
    # delta 128 needs two VLQ bytes, 64 needs one
    body = b"\x81\x00\x90\x3C\x64" + END_OF_TRACK
    midi = decode(smf(body))
    resample(midi, 0.5)

    stale = encode(midi)
    assert stale[18:22] == (9).to_bytes(4, "big")
    assert stale[22:] == b"\x40\x90\x3C\x64" + END_OF_TRACK
    # the stale length overstates the content, so the output no longer decodes
    with pytest.raises(OutOfBounds):
        decode(stale)

    fixed = encode(midi, recompute_lengths=True)
    assert fixed[18:22] == (8).to_bytes(4, "big")
    assert [ev.absolute_time for ev in decode(fixed).tracks[0].events] == [64, 64]
