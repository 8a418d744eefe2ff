"""Rescale every tick in a :class:`MidiFile` by a multiplicative ratio.

Absolute and delta times are multiplied and floored independently per
event, so rounding error does not accumulate along a track (two events
that were simultaneous stay simultaneous, but neighbours may collapse or
drift by one tick). Set-tempo values are divided by the same ratio so the
wall-clock timing of the music is preserved.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from midi_events import MAX_TEMPO
from midi_file import MidiFile

__all__ = ["resample", "scale_ticks"]

logger = logging.getLogger(__name__)


def scale_ticks(ticks, multiplier: float) -> np.ndarray:
    """Return ``floor(ticks * multiplier)`` as an int64 array."""

    arr = np.asarray(ticks, dtype=np.float64)
    return np.floor(arr * float(multiplier)).astype(np.int64)


def resample(midi: MidiFile, multiplier: float) -> None:
    """Mutate ``midi`` in place; ``multiplier`` must be a positive finite number."""

    multiplier = float(multiplier)
    if not math.isfinite(multiplier) or multiplier <= 0.0:
        raise ValueError(f"resample multiplier must be positive, got {multiplier}")

    # every new tempo is checked before the model is touched
    new_tempos = []
    for _, event in midi.events():
        tempo = event.payload.tempo if event.is_meta else None
        if tempo is None:
            continue
        scaled = math.floor(tempo / multiplier)
        if scaled > MAX_TEMPO:
            raise ValueError(f"tempo {tempo} scaled by 1/{multiplier:g} does not fit in 24 bits")
        new_tempos.append((event.payload, scaled))

    for track in midi.tracks:
        if not track.events:
            continue
        absolute = scale_ticks([ev.absolute_time for ev in track.events], multiplier)
        delta = scale_ticks([ev.delta_time for ev in track.events], multiplier)
        for event, abs_tick, delta_tick in zip(track.events, absolute, delta):
            event.absolute_time = int(abs_tick)
            event.delta_time = int(delta_tick)
    for payload, scaled in new_tempos:
        payload.tempo = scaled

    logger.debug("Resampled by %g: %d tempo event(s) rescaled", multiplier, len(new_tempos))
