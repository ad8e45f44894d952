"""
Frequency to note name and cents conversion (12-tone equal temperament).
"""

import math
from typing import NamedTuple

from .constants import (
    A4_REFERENCE,
    A_OFFSET,
    MAX_OCTAVE,
    NO_NOTE,
    NOTE_NAMES,
    OCTAVE,
    OCTAVE_BASE_OFFSET,
)


class NoteMapping(NamedTuple):
    """Nearest tempered note for a frequency."""
    name: str       # Pitch class, e.g. "A#", or NO_NOTE
    octave: int
    cents: float    # Deviation from the nearest note, about -50 to +50

    @property
    def label(self) -> str:
        """Note in Letter+Octave format, e.g. "E2"."""
        if self.name == NO_NOTE:
            return NO_NOTE
        return f"{self.name}{self.octave}"


def lag_to_frequency(refined_lag: float, sample_rate: float) -> float:
    """Frequency in Hz for a period of ``refined_lag`` samples; 0 if the lag is not positive."""
    if refined_lag <= 0:
        return 0.0
    return sample_rate / refined_lag


def semitones_from_reference(frequency: float, reference: float = A4_REFERENCE) -> float:
    """Signed distance from the reference pitch in semitones."""
    return OCTAVE * math.log2(frequency / reference)


def frequency_to_note(frequency: float, reference: float = A4_REFERENCE) -> NoteMapping:
    """
    Map a frequency to the nearest equal-tempered note.

    Octaves are numbered so that C0 is the lowest representable note and the
    reference pitch is in octave 4; octaves are clamped to 0..9. Semitones
    are rounded half-to-even.

    Args:
        frequency: Frequency in Hz
        reference: Frequency of A4 in Hz

    Returns:
        NoteMapping; NO_NOTE with 0 cents for non-positive frequencies
    """
    if frequency <= 0:
        return NoteMapping(NO_NOTE, 0, 0.0)

    semitones = semitones_from_reference(frequency, reference)
    nearest = round(semitones)
    note_index = nearest + A_OFFSET + OCTAVE_BASE_OFFSET

    octave = min(max(note_index // OCTAVE, 0), MAX_OCTAVE)
    name = NOTE_NAMES[note_index % OCTAVE]
    cents = 100.0 * (semitones - nearest)
    return NoteMapping(name, octave, cents)


def note_name(frequency: float, reference: float = A4_REFERENCE) -> str:
    """Note label such as "A4", or NO_NOTE for non-positive frequencies."""
    return frequency_to_note(frequency, reference).label


def cents_offset(frequency: float, reference: float = A4_REFERENCE) -> float:
    """Cents from the nearest tempered pitch; 0 for non-positive frequencies."""
    return frequency_to_note(frequency, reference).cents
