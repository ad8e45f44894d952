"""
Pitch estimate produced once per processed window.
"""

from dataclasses import dataclass

from .constants import NO_NOTE


@dataclass(frozen=True)
class PitchEstimate:
    """
    Detected pitch for one window.

    A frequency of 0 means no pitch was found; the note is then NO_NOTE and
    the cents offset is 0. The energy is always the window's sum of squared
    samples, also for silent windows.
    """

    frequency: float = 0.0  # Hz
    note: str = NO_NOTE  # e.g. "A4"
    cents_offset: float = 0.0  # Deviation from nearest tempered note
    energy: float = 0.0  # Sum of squared (tapered) samples

    @classmethod
    def empty(cls, energy: float = 0.0) -> "PitchEstimate":
        """The "no pitch" estimate."""
        return cls(energy=energy)

    @property
    def is_valid(self) -> bool:
        return self.frequency > 0 and self.note != NO_NOTE

    @property
    def pitch_class(self) -> str:
        """Note name without the octave, e.g. "A#"."""
        if not self.is_valid:
            return NO_NOTE
        return self.note.rstrip("0123456789")

    @property
    def octave(self) -> int | None:
        if not self.is_valid:
            return None
        return int(self.note[len(self.pitch_class) :])

    def __str__(self) -> str:
        return (
            f"{self.note} ({self.frequency:.2f} Hz, {self.cents_offset:+.2f} cents, "
            f"{self.energy:.4f} energy)"
        )
