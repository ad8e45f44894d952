"""
Detection configuration.

A ``DetectionConfig`` is a plain value owned by whoever drives detection.
``validate()`` enforces the invariants the pipeline relies on; the detector's
setters use it to reject bad values while keeping the previous ones.
"""

from dataclasses import dataclass, fields
from numbers import Integral
from typing import Any

from .constants import (
    BUFFER_SIZE,
    DEFAULT_SOURCE,
    MAX_FREQUENCY,
    MIN_FREQUENCY,
    MIN_WINDOW_LENGTH,
    NOISE_THRESHOLD,
    SAMPLE_RATE,
)
from .errors import InvalidConfigurationError
from .windowing import Downmix

# Default settings values
DEFAULTS = {
    "window_length": BUFFER_SIZE,
    "sample_rate": SAMPLE_RATE,
    "min_frequency": MIN_FREQUENCY,
    "max_frequency": MAX_FREQUENCY,
    "noise_threshold": NOISE_THRESHOLD,
    "suppress_change_filtering": False,
    "source": DEFAULT_SOURCE,
    "downmix": Downmix.AVERAGE_FIRST_TWO,
}


@dataclass(frozen=True)
class DetectionConfig:
    """
    Settings for one pitch detector.

    Instances are immutable; change settings through the detector's setters,
    which build a new config with ``dataclasses.replace`` and validate it.

    Attributes:
        window_length: Samples per analysis window
        sample_rate: Fallback sample rate in Hz when the source reports none
        min_frequency: Lowest detectable frequency in Hz
        max_frequency: Highest detectable frequency in Hz
        noise_threshold: Window energy at or below which no pitch is reported
        suppress_change_filtering: Publish every estimate, even repeats
        source: Opaque audio source selector, interpreted only by the host
        downmix: How multi-channel blocks are folded to mono
    """

    window_length: int = DEFAULTS["window_length"]
    sample_rate: float = DEFAULTS["sample_rate"]
    min_frequency: float = DEFAULTS["min_frequency"]
    max_frequency: float = DEFAULTS["max_frequency"]
    noise_threshold: float = DEFAULTS["noise_threshold"]
    suppress_change_filtering: bool = DEFAULTS["suppress_change_filtering"]
    source: str = DEFAULTS["source"]
    downmix: Downmix = DEFAULTS["downmix"]

    def validate(self) -> "DetectionConfig":
        """Raise InvalidConfigurationError if any invariant is violated."""
        if not isinstance(self.window_length, Integral) or isinstance(self.window_length, bool):
            raise InvalidConfigurationError(
                f"Invalid window_length: {self.window_length!r}. Must be an integer."
            )
        if self.window_length < MIN_WINDOW_LENGTH:
            raise InvalidConfigurationError(
                f"Invalid window_length: {self.window_length}. Must be >= {MIN_WINDOW_LENGTH}."
            )
        if self.sample_rate <= 0:
            raise InvalidConfigurationError(
                f"Invalid sample_rate: {self.sample_rate}. Must be > 0."
            )
        if self.min_frequency <= 0 or self.min_frequency >= self.max_frequency:
            raise InvalidConfigurationError(
                f"Invalid frequency range: {self.min_frequency}-{self.max_frequency} Hz. "
                "Need 0 < min_frequency < max_frequency."
            )
        if self.noise_threshold < 0:
            raise InvalidConfigurationError(
                f"Invalid noise_threshold: {self.noise_threshold}. Must be >= 0."
            )
        if not isinstance(self.downmix, Downmix):
            raise InvalidConfigurationError(f"Invalid downmix: {self.downmix!r}")
        return self

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> "DetectionConfig":
        """
        Build a validated config from a settings mapping.

        Missing keys fall back to DEFAULTS; unknown keys are rejected.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise InvalidConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        values = dict(values)
        if "downmix" in values and not isinstance(values["downmix"], Downmix):
            try:
                values["downmix"] = Downmix(values["downmix"])
            except ValueError as e:
                raise InvalidConfigurationError(f"Invalid downmix: {values['downmix']!r}") from e

        return cls(**values).validate()
