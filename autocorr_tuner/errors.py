"""Exceptions raised by the pitch detector."""


class PitchDetectorError(Exception):
    """Base class for all pitch detector errors."""


class InvalidConfigurationError(PitchDetectorError, ValueError):
    """A configuration value violates the detector's invariants."""


class WindowLengthError(PitchDetectorError, ValueError):
    """A sample block is too short or does not match the window length."""


class AudioSourceUnavailableError(PitchDetectorError, RuntimeError):
    """No audio input device is available or the input stream failed to open."""
