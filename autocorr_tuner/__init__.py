"""
autocorr_tuner - Real-time single-pitch detection by normalized autocorrelation
"""

from .audio_input import FrameSource, MicrophoneSource, RingBufferSource, list_input_devices
from .config import DEFAULTS, DetectionConfig
from .constants import A4_REFERENCE, BUFFER_SIZE, NO_NOTE, NOTE_NAMES, SAMPLE_RATE
from .detector import PitchDetector, estimate_pitch
from .emitter import PitchEmitter
from .errors import (
    AudioSourceUnavailableError,
    InvalidConfigurationError,
    PitchDetectorError,
    WindowLengthError,
)
from .notes import NoteMapping, cents_offset, frequency_to_note, note_name
from .pitch import PitchEstimate
from .windowing import Downmix, Windower

__version__ = "0.1.0"
__all__ = [
    "PitchDetector",
    "PitchEstimate",
    "PitchEmitter",
    "estimate_pitch",
    "DetectionConfig",
    "DEFAULTS",
    "Downmix",
    "Windower",
    "NoteMapping",
    "frequency_to_note",
    "note_name",
    "cents_offset",
    "FrameSource",
    "RingBufferSource",
    "MicrophoneSource",
    "list_input_devices",
    "PitchDetectorError",
    "InvalidConfigurationError",
    "WindowLengthError",
    "AudioSourceUnavailableError",
    "SAMPLE_RATE",
    "BUFFER_SIZE",
    "A4_REFERENCE",
    "NOTE_NAMES",
    "NO_NOTE",
]
