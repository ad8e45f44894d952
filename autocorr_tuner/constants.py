"""
Shared constants for autocorrelation pitch detection.
"""

# Audio defaults
SAMPLE_RATE = 48000
BUFFER_SIZE = 2048
MIN_WINDOW_LENGTH = 4

# Detection range defaults (Hz)
MIN_FREQUENCY = 30.0
MAX_FREQUENCY = 1000.0
NOISE_THRESHOLD = 0.0

# Opaque selector handed to the host for its audio routing
DEFAULT_SOURCE = "Record"

# Tuning
A4_REFERENCE = 440.0
NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
OCTAVE = 12
A_OFFSET = 9  # A is the 9th pitch class counting from C
OCTAVE_BASE_OFFSET = 4 * OCTAVE  # A4 sits four octaves above octave 0
MAX_OCTAVE = 9

# Note string used when no pitch is detected
NO_NOTE = "--"
