"""
Window preprocessing: channel down-mix and Hann taper.

The host hands over blocks of interleaved frames, either as a 1-D array of
mono samples or as a 2-D ``(frames, channels)`` array. The windower folds the
channels into a single signal and tapers it so the autocorrelation is not
dominated by the block edges.
"""

from enum import Enum

import numpy as np

from .errors import WindowLengthError


class Downmix(Enum):
    """Rule for folding a multi-channel block into one channel."""

    AVERAGE_FIRST_TWO = "average_first_two"  # (left + right) / 2
    FIRST_CHANNEL = "first_channel"
    AVERAGE_ALL = "average_all"


def hann_taper(length: int) -> np.ndarray:
    """
    Raised-cosine taper ``0.5 * (1 - cos(2*pi*i / (N-1)))``.

    Args:
        length: Number of samples (at least 2)

    Returns:
        Taper coefficients, zero at both ends
    """
    if length < 2:
        raise WindowLengthError(f"Window length must be at least 2, got {length}")
    i = np.arange(length, dtype=np.float64)
    return 0.5 * (1.0 - np.cos(2.0 * np.pi * i / (length - 1)))


class Windower:
    """
    Converts a raw sample block into a single-channel tapered window.

    The output array is allocated once and overwritten on every call, so the
    returned window is only valid until the next ``process()``.
    """

    def __init__(self, window_length: int, downmix: Downmix = Downmix.AVERAGE_FIRST_TWO):
        self.downmix = downmix
        self.resize(window_length)

    def resize(self, window_length: int):
        """Reallocate the taper and output buffer for a new window length."""
        self._taper = hann_taper(window_length)
        self._window = np.zeros(window_length, dtype=np.float64)
        self.window_length = window_length

    def set_downmix(self, downmix: Downmix):
        self.downmix = downmix

    def process(self, block: np.ndarray) -> np.ndarray:
        """
        Down-mix and taper one block.

        Args:
            block: ``(N,)`` mono samples or ``(N, channels)`` frames, with
                N equal to the window length

        Returns:
            Tapered mono window (shared buffer)
        """
        block = np.asarray(block)
        if block.shape[0] != self.window_length:
            raise WindowLengthError(
                f"Expected {self.window_length} frames, got {block.shape[0]}"
            )

        out = self._window
        if block.ndim == 1:
            out[:] = block
        elif block.ndim == 2:
            self._mix(block, out)
        else:
            raise WindowLengthError(f"Expected a 1-D or 2-D block, got {block.ndim} dimensions")

        out *= self._taper
        return out

    def _mix(self, block: np.ndarray, out: np.ndarray):
        channels = block.shape[1]
        if channels == 0:
            raise WindowLengthError("Block has no channels")

        if channels == 1 or self.downmix == Downmix.FIRST_CHANNEL:
            out[:] = block[:, 0]
        elif self.downmix == Downmix.AVERAGE_FIRST_TWO:
            np.add(block[:, 0], block[:, 1], out=out)
            out *= 0.5
        else:
            np.mean(block, axis=1, out=out)
