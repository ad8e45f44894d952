"""
Normalized autocorrelation of a tapered window.
"""

import numpy as np
from scipy.signal import fftconvolve

METHODS = ("direct", "fft")


def signal_energy(window: np.ndarray) -> float:
    """Sum of squared samples."""
    return float(np.dot(window, window))


class Autocorrelator:
    """
    Computes ``r[L] = sum(x[i] * x[i + L]) / energy`` for lags 0 .. N/2 - 1.

    Dividing by the window energy makes ``r[0] == 1`` and keeps every other
    lag in [-1, 1], so peak comparisons do not depend on input level.

    Two methods give the same sums up to round-off:
    - ``direct``: one dot product per lag over views of the window
    - ``fft``: a single ``fftconvolve`` of the window with its reverse,
      faster for long windows
    """

    def __init__(self, window_length: int, method: str = "direct"):
        if method not in METHODS:
            raise ValueError(f"Unknown autocorrelation method: {method!r}")
        self.method = method
        self.resize(window_length)

    def resize(self, window_length: int):
        self.window_length = window_length
        self.max_lag = window_length // 2
        self._autocorr = np.zeros(self.max_lag, dtype=np.float64)

    def process(self, window: np.ndarray, energy: float) -> np.ndarray:
        """
        Fill the lag buffer for one window.

        Args:
            window: Tapered mono window of the configured length
            energy: Window energy (must be > 0)

        Returns:
            Autocorrelation values indexed by lag (shared buffer)
        """
        n = self.window_length
        out = self._autocorr

        if self.method == "fft":
            full = fftconvolve(window, window[::-1], mode="full")
            out[:] = full[n - 1 : n - 1 + self.max_lag]
        else:
            for lag in range(self.max_lag):
                out[lag] = np.dot(window[: n - lag], window[lag:])

        out /= energy
        return out
