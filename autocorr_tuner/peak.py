"""
Autocorrelation peak search with parabolic refinement.
"""

import numpy as np


def lag_range(
    sample_rate: float, min_frequency: float, max_frequency: float, max_lag: int
) -> tuple[int, int]:
    """
    Lags that correspond to the configured frequency range.

    Returns:
        (min_lag, max_valid_lag); the highest frequency gives the shortest lag
    """
    min_lag = max(1, int(sample_rate / max_frequency))
    max_valid_lag = min(int(sample_rate / min_frequency), max_lag - 1)
    return min_lag, max_valid_lag


def find_peak_lag(autocorr: np.ndarray, min_lag: int, max_valid_lag: int) -> int | None:
    """
    Find the strongest strict local maximum strictly inside the lag range.

    Candidate lags run from ``min_lag + 1`` to ``max_valid_lag - 2`` so both
    neighbours stay in range. Only positive peaks count; on ties the
    shortest lag wins.

    Returns:
        Integer peak lag, or None if there is no positive local maximum
    """
    start = min_lag + 1
    stop = max_valid_lag - 1
    if stop <= start:
        return None

    center = autocorr[start:stop]
    left = autocorr[start - 1 : stop - 1]
    right = autocorr[start + 1 : stop + 1]

    candidates = np.where((center > left) & (center > right) & (center > 0), center, 0.0)
    best = int(np.argmax(candidates))
    if candidates[best] <= 0:
        return None
    return start + best


def parabolic_shift(y0: float, y1: float, y2: float) -> float:
    """Vertex offset of the parabola through three equally spaced points."""
    denom = y0 - 2.0 * y1 + y2
    if denom == 0:
        return 0.0
    return 0.5 * (y0 - y2) / denom


def refine_peak(autocorr: np.ndarray, lag: int) -> float:
    """Sub-sample peak lag from the integer lag and its two neighbours."""
    return lag + parabolic_shift(
        float(autocorr[lag - 1]), float(autocorr[lag]), float(autocorr[lag + 1])
    )
