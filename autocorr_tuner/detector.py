"""
Autocorrelation pitch detector.

Each cycle turns one window of host audio into a ``PitchEstimate``:

1. Down-mix to mono and apply a Hann taper
2. Compute the window energy; at or below the noise threshold the cycle
   yields the "no pitch" estimate without correlating
3. Normalized autocorrelation up to half the window length
4. Strongest positive local maximum inside the lag range implied by the
   frequency limits, refined by parabolic interpolation
5. Frequency, note name and cents offset from the refined lag

The result is then offered to a ``PitchEmitter``, which publishes it to
observers when the frequency changed (or always, if change filtering is
suppressed).
"""

import dataclasses
import logging

import numpy as np

from .audio_input import FrameSource
from .autocorrelation import Autocorrelator, signal_energy
from .config import DetectionConfig
from .constants import A4_REFERENCE
from .emitter import PitchCallback, PitchEmitter
from .errors import InvalidConfigurationError
from .notes import frequency_to_note, lag_to_frequency
from .peak import find_peak_lag, lag_range, refine_peak
from .pitch import PitchEstimate
from .windowing import Downmix, Windower

logger = logging.getLogger(__name__)


def estimate_pitch(
    window: np.ndarray,
    sample_rate: float,
    min_frequency: float,
    max_frequency: float,
    noise_threshold: float,
    reference: float = A4_REFERENCE,
    autocorrelator: Autocorrelator | None = None,
) -> PitchEstimate:
    """
    Estimate the pitch of one tapered mono window.

    Args:
        window: Tapered mono samples
        sample_rate: Sample rate in Hz
        min_frequency: Lowest frequency to consider in Hz
        max_frequency: Highest frequency to consider in Hz
        noise_threshold: Energy at or below which no pitch is reported
        reference: Frequency of A4 in Hz
        autocorrelator: Reusable autocorrelator sized for the window

    Returns:
        PitchEstimate, the "no pitch" estimate when gated or no peak is found
    """
    energy = signal_energy(window)
    if energy <= noise_threshold:
        return PitchEstimate.empty(energy)

    if autocorrelator is None or autocorrelator.window_length != len(window):
        autocorrelator = Autocorrelator(len(window))
    autocorr = autocorrelator.process(window, energy)

    min_lag, max_valid_lag = lag_range(
        sample_rate, min_frequency, max_frequency, autocorrelator.max_lag
    )
    lag = find_peak_lag(autocorr, min_lag, max_valid_lag)
    if lag is None:
        return PitchEstimate.empty(energy)

    frequency = lag_to_frequency(refine_peak(autocorr, lag), sample_rate)
    if frequency <= 0:
        return PitchEstimate.empty(energy)

    note = frequency_to_note(frequency, reference)
    return PitchEstimate(
        frequency=frequency,
        note=note.label,
        cents_offset=note.cents,
        energy=energy,
    )


class PitchDetector:
    """
    Single-pitch detector driven once per host tick.

    The detector is a plain object owned by whoever drives detection. It
    keeps pre-sized window and lag buffers between cycles and holds the last
    published estimate in its emitter.
    """

    def __init__(
        self,
        config: DetectionConfig | None = None,
        reference: float = A4_REFERENCE,
        method: str = "direct",
    ):
        """
        Initialize detector.

        Args:
            config: Detection settings (defaults if None)
            reference: Frequency of A4 in Hz
            method: Autocorrelation method, "direct" or "fft"
        """
        self.config = (config if config is not None else DetectionConfig()).validate()
        self.reference = reference

        self._windower = Windower(self.config.window_length, self.config.downmix)
        self._autocorrelator = Autocorrelator(self.config.window_length, method)
        self._emitter = PitchEmitter(self.config.suppress_change_filtering)

    @property
    def current(self) -> PitchEstimate:
        """Last published estimate."""
        return self._emitter.current

    @property
    def window_length(self) -> int:
        return self.config.window_length

    def connect(self, callback: PitchCallback):
        """Call ``callback(estimate)`` whenever a new estimate is published."""
        self._emitter.connect(callback)

    def disconnect(self, callback: PitchCallback):
        self._emitter.disconnect(callback)

    def process(self, block: np.ndarray, sample_rate: float | None = None) -> PitchEstimate | None:
        """
        Run one detection cycle on a block of frames.

        Args:
            block: ``(N,)`` mono samples or ``(N, channels)`` frames
            sample_rate: Sample rate in Hz (config fallback if None)

        Returns:
            The computed estimate, or None if the cycle was skipped because
            the block holds fewer than window_length frames
        """
        block = np.asarray(block)
        window_length = self.config.window_length

        if block.size == 0:
            logger.debug("Skipping empty block")
            return None
        if block.shape[0] < window_length:
            logger.debug(f"Skipping cycle: {block.shape[0]} of {window_length} frames available")
            return None

        if sample_rate is None:
            sample_rate = self.config.sample_rate

        window = self._windower.process(block[:window_length])
        estimate = estimate_pitch(
            window,
            sample_rate,
            self.config.min_frequency,
            self.config.max_frequency,
            self.config.noise_threshold,
            reference=self.reference,
            autocorrelator=self._autocorrelator,
        )
        self._emitter.offer(estimate)
        return estimate

    def tick(self, source: FrameSource) -> PitchEstimate | None:
        """
        Pull one window from a frame source and process it.

        Nothing is read unless a whole window is available.
        """
        if source.frames_available() < self.config.window_length:
            return None

        block = source.read(self.config.window_length)
        sample_rate = getattr(source, "sample_rate", None) or self.config.sample_rate
        return self.process(block, sample_rate)

    def reset(self):
        """Forget the held estimate."""
        self._emitter.reset()

    def set_config(self, config: DetectionConfig) -> bool:
        """
        Replace the whole configuration.

        Invalid configurations are rejected with a logged diagnostic and the
        previous configuration stays in effect.

        Returns:
            True if the configuration was applied
        """
        try:
            config.validate()
        except InvalidConfigurationError as e:
            logger.error(str(e))
            return False

        if config.window_length != self._windower.window_length:
            self._windower.resize(config.window_length)
            self._autocorrelator.resize(config.window_length)
        self._windower.set_downmix(config.downmix)
        self._emitter.suppress_change_filtering = config.suppress_change_filtering
        self.config = config
        return True

    def _update(self, **changes) -> bool:
        return self.set_config(dataclasses.replace(self.config, **changes))

    def set_window_length(self, window_length: int) -> bool:
        """Set the number of samples per analysis window."""
        return self._update(window_length=int(window_length))

    def set_min_frequency(self, frequency: float) -> bool:
        """Set the lowest detectable frequency; must be > 0 and < max frequency."""
        return self._update(min_frequency=frequency)

    def set_max_frequency(self, frequency: float) -> bool:
        """Set the highest detectable frequency; must be > min frequency."""
        return self._update(max_frequency=frequency)

    def set_noise_threshold(self, threshold: float) -> bool:
        """
        Set the noise threshold.

        When the energy of a window is at or below the threshold the detector
        reports no pitch.
        """
        return self._update(noise_threshold=threshold)

    def set_suppress_change_filtering(self, suppress: bool) -> bool:
        """Publish every estimate, not just those whose frequency changed."""
        return self._update(suppress_change_filtering=bool(suppress))

    def set_source(self, source: str) -> bool:
        """Set the audio source selector. The detector never resolves it."""
        return self._update(source=source)

    def set_downmix(self, downmix: Downmix) -> bool:
        return self._update(downmix=downmix)

    def set_reference(self, reference: float) -> bool:
        """Set the frequency of A4 used for note names and cents."""
        if reference <= 0:
            logger.error(f"Invalid reference: {reference}. Must be > 0.")
            return False
        self.reference = reference
        return True
