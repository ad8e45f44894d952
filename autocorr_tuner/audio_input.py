"""
Frame sources feeding the detector.

The detector pulls whole windows from a ``FrameSource``. ``RingBufferSource``
collects frames pushed by a producer (typically an audio callback running on
another thread); ``MicrophoneSource`` wires such a ring to a sounddevice
input stream.
"""

import logging
import threading
from typing import Any, Protocol

import numpy as np

from .constants import SAMPLE_RATE
from .errors import AudioSourceUnavailableError

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    """Anything that can hand out sample frames on demand."""

    sample_rate: float

    def frames_available(self) -> int: ...

    def read(self, frames: int) -> np.ndarray: ...


class RingBufferSource:
    """
    Thread-safe ring of ``(frames, channels)`` samples.

    A single producer calls ``write()`` and a single consumer calls
    ``read()``. When the ring is full the oldest frames are dropped.
    """

    def __init__(self, capacity: int, channels: int = 1, sample_rate: float = SAMPLE_RATE):
        """
        Initialize ring buffer.

        Args:
            capacity: Maximum number of frames held
            channels: Channels per frame
            sample_rate: Sample rate of the written frames in Hz
        """
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.channels = channels
        self.sample_rate = sample_rate

        self._ring = np.zeros((capacity, channels), dtype=np.float32)
        self._start = 0  # Index of the oldest frame
        self._count = 0
        self._lock = threading.Lock()
        self.dropped_frames = 0

    def frames_available(self) -> int:
        with self._lock:
            return self._count

    def write(self, block: np.ndarray):
        """Append frames; a 1-D block is treated as mono."""
        block = np.asarray(block, dtype=np.float32)
        if block.ndim == 1:
            block = block[:, np.newaxis]
        if block.shape[1] != self.channels:
            raise ValueError(f"Expected {self.channels} channels, got {block.shape[1]}")

        if len(block) > self.capacity:
            block = block[-self.capacity :]

        with self._lock:
            overflow = self._count + len(block) - self.capacity
            if overflow > 0:
                self._start = (self._start + overflow) % self.capacity
                self._count -= overflow
                self.dropped_frames += overflow

            end = (self._start + self._count) % self.capacity
            first = min(len(block), self.capacity - end)
            self._ring[end : end + first] = block[:first]
            self._ring[: len(block) - first] = block[first:]
            self._count += len(block)

        if overflow > 0:
            logger.warning(f"Input ring overflow, dropped {overflow} frames")

    def read(self, frames: int) -> np.ndarray:
        """
        Remove and return up to ``frames`` of the oldest frames.

        Returns:
            Array of shape ``(n, channels)`` with n <= frames
        """
        with self._lock:
            n = min(frames, self._count)
            idx = (self._start + np.arange(n)) % self.capacity
            out = self._ring[idx]
            self._start = (self._start + n) % self.capacity
            self._count -= n
        return out

    def clear(self):
        with self._lock:
            self._start = 0
            self._count = 0


def _load_sounddevice():
    import sounddevice

    return sounddevice


def list_input_devices(backend: Any = None) -> list[dict]:
    """
    Input-capable audio devices.

    Args:
        backend: Module exposing ``query_devices()`` (defaults to sounddevice)

    Returns:
        Device info mappings, each with an added ``index`` key
    """
    sd = backend if backend is not None else _load_sounddevice()
    devices = []
    for index, device in enumerate(sd.query_devices()):
        if device.get("max_input_channels", 0) > 0:
            info = dict(device)
            info["index"] = index
            devices.append(info)
            logger.info(f"Input Device: {info.get('name', index)}")
    return devices


class MicrophoneSource(RingBufferSource):
    """
    Microphone input captured through a sounddevice ``InputStream``.

    The stream callback runs on the audio thread and only copies frames into
    the ring; detection happens wherever ``read()`` is called.
    """

    def __init__(
        self,
        device: int | str | None = None,
        sample_rate: float = SAMPLE_RATE,
        channels: int = 2,
        capacity: int = 16384,
        blocksize: int = 0,
        backend: Any = None,
    ):
        """
        Initialize microphone source.

        Args:
            device: sounddevice device id or name (None = default input)
            sample_rate: Requested sample rate in Hz
            channels: Channels to capture
            capacity: Ring size in frames
            blocksize: Frames per callback (0 = let PortAudio choose)
            backend: sounddevice-compatible module, mainly for tests
        """
        super().__init__(capacity, channels, sample_rate)
        self.device = device
        self.blocksize = blocksize
        self._backend = backend
        self._stream = None

    @property
    def running(self) -> bool:
        return self._stream is not None

    def start(self):
        """Open and start the input stream."""
        if self._stream is not None:
            logger.warning("Microphone source is already running")
            return

        try:
            sd = self._backend if self._backend is not None else _load_sounddevice()
        except OSError as e:
            raise AudioSourceUnavailableError(f"Audio backend unavailable: {e}") from e
        self._backend = sd

        if not list_input_devices(sd):
            logger.error("No input devices available.")
            raise AudioSourceUnavailableError("No input devices available.")

        stream = None
        try:
            stream = sd.InputStream(
                device=self.device,
                samplerate=self.sample_rate,
                blocksize=self.blocksize,
                channels=self.channels,
                dtype="float32",
                callback=self._audio_callback,
            )
            stream.start()
        except Exception as e:
            logger.error(f"Failed to open audio input: {e}")
            if stream is not None:
                stream.close()
            raise AudioSourceUnavailableError(f"Failed to open audio input: {e}") from e

        self._stream = stream
        # The device may not honour the requested rate
        self.sample_rate = float(getattr(stream, "samplerate", self.sample_rate))
        logger.info(f"Audio input started at {self.sample_rate:.0f} Hz, {self.channels} channels")

    def stop(self):
        """Stop and close the input stream."""
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        try:
            stream.stop()
        finally:
            stream.close()
        logger.info("Audio input stopped")

    def _audio_callback(self, indata, frames, time, status):
        """Audio callback - copy incoming frames into the ring."""
        if status:
            logger.warning(f"Audio status: {status}")
        self.write(indata[:frames])

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
