"""Tests for frame sources. No real audio device is opened."""

import logging

import numpy as np
import pytest

from autocorr_tuner.audio_input import MicrophoneSource, RingBufferSource, list_input_devices
from autocorr_tuner.detector import PitchDetector
from autocorr_tuner.errors import AudioSourceUnavailableError


class FakeStream:
    def __init__(self, samplerate, callback, fail=False, fail_stop=False, **kwargs):
        self.samplerate = samplerate
        self.callback = callback
        self.kwargs = kwargs
        self.fail = fail
        self.fail_stop = fail_stop
        self.started = False
        self.closed = False

    def start(self):
        if self.fail:
            raise RuntimeError("Error opening InputStream")
        self.started = True

    def stop(self):
        if self.fail_stop:
            raise RuntimeError("Error stopping stream")
        self.started = False

    def close(self):
        self.closed = True


class FakeSoundDevice:
    """Stands in for the sounddevice module."""

    def __init__(self, devices=None, fail=False, fail_stop=False):
        self.devices = devices if devices is not None else [
            {"name": "Speakers", "max_input_channels": 0},
            {"name": "USB Microphone", "max_input_channels": 2},
        ]
        self.fail = fail
        self.fail_stop = fail_stop
        self.stream = None

    def query_devices(self):
        return self.devices

    def InputStream(self, samplerate, callback, **kwargs):
        self.stream = FakeStream(
            samplerate, callback, fail=self.fail, fail_stop=self.fail_stop, **kwargs
        )
        return self.stream


class TestRingBufferSource:
    """Tests for the thread-safe frame ring."""

    def setup_method(self):
        self.source = RingBufferSource(capacity=8, channels=1)

    def test_starts_empty(self):
        assert self.source.frames_available() == 0
        assert self.source.read(4).shape == (0, 1)

    def test_read_in_order(self):
        self.source.write(np.arange(5))
        assert self.source.frames_available() == 5
        np.testing.assert_array_equal(self.source.read(3)[:, 0], [0, 1, 2])
        np.testing.assert_array_equal(self.source.read(3)[:, 0], [3, 4])
        assert self.source.frames_available() == 0

    def test_wrap_around(self):
        self.source.write(np.arange(6))
        self.source.read(5)
        self.source.write(np.arange(10, 16))
        assert self.source.frames_available() == 7
        np.testing.assert_array_equal(self.source.read(7)[:, 0], [5, 10, 11, 12, 13, 14, 15])

    def test_overflow_drops_oldest(self, caplog):
        self.source.write(np.arange(6))
        with caplog.at_level(logging.WARNING, logger="autocorr_tuner.audio_input"):
            self.source.write(np.arange(10, 14))
        assert self.source.frames_available() == 8
        assert self.source.dropped_frames == 2
        np.testing.assert_array_equal(self.source.read(8)[:, 0], [2, 3, 4, 5, 10, 11, 12, 13])
        assert "overflow" in caplog.text

    def test_block_larger_than_capacity(self):
        self.source.write(np.arange(20))
        np.testing.assert_array_equal(self.source.read(8)[:, 0], np.arange(12, 20))

    def test_multichannel(self):
        source = RingBufferSource(capacity=4, channels=2)
        source.write(np.array([[1.0, -1.0], [2.0, -2.0]]))
        np.testing.assert_array_equal(source.read(2), [[1.0, -1.0], [2.0, -2.0]])

    def test_channel_mismatch(self):
        with pytest.raises(ValueError):
            self.source.write(np.zeros((4, 2)))

    def test_clear(self):
        self.source.write(np.arange(4))
        self.source.clear()
        assert self.source.frames_available() == 0

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            RingBufferSource(capacity=0)


class TestMicrophoneSource:
    """MicrophoneSource wired to a fake sounddevice backend."""

    def test_list_input_devices(self):
        devices = list_input_devices(FakeSoundDevice())
        assert [d["name"] for d in devices] == ["USB Microphone"]
        assert devices[0]["index"] == 1

    def test_start_and_capture(self):
        backend = FakeSoundDevice()
        source = MicrophoneSource(sample_rate=44100, channels=2, capacity=64, backend=backend)
        source.start()

        assert source.running
        assert backend.stream.started
        assert backend.stream.kwargs["channels"] == 2
        assert source.sample_rate == 44100

        indata = np.ones((16, 2), dtype=np.float32)
        backend.stream.callback(indata, 16, None, None)
        assert source.frames_available() == 16

        source.stop()
        assert not source.running
        assert backend.stream.closed

    def test_context_manager(self):
        backend = FakeSoundDevice()
        with MicrophoneSource(backend=backend) as source:
            assert source.running
        assert backend.stream.closed

    def test_no_input_devices(self, caplog):
        backend = FakeSoundDevice(devices=[{"name": "Speakers", "max_input_channels": 0}])
        source = MicrophoneSource(backend=backend)
        with caplog.at_level(logging.ERROR, logger="autocorr_tuner.audio_input"):
            with pytest.raises(AudioSourceUnavailableError):
                source.start()
        assert not source.running
        assert "No input devices" in caplog.text

    def test_stream_failure(self):
        backend = FakeSoundDevice(fail=True)
        source = MicrophoneSource(backend=backend)
        with pytest.raises(AudioSourceUnavailableError, match="InputStream"):
            source.start()
        assert not source.running
        assert backend.stream.closed

    def test_stop_failure_still_closes(self):
        backend = FakeSoundDevice(fail_stop=True)
        source = MicrophoneSource(backend=backend)
        source.start()
        with pytest.raises(RuntimeError, match="stopping"):
            source.stop()
        assert backend.stream.closed
        assert not source.running

    def test_status_logged(self, caplog):
        backend = FakeSoundDevice()
        source = MicrophoneSource(channels=1, backend=backend)
        source.start()
        with caplog.at_level(logging.WARNING, logger="autocorr_tuner.audio_input"):
            backend.stream.callback(np.zeros((4, 1), dtype=np.float32), 4, None, "input overflow")
        assert "input overflow" in caplog.text
        source.stop()

    def test_detector_reads_from_microphone(self):
        backend = FakeSoundDevice()
        source = MicrophoneSource(sample_rate=48000, channels=2, capacity=4096, backend=backend)
        source.start()

        t = np.arange(2048) / 48000
        mono = 0.5 * np.sin(2 * np.pi * 440.0 * t)
        indata = np.column_stack([mono, mono]).astype(np.float32)
        for start in range(0, 2048, 512):
            backend.stream.callback(indata[start : start + 512], 512, None, None)

        detector = PitchDetector()
        estimate = detector.tick(source)
        assert estimate.note == "A4"
        source.stop()
