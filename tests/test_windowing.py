"""Tests for window down-mixing and tapering."""

import numpy as np
import pytest

from autocorr_tuner.errors import WindowLengthError
from autocorr_tuner.windowing import Downmix, Windower, hann_taper


class TestHannTaper:
    """Tests for the raised-cosine taper."""

    def test_zero_at_both_ends(self):
        taper = hann_taper(16)
        assert taper[0] == pytest.approx(0.0)
        assert taper[-1] == pytest.approx(0.0, abs=1e-12)

    def test_peak_in_the_middle(self):
        """Odd lengths reach exactly 1 at the center sample."""
        taper = hann_taper(9)
        assert taper[4] == pytest.approx(1.0)
        assert np.all(taper <= 1.0)

    def test_symmetric(self):
        taper = hann_taper(2048)
        np.testing.assert_allclose(taper, taper[::-1], atol=1e-12)

    def test_matches_formula(self):
        n = 5
        expected = [0.5 * (1 - np.cos(2 * np.pi * i / (n - 1))) for i in range(n)]
        np.testing.assert_allclose(hann_taper(n), expected)

    def test_length_one_rejected(self):
        """N == 1 would divide by zero."""
        with pytest.raises(WindowLengthError):
            hann_taper(1)


class TestWindower:
    """Tests for channel down-mix and tapering of sample blocks."""

    def setup_method(self):
        self.windower = Windower(8)
        self.taper = hann_taper(8)

    def test_mono_block(self):
        block = np.ones(8)
        np.testing.assert_allclose(self.windower.process(block), self.taper)

    def test_stereo_average(self):
        """Default down-mix averages left and right."""
        block = np.column_stack([np.full(8, 1.0), np.full(8, 0.5)])
        np.testing.assert_allclose(self.windower.process(block), 0.75 * self.taper)

    def test_stereo_ignores_extra_channels(self):
        block = np.column_stack([np.full(8, 1.0), np.full(8, 0.0), np.full(8, 9.0)])
        np.testing.assert_allclose(self.windower.process(block), 0.5 * self.taper)

    def test_single_column_block(self):
        block = np.full((8, 1), 0.5)
        np.testing.assert_allclose(self.windower.process(block), 0.5 * self.taper)

    def test_first_channel(self):
        self.windower.set_downmix(Downmix.FIRST_CHANNEL)
        block = np.column_stack([np.full(8, 1.0), np.full(8, -1.0)])
        np.testing.assert_allclose(self.windower.process(block), self.taper)

    def test_average_all(self):
        self.windower.set_downmix(Downmix.AVERAGE_ALL)
        block = np.column_stack([np.full(8, 1.0), np.full(8, 0.0), np.full(8, 2.0)])
        np.testing.assert_allclose(self.windower.process(block), self.taper)

    def test_float32_input(self):
        block = np.ones((8, 2), dtype=np.float32)
        window = self.windower.process(block)
        assert window.dtype == np.float64
        np.testing.assert_allclose(window, self.taper)

    def test_wrong_length_rejected(self):
        """The windower never pads or truncates."""
        with pytest.raises(WindowLengthError):
            self.windower.process(np.ones(7))
        with pytest.raises(WindowLengthError):
            self.windower.process(np.ones(9))

    def test_buffer_is_reused(self):
        first = self.windower.process(np.ones(8))
        second = self.windower.process(np.zeros(8))
        assert first is second
        assert np.all(second == 0.0)

    def test_input_not_modified(self):
        block = np.ones(8)
        self.windower.process(block)
        assert np.all(block == 1.0)

    def test_resize(self):
        self.windower.resize(16)
        assert self.windower.window_length == 16
        assert len(self.windower.process(np.ones(16))) == 16
