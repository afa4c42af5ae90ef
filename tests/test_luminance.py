"""Tests for the target luminance mapper."""

import numpy as np
import pytest
from PIL import Image

from dithered_qr.core.luminance import adjust_targets, map_targets


def _solid(color, size=(64, 48), mode="RGB"):
    return Image.new(mode, size, color)


class TestAdjustTargets:
    def test_identity(self):
        gray = np.linspace(0, 1, 25).reshape(5, 5)
        result = adjust_targets(gray, gamma=1.0, contrast=1.0, brightness=0.0)
        assert np.allclose(result, gray)

    def test_gamma_applied_before_contrast(self):
        gray = np.full((2, 2), 0.5)
        result = adjust_targets(gray, gamma=2.0, contrast=2.0, brightness=0.1)
        assert np.allclose(result, 0.5**2 * 2.0 + 0.1)

    def test_clamped_high(self):
        gray = np.full((3, 3), 0.8)
        result = adjust_targets(gray, gamma=1.0, contrast=1.0, brightness=5.0)
        assert np.all(result == 1.0)

    def test_clamped_low(self):
        gray = np.full((3, 3), 0.8)
        result = adjust_targets(gray, gamma=1.0, contrast=1.0, brightness=-5.0)
        assert np.all(result == 0.0)

    def test_negative_contrast_stays_in_range(self):
        gray = np.random.default_rng(1).random((10, 10))
        result = adjust_targets(gray, gamma=2.2, contrast=-3.0, brightness=0.5)
        assert result.min() >= 0.0
        assert result.max() <= 1.0


class TestMapTargets:
    def test_shape(self):
        targets = map_targets(_solid((10, 20, 30)), 63)
        assert targets.shape == (63, 63)

    def test_uniform_gray(self):
        targets = map_targets(_solid((128, 128, 128)), 21, gamma=1.0)
        assert np.allclose(targets, 128 / 255, atol=1 / 255)

    def test_gamma_default(self):
        targets = map_targets(_solid((128, 128, 128)), 21)
        assert np.allclose(targets, (128 / 255) ** 2.2, atol=0.01)

    @pytest.mark.parametrize(
        "color, weight",
        [((255, 0, 0), 0.2126), ((0, 255, 0), 0.7152), ((0, 0, 255), 0.0722)],
    )
    def test_rec709_luma(self, color, weight):
        targets = map_targets(_solid(color), 9, gamma=1.0)
        assert np.allclose(targets, weight, atol=1 / 255)

    def test_black_and_white(self):
        assert np.allclose(map_targets(_solid((0, 0, 0)), 9), 0.0)
        assert np.allclose(map_targets(_solid((255, 255, 255)), 9), 1.0)

    def test_brightness_shifts(self):
        img = _solid((100, 100, 100))
        base = map_targets(img, 9, gamma=1.0)
        brighter = map_targets(img, 9, gamma=1.0, brightness=0.2)
        assert np.allclose(brighter, base + 0.2)

    def test_accepts_other_modes(self):
        rgba = _solid((255, 255, 255, 0), mode="RGBA")
        gray = _solid(200, mode="L")
        assert map_targets(rgba, 9).shape == (9, 9)
        assert map_targets(gray, 9).shape == (9, 9)

    def test_range(self):
        rng = np.random.default_rng(2)
        noise = Image.fromarray(rng.integers(0, 256, (40, 40, 3), dtype=np.uint8))
        targets = map_targets(noise, 33, contrast=3.0, brightness=-0.4)
        assert targets.min() >= 0.0
        assert targets.max() <= 1.0

    def test_left_right_gradient_preserved(self):
        arr = np.zeros((30, 30, 3), dtype=np.uint8)
        arr[:, 15:] = 255
        targets = map_targets(Image.fromarray(arr), 10, gamma=1.0)
        assert targets[:, 0].max() < 0.1
        assert targets[:, -1].min() > 0.9
