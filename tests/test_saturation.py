"""Tests for the saturation colour matrix and quantization policies."""

from __future__ import annotations

import numpy as np
import pytest

from heatmapper.blend import blend_images
from heatmapper.buffer import PixelBuffer
from heatmapper.errors import NonFiniteSample, NullBuffer
from heatmapper.saturation import (
    LUMA_WEIGHTS,
    ClampPolicy,
    apply_saturation,
    color_matrix,
    quantize,
    saturate,
)


def _row(*pixels) -> PixelBuffer:
    """A 1-pixel-high buffer from a list of RGB tuples."""
    return PixelBuffer(np.array([list(pixels)], dtype=np.uint8))


# ---------------------------------------------------------------------------
# Tests: matrix
# ---------------------------------------------------------------------------


class TestColorMatrix:
    def test_luma_weights_sum_to_one(self):
        assert sum(LUMA_WEIGHTS) == pytest.approx(1.0)

    def test_identity_at_one(self):
        assert np.array_equal(color_matrix(1.0), np.eye(3))

    def test_grey_projection_at_zero(self):
        m = color_matrix(0.0)
        for row in m:
            np.testing.assert_allclose(row, LUMA_WEIGHTS, atol=1e-12)

    def test_rows_sum_to_one(self):
        # grey inputs stay grey for every factor
        for s in (-2.0, 0.0, 0.5, 1.0, 3.0):
            np.testing.assert_allclose(color_matrix(s).sum(axis=1), [1.0, 1.0, 1.0], atol=1e-12)

    def test_coefficients_half(self):
        m = color_matrix(0.5)
        expected = [
            [0.6543, 0.3047, 0.0410],
            [0.1543, 0.8047, 0.0410],
            [0.1543, 0.3047, 0.5410],
        ]
        np.testing.assert_allclose(m, expected, atol=1e-12)


# ---------------------------------------------------------------------------
# Tests: transform
# ---------------------------------------------------------------------------


class TestApplySaturation:
    def test_identity_leaves_pixels(self):
        rng = np.random.RandomState(11)
        buf = PixelBuffer(rng.randint(0, 256, (6, 5, 3), dtype=np.uint8))
        out = apply_saturation(buf, 1.0)
        np.testing.assert_allclose(out, buf.pixels.astype(np.float64), atol=1e-9)
        assert saturate(buf, 1.0) == buf

    def test_zero_gives_luma(self):
        buf = _row((100, 150, 200), (255, 0, 0))
        out = apply_saturation(buf, 0.0)
        luma0 = 0.3086 * 100 + 0.6094 * 150 + 0.0820 * 200
        luma1 = 0.3086 * 255
        np.testing.assert_allclose(out[0, 0], [luma0] * 3, atol=1e-9)
        np.testing.assert_allclose(out[0, 1], [luma1] * 3, atol=1e-9)

    def test_returns_float_unclamped(self):
        out = apply_saturation(_row((200, 50, 10)), 4.0)
        assert out.dtype == np.float64
        np.testing.assert_allclose(out[0, 0], [520.97, -79.03, -239.03], atol=1e-9)

    def test_grey_is_fixed_point(self):
        out = apply_saturation(_row((77, 77, 77)), 2.5)
        np.testing.assert_allclose(out[0, 0], [77.0, 77.0, 77.0], atol=1e-9)

    def test_does_not_mutate_input(self):
        buf = _row((10, 20, 30))
        apply_saturation(buf, 0.0)
        assert buf.pixel(0, 0) == (10, 20, 30)

    def test_missing_buffer(self):
        with pytest.raises(NullBuffer):
            apply_saturation(None, 0.5)
        with pytest.raises(NullBuffer):
            saturate(None, 0.5)

    def test_overflowing_factor_gives_signed_infinity(self):
        out = apply_saturation(_row((200, 50, 10)), 1e307)
        assert not np.isnan(out).any()
        assert out[0, 0, 0] == np.inf
        assert out[0, 0, 1] == -np.inf
        assert out[0, 0, 2] == -np.inf


# ---------------------------------------------------------------------------
# Tests: quantization boundary
# ---------------------------------------------------------------------------


class TestQuantize:
    def test_truncates_toward_zero(self):
        out = quantize(np.array([[[1.9, 254.99, 0.4]]]))
        assert out.pixel(0, 0) == (1, 254, 0)

    def test_clip_extreme_factor(self):
        out = saturate(_row((200, 50, 10)), 4.0, ClampPolicy.CLIP)
        assert out.pixel(0, 0) == (255, 0, 0)

    def test_wrap_extreme_factor(self):
        # 520 -> 8, -79 -> 177, -239 -> 17
        out = saturate(_row((200, 50, 10)), 4.0, ClampPolicy.WRAP)
        assert out.pixel(0, 0) == (8, 177, 17)

    def test_negative_factor_stays_in_range(self):
        out = saturate(_row((255, 0, 0), (0, 255, 0), (0, 0, 255)), -1.0)
        assert out.pixels.dtype == np.uint8
        assert out.size == (3, 1)

    def test_policy_accepts_string(self):
        out = quantize(np.array([[[300.0, -1.0, 5.0]]]), "wrap")
        assert out.pixel(0, 0) == (44, 255, 5)

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            quantize(np.zeros((1, 1, 3)), "round")

    def test_non_finite_rejected(self):
        with pytest.raises(ValueError):
            quantize(np.array([[[np.nan, 0.0, 0.0]]]))

    def test_nan_is_heatmapper_error(self):
        with pytest.raises(NonFiniteSample):
            quantize(np.array([[[np.nan, 0.0, 0.0]]]))

    def test_clip_resolves_infinity(self):
        out = quantize(np.array([[[np.inf, -np.inf, 12.5]]]))
        assert out.pixel(0, 0) == (255, 0, 12)

    def test_clip_overflowing_factor(self):
        assert saturate(_row((200, 50, 10)), 1e307).pixel(0, 0) == (255, 0, 0)
        assert saturate(_row((200, 50, 10)), -1e307).pixel(0, 0) == (0, 255, 255)

    def test_wrap_rejects_infinity(self):
        with pytest.raises(NonFiniteSample):
            saturate(_row((200, 50, 10)), 1e307, ClampPolicy.WRAP)

    def test_wrap_large_finite_keeps_low_bits(self):
        out = quantize(np.array([[[2.0 ** 40 + 300, -1.0, 5.0]]]), "wrap")
        assert out.pixel(0, 0) == (44, 255, 5)


# ---------------------------------------------------------------------------
# Tests: blend followed by saturation
# ---------------------------------------------------------------------------


class TestEndToEndReference:
    """Three 2x1 images blended in order, then saturated with s = 0.5."""

    images = [
        [(200, 100, 50), (10, 20, 33)],
        [(0, 0, 0), (40, 60, 90)],
        [(90, 30, 255), (0, 255, 0)],
    ]

    def test_reference_output(self):
        blended = blend_images([_row(*px) for px in self.images])
        assert blended.pixel(0, 0) == (96, 43, 101)
        assert blended.pixel(1, 0) == (16, 111, 40)

        samples = apply_saturation(blended, 0.5)
        expected = np.array([[
            [80.0559, 53.5559, 82.5559],
            [45.9305, 93.4305, 57.9305],
        ]])
        np.testing.assert_allclose(samples, expected, atol=1e-9)

        final = quantize(samples)
        assert final.pixel(0, 0) == (80, 53, 82)
        assert final.pixel(1, 0) == (45, 93, 57)
