"""Tests for QR module matrix generation."""

import numpy as np
import pytest

from dithered_qr.core.matrix import (
    EncodingError,
    ErrorCorrection,
    generate_qr_matrix,
)


class TestErrorCorrection:
    def test_values(self):
        assert [e.value for e in ErrorCorrection] == ["L", "M", "Q", "H"]

    def test_from_string(self):
        assert ErrorCorrection("Q") is ErrorCorrection.Q

    def test_invalid(self):
        with pytest.raises(ValueError):
            ErrorCorrection("X")


class TestGenerateQrMatrix:
    def test_version_1_shape(self):
        matrix = generate_qr_matrix("TEST", ErrorCorrection.L)
        assert matrix.shape == (21, 21)
        assert matrix.dtype == bool

    def test_no_quiet_zone(self):
        """Top-left finder starts at the very first module."""
        matrix = generate_qr_matrix("TEST")
        assert matrix[0, :7].all()
        assert matrix[:7, 0].all()
        # Separator row/column around the finder is light
        assert not matrix[7, :8].any()
        assert not matrix[:8, 7].any()

    def test_timing_pattern_alternates(self):
        matrix = generate_qr_matrix("TEST")
        row = matrix[6, 8:13]
        assert list(row) == [True, False, True, False, True]

    def test_deterministic(self):
        a = generate_qr_matrix("hello world", "M")
        b = generate_qr_matrix("hello world", ErrorCorrection.M)
        assert np.array_equal(a, b)

    def test_lowercase_level(self):
        matrix = generate_qr_matrix("TEST", "h")
        assert matrix.shape[0] == matrix.shape[1]

    def test_higher_level_grows_symbol(self):
        text = "https://example.com/some/longer/path?with=query"
        low = generate_qr_matrix(text, "L")
        high = generate_qr_matrix(text, "H")
        assert high.shape[0] > low.shape[0]

    def test_unknown_level(self):
        with pytest.raises(ValueError) as exc:
            generate_qr_matrix("TEST", "Z")
        assert not isinstance(exc.value, EncodingError)

    def test_payload_too_long(self):
        with pytest.raises(EncodingError, match="too long"):
            generate_qr_matrix("a" * 5000, ErrorCorrection.H)

    def test_encoding_error_is_value_error(self):
        assert issubclass(EncodingError, ValueError)

    def test_payload_too_long_message(self):
        with pytest.raises(EncodingError) as exc:
            generate_qr_matrix("a" * 5000, "L")
        assert "level L" in str(exc.value)
        assert "Invalid version" not in str(exc.value)
