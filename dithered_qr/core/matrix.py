"""QR module matrix generation.

Thin wrapper around the qrcode library that returns the bare module grid
(no quiet zone) as a square boolean numpy array, True = dark module.
"""

from __future__ import annotations

from enum import Enum

import numpy as np
import qrcode
from qrcode.constants import (
    ERROR_CORRECT_H,
    ERROR_CORRECT_L,
    ERROR_CORRECT_M,
    ERROR_CORRECT_Q,
)
from qrcode.exceptions import DataOverflowError


class ErrorCorrection(str, Enum):
    L = "L"  # ~7%
    M = "M"  # ~15%
    Q = "Q"  # ~25%
    H = "H"  # ~30%

    @property
    def qrcode_constant(self) -> int:
        return _ECC_MAP[self]


_ECC_MAP = {
    ErrorCorrection.L: ERROR_CORRECT_L,
    ErrorCorrection.M: ERROR_CORRECT_M,
    ErrorCorrection.Q: ERROR_CORRECT_Q,
    ErrorCorrection.H: ERROR_CORRECT_H,
}


class EncodingError(ValueError):
    """Payload cannot be represented at the requested error-correction level."""


def generate_qr_matrix(
    text: str, error_correction: ErrorCorrection | str = ErrorCorrection.L
) -> np.ndarray:
    """Encode text and return its module matrix.

    Args:
        text: payload to encode.
        error_correction: one of L, M, Q, H (enum or string).

    Returns:
        Square 2D bool array indexed [y, x], True for dark modules.

    Raises:
        ValueError: unknown error-correction level.
        EncodingError: the payload does not fit in any QR version.
    """
    if isinstance(error_correction, ErrorCorrection):
        level = error_correction
    else:
        level = ErrorCorrection(error_correction.upper())

    qr = qrcode.QRCode(
        version=None,  # smallest version that fits
        error_correction=level.qrcode_constant,
        box_size=1,
        border=0,
    )
    qr.add_data(text)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        # qrcode 8 reports overflow as an out-of-range version (41)
        raise EncodingError(
            f"Failed to generate QR code: payload too long for level {level.value}"
        ) from e

    matrix = np.array(qr.get_matrix(), dtype=bool)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise EncodingError(f"Encoder returned a non-square matrix: {matrix.shape}")
    return matrix
