"""Decode check of a rendered code using OpenCV's QRCodeDetector."""

from __future__ import annotations

import cv2
import numpy as np
from PIL import Image, ImageOps

# Modules of white margin scanners expect around the symbol
DEFAULT_QUIET_ZONE = 4


def add_quiet_zone(img: Image.Image, border_px: int) -> Image.Image:
    """Pad the image with a white border of border_px pixels."""
    if border_px <= 0:
        return img
    return ImageOps.expand(img.convert("RGB"), border=border_px, fill=(255, 255, 255))


def decode_image(img: Image.Image, quiet_zone_px: int = 0) -> tuple[str | None, bool]:
    """Try to decode a QR code from a PIL image.

    Returns:
        (decoded_text, ok). decoded_text is None when nothing was decoded.
    """
    padded = add_quiet_zone(img, quiet_zone_px)
    rgb = np.array(padded.convert("RGB"), dtype=np.uint8)
    bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)

    detector = cv2.QRCodeDetector()
    data, points, _ = detector.detectAndDecode(bgr)

    if points is None or not data:
        return None, False
    return data, True


def verify_image(
    img: Image.Image,
    expected: str,
    module_px: int,
    quiet_zone: int = DEFAULT_QUIET_ZONE,
) -> bool:
    """Check that the image decodes back to the expected payload.

    Args:
        img: rendered output (no quiet zone).
        expected: payload that was encoded.
        module_px: output pixels per QR module (ratio * upscale).
        quiet_zone: margin width in modules.
    """
    decoded, ok = decode_image(img, quiet_zone_px=quiet_zone * module_px)
    return bool(ok and decoded == expected)
