"""Source image → per-cell luminance targets.

Resize → grayscale → gamma → contrast/brightness → clamp.
"""

from __future__ import annotations

import numpy as np
from PIL import Image


def _resize_to_grid(img: Image.Image, size: int) -> Image.Image:
    """Resample to exactly size x size cells with a non-aliasing filter."""
    return img.convert("RGB").resize((size, size), Image.Resampling.LANCZOS)


# Rec. 709 luma weights (R, G, B, offset)
LUMA_709 = (0.2126, 0.7152, 0.0722, 0.0)


def _to_grayscale(img: Image.Image) -> np.ndarray:
    """Convert RGB to Rec. 709 luma as a float array in [0.0, 1.0]."""
    return np.array(img.convert("L", LUMA_709), dtype=np.float64) / 255.0


def adjust_targets(
    gray: np.ndarray, gamma: float, contrast: float, brightness: float
) -> np.ndarray:
    """Apply gamma, then contrast (multiplier) and brightness (offset).

    Unlike a display adjustment, contrast here scales around 0 rather than
    the midpoint: adjusted = gray ** gamma * contrast + brightness.
    """
    result = np.power(gray, gamma)
    result = result * contrast + brightness
    return np.clip(result, 0.0, 1.0)


def map_targets(
    img: Image.Image,
    size: int,
    gamma: float = 2.2,
    contrast: float = 1.0,
    brightness: float = 0.0,
) -> np.ndarray:
    """Build the size x size target grid (0 = want black, 1 = want white)."""
    gray = _to_grayscale(_resize_to_grid(img, size))
    return adjust_targets(gray, gamma, contrast, brightness)
