"""Dithered QR pipeline.

Validate → encode → build grid → map targets → dither → render → upscale.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image

from dithered_qr.core.dither import apply_dithering
from dithered_qr.core.grid import CellGrid, build_grid
from dithered_qr.core.luminance import map_targets
from dithered_qr.core.matrix import ErrorCorrection, generate_qr_matrix
from dithered_qr.core.writer import render_grid, upscale


@dataclass(frozen=True)
class Settings:
    """Parameters that affect output."""

    ratio: int = 3  # odd, cells per module side
    gamma: float = 2.2
    contrast: float = 1.0  # multiplier
    brightness: float = 0.0  # offset
    error_correction: ErrorCorrection = ErrorCorrection.L
    upscale: int = 1

    def validate(self) -> None:
        """Reject settings that cannot produce a grid.

        Raises:
            ValueError: on the first invalid field.
        """
        if self.ratio < 1:
            raise ValueError(f"Ratio must be at least 1, got {self.ratio}")
        if self.ratio % 2 == 0:
            raise ValueError(f"Ratio must be odd, got {self.ratio}")
        if self.upscale < 1:
            raise ValueError(f"Upscale must be at least 1, got {self.upscale}")
        if self.gamma <= 0:
            raise ValueError(f"Gamma must be positive, got {self.gamma}")

    def output_size(self, module_count: int) -> int:
        """Side length in pixels of the final image."""
        return module_count * self.ratio * self.upscale


@dataclass
class DitherResult:
    """Everything produced by one run."""

    matrix: np.ndarray  # QR modules, True = dark
    grid: CellGrid
    targets: np.ndarray  # working target grid after both passes
    image: Image.Image  # rendered and upscaled

    @property
    def module_count(self) -> int:
        return self.matrix.shape[0]


def dither_matrix(
    matrix: np.ndarray, img: Image.Image, settings: Settings
) -> tuple[CellGrid, np.ndarray]:
    """Build the cell grid for a module matrix and dither it against an image."""
    settings.validate()
    grid = build_grid(matrix, settings.ratio)
    targets = map_targets(
        img,
        grid.size,
        gamma=settings.gamma,
        contrast=settings.contrast,
        brightness=settings.brightness,
    )
    apply_dithering(grid, targets)
    return grid, targets


def generate(text: str, img: Image.Image, settings: Settings | None = None) -> DitherResult:
    """Encode text and render it as a dithered QR code approximating img."""
    settings = settings or Settings()
    settings.validate()

    matrix = generate_qr_matrix(text, settings.error_correction)
    grid, targets = dither_matrix(matrix, img, settings)
    image = upscale(render_grid(grid), settings.upscale)

    return DitherResult(matrix=matrix, grid=grid, targets=targets, image=image)
