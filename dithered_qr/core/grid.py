"""Cell grid construction.

Each QR module is subdivided into a ratio x ratio block of cells. Cells in
structural patterns are Locked, the center cell of every other module is its
Data cell, and the rest are Free for the dithering engine to decide.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class CellType(IntEnum):
    LOCKED = 0
    DATA = 1
    FREE = 2


@dataclass(frozen=True)
class Cell:
    """A single cell view: color (True = black) and type."""

    is_black: bool
    cell_type: CellType


@dataclass
class CellGrid:
    """Square grid of cells stored as parallel numpy arrays.

    colors: bool array, True = black.
    types: uint8 array of CellType values.
    """

    colors: np.ndarray
    types: np.ndarray
    ratio: int
    module_count: int

    @property
    def size(self) -> int:
        return self.colors.shape[0]

    @property
    def shape(self) -> tuple[int, int]:
        return self.colors.shape

    def cell(self, x: int, y: int) -> Cell:
        return Cell(
            is_black=bool(self.colors[y, x]),
            cell_type=CellType(int(self.types[y, x])),
        )

    def mask(self, cell_type: CellType) -> np.ndarray:
        """Boolean mask of cells with the given type."""
        return self.types == cell_type


def is_locked_position(x: int, y: int, size: int) -> bool:
    """Whether module (x, y) of a size x size symbol is a structural pattern."""
    # Timing patterns
    if x == 6 or y == 6:
        return True

    # Finder patterns (plus separators)
    if x < 8 and y < 8:
        return True
    if x > size - 9 and y < 8:
        return True
    if y > size - 9 and x < 8:
        return True

    # Alignment pattern near the bottom-right corner
    if size >= 25 and size - 10 < x < size - 4 and size - 10 < y < size - 4:
        return True

    return False


def locked_mask(size: int) -> np.ndarray:
    """Vectorized is_locked_position over a whole module grid, indexed [y, x]."""
    y, x = np.indices((size, size))

    mask = (x == 6) | (y == 6)
    mask |= (x < 8) & (y < 8)
    mask |= (x > size - 9) & (y < 8)
    mask |= (y > size - 9) & (x < 8)
    if size >= 25:
        mask |= (
            (x > size - 10) & (x < size - 4) & (y > size - 10) & (y < size - 4)
        )
    return mask


def build_grid(matrix: np.ndarray, ratio: int) -> CellGrid:
    """Expand a module matrix into a cell grid of side len(matrix) * ratio.

    Every cell is a pure function of its coordinates and the matrix, so the
    whole grid is computed as array operations rather than a cell loop.
    The ratio is expected to be odd; validation happens in Settings.
    """
    modules = np.asarray(matrix, dtype=bool)
    if modules.ndim != 2 or modules.shape[0] != modules.shape[1]:
        raise ValueError(f"QR matrix must be square, got shape {modules.shape}")

    qr_size = modules.shape[0]
    big_size = qr_size * ratio
    center = ratio // 2

    # Map big grid -> owning module
    colors = np.repeat(np.repeat(modules, ratio, axis=0), ratio, axis=1)
    locked = np.repeat(np.repeat(locked_mask(qr_size), ratio, axis=0), ratio, axis=1)

    # Map big grid -> sub-position within the module
    sub_y, sub_x = np.indices((big_size, big_size)) % ratio
    is_center = (sub_x == center) & (sub_y == center)

    types = np.full((big_size, big_size), CellType.FREE, dtype=np.uint8)
    types[is_center] = CellType.DATA
    types[locked] = CellType.LOCKED

    if colors.shape != (big_size, big_size) or types.shape != colors.shape:
        raise ValueError(
            f"Failed to construct cell grid: expected {big_size}x{big_size}, "
            f"got {colors.shape}"
        )

    return CellGrid(colors=colors, types=types, ratio=ratio, module_count=qr_size)
