"""Two-pass error diffusion over a QR cell grid.

Pass 1 spreads the error of every fixed Data cell symmetrically to its eight
neighbours, so the surrounding Free cells compensate for it. Pass 2 is a
Floyd-Steinberg walk over the Free cells only, with the kernel renormalized
to whichever forward neighbours are themselves Free.
"""

from __future__ import annotations

import numpy as np

from dithered_qr.core.grid import CellGrid, CellType

# (dx, dy, weight) for the symmetric Data-cell kernel, weights out of 16
DATA_KERNEL: tuple[tuple[int, int, float], ...] = (
    (1, 0, 3 / 16),
    (-1, 0, 3 / 16),
    (0, 1, 3 / 16),
    (0, -1, 3 / 16),
    (1, 1, 1 / 16),
    (-1, 1, 1 / 16),
    (1, -1, 1 / 16),
    (-1, -1, 1 / 16),
)

# (dx, dy, weight) for the forward Free-cell kernel: E, SW, S, SE
FREE_KERNEL: tuple[tuple[int, int, float], ...] = (
    (1, 0, 7.0),
    (-1, 1, 3.0),
    (0, 1, 5.0),
    (1, 1, 1.0),
)

THRESHOLD = 0.5


def _in_bounds(x: int, y: int, size: int) -> bool:
    return 0 <= x < size and 0 <= y < size


def _free_neighbour(grid: CellGrid, x: int, y: int) -> tuple[int, int] | None:
    """Return (x, y) if it is an in-bounds Free cell, else None."""
    if not _in_bounds(x, y, grid.size):
        return None
    if grid.types[y, x] != CellType.FREE:
        return None
    return x, y


def bump_target(targets: np.ndarray, x: int, y: int, error: float) -> None:
    """Subtract error from targets[y, x] and clamp to [0, 1]. Out of range is a no-op."""
    h, w = targets.shape
    if 0 <= x < w and 0 <= y < h:
        value = targets[y, x] - error
        targets[y, x] = min(1.0, max(0.0, value))


def _quantization_error(is_black: bool, target: float) -> float:
    actual = 0.0 if is_black else 1.0
    return actual - target


def diffuse_data_cells(grid: CellGrid, targets: np.ndarray) -> None:
    """Pass 1: bias neighbour targets by each Data cell's fixed color.

    Writes land on neighbours of any type; only those on Free cells matter
    later, but every write is still clamped.
    """
    size = grid.size
    for y in range(size):
        for x in range(size):
            if grid.types[y, x] != CellType.DATA:
                continue

            error = _quantization_error(bool(grid.colors[y, x]), float(targets[y, x]))
            for dx, dy, weight in DATA_KERNEL:
                bump_target(targets, x + dx, y + dy, error * weight)


def dither_free_cells(grid: CellGrid, targets: np.ndarray) -> None:
    """Pass 2: threshold each Free cell and push its error forward.

    A target of exactly 0.5 resolves to white. When none of the forward
    neighbours is Free the error is dropped.
    """
    size = grid.size
    for y in range(size):
        for x in range(size):
            if grid.types[y, x] != CellType.FREE:
                continue

            target = float(targets[y, x])
            is_black = target < THRESHOLD
            grid.colors[y, x] = is_black
            error = _quantization_error(is_black, target)

            participants = []
            for dx, dy, weight in FREE_KERNEL:
                pos = _free_neighbour(grid, x + dx, y + dy)
                if pos is not None:
                    participants.append((pos, weight))

            total = sum(weight for _, weight in participants)
            if total == 0:
                continue

            for (nx, ny), weight in participants:
                bump_target(targets, nx, ny, error * weight / total)


def apply_dithering(grid: CellGrid, targets: np.ndarray) -> None:
    """Run both passes in place. Pass 2 starts only after pass 1 has finished.

    Raises:
        ValueError: targets and grid shapes differ.
    """
    if targets.shape != grid.shape:
        raise ValueError(
            f"Target grid shape {targets.shape} does not match cell grid {grid.shape}"
        )

    diffuse_data_cells(grid, targets)
    dither_free_cells(grid, targets)
