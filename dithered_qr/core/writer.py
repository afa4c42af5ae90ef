"""Render a dithered cell grid to a black/white image and save it.

Output pixels are strictly (0, 0, 0) or (255, 255, 255); upscaling uses
nearest-neighbour replication so that stays true at any size.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import numpy as np
from PIL import Image

from dithered_qr.core.grid import CellGrid

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


def render_grid(grid: CellGrid) -> Image.Image:
    """One RGB pixel per cell: black where the cell is black, else white."""
    rgb = np.where(
        grid.colors[..., np.newaxis],
        np.array(BLACK, dtype=np.uint8),
        np.array(WHITE, dtype=np.uint8),
    ).astype(np.uint8)
    return Image.fromarray(rgb)


def upscale(img: Image.Image, factor: int) -> Image.Image:
    """Enlarge by an integer factor with nearest-neighbour replication.

    factor == 1 returns the image unchanged.
    """
    if factor < 1:
        raise ValueError(f"Upscale factor must be >= 1, got {factor}")
    if factor == 1:
        return img
    return img.resize(
        (img.width * factor, img.height * factor), Image.Resampling.NEAREST
    )


def output_format(output_path: Path) -> str:
    """PIL format name for the output path's extension."""
    suffix = output_path.suffix.lower()
    Image.init()
    fmt = Image.registered_extensions().get(suffix)
    # Some registered formats are read-only
    if fmt is None or fmt not in Image.SAVE:
        raise ValueError(f"Unsupported output format: {suffix or '(none)'}")
    return fmt


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def save_output(img: Image.Image, output_path: Path) -> None:
    """Save in the format given by the file extension.

    The image is written to a temp file next to the destination and moved
    into place, so a failed save leaves no partial output behind.
    """
    output_path = Path(output_path)
    fmt = output_format(output_path)

    parent = output_path.parent
    if not parent.exists():
        raise FileNotFoundError(f"Output directory not found: {parent}")

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{output_path.stem}-", suffix=output_path.suffix, dir=parent
    )
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        img.save(tmp_path, format=fmt)
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, output_path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise
