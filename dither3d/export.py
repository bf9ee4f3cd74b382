"""Write a rank volume out as one 8-bit greyscale image per z layer."""

from __future__ import annotations

from pathlib import Path
from typing import List

import numpy as np
from PIL import Image

from .errors import ExportError


def to_uint8(layer: np.ndarray) -> np.ndarray:
    """Map ranks in [0, 1) to pixels: ``round(rank * 256)`` saturated to 0..255."""
    return np.clip(np.rint(np.asarray(layer, dtype=np.float64) * 256.0), 0, 255).astype(np.uint8)


def layer_path(output_dir: Path, z: int, prefix: str = "layer_", ext: str = ".png") -> Path:
    return Path(output_dir) / f"{prefix}{int(z)}{ext}"


def save_layers(
    ranks: np.ndarray,
    output_dir: Path,
    *,
    prefix: str = "layer_",
    ext: str = ".png",
) -> List[Path]:
    """Save ``ranks[z]`` for every z and return the written paths.

    ``ranks`` is indexed ``[z, y, x]``; each image is ``d1`` rows by ``d0``
    columns. The directory is created if needed. Any filesystem or encoder
    failure is raised as :class:`ExportError`; the rank volume itself is
    untouched.
    """
    ranks = np.asarray(ranks)
    if ranks.ndim != 3:
        raise ExportError(f"expected a 3D rank volume, got shape {ranks.shape}")
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExportError(f"cannot create output directory {output_dir}: {exc}") from exc

    written: List[Path] = []
    for z in range(ranks.shape[0]):
        path = layer_path(output_dir, z, prefix, ext)
        try:
            Image.fromarray(to_uint8(ranks[z])).save(path)
        except (OSError, ValueError, KeyError) as exc:
            # Pillow raises ValueError/KeyError for unknown extensions
            raise ExportError(f"cannot write layer {z} to {path}: {exc}") from exc
        written.append(path)
    return written


def load_layers(output_dir: Path, num_layers: int, *, prefix: str = "layer_", ext: str = ".png") -> np.ndarray:
    """Read saved layers back as a uint8 volume ``[z, y, x]``."""
    layers = []
    for z in range(num_layers):
        path = layer_path(output_dir, z, prefix, ext)
        try:
            with Image.open(path) as img:
                layers.append(np.asarray(img.convert("L"), dtype=np.uint8))
        except OSError as exc:
            raise ExportError(f"cannot read layer {z} from {path}: {exc}") from exc
    return np.stack(layers, axis=0)
