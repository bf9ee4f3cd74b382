"""Gaussian proximity kernel used to measure clustering energy."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Sequence

import numpy as np

from ..errors import InvalidParameter
from .vec3 import Vec3


@dataclass(frozen=True)
class Kernel:
    """Odd-sized cube of Gaussian weights centred on its middle cell.

    ``weights`` is indexed ``[i2, i1, i0]`` like every other volume in the
    package. The flattened offset table is built once so that a footprint
    lookup is a handful of vectorized numpy operations.
    """

    size: int
    sigma: float
    weights: np.ndarray = field(repr=False, compare=False)
    _offsets: np.ndarray = field(init=False, repr=False, compare=False)
    _flat_weights: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        c = self.center
        i2, i1, i0 = np.meshgrid(
            np.arange(self.size), np.arange(self.size), np.arange(self.size), indexing="ij"
        )
        # (m, 3) table of (dx, dy, dz), in the same order as weights.ravel()
        offsets = np.stack([i0.ravel() - c, i1.ravel() - c, i2.ravel() - c], axis=1)
        offsets.flags.writeable = False
        flat = np.ascontiguousarray(self.weights.ravel())
        flat.flags.writeable = False
        self.weights.flags.writeable = False
        object.__setattr__(self, "_offsets", offsets)
        object.__setattr__(self, "_flat_weights", flat)

    @property
    def center(self) -> int:
        return self.size // 2

    @property
    def volume(self) -> int:
        return self.size ** 3

    def weight_at(self, offset) -> float:
        """Weight for an offset ``(dx, dy, dz)`` from the centre (0 outside the cube)."""
        dx, dy, dz = Vec3.of(offset)
        c = self.center
        if max(abs(dx), abs(dy), abs(dz)) > c:
            return 0.0
        return float(self.weights[dz + c, dy + c, dx + c])

    def footprint(self, dims: Sequence[int], center) -> tuple[np.ndarray, np.ndarray]:
        """Flat lattice indices and weights covered with the kernel centred at ``center``.

        One entry per kernel cell. When the kernel is wider than the lattice
        several cells land on the same voxel and the index repeats.
        """
        cx, cy, cz = Vec3.of(center)
        d0, d1, d2 = (int(d) for d in dims)
        xs = (self._offsets[:, 0] + cx) % d0
        ys = (self._offsets[:, 1] + cy) % d1
        zs = (self._offsets[:, 2] + cz) % d2
        return xs + ys * d0 + zs * (d0 * d1), self._flat_weights


def build_kernel(size: int, sigma: float) -> Kernel:
    """Build a ``size``³ Gaussian cube, ``exp(-r² / (2 sigma²))`` per cell.

    Weights are not normalized; only the ordering of accumulated energies
    matters to the ranking.
    """
    if isinstance(size, bool) or int(size) != size or size < 1 or size % 2 == 0:
        raise InvalidParameter(f"kernel size must be an odd integer >= 1, got {size!r}")
    if not (math.isfinite(sigma) and sigma > 0):
        raise InvalidParameter(f"kernel sigma must be a positive number, got {sigma!r}")
    size = int(size)
    c = size // 2
    r = np.arange(size, dtype=np.float64) - c
    dz, dy, dx = np.meshgrid(r, r, r, indexing="ij")
    inv_two_sigma2 = 1.0 / (2.0 * float(sigma) * float(sigma))
    weights = np.exp(-(dx * dx + dy * dy + dz * dz) * inv_two_sigma2)
    return Kernel(size=size, sigma=float(sigma), weights=weights)
