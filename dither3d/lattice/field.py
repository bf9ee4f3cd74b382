"""Dense scalar storage over a wrap-around 3D lattice."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..errors import InvalidParameter
from .vec3 import Vec3


def check_dims(dims: Sequence[int]) -> tuple[int, int, int]:
    """Validate and normalize lattice dimensions to an int triple."""
    if len(dims) != 3:
        raise InvalidParameter(f"lattice needs 3 dimensions, got {len(dims)}")
    d = tuple(int(v) for v in dims)
    if any(v < 1 for v in d):
        raise InvalidParameter(f"lattice dimensions must be >= 1, got {d}")
    return d  # type: ignore[return-value]


class ToroidalField:
    """A ``d0 x d1 x d2`` float64 field addressed with wrapped coordinates.

    Storage is one flat array in row-major order (``x + y*d0 + z*d0*d1``),
    so a layer at fixed ``z`` is a contiguous ``(d1, d0)`` block.
    """

    __slots__ = ("dims", "_data")

    def __init__(self, dims: Sequence[int], fill: float = 0.0) -> None:
        self.dims = check_dims(dims)
        self._data = np.full(self.size, float(fill), dtype=np.float64)

    @classmethod
    def from_array(cls, dims: Sequence[int], values: np.ndarray) -> "ToroidalField":
        field = cls(dims)
        values = np.asarray(values, dtype=np.float64).reshape(-1)
        if values.shape[0] != field.size:
            raise InvalidParameter(
                f"expected {field.size} values for lattice {field.dims}, got {values.shape[0]}"
            )
        field._data[:] = values
        return field

    @property
    def size(self) -> int:
        d0, d1, d2 = self.dims
        return d0 * d1 * d2

    def index(self, coord) -> int:
        return Vec3.of(coord).flat_index(self.dims)

    def get(self, coord) -> float:
        return float(self._data[self.index(coord)])

    def set(self, coord, value: float) -> None:
        self._data[self.index(coord)] = value

    def get_flat(self, idx: int) -> float:
        return float(self._data[idx])

    def set_flat(self, idx: int, value: float) -> None:
        self._data[idx] = value

    def add_flat(self, idx: int, delta: float) -> float:
        """Add ``delta`` at a flat index and return the new value."""
        self._data[idx] += delta
        return float(self._data[idx])

    def scatter_add(self, indices: np.ndarray, deltas: np.ndarray) -> None:
        """Unbuffered ``+=`` at flat indices; repeated indices accumulate in order."""
        np.add.at(self._data, indices, deltas)

    @property
    def values(self) -> np.ndarray:
        """Read-only flat view of the storage."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def layer(self, z: int) -> np.ndarray:
        """Copy of the ``(d1, d0)`` slice at axis-2 index ``z`` (wrapped)."""
        d0, d1, d2 = self.dims
        z = int(z) % d2
        start = z * d0 * d1
        return self._data[start:start + d0 * d1].reshape(d1, d0).copy()

    def to_volume(self) -> np.ndarray:
        """Copy of the whole field shaped ``(d2, d1, d0)``, i.e. indexed ``[z, y, x]``."""
        d0, d1, d2 = self.dims
        return self._data.reshape(d2, d1, d0).copy()

    def copy(self) -> "ToroidalField":
        return ToroidalField.from_array(self.dims, self._data)

    def __repr__(self) -> str:
        return f"ToroidalField(dims={self.dims})"
