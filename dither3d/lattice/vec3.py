"""Integer lattice coordinates with toroidal reduction."""

from __future__ import annotations

from typing import NamedTuple


class Vec3(NamedTuple):
    """Integer triple ``(x, y, z)``; axis 0 varies fastest in flat indices."""

    x: int
    y: int
    z: int

    def __add__(self, other) -> "Vec3":  # type: ignore[override]
        return Vec3(self.x + other[0], self.y + other[1], self.z + other[2])

    def __sub__(self, other) -> "Vec3":
        return Vec3(self.x - other[0], self.y - other[1], self.z - other[2])

    def __neg__(self) -> "Vec3":
        return Vec3(-self.x, -self.y, -self.z)

    def wrap(self, dims: tuple[int, int, int]) -> "Vec3":
        """Reduce every component into ``[0, dim)``.

        Python's ``%`` already returns a non-negative result for a positive
        modulus, so negative offsets wrap to the far side of the lattice.
        """
        return Vec3(self.x % dims[0], self.y % dims[1], self.z % dims[2])

    def flat_index(self, dims: tuple[int, int, int]) -> int:
        """Row-major index ``x + y*d0 + z*d0*d1`` of the wrapped coordinate."""
        x, y, z = self.wrap(dims)
        return x + y * dims[0] + z * dims[0] * dims[1]

    @classmethod
    def from_flat(cls, idx: int, dims: tuple[int, int, int]) -> "Vec3":
        d0, d1 = dims[0], dims[1]
        d01 = d0 * d1
        return cls(idx % d0, (idx % d01) // d0, idx // d01)

    @classmethod
    def of(cls, coord) -> "Vec3":
        """Coerce any 3-sequence (tuple, list, ndarray row) to a ``Vec3``."""
        if isinstance(coord, Vec3):
            return coord
        x, y, z = coord
        return cls(int(x), int(y), int(z))
