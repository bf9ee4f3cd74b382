"""Void-and-cluster engine: voxel toggles, energy bookkeeping and extremum search.

The engine is the only owner of the mutable run state:

- ``content``: 0.0 for off voxels, the sentinel or final rank for on voxels
- ``energy``:  sum of the kernel footprints of every on voxel, plus jitter
- the on-mask (rank 0 is a legitimate final rank, so "on" cannot be read
  back from content alone)
- the :class:`RankTracker` holding void and cluster sets

Toggling a voxel touches exactly ``kernel.volume`` energy cells and re-keys
each of them in the tracker, so one toggle is O(m log n).
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ..errors import AlreadySetError, InvariantError, NotSetError
from ..lattice import Kernel, ToroidalField, Vec3, check_dims
from .tracker import RankTracker, TrackSet

# Upper bound of the uniform energy jitter used to break ties at start.
JITTER = 1e-7


class VoidClusterEngine:
    """Toggle voxels on a toroidal lattice and find the largest void/cluster."""

    def __init__(
        self,
        dims: Sequence[int],
        kernel: Kernel,
        rng: Optional[np.random.Generator] = None,
        *,
        jitter: float = JITTER,
    ) -> None:
        self.dims = check_dims(dims)
        self.kernel = kernel
        self._content = ToroidalField(self.dims)
        self._energy = ToroidalField(self.dims)
        self._on = np.zeros(self._content.size, dtype=bool)
        self._tracker = RankTracker()

        if rng is not None and jitter > 0:
            self._energy.scatter_add(
                np.arange(self.size), rng.uniform(0.0, jitter, size=self.size)
            )
        for idx in range(self.size):
            self._tracker.track_as_void(idx, self._energy.get_flat(idx))

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return self._content.size

    @property
    def on_count(self) -> int:
        return int(self._on.sum())

    @property
    def void_count(self) -> int:
        return self._tracker.void_count

    @property
    def cluster_count(self) -> int:
        return self._tracker.cluster_count

    @property
    def cluster_tracking(self) -> bool:
        return self._tracker.cluster_tracking

    def index(self, coord) -> int:
        return Vec3.of(coord).flat_index(self.dims)

    def coord(self, idx: int) -> Vec3:
        return Vec3.from_flat(idx, self.dims)

    def content(self, coord) -> float:
        return self._content.get(coord)

    def energy(self, coord) -> float:
        return self._energy.get(coord)

    def is_on(self, coord) -> bool:
        return bool(self._on[self.index(coord)])

    def membership(self, coord) -> Optional[TrackSet]:
        return self._tracker.membership(self.index(coord))

    @property
    def content_field(self) -> ToroidalField:
        """Snapshot of the content field (a copy)."""
        return self._content.copy()

    @property
    def energy_field(self) -> ToroidalField:
        """Snapshot of the energy field (a copy)."""
        return self._energy.copy()

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------

    def set_on(self, coord, rank_value: float) -> Vec3:
        """Turn an off voxel on with ``rank_value`` and spread its kernel."""
        coord = Vec3.of(coord).wrap(self.dims)
        idx = coord.flat_index(self.dims)
        if self._on[idx]:
            raise AlreadySetError(f"voxel {tuple(coord)} is already on")
        self._content.set_flat(idx, rank_value)
        self._on[idx] = True
        if self._tracker.membership(idx) is not None:
            self._tracker.track_as_cluster(idx, self._energy.get_flat(idx))
        self._spread(coord, 1.0)
        return coord

    def set_off(self, coord) -> Vec3:
        """Turn an on voxel off and withdraw its kernel."""
        coord = Vec3.of(coord).wrap(self.dims)
        idx = coord.flat_index(self.dims)
        if not self._on[idx]:
            raise NotSetError(f"voxel {tuple(coord)} is already off")
        self._content.set_flat(idx, 0.0)
        self._on[idx] = False
        self._tracker.track_as_void(idx, self._energy.get_flat(idx))
        self._spread(coord, -1.0)
        return coord

    def _spread(self, coord: Vec3, sign: float) -> None:
        indices, weights = self.kernel.footprint(self.dims, coord)
        self._energy.scatter_add(indices, weights * sign)
        energy = self._energy.values
        # a kernel wider than the lattice hits some voxels more than once
        for idx in np.unique(indices).tolist():
            self._tracker.update_key(idx, energy[idx])

    # ------------------------------------------------------------------
    # Tracker delegation
    # ------------------------------------------------------------------

    def largest_void(self) -> Vec3:
        return self.coord(self._tracker.largest_void())

    def largest_cluster(self) -> Vec3:
        return self.coord(self._tracker.largest_cluster())

    def evict(self, coord) -> None:
        self._tracker.evict(self.index(coord))

    def disable_cluster_tracking(self) -> None:
        self._tracker.disable_cluster_tracking()

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def check_invariants(self) -> None:
        """Raise :class:`InvariantError` if state and tracker disagree."""
        energy = self._energy.values
        content = self._content.values
        for idx in range(self.size):
            which = self._tracker.membership(idx)
            on = bool(self._on[idx])
            if which is TrackSet.VOID:
                if on or content[idx] != 0.0:
                    raise InvariantError(f"void-set voxel {tuple(self.coord(idx))} is on")
            elif which is TrackSet.CLUSTER:
                # content may be exactly 0.0 here: rank 0 is on
                if not on or content[idx] < 0.0:
                    raise InvariantError(f"cluster-set voxel {tuple(self.coord(idx))} is off")
            elif not on:
                raise InvariantError(f"off voxel {tuple(self.coord(idx))} is not tracked")
            if which is not None and self._tracker.key(idx) != float(energy[idx]):
                raise InvariantError(f"stale tracker key for voxel {tuple(self.coord(idx))}")

    def __repr__(self) -> str:
        return f"VoidClusterEngine(dims={self.dims}, kernel={self.kernel.size}, on={self.on_count})"
