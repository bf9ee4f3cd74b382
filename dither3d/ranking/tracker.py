"""Ordered void/cluster sets keyed by (energy, flat index).

Both sets are ``SortedList`` instances so that the global extremum, insertion,
and removal of an arbitrary entry are all O(log n). A plain heap would only
give cheap access to the top; the engine re-keys thousands of non-extreme
voxels per toggle.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Optional

from sortedcontainers import SortedList

from ..errors import EmptySetError


class TrackSet(str, Enum):
    VOID = "void"
    CLUSTER = "cluster"


class RankTracker:
    """Void set (off voxels) and cluster set (on voxels) over flat indices.

    The tracker remembers the energy each entry was inserted with, so callers
    only ever hand in the *new* energy. Ties in energy break on the flat index,
    which keeps the whole run deterministic for a fixed seed.
    """

    def __init__(self) -> None:
        self._void = SortedList()
        self._cluster = SortedList()
        self._where: Dict[int, TrackSet] = {}
        self._keys: Dict[int, float] = {}
        self._cluster_tracking = True

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    @property
    def cluster_tracking(self) -> bool:
        return self._cluster_tracking

    @property
    def void_count(self) -> int:
        return len(self._void)

    @property
    def cluster_count(self) -> int:
        return len(self._cluster)

    def membership(self, idx: int) -> Optional[TrackSet]:
        """Set currently holding ``idx``, or None when it is not tracked."""
        return self._where.get(idx)

    def key(self, idx: int) -> Optional[float]:
        return self._keys.get(idx)

    def void_members(self) -> Iterable[int]:
        return (idx for _, idx in self._void)

    def cluster_members(self) -> Iterable[int]:
        return (idx for _, idx in self._cluster)

    def _bucket(self, which: TrackSet) -> SortedList:
        return self._void if which is TrackSet.VOID else self._cluster

    def _discard(self, idx: int) -> Optional[TrackSet]:
        which = self._where.pop(idx, None)
        if which is not None:
            self._bucket(which).remove((self._keys.pop(idx), idx))
        return which

    def _insert(self, idx: int, energy: float, which: TrackSet) -> None:
        energy = float(energy)
        self._bucket(which).add((energy, idx))
        self._where[idx] = which
        self._keys[idx] = energy

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def track_as_void(self, idx: int, energy: float) -> None:
        self._discard(idx)
        self._insert(idx, energy, TrackSet.VOID)

    def track_as_cluster(self, idx: int, energy: float) -> None:
        """Move ``idx`` into the cluster set.

        With cluster tracking disabled the voxel only leaves the void set.
        """
        self._discard(idx)
        if self._cluster_tracking:
            self._insert(idx, energy, TrackSet.CLUSTER)

    def update_key(self, idx: int, new_energy: float) -> None:
        """Re-key ``idx`` at ``new_energy`` in whichever set holds it.

        Untracked voxels (evicted, or on while cluster tracking is off) are
        left alone.
        """
        which = self._where.get(idx)
        if which is None:
            return
        bucket = self._bucket(which)
        bucket.remove((self._keys[idx], idx))
        new_energy = float(new_energy)
        bucket.add((new_energy, idx))
        self._keys[idx] = new_energy

    def evict(self, idx: int) -> None:
        """Drop ``idx`` from both sets for good (its rank is final)."""
        self._discard(idx)

    def disable_cluster_tracking(self) -> None:
        for _, idx in self._cluster:
            del self._where[idx]
            del self._keys[idx]
        self._cluster.clear()
        self._cluster_tracking = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def largest_void(self) -> int:
        """Flat index with the smallest (energy, index) among off voxels."""
        if not self._void:
            raise EmptySetError("void set is empty")
        return self._void[0][1]

    def largest_cluster(self) -> int:
        """Flat index with the largest (energy, index) among on voxels."""
        if not self._cluster:
            raise EmptySetError(
                "cluster set is empty" if self._cluster_tracking else "cluster tracking is disabled"
            )
        return self._cluster[-1][1]

    def __len__(self) -> int:
        return len(self._void) + len(self._cluster)

    def __repr__(self) -> str:
        return (
            f"RankTracker(void={len(self._void)}, cluster={len(self._cluster)}, "
            f"cluster_tracking={self._cluster_tracking})"
        )
