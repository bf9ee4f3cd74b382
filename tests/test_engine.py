"""Tests for voxel toggles and energy bookkeeping in the void-cluster engine."""

import math

import numpy as np
import pytest

from dither3d.errors import AlreadySetError, EmptySetError, InvariantError, NotSetError
from dither3d.lattice import Vec3, build_kernel
from dither3d.ranking import TrackSet, VoidClusterEngine


class TestInitialState:
    def test_everything_starts_void(self, engine):
        assert engine.void_count == 64
        assert engine.cluster_count == 0
        assert engine.on_count == 0
        engine.check_invariants()

    def test_jitter_is_tiny_and_seeded(self, dims, kernel3):
        a = VoidClusterEngine(dims, kernel3, np.random.default_rng(7)).energy_field.values
        b = VoidClusterEngine(dims, kernel3, np.random.default_rng(7)).energy_field.values
        assert np.array_equal(a, b)
        assert np.all((a >= 0.0) & (a < 1e-7))
        assert len(np.unique(a)) > 1

    def test_without_jitter_ties_break_by_index(self, quiet_engine):
        assert quiet_engine.largest_void() == Vec3(0, 0, 0)


class TestToggles:
    def test_set_on_moves_voxel_to_cluster(self, engine):
        engine.set_on((1, 2, 3), 1.0)
        assert engine.is_on((1, 2, 3))
        assert engine.content((1, 2, 3)) == 1.0
        assert engine.membership((1, 2, 3)) is TrackSet.CLUSTER
        assert engine.largest_cluster() == Vec3(1, 2, 3)
        engine.check_invariants()

    def test_set_on_twice_fails(self, engine):
        engine.set_on((0, 0, 0), 1.0)
        with pytest.raises(AlreadySetError):
            engine.set_on((4, 4, 4), 1.0)  # same voxel after wrapping

    def test_set_off_on_off_voxel_fails(self, engine):
        with pytest.raises(NotSetError):
            engine.set_off((0, 0, 0))

    def test_errors_are_invariant_errors(self, engine):
        engine.set_on((0, 0, 0), 1.0)
        with pytest.raises(InvariantError):
            engine.set_on((0, 0, 0), 1.0)

    def test_largest_cluster_on_empty_set(self, engine):
        with pytest.raises(EmptySetError):
            engine.largest_cluster()

    def test_set_off_restores_void(self, engine):
        engine.set_on((2, 2, 2), 1.0)
        engine.set_off((2, 2, 2))
        assert not engine.is_on((2, 2, 2))
        assert engine.content((2, 2, 2)) == 0.0
        assert engine.membership((2, 2, 2)) is TrackSet.VOID
        engine.check_invariants()

    def test_invariants_hold_after_every_toggle(self, engine):
        rng = np.random.default_rng(3)
        on = set()
        for _ in range(40):
            coord = Vec3(*(int(v) for v in rng.integers(0, 4, size=3)))
            if coord in on:
                engine.set_off(coord)
                on.remove(coord)
            else:
                engine.set_on(coord, 1.0)
                on.add(coord)
            engine.check_invariants()
        assert engine.on_count == len(on)


class TestEnergy:
    def test_toroidal_neighbours_get_equal_weight(self, quiet_engine):
        quiet_engine.set_on((0, 0, 0), 1.0)
        edge = math.exp(-0.5)
        assert quiet_engine.energy((3, 0, 0)) == pytest.approx(edge)
        assert quiet_engine.energy((1, 0, 0)) == pytest.approx(edge)
        assert quiet_engine.energy((3, 0, 0)) == quiet_engine.energy((1, 0, 0))
        assert quiet_engine.energy((0, 0, 0)) == 1.0
        assert quiet_engine.energy((2, 0, 0)) == 0.0

    def test_largest_void_avoids_footprint(self, quiet_engine):
        quiet_engine.set_on((0, 0, 0), 1.0)
        # first flat index outside x, y, z in {3, 0, 1}
        assert quiet_engine.largest_void() == Vec3(2, 0, 0)

    def test_kernel_wider_than_lattice_accumulates(self):
        engine = VoidClusterEngine((4, 4, 4), build_kernel(5, 1.0), rng=None)
        engine.set_on((0, 0, 0), 1.0)
        # offsets -2 and +2 both land on x == 2
        assert engine.energy((2, 0, 0)) == pytest.approx(2 * math.exp(-2.0))
        engine.check_invariants()

    def test_on_off_round_trip(self, engine):
        for coord in [(0, 0, 0), (2, 1, 3), (1, 3, 2)]:
            engine.set_on(coord, 1.0)
        before = engine.energy_field.values.copy()
        engine.set_on((3, 3, 0), 0.5)
        assert not np.allclose(before, engine.energy_field.values)
        engine.set_off((3, 3, 0))
        assert np.allclose(before, engine.energy_field.values, rtol=0, atol=1e-12)
        engine.check_invariants()

    def test_snapshots_are_copies(self, engine):
        snap = engine.content_field
        engine.set_on((0, 0, 0), 1.0)
        assert snap.get((0, 0, 0)) == 0.0


class TestEviction:
    def test_evicted_voxel_is_never_selected(self, quiet_engine):
        quiet_engine.set_on((1, 1, 1), 0.0)
        quiet_engine.evict((1, 1, 1))
        assert quiet_engine.membership((1, 1, 1)) is None
        with pytest.raises(EmptySetError):
            quiet_engine.largest_cluster()
        quiet_engine.check_invariants()

    def test_disable_cluster_tracking(self, engine):
        engine.set_on((0, 0, 0), 1.0)
        engine.disable_cluster_tracking()
        engine.set_on((2, 2, 2), 0.5)
        assert engine.membership((2, 2, 2)) is None
        assert engine.cluster_count == 0
        with pytest.raises(EmptySetError):
            engine.largest_cluster()
        engine.check_invariants()
