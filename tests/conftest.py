from __future__ import annotations

import matplotlib

# No display in CI; the viewer tests only drive key handling.
matplotlib.use("Agg")

import numpy as np
import pytest

from dither3d.lattice import build_kernel
from dither3d.ranking import VoidClusterEngine


@pytest.fixture
def dims():
    return (4, 4, 4)


@pytest.fixture
def kernel3():
    return build_kernel(3, 1.0)


@pytest.fixture
def quiet_engine(dims, kernel3):
    """Engine without jitter: every untouched energy is exactly 0."""
    return VoidClusterEngine(dims, kernel3, rng=None)


@pytest.fixture
def engine(dims, kernel3):
    return VoidClusterEngine(dims, kernel3, np.random.default_rng(0))
