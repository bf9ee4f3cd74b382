"""End-to-end construction of a dither array from a :class:`DitherConfig`."""

from __future__ import annotations

from dataclasses import dataclass, field
import time
from typing import List, Optional

import numpy as np

from .config import DitherConfig
from .lattice import Vec3, build_kernel
from .ranking import PhaseController, VoidClusterEngine
from .ranking.phases import ProgressCallback


@dataclass
class DitherResult:
    """Finished rank volume plus a few facts about how it was reached."""

    ranks: np.ndarray                 # (d2, d1, d0) float64, indexed [z, y, x]
    dims: tuple[int, int, int]
    initial_count: int
    balance_iterations: int
    elapsed_s: float
    seed: Optional[int]
    balanced_pattern: List[Vec3] = field(default_factory=list)

    @property
    def num_layers(self) -> int:
        return self.dims[2]

    def layer(self, z: int) -> np.ndarray:
        return self.ranks[int(z) % self.dims[2]]

    def rank_at(self, coord) -> float:
        x, y, z = Vec3.of(coord).wrap(self.dims)
        return float(self.ranks[z, y, x])


def make_rng(seed: Optional[int]) -> np.random.Generator:
    """One generator per run; ``None`` draws the seed from OS entropy."""
    return np.random.default_rng(seed)


def generate(config: DitherConfig, progress: Optional[ProgressCallback] = None) -> DitherResult:
    """Validate ``config``, run every ranking phase, and return the result."""
    config.validate()
    rng = make_rng(config.seed)
    kernel = build_kernel(config.kernel_size, config.sigma)

    t0 = time.perf_counter()
    engine = VoidClusterEngine(config.dims, kernel, rng)
    controller = PhaseController(
        engine,
        config.resolved_initial_count(),
        rng,
        max_balance_iterations=config.max_balance_iterations,
        progress=progress,
    )
    ranks = controller.run()
    elapsed = time.perf_counter() - t0

    return DitherResult(
        ranks=ranks,
        dims=engine.dims,
        initial_count=controller.initial_count,
        balance_iterations=controller.balance_iterations,
        elapsed_s=elapsed,
        seed=config.seed,
        balanced_pattern=list(controller.balanced_pattern),
    )
