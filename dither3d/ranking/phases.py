"""Three-phase void-and-cluster ranking driven through the engine contract.

Phase 1 builds and balances a sparse binary pattern and ranks its points,
then the dense phase fills every remaining voxel in largest-void order. The
classic "phase 3" (largest cluster of zeros) is the same search as the
largest void of ones, so the dense phase covers both halves of the range.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional

import numpy as np

from ..errors import BalancingError, InvalidParameter, PhaseOrderError
from ..lattice import Vec3
from .engine import VoidClusterEngine

# Content value of initial-pattern points before they get a rank.
SENTINEL = 1.0

ProgressCallback = Callable[[str, int, Optional[int]], None]


class Phase(str, Enum):
    INITIAL_SAMPLING = "INITIAL_SAMPLING"
    INITIAL_BALANCING = "INITIAL_BALANCING"
    INITIAL_RANKING = "INITIAL_RANKING"
    DENSE_RANKING = "DENSE_RANKING"
    DONE = "DONE"


_ORDER = list(Phase)


class PhaseController:
    """Runs the ranking phases in order on one engine.

    Each phase method checks that it is the next one due and advances
    ``state`` when it finishes, so phases can be stepped individually in
    tests or run all at once with :meth:`run`.
    """

    def __init__(
        self,
        engine: VoidClusterEngine,
        initial_count: int,
        rng: np.random.Generator,
        *,
        max_balance_iterations: Optional[int] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        if not (1 <= int(initial_count) < engine.size):
            raise InvalidParameter(
                f"initial count must be in [1, {engine.size}), got {initial_count}"
            )
        self.engine = engine
        self.initial_count = int(initial_count)
        self.rng = rng
        self.max_balance_iterations = (
            int(max_balance_iterations) if max_balance_iterations is not None else 100 * engine.size
        )
        self.progress = progress
        self.state = Phase.INITIAL_SAMPLING

        # Filled in as the run goes; handy for reports and regression tests.
        self.initial_pattern: List[Vec3] = []
        self.balanced_pattern: List[Vec3] = []
        self.balance_iterations = 0

    def _enter(self, phase: Phase) -> None:
        if self.state is not phase:
            raise PhaseOrderError(f"cannot run {phase.value} while in {self.state.value}")

    def _advance(self) -> None:
        self.state = _ORDER[_ORDER.index(self.state) + 1]

    def _report(self, done: int, total: Optional[int]) -> None:
        if self.progress is not None:
            self.progress(self.state.value, done, total)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def sample_initial(self) -> List[Vec3]:
        """Switch on ``initial_count`` distinct uniformly drawn voxels."""
        self._enter(Phase.INITIAL_SAMPLING)
        d0, d1, d2 = self.engine.dims
        placed: List[Vec3] = []
        while len(placed) < self.initial_count:
            coord = Vec3(
                int(self.rng.integers(d0)), int(self.rng.integers(d1)), int(self.rng.integers(d2))
            )
            if self.engine.is_on(coord):
                continue
            self.engine.set_on(coord, SENTINEL)
            placed.append(coord)
            self._report(len(placed), self.initial_count)
        self.initial_pattern = placed
        self._advance()
        return placed

    def balance(self) -> int:
        """Swap the tightest cluster into the largest void until they coincide.

        Returns the number of swaps performed (the last one is a no-op swap
        that signals the fixed point).
        """
        self._enter(Phase.INITIAL_BALANCING)
        iterations = 0
        while True:
            if iterations >= self.max_balance_iterations:
                raise BalancingError(
                    f"initial pattern did not settle within {self.max_balance_iterations} swaps"
                )
            iterations += 1
            cluster = self.engine.largest_cluster()
            self.engine.set_off(cluster)
            void = self.engine.largest_void()
            self.engine.set_on(void, SENTINEL)
            self._report(iterations, None)
            if void == cluster:
                break
        self.balance_iterations = iterations
        self.balanced_pattern = sorted(
            self.engine.coord(int(idx)) for idx in np.flatnonzero(self.engine.content_field.values)
        )
        self._advance()
        return iterations

    def rank_initial(self) -> None:
        """Give the balanced pattern ranks ``count/n`` for count = k-1 .. 0.

        The tightest remaining cluster is taken first and gets the highest
        remaining rank; it is then evicted so it is never picked again.
        """
        self._enter(Phase.INITIAL_RANKING)
        n = self.engine.size
        count = self.initial_count
        while count > 0:
            count -= 1
            cluster = self.engine.largest_cluster()
            self.engine.set_off(cluster)
            self.engine.set_on(cluster, count / n)
            self.engine.evict(cluster)
            self._report(self.initial_count - count, self.initial_count)
        self._advance()

    def rank_dense(self) -> None:
        """Fill the largest void with rank ``count/n`` until every voxel is ranked."""
        self._enter(Phase.DENSE_RANKING)
        self.engine.disable_cluster_tracking()
        n = self.engine.size
        for count in range(self.initial_count, n):
            void = self.engine.largest_void()
            self.engine.set_on(void, count / n)
            self._report(count + 1 - self.initial_count, n - self.initial_count)
        self._advance()

    def run(self) -> np.ndarray:
        """Run every remaining phase and return the rank volume ``[z, y, x]``."""
        steps = {
            Phase.INITIAL_SAMPLING: self.sample_initial,
            Phase.INITIAL_BALANCING: self.balance,
            Phase.INITIAL_RANKING: self.rank_initial,
            Phase.DENSE_RANKING: self.rank_dense,
        }
        while self.state is not Phase.DONE:
            steps[self.state]()
        return self.engine.content_field.to_volume()
