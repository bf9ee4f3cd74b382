from __future__ import annotations

from dataclasses import dataclass
import math
from pathlib import Path
from typing import Optional

from .errors import InvalidParameter


def _is_lattice_count(count: int) -> bool:
    """True when ``count`` is n³, 2n³ or 4n³ (simple cubic, bcc, fcc cells)."""
    for cells in (1, 2, 4):
        if count % cells:
            continue
        n = round((count // cells) ** (1.0 / 3.0))
        if any(k ** 3 * cells == count for k in (n - 1, n, n + 1) if k > 0):
            return True
    return False


def default_initial_count(volume: int, fraction: float = 0.01) -> int:
    """Heuristic size of the initial binary pattern.

    Halfway between the two cubes bracketing ``fraction * volume`` and never
    a count a regular cubic, bcc or fcc lattice could fill exactly (those
    invite visible crystal artifacts). For a 32³ lattice this is
    ``(6³ + 7³) // 2 == 279``.
    """
    volume = int(volume)
    if volume < 2:
        raise InvalidParameter(f"lattice volume must be at least 2, got {volume}")
    a = int(math.floor((volume * fraction) ** (1.0 / 3.0) + 1e-9))
    count = max(1, (a ** 3 + (a + 1) ** 3) // 2)
    while _is_lattice_count(count) and count + 1 < volume:
        count += 1
    return min(count, volume - 1)


@dataclass
class DitherConfig:
    """Configuration for one dither array run."""

    # Lattice and kernel
    size: int = 32                 # edge length, the lattice is size³
    sigma: float = 1.4             # 1.3-1.4 works well in 3D
    kernel_size: int = 17          # odd

    # Initial binary pattern (None -> default_initial_count heuristic)
    initial_count: Optional[int] = None
    initial_fraction: float = 0.01
    max_balance_iterations: Optional[int] = None

    # Reproducibility: a fixed seed gives bit-identical output, None uses OS entropy
    seed: Optional[int] = 0

    # Progress bar refresh cadence in steps (<= 0 disables it)
    report_interval: int = 50

    # Output
    output_dir: Optional[Path] = None  # None -> ./{N}x{N}x{N}/
    file_prefix: str = "layer_"
    file_ext: str = ".png"

    # Post-run
    show_viewer: bool = False
    spectrum_report: bool = True

    @property
    def dims(self) -> tuple[int, int, int]:
        return (self.size, self.size, self.size)

    @property
    def volume(self) -> int:
        return self.size ** 3

    def resolved_output_dir(self) -> Path:
        if self.output_dir is not None:
            return Path(self.output_dir)
        return Path(f"./{self.size}x{self.size}x{self.size}")

    def resolved_initial_count(self) -> int:
        if self.initial_count is not None:
            return int(self.initial_count)
        return default_initial_count(self.volume, self.initial_fraction)

    def validate(self) -> "DitherConfig":
        """Raise :class:`InvalidParameter` on the first out-of-range field."""
        if int(self.size) != self.size or self.size < 1:
            raise InvalidParameter(f"size must be a positive integer, got {self.size!r}")
        if self.volume < 2:
            raise InvalidParameter("lattice must hold at least 2 voxels")
        if int(self.kernel_size) != self.kernel_size or self.kernel_size < 1 or self.kernel_size % 2 == 0:
            raise InvalidParameter(f"kernel_size must be an odd integer >= 1, got {self.kernel_size!r}")
        if not (math.isfinite(self.sigma) and self.sigma > 0):
            raise InvalidParameter(f"sigma must be positive, got {self.sigma!r}")
        if self.initial_count is None and not (0.0 < self.initial_fraction < 1.0):
            raise InvalidParameter(f"initial_fraction must be in (0, 1), got {self.initial_fraction!r}")
        count = self.resolved_initial_count()
        if not (1 <= count < self.volume):
            raise InvalidParameter(
                f"initial_count must be in [1, {self.volume}) for a {self.size}³ lattice, got {count}"
            )
        if self.max_balance_iterations is not None and self.max_balance_iterations < 1:
            raise InvalidParameter(
                f"max_balance_iterations must be >= 1, got {self.max_balance_iterations!r}"
            )
        if self.seed is not None and self.seed < 0:
            raise InvalidParameter(f"seed must be non-negative, got {self.seed!r}")
        if not self.file_ext.startswith("."):
            raise InvalidParameter(f"file_ext must start with '.', got {self.file_ext!r}")
        return self
