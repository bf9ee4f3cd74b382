"""Spectral check of a rank volume.

A threshold of a good dither array keeps its power away from low spatial
frequencies. These helpers binarize a volume (or a single layer) at a
threshold, take the power spectrum with ``torch.fft``, and average it over
radial frequency shells.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import torch


def radial_power_spectrum(
    values: np.ndarray | torch.Tensor,
    threshold: float,
) -> tuple[np.ndarray, np.ndarray]:
    """Radially averaged power of the pattern ``values < threshold``.

    Works for 2D layers and 3D volumes. Returns ``(radii, power)`` where
    ``radii`` are integer shell indices (0 is DC) and ``power`` is the mean
    of ``|FFT|²`` over the shell, normalized by the number of cells. The
    pattern mean is removed first so the DC shell is always zero.
    """
    t = torch.as_tensor(values, dtype=torch.float64)
    pattern = (t < threshold).to(torch.float64)
    pattern = pattern - pattern.mean()
    spectrum = torch.fft.fftn(pattern)
    power = (spectrum.real ** 2 + spectrum.imag ** 2) / pattern.numel()

    # integer frequency coordinates in [-n/2, n/2) along every axis
    axes = [torch.fft.fftfreq(n, d=1.0 / n, dtype=torch.float64) for n in pattern.shape]
    grids = torch.meshgrid(*axes, indexing="ij")
    radius = torch.sqrt(sum(g * g for g in grids))
    shell = torch.round(radius).to(torch.int64).flatten()

    n_shells = int(shell.max().item()) + 1
    total = torch.zeros(n_shells, dtype=torch.float64).index_add_(0, shell, power.flatten())
    count = torch.zeros(n_shells, dtype=torch.float64).index_add_(
        0, shell, torch.ones_like(power.flatten())
    )
    mean = torch.where(count > 0, total / count.clamp(min=1.0), torch.zeros_like(total))
    return np.arange(n_shells), mean.numpy()


def low_frequency_ratio(values: np.ndarray | torch.Tensor, threshold: float) -> float:
    """Mean power in the lowest quarter of non-DC shells over the non-DC mean.

    Blue noise sits well below 1; white noise hovers around 1. Returns 0.0
    for a pattern with no AC power at all (constant input).
    """
    _, power = radial_power_spectrum(values, threshold)
    ac = power[1:]
    overall = float(ac.mean()) if ac.size else 0.0
    if overall <= 0.0:
        return 0.0
    low = ac[: max(1, ac.size // 4)]
    return float(low.mean()) / overall


def spectrum_summary(
    ranks: np.ndarray,
    thresholds: Sequence[float] = (0.1, 0.5, 0.9),
) -> dict[float, float]:
    """Low-frequency ratio of the whole volume at each threshold."""
    return {float(th): low_frequency_ratio(ranks, th) for th in thresholds}
