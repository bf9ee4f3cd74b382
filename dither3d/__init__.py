"""3D blue-noise dither arrays by the void-and-cluster method.

Typical use:

    from dither3d import DitherConfig, generate, save_layers

    result = generate(DitherConfig(size=16, kernel_size=9))
    save_layers(result.ranks, "out/")

Keep this module light: the viewer (matplotlib) and the spectral report
(torch) are imported from their own modules on demand.
"""

from __future__ import annotations

from .config import DitherConfig, default_initial_count
from .errors import (
    AlreadySetError,
    BalancingError,
    DitherError,
    EmptySetError,
    ExportError,
    InvalidParameter,
    InvariantError,
    NotSetError,
    PhaseOrderError,
)
from .export import save_layers, to_uint8
from .generator import DitherResult, generate

__version__ = "0.1.0"

__all__ = [
    "DitherConfig",
    "DitherResult",
    "default_initial_count",
    "generate",
    "save_layers",
    "to_uint8",
    "DitherError",
    "InvalidParameter",
    "InvariantError",
    "AlreadySetError",
    "NotSetError",
    "EmptySetError",
    "BalancingError",
    "PhaseOrderError",
    "ExportError",
]
