"""Exception hierarchy for dither array generation.

Configuration problems are `InvalidParameter` (also a `ValueError`), broken
engine/phase contracts are `InvariantError` subclasses (also `RuntimeError`),
and layer export failures are `ExportError` (also an `OSError`).
"""

from __future__ import annotations


class DitherError(Exception):
    """Base class for every error raised by dither3d."""


class InvalidParameter(DitherError, ValueError):
    """A run parameter is out of range (even kernel size, sigma <= 0, ...)."""


class InvariantError(DitherError, RuntimeError):
    """The ranking engine was driven in a way that breaks its contract."""


class AlreadySetError(InvariantError):
    """`set_on` was called for a voxel that is already on."""


class NotSetError(InvariantError):
    """`set_off` was called for a voxel that is already off."""


class EmptySetError(InvariantError):
    """An extremum was requested from an empty tracking set."""


class BalancingError(InvariantError):
    """Initial pattern balancing did not reach its fixed point in time."""


class PhaseOrderError(InvariantError):
    """A phase was run before the phases it depends on."""


class ExportError(DitherError, OSError):
    """Writing the rank field to disk failed."""
