"""Lattice primitives: coordinates, toroidal fields and the Gaussian kernel."""

from .field import ToroidalField, check_dims
from .kernel import Kernel, build_kernel
from .vec3 import Vec3

__all__ = ["Vec3", "ToroidalField", "check_dims", "Kernel", "build_kernel"]
