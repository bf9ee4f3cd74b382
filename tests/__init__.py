"""Test suite for dither3d.

This package contains:
- Unit tests for the lattice primitives, tracker and engine
- Phase and end-to-end tests on small deterministic lattices
- Export, viewer, spectrum and CLI tests
"""
