#!/usr/bin/env python3
"""3D Dither Array Entrypoint

Builds an NxNxN blue-noise dither array with the void-and-cluster method and
saves it as one greyscale PNG per z layer.

Usage:
    python run.py                         # 32x32x32, fixed seed 0
    python run.py --size 16 --kernel-size 9
    python run.py --random-seed --show    # new pattern, browse layers afterwards
    python run.py --report-interval 0     # no progress bar
"""

from __future__ import annotations

import sys

from dither3d.cli import main


if __name__ == "__main__":
    sys.exit(main())
