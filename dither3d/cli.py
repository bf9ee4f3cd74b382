"""Command-line front end: build a dither array, save its layers, report."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from .config import DitherConfig
from .console import Console, ProgressReporter, console as default_console
from .errors import ExportError, InvalidParameter, InvariantError
from .export import save_layers
from .generator import generate


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dither3d",
        description="Void-and-cluster method for generating 3D dither arrays (blue noise)",
    )
    parser.add_argument("--size", type=int, default=32, help="Lattice edge length N, output is NxNxN (default: 32)")
    parser.add_argument("--sigma", type=float, default=1.4, help="Gaussian kernel sigma (default: 1.4)")
    parser.add_argument("--kernel-size", type=int, default=17, help="Odd kernel edge length (default: 17)")
    parser.add_argument("--initial-count", type=int, default=None,
                        help="Points in the initial binary pattern (default: heuristic, ~1%% of voxels)")
    parser.add_argument("--max-balance-iterations", type=int, default=None,
                        help="Safety cap on initial balancing swaps (default: 100 x voxels)")

    seeding = parser.add_mutually_exclusive_group()
    seeding.add_argument("--seed", type=int, default=0, help="Seed for a reproducible run (default: 0)")
    seeding.add_argument("--random-seed", action="store_true", help="Seed from OS entropy instead")

    parser.add_argument("--report-interval", type=int, default=50,
                        help="Refresh progress every N steps, <= 0 disables it (default: 50)")
    parser.add_argument("--output", type=Path, default=None, help="Output directory (default: ./NxNxN/)")
    parser.add_argument("--prefix", default="layer_", help="Layer file name prefix (default: layer_)")
    parser.add_argument("--ext", default=".png", help="Layer file extension (default: .png)")
    parser.add_argument("--show", action="store_true", help="Browse the layers in a window afterwards")
    parser.add_argument("--no-spectrum", action="store_true", help="Skip the spectral quality report")
    return parser


def config_from_args(args: argparse.Namespace) -> DitherConfig:
    return DitherConfig(
        size=args.size,
        sigma=args.sigma,
        kernel_size=args.kernel_size,
        initial_count=args.initial_count,
        max_balance_iterations=args.max_balance_iterations,
        seed=None if args.random_seed else args.seed,
        report_interval=args.report_interval,
        output_dir=args.output,
        file_prefix=args.prefix,
        file_ext=args.ext,
        show_viewer=args.show,
        spectrum_report=not args.no_spectrum,
    )


def run(config: DitherConfig, out: Optional[Console] = None) -> int:
    """Run one configuration end to end; returns a process exit code."""
    out = out if out is not None else default_console
    try:
        config.validate()
    except InvalidParameter as exc:
        out.error("Invalid configuration", detail=str(exc))
        return 2

    n = config.size
    out.header(
        "Void-and-Cluster Method for Generating 3D Dither Arrays",
        Lattice=f"{n}x{n}x{n}",
        Kernel=f"{config.kernel_size}³, sigma={config.sigma}",
        Initial=f"{config.resolved_initial_count()} points",
        Seed="OS entropy" if config.seed is None else str(config.seed),
    )

    try:
        with ProgressReporter(config.report_interval, out) as reporter:
            result = generate(config, progress=reporter)
    except InvariantError as exc:
        out.error("Ranking aborted", detail=str(exc))
        return 1
    out.success(
        "Ranking complete",
        detail=f"{result.balance_iterations} balancing swaps, {result.elapsed_s:.1f}s",
    )

    output_dir = config.resolved_output_dir()
    try:
        written = save_layers(result.ranks, output_dir, prefix=config.file_prefix, ext=config.file_ext)
    except ExportError as exc:
        # the rank field is still valid; report and carry on
        out.error("Exception while saving layers", detail=str(exc))
    else:
        out.success(f"Files saved in: {output_dir}", detail=f"{len(written)} layers")

    if config.spectrum_report:
        from .spectrum import spectrum_summary

        for threshold, ratio in spectrum_summary(result.ranks).items():
            out.info(f"Low-frequency power at threshold {threshold:.1f}", detail=f"{ratio:.3f} (white noise ~1)")

    if config.show_viewer:
        from .viewer import LayerViewer

        LayerViewer(result.ranks).show()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return run(config_from_args(args))
