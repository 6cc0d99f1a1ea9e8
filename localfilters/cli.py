"""
CLI entry points for localfilters.

Installed via ``pip install localfilters``:
    localfilters       — apply a local filter to array files (.npy / .tif / .mrc)
    localfilters-ball  — write a ball-shaped structuring element to .npy
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _parse_size(text: str):
    """``"3"`` -> 3, ``"3,5"`` -> (3, 5)."""
    parts = [int(p) for p in text.split(",") if p.strip()]
    if len(parts) == 1:
        return parts[0]
    return tuple(parts)


# ======================================================================= #
# Shared argument helpers
# ======================================================================= #

def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    from localfilters.config import OPERATION_NAMES, OUTPUT_FORMATS

    parser.add_argument("--input", "-i", type=str, nargs="+", required=True,
                        help="Path(s) to array files or directories (accepts multiple)")
    parser.add_argument("--outdir", "-o", type=str, required=True,
                        help="Output directory for filtered arrays and summary CSV")
    parser.add_argument("--op", type=str, default="erode", choices=OPERATION_NAMES,
                        help="Filter to apply")
    parser.add_argument("--size", type=_parse_size, default=3,
                        help="Odd box extent, or comma-separated extents per axis")
    parser.add_argument("--radius", type=float, default=None,
                        help="Use a ball of this radius instead of a box")
    parser.add_argument("--kernel", type=str, default=None,
                        help="Path to a .npy kernel (centered on its middle cell)")
    parser.add_argument("--smooth-size", type=_parse_size, default=None,
                        help="Box extent(s) for top_hat / bottom_hat pre-smoothing")
    parser.add_argument("--smooth-radius", type=float, default=None,
                        help="Ball radius for top_hat / bottom_hat pre-smoothing")
    parser.add_argument("--dtype", type=str, default=None,
                        help="Output element type (default: same as input)")
    parser.add_argument("--threads", type=int, default=1,
                        help="Threads per array")
    parser.add_argument("--format", type=str, default="npy", choices=OUTPUT_FORMATS,
                        help="Output file format")
    parser.add_argument("--suffix", type=str, default="_filtered",
                        help="Suffix appended to output file stems")
    parser.add_argument("--no-summary", action="store_true",
                        help="Do not write filter_summary.csv")
    parser.add_argument("--log-level", type=str, default=None,
                        help="Enable library logging at this level (e.g. DEBUG)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Suppress progress output")


def _cfg_from_args(args: argparse.Namespace):
    """Build a FilterConfig from parsed CLI arguments."""
    from localfilters import FilterConfig

    return FilterConfig(
        operation=args.op,
        size=args.size,
        radius=args.radius,
        kernel_path=args.kernel,
        smooth_size=args.smooth_size,
        smooth_radius=args.smooth_radius,
        dtype=args.dtype,
        threads=args.threads,
        output_suffix=args.suffix,
        output_format=args.format,
        write_summary=not args.no_summary,
    )


# ======================================================================= #
# localfilters  —  filter files
# ======================================================================= #

def filter_main(argv=None):
    """Entry point for ``localfilters`` command."""
    p = argparse.ArgumentParser(
        prog="localfilters",
        description="Local morphological and linear filters for N-dimensional arrays",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_filter_args(p)
    p.add_argument("--workers", "-w", type=int, default=1,
                   help="Number of parallel worker processes (1 = sequential)")
    args = p.parse_args(argv)

    from localfilters.errors import LocalFilterError
    from localfilters.io import list_arrays
    from localfilters.logging_utils import setup_logging
    from localfilters.pipeline import process_batch

    if args.log_level:
        setup_logging(level=args.log_level)

    try:
        cfg = _cfg_from_args(args)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    input_paths = [Path(ip) for ip in args.input]
    outdir = Path(args.outdir)

    verbose = not args.quiet
    if verbose:
        print(f"localfilters  |  op={cfg.operation}  size={cfg.size}"
              f"  radius={cfg.radius}  kernel={cfg.kernel_path}")
        for ip in input_paths:
            print(f"  Input:  {ip}")
        print(f"  Output: {outdir}")

    paths = []
    for ip in input_paths:
        if ip.is_dir():
            paths.extend(list_arrays(ip))
        elif ip.is_file():
            paths.append(ip)
        else:
            print(f"ERROR: Input not found: {ip}", file=sys.stderr)
            return 1
    if not paths:
        print("ERROR: No arrays found in input path(s)", file=sys.stderr)
        return 1

    try:
        results = process_batch(paths, outdir, cfg=cfg, verbose=verbose,
                                workers=args.workers)
    except (LocalFilterError, ValueError, ImportError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if verbose:
        print(f"\nFiltered {len(results)} file(s)")
    return 0


# ======================================================================= #
# localfilters-ball  —  structuring element export
# ======================================================================= #

def ball_main(argv=None):
    """Entry point for ``localfilters-ball`` command."""
    p = argparse.ArgumentParser(
        prog="localfilters-ball",
        description="Write an N-dimensional ball mask usable as a flat kernel",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--rank", "-n", type=int, default=2,
                   help="Number of dimensions")
    p.add_argument("--radius", "-r", type=float, required=True,
                   help="Ball radius in cells")
    p.add_argument("--output", "-o", type=str, required=True,
                   help="Output .npy path")
    args = p.parse_args(argv)

    from localfilters.ball import ball
    from localfilters.errors import LocalFilterError
    from localfilters.io import write_array

    try:
        mask = ball(args.rank, args.radius)
        path = write_array(mask, args.output)
    except (LocalFilterError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(f"Ball rank={args.rank} radius={args.radius}: shape {mask.shape}, "
          f"{int(mask.sum())} cells -> {path}")
    return 0
