"""
Orchestrator: run a configured filter on arrays and files.

  apply_filter()   one in-memory array
  process_file()   read -> filter -> write, one file
  process_batch()  many files, optionally over a multiprocessing.Pool,
                   plus a combined summary CSV
"""
from __future__ import annotations

import multiprocessing
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

import numpy as np

from .config import HAT_OPERATIONS, FilterConfig
from .filters import convolve, dilate, erode, localmean
from .io import list_arrays, read_array, write_array, write_summary_csv
from .morphology import bottom_hat, closing, opening, top_hat


OPERATIONS: Dict[str, Callable] = {
    "erode": erode,
    "dilate": dilate,
    "opening": opening,
    "closing": closing,
    "top_hat": top_hat,
    "bottom_hat": bottom_hat,
    "localmean": localmean,
    "convolve": convolve,
}


def apply_filter(array: np.ndarray, cfg: FilterConfig) -> np.ndarray:
    """
    Run the operation described by ``cfg`` on ``array``.

    Returns a new array; ``array`` is not modified.
    """
    array = np.asarray(array)
    func = OPERATIONS[cfg.operation]
    B = cfg.neighborhood(array.ndim)

    kwargs = {"workers": cfg.threads, "dtype": cfg.dtype}
    if cfg.operation in HAT_OPERATIONS:
        kwargs["S"] = cfg.smoothing(array.ndim)
    return func(array, B, **kwargs)


def output_path(path: Path, outdir: Path, cfg: FilterConfig) -> Path:
    return outdir / f"{path.stem}{cfg.output_suffix}.{cfg.output_format}"


def process_file(
    path: str | Path,
    outdir: str | Path,
    cfg: Optional[FilterConfig] = None,
    verbose: bool = True,
) -> dict:
    """
    Full pipeline for one file: read → filter → write.

    Returns
    -------
    result : dict
        {"path", "output", "operation", "shape", "dtype", "min", "max", "time_s"}
    """
    path = Path(path)
    outdir = Path(outdir)
    if cfg is None:
        cfg = FilterConfig()

    t0 = time.perf_counter()

    if verbose:
        print(f"  Reading: {path.name}")
    array = read_array(path)

    result = apply_filter(array, cfg)
    out_path = write_array(result, output_path(path, outdir, cfg))

    elapsed = time.perf_counter() - t0
    if verbose:
        print(f"  {cfg.operation} {array.shape} -> {out_path.name}  ({elapsed:.1f}s)")

    finite = result[np.isfinite(result)] if result.dtype.kind == "f" else result
    return {
        "path": str(path),
        "output": str(out_path),
        "operation": cfg.operation,
        "shape": "x".join(str(n) for n in result.shape),
        "dtype": str(result.dtype),
        "min": float(finite.min()) if finite.size else "",
        "max": float(finite.max()) if finite.size else "",
        "time_s": round(elapsed, 2),
    }


def process_batch(
    inputs,
    outdir: str | Path,
    cfg: Optional[FilterConfig] = None,
    verbose: bool = True,
    workers: int = 1,
) -> List[dict]:
    """
    Filter every array file in a directory (or from a pre-built path list).

    Parameters
    ----------
    inputs : str, Path, or list of Path
        Directory containing array files, or an explicit list of files.
    outdir : str or Path
    cfg : FilterConfig or None
    verbose : bool
    workers : int
        Number of worker processes.  1 = sequential (no multiprocessing
        overhead).  >1 uses ``multiprocessing.Pool``.

    Returns
    -------
    results : list of dict
    """
    if isinstance(inputs, (list, tuple)):
        paths = sorted(Path(p) for p in inputs)
    else:
        paths = list_arrays(inputs)
    if not paths:
        print(f"No arrays found in {inputs}")
        return []

    if cfg is None:
        cfg = FilterConfig()

    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    if verbose:
        print(f"Found {len(paths)} file(s)")
        if workers > 1:
            print(f"Using {workers} workers")

    t0_wall = time.perf_counter()

    if workers > 1:
        args_list = [(str(p), str(outdir), cfg, verbose) for p in paths]
        with multiprocessing.Pool(workers) as pool:
            results = pool.starmap(_process_one, args_list)
    else:
        results = []
        for i, p in enumerate(paths, 1):
            if verbose:
                print(f"[{i}/{len(paths)}] {p.name}")
            results.append(process_file(p, outdir, cfg=cfg, verbose=verbose))

    wall_time = time.perf_counter() - t0_wall
    if verbose:
        total_cpu = sum(r["time_s"] for r in results)
        print(f"\nDone. {len(results)} file(s) ({wall_time:.1f}s wall, "
              f"{total_cpu:.1f}s CPU)")

    if cfg.write_summary:
        summary_path = outdir / "filter_summary.csv"
        write_summary_csv(results, summary_path)
        if verbose:
            print(f"Summary CSV: {summary_path}")

    return results


# --------------------------------------------------------------------------- #
# Multiprocessing helper (must be module-level for pickling)
# --------------------------------------------------------------------------- #

def _process_one(path: str, outdir: str, cfg: FilterConfig, verbose: bool) -> dict:
    """Thin wrapper around process_file for multiprocessing.Pool.starmap."""
    return process_file(path, outdir, cfg=cfg, verbose=verbose)
