"""
I/O helpers: read and write N-d arrays (NPY / TIFF / MRC), write run
summaries (CSV).
"""
from __future__ import annotations

import csv
from pathlib import Path
from typing import List

import numpy as np


ARRAY_EXTENSIONS = (".npy", ".tif", ".tiff", ".mrc", ".mrcs")


# --------------------------------------------------------------------------- #
# Reading
# --------------------------------------------------------------------------- #

def read_array(path: str | Path) -> np.ndarray:
    """
    Load an N-d array, keeping its element kind.

    Supports:
      - NumPy        (.npy)
      - TIFF         (.tif, .tiff)   requires tifffile
      - MRC/MRC2014  (.mrc, .mrcs)   requires mrcfile
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".npy":
        return np.load(path, allow_pickle=False)
    elif suffix in {".tif", ".tiff"}:
        return _read_tiff(path)
    elif suffix in {".mrc", ".mrcs"}:
        return _read_mrc(path)
    else:
        raise ValueError(f"Unsupported file format: {suffix!r}. Use .npy, .tif/.tiff or .mrc")


def _read_mrc(path: Path) -> np.ndarray:
    try:
        import mrcfile
    except ImportError:
        raise ImportError("mrcfile is required to read MRC files: pip install mrcfile")

    with mrcfile.open(str(path), mode="r", permissive=True) as mrc:
        return np.array(mrc.data)


def _read_tiff(path: Path) -> np.ndarray:
    try:
        import tifffile
    except ImportError:
        raise ImportError("tifffile is required to read TIFF files: pip install tifffile")

    return np.asarray(tifffile.imread(str(path)))


# --------------------------------------------------------------------------- #
# Writing — arrays
# --------------------------------------------------------------------------- #

def write_array(array: np.ndarray, path: str | Path) -> Path:
    """Write ``array`` in the format given by the extension of ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    suffix = path.suffix.lower()

    if suffix == ".npy":
        np.save(path, array, allow_pickle=False)
    elif suffix in {".tif", ".tiff"}:
        try:
            import tifffile
        except ImportError:
            raise ImportError("tifffile is required to write TIFF files: pip install tifffile")
        tifffile.imwrite(str(path), array)
    elif suffix in {".mrc", ".mrcs"}:
        try:
            import mrcfile
        except ImportError:
            raise ImportError("mrcfile is required to write MRC files: pip install mrcfile")
        # MRC has no float64 or bool mode
        data = array.astype(np.float32) if array.dtype.kind in "fb" else array
        with mrcfile.new(str(path), overwrite=True) as mrc:
            mrc.set_data(data)
    else:
        raise ValueError(f"Unsupported file format: {suffix!r}. Use .npy, .tif/.tiff or .mrc")
    return path


# --------------------------------------------------------------------------- #
# Writing — CSV summary
# --------------------------------------------------------------------------- #

SUMMARY_CSV_FIELDS = [
    "path", "output", "operation", "shape", "dtype", "min", "max", "time_s",
]


def write_summary_csv(rows: List[dict], path: str | Path) -> None:
    """Write one row per processed file. Missing keys are left empty."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=SUMMARY_CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow({k: row.get(k, "") for k in SUMMARY_CSV_FIELDS})


def read_summary_csv(path: str | Path) -> List[dict]:
    """Read a summary CSV back into a list of dicts (values stay strings)."""
    path = Path(path)
    with open(path, newline="") as fh:
        return list(csv.DictReader(fh))


# --------------------------------------------------------------------------- #
# Utility
# --------------------------------------------------------------------------- #

def list_arrays(directory: str | Path, extensions=ARRAY_EXTENSIONS) -> List[Path]:
    """Return sorted list of array files in a directory."""
    directory = Path(directory)
    paths = []
    for ext in extensions:
        paths.extend(directory.glob(f"*{ext}"))
    return sorted(set(paths))
