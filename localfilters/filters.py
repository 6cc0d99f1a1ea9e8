"""
Built-in local filters: erosion, dilation, local extrema, local mean and
convolution.

Each one is the generic engine (``engine.localfilter``) with its own
seed / accumulate / finish:

  filter        seed            accumulate(acc, v, w)             finish
  ------------  --------------  --------------------------------  ---------
  dilate        lowest value    w and v > acc  ->  v              acc
  erode         highest value   w and v < acc  ->  v              acc
  localextrema  (highest, lowest)  both of the above              (min, max)
  localmean     (0, 0)          w -> (count + 1, sum + v)         sum/count
  convolve      0               acc + v * w                       acc

Non-flat (numeric) kernels turn erosion and dilation into grayscale
morphology: ``max(v + w)`` and ``min(v - w)``.

All entry points take ``out=`` to write into an existing array and ``dtype=``
to choose the element kind of a freshly allocated result.  The neighborhood
is promoted to the element kind of the result before the pass starts.
"""
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .convert import check_conversion, convert_kernel, element_kind
from .engine import check_shapes, localfilter
from .errors import TypeConversionError
from .neighborhood import Neighborhood, neighborhood


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #

def prepare_output(
    A: np.ndarray,
    out: Optional[np.ndarray] = None,
    dtype=None,
) -> np.ndarray:
    """
    Validate ``out`` against ``A`` or allocate a new destination.

    ``dtype`` defaults to the element kind of ``A``; the values of ``A`` must
    be convertible into the destination kind (see ``convert``).
    """
    if out is None:
        target = A.dtype if dtype is None else np.dtype(dtype)
        check_conversion(A.dtype, target)
        return np.empty(A.shape, dtype=target)
    check_shapes(out, A)
    if dtype is not None and np.dtype(dtype) != out.dtype:
        raise TypeConversionError(
            f"requested dtype {np.dtype(dtype)} but destination is {out.dtype}"
        )
    check_conversion(A.dtype, out.dtype)
    return out


def type_limits(dtype) -> Tuple[object, object]:
    """Lowest and highest value of an element kind (``-inf``/``inf`` for floats)."""
    dtype = np.dtype(dtype)
    kind = element_kind(dtype)
    if kind == "bool":
        return False, True
    if kind == "integer":
        info = np.iinfo(dtype)
        return info.min, info.max
    return dtype.type(-np.inf), dtype.type(np.inf)


def _morphology_neighborhood(B: Neighborhood, dtype) -> Tuple[Neighborhood, bool]:
    if B.is_flat():
        return B, True
    return convert_kernel(B, dtype, flat=True, allow_narrowing=False), False


def _identity(acc):
    return acc


def _lower(acc, v, w, flat):
    if flat:
        return np.where(v < acc, v, acc) if w else acc
    if w == -np.inf:
        return acc
    u = v - w
    return np.where(u < acc, u, acc)


def _upper(acc, v, w, flat):
    if flat:
        return np.where(v > acc, v, acc) if w else acc
    if w == -np.inf:
        return acc
    u = v + w
    return np.where(u > acc, u, acc)


# --------------------------------------------------------------------------- #
# Morphology
# --------------------------------------------------------------------------- #

def erode(A, B=3, *, out=None, dtype=None, workers: int = 1) -> np.ndarray:
    """
    Local minimum of ``A`` over neighborhood ``B``.

    Parameters
    ----------
    A : array_like
        Source array (not modified).
    B : Neighborhood, int, sequence of int, corner pair or ndarray
        Structuring element (see ``neighborhood``).  Default: centered box of
        extent 3 on every axis.
    out : ndarray, optional
        Destination with the shape of ``A``.
    dtype : numpy dtype, optional
        Element kind of a newly allocated result.
    workers : int
        Threads used by the engine.

    Returns
    -------
    ndarray

    Examples
    --------
    >>> erode(np.array([1, 2, 3, 4, 5]), 3)
    array([1, 1, 2, 3, 4])
    """
    A = np.asarray(A)
    dst = prepare_output(A, out, dtype)
    B, flat = _morphology_neighborhood(neighborhood(B, A.ndim), dst.dtype)
    _, hi = type_limits(dst.dtype)

    def seed(shape):
        return np.full(shape, hi, dtype=dst.dtype)

    def accumulate(acc, v, w):
        return _lower(acc, v, w, flat)

    return localfilter(dst, A, B, seed, accumulate, _identity, workers=workers)


def dilate(A, B=3, *, out=None, dtype=None, workers: int = 1) -> np.ndarray:
    """
    Local maximum of ``A`` over neighborhood ``B``.

    Same parameters as ``erode``.

    >>> dilate(np.array([1, 2, 3, 4, 5]), 3)
    array([2, 3, 4, 5, 5])
    """
    A = np.asarray(A)
    dst = prepare_output(A, out, dtype)
    B, flat = _morphology_neighborhood(neighborhood(B, A.ndim), dst.dtype)
    lo, _ = type_limits(dst.dtype)

    def seed(shape):
        return np.full(shape, lo, dtype=dst.dtype)

    def accumulate(acc, v, w):
        return _upper(acc, v, w, flat)

    return localfilter(dst, A, B, seed, accumulate, _identity, workers=workers)


def localextrema(
    A, B=3, *, out=None, dtype=None, workers: int = 1,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Erosion and dilation of ``A`` in a single pass.

    ``out``, when given, is a pair ``(Amin, Amax)`` of destinations.

    Returns
    -------
    Amin, Amax : ndarray
    """
    A = np.asarray(A)
    if out is None:
        out = (None, None)
    if len(out) != 2:
        raise ValueError("localextrema needs a pair of destinations")
    amin = prepare_output(A, out[0], dtype)
    amax = prepare_output(A, out[1], dtype)
    if amin.dtype != amax.dtype:
        raise TypeConversionError(
            f"destinations have different element kinds: {amin.dtype} vs {amax.dtype}"
        )
    B, flat = _morphology_neighborhood(neighborhood(B, A.ndim), amin.dtype)
    lo, hi = type_limits(amin.dtype)

    def seed(shape):
        return (np.full(shape, hi, dtype=amin.dtype),
                np.full(shape, lo, dtype=amax.dtype))

    def accumulate(acc, v, w):
        vmin, vmax = acc
        return _lower(vmin, v, w, flat), _upper(vmax, v, w, flat)

    return localfilter((amin, amax), A, B, seed, accumulate, _identity, workers=workers)


# --------------------------------------------------------------------------- #
# Linear filters
# --------------------------------------------------------------------------- #

def localmean(A, B=3, *, out=None, dtype=None, workers: int = 1) -> np.ndarray:
    """
    Local (weighted) average of ``A`` over neighborhood ``B``.

    Boolean neighborhoods average the cells they cover; numeric kernels give
    ``sum(w * v) / sum(w)``.  Near the edges only cells inside the array
    count.  A window with nothing in it yields NaN (0 for integer results);
    integer results are rounded to the nearest value.
    """
    A = np.asarray(A)
    dst = prepare_output(A, out, dtype)
    B = neighborhood(B, A.ndim)
    integral = element_kind(dst.dtype) != "floating"
    work = np.dtype(np.float64) if integral else dst.dtype

    if B.is_flat():
        def seed(shape):
            return np.zeros(shape, dtype=np.int64), np.zeros(shape, dtype=work)

        def accumulate(acc, v, w):
            if not w:
                return acc
            count, total = acc
            return count + 1, total + v
    else:
        B = convert_kernel(B, work, flat=False, allow_narrowing=False)

        def seed(shape):
            return np.zeros(shape, dtype=work), np.zeros(shape, dtype=work)

        def accumulate(acc, v, w):
            count, total = acc
            return count + w, total + w * v

    def finish(acc):
        count, total = acc
        empty = count == 0
        with np.errstate(divide="ignore", invalid="ignore"):
            mean = total / count
        if integral:
            return np.where(empty, 0, np.rint(mean))
        return np.where(empty, np.nan, mean)

    return localfilter(dst, A, B, seed, accumulate, finish, workers=workers)


def convolve(A, B=3, *, out=None, dtype=None, workers: int = 1) -> np.ndarray:
    """
    Weighted sum ``dst[c] = sum_k B[k] * A[c + k]`` over the part of the
    window inside the array.

    Boolean neighborhoods act as 1/0 weights, so a box gives a local sum.
    The kernel is converted to the element kind of the result first
    (floating kernels cannot feed integer results).
    """
    A = np.asarray(A)
    dst = prepare_output(A, out, dtype)
    B = convert_kernel(neighborhood(B, A.ndim), dst.dtype, flat=False,
                       allow_narrowing=False)

    def seed(shape):
        return np.zeros(shape, dtype=dst.dtype)

    def accumulate(acc, v, w):
        return acc + v * w

    return localfilter(dst, A, B, seed, accumulate, _identity, workers=workers)
