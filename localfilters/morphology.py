"""
Morphological operators built from two engine passes.

  opening(A, B)    = dilate(erode(A, B), B')
  closing(A, B)    = erode(dilate(A, B), B')
  top_hat(A, B)    = A - opening(A, B)        (bright summits)
  bottom_hat(A, B) = closing(A, B) - A        (dark valleys)

``B'`` is the reflection of ``B`` (``B'[k] == B[-k]``), which is ``B`` itself
for every symmetric neighborhood.  It makes the second pass the adjoint of the
first, so that opening and closing are idempotent for off-centered
neighborhoods too.

Every operator allocates a single intermediate: the first pass goes to a
work array of the result's element kind, the second pass and the hat
difference are written into the destination.

``top_hat`` and ``bottom_hat`` optionally pre-smooth ``A`` with a closing
(resp. opening) by a second structuring element ``S`` to suppress noise.
"""
from __future__ import annotations

import numpy as np

from .filters import dilate, erode, prepare_output
from .neighborhood import neighborhood


def _subtract_into(a, b, out):
    """``out = a - b`` where ``b`` may be ``out`` itself."""
    # Boolean arrays have no subtraction; b <= a holds for both uses, and
    # a > b is then a and not b.
    if out.dtype == np.bool_:
        return np.greater(a, b, out=out)
    return np.subtract(a, b, out=out, casting="unsafe")


def opening(A, B=3, *, out=None, dtype=None, workers: int = 1) -> np.ndarray:
    """
    Erosion followed by dilation: removes bright structures smaller than
    ``B`` and keeps larger ones.

    Parameters
    ----------
    A : array_like
    B : neighborhood spec (default: box of extent 3)
    out : ndarray, optional
        Destination with the shape of ``A``.
    dtype : numpy dtype, optional
        Element kind of a newly allocated result (default: that of ``A``).
    workers : int

    Returns
    -------
    ndarray
    """
    A = np.asarray(A)
    dst = prepare_output(A, out, dtype)
    B = neighborhood(B, A.ndim)
    wrk = erode(A, B, dtype=dst.dtype, workers=workers)
    return dilate(wrk, B.reflect(), out=dst, workers=workers)


def closing(A, B=3, *, out=None, dtype=None, workers: int = 1) -> np.ndarray:
    """
    Dilation followed by erosion: fills dark structures smaller than ``B``.

    Same parameters as ``opening``.
    """
    A = np.asarray(A)
    dst = prepare_output(A, out, dtype)
    B = neighborhood(B, A.ndim)
    wrk = dilate(A, B, dtype=dst.dtype, workers=workers)
    return erode(wrk, B.reflect(), out=dst, workers=workers)


def top_hat(A, B=3, S=None, *, out=None, dtype=None, workers: int = 1) -> np.ndarray:
    """
    ``A - opening(A, B)``: what remains of the summits narrower than ``B``.

    Parameters
    ----------
    A : array_like
    B : neighborhood spec
        Structuring element of the opening.
    S : neighborhood spec, optional
        When given, ``A`` is first smoothed by ``closing(A, S)``.
    out : ndarray, optional
    dtype : numpy dtype, optional
    workers : int
    """
    A = np.asarray(A)
    dst = prepare_output(A, out, dtype)
    B = neighborhood(B, A.ndim)
    if S is not None:
        A = closing(A, S, dtype=dst.dtype, workers=workers)
    opening(A, B, out=dst, workers=workers)
    return _subtract_into(A, dst, dst)


def bottom_hat(A, B=3, S=None, *, out=None, dtype=None, workers: int = 1) -> np.ndarray:
    """
    ``closing(A, B) - A``: depth of the valleys narrower than ``B``.

    When ``S`` is given, ``A`` is first smoothed by ``opening(A, S)``.
    """
    A = np.asarray(A)
    dst = prepare_output(A, out, dtype)
    B = neighborhood(B, A.ndim)
    if S is not None:
        A = opening(A, S, dtype=dst.dtype, workers=workers)
    closing(A, B, out=dst, workers=workers)
    return _subtract_into(dst, A, dst)
