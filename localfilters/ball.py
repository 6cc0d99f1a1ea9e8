"""
Discrete N-dimensional balls used as isotropic flat structuring elements.

For a radius ``r`` the mask has extent ``2*R + 1`` on every axis with
``R = strict_floor(r + 1/2)``, and a cell at integer offset ``p`` is set when
``sum(p**2) <= strict_floor((r + 1/2)**2)``.
"""
from __future__ import annotations

import math

import numpy as np

from .errors import ConstructionError
from .neighborhood import Kernel, kernel


def strict_floor(x: float) -> int:
    """Largest integer strictly less than ``x``."""
    n = math.floor(x)
    return n if n < x else n - 1


def ball(rank: int, radius: float) -> np.ndarray:
    """
    Boolean mask of a ``rank``-dimensional ball of the given radius.

    Parameters
    ----------
    rank : int
        Number of dimensions (>= 1).
    radius : float
        Ball radius (>= 0).  ``radius=0`` gives a single true cell.

    Returns
    -------
    mask : ndarray of bool, shape (2*R+1,) * rank
        Symmetric under negation of any coordinate; the center is always true.
    """
    if int(rank) != rank or rank < 1:
        raise ConstructionError(f"ball rank must be a positive integer, got {rank!r}")
    if not radius >= 0:
        raise ConstructionError(f"ball radius must be >= 0, got {radius!r}")
    rank = int(rank)

    b = radius + 0.5
    r = strict_floor(b)
    qmax = strict_floor(b * b)

    # Squared distances, one axis at a time (outermost axis first).
    x2 = np.arange(-r, r + 1, dtype=np.int64) ** 2
    q = np.zeros((), dtype=np.int64)
    for _ in range(rank):
        q = q[..., np.newaxis] + x2
    return q <= qmax


def ball_kernel(rank: int, radius: float) -> Kernel:
    """Flat structuring element (boolean kernel) centered on a ball."""
    return kernel(ball(rank, radius))
