"""
Neighborhoods: the shape (and optional weights) of a sliding window.

Every neighborhood exposes a bounding box of relative offsets and a weight for
each offset inside that box:

  CenteredBox   odd extents, symmetric about the origin, weight ``True``
  CartesianBox  arbitrary corners, weight ``True``
  Kernel        explicit coefficient array plus an offset:
                ``B[k] == B.coefs[k + B.offset]``

Boolean kernels are *flat* structuring elements (membership only); numeric
kernels carry weights for convolution, local mean or grayscale morphology.

Neighborhoods are immutable.  A kernel shares the array it wraps (through a
read-only view) unless a copy is requested.
"""
from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

import numpy as np

from .errors import ConstructionError, ShapeMismatch
from .region import Index, Region, add_index, as_index, neg_index


def default_start(shape: Sequence[int]) -> Index:
    """
    Initial index of a region of the given shape whose origin sits at the
    geometrical center (same convention as ``numpy.fft.fftshift``).
    """
    return tuple(-(int(d) >> 1) for d in shape)


def _is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, (bool, np.bool_))


def _half_dim(n) -> int:
    if not _is_integer(n) or n < 1 or n % 2 == 0:
        raise ConstructionError(
            f"box extents must be positive odd integers, got {n!r}"
        )
    return int(n) >> 1


# --------------------------------------------------------------------------- #
# Base class
# --------------------------------------------------------------------------- #

class Neighborhood:
    """Common interface of all neighborhoods."""

    start: Index
    stop: Index

    @property
    def ndim(self) -> int:
        return len(self.start)

    @property
    def shape(self) -> Index:
        return self.bounding_box().shape

    @property
    def size(self) -> int:
        return self.bounding_box().size

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(bool)

    def bounding_box(self) -> Region:
        return Region(self.start, self.stop)

    def limits(self) -> Tuple[Index, Index]:
        return self.start, self.stop

    def weight(self, k):
        raise NotImplementedError

    def __getitem__(self, k):
        return self.weight(k)

    def reflect(self) -> "Neighborhood":
        """Neighborhood ``B'`` with ``B'[k] == B[-k]``."""
        raise NotImplementedError

    def is_flat(self) -> bool:
        return self.dtype == np.bool_


# --------------------------------------------------------------------------- #
# Boxes
# --------------------------------------------------------------------------- #

@dataclass(frozen=True, eq=True)
class CenteredBox(Neighborhood):
    """
    Box of odd extents centered at the origin; every weight is ``True``.

    Parameters
    ----------
    dims : tuple of int
        Extent along every axis, each odd and >= 1.
    """

    dims: Index

    def __post_init__(self):
        dims = tuple(self.dims)
        half = tuple(_half_dim(n) for n in dims)
        object.__setattr__(self, "dims", tuple(int(n) for n in dims))
        object.__setattr__(self, "_half", half)

    @property
    def start(self) -> Index:
        return neg_index(self._half)

    @property
    def stop(self) -> Index:
        return self._half

    def weight(self, k) -> bool:
        k = as_index(k)
        if k not in self.bounding_box():
            raise IndexError(f"offset {k} outside of {self!r}")
        return True

    def reflect(self) -> "CenteredBox":
        return self


@dataclass(frozen=True, eq=True)
class CartesianBox(Neighborhood):
    """Rectangular box with arbitrary inclusive corners; every weight is ``True``."""

    start: Index
    stop: Index

    def __post_init__(self):
        start, stop = as_index(self.start), as_index(self.stop)
        if len(start) != len(stop):
            raise ConstructionError(
                f"box corners have different ranks: {start} vs {stop}"
            )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "stop", stop)

    def weight(self, k) -> bool:
        k = as_index(k)
        if k not in self.bounding_box():
            raise IndexError(f"offset {k} outside of {self!r}")
        return True

    def reflect(self) -> "CartesianBox":
        return CartesianBox(neg_index(self.stop), neg_index(self.start))


# --------------------------------------------------------------------------- #
# Kernel
# --------------------------------------------------------------------------- #

@dataclass(frozen=True, eq=False)
class Kernel(Neighborhood):
    """
    Neighborhood defined by an array of coefficients.

    Parameters
    ----------
    coefs : ndarray
        Coefficients; boolean for a flat structuring element, numeric for
        weights.  Stored as a read-only view, not copied.
    start : tuple of int
        Relative offset of ``coefs[0, 0, ...]``.  The bounding box is
        ``[start, start + coefs.shape - 1]``.
    """

    coefs: np.ndarray
    start: Index

    def __post_init__(self):
        coefs = np.asarray(self.coefs)
        start = as_index(self.start)
        if coefs.ndim != len(start):
            raise ConstructionError(
                f"kernel of rank {coefs.ndim} cannot start at {start}"
            )
        view = coefs.view()
        view.flags.writeable = False
        object.__setattr__(self, "coefs", view)
        object.__setattr__(self, "start", start)

    @property
    def stop(self) -> Index:
        return tuple(s + n - 1 for s, n in zip(self.start, self.coefs.shape))

    @property
    def offset(self) -> Index:
        return neg_index(self.start)

    @property
    def dtype(self) -> np.dtype:
        return self.coefs.dtype

    def weight(self, k):
        k = as_index(k)
        if k not in self.bounding_box():
            raise IndexError(f"offset {k} outside of kernel bounds {self.limits()}")
        return self.coefs[add_index(k, self.offset)]

    def reflect(self) -> "Kernel":
        flipped = self.coefs[(slice(None, None, -1),) * self.ndim]
        return Kernel(flipped, neg_index(self.stop))

    def astype(self, dtype, flat: bool = True) -> "Kernel":
        """Kernel with coefficients of another element kind (see ``convert``)."""
        from .convert import convert_kernel
        return convert_kernel(self, dtype, flat=flat)

    def __repr__(self) -> str:
        return (f"Kernel(dtype={self.dtype}, shape={self.coefs.shape}, "
                f"start={self.start})")


# --------------------------------------------------------------------------- #
# Named constructors
# --------------------------------------------------------------------------- #

def centered_box(dims, ndim: Optional[int] = None) -> CenteredBox:
    """
    Centered box from a scalar extent (repeated ``ndim`` times) or from one
    extent per axis.
    """
    if _is_integer(dims):
        if ndim is None:
            raise ConstructionError("a scalar box extent requires the rank")
        return CenteredBox((dims,) * int(ndim))
    dims = tuple(dims)
    if ndim is not None and len(dims) != ndim:
        raise ConstructionError(
            f"expected {ndim} box extents, got {len(dims)}"
        )
    return CenteredBox(dims)


def cartesian_box(start, stop=None) -> CartesianBox:
    """Box from two corners, or from a ``Region`` passed as the only argument."""
    if stop is None:
        if not isinstance(start, Region):
            raise ConstructionError("cartesian_box needs two corners or a Region")
        return CartesianBox(start.start, start.stop)
    return CartesianBox(start, stop)


def kernel(array, start=None, copy: bool = False) -> Kernel:
    """
    Wrap an array into a kernel.

    Without ``start``, the origin is placed at the geometrical center of the
    array (``default_start``).  The array is shared unless ``copy`` is set.
    """
    arr = np.array(array, copy=True) if copy else np.asarray(array)
    if start is None:
        start = default_start(arr.shape)
    return Kernel(arr, start)


def kernel_from_region(array, region: Region) -> Kernel:
    """Wrap ``array`` so that its indices cover exactly ``region``."""
    arr = np.asarray(array)
    if arr.ndim != region.ndim or arr.shape != region.shape:
        raise ShapeMismatch(
            f"array of shape {arr.shape} does not fit region of shape {region.shape}"
        )
    return Kernel(arr, region.start)


def kernel_from_function(
    func: Callable[[Index], Any],
    region: Region,
    dtype=None,
) -> Kernel:
    """
    Kernel whose coefficient at offset ``k`` is ``func(k)`` for every ``k`` in
    ``region``.  The element kind is guessed by numpy unless ``dtype`` is given.
    """
    values = [func(k) for k in region]
    coefs = np.array(values, dtype=dtype).reshape(region.shape)
    return Kernel(coefs, region.start)


def flat_kernel(mask, values: Tuple[Any, Any], start=None) -> Kernel:
    """
    Two-valued kernel built from a boolean mask: ``values[0]`` where the mask
    is true, ``values[1]`` elsewhere.
    """
    if isinstance(mask, Kernel):
        start = mask.start if start is None else start
        mask = mask.coefs
    mask = np.asarray(mask)
    if mask.dtype != np.bool_:
        raise ConstructionError(f"flat kernels need a boolean mask, got {mask.dtype}")
    vtrue, vfalse = values
    dtype = np.result_type(vtrue, vfalse)
    coefs = np.where(mask, np.asarray(vtrue, dtype=dtype), np.asarray(vfalse, dtype=dtype))
    if start is None:
        start = default_start(mask.shape)
    return Kernel(coefs, start)


def _is_corner_pair(spec) -> bool:
    return (isinstance(spec, (tuple, list)) and len(spec) == 2
            and all(isinstance(c, (tuple, list)) for c in spec))


def neighborhood(spec, ndim: int) -> Neighborhood:
    """
    Resolve ``spec`` into a neighborhood of rank ``ndim``.

    Accepted forms, checked in this order:

      Neighborhood            used as is
      int                     centered box with that extent on every axis
      Region / (start, stop)  cartesian box (two corners, tuples or lists)
      sequence of ints        centered box, one extent per axis
      ndarray                 kernel centered with ``default_start``

    Raises ``ConstructionError`` on a rank mismatch or an unknown form.
    """
    if isinstance(spec, Neighborhood):
        B = spec
    elif _is_integer(spec):
        B = centered_box(spec, ndim)
    elif isinstance(spec, Region):
        B = cartesian_box(spec)
    elif _is_corner_pair(spec):
        B = CartesianBox(spec[0], spec[1])
    elif isinstance(spec, np.ndarray):
        B = kernel(spec)
    elif isinstance(spec, (tuple, list)) and all(_is_integer(n) for n in spec):
        B = centered_box(spec)
    else:
        raise ConstructionError(f"cannot build a neighborhood from {spec!r}")

    if B.ndim != ndim:
        raise ConstructionError(
            f"neighborhood of rank {B.ndim} cannot filter an array of rank {ndim}"
        )
    return B
