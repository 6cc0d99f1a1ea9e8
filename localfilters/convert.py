"""
Element-kind conversion of arrays and kernels.

Supported kinds form a small closed set: ``bool``, signed and unsigned
integers, and ``float16`` / ``float32`` / ``float64``.  One routine handles
every target kind.

Array conversion rules (``check_conversion``, source kind -> target kind):

  same kind           identity, no copy
  bool -> anything    value conversion
  integer -> integer  value conversion
  integer -> float    value conversion
  float -> float      value conversion
  anything else       TypeConversionError

Kernel conversion rules (``convert_kernel``):

  same kind            identity, no copy
  bool -> float        flat:      True -> 0, False -> -inf
                       indicator: True -> 1, False -> 0
  bool -> integer      indicator only (an integer has no -inf)
  numeric -> numeric   value conversion into new storage; filters pass
                       ``allow_narrowing=False`` so that the array rules
                       above apply (no float kernel for an integer result)
  numeric -> bool      TypeConversionError

The *flat* mapping turns a boolean mask into a grayscale structuring element
that leaves morphology unchanged: dilation adds the weights (``v + -inf`` never
wins a max) and erosion subtracts them (``v - -inf`` never wins a min).
"""
from __future__ import annotations

import numpy as np

from .errors import TypeConversionError
from .neighborhood import CartesianBox, CenteredBox, Kernel, Neighborhood


def element_kind(dtype) -> str:
    """Return ``"bool"``, ``"integer"`` or ``"floating"``; raise otherwise."""
    try:
        dtype = np.dtype(dtype)
    except TypeError as e:
        raise TypeConversionError(f"not an element kind: {dtype!r}") from e
    if dtype == np.bool_:
        return "bool"
    if np.issubdtype(dtype, np.integer):
        return "integer"
    if np.issubdtype(dtype, np.floating) and dtype.itemsize <= 8:
        return "floating"
    raise TypeConversionError(f"unsupported element kind {dtype}")


def check_conversion(src, dst) -> None:
    """Raise ``TypeConversionError`` unless values of ``src`` convert into ``dst``."""
    src_kind, dst_kind = element_kind(src), element_kind(dst)
    if src_kind == dst_kind or src_kind == "bool":
        return
    if src_kind == "integer" and dst_kind == "floating":
        return
    raise TypeConversionError(
        f"cannot convert elements of type {np.dtype(src)} into {np.dtype(dst)}"
    )


def as_kernel(B: Neighborhood) -> Kernel:
    """Kernel equivalent to ``B``; boxes become boolean kernels of ones."""
    if isinstance(B, Kernel):
        return B
    if isinstance(B, (CenteredBox, CartesianBox)):
        return Kernel(np.ones(B.shape, dtype=bool), B.start)
    raise TypeConversionError(f"cannot convert {B!r} into a kernel")


def convert_kernel(
    B: Neighborhood,
    dtype,
    flat: bool = True,
    allow_narrowing: bool = True,
) -> Kernel:
    """
    Kernel with coefficients of element kind ``dtype``.

    Parameters
    ----------
    B : Neighborhood
        Box or kernel.
    dtype : numpy dtype
        Target kind.
    flat : bool
        How boolean coefficients map to floating point: ``True`` gives the
        flat structuring element (0 / -inf) used by morphology, ``False`` the
        indicator weights (1 / 0) used by linear filters.
    allow_narrowing : bool
        Numeric coefficients convert into any numeric kind (float -> integer
        truncates like ``ndarray.astype``).  With ``False`` the array rules of
        ``check_conversion`` apply instead.

    Returns
    -------
    Kernel
        ``B`` itself when no conversion is needed, otherwise a kernel with
        new coefficient storage and the same bounding box.
    """
    K = as_kernel(B)
    target = np.dtype(dtype)
    src_kind, dst_kind = element_kind(K.dtype), element_kind(target)

    if K.dtype == target:
        return K

    if src_kind == "bool":
        if dst_kind == "floating" and flat:
            values = (target.type(0), target.type(-np.inf))
        elif dst_kind != "bool" and not flat:
            values = (target.type(1), target.type(0))
        else:
            raise TypeConversionError(
                f"no {'flat' if flat else 'indicator'} conversion of a boolean "
                f"kernel into {target}"
            )
        coefs = np.where(K.coefs, values[0], values[1]).astype(target, copy=False)
        return Kernel(coefs, K.start)

    if dst_kind == "bool":
        raise TypeConversionError(
            f"cannot convert {K.dtype} kernel coefficients into booleans"
        )
    if not allow_narrowing:
        check_conversion(K.dtype, target)
    return Kernel(K.coefs.astype(target), K.start)


def float_kernel(B: Neighborhood, precision: int = 64, flat: bool = True) -> Kernel:
    """Shorthand for ``convert_kernel`` into ``float16``, ``float32`` or ``float64``."""
    if precision not in (16, 32, 64):
        raise TypeConversionError(f"no float{precision} element kind")
    return convert_kernel(B, np.dtype(f"float{precision}"), flat=flat)
