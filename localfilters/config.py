"""
FilterConfig — every tunable parameter of a file-level filtering run in one
dataclass.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from .ball import ball_kernel
from .neighborhood import Neighborhood, centered_box, kernel


OPERATION_NAMES = (
    "erode", "dilate", "opening", "closing", "top_hat", "bottom_hat",
    "localmean", "convolve",
)
HAT_OPERATIONS = ("top_hat", "bottom_hat")
OUTPUT_FORMATS = ("npy", "tif", "mrc")


def _check_size(size, name: str) -> None:
    sizes = (size,) if isinstance(size, int) else tuple(size)
    if not sizes or any(not isinstance(n, int) or n < 1 or n % 2 == 0 for n in sizes):
        raise ValueError(f"{name} must be a positive odd integer or a tuple of them")


@dataclass
class FilterConfig:
    # ------------------------------------------------------------------ #
    # Operation
    # ------------------------------------------------------------------ #
    operation: str = "erode"

    # ------------------------------------------------------------------ #
    # Neighborhood: exactly one source is used, in this order of priority:
    #   kernel_path > radius > size
    # ------------------------------------------------------------------ #
    size: Union[int, Tuple[int, ...]] = 3      # centered box extent(s)
    radius: Optional[float] = None             # isotropic ball instead of a box
    kernel_path: Optional[str] = None          # .npy coefficients, centered

    # ------------------------------------------------------------------ #
    # Pre-smoothing for top_hat / bottom_hat (None = no smoothing)
    # ------------------------------------------------------------------ #
    smooth_size: Optional[Union[int, Tuple[int, ...]]] = None
    smooth_radius: Optional[float] = None

    # ------------------------------------------------------------------ #
    # Numerics
    # ------------------------------------------------------------------ #
    dtype: Optional[str] = None   # output element kind; None = input kind
    threads: int = 1              # engine threads per array

    # ------------------------------------------------------------------ #
    # Output
    # ------------------------------------------------------------------ #
    output_suffix: str = "_filtered"
    output_format: str = "npy"
    write_summary: bool = True

    def __post_init__(self):
        if self.operation not in OPERATION_NAMES:
            raise ValueError(
                f"operation must be one of {', '.join(OPERATION_NAMES)}"
            )
        _check_size(self.size, "size")
        if self.radius is not None and self.radius < 0:
            raise ValueError("radius must be >= 0")
        if self.smooth_size is not None:
            _check_size(self.smooth_size, "smooth_size")
        if self.smooth_radius is not None and self.smooth_radius < 0:
            raise ValueError("smooth_radius must be >= 0")
        if (self.smooth_size is not None or self.smooth_radius is not None) \
                and self.operation not in HAT_OPERATIONS:
            raise ValueError("pre-smoothing only applies to top_hat and bottom_hat")
        if self.dtype is not None:
            try:
                np.dtype(self.dtype)
            except TypeError:
                raise ValueError(f"unknown dtype {self.dtype!r}")
        if self.threads < 1:
            raise ValueError("threads must be >= 1")
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)}"
            )
        if not isinstance(self.size, int):
            self.size = tuple(self.size)
        if self.smooth_size is not None and not isinstance(self.smooth_size, int):
            self.smooth_size = tuple(self.smooth_size)

    def neighborhood(self, ndim: int) -> Neighborhood:
        """Structuring element / kernel for an array of rank ``ndim``."""
        if self.kernel_path is not None:
            from .io import read_array
            return kernel(read_array(self.kernel_path))
        if self.radius is not None:
            return ball_kernel(ndim, self.radius)
        return centered_box(self.size, ndim)

    def smoothing(self, ndim: int) -> Optional[Neighborhood]:
        """Pre-smoothing structuring element, or None."""
        if self.smooth_radius is not None:
            return ball_kernel(ndim, self.smooth_radius)
        if self.smooth_size is not None:
            return centered_box(self.smooth_size, ndim)
        return None
