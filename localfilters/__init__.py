"""
localfilters — local (sliding-window) filters for N-dimensional numpy arrays.

Quick start:
    import numpy as np
    from localfilters import erode, dilate, opening, top_hat, convolve, ball_kernel

    image = np.random.default_rng(0).random((256, 256))
    eroded = erode(image, 5)                     # 5x5 centered box
    opened = opening(image, ball_kernel(2, 3))   # disk of radius 3
    smooth = convolve(image, np.full((3, 3), 1 / 9))
"""

__version__ = "0.1.0"

from .ball import ball, ball_kernel, strict_floor
from .config import FilterConfig
from .convert import as_kernel, check_conversion, convert_kernel, float_kernel
from .engine import localfilter
from .errors import ConstructionError, LocalFilterError, ShapeMismatch, TypeConversionError
from .filters import convolve, dilate, erode, localextrema, localmean
from .morphology import bottom_hat, closing, opening, top_hat
from .neighborhood import (
    CartesianBox,
    CenteredBox,
    Kernel,
    Neighborhood,
    cartesian_box,
    centered_box,
    default_start,
    flat_kernel,
    kernel,
    kernel_from_function,
    kernel_from_region,
    neighborhood,
)
from .pipeline import apply_filter, process_batch, process_file
from .region import Region

__all__ = [
    "ball",
    "ball_kernel",
    "strict_floor",
    "FilterConfig",
    "as_kernel",
    "check_conversion",
    "convert_kernel",
    "float_kernel",
    "localfilter",
    "ConstructionError",
    "LocalFilterError",
    "ShapeMismatch",
    "TypeConversionError",
    "convolve",
    "dilate",
    "erode",
    "localextrema",
    "localmean",
    "bottom_hat",
    "closing",
    "opening",
    "top_hat",
    "CartesianBox",
    "CenteredBox",
    "Kernel",
    "Neighborhood",
    "cartesian_box",
    "centered_box",
    "default_start",
    "flat_kernel",
    "kernel",
    "kernel_from_function",
    "kernel_from_region",
    "neighborhood",
    "apply_filter",
    "process_batch",
    "process_file",
    "Region",
    "__version__",
]
