"""
Exception types raised by localfilters.

All of them are raised synchronously, before the destination of a filter is
touched, so a failed call never leaves partial output behind.
"""
from __future__ import annotations


class LocalFilterError(ValueError):
    """Base class for every error raised by the filtering layer."""


class ConstructionError(LocalFilterError):
    """Invalid neighborhood extents, or a rank mismatch."""


class ShapeMismatch(LocalFilterError):
    """Source and destination shapes differ, or a region does not fit an array."""


class TypeConversionError(LocalFilterError, TypeError):
    """No conversion rule exists between two element kinds."""
