"""
Multi-indices and rectangular regions.

A multi-index is a plain tuple of ints.  A ``Region`` is an inclusive,
axis-aligned box ``[start, stop]``; it is empty as soon as one axis has
``stop < start``.

Iteration over a region is row-major (last axis fastest).  The order is the
same on every call, which matters because it fixes the floating-point
accumulation order of convolution and local mean.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

from .errors import ConstructionError

Index = Tuple[int, ...]


# --------------------------------------------------------------------------- #
# Index algebra
# --------------------------------------------------------------------------- #

def as_index(values: Sequence[int]) -> Index:
    return tuple(int(v) for v in values)


def add_index(a: Index, b: Index) -> Index:
    return tuple(x + y for x, y in zip(a, b))


def sub_index(a: Index, b: Index) -> Index:
    return tuple(x - y for x, y in zip(a, b))


def neg_index(a: Index) -> Index:
    return tuple(-x for x in a)


def index_le(a: Index, b: Index) -> bool:
    """Componentwise ``a <= b``."""
    return all(x <= y for x, y in zip(a, b))


def index_lt(a: Index, b: Index) -> bool:
    """Componentwise ``a < b``."""
    return all(x < y for x, y in zip(a, b))


def _length(start: int, stop: int) -> int:
    return max(stop - start + 1, 0)


# --------------------------------------------------------------------------- #
# Region
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class Region:
    """
    Inclusive rectangular set of multi-indices ``start <= I <= stop``.

    Parameters
    ----------
    start, stop : tuple of int
        First and last index along every axis.  Both must have the same rank.
    """

    start: Index
    stop: Index

    def __post_init__(self):
        object.__setattr__(self, "start", as_index(self.start))
        object.__setattr__(self, "stop", as_index(self.stop))
        if len(self.start) != len(self.stop):
            raise ConstructionError(
                f"region corners have different ranks: {self.start} vs {self.stop}"
            )

    @classmethod
    def from_shape(cls, shape: Sequence[int]) -> "Region":
        """Region of valid indices of an array with the given shape."""
        return cls(tuple(0 for _ in shape), tuple(int(n) - 1 for n in shape))

    @property
    def ndim(self) -> int:
        return len(self.start)

    def length(self, d: int) -> int:
        return _length(self.start[d], self.stop[d])

    @property
    def shape(self) -> Index:
        return tuple(map(_length, self.start, self.stop))

    @property
    def size(self) -> int:
        n = 1
        for d in self.shape:
            n *= d
        return n

    def is_empty(self) -> bool:
        return any(d == 0 for d in self.shape)

    def intersect(self, other: "Region") -> "Region":
        """Largest region contained in both; may be empty."""
        return Region(
            tuple(map(max, self.start, other.start)),
            tuple(map(min, self.stop, other.stop)),
        )

    def shift(self, offset: Index) -> "Region":
        return Region(add_index(self.start, offset), add_index(self.stop, offset))

    def slices(self) -> Tuple[slice, ...]:
        """Numpy basic-indexing slices selecting this region of an array."""
        if self.is_empty():
            raise ValueError("cannot build slices for an empty region")
        return tuple(slice(i, j + 1) for i, j in zip(self.start, self.stop))

    def __contains__(self, index) -> bool:
        index = as_index(index)
        return (len(index) == self.ndim
                and index_le(self.start, index)
                and index_le(index, self.stop))

    def __iter__(self) -> Iterator[Index]:
        if self.is_empty():
            return iter(())
        ranges = [range(i, j + 1) for i, j in zip(self.start, self.stop)]
        return itertools.product(*ranges)

    def __len__(self) -> int:
        return self.size


def length(region: Region, d: int) -> int:
    return region.length(d)


def intersect(r1: Region, r2: Region) -> Region:
    return r1.intersect(r2)
