"""
Tests for neighborhood variants and the neighborhood factory.
"""
from __future__ import annotations

import numpy as np
import pytest

from localfilters.errors import ConstructionError, ShapeMismatch
from localfilters.neighborhood import (
    CartesianBox,
    CenteredBox,
    Kernel,
    cartesian_box,
    centered_box,
    default_start,
    flat_kernel,
    kernel,
    kernel_from_function,
    kernel_from_region,
    neighborhood,
)
from localfilters.region import Region


def test_default_start():
    assert default_start((3,)) == (-1,)
    assert default_start((4, 5)) == (-2, -2)
    assert default_start((1, 2)) == (0, -1)


class TestCenteredBox:

    @pytest.mark.parametrize("dims, start, stop", [
        ((3,), (-1,), (1,)),
        ((1, 5), (0, -2), (0, 2)),
        ((3, 3, 7), (-1, -1, -3), (1, 1, 3)),
    ])
    def test_bounding_box(self, dims, start, stop):
        B = CenteredBox(dims)
        assert B.limits() == (start, stop)
        assert B.shape == dims
        assert B.ndim == len(dims)

    def test_all_weights_true(self):
        B = centered_box(3, 2)
        assert all(B[k] for k in B.bounding_box())
        assert B.is_flat()

    def test_weight_outside_box(self):
        with pytest.raises(IndexError):
            centered_box(3, 1)[(2,)]

    @pytest.mark.parametrize("dims", [(2,), (3, 4), (0,), (-3,), (True,), (3.0,)])
    def test_invalid_extents(self, dims):
        with pytest.raises(ConstructionError):
            CenteredBox(dims)

    def test_scalar_extent_needs_rank(self):
        with pytest.raises(ConstructionError):
            centered_box(3)

    def test_extent_count_must_match_rank(self):
        with pytest.raises(ConstructionError):
            centered_box((3, 3), 3)

    def test_symmetric_reflection(self):
        B = centered_box((3, 5))
        assert B.reflect() == B


class TestCartesianBox:

    def test_arbitrary_corners(self):
        B = CartesianBox((0, -3), (1, 0))
        assert B.shape == (2, 4)
        assert B[(1, -3)]

    def test_even_extent_is_fine(self):
        assert cartesian_box((0,), (3,)).shape == (4,)

    def test_from_region(self):
        B = cartesian_box(Region((-1, 0), (0, 2)))
        assert B.limits() == ((-1, 0), (0, 2))

    def test_rank_mismatch(self):
        with pytest.raises(ConstructionError):
            CartesianBox((0, 0), (1,))

    def test_reflect(self):
        B = CartesianBox((0, -3), (1, 0))
        assert B.reflect() == CartesianBox((-1, 0), (0, 3))


class TestKernel:

    def test_default_anchor_is_center(self):
        K = kernel(np.arange(20).reshape(4, 5))
        assert K.start == (-2, -2)
        assert K.stop == (1, 2)
        assert K.offset == (2, 2)
        assert K[(0, 0)] == 12
        assert K[(-2, -2)] == 0

    def test_explicit_anchor(self):
        K = kernel(np.array([1.0, 2.0, 3.0]), start=(0,))
        assert K.limits() == ((0,), (2,))
        assert K[(2,)] == 3.0

    def test_shares_storage(self):
        coefs = np.ones((3, 3))
        K = kernel(coefs)
        assert np.shares_memory(K.coefs, coefs)
        assert not np.shares_memory(kernel(coefs, copy=True).coefs, coefs)

    def test_coefficients_are_read_only(self):
        K = kernel(np.ones((3, 3)))
        with pytest.raises(ValueError):
            K.coefs[0, 0] = 2.0

    def test_rank_of_anchor(self):
        with pytest.raises(ConstructionError):
            Kernel(np.ones((3, 3)), (0,))

    def test_dtype_follows_coefficients(self):
        assert kernel(np.ones(3, dtype=bool)).is_flat()
        assert kernel(np.ones(3, dtype=np.float32)).dtype == np.float32

    def test_weight_outside_bounds(self):
        with pytest.raises(IndexError):
            kernel(np.ones(3))[(2,)]

    def test_reflect(self, rng):
        K = kernel(rng.normal(size=(2, 3)), start=(0, -2))
        R = K.reflect()
        assert R.limits() == ((-1, 0), (0, 2))
        for k in K.bounding_box():
            assert R[tuple(-x for x in k)] == K[k]

    def test_from_region(self):
        K = kernel_from_region(np.arange(6).reshape(2, 3), Region((1, -1), (2, 1)))
        assert K.start == (1, -1)
        assert K[(2, 1)] == 5

    def test_from_region_shape_mismatch(self):
        with pytest.raises(ShapeMismatch):
            kernel_from_region(np.ones((2, 3)), Region((0, 0), (2, 2)))

    def test_from_function(self):
        K = kernel_from_function(lambda k: k[0] ** 2 + k[1] ** 2,
                                 Region((-1, -1), (1, 1)), dtype=np.float64)
        assert K.dtype == np.float64
        assert K[(0, 0)] == 0.0
        assert K[(1, -1)] == 2.0

    def test_flat_kernel(self):
        mask = np.array([False, True, True, True, False])
        K = flat_kernel(mask, (0.0, -np.inf))
        assert K.start == (-2,)
        assert K[(0,)] == 0.0
        assert K[(-2,)] == -np.inf

    def test_flat_kernel_requires_mask(self):
        with pytest.raises(ConstructionError):
            flat_kernel(np.ones(3), (0.0, -np.inf))


class TestNeighborhoodFactory:

    def test_passthrough(self):
        B = centered_box(3, 2)
        assert neighborhood(B, 2) is B

    def test_int(self):
        assert neighborhood(5, 3) == CenteredBox((5, 5, 5))

    def test_sequence_of_ints(self):
        assert neighborhood((3, 1), 2) == CenteredBox((3, 1))
        assert neighborhood([1, 5], 2) == CenteredBox((1, 5))

    def test_corner_pair(self):
        assert neighborhood(((-1, 0), (2, 1)), 2) == CartesianBox((-1, 0), (2, 1))

    def test_corner_pair_as_lists(self):
        B = neighborhood([[-1, 0], [1, 2]], 2)
        assert B == CartesianBox((-1, 0), (1, 2))
        assert neighborhood(([0], [3]), 1) == CartesianBox((0,), (3,))

    def test_region(self):
        assert neighborhood(Region((0,), (3,)), 1) == CartesianBox((0,), (3,))

    def test_array(self):
        B = neighborhood(np.ones((3, 3), dtype=bool), 2)
        assert isinstance(B, Kernel)
        assert B.start == (-1, -1)

    def test_rank_mismatch(self):
        with pytest.raises(ConstructionError, match="rank"):
            neighborhood(np.ones((3, 3)), 3)

    def test_even_extent(self):
        with pytest.raises(ConstructionError):
            neighborhood(4, 2)

    @pytest.mark.parametrize("spec", ["3", 3.0, None, {"size": 3}])
    def test_unknown_form(self, spec):
        with pytest.raises(ConstructionError):
            neighborhood(spec, 1)
