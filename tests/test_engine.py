"""
Tests for the generic windowed-reduction engine.
"""
from __future__ import annotations

import numpy as np
import pytest

from localfilters.engine import localfilter, split_positions
from localfilters.errors import ConstructionError, ShapeMismatch
from localfilters.neighborhood import CartesianBox, centered_box, kernel


def _count_primitives():
    """Number of true cells of the shrunk window at every position."""
    def seed(shape):
        return np.zeros(shape, dtype=np.int64)

    def accumulate(acc, v, w):
        return acc + 1 if w else acc

    return seed, accumulate, (lambda acc: acc)


class TestLocalfilter:

    def test_shrinking_window(self):
        A = np.zeros(5)
        dst = np.empty(5, dtype=np.int64)
        localfilter(dst, A, 3, *_count_primitives())
        np.testing.assert_array_equal(dst, [2, 3, 3, 3, 2])

    def test_window_counts_2d(self):
        dst = np.empty((4, 5), dtype=np.int64)
        localfilter(dst, np.zeros((4, 5)), centered_box(3, 2), *_count_primitives())
        assert dst[0, 0] == 4
        assert dst[0, 2] == 6
        assert dst[2, 2] == 9

    def test_offset_window_outside_array(self):
        # Every offset points past the last cell for the final two positions.
        dst = np.empty(5, dtype=np.int64)
        localfilter(dst, np.zeros(5), CartesianBox((2,), (3,)), *_count_primitives())
        np.testing.assert_array_equal(dst, [2, 2, 1, 0, 0])

    def test_row_major_accumulation_order(self):
        # acc * 10 + v records the sequence of visited values as digits.
        A = np.array([[1, 2, 3],
                      [4, 5, 6]])

        def seed(shape):
            return np.zeros(shape, dtype=np.int64)

        def accumulate(acc, v, w):
            return acc * 10 + v

        dst = np.empty_like(A)
        localfilter(dst, A, 3, seed, accumulate, lambda acc: acc)
        assert dst[0, 0] == 1245
        assert dst[0, 1] == 123456
        assert dst[1, 2] == 2356

    def test_weights_follow_offsets(self):
        A = np.zeros(4)
        B = kernel(np.array([10.0, 20.0]), start=(-1,))

        def seed(shape):
            return np.zeros(shape)

        def accumulate(acc, v, w):
            return acc + w

        dst = np.empty(4)
        localfilter(dst, A, B, seed, accumulate, lambda acc: acc)
        np.testing.assert_array_equal(dst, [20.0, 30.0, 30.0, 30.0])

    def test_tuple_destination(self, image2d):
        lo = np.empty_like(image2d)
        hi = np.empty_like(image2d)

        def seed(shape):
            return np.full(shape, np.inf), np.full(shape, -np.inf)

        def accumulate(acc, v, w):
            return np.minimum(acc[0], v), np.maximum(acc[1], v)

        result = localfilter((lo, hi), image2d, 3, seed, accumulate, lambda acc: acc)
        assert result[0] is lo and result[1] is hi
        assert np.all(lo <= image2d) and np.all(image2d <= hi)

    def test_shape_mismatch_leaves_destination_untouched(self):
        dst = np.full(4, -7.0)
        with pytest.raises(ShapeMismatch):
            localfilter(dst, np.zeros(5), 3, *_count_primitives())
        np.testing.assert_array_equal(dst, -7.0)

    def test_rank_mismatch(self):
        dst = np.empty((3, 3))
        with pytest.raises(ConstructionError):
            localfilter(dst, np.zeros((3, 3)), centered_box(3, 1), *_count_primitives())

    def test_failure_in_late_block_leaves_destination_untouched(self):
        A = np.arange(40, dtype=np.float64).reshape(8, 5)
        dst = np.full(A.shape, -1.0)

        def seed(shape):
            return np.zeros(shape)

        def accumulate(acc, v, w):
            if np.any(v >= 39):
                raise RuntimeError("boom")
            return acc + v

        with pytest.raises(RuntimeError):
            localfilter(dst, A, 3, seed, accumulate, lambda acc: acc, workers=4)
        np.testing.assert_array_equal(dst, -1.0)

    @pytest.mark.parametrize("workers", [2, 3, 8, 100])
    def test_workers_do_not_change_result(self, rng, workers):
        A = rng.normal(size=(11, 7, 3))
        B = kernel(rng.normal(size=(3, 2, 3)))

        def seed(shape):
            return np.zeros(shape)

        def accumulate(acc, v, w):
            return acc + v * w

        ref = np.empty_like(A)
        localfilter(ref, A, B, seed, accumulate, lambda acc: acc)
        out = np.empty_like(A)
        localfilter(out, A, B, seed, accumulate, lambda acc: acc, workers=workers)
        np.testing.assert_array_equal(out, ref)

    def test_invalid_workers(self):
        with pytest.raises(ValueError):
            localfilter(np.empty(3), np.zeros(3), 3, *_count_primitives(), workers=0)

    def test_empty_array(self):
        dst = np.empty((0, 4))
        assert localfilter(dst, np.zeros((0, 4)), 3, *_count_primitives()) is dst


class TestSplitPositions:

    def test_covers_domain_once(self):
        slabs = split_positions((10, 3), 4)
        assert len(slabs) == 4
        rows = [i for r in slabs for i in range(r.start[0], r.stop[0] + 1)]
        assert rows == list(range(10))
        assert all(r.start[1:] == (0,) and r.stop[1:] == (2,) for r in slabs)

    def test_more_workers_than_rows(self):
        assert len(split_positions((3, 5), 10)) == 3

    def test_single_worker(self):
        (r,) = split_positions((4, 4), 1)
        assert r.shape == (4, 4)

    def test_zero_dimensional(self):
        (r,) = split_positions((), 4)
        assert r.ndim == 0
