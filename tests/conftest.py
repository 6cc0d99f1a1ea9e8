"""
Shared fixtures for localfilters tests.

The ``brute_force`` fixture is a direct, position-by-position transcription of the
shrinking-window definition and serves as the reference for the engine.
"""
from __future__ import annotations

import itertools

import numpy as np
import pytest


def _brute_force(A, B, op):
    """
    Reference local filter.

    op : "erode", "dilate" (flat or grayscale), "convolve" or "localmean"
    B  : a localfilters Neighborhood
    """
    A = np.asarray(A)
    out = np.empty(A.shape, dtype=np.float64)
    offsets = list(itertools.product(*[range(i, j + 1) for i, j in zip(B.start, B.stop)]))
    flat = B.dtype == np.bool_
    for c in itertools.product(*[range(n) for n in A.shape]):
        values, weights = [], []
        for k in offsets:
            j = tuple(ci + ki for ci, ki in zip(c, k))
            if all(0 <= jj < n for jj, n in zip(j, A.shape)):
                values.append(float(A[j]))
                weights.append(B[k])
        if op == "erode":
            if flat:
                cand = [v for v, w in zip(values, weights) if w]
            else:
                cand = [v - float(w) for v, w in zip(values, weights) if w != -np.inf]
            out[c] = min(cand) if cand else np.inf
        elif op == "dilate":
            if flat:
                cand = [v for v, w in zip(values, weights) if w]
            else:
                cand = [v + float(w) for v, w in zip(values, weights) if w != -np.inf]
            out[c] = max(cand) if cand else -np.inf
        elif op == "convolve":
            out[c] = sum(v * float(w) for v, w in zip(values, weights))
        elif op == "localmean":
            if flat:
                sel = [v for v, w in zip(values, weights) if w]
                out[c] = sum(sel) / len(sel) if sel else np.nan
            else:
                sw = sum(float(w) for w in weights)
                out[c] = sum(v * float(w) for v, w in zip(values, weights)) / sw if sw else np.nan
        else:
            raise ValueError(op)
    return out


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def ramp():
    """The 1-D example array used throughout the docs."""
    return np.array([1, 2, 3, 4, 5])


@pytest.fixture
def image2d(rng):
    """Small float64 image with distinct values."""
    return rng.normal(0.0, 1.0, size=(17, 13))


@pytest.fixture
def volume3d(rng):
    return rng.normal(0.0, 1.0, size=(7, 6, 5)).astype(np.float32)


@pytest.fixture
def spots_image():
    """
    64x64 float32 image: flat background 1.0, a wide bright plateau and a
    small bright spot, plus a small dark pit.
    """
    image = np.ones((64, 64), dtype=np.float32)
    image[10:40, 10:40] = 3.0          # plateau, 30 px wide
    image[50:52, 50:52] = 5.0          # spot, 2 px wide
    image[5:7, 55:57] = -2.0           # pit, 2 px wide
    return image


@pytest.fixture
def brute_force():
    """Reference filter: ``brute_force(A, B, op)``."""
    return _brute_force
