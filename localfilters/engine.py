"""
Generic windowed-reduction engine.

Every local filter is the same loop parameterized by three primitives:

  seed(shape)              -> acc     initial accumulator for a block of positions
  accumulate(acc, v, w)    -> acc     fold in the source values ``v`` seen at one
                                      relative offset ``k`` with weight ``w = B[k]``
  finish(acc)              -> out     final value(s) for the block

For each output position ``c`` the window ``[c + start, c + stop]`` is
intersected with the array's index domain (no padding, no clamping: indices
outside the array simply do not contribute), and every remaining offset is
folded in, in the row-major order of the neighborhood's bounding box.  That is
also the row-major order of the source indices of the window, so per-position
accumulation order is fixed and independent of how positions are grouped.

The primitives work elementwise on numpy arrays: the engine hands them a whole
block of positions that share the same offset at once.  Positions never share
an accumulator, so blocks are independent and may run on a thread pool
(``workers > 1``).

Validation happens before any work, and the destination is written only once
every block has finished.  A call either completes or raises with the
destination untouched.
"""
from __future__ import annotations

import time
from multiprocessing.pool import ThreadPool
from typing import Any, Callable, List, Sequence, Tuple, Union

import numpy as np

from .errors import ShapeMismatch
from .logging_utils import get_logger
from .neighborhood import Neighborhood, neighborhood
from .region import Index, Region, neg_index

logger = get_logger(__name__)

Seed = Callable[[Index], Any]
Accumulate = Callable[[Any, np.ndarray, Any], Any]
Finish = Callable[[Any], Any]
Destination = Union[np.ndarray, Tuple[np.ndarray, ...]]


def _outputs(dst: Destination) -> Tuple[np.ndarray, ...]:
    return tuple(dst) if isinstance(dst, tuple) else (dst,)


def check_shapes(dst: Destination, A: np.ndarray) -> None:
    """Raise ``ShapeMismatch`` unless every destination has the shape of ``A``."""
    for out in _outputs(dst):
        if not isinstance(out, np.ndarray):
            raise ShapeMismatch(f"destination must be an ndarray, got {type(out).__name__}")
        if out.shape != A.shape:
            raise ShapeMismatch(
                f"destination shape {out.shape} differs from source shape {A.shape}"
            )


def split_positions(shape: Sequence[int], n: int) -> List[Region]:
    """
    Split the index domain of ``shape`` into at most ``n`` contiguous slabs
    along the first axis.

    >>> [r.shape for r in split_positions((5, 2), 2)]
    [(3, 2), (2, 2)]
    """
    domain = Region.from_shape(shape)
    if domain.ndim == 0 or domain.is_empty() or n <= 1:
        return [domain]
    rows = shape[0]
    n = min(n, rows)
    bounds = np.linspace(0, rows, n + 1).round().astype(int)
    slabs = []
    for lo, hi in zip(bounds[:-1], bounds[1:]):
        if hi > lo:
            slabs.append(Region((int(lo),) + domain.start[1:],
                                (int(hi) - 1,) + domain.stop[1:]))
    return slabs


def _take(acc, sl):
    if isinstance(acc, tuple):
        return tuple(a[sl] for a in acc)
    return acc[sl]


def _put(acc, sl, values) -> None:
    if isinstance(acc, tuple):
        for a, v in zip(acc, values):
            a[sl] = v
    else:
        acc[sl] = values


def _filter_block(
    A: np.ndarray,
    block: Region,
    offsets: List[Tuple[Index, Any]],
    seed: Seed,
    accumulate: Accumulate,
    finish: Finish,
):
    domain = Region.from_shape(A.shape)
    origin = neg_index(block.start)
    acc = seed(block.shape)
    for k, w in offsets:
        # Positions c of this block for which c + k is inside the array.
        valid = block.intersect(domain.shift(neg_index(k)))
        if valid.is_empty():
            continue
        local = valid.shift(origin).slices()
        values = A[valid.shift(k).slices()]
        _put(acc, local, accumulate(_take(acc, local), values, w))
    return finish(acc)


def localfilter(
    dst: Destination,
    A: np.ndarray,
    B: Union[Neighborhood, Any],
    seed: Seed,
    accumulate: Accumulate,
    finish: Finish,
    *,
    workers: int = 1,
) -> Destination:
    """
    Run a local filter of ``A`` over neighborhood ``B`` and store it in ``dst``.

    Parameters
    ----------
    dst : ndarray or tuple of ndarray
        Destination(s), same shape as ``A``.  Must not alias ``A`` unless the
        primitives never read already-written cells (the engine does not check).
    A : ndarray
        Source array.
    B : Neighborhood or anything ``neighborhood()`` accepts
        Must have the rank of ``A``.
    seed, accumulate, finish : callables
        See module docstring.  When ``dst`` is a tuple, ``finish`` returns a
        tuple of blocks in the same order.
    workers : int
        Number of threads sharing the positions (1 = run inline).

    Returns
    -------
    dst

    Raises
    ------
    ShapeMismatch
        ``dst`` and ``A`` differ in shape.
    ConstructionError
        ``B`` is invalid or its rank differs from ``A``'s.
    """
    A = np.asarray(A)
    check_shapes(dst, A)
    B = neighborhood(B, A.ndim)
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    offsets = [(k, B.weight(k)) for k in B.bounding_box()]
    blocks = split_positions(A.shape, workers)

    t0 = time.perf_counter()

    def run(block: Region):
        return _filter_block(A, block, offsets, seed, accumulate, finish)

    if len(blocks) > 1:
        with ThreadPool(len(blocks)) as pool:
            results = pool.map(run, blocks)
    else:
        results = [run(block) for block in blocks]

    # Every block is computed: only now touch the destination.
    outputs = _outputs(dst)
    for block, result in zip(blocks, results):
        values = result if isinstance(dst, tuple) else (result,)
        if block.is_empty():
            continue
        sl = block.slices()
        for out, val in zip(outputs, values):
            out[sl] = val

    logger.debug(
        "localfilter: shape=%s neighborhood=%r offsets=%d blocks=%d (%.3fs)",
        A.shape, B, len(offsets), len(blocks), time.perf_counter() - t0,
    )
    return dst
