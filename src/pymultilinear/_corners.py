"""Corner enumeration and the default weighted-sum combine.

The 2^N corners of the cell bracketing a point are numbered in row-major
order: corner ``c`` takes the upper neighbor along axis ``k`` when bit
``N - 1 - k`` of ``c`` is set. Weights and indices for 1, 2 and 3 axes
are written out explicitly; higher dimensions walk a cached bit table.
Both forms multiply the per-axis weights in axis order, so they agree
bit for bit.
"""

from __future__ import annotations

import itertools
from functools import lru_cache
from typing import Sequence, Tuple


@lru_cache(maxsize=None)
def corner_bits(ndim: int) -> Tuple[Tuple[int, ...], ...]:
    """Return the bit pattern of every corner, in row-major order."""
    return tuple(itertools.product((0, 1), repeat=ndim))


def corner_weights(weight_pairs: Sequence[Tuple]) -> tuple:
    """Outer product of per-axis ``(wl, wu)`` pairs, flattened row-major.

    Parameters
    ----------
    weight_pairs : sequence of (float, float)
        One ``(lower, upper)`` weight pair per axis.

    Returns
    -------
    tuple
        ``2**len(weight_pairs)`` corner weights.
    """
    ndim = len(weight_pairs)
    if ndim == 1:
        return tuple(weight_pairs[0])
    if ndim == 2:
        (a0, a1), (b0, b1) = weight_pairs
        return (a0 * b0, a0 * b1, a1 * b0, a1 * b1)
    if ndim == 3:
        (a0, a1), (b0, b1), (c0, c1) = weight_pairs
        return (
            a0 * b0 * c0, a0 * b0 * c1, a0 * b1 * c0, a0 * b1 * c1,
            a1 * b0 * c0, a1 * b0 * c1, a1 * b1 * c0, a1 * b1 * c1,
        )
    weights = []
    for bits in corner_bits(ndim):
        w = weight_pairs[0][bits[0]]
        for d in range(1, ndim):
            w = w * weight_pairs[d][bits[d]]
        weights.append(w)
    return tuple(weights)


def corner_indices(index_pairs: Sequence[Tuple[int, int]]) -> tuple:
    """Multi-index of every corner, in the same order as :func:`corner_weights`."""
    ndim = len(index_pairs)
    if ndim == 1:
        i0, i1 = index_pairs[0]
        return ((i0,), (i1,))
    if ndim == 2:
        (i0, i1), (j0, j1) = index_pairs
        return ((i0, j0), (i0, j1), (i1, j0), (i1, j1))
    if ndim == 3:
        (i0, i1), (j0, j1), (k0, k1) = index_pairs
        return (
            (i0, j0, k0), (i0, j0, k1), (i0, j1, k0), (i0, j1, k1),
            (i1, j0, k0), (i1, j0, k1), (i1, j1, k0), (i1, j1, k1),
        )
    return tuple(
        tuple(pair[b] for pair, b in zip(index_pairs, bits))
        for bits in corner_bits(ndim)
    )


def combine(weights: Sequence, objects: Sequence):
    """Weighted sum ``sum(w * obj)``, the default combine step.

    Accumulates left to right. The 2, 4 and 8 corner cases are spelled out
    with the same association order as the loop.

    Parameters
    ----------
    weights : sequence of float
        Corner weights.
    objects : sequence
        Corner values supporting ``*`` by a float and ``+``.

    Returns
    -------
    object
        The weighted sum.
    """
    n = len(weights)
    if n == 2:
        w0, w1 = weights
        o0, o1 = objects
        return w0 * o0 + w1 * o1
    if n == 4:
        w0, w1, w2, w3 = weights
        o0, o1, o2, o3 = objects
        return w0 * o0 + w1 * o1 + w2 * o2 + w3 * o3
    if n == 8:
        w0, w1, w2, w3, w4, w5, w6, w7 = weights
        o0, o1, o2, o3, o4, o5, o6, o7 = objects
        return (
            w0 * o0 + w1 * o1 + w2 * o2 + w3 * o3
            + w4 * o4 + w5 * o5 + w6 * o6 + w7 * o7
        )
    acc = weights[0] * objects[0]
    for i in range(1, n):
        acc = acc + weights[i] * objects[i]
    return acc
