"""Neighbor and weight computation along one axis and across all axes.

For a coordinate ``x`` inside an axis the resolver returns the bracketing
index pair ``(il, iu)`` and the linear weight pair ``(wl, wu)``. The pair
always has two entries, even when ``x`` hits a grid coordinate exactly, so
the corner enumeration downstream has a fixed shape.
"""

from __future__ import annotations

import bisect
from typing import Sequence, Tuple

import numpy as np

from pymultilinear._corners import corner_weights
from pymultilinear._errors import DimensionMismatch
from pymultilinear.extrapolation import as_policy, project


def _lower_bound(axis, x) -> int:
    """Index of the first axis coordinate ``>= x``."""
    if isinstance(axis, np.ndarray):
        return int(np.searchsorted(axis, x, side="left"))
    return bisect.bisect_left(axis, x)


def resolve_1d(axis, x, policy) -> Tuple[Tuple[int, int], Tuple]:
    """Resolve one coordinate against an already-normalized policy.

    See :func:`neighbors_and_weights_1d` for the public entry point.
    """
    x = project(policy, axis, x)
    iu = _lower_bound(axis, x)
    if iu == 0:
        iu = 1
    il = iu - 1
    xl = axis[il]
    xu = axis[iu]
    if xl == xu:
        # Duplicate coordinate: all weight goes to the lower index.
        return (il, iu), (1.0, 0.0)
    span = xu - xl
    return (il, iu), ((xu - x) / span, (x - xl) / span)


def neighbors_and_weights_1d(axis: Sequence, x, extrapolate="error"):
    """Bracketing indices and linear weights of *x* along one axis.

    Parameters
    ----------
    axis : sequence
        Sorted (non-decreasing) coordinates, length >= 2.
    x : scalar
        Query coordinate.
    extrapolate : policy or str, optional
        Per-axis extrapolation policy. Default is ``"error"``.

    Returns
    -------
    indices : (int, int)
        Lower and upper neighbor index, ``iu == il + 1``.
    weights : (float, float)
        Linear weights of the neighbors, summing to 1.

    Raises
    ------
    OutOfRangeError
        If *x* is outside the axis and the policy rejects it.

    Notes
    -----
    When the two neighbors share a coordinate (a step in the data), the
    weights are ``(1, 0)``: the lower of the duplicated entries wins.

    Examples
    --------
    >>> neighbors_and_weights_1d([10, 20, 30], 25)
    ((1, 2), (0.5, 0.5))
    """
    return resolve_1d(axis, x, as_policy(extrapolate))


def neighbors_and_weights(axes: Sequence[Sequence], point, extrapolate="error"):
    """Neighbor index pairs and corner weights of *point* on a grid.

    Parameters
    ----------
    axes : sequence of sequences
        One sorted axis per dimension.
    point : sequence of scalars
        Query point with one coordinate per axis.
    extrapolate : policy or str, optional
        Per-axis extrapolation policy. Default is ``"error"``.

    Returns
    -------
    index_pairs : tuple of (int, int)
        Bracketing index pair per axis.
    weights : tuple of float
        The ``2**ndim`` corner weights in row-major corner order.

    Raises
    ------
    DimensionMismatch
        If ``len(point) != len(axes)``.
    """
    if len(axes) != len(point):
        raise DimensionMismatch(
            f"Point has {len(point)} coordinates but there are {len(axes)} axes"
        )
    policy = as_policy(extrapolate)
    index_pairs = []
    weight_pairs = []
    for axis, x in zip(axes, point):
        nbs, wts = resolve_1d(axis, x, policy)
        index_pairs.append(nbs)
        weight_pairs.append(wts)
    return tuple(index_pairs), corner_weights(weight_pairs)
