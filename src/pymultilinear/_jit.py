"""Numba JIT-compiled kernel for batch multilinear evaluation.

The kernel mirrors the pure Python evaluation path step by step (projection,
lower-bound search, duplicate tie-break, row-major corner order and left to
right accumulation) so both paths produce the same numbers. It only handles
real-valued grids combined by the default weighted sum; everything else is
evaluated point by point in Python.
"""

import numpy as np
from numba import njit

MODE_ASSUME_INSIDE = 0
MODE_ERROR = 1
MODE_REPLICATE = 2
MODE_REFLECT = 3
MODE_FUZZY = 4
MODE_WHOLE_POINT = 5

STATUS_OK = 0
STATUS_OUTSIDE = 1


@njit(cache=True)
def _lower_bound(axes_flat: np.ndarray, start: int, n: int, x: float) -> int:
    """Index (relative to *start*) of the first coordinate ``>= x``."""
    lo = 0
    hi = n
    while lo < hi:
        mid = (lo + hi) // 2
        if axes_flat[start + mid] < x:
            lo = mid + 1
        else:
            hi = mid
    return lo


@njit(cache=True)
def _reflect(x: float, lo: float, hi: float) -> float:
    """Triangular-wave reflection of *x* into ``[lo, hi]``."""
    span = hi - lo
    if span == 0.0:
        return lo
    period = 2.0 * span
    offset = x - lo
    offset = offset - period * np.floor(offset / period)
    if offset > span:
        offset = period - offset
    return min(max(lo + offset, lo), hi)


@njit(cache=True)
def multilinear_batch_jit(axes_flat: np.ndarray, offsets: np.ndarray, lengths: np.ndarray,
                          values_flat: np.ndarray, strides: np.ndarray, points: np.ndarray,
                          mode: int, atol: float, rtol: float,
                          out: np.ndarray, status: np.ndarray) -> None:
    """Evaluate a multilinear interpolant at every row of *points*.

    Parameters
    ----------
    axes_flat : ndarray
        All axes concatenated, float64.
    offsets : ndarray
        Start of each axis in ``axes_flat``.
    lengths : ndarray
        Length of each axis.
    values_flat : ndarray
        C-ordered grid values, float64.
    strides : ndarray
        Element strides of the grid per axis.
    points : ndarray
        Query points of shape (M, ndim).
    mode : int
        One of the ``MODE_*`` constants.
    atol, rtol : float
        Tolerances for ``MODE_FUZZY``.
    out : ndarray
        Results of shape (M,). Rows flagged in *status* are left as NaN.
    status : ndarray
        Per-point flag, ``STATUS_OUTSIDE`` where the policy could not map
        the point into the grid.
    """
    n_points = points.shape[0]
    ndim = points.shape[1]
    n_corners = 1 << ndim
    il = np.empty(ndim, dtype=np.int64)
    wl = np.empty(ndim)
    wu = np.empty(ndim)

    for p in range(n_points):
        status[p] = STATUS_OK
        for d in range(ndim):
            start = offsets[d]
            n = lengths[d]
            x = points[p, d]
            lo = axes_flat[start]
            hi = axes_flat[start + n - 1]

            if mode != MODE_ASSUME_INSIDE and not (x >= lo and x <= hi):
                if mode == MODE_REPLICATE:
                    x = min(max(x, lo), hi)
                elif mode == MODE_REFLECT:
                    x = _reflect(x, lo, hi)
                elif mode == MODE_FUZZY:
                    x_inside = min(max(x, lo), hi)
                    tol = max(rtol * max(abs(x), abs(x_inside)), atol)
                    if abs(x - x_inside) <= tol:
                        x = x_inside
                    else:
                        status[p] = STATUS_OUTSIDE
                        break
                else:
                    status[p] = STATUS_OUTSIDE
                    break

            iu = _lower_bound(axes_flat, start, n, x)
            if iu == 0:
                iu = 1
            xl = axes_flat[start + iu - 1]
            xu = axes_flat[start + iu]
            il[d] = iu - 1
            if xl == xu:
                wl[d] = 1.0
                wu[d] = 0.0
            else:
                span = xu - xl
                wl[d] = (xu - x) / span
                wu[d] = (x - xl) / span

        if status[p] != STATUS_OK:
            out[p] = np.nan
            continue

        acc = 0.0
        for c in range(n_corners):
            bit = (c >> (ndim - 1)) & 1
            w = wu[0] if bit else wl[0]
            flat = (il[0] + bit) * strides[0]
            for d in range(1, ndim):
                bit = (c >> (ndim - 1 - d)) & 1
                w = w * (wu[d] if bit else wl[d])
                flat += (il[d] + bit) * strides[d]
            acc += w * values_flat[flat]
        out[p] = acc
