"""Shared helpers for turning query points into fixed-size coordinate tuples."""

from __future__ import annotations

import numbers
from decimal import Decimal
from fractions import Fraction

import numpy as np

from pymultilinear._errors import DimensionMismatch


def _is_scalar(value) -> bool:
    """Return True if *value* is a number (Python, numpy, exact or 0-d array)."""
    if isinstance(value, (numbers.Number, np.number)):
        return True
    return isinstance(value, np.ndarray) and value.ndim == 0


def _promote(coords: tuple) -> tuple:
    """Cast every coordinate to one common numeric type.

    Tuples of a single non-numpy type (``int``, ``float``, ``Fraction``,
    ``Decimal``, ...) are returned untouched. Anything carrying a numpy
    scalar is cast to ``np.result_type`` of all entries. Otherwise mixed
    integers become ``int``, rationals become ``Fraction``, decimals mixed
    with integers become ``Decimal`` and everything else becomes ``float``.
    """
    kinds = {type(c) for c in coords}
    if len(kinds) == 1 and not issubclass(next(iter(kinds)), np.generic):
        return coords
    if any(isinstance(c, np.generic) for c in coords):
        dtype = np.result_type(*(
            c if isinstance(c, (int, float, np.generic)) else float(c) for c in coords
        ))
        return tuple(dtype.type(c) for c in coords)
    if all(isinstance(c, numbers.Integral) for c in coords):
        return tuple(int(c) for c in coords)
    if all(isinstance(c, numbers.Rational) for c in coords):
        return tuple(Fraction(c) for c in coords)
    if all(isinstance(c, (Decimal, numbers.Integral)) for c in coords):
        return tuple(Decimal(c) for c in coords)
    return tuple(float(c) for c in coords)


def tupelize(point, ndim: int) -> tuple:
    """Normalize *point* to a tuple of exactly *ndim* promoted coordinates.

    Parameters
    ----------
    point : scalar, tuple, sequence or 1-D ndarray
        Query point. A bare scalar is only accepted when ``ndim == 1``.
    ndim : int
        Dimensionality of the interpolant.

    Returns
    -------
    tuple
        ``ndim`` coordinates sharing one numeric type.

    Raises
    ------
    DimensionMismatch
        If the number of coordinates differs from ``ndim``.
    """
    if _is_scalar(point):
        if ndim != 1:
            raise DimensionMismatch(
                f"Got a scalar point for a {ndim}D interpolant; "
                f"pass {ndim} coordinates."
            )
        if isinstance(point, np.ndarray):
            point = point[()]
        return (point,)

    if isinstance(point, np.ndarray) and point.ndim != 1:
        raise DimensionMismatch(
            f"Point must be 1-D, got an array of shape {point.shape}"
        )
    try:
        n = len(point)
    except TypeError:
        raise DimensionMismatch(
            f"Cannot interpret {type(point).__name__} as a point"
        ) from None
    if n != ndim:
        raise DimensionMismatch(
            f"Point has {n} coordinates but the interpolant has {ndim} axes"
        )

    # Small dimensions unpack directly; larger ones go through tuple().
    if ndim == 1:
        (x0,) = point
        coords = (x0,)
    elif ndim == 2:
        x0, x1 = point
        coords = (x0, x1)
    elif ndim == 3:
        x0, x1, x2 = point
        coords = (x0, x1, x2)
    elif ndim == 4:
        x0, x1, x2, x3 = point
        coords = (x0, x1, x2, x3)
    else:
        coords = tuple(point)
    return _promote(coords)
