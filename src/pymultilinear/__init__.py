"""pymultilinear: multilinear interpolation of arbitrary objects on rectilinear grids.

Provides the :class:`Interpolant` class, which evaluates a weighted
combination of the 2^N grid values surrounding a query point, together with
the per-axis building blocks (:func:`neighbors_and_weights_1d`,
:func:`neighbors_and_weights`), the default weighted-sum :func:`combine`
and a closed set of extrapolation policies. Values can be any objects a
``combine(weights, objects)`` function can average: numbers, arrays,
probability distributions, rotations.

Example
-------
>>> from pymultilinear import Interpolant
>>> itp = Interpolant(([1, 2], [1, 2, 3]), [[1, 2, 3], [4, 5, 6]])
>>> round(itp((1.5, 1.1)), 10)
2.6
>>> float(Interpolant([10, 20], [2, 1], extrapolate="reflect")(30))
2.0
"""

from pymultilinear._adapt import adapt
from pymultilinear._corners import combine
from pymultilinear._errors import (
    DimensionMismatch,
    InterpolationError,
    InvalidConfiguration,
    OutOfRangeError,
)
from pymultilinear._points import tupelize
from pymultilinear._version import __version__
from pymultilinear.extrapolation import (
    EXTRAPOLATE_SYMBOLS,
    AssumeInside,
    Constant,
    Error,
    Fuzzy,
    Reflect,
    Replicate,
    WithPoint,
    as_policy,
    project,
)
from pymultilinear.interpolant import Interpolant, interpolate
from pymultilinear.neighbors import neighbors_and_weights, neighbors_and_weights_1d

__all__ = [
    "Interpolant", "interpolate", "neighbors_and_weights", "neighbors_and_weights_1d",
    "combine", "project", "tupelize", "adapt", "as_policy", "EXTRAPOLATE_SYMBOLS",
    "Error", "Replicate", "Reflect", "AssumeInside", "Fuzzy", "Constant", "WithPoint",
    "InterpolationError", "InvalidConfiguration", "DimensionMismatch", "OutOfRangeError",
    "__version__",
]
