"""Exception types raised by pymultilinear."""

from __future__ import annotations


class InterpolationError(ValueError):
    """Base class for all errors raised while building or evaluating an interpolant."""


class InvalidConfiguration(InterpolationError):
    """Bad construction arguments: shape mismatch, degenerate axis, unknown policy."""


class DimensionMismatch(InterpolationError):
    """The evaluation point does not have one coordinate per axis."""


class OutOfRangeError(InterpolationError):
    """A coordinate lies outside its axis and the policy does not allow that.

    Parameters
    ----------
    x : scalar
        The offending coordinate.
    lo, hi : scalar
        First and last coordinate of the axis.
    tolerance : tuple of (float, float), optional
        ``(atol, rtol)`` tried by a :class:`~pymultilinear.Fuzzy` policy.
    """

    def __init__(self, x, lo, hi, tolerance=None):
        self.x = x
        self.lo = lo
        self.hi = hi
        self.tolerance = tolerance
        msg = f"x={x} is not between first(axis)={lo} and last(axis)={hi}."
        if tolerance is not None:
            atol, rtol = tolerance
            msg += f" Fuzzy tolerance atol={atol}, rtol={rtol} was not enough."
        msg += " You can suppress this error by passing the `extrapolate` argument."
        super().__init__(msg)

    def __reduce__(self):
        return (type(self), (self.x, self.lo, self.hi, self.tolerance))
