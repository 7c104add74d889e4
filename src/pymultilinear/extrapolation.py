"""Extrapolation policies: what to do with coordinates outside the grid.

The policies form a closed set. Per-axis policies (:class:`Error`,
:class:`Replicate`, :class:`Reflect`, :class:`Fuzzy`,
:class:`AssumeInside`) project a single coordinate into its axis via
:func:`project`. Whole-point policies (:class:`Constant`,
:class:`WithPoint`) replace the entire result as soon as one coordinate
is outside, without computing any neighbors or weights.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np

from pymultilinear._errors import InvalidConfiguration, OutOfRangeError

#: Stable string shorthands accepted for the ``extrapolate`` argument.
EXTRAPOLATE_SYMBOLS = ("error", "replicate", "reflect", "fuzzy")

#: Relative tolerance used by :class:`Fuzzy` when no ``atol`` is given.
DEFAULT_RTOL = float(np.sqrt(np.finfo(np.float64).eps))


@dataclass(frozen=True)
class Error:
    """Raise :class:`OutOfRangeError` for coordinates outside the axis."""

    def adapt(self, to):
        return self


@dataclass(frozen=True)
class Replicate:
    """Clamp coordinates to the nearest axis endpoint."""

    def adapt(self, to):
        return self


@dataclass(frozen=True)
class Reflect:
    """Mirror coordinates back into the axis as often as needed."""

    def adapt(self, to):
        return self


@dataclass(frozen=True)
class AssumeInside:
    """Skip all bounds checks.

    The caller guarantees every coordinate lies inside its axis. Results
    for points that violate this are undefined (an ``IndexError`` or a
    silently extrapolated value).
    """

    def adapt(self, to):
        return self


@dataclass(frozen=True)
class Fuzzy:
    """Clamp coordinates that are within tolerance of the axis, reject the rest.

    Parameters
    ----------
    atol : float, optional
        Absolute tolerance. Default is 0.
    rtol : float, optional
        Relative tolerance. Defaults to ``sqrt(eps)`` when ``atol`` is 0
        and to 0 otherwise.
    """

    atol: float = 0.0
    rtol: float | None = None

    def __post_init__(self):
        if self.atol < 0:
            raise InvalidConfiguration(f"atol must be >= 0, got {self.atol}")
        if self.rtol is None:
            object.__setattr__(self, "rtol", DEFAULT_RTOL if self.atol == 0 else 0.0)
        elif self.rtol < 0:
            raise InvalidConfiguration(f"rtol must be >= 0, got {self.rtol}")

    def adapt(self, to):
        return self


@dataclass(frozen=True)
class Constant:
    """Return ``value`` for every point with at least one coordinate outside."""

    value: Any

    def fallback(self, point: tuple):
        return self.value

    def adapt(self, to):
        from pymultilinear._adapt import adapt

        return Constant(adapt(to, self.value))


@dataclass(frozen=True)
class WithPoint:
    """Return ``function(point)`` for every point with a coordinate outside.

    ``function`` receives the normalized point tuple and may return any
    type; its result never goes through the combine step.
    """

    function: Callable

    def fallback(self, point: tuple):
        return self.function(point)

    def adapt(self, to):
        return self


ExtrapolationPolicy = (Error, Replicate, Reflect, AssumeInside, Fuzzy, Constant, WithPoint)

_SYMBOL_TO_POLICY = {
    "error": Error(),
    "replicate": Replicate(),
    "reflect": Reflect(),
    "fuzzy": Fuzzy(),
}


def as_policy(extrapolate):
    """Normalize an ``extrapolate`` argument to a policy instance.

    Policy instances pass through, ``None`` means :class:`Error`, strings
    must be one of :data:`EXTRAPOLATE_SYMBOLS`, and any other value is used
    as a :class:`Constant` fill value.

    Raises
    ------
    InvalidConfiguration
        If a string shorthand is not recognized.
    """
    if isinstance(extrapolate, ExtrapolationPolicy):
        return extrapolate
    if extrapolate is None:
        return Error()
    if isinstance(extrapolate, str):
        try:
            return _SYMBOL_TO_POLICY[extrapolate]
        except KeyError:
            raise InvalidConfiguration(
                f"Unknown extrapolate={extrapolate!r}. "
                f"Allowed values are: {', '.join(EXTRAPOLATE_SYMBOLS)}"
            ) from None
    return Constant(extrapolate)


def is_whole_point(policy) -> bool:
    """Return True for policies that act on the whole point, not per axis."""
    return isinstance(policy, (Constant, WithPoint))


def reflect(x, lo, hi):
    """Fold *x* into ``[lo, hi]`` by unbounded triangular-wave reflection."""
    span = hi - lo
    if span == 0:
        return lo
    period = 2 * span
    offset = x - lo
    offset = offset - period * np.floor(offset / period)
    if offset > span:
        offset = period - offset
    return min(max(lo + offset, lo), hi)


def project(policy, axis, x):
    """Map coordinate *x* into ``[axis[0], axis[-1]]`` according to *policy*.

    Coordinates already inside the axis are returned unchanged by every
    per-axis policy.

    Parameters
    ----------
    policy : policy instance or shorthand string
        One of the per-axis policies.
    axis : sequence
        Sorted axis coordinates.
    x : scalar
        Coordinate to project.

    Returns
    -------
    scalar
        The projected coordinate.

    Raises
    ------
    OutOfRangeError
        For :class:`Error` and :class:`Fuzzy` when *x* is rejected.
    TypeError
        For :class:`Constant` and :class:`WithPoint`, which apply to whole
        points only.
    """
    policy = as_policy(policy) if isinstance(policy, str) else policy
    if isinstance(policy, AssumeInside):
        return x
    if is_whole_point(policy):
        raise TypeError(
            f"{type(policy).__name__} applies to whole points and cannot "
            f"project a single coordinate"
        )

    lo = axis[0]
    hi = axis[-1]
    if lo <= x <= hi:
        return x

    if isinstance(policy, Error):
        raise OutOfRangeError(x, lo, hi)
    elif isinstance(policy, Replicate):
        return min(max(x, lo), hi)
    elif isinstance(policy, Reflect):
        return reflect(x, lo, hi)
    elif isinstance(policy, Fuzzy):
        x_inside = min(max(x, lo), hi)
        if math.isclose(x, x_inside, rel_tol=policy.rtol, abs_tol=policy.atol):
            return x_inside
        raise OutOfRangeError(x, lo, hi, tolerance=(policy.atol, policy.rtol))
    raise TypeError(f"Not an extrapolation policy: {policy!r}")
