"""Multilinear interpolation on rectilinear grids.

An :class:`Interpolant` binds a tuple of sorted axes to an N-dimensional
grid of values. Evaluating it at a point finds the two neighbors of each
coordinate, forms the 2^N corner weights of the bracketing cell and merges
the corner values with a ``combine`` function. The default combine is the
weighted sum; any other function with the same ``(weights, objects)``
signature can be used to interpolate objects that only support a weighted
average (probability distributions, rotations, labels).
"""

from __future__ import annotations

import copy as _copy
import math
import os
import pickle
import time
import warnings
from typing import Callable, List, Sequence, Tuple

import numpy as np

from pymultilinear._corners import combine as default_combine
from pymultilinear._corners import corner_indices
from pymultilinear._errors import DimensionMismatch, InvalidConfiguration
from pymultilinear._jit import (
    MODE_ASSUME_INSIDE,
    MODE_ERROR,
    MODE_FUZZY,
    MODE_REFLECT,
    MODE_REPLICATE,
    MODE_WHOLE_POINT,
    multilinear_batch_jit,
)
from pymultilinear._points import _is_scalar, tupelize
from pymultilinear.extrapolation import (
    AssumeInside,
    Constant,
    Error,
    Fuzzy,
    Reflect,
    Replicate,
    as_policy,
    is_whole_point,
)
from pymultilinear.neighbors import neighbors_and_weights

_INSIDE = AssumeInside()

_JIT_MODES = {
    AssumeInside: MODE_ASSUME_INSIDE,
    Error: MODE_ERROR,
    Replicate: MODE_REPLICATE,
    Reflect: MODE_REFLECT,
    Fuzzy: MODE_FUZZY,
    Constant: MODE_WHOLE_POINT,
}


def _normalize_axes(axes) -> tuple:
    """Return *axes* as a tuple of axes, unwrapping the 1-D ``(xs, ys)`` form."""
    if isinstance(axes, np.ndarray) and axes.ndim == 1:
        return (axes,)
    try:
        n = len(axes)
    except TypeError:
        raise InvalidConfiguration(
            f"axes must be a sequence, got {type(axes).__name__}"
        ) from None
    if n == 0:
        raise InvalidConfiguration("At least one axis is required")
    if _is_scalar(axes[0]):
        return (axes,)
    return tuple(axes)


def _check_axis(d: int, axis) -> None:
    """Validate a single axis. Sortedness beyond the endpoints is not checked."""
    try:
        n = len(axis)
    except TypeError:
        raise InvalidConfiguration(
            f"axes[{d}] must be a sequence, got {type(axis).__name__}"
        ) from None
    if n < 2:
        raise InvalidConfiguration(
            f"axes[{d}] must have at least 2 coordinates, got {n}"
        )
    if isinstance(axis, np.ndarray):
        one_dimensional = axis.ndim == 1
    else:
        one_dimensional = _is_scalar(axis[0])
    if not one_dimensional:
        raise InvalidConfiguration(f"axes[{d}] must be one-dimensional")
    lo, hi = axis[0], axis[-1]
    try:
        finite = math.isfinite(lo) and math.isfinite(hi)
    except TypeError:
        raise InvalidConfiguration(
            f"axes[{d}] must hold real numbers, got {type(lo).__name__}"
        ) from None
    if not finite:
        raise InvalidConfiguration(
            f"axes[{d}] endpoints must be finite, got [{lo}, {hi}]"
        )
    if not lo <= hi:
        raise InvalidConfiguration(
            f"axes[{d}] must be sorted: first={lo} > last={hi}"
        )


def _check_grid_shape(values, expected_shape: tuple) -> None:
    """Check that the first ``len(expected_shape)`` levels of *values* are rectangular.

    Arrays are compared by shape. Nested sequences are walked level by
    level, so a ragged row anywhere is reported at construction.
    """
    if isinstance(values, np.ndarray):
        if values.shape != expected_shape:
            raise InvalidConfiguration(
                f"values shape {values.shape} does not match axes lengths {expected_shape}"
            )
        return
    ndim = len(expected_shape)
    level = [values]
    for k, n in enumerate(expected_shape):
        below = []
        for item in level:
            try:
                m = len(item)
            except TypeError:
                raise InvalidConfiguration(
                    f"values shape does not match axes lengths {expected_shape}: "
                    f"got a {type(item).__name__} at depth {k}"
                ) from None
            if m != n:
                raise InvalidConfiguration(
                    f"values shape does not match axes lengths {expected_shape}: "
                    f"got length {m} at depth {k}, expected {n}"
                )
            if k < ndim - 1:
                below.extend(item)
        level = below


class Interpolant:
    """Multilinear interpolant over a rectilinear grid.

    The interpolant borrows ``axes`` and ``values``: it keeps references,
    never copies, and never mutates them. Callers must not mutate them
    while the interpolant is in use, or pass ``copy=True`` to get an
    owning instance.

    Parameters
    ----------
    axes : sequence of sequences, or a single 1-D sequence
        Sorted (non-decreasing) coordinates per dimension, each with at
        least 2 finite entries. A single sequence of scalars is the 1-D
        form ``Interpolant(xs, ys)``. Duplicate adjacent coordinates are
        allowed and mark a step in the data.
    values : ndarray or nested sequence
        Grid values with shape ``tuple(len(a) for a in axes)``. Elements
        may be of any type the ``combine`` function accepts.
    combine : callable, optional
        ``combine(weights, objects) -> object`` merging the 2^N corner
        values. Defaults to the weighted sum.
    extrapolate : policy or str or value, optional
        What to do outside the grid: ``"error"`` (default),
        ``"replicate"``, ``"reflect"``, ``"fuzzy"``, a policy instance, or
        any other value which is returned as a constant outside the grid.
    copy : bool, optional
        If True, store private copies of ``axes`` and ``values``.

    Raises
    ------
    InvalidConfiguration
        If the axes or values are inconsistent or the policy is unknown.

    Examples
    --------
    >>> itp = Interpolant([1, 2], [10, 20])
    >>> itp(1.5)
    15.0
    >>> itp2 = Interpolant(([1, 2], [1, 2, 3]), [[1, 2, 3], [4, 5, 6]])
    >>> round(itp2((1.5, 1.1)), 10)
    2.6
    """

    def __init__(
        self,
        axes,
        values,
        *,
        combine: Callable = default_combine,
        extrapolate="error",
        copy: bool = False,
    ):
        axes = _normalize_axes(axes)
        for d, axis in enumerate(axes):
            _check_axis(d, axis)

        ndim = len(axes)
        expected_shape = tuple(len(axis) for axis in axes)
        _check_grid_shape(values, expected_shape)
        if not callable(combine):
            raise InvalidConfiguration(
                f"combine must be callable, got {type(combine).__name__}"
            )
        policy = as_policy(extrapolate)

        if copy:
            axes = tuple(np.array(axis) for axis in axes)
            values = values.copy() if isinstance(values, np.ndarray) else _copy.deepcopy(values)

        self._axes: Tuple[Sequence, ...] = axes
        self._values = values
        self._combine = combine
        self._extrapolate = policy
        self._ndim = ndim
        self._shape = expected_shape
        self._jit_cache = None

    # ------------------------------------------------------------------
    # Read-only fields
    # ------------------------------------------------------------------

    @property
    def axes(self) -> tuple:
        """Tuple of axes, one per dimension."""
        return self._axes

    @property
    def values(self):
        """The grid values (borrowed, not copied)."""
        return self._values

    @property
    def combine(self) -> Callable:
        return self._combine

    @property
    def extrapolate(self):
        """The normalized extrapolation policy."""
        return self._extrapolate

    @property
    def ndim(self) -> int:
        return self._ndim

    @property
    def shape(self) -> tuple:
        return self._shape

    @property
    def bounds(self) -> List[Tuple]:
        """``[(first, last), ...]`` per axis."""
        return [(axis[0], axis[-1]) for axis in self._axes]

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def _contains(self, point: tuple) -> bool:
        for axis, x in zip(self._axes, point):
            if not axis[0] <= x <= axis[-1]:
                return False
        return True

    def _getitem(self, index: tuple):
        if isinstance(self._values, np.ndarray):
            return self._values[index]
        item = self._values
        for i in index:
            item = item[i]
        return item

    def __call__(self, point):
        """Evaluate the interpolant at *point*.

        Parameters
        ----------
        point : tuple, sequence, 1-D ndarray or scalar
            One coordinate per axis; a bare scalar for 1-D interpolants.

        Returns
        -------
        object
            ``combine(weights, corner_values)``, or the whole-point
            fallback of a :class:`Constant` / :class:`WithPoint` policy.

        Raises
        ------
        DimensionMismatch
            If the point does not have one coordinate per axis.
        OutOfRangeError
            If a coordinate is outside its axis and the policy rejects it.
        """
        pt = tupelize(point, self._ndim)
        policy = self._extrapolate
        if is_whole_point(policy):
            if not self._contains(pt):
                return policy.fallback(pt)
            policy = _INSIDE
        index_pairs, weights = neighbors_and_weights(self._axes, pt, policy)
        objects = tuple(self._getitem(idx) for idx in corner_indices(index_pairs))
        return self._combine(weights, objects)

    def _jit_arguments(self):
        """Flattened arrays for :func:`multilinear_batch_jit`, or None if unsupported.

        Built on first use and cached; the borrowed inputs must not change
        afterwards.
        """
        if self._jit_cache is None:
            self._jit_cache = self._build_jit_arguments()
        return self._jit_cache or None

    def _build_jit_arguments(self):
        if self._combine is not default_combine:
            return False
        values = self._values
        if not isinstance(values, np.ndarray) or values.dtype.kind not in "biuf":
            return False
        policy = self._extrapolate
        mode = _JIT_MODES.get(type(policy))
        if mode is None:
            return False
        if isinstance(policy, Constant):
            if not _is_scalar(policy.value) or np.asarray(policy.value).dtype.kind not in "biuf":
                return False

        axes = [np.asarray(axis, dtype=np.float64) for axis in self._axes]
        lengths = np.array([len(axis) for axis in axes], dtype=np.int64)
        offsets = np.zeros(self._ndim, dtype=np.int64)
        offsets[1:] = np.cumsum(lengths)[:-1]
        strides = np.array(
            [int(np.prod(self._shape[d + 1:])) for d in range(self._ndim)],
            dtype=np.int64,
        )
        atol = float(policy.atol) if isinstance(policy, Fuzzy) else 0.0
        rtol = float(policy.rtol) if isinstance(policy, Fuzzy) else 0.0
        return (
            np.concatenate(axes),
            offsets,
            lengths,
            np.ascontiguousarray(values, dtype=np.float64).ravel(),
            strides,
            mode,
            atol,
            rtol,
        )

    def evaluate_batch(self, points, verbose: bool = False):
        """Evaluate at many points.

        Real-valued grids using the default combine run through a Numba
        kernel and return a float ndarray; any other setup maps
        :meth:`__call__` over the points and returns a list. Every point is
        independent, so callers may equally split *points* across workers
        and call the interpolant directly.

        The kernel computes in double precision. Its result dtype is the
        floating promotion of the values and points dtypes (float64 for
        integer inputs), so a float32 grid queried with float32 points
        returns float32 like the scalar path. Last-bit differences from the
        scalar path are possible for such reduced-precision inputs.

        Parameters
        ----------
        points : array_like
            Points of shape (M, ndim), or shape (M,) for 1-D interpolants.
        verbose : bool, optional
            If True, print the evaluation path and timing. Default is False.

        Returns
        -------
        ndarray or list
            One result per point.

        Raises
        ------
        DimensionMismatch
            If the points do not have ``ndim`` coordinates.
        OutOfRangeError
            For the first point the policy rejects.
        """
        start = time.time()
        jit_args = self._jit_arguments()

        if jit_args is None:
            results = [self(p) for p in points]
            path = "python"
        else:
            raw = np.asarray(points)
            out_dtype = np.result_type(self._values.dtype, raw.dtype)
            if out_dtype.kind != "f":
                out_dtype = np.dtype(np.float64)
            pts = np.asarray(raw, dtype=np.float64)
            if pts.ndim == 1 and self._ndim == 1:
                pts = pts[:, np.newaxis]
            if pts.ndim != 2 or pts.shape[1] != self._ndim:
                raise DimensionMismatch(
                    f"points must have shape (M, {self._ndim}), got {pts.shape}"
                )
            axes_flat, offsets, lengths, values_flat, strides, mode, atol, rtol = jit_args
            results = np.empty(pts.shape[0])
            status = np.zeros(pts.shape[0], dtype=np.int8)
            multilinear_batch_jit(
                axes_flat, offsets, lengths, values_flat, strides, pts,
                mode, atol, rtol, results, status,
            )
            # Rejected or constant-filled points go through the scalar path,
            # which raises the proper OutOfRangeError or returns the fill value.
            for i in np.flatnonzero(status):
                results[i] = self(pts[i])
            results = results.astype(out_dtype, copy=False)
            path = "jit"

        if verbose:
            elapsed = time.time() - start
            print(f"Evaluated {len(results):,} points in {elapsed:.3f}s ({path})")
        return results

    # ------------------------------------------------------------------
    # Relocation
    # ------------------------------------------------------------------

    def adapt(self, to: Callable) -> "Interpolant":
        """Return an equivalent interpolant with every field passed through *to*.

        Axes and values are transformed by ``adapt(to, field)``, the
        extrapolation policy by its own ``adapt`` method. Plain combine
        functions are kept as they are.

        Parameters
        ----------
        to : callable
            Leaf transform, e.g. ``np.asarray`` or a transfer to another
            memory space.

        Returns
        -------
        Interpolant
            A new, validated interpolant.
        """
        from pymultilinear._adapt import adapt

        combine = self._combine
        if callable(getattr(combine, "adapt", None)):
            combine = combine.adapt(to)
        return Interpolant(
            tuple(adapt(to, axis) for axis in self._axes),
            adapt(to, self._values),
            combine=combine,
            extrapolate=self._extrapolate.adapt(to),
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def __getstate__(self) -> dict:
        """Return picklable state tagged with the package version."""
        from pymultilinear._version import __version__

        state = self.__dict__.copy()
        state["_jit_cache"] = None
        state["_pymultilinear_version"] = __version__
        return state

    def __setstate__(self, state: dict) -> None:
        """Restore state, warning if it was written by another version."""
        from pymultilinear._version import __version__

        saved_version = state.pop("_pymultilinear_version", None)
        if saved_version is not None and saved_version != __version__:
            warnings.warn(
                f"This object was saved with pymultilinear {saved_version}, "
                f"but you are loading it with {__version__}. "
                f"Evaluation results may differ if internal data layout changed.",
                UserWarning,
                stacklevel=2,
            )
        state.setdefault("_jit_cache", None)
        self.__dict__.update(state)

    def save(self, path: str | os.PathLike) -> None:
        """Save the interpolant to a file.

        The combine function and any :class:`WithPoint` function must be
        importable module-level callables for pickling to succeed.

        Parameters
        ----------
        path : str or path-like
            Destination file path.
        """
        with open(os.fspath(path), "wb") as f:
            pickle.dump(self, f, protocol=pickle.HIGHEST_PROTOCOL)

    @classmethod
    def load(cls, path: str | os.PathLike) -> "Interpolant":
        """Load a previously saved interpolant from a file.

        Parameters
        ----------
        path : str or path-like
            Path to the saved file.

        Returns
        -------
        Interpolant
            The restored interpolant. It owns its data.

        Warns
        -----
        UserWarning
            If the file was saved with a different pymultilinear version.

        .. warning::

            This method uses :mod:`pickle` internally. Pickle can execute
            arbitrary code during deserialization. **Only load files you
            trust.**
        """
        with open(os.fspath(path), "rb") as f:
            obj = pickle.load(f)  # noqa: S301
        if not isinstance(obj, cls):
            raise TypeError(
                f"Expected a {cls.__name__} instance, got {type(obj).__name__}"
            )
        return obj

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"Interpolant("
            f"ndim={self._ndim}, "
            f"shape={self._shape}, "
            f"extrapolate={self._extrapolate!r})"
        )

    def __str__(self) -> str:
        max_display = 6
        bounds = self.bounds
        if self._ndim > max_display:
            domain_str = (
                " x ".join(f"[{lo}, {hi}]" for lo, hi in bounds[:max_display])
                + " x ..."
            )
        else:
            domain_str = " x ".join(f"[{lo}, {hi}]" for lo, hi in bounds)
        combine_name = getattr(self._combine, "__name__", type(self._combine).__name__)
        lines = [
            f"Interpolant ({self._ndim}D, {int(np.prod(self._shape)):,} grid values)",
            f"  Shape:       {self._shape}",
            f"  Domain:      {domain_str}",
            f"  Extrapolate: {self._extrapolate!r}",
            f"  Combine:     {combine_name}",
        ]
        return "\n".join(lines)


def interpolate(axes, values, point, *, extrapolate="error", combine: Callable = default_combine):
    """Evaluate a multilinear interpolation at a single point.

    Shorthand for ``Interpolant(axes, values, ...)(point)``, including the
    1-D form ``interpolate(xs, ys, x)``.

    Examples
    --------
    >>> interpolate([10, 20], [2, 1], 30000, extrapolate="replicate")
    1.0
    """
    itp = Interpolant(axes, values, combine=combine, extrapolate=extrapolate)
    return itp(point)
