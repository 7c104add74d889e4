"""Shared test fixtures for pymultilinear tests."""

import math

import numpy as np
import pytest

from pymultilinear import Interpolant, combine


# ---------------------------------------------------------------------------
# Test objects
# ---------------------------------------------------------------------------

class ProbDist:
    """Discrete probability distribution: non-negative, sums to 1."""

    def __init__(self, probabilities):
        ps = np.asarray(probabilities, dtype=float)
        if not math.isclose(ps.sum(), 1.0, rel_tol=1e-12):
            raise ValueError(f"probabilities must sum to 1, got {ps.sum()}")
        if (ps < 0).any():
            raise ValueError("probabilities must be non-negative")
        self.probabilities = ps


def combine_dists(weights, dists):
    """Weighted average of distributions, renormalized to sum to 1."""
    ps = combine(weights, [d.probabilities for d in dists])
    return ProbDist(ps / ps.sum())


def bilinear_2d(x, y):
    """A function that multilinear interpolation reproduces exactly."""
    return 1.0 + 2.0 * x - 3.0 * y + 0.5 * x * y


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def itp_1d():
    """1D interpolant over [10, 20, 30] with values [1, 2, 3]."""
    return Interpolant([10, 20, 30], [1, 2, 3])


@pytest.fixture
def grid_2d():
    """Axes (1:2, 1:3) and values [[1, 2, 3], [4, 5, 6]]."""
    axes = (np.array([1.0, 2.0]), np.array([1.0, 2.0, 3.0]))
    values = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    return axes, values


@pytest.fixture
def itp_3d():
    """Random 3D interpolant on axes (1:2, 1:3, 4:7)."""
    rng = np.random.default_rng(0)
    axes = (np.arange(1.0, 3.0), np.arange(1.0, 4.0), np.arange(4.0, 8.0))
    values = rng.standard_normal((2, 3, 4))
    return Interpolant(axes, values)


@pytest.fixture
def itp_bilinear():
    """2D interpolant of :func:`bilinear_2d` on a non-uniform grid."""
    xs = np.array([-2.0, -0.5, 0.0, 1.5, 4.0])
    ys = np.array([0.0, 0.3, 1.0, 2.5])
    values = np.array([[bilinear_2d(x, y) for y in ys] for x in xs])
    return Interpolant((xs, ys), values)
