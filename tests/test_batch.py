"""Tests for batch evaluation: JIT kernel agreement with scalar evaluation."""

import pickle

import numpy as np
import pytest

from pymultilinear import (
    AssumeInside,
    Constant,
    DimensionMismatch,
    Fuzzy,
    Interpolant,
    OutOfRangeError,
    WithPoint,
)
from conftest import ProbDist, combine_dists


def _random_interpolant(rng, shape, extrapolate):
    axes = tuple(np.sort(rng.standard_normal(n)) for n in shape)
    values = rng.standard_normal(shape)
    return Interpolant(axes, values, extrapolate=extrapolate)


class TestJitMatchesScalar:
    @pytest.mark.parametrize("extrapolate", ["replicate", "reflect", Constant(42.0)])
    @pytest.mark.parametrize("shape", [(10,), (11, 12), (5, 6, 7), (3, 4, 3, 5)])
    def test_outside_policies(self, extrapolate, shape):
        rng = np.random.default_rng(len(shape))
        itp = _random_interpolant(rng, shape, extrapolate)
        points = rng.standard_normal((30, len(shape))) * 2
        batch = itp.evaluate_batch(points)
        assert isinstance(batch, np.ndarray)
        expected = [itp(p) for p in points]
        np.testing.assert_allclose(batch, expected, rtol=1e-12, atol=1e-12)

    @pytest.mark.parametrize("shape", [(10,), (11, 12), (5, 6, 7)])
    def test_error_policy_inside(self, shape):
        rng = np.random.default_rng(7)
        itp = _random_interpolant(rng, shape, "error")
        lo = np.array([axis[0] for axis in itp.axes])
        hi = np.array([axis[-1] for axis in itp.axes])
        points = rng.uniform(lo, hi, size=(50, len(shape)))
        batch = itp.evaluate_batch(points)
        expected = [itp(p) for p in points]
        np.testing.assert_allclose(batch, expected, rtol=1e-12, atol=1e-12)

    def test_assume_inside(self, itp_bilinear):
        itp = Interpolant(itp_bilinear.axes, itp_bilinear.values, extrapolate=AssumeInside())
        points = np.array([[0.0, 0.0], [1.0, 2.0], [-2.0, 2.5], [3.9, 0.1]])
        np.testing.assert_allclose(
            itp.evaluate_batch(points), [itp(p) for p in points], rtol=1e-12
        )

    def test_duplicate_coordinates(self):
        itp = Interpolant([0.0, 1.0, 1.0, 2.0], np.array([0.0, 10.0, 20.0, 30.0]))
        batch = itp.evaluate_batch([0.5, 1.0, 1.5, 2.0])
        np.testing.assert_allclose(batch, [5.0, 10.0, 25.0, 30.0])

    def test_grid_points_exact(self, itp_1d):
        itp = Interpolant(itp_1d.axes, np.array(itp_1d.values))
        np.testing.assert_array_equal(itp.evaluate_batch([10, 20, 30]), [1.0, 2.0, 3.0])

    def test_integer_values(self):
        itp = Interpolant([10, 20], np.array([2, 1]), extrapolate="replicate")
        np.testing.assert_allclose(itp.evaluate_batch([15, 30000, 0]), [1.5, 1.0, 2.0])


class TestBatchErrors:
    def test_error_outside_raises(self):
        itp = Interpolant([10.0, 20.0], np.array([2.0, 1.0]))
        with pytest.raises(OutOfRangeError) as info:
            itp.evaluate_batch([15.0, 25.0])
        assert info.value.x == 25.0

    def test_fuzzy(self):
        itp = Interpolant([10.0, 20.0], np.array([2.0, 1.0]), extrapolate=Fuzzy(atol=3))
        np.testing.assert_allclose(itp.evaluate_batch([22.5, 7.5]), [1.0, 2.0])
        with pytest.raises(OutOfRangeError):
            itp.evaluate_batch([23.5])

    def test_wrong_point_width(self, itp_bilinear):
        with pytest.raises(DimensionMismatch):
            itp_bilinear.evaluate_batch(np.zeros((4, 3)))


class TestPythonFallback:
    def test_custom_combine_returns_list(self):
        dists = [ProbDist([0.5, 0.5]), ProbDist([1, 0])]
        itp = Interpolant([10, 20], dists, combine=combine_dists)
        results = itp.evaluate_batch([10, 19, 20])
        assert isinstance(results, list)
        np.testing.assert_allclose(results[1].probabilities, [0.95, 0.05])

    def test_with_point(self):
        itp = Interpolant([10.0, 20.0], np.array([2.0, 1.0]),
                          extrapolate=WithPoint(lambda pt: -pt[0]))
        assert itp.evaluate_batch([15.0, 30.0]) == [1.5, -30.0]

    def test_vector_constant(self):
        values = np.array([2.0, 1.0])
        itp = Interpolant([10.0, 20.0], values, extrapolate=Constant(np.array([1.0, 2.0])))
        results = itp.evaluate_batch([15.0, 30.0])
        assert results[0] == 1.5
        np.testing.assert_array_equal(results[1], [1.0, 2.0])


class TestVerbose:
    def test_verbose_jit(self, itp_bilinear, capsys):
        itp_bilinear.evaluate_batch(np.zeros((3, 2)), verbose=True)
        out = capsys.readouterr().out
        assert "3 points" in out
        assert "jit" in out

    def test_verbose_python(self, capsys):
        itp = Interpolant([0, 1], [np.array([0.0]), np.array([1.0])])
        itp.evaluate_batch([0.5], verbose=True)
        assert "python" in capsys.readouterr().out


class TestResultDtype:
    def test_float64_default(self, itp_bilinear):
        assert itp_bilinear.evaluate_batch(np.zeros((3, 2))).dtype == np.float64

    def test_float32_grid_and_points(self):
        axes = np.array([1.0, 2.0, 4.0], dtype=np.float32)
        values = np.array([10.0, 20.0, 40.0], dtype=np.float32)
        itp = Interpolant(axes, values)
        points = np.array([1.0, 1.5, 3.0, 4.0], dtype=np.float32)
        batch = itp.evaluate_batch(points)
        assert batch.dtype == np.float32
        assert batch.dtype == itp(points[1]).dtype
        np.testing.assert_allclose(batch, [itp(p) for p in points], rtol=1e-6)

    def test_integer_grid_gives_float64(self):
        itp = Interpolant([0, 1], np.array([0, 1]))
        assert itp.evaluate_batch([0, 1]).dtype == np.float64


class TestJitArgumentCache:
    def test_flattened_once(self, itp_bilinear):
        first = itp_bilinear._jit_arguments()
        itp_bilinear.evaluate_batch(np.zeros((2, 2)))
        assert itp_bilinear._jit_arguments() is first

    def test_unsupported_cached(self):
        itp = Interpolant([10, 20], [ProbDist([0.5, 0.5]), ProbDist([1, 0])],
                          combine=combine_dists)
        assert itp._jit_arguments() is None
        assert itp._jit_cache is False

    def test_not_pickled(self, itp_bilinear):
        itp_bilinear.evaluate_batch(np.zeros((2, 2)))
        assert itp_bilinear.__getstate__()["_jit_cache"] is None
        restored = pickle.loads(pickle.dumps(itp_bilinear))
        np.testing.assert_allclose(
            restored.evaluate_batch(np.array([[0.5, 1.0]])),
            itp_bilinear.evaluate_batch(np.array([[0.5, 1.0]])),
        )
