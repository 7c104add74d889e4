"""Quick start example: interpolate numbers and probability distributions on a grid."""

import math

import numpy as np

from pymultilinear import Interpolant, combine


def f(x, y):
    """A smooth 2D function: sin(x) * exp(-y)."""
    return math.sin(x) * math.exp(-y)


# Build interpolant on a 2D grid
xs = np.linspace(-3, 3, 61)
ys = np.linspace(0, 2, 41)
values = np.array([[f(x, y) for y in ys] for x in xs])
itp = Interpolant((xs, ys), values, extrapolate="replicate")

# Evaluate at a test point
point = (1.0, 0.5)
exact = f(*point)
approx = itp(point)

print(f"Exact:  {exact:.10f}")
print(f"Approx: {approx:.10f}")
print(f"Error:  {abs(approx - exact):.2e}")

# Batch evaluation through the JIT kernel
points = np.column_stack([np.linspace(-4, 4, 5), np.linspace(-1, 3, 5)])
print(f"\nBatch:  {itp.evaluate_batch(points, verbose=True)}")


# Probability distributions only support a weighted average
def combine_dists(weights, dists):
    ps = combine(weights, dists)
    return ps / ps.sum()


dists = [np.array([0.5, 0.5]), np.array([1.0, 0.0])]
dist_itp = Interpolant([10, 20], dists, combine=combine_dists)
print(f"\nDistribution at 19: {dist_itp(19)}")
