import numpy as np
import pytest

from hclasso.backend import get_backend
from hclasso.spg.projection import (
    box_violation,
    first_order_residual,
    project_box,
    project_unit_box,
    projected_step,
)


@pytest.fixture(params=["numpy", "blas", "torch"])
def ops(request):
    return get_backend(request.param)


def test_project_box_clamps(ops):
    x = ops.asarray([-1.0, 0.0, 0.3, 1.0, 2.5])
    out = ops.empty(5)
    project_box(ops, x, out)
    assert np.allclose(ops.to_numpy(out), [0.0, 0.0, 0.3, 1.0, 1.0])


def test_project_box_idempotent(ops, rng):
    x = ops.asarray(rng.normal(0.5, 2.0, size=20))
    once = ops.empty(20)
    twice = ops.empty(20)
    project_box(ops, x, once)
    project_box(ops, once, twice)
    assert np.array_equal(ops.to_numpy(once), ops.to_numpy(twice))


def test_projected_step(ops):
    x = ops.asarray([0.5, 0.5, 0.5])
    g = ops.asarray([1.0, -1.0, 0.2])
    d = ops.empty(3)
    projected_step(ops, x, g, 2.0, d)
    # P([-1.5, 2.5, 0.1]) - x
    assert np.allclose(ops.to_numpy(d), [-0.5, 0.5, -0.4])


def test_first_order_residual_vanishes_at_stationary_point(ops):
    # x at the lower bound with positive gradient, interior with zero gradient
    x = ops.asarray([0.0, 0.4, 1.0])
    g = ops.asarray([3.0, 0.0, -2.0])
    tmp = ops.empty(3)
    assert first_order_residual(ops, x, g, tmp) == 0.0


def test_first_order_residual_nonzero_off_optimum(ops):
    x = ops.asarray([0.5, 0.5])
    g = ops.asarray([0.25, -1.0])
    tmp = ops.empty(2)
    assert first_order_residual(ops, x, g, tmp) == pytest.approx(0.75)


def test_project_unit_box_returns_copy():
    x = np.array([-1.0, 0.5, 3.0])
    y = project_unit_box(x)
    assert np.allclose(y, [0.0, 0.5, 1.0])
    assert x[0] == -1.0


def test_box_violation(ops):
    tmp = ops.empty(4)
    inside = ops.asarray([0.0, 0.2, 0.9, 1.0])
    assert box_violation(ops, inside, tmp) == 0.0
    outside = ops.asarray([-0.25, 0.5, 1.5, 1.0])
    assert box_violation(ops, outside, tmp) == pytest.approx(0.75)
