import numpy as np
import pytest

from hclasso.backend import get_backend
from hclasso.spg.step import bb_step


def _bb(x, x_old, g, g_old, **kwargs):
    ops = get_backend("numpy")
    k = len(x)
    return bb_step(
        ops,
        np.asarray(x, dtype=float),
        np.asarray(x_old, dtype=float),
        np.asarray(g, dtype=float),
        np.asarray(g_old, dtype=float),
        np.empty(k),
        np.empty(k),
        **kwargs,
    )


def test_bb_step_inverse_curvature():
    # g = 2 x, so s^T s / s^T y = 1 / 2
    assert _bb([1.0, 1.0], [0.0, 0.0], [2.0, 2.0], [0.0, 0.0]) == pytest.approx(0.5)


def test_bb_step_identical_iterates_reset():
    assert _bb([0.3, 0.3], [0.3, 0.3], [1.0, 1.0], [1.0, 1.0]) == 1.0


def test_bb_step_negative_curvature_reset():
    assert _bb([1.0, 0.0], [0.0, 0.0], [-1.0, 0.0], [0.0, 0.0]) == 1.0


def test_bb_step_too_large_reset():
    assert _bb([1.0, 0.0], [0.0, 0.0], [1e-12, 0.0], [0.0, 0.0]) == 1.0


def test_bb_step_too_small_reset():
    assert _bb([1.0, 0.0], [0.0, 0.0], [1e11, 0.0], [0.0, 0.0]) == 1.0


def test_bb_step_custom_range():
    # alpha = 0.5 lies outside (0.6, 10]
    assert _bb([1.0], [0.0], [2.0], [0.0], alpha_min=0.6, alpha_max=10.0) == 1.0


def test_bb_step_torch_backend():
    ops = get_backend("torch")
    x = ops.asarray([1.0, 2.0])
    x_old = ops.asarray([0.0, 0.0])
    g = ops.asarray([4.0, 8.0])
    g_old = ops.asarray([0.0, 0.0])
    alpha = bb_step(ops, x, x_old, g, g_old, ops.empty(2), ops.empty(2))
    assert alpha == pytest.approx(0.25)
