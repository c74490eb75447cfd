import numpy as np
import pytest

from hclasso import hc_lasso
from hclasso.spg.diagnostics import (
    first_order_residuals,
    is_stationary,
    lasso_objective,
    smooth_objective,
)


def test_smooth_objective_concrete():
    G = 2.0 * np.eye(2)
    W = np.ones((2, 1))
    A = np.full((2, 1), 0.5)
    assert smooth_objective(G, W, A, 0.0) == pytest.approx([-1.0])


def test_smooth_and_lasso_objectives_agree_in_box(problem):
    G, W, A0, lam = problem
    assert np.allclose(smooth_objective(G, W, A0, lam), lasso_objective(G, W, A0, lam))


def test_objectives_differ_for_negative_entries():
    G = np.eye(1)
    W = np.zeros((1, 1))
    A = np.array([[-0.5]])
    # smooth: 0.25 - 0.5 * lam ; lasso: 0.25 + 0.5 * lam
    assert smooth_objective(G, W, A, 1.0) == pytest.approx([-0.25])
    assert lasso_objective(G, W, A, 1.0) == pytest.approx([0.75])


def test_residuals_zero_at_known_optimum():
    G = np.diag([1.0, 2.0])
    W = np.zeros((2, 1))
    A = np.zeros((2, 1))
    assert first_order_residuals(G, W, A, 1.0) == pytest.approx([0.0])
    assert is_stationary(G, W, A, 1.0)


def test_residuals_positive_off_optimum():
    G = np.eye(2)
    W = np.ones((2, 1))
    A = np.zeros((2, 1))
    assert first_order_residuals(G, W, A, 0.0)[0] > 0.0
    assert not is_stationary(G, W, A, 0.0)


def test_solver_output_is_nearly_stationary(problem):
    G, W, A0, lam = problem
    res = hc_lasso(G, W, A0, lam)
    assert np.allclose(first_order_residuals(G, W, res.A, lam), res.residual, atol=1e-9)
    assert is_stationary(G, W, res.A, lam, tol=1e-3)


def test_shape_mismatch_rejected():
    with pytest.raises(ValueError):
        smooth_objective(np.eye(2), np.ones((2, 2)), np.ones((2, 3)), 0.0)
