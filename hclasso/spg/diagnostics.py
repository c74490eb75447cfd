"""
Vectorised objective and optimality checks for whole batches.

These helpers operate on host numpy arrays and evaluate every column at once.
They are independent of the solver buffers and are meant for validating
results.
"""

from __future__ import annotations

from typing import Any, Tuple

import numpy as np

from .utils import as_columns, as_scalar, as_square_matrix


def _prepare(G: Any, W: Any, A: Any, lam: Any) -> Tuple[np.ndarray, np.ndarray, np.ndarray, float]:
    G_mat = as_square_matrix(G)
    k = G_mat.shape[0]
    W_mat = as_columns(W, k, "W")
    A_mat = as_columns(A, k, "A")
    if A_mat.shape != W_mat.shape:
        raise ValueError(f"A must have the same shape as W {W_mat.shape}, got {A_mat.shape}")
    return G_mat, W_mat, A_mat, as_scalar(lam)


def smooth_objective(G: Any, W: Any, A: Any, lam: Any) -> np.ndarray:
    """
    Per-column ``a^T G a - beta^T a`` with ``beta = 2 w - lam``.

    This is the value the solver tracks and sums into the batch loss.
    """
    G_mat, W_mat, A_mat, lam = _prepare(G, W, A, lam)
    beta = 2.0 * W_mat - lam
    return np.einsum("ij,ij->j", A_mat, G_mat @ A_mat - beta)


def lasso_objective(G: Any, W: Any, A: Any, lam: Any) -> np.ndarray:
    """
    Per-column ``a^T G a - 2 w^T a + lam ||a||_1``.

    Equal to :func:`smooth_objective` whenever ``A >= 0``; the two only
    differ for columns with negative entries (an infeasible warm start).
    """
    G_mat, W_mat, A_mat, lam = _prepare(G, W, A, lam)
    quad = np.einsum("ij,ij->j", A_mat, G_mat @ A_mat)
    linear = np.einsum("ij,ij->j", W_mat, A_mat)
    return quad - 2.0 * linear + lam * np.abs(A_mat).sum(axis=0)


def first_order_residuals(G: Any, W: Any, A: Any, lam: Any) -> np.ndarray:
    """
    Per-column ``||P(a - grad f(a)) - a||_1`` with ``P`` the unit-box clamp.

    Zero exactly at stationary points of the box-constrained problem.
    """
    G_mat, W_mat, A_mat, lam = _prepare(G, W, A, lam)
    grad = 2.0 * (G_mat @ A_mat) - (2.0 * W_mat - lam)
    return np.abs(np.clip(A_mat - grad, 0.0, 1.0) - A_mat).sum(axis=0)


def is_stationary(G: Any, W: Any, A: Any, lam: Any, tol: float = 1e-8) -> bool:
    """Return True if every column's first-order residual is at most ``tol``."""
    return bool(np.all(first_order_residuals(G, W, A, lam) <= tol))


__all__ = ["smooth_objective", "lasso_objective", "first_order_residuals", "is_stationary"]
