"""
Input validation shared by the public entry points.

Arrays are converted to float64 numpy arrays here; buffers for the selected
backend are created later from the validated host arrays.
"""

from __future__ import annotations

import math
from typing import Any, Tuple

import numpy as np


def as_square_matrix(G: Any, name: str = "G") -> np.ndarray:
    """Return ``G`` as a float64 ``(k, k)`` array with ``k >= 1``."""
    mat = np.asarray(G, dtype=float)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        raise ValueError(f"{name} must be a square (k, k) matrix, got shape {mat.shape}")
    if mat.shape[0] < 1:
        raise ValueError(f"{name} must have at least one row")
    return mat


def as_columns(W: Any, k: int, name: str) -> np.ndarray:
    """Return ``W`` as a float64 ``(k, d)`` array; a 1-D input is one column."""
    mat = np.asarray(W, dtype=float)
    if mat.ndim == 1:
        mat = mat.reshape(-1, 1)
    if mat.ndim != 2 or mat.shape[0] != k:
        raise ValueError(f"{name} must have shape ({k}, d), got {mat.shape}")
    return mat


def as_scalar(lam: Any, name: str = "lam") -> float:
    """Return ``lam`` as a finite float. One-element arrays are accepted."""
    arr = np.asarray(lam, dtype=float).reshape(-1)
    if arr.size != 1:
        raise ValueError(f"{name} must be a scalar, got {arr.size} values")
    value = float(arr[0])
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")
    return value


def check_problem(
    G: Any, W: Any, A0: Any, lam: Any
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, float]:
    """
    Validate a batch ``(G, W, A0, lam)``.

    Raises:
        ValueError: If ``G`` is not square, ``W`` and ``A0`` do not share the
            shape ``(k, d)``, or ``lam`` is not a finite scalar.
    """
    G_mat = as_square_matrix(G)
    k = G_mat.shape[0]
    W_mat = as_columns(W, k, "W")
    A_mat = as_columns(A0, k, "A0")
    if A_mat.shape != W_mat.shape:
        raise ValueError(
            f"A0 must have the same shape as W {W_mat.shape}, got {A_mat.shape}"
        )
    return G_mat, W_mat, A_mat, as_scalar(lam)


__all__ = ["as_square_matrix", "as_columns", "as_scalar", "check_problem"]
