"""Projection onto the unit hypercube and the quantities built from it."""

from __future__ import annotations

from typing import Any

import numpy as np

from hclasso.backend import LinalgBackend


def project_box(backend: LinalgBackend, x: Any, out: Any) -> None:
    """``out := clip(x, 0, 1)``. ``out`` may alias ``x``."""
    backend.clip(x, 0.0, 1.0, out)


def projected_step(
    backend: LinalgBackend, x: Any, g: Any, alpha: float, out: Any
) -> None:
    """``out := P(x - alpha * g) - x``, the SPG search direction."""
    backend.copy(x, out)
    backend.axpy(-alpha, g, out)
    project_box(backend, out, out)
    backend.axpy(-1.0, x, out)


def first_order_residual(backend: LinalgBackend, x: Any, g: Any, tmp: Any) -> float:
    """
    Return ``||P(x - g) - x||_1``.

    The residual vanishes exactly at stationary points of the box-constrained
    problem. ``tmp`` is clobbered.
    """
    projected_step(backend, x, g, 1.0, tmp)
    return backend.asum(tmp)


def box_violation(backend: LinalgBackend, x: Any, tmp: Any) -> float:
    """Return ``||P(x) - x||_1``, zero exactly inside the box. ``tmp`` is clobbered."""
    project_box(backend, x, tmp)
    backend.axpy(-1.0, x, tmp)
    return backend.asum(tmp)


def project_unit_box(x: np.ndarray) -> np.ndarray:
    """Numpy convenience: return a clipped copy of ``x``."""
    return np.clip(np.asarray(x, dtype=float), 0.0, 1.0)


__all__ = [
    "project_box",
    "projected_step",
    "first_order_residual",
    "box_violation",
    "project_unit_box",
]
