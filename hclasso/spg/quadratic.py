"""Quadratic model of one column subproblem and its gradient oracle.

On the unit box ``||a||_1 = sum(a)``, so the Lasso objective of a column is
the quadratic ``a^T G a - beta^T a`` with ``beta = 2 w - lam``. Its Hessian is
the constant ``2 G``.
"""

from __future__ import annotations

from typing import Any

from hclasso.backend import LinalgBackend


class QuadraticModel:
    """
    Per-column constants ``hess = 2 G`` and ``beta = 2 w - lam``.

    The buffers are owned by the model and overwritten by :meth:`assign`, so a
    single model is reused across all columns handled by one worker. ``hess``
    is a separate buffer rather than a view of ``G`` so the shared input is
    never written to.
    """

    def __init__(self, backend: LinalgBackend, k: int) -> None:
        self.backend = backend
        self.k = k
        self.hess = backend.empty((k, k))
        self.beta = backend.empty(k)

    def assign(self, G: Any, w: Any, lam: float) -> "QuadraticModel":
        """Fill ``hess`` and ``beta`` for the column ``w``."""
        ops = self.backend
        ops.copy(w, self.beta)
        ops.axpy(1.0, w, self.beta)
        ops.add_scalar(-lam, self.beta)

        ops.copy(G, self.hess)
        ops.axpy(1.0, G, self.hess)
        return self


class GradientOracle:
    """Gradient and smooth objective value of a :class:`QuadraticModel`."""

    def __init__(self, G: Any, model: QuadraticModel) -> None:
        self.G = G
        self.model = model
        self.backend = model.backend

    def gradient(self, x: Any, out: Any) -> None:
        """``out := hess @ x - beta``."""
        ops = self.backend
        ops.gemv(self.model.hess, x, out)
        ops.axpy(-1.0, self.model.beta, out)

    def smooth_value(self, x: Any, tmp: Any) -> float:
        """Return ``x^T (G x - beta)``; ``tmp`` is clobbered."""
        ops = self.backend
        ops.gemv(self.G, x, tmp)
        ops.axpy(-1.0, self.model.beta, tmp)
        return ops.dot(x, tmp)

    def curvature(self, d: Any, tmp: Any) -> float:
        """Return ``d^T hess d``; ``tmp`` is clobbered."""
        ops = self.backend
        ops.gemv(self.model.hess, d, tmp)
        return ops.dot(d, tmp)


__all__ = ["QuadraticModel", "GradientOracle"]
