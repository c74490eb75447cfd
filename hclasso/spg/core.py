"""
Configuration, status and result containers for the hypercube Lasso solver.

Each column of a batch solves

    min_a   a^T G a - 2 w^T a + lam * ||a||_1    s.t.  0 <= a_i <= 1,

with a spectral projected gradient (SPG) method. The dataclasses here are the
values passed between the per-column solver and the batch dispatcher.

References:
    - Birgin, Martinez & Raydan, *Nonmonotone spectral projected gradient
      methods on convex sets*, SIAM J. Optim. 10 (2000)
    - Barzilai & Borwein, *Two-point step size gradient methods*, IMA J.
      Numer. Anal. 8 (1988)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List

import numpy as np

OPT_TOL = 1e-10
SUFF_DEC = 1e-3
MEMORY = 10
MAX_ITER = 500

SCHEDULES = ("static", "dynamic")


class Status(Enum):
    """Reason a column solve stopped."""

    OPTIMAL = "optimal"
    NO_DESCENT = "no_descent"
    SMALL_STEP = "small_step"
    STALLED = "stalled"
    MAX_ITER = "max_iter"

    @property
    def converged(self) -> bool:
        return self is not Status.MAX_ITER


class ScratchAllocationError(MemoryError):
    """Scratch buffers for a batch could not be allocated."""


@dataclass(frozen=True)
class SPGConfig:
    """
    Tuning knobs for the SPG solver and its dispatcher.

    Args:
        opt_tol: Absolute tolerance shared by every stopping test.
        suff_dec: Sufficient-decrease constant of the non-monotone line search.
        memory: Number of past objective values kept for the non-monotone
            reference value.
        max_iter: Iteration cap; a solve stops once the counter exceeds it.
        max_backtracks: Maximum number of step halvings per line search.
        alpha_min: Barzilai-Borwein steps at or below this value are reset to 1.
        alpha_max: Barzilai-Borwein steps above this value are reset to 1.
        n_workers: Size of the worker pool used by the dispatcher.
        schedule: ``"static"`` assigns columns round-robin to workers up front,
            ``"dynamic"`` lets idle workers pull the next column.
        backend: Linear-algebra backend name, see
            :func:`hclasso.backend.get_backend`.
        project_warm_start: Clamp the warm start into the unit box before the
            initial objective is evaluated.
    """

    opt_tol: float = OPT_TOL
    suff_dec: float = SUFF_DEC
    memory: int = MEMORY
    max_iter: int = MAX_ITER
    max_backtracks: int = 100
    alpha_min: float = 1e-10
    alpha_max: float = 1e10
    n_workers: int = 1
    schedule: str = "static"
    backend: str = "blas"
    project_warm_start: bool = False

    def __post_init__(self) -> None:
        if not self.opt_tol > 0.0:
            raise ValueError("opt_tol must be positive.")
        if not (0.0 < self.suff_dec < 1.0):
            raise ValueError("suff_dec must lie in (0, 1).")
        if self.memory < 1:
            raise ValueError("memory must be at least 1.")
        if self.max_iter < 0:
            raise ValueError("max_iter must be non-negative.")
        if self.max_backtracks < 1:
            raise ValueError("max_backtracks must be at least 1.")
        if not (0.0 < self.alpha_min < self.alpha_max):
            raise ValueError("Require 0 < alpha_min < alpha_max.")
        if self.n_workers < 1:
            raise ValueError("n_workers must be at least 1.")
        if self.schedule not in SCHEDULES:
            raise ValueError(
                f"Unsupported schedule {self.schedule!r}. "
                f"Supported schedules: {list(SCHEDULES)}"
            )

    def replace(self, **changes: Any) -> "SPGConfig":
        """Return a copy with ``changes`` applied (validated again)."""
        return replace(self, **changes)


@dataclass
class ColumnResult:
    """
    Outcome of one column solve.

    Attributes:
        x: Best point visited (backend buffer for dispatcher-owned solves,
            numpy array from :func:`hclasso.spg.solve_column`).
        fun: Smooth objective ``x^T G x - beta^T x`` tracked for ``x``.
        status: Why the iteration stopped.
        nit: Number of completed iterations.
        residual: First-order residual ``||P(x - grad(x)) - x||_1`` at ``x``.
    """

    x: Any
    fun: float
    status: Status
    nit: int
    residual: float

    @property
    def converged(self) -> bool:
        return self.status.converged


@dataclass
class BatchResult:
    """
    Outcome of a batch of independent column solves.

    Attributes:
        A: ``(k, d)`` matrix of per-column minimizers.
        loss: Sum of the per-column best objective values.
        fun: ``(d,)`` per-column best objective values.
        nit: ``(d,)`` per-column iteration counts.
        residual: ``(d,)`` per-column first-order residuals.
        status: Per-column stopping reasons.
    """

    A: np.ndarray
    loss: float
    fun: np.ndarray
    nit: np.ndarray
    residual: np.ndarray
    status: List[Status] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return all(s.converged for s in self.status)

    def as_dict(self) -> Dict[str, Any]:
        """Return ``{"A": ..., "Loss": ...}``, the classic two-output form."""
        return {"A": self.A, "Loss": self.loss}

    @classmethod
    def from_columns(cls, A: np.ndarray, columns: List[ColumnResult]) -> "BatchResult":
        fun = np.array([c.fun for c in columns], dtype=float)
        return cls(
            A=A,
            loss=math.fsum(fun.tolist()),
            fun=fun,
            nit=np.array([c.nit for c in columns], dtype=int),
            residual=np.array([c.residual for c in columns], dtype=float),
            status=[c.status for c in columns],
        )


__all__ = [
    "OPT_TOL",
    "SUFF_DEC",
    "MEMORY",
    "MAX_ITER",
    "SCHEDULES",
    "Status",
    "ScratchAllocationError",
    "SPGConfig",
    "ColumnResult",
    "BatchResult",
]
