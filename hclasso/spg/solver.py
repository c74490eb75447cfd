"""
Spectral projected gradient solver for one column subproblem.

The iteration follows Birgin, Martinez & Raydan (2000): a Barzilai-Borwein
step along the negative gradient is projected onto the unit box, and the
resulting direction is searched with a non-monotone backtracking rule. Because
the objective may rise between iterations, the best point of the box visited
is tracked separately and returned instead of the last iterate. An infeasible
warm start enters that record through its projection.

All vectors live in a :class:`ColumnScratch` allocated once per worker, so the
loop itself performs no buffer allocation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from hclasso.backend import LinalgBackend, get_backend
from hclasso.logging import get_logger

from .core import ColumnResult, SPGConfig, Status
from .line_search import NonmonotoneMemory, initial_step, nonmonotone_line_search
from .projection import box_violation, first_order_residual, project_box, projected_step
from .quadratic import GradientOracle, QuadraticModel
from .step import bb_step
from .utils import as_columns, as_scalar, as_square_matrix

logger = get_logger(__name__)


@dataclass
class ColumnScratch:
    """Working buffers for one column solve, reused across columns."""

    backend: LinalgBackend
    k: int
    model: QuadraticModel
    x: Any
    x_old: Any
    g: Any
    g_old: Any
    d: Any
    tmp: Any
    tmp1: Any
    ahat: Any
    memory: NonmonotoneMemory

    @classmethod
    def allocate(cls, backend: LinalgBackend, k: int, memory: int) -> "ColumnScratch":
        return cls(
            backend=backend,
            k=k,
            model=QuadraticModel(backend, k),
            x=backend.empty(k),
            x_old=backend.empty(k),
            g=backend.empty(k),
            g_old=backend.empty(k),
            d=backend.empty(k),
            tmp=backend.empty(k),
            tmp1=backend.empty(k),
            ahat=backend.empty(k),
            memory=NonmonotoneMemory(memory),
        )


class SPGSolver:
    """
    Solve ``min a^T G a - 2 w^T a + lam ||a||_1`` over ``[0, 1]^k``.

    Args:
        scratch: Buffers owned by the calling worker.
        config: Solver tolerances and limits.
    """

    def __init__(self, scratch: ColumnScratch, config: Optional[SPGConfig] = None) -> None:
        self.scratch = scratch
        self.config = config or SPGConfig()

    def solve(self, G: Any, w: Any, a0: Any, lam: float, out: Any = None) -> ColumnResult:
        """
        Run SPG from the warm start ``a0``.

        ``G``, ``w`` and ``a0`` are backend buffers of matching size and are
        only read. When ``out`` is given the best point is copied into it once
        the solve has finished.
        """
        cfg = self.config
        s = self.scratch
        ops = s.backend
        x, x_old, g, g_old, d, tmp, tmp1 = s.x, s.x_old, s.g, s.g_old, s.d, s.tmp, s.tmp1

        oracle = GradientOracle(G, s.model.assign(G, w, lam))
        memory = s.memory
        memory.reset()

        ops.copy(a0, x)
        if cfg.project_warm_start:
            project_box(ops, x, x)
        oracle.gradient(x, g)
        f = oracle.smooth_value(x, tmp)

        # the best estimate only ever holds points of the box
        project_box(ops, x, s.ahat)
        fhat = oracle.smooth_value(s.ahat, tmp)

        nit = 0
        while True:
            if nit == 0:
                alpha = 1.0
            else:
                alpha = bb_step(
                    ops, x, x_old, g, g_old, tmp, tmp1, cfg.alpha_min, cfg.alpha_max
                )

            projected_step(ops, x, g, alpha, d)
            gtd = ops.dot(g, d)
            if gtd > -cfg.opt_tol:
                status = Status.NO_DESCENT
                break

            t = initial_step(nit, ops.asum(g) if nit == 0 else 0.0)
            memory.push(f)
            search = nonmonotone_line_search(
                f,
                memory.reference(),
                gtd,
                oracle.curvature(d, tmp),
                ops.asum(d),
                t=t,
                suff_dec=cfg.suff_dec,
                opt_tol=cfg.opt_tol,
                max_backtracks=cfg.max_backtracks,
            )
            if search.failed:
                logger.debug("Line search failed at iteration %d; taking a zero step", nit)

            ops.copy(x, x_old)
            ops.axpy(search.t, d, x)
            ops.copy(g, g_old)
            oracle.gradient(x, g)
            f += search.red_f
            nit += 1

            if f < fhat and box_violation(ops, x, tmp) <= cfg.opt_tol:
                fhat = f
                project_box(ops, x, s.ahat)

            if first_order_residual(ops, x, g, tmp) < cfg.opt_tol:
                status = Status.OPTIMAL
                # a stationary iterate is feasible up to opt_tol; prefer it on ties
                if f <= fhat + cfg.opt_tol * max(1.0, abs(fhat)):
                    fhat = f
                    project_box(ops, x, s.ahat)
                break
            if search.norm1_dx < cfg.opt_tol:
                status = Status.SMALL_STEP
                break
            if abs(search.red_f) < cfg.opt_tol:
                status = Status.STALLED
                break
            if nit > cfg.max_iter:
                status = Status.MAX_ITER
                break

        # g_old and tmp are free once the loop is done
        oracle.gradient(s.ahat, g_old)
        residual = first_order_residual(ops, s.ahat, g_old, tmp)
        if status is Status.OPTIMAL and not residual < cfg.opt_tol:
            logger.debug(
                "Best point is not the stationary iterate (residual=%.3e); reporting %s",
                residual,
                Status.STALLED.value,
            )
            status = Status.STALLED

        if out is not None:
            ops.copy(s.ahat, out)
            best = out
        else:
            best = s.ahat

        logger.debug(
            "Column solve stopped: status=%s nit=%d fun=%.6e residual=%.3e",
            status.value,
            nit,
            fhat,
            residual,
        )
        return ColumnResult(x=best, fun=float(fhat), status=status, nit=nit, residual=residual)


def solve_column(
    G: Any, w: Any, a0: Any, lam: Any, config: Optional[SPGConfig] = None
) -> ColumnResult:
    """
    Solve a single column subproblem.

    Args:
        G: ``(k, k)`` symmetric positive semidefinite matrix.
        w: Length-``k`` linear coefficients.
        a0: Length-``k`` warm start, normally inside ``[0, 1]^k``.
        lam: L1 regularization strength.
        config: Solver configuration (defaults to :class:`SPGConfig`).

    Returns:
        :class:`ColumnResult` whose ``x`` is a numpy array.
    """
    cfg = config or SPGConfig()
    G_mat = as_square_matrix(G)
    k = G_mat.shape[0]
    w_vec = as_columns(w, k, "w")
    a_vec = as_columns(a0, k, "a0")
    if w_vec.shape[1] != 1 or a_vec.shape[1] != 1:
        raise ValueError("w and a0 must be vectors of length k")

    ops = get_backend(cfg.backend)
    scratch = ColumnScratch.allocate(ops, k, cfg.memory)
    result = SPGSolver(scratch, cfg).solve(
        ops.asarray(G_mat),
        ops.asarray(w_vec[:, 0]),
        ops.asarray(a_vec[:, 0]),
        as_scalar(lam),
    )
    result.x = ops.to_numpy(result.x)
    return result


__all__ = ["ColumnScratch", "SPGSolver", "solve_column"]
