"""
Batch dispatch of independent column subproblems over a worker pool.

Every column of ``W`` defines its own subproblem sharing ``G`` and ``lam``.
Columns are spread over ``n_workers`` threads; each worker owns one
:class:`~hclasso.spg.solver.ColumnScratch` from a :class:`ScratchArena` and
reuses it for every column it processes. The backends release the GIL inside
their matrix-vector products, which is where the time goes.

Example
-------
>>> import numpy as np
>>> from hclasso import hc_lasso
>>> G = 2.0 * np.eye(2)
>>> W = np.ones((2, 1))
>>> res = hc_lasso(G, W, np.full((2, 1), 0.5), 0.0)
>>> np.round(res.A[:, 0], 6).tolist(), round(res.loss, 6)
([0.5, 0.5], -1.0)
"""

from __future__ import annotations

import queue
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import torch

from hclasso.backend import LinalgBackend, get_backend
from hclasso.logging import get_logger

from .core import BatchResult, ColumnResult, ScratchAllocationError, SPGConfig
from .solver import ColumnScratch, SPGSolver
from .utils import check_problem

logger = get_logger(__name__)

_THREAD_PREFIX = "hclasso-worker"


class ScratchArena:
    """
    One private :class:`ColumnScratch` per worker, allocated up front.

    Slots never share memory. The arena is a context manager; leaving the
    block drops every buffer.

    Raises:
        ScratchAllocationError: If the buffers cannot be allocated.
    """

    def __init__(self, backend: LinalgBackend, k: int, n_workers: int, memory: int) -> None:
        try:
            self._slots: List[ColumnScratch] = [
                ColumnScratch.allocate(backend, k, memory) for _ in range(n_workers)
            ]
        except (MemoryError, torch.cuda.OutOfMemoryError) as exc:
            raise ScratchAllocationError(
                f"Could not allocate scratch buffers for {n_workers} worker(s) with k={k}"
            ) from exc

    def __len__(self) -> int:
        return len(self._slots)

    def __getitem__(self, index: int) -> ColumnScratch:
        return self._slots[index]

    def release(self) -> None:
        self._slots = []

    def __enter__(self) -> "ScratchArena":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()


class Dispatcher:
    """
    Solve all columns of a batch and reduce their objective values.

    Args:
        config: Solver and pool configuration. ``config.n_workers`` bounds the
            pool and ``config.schedule`` selects static (round-robin) or
            dynamic (work-queue) assignment of columns to workers.
    """

    def __init__(self, config: Optional[SPGConfig] = None) -> None:
        self.config = config or SPGConfig()
        self.backend = get_backend(self.config.backend)

    def solve(self, G: Any, W: Any, A0: Any, lam: Any) -> BatchResult:
        """
        Solve every column ``j`` from the warm start ``A0[:, j]``.

        Args:
            G: ``(k, k)`` symmetric positive semidefinite matrix (not checked).
            W: ``(k, d)`` linear coefficients, one subproblem per column.
            A0: ``(k, d)`` warm starts.
            lam: Non-negative regularization strength.

        Returns:
            :class:`BatchResult` with column ``j`` of ``A`` solving column ``j``
            of ``W``.
        """
        G_mat, W_mat, A_mat, lam = check_problem(G, W, A0, lam)
        k, d = W_mat.shape
        ops = self.backend
        n_workers = max(1, min(self.config.n_workers, d))

        logger.info(
            "Solving %d column(s) with k=%d on %d worker(s) (%s schedule, %s backend)",
            d,
            k,
            n_workers,
            self.config.schedule,
            ops.name,
        )

        G_buf = ops.asarray(G_mat)
        W_cols = ops.columns(W_mat)
        A_cols = ops.columns(A_mat)
        out = ops.empty((d, k))

        results: List[Optional[ColumnResult]] = [None] * d
        if d > 0:
            with ScratchArena(ops, k, n_workers, self.config.memory) as arena:
                solvers = [SPGSolver(arena[i], self.config) for i in range(n_workers)]
                problem = (G_buf, W_cols, A_cols, lam, out)
                if n_workers == 1:
                    self._collect(results, _solve_columns(solvers[0], range(d), problem))
                elif self.config.schedule == "static":
                    self._run_static(solvers, d, problem, results)
                else:
                    self._run_dynamic(solvers, d, problem, results)

        A = np.ascontiguousarray(ops.to_numpy(out).T) if d else np.zeros((k, 0))
        batch = BatchResult.from_columns(A, [r for r in results if r is not None])
        logger.info(
            "Batch finished: loss=%.6e, %d/%d column(s) converged, max nit=%d",
            batch.loss,
            sum(s.converged for s in batch.status),
            d,
            int(batch.nit.max()) if d else 0,
        )
        return batch

    @staticmethod
    def _collect(
        results: List[Optional[ColumnResult]], partial: Iterable[Tuple[int, ColumnResult]]
    ) -> None:
        for j, result in partial:
            results[j] = result

    def _run_static(
        self,
        solvers: Sequence[SPGSolver],
        d: int,
        problem: tuple,
        results: List[Optional[ColumnResult]],
    ) -> None:
        n_workers = len(solvers)
        with ThreadPoolExecutor(
            max_workers=n_workers, thread_name_prefix=_THREAD_PREFIX
        ) as executor:
            futures = [
                executor.submit(_solve_columns, solvers[i], range(i, d, n_workers), problem)
                for i in range(n_workers)
            ]
            for i, future in enumerate(futures):
                partial = future.result()
                logger.debug("Worker %d finished %d column(s)", i, len(partial))
                self._collect(results, partial)

    def _run_dynamic(
        self,
        solvers: Sequence[SPGSolver],
        d: int,
        problem: tuple,
        results: List[Optional[ColumnResult]],
    ) -> None:
        idle: "queue.SimpleQueue[int]" = queue.SimpleQueue()
        for i in range(len(solvers)):
            idle.put(i)

        def _task(j: int) -> List[Tuple[int, ColumnResult]]:
            slot = idle.get()
            try:
                return _solve_columns(solvers[slot], (j,), problem)
            finally:
                idle.put(slot)

        with ThreadPoolExecutor(
            max_workers=len(solvers), thread_name_prefix=_THREAD_PREFIX
        ) as executor:
            futures = [executor.submit(_task, j) for j in range(d)]
            for future in futures:
                self._collect(results, future.result())


def _solve_columns(
    solver: SPGSolver, columns: Iterable[int], problem: tuple
) -> List[Tuple[int, ColumnResult]]:
    """Solve ``columns`` sequentially with one worker's solver."""
    G_buf, W_cols, A_cols, lam, out = problem
    return [(j, solver.solve(G_buf, W_cols[j], A_cols[j], lam, out=out[j])) for j in columns]


def hc_lasso(
    G: Any,
    W: Any,
    A0: Any,
    lam: Any,
    config: Optional[SPGConfig] = None,
    **overrides: Any,
) -> BatchResult:
    """
    Solve ``min a^T G a - 2 w^T a + lam ||a||_1`` over ``[0, 1]^k`` per column.

    Args:
        G: ``(k, k)`` symmetric positive semidefinite matrix.
        W: ``(k, d)`` matrix whose columns are the vectors ``w``.
        A0: ``(k, d)`` warm starts.
        lam: Regularization strength.
        config: Base configuration; ``overrides`` replace individual fields,
            e.g. ``hc_lasso(G, W, A0, 0.1, n_workers=4)``.

    Returns:
        :class:`BatchResult`; ``result.A`` and ``result.loss`` are the new
        coefficient matrix and the summed objective.
    """
    cfg = config or SPGConfig()
    if overrides:
        cfg = cfg.replace(**overrides)
    return Dispatcher(cfg).solve(G, W, A0, lam)


__all__ = ["ScratchArena", "Dispatcher", "hc_lasso"]
