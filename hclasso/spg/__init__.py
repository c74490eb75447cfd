"""
Spectral projected gradient solver for hypercube-constrained Lasso problems.

For each column ``w`` of ``W`` the subpackage solves

    min_a   a^T G a - 2 w^T a + lam * ||a||_1    s.t.  0 <= a <= 1,

starting from a warm start, and sums the attained objective values.

Modules:
    - ``core``: configuration, status and result containers
    - ``quadratic``: per-column quadratic model and gradient oracle
    - ``projection``: unit-box projection and first-order residual
    - ``step``: Barzilai-Borwein step length
    - ``line_search``: non-monotone backtracking line search
    - ``solver``: the per-column SPG iteration
    - ``dispatch``: worker pool over the columns of a batch
    - ``diagnostics``: vectorised objective and stationarity checks
"""

from . import core, diagnostics, dispatch, line_search, projection, quadratic, solver, step, utils
from .core import (
    BatchResult,
    ColumnResult,
    ScratchAllocationError,
    SPGConfig,
    Status,
)
from .diagnostics import first_order_residuals, is_stationary, lasso_objective, smooth_objective
from .dispatch import Dispatcher, ScratchArena, hc_lasso
from .line_search import NonmonotoneMemory, nonmonotone_line_search
from .quadratic import GradientOracle, QuadraticModel
from .solver import ColumnScratch, SPGSolver, solve_column
from .step import bb_step

__all__ = [
    "core",
    "diagnostics",
    "dispatch",
    "line_search",
    "projection",
    "quadratic",
    "solver",
    "step",
    "utils",
    # Core types
    "Status",
    "SPGConfig",
    "ColumnResult",
    "BatchResult",
    "ScratchAllocationError",
    # Building blocks
    "QuadraticModel",
    "GradientOracle",
    "bb_step",
    "NonmonotoneMemory",
    "nonmonotone_line_search",
    "ColumnScratch",
    "SPGSolver",
    "ScratchArena",
    # Entry points
    "solve_column",
    "Dispatcher",
    "hc_lasso",
    # Diagnostics
    "smooth_objective",
    "lasso_objective",
    "first_order_residuals",
    "is_stationary",
]
