"""hclasso - warm-started SPG solver for Lasso subproblems on the unit hypercube."""

__version__ = "0.1.0"

from .backend import (
    BlasBackend,
    LinalgBackend,
    NumPyBackend,
    TorchBackend,
    default_backend,
    get_backend,
)
from .logging import configure_logging, get_logger, log_level, set_log_level
from .spg import (
    BatchResult,
    ColumnResult,
    Dispatcher,
    ScratchAllocationError,
    SPGConfig,
    SPGSolver,
    Status,
    first_order_residuals,
    hc_lasso,
    is_stationary,
    lasso_objective,
    smooth_objective,
    solve_column,
)

__all__ = [
    # Version
    "__version__",
    # Backends
    "LinalgBackend",
    "NumPyBackend",
    "BlasBackend",
    "TorchBackend",
    "get_backend",
    "default_backend",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
    "log_level",
    # Solver
    "Status",
    "SPGConfig",
    "ColumnResult",
    "BatchResult",
    "ScratchAllocationError",
    "SPGSolver",
    "Dispatcher",
    "solve_column",
    "hc_lasso",
    # Diagnostics
    "smooth_objective",
    "lasso_objective",
    "first_order_residuals",
    "is_stationary",
]
