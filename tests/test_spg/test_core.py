import numpy as np
import pytest

from hclasso.spg.core import (
    MAX_ITER,
    MEMORY,
    OPT_TOL,
    SUFF_DEC,
    BatchResult,
    ColumnResult,
    SPGConfig,
    Status,
)


def test_default_config_matches_constants():
    cfg = SPGConfig()
    assert cfg.opt_tol == OPT_TOL == 1e-10
    assert cfg.suff_dec == SUFF_DEC == 1e-3
    assert cfg.memory == MEMORY == 10
    assert cfg.max_iter == MAX_ITER == 500
    assert cfg.n_workers == 1
    assert cfg.schedule == "static"
    assert cfg.backend == "blas"


@pytest.mark.parametrize(
    "changes",
    [
        {"opt_tol": 0.0},
        {"suff_dec": 1.0},
        {"suff_dec": 0.0},
        {"memory": 0},
        {"max_iter": -1},
        {"max_backtracks": 0},
        {"alpha_min": 1.0, "alpha_max": 0.5},
        {"n_workers": 0},
        {"schedule": "guided"},
    ],
)
def test_config_rejects_invalid_values(changes):
    with pytest.raises(ValueError):
        SPGConfig(**changes)


def test_config_replace_validates_and_copies():
    cfg = SPGConfig()
    other = cfg.replace(n_workers=4, schedule="dynamic")
    assert other.n_workers == 4 and other.schedule == "dynamic"
    assert cfg.n_workers == 1
    with pytest.raises(ValueError):
        cfg.replace(memory=0)


def test_status_converged_flag():
    assert Status.OPTIMAL.converged
    assert Status.NO_DESCENT.converged
    assert Status.SMALL_STEP.converged
    assert Status.STALLED.converged
    assert not Status.MAX_ITER.converged


def test_batch_result_from_columns():
    columns = [
        ColumnResult(x=None, fun=-1.0, status=Status.OPTIMAL, nit=3, residual=0.0),
        ColumnResult(x=None, fun=0.25, status=Status.MAX_ITER, nit=501, residual=1e-3),
    ]
    A = np.zeros((2, 2))
    batch = BatchResult.from_columns(A, columns)
    assert batch.loss == pytest.approx(-0.75)
    assert batch.nit.tolist() == [3, 501]
    assert batch.status == [Status.OPTIMAL, Status.MAX_ITER]
    assert not batch.converged
    out = batch.as_dict()
    assert out["A"] is A and out["Loss"] == batch.loss
