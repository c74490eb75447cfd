"""Benchmark batch solves across worker counts and backends."""

import time
from typing import Dict

import numpy as np

from hclasso import SPGConfig, hc_lasso


def make_problem(k: int, d: int, seed: int = 0):
    rng = np.random.default_rng(seed)
    X = rng.normal(size=(2 * k, k))
    G = X.T @ X / (2 * k)
    W = rng.normal(size=(k, d))
    A0 = rng.uniform(0.0, 1.0, size=(k, d))
    return G, W, A0


def benchmark_dispatch(
    k: int,
    d: int,
    n_workers: int = 1,
    schedule: str = "static",
    backend: str = "blas",
    repeats: int = 3,
) -> Dict[str, float]:
    """Benchmark ``hc_lasso`` on a random batch.

    Args:
        k: Number of dictionary atoms.
        d: Number of columns.
        n_workers: Size of the thread pool.
        schedule: ``"static"`` or ``"dynamic"``.
        backend: Linear-algebra backend name.
        repeats: Number of timed runs.

    Returns:
        Dictionary with timing results.
    """
    G, W, A0 = make_problem(k, d)
    config = SPGConfig(n_workers=n_workers, schedule=schedule, backend=backend)

    # Warmup
    hc_lasso(G, W, A0, 0.1, config=config)

    start = time.perf_counter()
    for _ in range(repeats):
        result = hc_lasso(G, W, A0, 0.1, config=config)
    end = time.perf_counter()

    total_time = end - start
    return {
        "k": k,
        "d": d,
        "n_workers": n_workers,
        "time_per_batch_sec": total_time / repeats,
        "columns_per_sec": repeats * d / total_time,
        "mean_nit": float(result.nit.mean()),
    }


if __name__ == "__main__":
    print("Benchmarking batch dispatch...")

    for backend in ("blas", "numpy"):
        for n_workers in (1, 2, 4):
            for schedule in ("static", "dynamic"):
                results = benchmark_dispatch(
                    k=128, d=256, n_workers=n_workers, schedule=schedule, backend=backend
                )
                print(f"{backend:>6} workers={n_workers} {schedule:>7}:")
                print(f"  Time per batch: {results['time_per_batch_sec']*1e3:.2f} ms")
                print(f"  Columns per second: {results['columns_per_sec']:.0f}")
