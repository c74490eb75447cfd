"""Pytest configuration and shared fixtures for hclasso tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Small random problem instances shared by the solver tests
"""

import os

import numpy as np
import pytest
import torch


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded numpy.random.Generator instance.
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests."""
    generator = torch.Generator(device="cpu")
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed the global numpy and torch RNGs before every test."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


def make_problem(rng: np.random.Generator, k: int, d: int, lam: float = 0.1):
    """Return a well-conditioned random batch ``(G, W, A0, lam)``.

    ``G = I + 0.2 * S`` with ``S`` symmetric and scaled so that the spectrum
    of ``G`` lies in ``[0.8, 1.2]``.
    """
    B = rng.standard_normal((k, k))
    S = 0.5 * (B + B.T)
    S /= max(np.abs(np.linalg.eigvalsh(S)).max(), 1e-12)
    G = np.eye(k) + 0.2 * S
    W = rng.standard_normal((k, d))
    A0 = rng.uniform(0.0, 1.0, size=(k, d))
    return G, W, A0, lam


@pytest.fixture(scope="function")
def problem(rng: np.random.Generator):
    """A ``k=8, d=6`` random batch."""
    return make_problem(rng, k=8, d=6)


@pytest.fixture(scope="function")
def problem_factory(rng: np.random.Generator):
    """Return ``make_problem`` bound to the deterministic ``rng``."""

    def factory(k: int, d: int, lam: float = 0.1):
        return make_problem(rng, k=k, d=d, lam=lam)

    return factory
