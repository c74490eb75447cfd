"""Non-monotone backtracking line search for the SPG iteration.

A trial step is accepted when the objective, predicted exactly by the
quadratic model along the direction, drops sufficiently below the *largest*
of the last few objective values rather than below the current one
(Grippo, Lampariello & Lucidi, 1986).
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np


class NonmonotoneMemory:
    """
    Fixed-capacity ring buffer of recent objective values.

    Slots that were never written hold ``-inf`` so they cannot raise the
    reference value.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._values = np.full(capacity, -np.inf)
        self._head = 0

    def __len__(self) -> int:
        return self._values.shape[0]

    def reset(self) -> None:
        self._values.fill(-np.inf)
        self._head = 0

    def push(self, value: float) -> None:
        """Store ``value``, overwriting the oldest entry once full."""
        self._values[self._head] = value
        self._head = (self._head + 1) % self._values.shape[0]

    def reference(self) -> float:
        """Largest stored value."""
        return float(self._values.max())

    def values(self) -> np.ndarray:
        """Stored values from oldest to newest (copy)."""
        return np.roll(self._values, -self._head)


class LineSearchResult(NamedTuple):
    """Accepted step ``t``, ``||t d||_1`` and predicted change of the objective."""

    t: float
    norm1_dx: float
    red_f: float

    @property
    def failed(self) -> bool:
        return self.t == 0.0


def initial_step(iteration: int, norm1_g: float) -> float:
    """Trial step: ``min(1, 1/||g||_1)`` on the first iteration, else 1."""
    if iteration == 0 and norm1_g > 0.0:
        return min(1.0, 1.0 / norm1_g)
    return 1.0


def nonmonotone_line_search(
    f: float,
    f_ref: float,
    gtd: float,
    curvature: float,
    norm1_d: float,
    t: float = 1.0,
    suff_dec: float = 1e-3,
    opt_tol: float = 1e-10,
    max_backtracks: int = 100,
) -> LineSearchResult:
    """
    Backtrack along a direction ``d`` until the non-monotone test holds.

    Args:
        f: Objective at the current point.
        f_ref: Reference value, the maximum over recent objective values.
        gtd: Directional derivative ``g^T d`` (negative).
        curvature: ``d^T hess d``.
        norm1_d: ``||d||_1``.
        t: Initial trial step.
        suff_dec: Sufficient-decrease constant.
        opt_tol: The search fails once ``||t d||_1`` falls below this value.
        max_backtracks: Maximum number of halvings.

    Returns:
        The accepted step, or ``LineSearchResult(0.0, 0.0, 0.0)`` when no
        acceptable step exists within the budget.
    """
    linear0 = t * gtd
    quad0 = t * t * curvature
    norm0 = t * norm1_d

    factor = 1.0
    for _ in range(max_backtracks):
        linear = linear0 * factor
        red_f = 0.5 * quad0 * factor * factor + linear
        if f + red_f < f_ref + suff_dec * linear:
            return LineSearchResult(t * factor, norm0 * factor, red_f)
        factor *= 0.5
        if norm0 * factor < opt_tol or t == 0.0:
            break
    return LineSearchResult(0.0, 0.0, 0.0)


__all__ = [
    "NonmonotoneMemory",
    "LineSearchResult",
    "initial_step",
    "nonmonotone_line_search",
]
