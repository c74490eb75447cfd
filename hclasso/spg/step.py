"""Barzilai-Borwein spectral step length."""

from __future__ import annotations

import math
from typing import Any

from hclasso.backend import LinalgBackend
from hclasso.logging import get_logger

logger = get_logger(__name__)


def bb_step(
    backend: LinalgBackend,
    x: Any,
    x_old: Any,
    g: Any,
    g_old: Any,
    tmp: Any,
    tmp1: Any,
    alpha_min: float = 1e-10,
    alpha_max: float = 1e10,
) -> float:
    """
    Return ``s^T s / s^T y`` with ``s = x - x_old`` and ``y = g - g_old``.

    Estimates outside ``(alpha_min, alpha_max]``, including non-finite ones
    from a vanishing denominator, are replaced by ``1.0``. ``tmp`` and ``tmp1``
    receive ``s`` and ``y``.
    """
    backend.copy(x, tmp)
    backend.axpy(-1.0, x_old, tmp)
    backend.copy(g, tmp1)
    backend.axpy(-1.0, g_old, tmp1)

    numerator = backend.dot(tmp, tmp)
    denominator = backend.dot(tmp, tmp1)
    if denominator == 0.0:
        logger.debug("Spectral step undefined (s^T y = 0); using 1.0")
        return 1.0
    alpha = numerator / denominator
    if not math.isfinite(alpha) or alpha <= alpha_min or alpha > alpha_max:
        logger.debug("Spectral step %.3e outside safe range; using 1.0", alpha)
        return 1.0
    return alpha


__all__ = ["bb_step"]
