"""Convergence assessment shared by the iterative optimizers."""

from __future__ import annotations

from typing import NamedTuple

import numpy as np


class ConvergenceStatus(NamedTuple):
    x_converged: bool
    f_converged: bool
    gr_converged: bool
    converged: bool


def assess_convergence(
    x: np.ndarray,
    x_previous: np.ndarray,
    f_x: float,
    f_x_previous: float,
    g: np.ndarray,
    xtol: float,
    ftol: float,
    grtol: float,
) -> ConvergenceStatus:
    """Run the position, function-value and gradient tests.

    Each test is a strict comparison against its own tolerance and the
    overall verdict is their logical OR:

    * ``max_i |x_i - x_previous_i| < xtol``
    * ``|f_x - f_x_previous| < ftol``
    * ``max_i |g_i| < grtol``
    """
    x = np.asarray(x, dtype=float)
    x_previous = np.asarray(x_previous, dtype=float)
    if x.shape != x_previous.shape:
        raise ValueError(
            f"x and x_previous must have the same shape, got {x.shape} and {x_previous.shape}"
        )

    x_converged = bool(np.max(np.abs(x - x_previous), initial=0.0) < xtol)
    f_converged = bool(abs(f_x - f_x_previous) < ftol)
    gr_converged = bool(np.max(np.abs(g), initial=0.0) < grtol)

    converged = x_converged or f_converged or gr_converged
    return ConvergenceStatus(x_converged, f_converged, gr_converged, converged)


__all__ = ["ConvergenceStatus", "assess_convergence"]
