"""Core interfaces shared across the trust-region optimization modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

Array = np.ndarray
Objective = Callable[[Array], float]
Gradient = Callable[[Array], Array]
Hessian = Callable[[Array], Array]

# Absolute thresholds used by the subproblem solver. They are not scaled with
# the problem, so badly conditioned Hessians may be misclassified.
PD_EPS = 1e-8
TIE_EPS = 1e-10


@dataclass(frozen=True)
class Problem:
    """Container describing an unconstrained minimization problem."""

    fun: Objective
    grad: Optional[Gradient] = None
    hess: Optional[Hessian] = None
    dim: Optional[int] = None


@dataclass(frozen=True)
class IterationRecord:
    """Per-iteration diagnostics of a trust-region run."""

    iteration: int
    fun: float
    grad_norm: float
    delta: float
    rho: float
    lam: float
    interior: bool
    hard_case: bool
    reached_subproblem_solution: bool
    accepted: bool


@dataclass
class OptimizeResult:
    """Result object returned by :func:`newton_trust_region`."""

    x: Array
    fun: float
    nit: int
    success: bool
    message: str
    grad_norm: float
    nfev: int
    njev: int
    nhev: int
    delta: float
    x_converged: bool = False
    f_converged: bool = False
    gr_converged: bool = False
    history: List[Array] = field(default_factory=list)
    trace: List[IterationRecord] = field(default_factory=list)


__all__ = [
    "Array",
    "Objective",
    "Gradient",
    "Hessian",
    "IterationRecord",
    "OptimizeResult",
    "PD_EPS",
    "Problem",
    "TIE_EPS",
]
