"""Newton's method with a trust region (Nocedal & Wright, Algorithm 4.1).

Each iteration solves the trust-region subproblem nearly exactly (see
:mod:`tronopt.optimize.subproblem`), takes the step, compares the actual
reduction of the objective with the reduction predicted by the quadratic
model and resizes the region accordingly. Steps whose reduction ratio does
not exceed ``eta`` are rolled back.

Example
-------
>>> import numpy as np
>>> from tronopt.optimize import Problem, newton_trust_region
>>> problem = Problem(
...     fun=lambda x: x[0] ** 2 + 10 * x[1] ** 2,
...     grad=lambda x: np.array([2 * x[0], 20 * x[1]]),
...     hess=lambda x: np.diag([2.0, 20.0]),
... )
>>> res = newton_trust_region(problem, np.array([1.0, 1.0]))
>>> res.success
True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import numpy as np

from ..logging import get_logger
from .convergence import assess_convergence
from .core import IterationRecord, OptimizeResult, Problem
from .evaluator import Evaluator, as_evaluator
from .subproblem import SubproblemResult, solve_tr_subproblem

logger = get_logger(__name__)


@dataclass(frozen=True)
class NewtonTrustRegion:
    """
    Configuration of the trust-region controller.

    Args:
        initial_delta: Radius of the first trust region. Must lie in
            ``(0, delta_hat)``.
        delta_hat: Upper bound on the radius.
        eta: Steps with reduction ratio ``rho <= eta`` are rejected. Must lie
            in ``[0, rho_lower)``.
        rho_lower: Below this ratio the radius shrinks by a factor 4.
        rho_upper: Above this ratio the radius doubles, unless the step was
            interior.
    """

    initial_delta: float = 1.0
    delta_hat: float = 100.0
    eta: float = 0.1
    rho_lower: float = 0.25
    rho_upper: float = 0.75

    def __post_init__(self) -> None:
        if not self.delta_hat > 0:
            raise ValueError("delta_hat must be strictly positive")
        if not 0 < self.initial_delta < self.delta_hat:
            raise ValueError("initial_delta must be in (0, delta_hat)")
        if not 0 <= self.eta < self.rho_lower:
            raise ValueError("eta must be in [0, rho_lower)")
        if not self.rho_lower >= 0:
            raise ValueError("rho_lower must be non-negative")
        if not self.rho_lower < self.rho_upper:
            raise ValueError("must have rho_lower < rho_upper")


@dataclass
class TrustRegionState:
    """Mutable state of one trust-region run.

    ``lam``, ``interior``, ``hard_case`` and ``reached_subproblem_solution``
    describe the most recent subproblem solve; ``accepted`` tells whether the
    most recent step was kept.
    """

    x: np.ndarray
    x_previous: np.ndarray
    f_x: float
    f_x_previous: float
    g: np.ndarray
    g_previous: np.ndarray
    H: np.ndarray
    delta: float
    s: Optional[np.ndarray] = None
    lam: float = float("nan")
    rho: float = 0.0
    m: float = 0.0
    interior: bool = True
    hard_case: bool = False
    reached_subproblem_solution: bool = True
    accepted: bool = True
    f_calls: int = 1
    g_calls: int = 1
    h_calls: int = 1

    def __post_init__(self) -> None:
        if self.s is None:
            self.s = np.zeros_like(self.x)


class StepSolver(Protocol):
    """Strategy choosing the step of one iteration."""

    def compute_step(
        self, state: TrustRegionState
    ) -> tuple[np.ndarray, SubproblemResult]:
        ...


class TrustRegionStepSolver:
    """Step solver backed by :func:`solve_tr_subproblem`."""

    def __init__(self, tolerance: float = 1e-10, max_iters: int = 5) -> None:
        if max_iters < 1:
            raise ValueError("max_iters must be at least 1")
        if tolerance <= 0:
            raise ValueError("tolerance must be positive")
        self.tolerance = tolerance
        self.max_iters = max_iters

    def compute_step(
        self, state: TrustRegionState
    ) -> tuple[np.ndarray, SubproblemResult]:
        step = np.empty_like(state.g)
        result = solve_tr_subproblem(
            state.g,
            state.H,
            state.delta,
            step,
            tolerance=self.tolerance,
            max_iters=self.max_iters,
        )
        return step, result


def initial_state(
    method: NewtonTrustRegion, evaluator: Evaluator, x0: np.ndarray
) -> TrustRegionState:
    """Evaluate the objective, gradient and Hessian at ``x0``."""
    x = np.array(x0, dtype=float)
    if x.ndim != 1 or x.size == 0:
        raise ValueError(f"x0 must be a non-empty 1-D array, got shape {x.shape}")
    f_x, g = evaluator.value_and_gradient(x)
    H = evaluator.hessian(x)
    return TrustRegionState(
        x=x,
        x_previous=x.copy(),
        f_x=float(f_x),
        f_x_previous=float("nan"),
        g=np.array(g, dtype=float),
        g_previous=np.array(g, dtype=float),
        H=np.array(H, dtype=float),
        delta=float(method.initial_delta),
    )


def _reduction_ratio(
    method: NewtonTrustRegion, m: float, f_x_previous: float, f_x: float
) -> float:
    if not np.isfinite(f_x):
        logger.warning("Objective is not finite at the trial point; shrinking region")
        return method.rho_lower - 1.0
    if abs(m) <= np.finfo(float).eps:
        # Only happens for tiny steps: accept and let the convergence test
        # decide.
        return 1.0
    if m > 0:
        # The radius is too large for an indefinite Hessian.
        return method.rho_lower - 1.0
    return (f_x_previous - f_x) / -m


def update_state(
    evaluator: Evaluator,
    state: TrustRegionState,
    method: NewtonTrustRegion,
    step_solver: Optional[StepSolver] = None,
) -> bool:
    """Advance ``state`` by one trust-region iteration.

    Returns False; deciding convergence is left to the driving loop.
    """
    if step_solver is None:
        step_solver = TrustRegionStepSolver()

    step, result = step_solver.compute_step(state)
    state.s[:] = step
    state.m = result.m
    state.interior = result.interior
    state.lam = result.lam
    state.hard_case = result.hard_case
    state.reached_subproblem_solution = result.reached_solution

    state.x_previous[:] = state.x
    state.g_previous[:] = state.g
    state.x += state.s

    f_x, g = evaluator.value_and_gradient(state.x)
    state.f_x_previous, state.f_x = state.f_x, float(f_x)
    state.g[:] = g
    state.f_calls += 1
    state.g_calls += 1

    # Algorithm 4.1 in N&W
    state.rho = _reduction_ratio(method, result.m, state.f_x_previous, state.f_x)
    if state.rho < method.rho_lower:
        state.delta *= 0.25
    elif state.rho > method.rho_upper and not state.interior:
        state.delta = min(2 * state.delta, method.delta_hat)

    if state.rho <= method.eta:
        # Keep the shrunk radius so the next step is strictly smaller.
        state.accepted = False
        state.f_x = state.f_x_previous
        state.x[:] = state.x_previous
        state.g[:] = state.g_previous
    else:
        state.accepted = True
        state.H = np.array(evaluator.hessian(state.x), dtype=float)
        state.h_calls += 1

    return False


def _record(nit: int, state: TrustRegionState) -> IterationRecord:
    return IterationRecord(
        iteration=nit,
        fun=state.f_x,
        grad_norm=float(np.linalg.norm(state.g)),
        delta=state.delta,
        rho=float(state.rho),
        lam=float(state.lam),
        interior=state.interior,
        hard_case=state.hard_case,
        reached_subproblem_solution=state.reached_subproblem_solution,
        accepted=state.accepted,
    )


def newton_trust_region(
    problem: Problem | Evaluator,
    x0: np.ndarray,
    method: Optional[NewtonTrustRegion] = None,
    *,
    xtol: float = 1e-32,
    ftol: float = 1e-32,
    grtol: float = 1e-8,
    maxiter: int = 1000,
    history: bool = False,
    store_trace: bool = False,
    callback: Optional[Callable[[TrustRegionState], bool]] = None,
    step_solver: Optional[StepSolver] = None,
    subproblem_tolerance: float = 1e-10,
    subproblem_max_iters: int = 5,
) -> OptimizeResult:
    """Minimize a smooth function with the trust-region Newton method.

    Args:
        problem: A :class:`Problem` (missing derivatives are approximated by
            finite differences) or any :class:`Evaluator`.
        x0: Starting point.
        method: Controller configuration, defaults to ``NewtonTrustRegion()``.
        xtol: Tolerance on the largest coordinate change of an accepted step.
        ftol: Tolerance on the change of the objective value.
        grtol: Tolerance on the sup-norm of the gradient.
        maxiter: Maximum number of iterations, rejected ones included.
        history: Record the iterate after every accepted step.
        store_trace: Record an :class:`IterationRecord` for every iteration.
        callback: Called with the state after every iteration; returning
            True stops the run.
        step_solver: Custom step strategy. Defaults to a
            :class:`TrustRegionStepSolver` built from the ``subproblem_*``
            arguments.

    Returns:
        An :class:`OptimizeResult`.
    """
    if min(xtol, ftol, grtol) < 0:
        raise ValueError("tolerances must be non-negative")
    if maxiter < 0:
        raise ValueError("maxiter must be non-negative")
    if method is None:
        method = NewtonTrustRegion()
    if step_solver is None:
        step_solver = TrustRegionStepSolver(subproblem_tolerance, subproblem_max_iters)

    evaluator = as_evaluator(problem)
    state = initial_state(method, evaluator, x0)
    hist: list[np.ndarray] = [state.x.copy()] if history else []
    trace: list[IterationRecord] = []

    nit = 0
    success = False
    message = "Maximum iterations reached."
    x_converged = f_converged = False
    gr_converged = bool(np.max(np.abs(state.g)) < grtol)
    if gr_converged:
        success = True
        message = "Gradient tolerance satisfied."

    while not success and nit < maxiter:
        update_state(evaluator, state, method, step_solver)
        nit += 1
        record = _record(nit, state)
        if store_trace:
            trace.append(record)
        logger.debug(
            "iter %d: f=%.10g |g|=%.3e delta=%.3e rho=%.3g lambda=%.3g "
            "interior=%s hard_case=%s accepted=%s",
            nit,
            record.fun,
            record.grad_norm,
            record.delta,
            record.rho,
            record.lam,
            record.interior,
            record.hard_case,
            record.accepted,
        )
        if state.accepted and history:
            hist.append(state.x.copy())

        if callback is not None and callback(state):
            message = "Stopped by callback."
            break

        if not state.accepted:
            # A rolled-back step leaves x == x_previous, which must not count
            # as convergence.
            continue

        status = assess_convergence(
            state.x,
            state.x_previous,
            state.f_x,
            state.f_x_previous,
            state.g,
            xtol,
            ftol,
            grtol,
        )
        x_converged, f_converged, gr_converged = (
            status.x_converged,
            status.f_converged,
            status.gr_converged,
        )
        if status.converged:
            success = True
            if gr_converged:
                message = "Gradient tolerance satisfied."
            elif f_converged:
                message = "Function tolerance satisfied."
            else:
                message = "Step tolerance satisfied."

    logger.info("%s (nit=%d, f=%.10g, delta=%.3e)", message, nit, state.f_x, state.delta)

    return OptimizeResult(
        x=state.x.copy(),
        fun=float(state.f_x),
        nit=nit,
        success=success,
        message=message,
        grad_norm=float(np.linalg.norm(state.g)),
        nfev=int(getattr(evaluator, "nfev", state.f_calls)),
        njev=int(getattr(evaluator, "njev", state.g_calls)),
        nhev=int(getattr(evaluator, "nhev", state.h_calls)),
        delta=float(state.delta),
        x_converged=x_converged,
        f_converged=f_converged,
        gr_converged=gr_converged,
        history=hist,
        trace=trace,
    )


__all__ = [
    "NewtonTrustRegion",
    "StepSolver",
    "TrustRegionState",
    "TrustRegionStepSolver",
    "initial_state",
    "newton_trust_region",
    "update_state",
]
