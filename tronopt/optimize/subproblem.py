"""Nearly exact solution of the trust-region subproblem.

Minimizes the quadratic model ``m(s) = g^T s + 0.5 s^T H s`` subject to
``||s|| <= delta`` with the eigenvalue-based iterative method of Nocedal &
Wright, section 4.3 (Algorithm 4.3, including the "hard case"). The Hessian
is decomposed once per call, so the method suits dense Hessians that are
cheap to factorize.

References:
    - Nocedal & Wright, *Numerical Optimization* (2006), section 4.3
    - Moré & Sorensen, "Computing a trust region step" (1983)
"""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np

from ..diagnostics import check_subproblem_inputs
from ..logging import get_logger
from .core import PD_EPS, TIE_EPS

logger = get_logger(__name__)


class SubproblemResult(NamedTuple):
    """Outcome of :func:`solve_tr_subproblem`.

    Attributes:
        m: Value of the quadratic model at the returned step.
        interior: Whether the step lies strictly inside the region.
        lam: The regularizer ``lambda`` such that ``H + lam * I`` is PSD.
        hard_case: Whether the Nocedal & Wright hard case was taken.
        reached_solution: False when root finding ran out of iterations.
    """

    m: float
    interior: bool
    lam: float
    hard_case: bool
    reached_solution: bool


def check_hard_case_candidate(
    eigenvalues: np.ndarray, qg: np.ndarray
) -> tuple[bool, int]:
    """Check whether the gradient is orthogonal to the minimal eigenspace.

    Args:
        eigenvalues: Eigenvalues of the Hessian sorted ascending.
        qg: Inner products of the gradient with the matching eigenvectors.

    Returns:
        ``(hard_case, multiplicity)``. ``multiplicity`` counts the eigenvalues
        tied with the smallest one and is only meaningful when ``hard_case``
        is True.
    """
    if len(eigenvalues) != len(qg):
        raise ValueError(
            f"eigenvalues and qg must have the same length, got {len(eigenvalues)} and {len(qg)}"
        )
    if eigenvalues[0] >= 0:
        # Only a negative smallest eigenvalue can give the hard case.
        return False, 1

    checked = 0
    for value, projection in zip(eigenvalues, qg):
        if abs(eigenvalues[0] - value) > TIE_EPS:
            break
        checked += 1
        if abs(projection) > TIE_EPS:
            return False, checked
    return True, checked


def _check_inputs(
    g: np.ndarray, H: np.ndarray, delta: float, s: np.ndarray, max_iters: int
) -> None:
    n = g.shape[0] if g.ndim == 1 else -1
    if n < 1:
        raise ValueError(f"g must be a non-empty vector, got shape {g.shape}")
    if s.shape != (n,):
        raise ValueError(f"s must have shape ({n},), got {s.shape}")
    if H.shape != (n, n):
        raise ValueError(f"H must have shape ({n}, {n}), got {H.shape}")
    if max_iters < 1:
        raise ValueError("max_iters must be at least 1")
    if not delta > 0:
        raise ValueError("delta must be positive")


def solve_tr_subproblem(
    g: np.ndarray,
    H: np.ndarray,
    delta: float,
    s: np.ndarray,
    tolerance: float = 1e-10,
    max_iters: int = 5,
) -> SubproblemResult:
    """Choose a step inside the trust region by the iterative method.

    Args:
        g: Gradient at the current point.
        H: Hessian at the current point. Only its symmetric part is used and
            it need not be positive definite.
        delta: Trust-region radius, ``||s|| <= delta``.
        s: Caller-owned buffer the step is written into.
        tolerance: Convergence tolerance on successive ``lambda`` iterates.
        max_iters: Maximum number of root-finding iterations.

    Returns:
        A :class:`SubproblemResult`. ``g`` and ``H`` are left untouched.
    """
    g = np.asarray(g, dtype=float)
    H = np.asarray(H, dtype=float)
    _check_inputs(g, H, delta, s, max_iters)
    check_subproblem_inputs(g, H)

    n = g.shape[0]
    delta_sq = delta**2
    H_sym = 0.5 * (H + H.T)

    eigenvalues, eigenvectors = np.linalg.eigh(H_sym)
    min_ev, max_ev = eigenvalues[0], eigenvalues[-1]
    qg = eigenvectors.T @ g

    # Formula 4.39 in N&W, restricted to components from index `start`.
    def p_sq_norm(lam: float, start: int = 0) -> float:
        return float(
            np.sum(qg[start:] ** 2 / (lam + eigenvalues[start:]) ** 2)
        )

    if min_ev >= PD_EPS and p_sq_norm(0.0) <= delta_sq:
        # The Newton step -(H \ g) is already feasible.
        s[:] = -(eigenvectors / eigenvalues) @ qg
        m = float(g @ s + 0.5 * s @ (H_sym @ s))
        return SubproblemResult(m, True, 0.0, False, True)

    # Smaller values would not ridge H enough to make it PSD.
    lambda_lb = -min_ev + max(PD_EPS, PD_EPS * (max_ev - min_ev))
    lam = lambda_lb

    hard_case_candidate, multiplicity = check_hard_case_candidate(eigenvalues, qg)
    if hard_case_candidate:
        # Formula 4.45 in N&W
        p_lambda2 = p_sq_norm(lambda_lb, multiplicity)
        if p_lambda2 > delta_sq:
            # The boundary can be reached by root finding after all; start
            # between the bound and the largest eigenvalue.
            lam = lambda_lb + 0.01 * max(max_ev - lambda_lb, 0.0)
        else:
            tau = math.sqrt(delta_sq - p_lambda2)
            rest = eigenvectors[:, multiplicity:]
            s[:] = tau * eigenvectors[:, 0] - rest @ (
                qg[multiplicity:] / (eigenvalues[multiplicity:] + lambda_lb)
            )
            logger.debug(
                "Hard case: lambda=%.6g multiplicity=%d tau=%.6g",
                lambda_lb,
                multiplicity,
                tau,
            )
            m = float(g @ s + 0.5 * s @ (H_sym @ s))
            return SubproblemResult(m, False, float(lambda_lb), True, True)

    if not np.any(g):
        # Singular PSD Hessian at a stationary point: no direction decreases
        # the model and the secular equation is undefined.
        s[:] = 0.0
        return SubproblemResult(0.0, True, 0.0, False, True)

    # Algorithm 4.3 of N&W: Newton iteration on 1/delta - 1/||p(lambda)||.
    eye = np.eye(n)
    reached_solution = False
    for _ in range(max_iters):
        lam_previous = lam
        L = np.linalg.cholesky(H_sym + lam * eye)
        s[:] = -np.linalg.solve(L.T, np.linalg.solve(L, g))
        q = np.linalg.solve(L, s)
        norm2_s = float(s @ s)
        lam += norm2_s * (math.sqrt(norm2_s) - delta) / (delta * float(q @ q))

        # Never step below the PSD bound; go half way towards it instead.
        if lam < lambda_lb + PD_EPS:
            lam = 0.5 * (lam_previous - lambda_lb) + lambda_lb

        if abs(lam - lam_previous) < tolerance:
            reached_solution = True
            break

    if not reached_solution:
        logger.debug(
            "Root finding stopped after %d iterations: lambda=%.6g |s|=%.6g delta=%.6g",
            max_iters,
            lam,
            float(np.linalg.norm(s)),
            delta,
        )

    # With g orthogonal to the null space of a singular PSD Hessian the
    # iterate settles on the bound while the step stays inside the region.
    interior = (
        reached_solution
        and lam < lambda_lb + PD_EPS
        and float(s @ s) < delta_sq
    )

    m = float(g @ s + 0.5 * s @ (H_sym @ s))
    return SubproblemResult(m, bool(interior), float(lam), False, reached_solution)


__all__ = ["SubproblemResult", "check_hard_case_candidate", "solve_tr_subproblem"]
