"""Finite-difference derivative helpers.

Used when a :class:`~tronopt.optimize.core.Problem` supplies the objective
but not its gradient or Hessian. Pure NumPy, suitable for the small dense
problems the trust-region solver targets.
"""

from __future__ import annotations

import numpy as np

from .core import Array, Objective


def approx_grad(
    fun: Objective, x: Array, eps: float = 1e-6, return_evals: bool = False
) -> Array | tuple[Array, int]:
    """Compute a central-difference gradient approximation.

    Parameters
    ----------
    fun:
        Objective function returning a scalar given x.
    x:
        Point where the gradient is approximated.
    eps:
        Perturbation size for finite differences.
    return_evals:
        Also return the number of objective evaluations spent.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = np.asarray(x, dtype=float)
    basis = np.eye(x.size) * eps
    grad = np.array(
        [(fun(x + e) - fun(x - e)) / (2.0 * eps) for e in basis], dtype=float
    )
    evals = 2 * x.size
    if return_evals:
        return grad, evals
    return grad


def approx_hessian(
    fun: Objective, x: Array, eps: float = 1e-4, return_evals: bool = False
) -> Array | tuple[Array, int]:
    """Approximate the Hessian using second-order central differences.

    The result is exactly symmetric: only the upper triangle is differenced
    and mirrored.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = np.asarray(x, dtype=float)
    n = x.size
    basis = np.eye(n) * eps
    hess = np.zeros((n, n), dtype=float)
    fx = fun(x)
    evals = 1
    for i in range(n):
        ei = basis[i]
        hess[i, i] = (fun(x + ei) - 2 * fx + fun(x - ei)) / eps**2
        evals += 2
        for j in range(i + 1, n):
            ej = basis[j]
            value = (
                fun(x + ei + ej)
                - fun(x + ei - ej)
                - fun(x - ei + ej)
                + fun(x - ei - ej)
            ) / (4 * eps**2)
            evals += 4
            hess[i, j] = hess[j, i] = value
    if return_evals:
        return hess, evals
    return hess


__all__ = ["approx_grad", "approx_hessian"]
