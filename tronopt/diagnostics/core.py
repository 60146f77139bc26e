"""Core diagnostic checks for the dense arrays consumed by the optimizers."""

from __future__ import annotations

import os

import numpy as np

_CHECKS_ENV_VAR = "TRONOPT_DEBUG"


def is_symmetric(
    mat: np.ndarray,
    atol: float = 1e-8,
) -> bool:
    """
    Check whether a matrix is square and symmetric.

    Parameters
    ----------
    mat:
        Real array with shape (n, n).
    atol:
        Absolute tolerance for checking equality.

    Returns
    -------
    bool
        True if mat is symmetric within the tolerance, False otherwise.
    """
    mat = np.asarray(mat)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        return False

    max_dev = np.max(np.abs(mat - mat.T), initial=0.0)
    if not np.isfinite(max_dev):
        return False

    return bool(max_dev <= atol)


def assert_symmetric(
    mat: np.ndarray,
    atol: float = 1e-8,
) -> None:
    """
    Assert that a matrix is symmetric.

    Parameters
    ----------
    mat:
        Real array with shape (n, n).
    atol:
        Absolute tolerance for checking equality.

    Raises
    ------
    ValueError
        If the matrix is not symmetric within the tolerance.
    """
    if not is_symmetric(mat, atol=atol):
        mat = np.asarray(mat)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise ValueError(f"Expected a square matrix, got shape {mat.shape}.")
        max_dev = float(np.max(np.abs(mat - mat.T)))
        raise ValueError(
            f"Matrix is not symmetric within tolerance {atol}. "
            f"Max deviation: {max_dev}"
        )


def assert_finite(arr: np.ndarray, name: str = "array") -> None:
    """
    Assert that every entry of an array is finite.

    Raises
    ------
    ValueError
        If the array contains NaN or infinite values.
    """
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} contains non-finite values.")


def input_checks_enabled() -> bool:
    """Whether ``TRONOPT_DEBUG`` asks the subproblem solver to check its inputs.

    The variable is read on every call so it can be flipped at runtime.
    """
    return os.getenv(_CHECKS_ENV_VAR, "0").lower() in ("1", "true", "yes", "on")


def check_subproblem_inputs(g: np.ndarray, H: np.ndarray) -> None:
    """
    Validate the gradient and Hessian handed to the subproblem solver.

    Does nothing unless :func:`input_checks_enabled` is True. The solver only
    uses the symmetric part of ``H``, so an asymmetric Hessian usually means a
    bug in the user's derivative code rather than a valid input.

    Raises
    ------
    ValueError
        If ``g`` or ``H`` contains non-finite values or ``H`` is not symmetric.
    """
    if not input_checks_enabled():
        return
    assert_finite(g, "gradient")
    assert_finite(H, "Hessian")
    assert_symmetric(H)
