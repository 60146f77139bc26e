"""Objective evaluators consumed by the trust-region controller.

An evaluator supplies the objective value, gradient and Hessian at a point.
The controller only counts calls; how the derivatives are obtained is the
evaluator's business.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

import numpy as np
import torch

from .core import Problem
from .utils import approx_grad, approx_hessian


class Evaluator(Protocol):
    """Deterministic source of ``f``, ``grad f`` and ``hess f``."""

    nfev: int
    njev: int
    nhev: int

    def value_and_gradient(self, x: np.ndarray) -> tuple[float, np.ndarray]:
        ...

    def hessian(self, x: np.ndarray) -> np.ndarray:
        ...


class ProblemEvaluator:
    """Evaluate a :class:`Problem`, differencing whatever it does not supply.

    Objective evaluations spent on finite differences are added to ``nfev``;
    ``njev`` and ``nhev`` only count calls of user-supplied derivatives.
    """

    def __init__(self, problem: Problem) -> None:
        self.problem = problem
        self.nfev = 0
        self.njev = 0
        self.nhev = 0

    def value_and_gradient(self, x: np.ndarray) -> tuple[float, np.ndarray]:
        x = np.asarray(x, dtype=float)
        fx = float(self.problem.fun(x))
        self.nfev += 1
        if self.problem.grad is not None:
            grad = np.asarray(self.problem.grad(x), dtype=float)
            self.njev += 1
        else:
            grad, evals = approx_grad(self.problem.fun, x, return_evals=True)
            self.nfev += int(evals)
        return fx, grad

    def hessian(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if self.problem.hess is not None:
            self.nhev += 1
            return np.asarray(self.problem.hess(x), dtype=float)
        hess, evals = approx_hessian(self.problem.fun, x, return_evals=True)
        self.nfev += int(evals)
        return hess


class TorchEvaluator:
    """Evaluate a scalar torch function, differentiating it with autograd.

    Parameters
    ----------
    fun:
        Callable mapping a 1-D tensor to a scalar tensor. It must be built
        from differentiable torch operations.
    dtype:
        Floating dtype used for the evaluation (default float64).
    device:
        Optional torch device. Results are always returned as NumPy arrays.
    """

    def __init__(
        self,
        fun: Callable[[torch.Tensor], torch.Tensor],
        dtype: torch.dtype = torch.float64,
        device: Optional[torch.device] = None,
    ) -> None:
        if not dtype.is_floating_point:
            raise ValueError(f"dtype must be a floating point dtype, got {dtype}")
        self.fun = fun
        self.dtype = dtype
        self.device = device if device is not None else torch.device("cpu")
        self.nfev = 0
        self.njev = 0
        self.nhev = 0

    def _as_tensor(self, x: np.ndarray, requires_grad: bool = False) -> torch.Tensor:
        t = torch.as_tensor(np.asarray(x, dtype=float), dtype=self.dtype, device=self.device)
        return t.clone().requires_grad_(requires_grad)

    def _scalar(self, t: torch.Tensor) -> torch.Tensor:
        value = self.fun(t)
        if value.numel() != 1:
            raise ValueError(f"fun must return a scalar, got shape {tuple(value.shape)}")
        return value.reshape(())

    def value_and_gradient(self, x: np.ndarray) -> tuple[float, np.ndarray]:
        t = self._as_tensor(x, requires_grad=True)
        value = self._scalar(t)
        (grad,) = torch.autograd.grad(value, t, allow_unused=True)
        if grad is None:
            grad = torch.zeros_like(t)
        self.nfev += 1
        self.njev += 1
        return float(value.detach()), grad.detach().cpu().numpy().astype(float)

    def hessian(self, x: np.ndarray) -> np.ndarray:
        t = self._as_tensor(x)
        hess = torch.autograd.functional.hessian(self._scalar, t)
        self.nhev += 1
        return hess.detach().cpu().numpy().astype(float)


def as_evaluator(source: Problem | Evaluator) -> Evaluator:
    """Wrap a :class:`Problem` in a :class:`ProblemEvaluator`; pass evaluators through."""
    if isinstance(source, Problem):
        return ProblemEvaluator(source)
    if not (hasattr(source, "value_and_gradient") and hasattr(source, "hessian")):
        raise TypeError(
            "Expected a Problem or an object with value_and_gradient() and hessian()"
        )
    return source


__all__ = ["Evaluator", "ProblemEvaluator", "TorchEvaluator", "as_evaluator"]
