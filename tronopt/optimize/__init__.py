"""Trust-region Newton minimization for tronopt.

Example
-------
>>> import numpy as np
>>> from tronopt.optimize import Problem, newton_trust_region
>>> def rosen(x):
...     return (1 - x[0])**2 + 100 * (x[1] - x[0]**2)**2
>>> def rosen_grad(x):
...     return np.array([
...         -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
...         200 * (x[1] - x[0] ** 2),
...     ])
>>> def rosen_hess(x):
...     return np.array([
...         [1200 * x[0] ** 2 - 400 * x[1] + 2, -400 * x[0]],
...         [-400 * x[0], 200.0],
...     ])
>>> problem = Problem(fun=rosen, grad=rosen_grad, hess=rosen_hess, dim=2)
>>> res = newton_trust_region(problem, np.array([-1.2, 1.0]))
>>> bool(res.fun < 1e-12)
True
"""

from .convergence import ConvergenceStatus, assess_convergence
from .core import IterationRecord, OptimizeResult, Problem
from .evaluator import Evaluator, ProblemEvaluator, TorchEvaluator, as_evaluator
from .subproblem import SubproblemResult, check_hard_case_candidate, solve_tr_subproblem
from .trust_region import (
    NewtonTrustRegion,
    StepSolver,
    TrustRegionState,
    TrustRegionStepSolver,
    initial_state,
    newton_trust_region,
    update_state,
)
from .utils import approx_grad, approx_hessian

__all__ = [
    "ConvergenceStatus",
    "Evaluator",
    "IterationRecord",
    "NewtonTrustRegion",
    "OptimizeResult",
    "Problem",
    "ProblemEvaluator",
    "StepSolver",
    "SubproblemResult",
    "TorchEvaluator",
    "TrustRegionState",
    "TrustRegionStepSolver",
    "approx_grad",
    "approx_hessian",
    "as_evaluator",
    "assess_convergence",
    "check_hard_case_candidate",
    "initial_state",
    "newton_trust_region",
    "solve_tr_subproblem",
    "update_state",
]
