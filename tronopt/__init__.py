"""tronopt - trust-region Newton minimization on dense NumPy arrays."""

__version__ = "0.1.0"

# Diagnostics
from .diagnostics import (
    assert_finite,
    assert_symmetric,
    check_subproblem_inputs,
    input_checks_enabled,
    is_symmetric,
)

# Logging
from .logging import configure_logging, get_logger, set_log_level

# Optimization
from .optimize import (
    ConvergenceStatus,
    Evaluator,
    IterationRecord,
    NewtonTrustRegion,
    OptimizeResult,
    Problem,
    ProblemEvaluator,
    StepSolver,
    SubproblemResult,
    TorchEvaluator,
    TrustRegionState,
    TrustRegionStepSolver,
    assess_convergence,
    check_hard_case_candidate,
    newton_trust_region,
    solve_tr_subproblem,
)

__all__ = [
    "__version__",
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
    "assert_finite",
    "assert_symmetric",
    "assess_convergence",
    "check_hard_case_candidate",
    "check_subproblem_inputs",
    "configure_logging",
    "get_logger",
    "input_checks_enabled",
    "is_symmetric",
    "newton_trust_region",
    "set_log_level",
    "solve_tr_subproblem",
]
