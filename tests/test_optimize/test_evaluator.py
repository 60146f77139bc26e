import numpy as np
import pytest
import torch

from tronopt.optimize import (
    Problem,
    ProblemEvaluator,
    TorchEvaluator,
    as_evaluator,
    newton_trust_region,
)


def test_problem_evaluator_uses_supplied_derivatives():
    problem = Problem(
        fun=lambda x: float(x @ x),
        grad=lambda x: 2 * x,
        hess=lambda x: 2 * np.eye(x.size),
    )
    evaluator = ProblemEvaluator(problem)
    fx, grad = evaluator.value_and_gradient(np.array([1.0, -2.0]))
    hess = evaluator.hessian(np.array([1.0, -2.0]))
    assert fx == 5.0
    assert np.array_equal(grad, [2.0, -4.0])
    assert np.array_equal(hess, 2 * np.eye(2))
    assert (evaluator.nfev, evaluator.njev, evaluator.nhev) == (1, 1, 1)


def test_problem_evaluator_counts_finite_difference_evaluations():
    evaluator = ProblemEvaluator(Problem(fun=lambda x: float(x[0] ** 2 + 3 * x[1] ** 2)))
    _, grad = evaluator.value_and_gradient(np.array([0.5, -1.5]))
    assert np.allclose(grad, [1.0, -9.0], atol=1e-6)
    assert evaluator.nfev == 1 + 4

    hess = evaluator.hessian(np.array([0.5, -1.5]))
    assert np.allclose(hess, np.diag([2.0, 6.0]), atol=1e-3)
    assert evaluator.nfev == 5 + 9
    assert (evaluator.njev, evaluator.nhev) == (0, 0)


def test_torch_evaluator_matches_analytic_derivatives():
    evaluator = TorchEvaluator(lambda t: (t**2).sum() + t[0] * t[1])
    fx, grad = evaluator.value_and_gradient(np.array([1.0, 2.0]))
    hess = evaluator.hessian(np.array([1.0, 2.0]))
    assert fx == pytest.approx(7.0)
    assert isinstance(grad, np.ndarray)
    assert np.allclose(grad, [4.0, 5.0])
    assert np.allclose(hess, [[2.0, 1.0], [1.0, 2.0]])
    assert (evaluator.nfev, evaluator.njev, evaluator.nhev) == (1, 1, 1)


def test_torch_evaluator_drives_trust_region():
    def rosen(t: torch.Tensor) -> torch.Tensor:
        return (1 - t[0]) ** 2 + 100 * (t[1] - t[0] ** 2) ** 2

    res = newton_trust_region(TorchEvaluator(rosen), np.array([-1.2, 1.0]), maxiter=200)
    assert res.success
    assert np.allclose(res.x, np.ones(2), atol=1e-6)
    assert res.nhev >= 1


def test_torch_evaluator_rejects_non_scalar_and_bad_dtype():
    evaluator = TorchEvaluator(lambda t: 2 * t)
    with pytest.raises(ValueError, match="scalar"):
        evaluator.value_and_gradient(np.ones(2))
    with pytest.raises(ValueError, match="floating"):
        TorchEvaluator(lambda t: t.sum(), dtype=torch.int64)


def test_as_evaluator():
    problem = Problem(fun=lambda x: float(x @ x))
    assert isinstance(as_evaluator(problem), ProblemEvaluator)
    evaluator = TorchEvaluator(lambda t: t.sum())
    assert as_evaluator(evaluator) is evaluator
    with pytest.raises(TypeError):
        as_evaluator(object())
