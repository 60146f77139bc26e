"""Tests for diagnostics and solver input checks."""

import numpy as np
import pytest

from tronopt.diagnostics import (
    assert_finite,
    assert_symmetric,
    check_subproblem_inputs,
    input_checks_enabled,
    is_symmetric,
)
from tronopt.optimize import solve_tr_subproblem


@pytest.mark.parametrize(
    "value, expected",
    [("1", True), ("TRUE", True), ("on", True), ("0", False), ("", False)],
)
def test_input_checks_follow_environment(monkeypatch, value, expected) -> None:
    monkeypatch.setenv("TRONOPT_DEBUG", value)
    assert input_checks_enabled() is expected


def test_input_checks_disabled_without_environment(monkeypatch) -> None:
    monkeypatch.delenv("TRONOPT_DEBUG", raising=False)
    assert not input_checks_enabled()
    # Nothing is validated while checks are off.
    check_subproblem_inputs(np.array([np.nan]), np.array([[1.0, 2.0]]))


def test_is_symmetric_and_assert() -> None:
    mat = np.array([[1.0, 2.0], [2.0, -3.0]])
    assert is_symmetric(mat)
    assert_symmetric(mat)

    skew = np.array([[1.0, 2.0], [0.0, 1.0]])
    assert not is_symmetric(skew)
    with pytest.raises(ValueError, match="not symmetric"):
        assert_symmetric(skew)


def test_assert_symmetric_rejects_non_square() -> None:
    assert not is_symmetric(np.ones((2, 3)))
    with pytest.raises(ValueError, match="square"):
        assert_symmetric(np.ones((2, 3)))


def test_assert_finite() -> None:
    assert_finite(np.array([1.0, 2.0]))
    with pytest.raises(ValueError, match="gradient"):
        assert_finite(np.array([1.0, np.nan]), "gradient")


def test_check_subproblem_inputs_when_enabled(monkeypatch) -> None:
    monkeypatch.setenv("TRONOPT_DEBUG", "1")
    check_subproblem_inputs(np.ones(2), np.eye(2))
    with pytest.raises(ValueError, match="Hessian"):
        check_subproblem_inputs(np.ones(2), np.array([[np.inf, 0.0], [0.0, 1.0]]))


def test_solver_checks_inputs_only_when_enabled(monkeypatch) -> None:
    H = np.array([[2.0, 1.0], [0.0, 2.0]])
    g = np.array([1.0, 1.0])
    s = np.empty(2)

    monkeypatch.setenv("TRONOPT_DEBUG", "0")
    solve_tr_subproblem(g, H, 10.0, s)

    monkeypatch.setenv("TRONOPT_DEBUG", "1")
    with pytest.raises(ValueError, match="not symmetric"):
        solve_tr_subproblem(g, H, 10.0, s)
    with pytest.raises(ValueError, match="non-finite"):
        solve_tr_subproblem(np.array([np.inf, 0.0]), np.eye(2), 1.0, s)
