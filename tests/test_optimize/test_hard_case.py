import numpy as np
import pytest

from tronopt.optimize import check_hard_case_candidate


def test_non_negative_minimal_eigenvalue_is_never_hard_case():
    assert check_hard_case_candidate(np.array([0.0, 1.0]), np.zeros(2)) == (False, 1)
    assert check_hard_case_candidate(np.array([2.0, 3.0]), np.zeros(2)) == (False, 1)


def test_repeated_eigenvalue_orthogonal_gradient():
    eigs = np.array([-2.0, -2.0, 1.0])
    qg = np.array([0.0, 0.0, 1.0])
    assert check_hard_case_candidate(eigs, qg) == (True, 2)


def test_projection_on_tied_eigenvector_rules_out_hard_case():
    eigs = np.array([-2.0, -2.0, 1.0])
    qg = np.array([0.0, 0.5, 1.0])
    assert check_hard_case_candidate(eigs, qg) == (False, 2)

    qg = np.array([0.5, 0.0, 1.0])
    assert check_hard_case_candidate(eigs, qg) == (False, 1)


def test_tolerances_on_ties_and_projections():
    # Eigenvalues within 1e-10 count as tied, projections below 1e-10 vanish.
    eigs = np.array([-2.0, -2.0 + 5e-11, -1.0])
    qg = np.array([1e-12, -5e-11, 1.0])
    assert check_hard_case_candidate(eigs, qg) == (True, 2)

    eigs = np.array([-2.0, -2.0 + 1e-9, -1.0])
    assert check_hard_case_candidate(eigs, qg) == (True, 1)


def test_all_eigenvalues_tied():
    eigs = np.full(3, -1.0)
    assert check_hard_case_candidate(eigs, np.zeros(3)) == (True, 3)


def test_length_mismatch_raises():
    with pytest.raises(ValueError):
        check_hard_case_candidate(np.array([-1.0, 1.0]), np.zeros(3))
