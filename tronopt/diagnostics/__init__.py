"""Diagnostics and input checks for tronopt."""

from .core import (
    assert_finite,
    assert_symmetric,
    check_subproblem_inputs,
    input_checks_enabled,
    is_symmetric,
)

__all__ = [
    "assert_finite",
    "assert_symmetric",
    "check_subproblem_inputs",
    "input_checks_enabled",
    "is_symmetric",
]
