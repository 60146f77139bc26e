"""Pytest configuration and shared fixtures for tronopt tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- A factory for random symmetric positive-definite matrices
"""

import os

import numpy as np
import pytest
import torch


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    This ensures tests are reproducible while allowing override for debugging.

    Returns:
        A seeded numpy.random.Generator instance.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests.

    Returns:
        A seeded torch.Generator instance.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    generator = torch.Generator(device="cpu")
    generator.manual_seed(seed)
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds(rng: np.random.Generator, torch_rng: torch.Generator) -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(int(os.environ.get("TEST_RNG_SEED", "0")))
    torch.manual_seed(int(os.environ.get("TEST_RNG_SEED", "0")))


@pytest.fixture(scope="function")
def random_spd(rng: np.random.Generator):
    """Factory for random symmetric positive-definite matrices.

    The returned callable takes the dimension and a lower bound on the
    eigenvalues.
    """

    def make(n: int, min_ev: float = 0.5) -> np.ndarray:
        q, _ = np.linalg.qr(rng.standard_normal((n, n)))
        eigs = min_ev + rng.uniform(0.0, 4.0, size=n)
        return (q * eigs) @ q.T

    return make
