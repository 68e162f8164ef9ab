"""Pytest configuration and shared fixtures for jointcast tests.

This module provides:
- Deterministic RNG fixtures for numpy
- Synthetic AR(2)-with-exogenous generators shaped like joint-angle data
"""

import os

import numpy as np
import pytest

from jointcast.schema import ChannelSchema

AR_COEFS = (0.6, -0.3)
EXOG_COEFS = (0.4, -0.2)
CHANNELS = ("Hips_Xrotation", "Spine_Xrotation", "Neck_Xrotation")


def simulate_arx(
    rng: np.random.Generator,
    n: int = 400,
    ar=AR_COEFS,
    beta=EXOG_COEFS,
    noise: float = 0.1,
) -> tuple[np.ndarray, np.ndarray]:
    """Simulate y_t = beta . x_t + sum_i ar_i y_{t-i} + noise, x ~ AR(1)."""
    k = len(beta)
    exog = np.zeros((n, k))
    shocks = rng.standard_normal((n, k))
    for t in range(1, n):
        exog[t] = 0.8 * exog[t - 1] + shocks[t]
    y = np.zeros(n)
    eps = noise * rng.standard_normal(n)
    p = len(ar)
    for t in range(p, n):
        y[t] = exog[t] @ beta + sum(ar[i] * y[t - 1 - i] for i in range(p)) + eps[t]
    return y, exog


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


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set the global numpy seed for reproducibility."""
    np.random.seed(int(os.environ.get("TEST_RNG_SEED", "0")))


@pytest.fixture
def arx_simulator():
    """The :func:`simulate_arx` generator, for tests that need custom sizes."""
    return simulate_arx


@pytest.fixture
def arx_data(rng: np.random.Generator) -> tuple[np.ndarray, np.ndarray]:
    """400 frames of a stable ARX(2) target with two exogenous channels."""
    return simulate_arx(rng)


@pytest.fixture
def schema() -> ChannelSchema:
    return ChannelSchema(CHANNELS)


@pytest.fixture
def recording(rng: np.random.Generator) -> np.ndarray:
    """Raw joint-angle matrix (degrees) laid out as ``CHANNELS``.

    Column 0 is the ARX target, columns 1-2 its exogenous drivers; all three
    are shifted and scaled away from zero mean / unit variance.
    """
    y, exog = simulate_arx(rng, n=600)
    matrix = np.column_stack([y, exog])
    return matrix * np.array([15.0, 8.0, 4.0]) + np.array([30.0, -10.0, 90.0])
