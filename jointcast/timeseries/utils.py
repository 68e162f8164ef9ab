"""Design-matrix construction for autoregressive models.

This module builds the lagged regressors shared by the single-target ARX
model and the vector autoregression, plus the sample autocorrelation used by
the residual diagnostics.

Lag convention: every lag block is ordered lag-1 first, i.e. the row for
time ``t`` holds ``x[t-1], x[t-2], ..., x[t-p]``.
"""

from __future__ import annotations

import numpy as np

from jointcast.exceptions import InvalidInputError
from jointcast.features.utils import check_array


def check_order(p: int, name: str = "order") -> int:
    """Validate an AR order / lag count (a positive integer)."""
    if isinstance(p, bool) or not isinstance(p, (int, np.integer)):
        raise InvalidInputError(f"{name} must be an integer, got {p!r}")
    if p < 1:
        raise InvalidInputError(f"{name} must be >= 1, got {p}")
    return int(p)


def lag_matrix(x: np.ndarray, p: int) -> np.ndarray:
    """Build design matrix with lags 1 through p.

    Args:
        x: 1D time series array, shape (n,).
        p: Number of lags to include. Must be >= 1.

    Returns:
        Design matrix of shape (n-p, p) where row i contains
        x[i+p-1], x[i+p-2], ..., x[i] (lags in reverse order).

    Raises:
        InvalidInputError: If p < 1, n < p+1, or x is not 1D.

    Example:
        >>> x = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        >>> lag_matrix(x, p=2)
        array([[2., 1.],
               [3., 2.],
               [4., 3.]])
    """
    x = check_array(x, ensure_2d=False)
    p = check_order(p, "p")
    n = len(x)
    if n < p + 1:
        raise InvalidInputError(f"Need at least p+1={p+1} observations, got {n}")

    X = np.zeros((n - p, p))
    for j in range(p):
        X[:, j] = x[p - 1 - j : n - 1 - j]
    return X


def arx_design(
    endog: np.ndarray, exog: np.ndarray, order: int
) -> tuple[np.ndarray, np.ndarray]:
    """Build the ARX regression problem.

    For every ``t`` in ``[order, n)`` the feature row is the contemporaneous
    exogenous row ``exog[t]`` followed by the target's own past values
    ``endog[t-1], ..., endog[t-order]``; the label is ``endog[t]``.

    Args:
        endog: Target series, shape (n,).
        exog: Exogenous matrix, shape (n, k).
        order: Number of autoregressive lags.

    Returns:
        Tuple ``(X, y)`` with shapes (n-order, k+order) and (n-order,).

    Example:
        >>> X, y = arx_design([10., 20., 30., 40., 50.], [[0.]] * 5, order=2)
        >>> X[0]
        array([ 0., 20., 10.])
        >>> float(y[0])
        30.0
    """
    endog = check_array(endog, ensure_2d=False)
    exog = check_array(exog)
    order = check_order(order)
    if exog.shape[0] != endog.shape[0]:
        raise InvalidInputError(
            f"endog has {endog.shape[0]} observations but exog has {exog.shape[0]}"
        )
    lags = lag_matrix(endog, order)
    X = np.hstack([exog[order:], lags])
    y = endog[order:].copy()
    return X, y


def var_design(data: np.ndarray, lags: int) -> tuple[np.ndarray, np.ndarray]:
    """Build the VAR regression problem.

    Row for time ``t`` is ``[1, data[t-1], data[t-2], ..., data[t-lags]]``
    (each ``data[t-j]`` contributing all m variables); the target row is
    ``data[t]``.

    Returns:
        Tuple ``(X, Y)`` with shapes (n-lags, 1 + lags*m) and (n-lags, m).
    """
    data = check_array(data)
    lags = check_order(lags, "lags")
    n, m = data.shape
    if n < lags + 1:
        raise InvalidInputError(f"Need at least lags+1={lags+1} observations, got {n}")

    X = np.ones((n - lags, 1 + lags * m))
    for lag in range(1, lags + 1):
        start = 1 + (lag - 1) * m
        X[:, start : start + m] = data[lags - lag : n - lag]
    Y = data[lags:].copy()
    return X, Y


def acf(x: np.ndarray, nlags: int) -> np.ndarray:
    """Sample autocorrelation ρ(0..nlags), each γ(k) averaged over its n-k pairs.

    Returns zeros when the series has (near-)zero variance.
    """
    x = check_array(x, ensure_2d=False)
    if nlags < 0:
        raise InvalidInputError(f"nlags must be >= 0, got {nlags}")
    n = len(x)
    centered = x - x.mean()
    gamma = np.array(
        [np.mean(centered[k:] * centered[: n - k]) if k < n else 0.0 for k in range(nlags + 1)]
    )
    if abs(gamma[0]) < 1e-12:
        return np.zeros(nlags + 1)
    return gamma / gamma[0]
