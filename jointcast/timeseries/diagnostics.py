"""Fit statistics and residual diagnostics.

This module provides the information criteria and goodness-of-fit measures
reported in model summaries, and a Ljung-Box test for leftover residual
autocorrelation.

The information criteria follow the simplified form used throughout this
package, ``AIC = 2k - 2·ln(SSE/n)`` and ``BIC = k·ln(n) - 2·ln(SSE/n)``.
They rank models fitted to the same data but are not comparable to the
likelihood-based values of statistical packages.

References:
    - Ljung & Box (1978): "On a measure of lack of fit in time series models"
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from scipy import stats

from jointcast.exceptions import InvalidInputError
from jointcast.features.utils import check_array

from .utils import acf

# Floor applied to SSE/n before taking the log, so a perfect fit stays finite.
_TINY = np.finfo(np.float64).tiny


def _log_mean_sse(sse: float, nobs: int) -> float:
    if nobs < 1:
        raise InvalidInputError(f"nobs must be >= 1, got {nobs}")
    return float(np.log(max(sse / nobs, _TINY)))


def aic(sse: float, nobs: int, k: int) -> float:
    """Akaike Information Criterion, ``2k - 2·ln(SSE/n)``.

    Args:
        sse: Residual sum of squares.
        nobs: Number of observations used in the fit.
        k: Number of estimated coefficients.
    """
    return 2.0 * k - 2.0 * _log_mean_sse(sse, nobs)


def bic(sse: float, nobs: int, k: int) -> float:
    """Bayesian Information Criterion, ``k·ln(n) - 2·ln(SSE/n)``."""
    return k * float(np.log(nobs)) - 2.0 * _log_mean_sse(sse, nobs)


def r_squared(y: np.ndarray, residuals: np.ndarray) -> float:
    """Coefficient of determination ``1 - SSE/SST``.

    Returns 0.0 when the target has zero total variation.
    """
    y = np.asarray(y, dtype=np.float64)
    residuals = np.asarray(residuals, dtype=np.float64)
    sst = float(np.sum((y - y.mean()) ** 2))
    if sst == 0.0:
        return 0.0
    return 1.0 - float(residuals @ residuals) / sst


def ljung_box(
    residuals: np.ndarray, lags: Optional[int] = None
) -> tuple[float, float]:
    """Ljung-Box test for residual autocorrelation.

    Tests the null hypothesis that residuals are independently distributed.
    The statistic ``Q = n(n+2) Σ ρ(k)²/(n-k)`` is compared to a chi-square
    distribution with ``lags`` degrees of freedom.

    Args:
        residuals: 1D array of residuals, shape (n,).
        lags: Number of lags to test. If None, uses min(10, n // 5).

    Returns:
        Tuple of (statistic, pvalue).

    Raises:
        InvalidInputError: If residuals is not 1D, has fewer than 2 values, or
            lags is outside [1, n).

    Example:
        >>> rng = np.random.default_rng(0)
        >>> stat, pval = ljung_box(rng.standard_normal(200), lags=10)
        >>> pval > 0.05
        True
    """
    residuals = check_array(residuals, ensure_2d=False)
    n = len(residuals)
    if n < 2:
        raise InvalidInputError(f"Need at least 2 residuals, got {n}")

    if lags is None:
        lags = max(1, min(10, n // 5))
    if lags < 1:
        raise InvalidInputError(f"lags must be >= 1, got {lags}")
    if lags >= n:
        raise InvalidInputError(f"lags must be < n={n}, got {lags}")

    rho = acf(residuals, nlags=lags)[1:]
    q = float(n * (n + 2) * np.sum(rho**2 / (n - np.arange(1, lags + 1))))
    return q, float(stats.chi2.sf(q, df=lags))
