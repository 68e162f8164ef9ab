"""Least-squares estimation routines shared by the ARX and VAR models.

This module provides:
- A ridge-stabilized ordinary least squares solve returning both the
  coefficients and the (regularized) inverse Gram matrix
- The AR lag-sum stability correction applied after an ARX fit
- Coefficient standard errors, t-statistics and approximate p-values

References:
    - Hamilton (1994): Time Series Analysis, ch. 8
    - Lütkepohl (2005): New Introduction to Multiple Time Series Analysis
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from scipy import stats

from jointcast.exceptions import InvalidInputError, SingularMatrixError
from jointcast.features.utils import check_array
from jointcast.logging import DiagnosticEvent, EventListener, emit

# Replacement for a zero standard error, so t = coef / se stays finite.
MIN_STD_ERROR = 1e-10

# p-values are reported inside this band.
PVALUE_FLOOR = 0.001
PVALUE_CEIL = 0.999

# Degrees of freedom above which the normal approximation is used.
NORMAL_APPROX_DF = 30

# (|t| threshold, p-value) pairs for small samples, checked top to bottom.
SMALL_SAMPLE_PVALUES: Tuple[Tuple[float, float], ...] = (
    (4.0, 0.001),
    (3.0, 0.01),
    (2.5, 0.02),
    (2.0, 0.05),
    (1.5, 0.1),
)
SMALL_SAMPLE_DEFAULT_PVALUE = 0.2

# Eigenvalues of the regularized Gram matrix below this fraction of the
# largest one are treated as zero.
PINV_RCOND = 1e-12


@dataclass(frozen=True)
class OLSSolution:
    """Result of a least-squares solve.

    Attributes:
        beta: Coefficients, shape (k,) for a single target or (k, m) for m
            targets sharing one design matrix.
        xtx_inv: Inverse of the regularized Gram matrix ``X'X + ridge*I``,
            shape (k, k).
        ridge: Regularization constant that was added to the diagonal.
    """

    beta: np.ndarray
    xtx_inv: np.ndarray
    ridge: float


def ols(
    X: np.ndarray,
    y: np.ndarray,
    ridge: float = 1e-6,
    listener: Optional[EventListener] = None,
) -> OLSSolution:
    """Solve ``β = (X'X + ridge·I)⁻¹ X'y``.

    The ridge term guards against the near-singular Gram matrices that
    constant or collinear joint channels produce. With ``ridge > 0`` the
    inverse is a pseudo-inverse, so a ridge that is negligible next to the
    data scale still yields finite coefficients. With ``ridge=0`` the solve is
    plain OLS and a singular Gram matrix raises.

    Args:
        X: Design matrix, shape (n, k).
        y: Targets, shape (n,) or (n, m).
        ridge: Non-negative Tikhonov constant.
        listener: Receives a ``regularization`` event when ``ridge > 0``.

    Returns:
        OLSSolution with coefficients and the inverse Gram matrix.

    Raises:
        InvalidInputError: If shapes disagree or ridge is negative.
        SingularMatrixError: If the (regularized) Gram matrix cannot be
            inverted to finite values.

    Example:
        >>> X = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        >>> sol = ols(X, np.array([1.0, 2.0, 3.0]), ridge=0.0)
        >>> np.round(sol.beta, 6)
        array([1., 2.])
    """
    X = check_array(X)
    y = np.asarray(y, dtype=np.float64)
    if y.shape[0] != X.shape[0]:
        raise InvalidInputError(f"X has {X.shape[0]} rows but y has {y.shape[0]}")
    if ridge < 0:
        raise InvalidInputError(f"ridge must be >= 0, got {ridge}")

    k = X.shape[1]
    XtX = X.T @ X
    Xty = X.T @ y

    if ridge > 0:
        XtX = XtX + ridge * np.eye(k)
        emit(
            listener,
            DiagnosticEvent(
                kind="regularization",
                message=f"added {ridge:g}*I to the {k}x{k} Gram matrix",
                level=logging.DEBUG,
                data={"ridge": ridge, "n_features": k},
            ),
        )

    if ridge == 0 and np.linalg.cond(XtX) >= 1.0 / np.finfo(np.float64).eps:
        raise SingularMatrixError(
            "Gram matrix is singular (ridge=0); "
            "drop collinear columns or use a positive ridge term"
        )
    try:
        if ridge > 0:
            # On raw-unit data ridge can fall below the rounding error of the
            # Gram entries; pinv then drops the collinear direction.
            xtx_inv = np.linalg.pinv(XtX, PINV_RCOND, hermitian=True)
        else:
            xtx_inv = np.linalg.inv(XtX)
    except np.linalg.LinAlgError as exc:
        raise SingularMatrixError(f"Gram matrix could not be inverted: {exc}") from exc

    beta = xtx_inv @ Xty
    if not (np.all(np.isfinite(xtx_inv)) and np.all(np.isfinite(beta))):
        raise SingularMatrixError("Least-squares solution is not finite")

    return OLSSolution(beta=beta, xtx_inv=xtx_inv, ridge=float(ridge))


def stabilize_ar(
    coefficients: np.ndarray,
    n_exog: int,
    threshold: float = 0.999,
    target: float = 0.995,
) -> Tuple[np.ndarray, float]:
    """Pull the AR lag-coefficient sum back under ``threshold``.

    If ``|Σ φ_i| > threshold`` every AR coefficient is multiplied by
    ``target / |Σ φ_i|``. This is a heuristic guard against explosive
    iterated forecasts near a unit root, not a stability test: it ignores
    the roots of the lag polynomial and only looks at the sum.

    Args:
        coefficients: ARX coefficients, exogenous first, then lag-1..lag-p.
        n_exog: Number of leading exogenous coefficients (left untouched).
        threshold: Trigger level for the absolute lag sum.
        target: Absolute lag sum after rescaling.

    Returns:
        Tuple of (coefficients, factor). ``factor`` is 1.0 when no
        correction was needed; the input array is never modified.
    """
    coefficients = np.asarray(coefficients, dtype=np.float64).copy()
    ar_sum = float(np.sum(coefficients[n_exog:]))
    if abs(ar_sum) <= threshold:
        return coefficients, 1.0
    factor = target / abs(ar_sum)
    coefficients[n_exog:] *= factor
    return coefficients, factor


def coefficient_pvalues(t_stats: np.ndarray, df: int) -> np.ndarray:
    """Approximate two-sided p-values for coefficient t-statistics.

    For ``df > 30`` the normal approximation ``2·(1 - Φ(|t|))`` is used.
    Otherwise the p-value comes from a coarse |t| lookup table
    (4 → 0.001, 3 → 0.01, 2.5 → 0.02, 2 → 0.05, 1.5 → 0.1, else 0.2).
    This is deliberately not an exact Student-t CDF, so small-sample
    p-values will differ from statistical packages.

    Results are clamped to [0.001, 0.999]; non-finite t gives 0.999.
    """
    t_abs = np.abs(np.asarray(t_stats, dtype=np.float64))
    finite = np.isfinite(t_abs)
    safe = np.where(finite, t_abs, 0.0)

    if df > NORMAL_APPROX_DF:
        pvalues = 2.0 * stats.norm.sf(safe)
    else:
        pvalues = np.full(safe.shape, SMALL_SAMPLE_DEFAULT_PVALUE)
        # Walk from the smallest threshold up so larger |t| overwrite.
        for threshold, pvalue in reversed(SMALL_SAMPLE_PVALUES):
            pvalues = np.where(safe > threshold, pvalue, pvalues)

    pvalues = np.clip(pvalues, PVALUE_FLOOR, PVALUE_CEIL)
    return np.where(finite, pvalues, PVALUE_CEIL)


def coefficient_inference(
    beta: np.ndarray,
    xtx_inv: np.ndarray,
    sigma2: float,
    df: int,
    listener: Optional[EventListener] = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Standard errors, t-statistics and p-values for one equation.

    ``se = sqrt(|diag(σ² (X'X)⁻¹)|)``; a zero standard error is replaced
    by 1e-10 and a non-finite t-statistic by 0, each reported through a
    ``degenerate_statistic`` event instead of aborting the fit.

    Returns:
        Tuple of (std_errors, t_stats, p_values), each shape (k,).
    """
    variances = sigma2 * np.diag(xtx_inv)
    std_errors = np.sqrt(np.abs(variances))

    zero_se = std_errors == 0.0
    if np.any(zero_se):
        std_errors = np.where(zero_se, MIN_STD_ERROR, std_errors)
        emit(
            listener,
            DiagnosticEvent(
                kind="degenerate_statistic",
                message=f"{int(zero_se.sum())} zero standard error(s) clamped to {MIN_STD_ERROR:g}",
                data={"indices": np.flatnonzero(zero_se).tolist()},
            ),
        )

    with np.errstate(divide="ignore", invalid="ignore"):
        t_stats = np.asarray(beta, dtype=np.float64) / std_errors
    bad_t = ~np.isfinite(t_stats)
    if np.any(bad_t):
        t_stats = np.where(bad_t, 0.0, t_stats)
        emit(
            listener,
            DiagnosticEvent(
                kind="degenerate_statistic",
                message=f"{int(bad_t.sum())} non-finite t-statistic(s) set to 0",
                data={"indices": np.flatnonzero(bad_t).tolist()},
            ),
        )

    return std_errors, t_stats, coefficient_pvalues(t_stats, df)
