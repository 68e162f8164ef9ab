"""Single-target autoregressive model with exogenous regressors (ARX).

Models one joint-angle channel as:
    y_t = β_1 x_{1,t} + ... + β_k x_{k,t} + φ_1 y_{t-1} + ... + φ_p y_{t-p} + ε_t

There is no intercept: inputs are expected to be normalized. The estimator is
closed-form ridge-stabilized least squares followed by the lag-sum stability
correction (see :func:`jointcast.timeseries.estimation.stabilize_ar`).

Example:
    >>> rng = np.random.default_rng(0)
    >>> exog = rng.standard_normal((300, 2))
    >>> y = np.zeros(300)
    >>> for t in range(2, 300):
    ...     y[t] = 0.5 * y[t-1] - 0.2 * y[t-2] + exog[t] @ [0.3, -0.1] + 0.05 * rng.standard_normal()
    >>> res = ARX(order=2).fit(y, exog)
    >>> res.labels
    ('x0', 'x1', 'y_T-1', 'y_T-2')
    >>> float(res.model.predict_next([y[-1], y[-2]], exog[-1]))  # doctest: +SKIP
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np

from jointcast.exceptions import (
    DimensionMismatchError,
    InvalidInputError,
    NotFittedError,
)
from jointcast.logging import DiagnosticEvent, EventListener, emit, get_logger

from . import diagnostics
from .estimation import coefficient_inference, ols, stabilize_ar
from .utils import arx_design, check_order

logger = get_logger(__name__)


def arx_labels(
    order: int, exog_names: Sequence[str], endog_name: str = "y"
) -> tuple[str, ...]:
    """Coefficient labels: exogenous names, then ``{target}_T-1`` ... ``{target}_T-p``."""
    return tuple(exog_names) + tuple(f"{endog_name}_T-{lag}" for lag in range(1, order + 1))


def significance_stars(pvalue: float) -> str:
    if pvalue <= 0.001:
        return "***"
    if pvalue < 0.01:
        return "**"
    if pvalue < 0.05:
        return "*"
    return ""


def _frozen_array(values: Any) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class TrainedARX:
    """Immutable coefficient handle produced by :meth:`ARX.fit`.

    This is all a forecaster needs: coefficients ordered exogenous first,
    then lag-1 ... lag-p, and their labels.

    Attributes:
        order: Number of autoregressive lags p.
        n_exog: Number of exogenous regressors k.
        coefficients: Read-only array of shape (k + p,).
        labels: One label per coefficient.
    """

    order: int
    n_exog: int
    coefficients: np.ndarray
    labels: tuple[str, ...]

    def __post_init__(self) -> None:
        check_order(self.order)
        if self.n_exog < 0:
            raise InvalidInputError(f"n_exog must be >= 0, got {self.n_exog}")
        object.__setattr__(self, "coefficients", _frozen_array(self.coefficients))
        object.__setattr__(self, "labels", tuple(self.labels))
        expected = self.n_exog + self.order
        if self.coefficients.shape != (expected,):
            raise DimensionMismatchError(
                f"Expected {expected} coefficients for n_exog={self.n_exog}, "
                f"order={self.order}; got shape {self.coefficients.shape}"
            )
        if len(self.labels) != expected:
            raise DimensionMismatchError(
                f"Expected {expected} labels, got {len(self.labels)}"
            )

    @property
    def exog_coefficients(self) -> np.ndarray:
        return self.coefficients[: self.n_exog]

    @property
    def ar_coefficients(self) -> np.ndarray:
        return self.coefficients[self.n_exog :]

    def predict_next(self, lagged_endog: Sequence[float], exog_now: Sequence[float]) -> float:
        """One-step prediction ``dot(exog_now ++ lagged_endog, coefficients)``.

        Args:
            lagged_endog: ``[y_{t-1}, ..., y_{t-p}]``, lag-1 first.
            exog_now: Exogenous values at time t, same order as in training.

        Raises:
            DimensionMismatchError: If either vector has the wrong length.
        """
        lagged_endog = np.asarray(lagged_endog, dtype=np.float64)
        exog_now = np.asarray(exog_now, dtype=np.float64)
        if lagged_endog.shape != (self.order,):
            raise DimensionMismatchError(
                f"Expected {self.order} lagged values, got shape {lagged_endog.shape}"
            )
        if exog_now.shape != (self.n_exog,):
            raise DimensionMismatchError(
                f"Expected {self.n_exog} exogenous values, got shape {exog_now.shape}"
            )
        return float(exog_now @ self.exog_coefficients + lagged_endog @ self.ar_coefficients)


@dataclass(frozen=True, eq=False)
class ARXResults:
    """Fitted ARX model with coefficient inference and fit statistics.

    ``mse`` is the residual variance ``SSE / (n - k)``; ``stability_factor``
    is 1.0 unless the lag coefficients were rescaled.
    """

    coefficients: np.ndarray
    std_errors: np.ndarray
    t_stats: np.ndarray
    p_values: np.ndarray
    residuals: np.ndarray
    fitted_values: np.ndarray
    r_squared: float
    mse: float
    sse: float
    aic: float
    bic: float
    nobs: int
    df_resid: int
    order: int
    n_exog: int
    labels: tuple[str, ...]
    stability_factor: float = 1.0

    @property
    def model(self) -> TrainedARX:
        return TrainedARX(
            order=self.order,
            n_exog=self.n_exog,
            coefficients=self.coefficients,
            labels=self.labels,
        )

    @property
    def stabilized(self) -> bool:
        return self.stability_factor != 1.0

    def ljung_box(self, lags: Optional[int] = None) -> tuple[float, float]:
        """Ljung-Box whiteness test on the residuals."""
        return diagnostics.ljung_box(self.residuals, lags=lags)

    def summary(self) -> dict[str, Any]:
        """Flat record of coefficient inference and fit statistics."""
        return {
            "order": self.order,
            "nobs": self.nobs,
            "df_resid": self.df_resid,
            "labels": list(self.labels),
            "coefficients": self.coefficients.tolist(),
            "std_errors": self.std_errors.tolist(),
            "t_stats": self.t_stats.tolist(),
            "p_values": self.p_values.tolist(),
            "significance": [significance_stars(p) for p in self.p_values],
            "r_squared": self.r_squared,
            "mse": self.mse,
            "sse": self.sse,
            "aic": self.aic,
            "bic": self.bic,
            "stability_factor": self.stability_factor,
        }


class ARX:
    """ARX(p) estimator for one target channel.

    Args:
        order: AR order p. Must be >= 1.
        ridge: Tikhonov constant added to X'X before inversion.
        listener: Receives diagnostic events; defaults to the
            ``jointcast.events`` logger.

    Example:
        >>> model = ARX(order=2)
        >>> res = model.fit(y, exog, endog_name="Hips_Xrotation",
        ...                 exog_names=["Spine_Xrotation"])  # doctest: +SKIP
        >>> res.labels  # doctest: +SKIP
        ('Spine_Xrotation', 'Hips_Xrotation_T-1', 'Hips_Xrotation_T-2')
    """

    def __init__(
        self,
        order: int = 2,
        ridge: float = 1e-6,
        listener: Optional[EventListener] = None,
    ) -> None:
        self.order = check_order(order)
        if ridge < 0:
            raise InvalidInputError(f"ridge must be >= 0, got {ridge}")
        self.ridge = float(ridge)
        self.listener = listener
        self.results: Optional[ARXResults] = None

    def fit(
        self,
        endog: np.ndarray,
        exog: np.ndarray,
        endog_name: Optional[str] = None,
        exog_names: Optional[Sequence[str]] = None,
    ) -> ARXResults:
        """Fit the model to a target series and its exogenous matrix.

        Args:
            endog: Target series, shape (n,).
            exog: Exogenous matrix, shape (n, k), row t aligned with endog[t].
            endog_name: Target name used in lag labels (default ``"y"``).
            exog_names: One name per exogenous column (default ``x0, x1, ...``).

        Returns:
            ARXResults; also stored on ``self.results``.

        Raises:
            InvalidInputError: Malformed input or fewer than one residual
                degree of freedom.
            SingularMatrixError: The regularized system cannot be solved.
        """
        X, y = arx_design(endog, exog, self.order)
        nobs, k = X.shape
        n_exog = k - self.order
        df_resid = nobs - k
        if df_resid < 1:
            raise InvalidInputError(
                f"Need more observations than coefficients: {nobs} usable rows "
                f"for {k} coefficients (order={self.order}, n_exog={n_exog})"
            )

        if exog_names is None:
            exog_names = [f"x{i}" for i in range(n_exog)]
        elif len(exog_names) != n_exog:
            raise DimensionMismatchError(
                f"Got {len(exog_names)} exogenous names for {n_exog} columns"
            )
        labels = arx_labels(self.order, exog_names, endog_name or "y")

        logger.debug("Fitting ARX(%d) with %d exogenous regressors on %d rows", self.order, n_exog, nobs)
        solution = ols(X, y, ridge=self.ridge, listener=self.listener)

        coefficients, factor = stabilize_ar(solution.beta, n_exog)
        if factor != 1.0:
            raw_sum = float(np.sum(solution.beta[n_exog:]))
            emit(
                self.listener,
                DiagnosticEvent(
                    kind="stability_correction",
                    message=(
                        f"AR coefficient sum {raw_sum:.4f} exceeds the stability threshold; "
                        f"lag coefficients scaled by {factor:.4f}"
                    ),
                    level=logging.WARNING,
                    data={"ar_sum": raw_sum, "factor": factor},
                ),
            )

        fitted = X @ coefficients
        residuals = y - fitted
        sse = float(residuals @ residuals)
        sigma2 = sse / df_resid
        std_errors, t_stats, p_values = coefficient_inference(
            coefficients, solution.xtx_inv, sigma2, df_resid, listener=self.listener
        )

        self.results = ARXResults(
            coefficients=_frozen_array(coefficients),
            std_errors=_frozen_array(std_errors),
            t_stats=_frozen_array(t_stats),
            p_values=_frozen_array(p_values),
            residuals=_frozen_array(residuals),
            fitted_values=_frozen_array(fitted),
            r_squared=diagnostics.r_squared(y, residuals),
            mse=sigma2,
            sse=sse,
            aic=diagnostics.aic(sse, nobs, k),
            bic=diagnostics.bic(sse, nobs, k),
            nobs=nobs,
            df_resid=df_resid,
            order=self.order,
            n_exog=n_exog,
            labels=labels,
            stability_factor=factor,
        )
        return self.results

    def predict_next(self, lagged_endog: Sequence[float], exog_now: Sequence[float]) -> float:
        """One-step prediction from the fitted coefficients.

        Raises:
            NotFittedError: If called before :meth:`fit`.
        """
        if self.results is None:
            raise NotFittedError("ARX must be fitted before prediction")
        return self.results.model.predict_next(lagged_endog, exog_now)
