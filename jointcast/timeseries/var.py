"""Vector autoregression (VAR) over a set of joint channels.

Every channel is regressed on an intercept and the lagged values of all
channels:
    x_t = c + A_1 x_{t-1} + ... + A_p x_{t-p} + ε_t

All m equations share one design matrix, so a single ridge-stabilized solve
yields the full ``(1 + p·m) × m`` coefficient matrix.

References:
    - Lütkepohl (2005): New Introduction to Multiple Time Series Analysis
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np

from jointcast.exceptions import DimensionMismatchError, InvalidInputError
from jointcast.features.utils import check_array
from jointcast.logging import DiagnosticEvent, EventListener, emit, get_logger

from .estimation import coefficient_inference, ols
from .utils import check_order, var_design

logger = get_logger(__name__)

BIAS_LABEL = "Bias"


def var_labels(variable_names: Sequence[str], lags: int) -> tuple[str, ...]:
    """Row labels of the coefficient matrix: ``Bias``, then ``{v}(t-j)`` per lag."""
    labels = [BIAS_LABEL]
    for lag in range(1, lags + 1):
        labels.extend(f"{name}(t-{lag})" for name in variable_names)
    return tuple(labels)


def jitter_constant_columns(
    data: np.ndarray,
    scale: float = 1e-3,
    rng: Optional[np.random.Generator] = None,
    listener: Optional[EventListener] = None,
) -> np.ndarray:
    """Add uniform noise in ``[-scale/2, scale/2)`` to constant columns.

    A channel that never moves makes the lagged design matrix rank-deficient.
    Perturbing it slightly keeps the solve well-posed; each affected column is
    reported through a ``constant_column_jitter`` event.

    Args:
        data: Observation matrix, shape (n, m). Not modified.
        scale: Width of the noise interval.
        rng: Random generator; a fresh unseeded one if None.
        listener: Event listener.

    Returns:
        A copy of ``data`` with constant columns perturbed.
    """
    data = check_array(data)
    if rng is None:
        rng = np.random.default_rng()
    result = data.copy()
    constant = np.flatnonzero(np.all(data == data[0], axis=0))
    for j in constant:
        result[:, j] += (rng.random(data.shape[0]) - 0.5) * scale
        emit(
            listener,
            DiagnosticEvent(
                kind="constant_column_jitter",
                message=f"column {j} is constant; added noise of width {scale:g}",
                level=logging.WARNING,
                data={"column": int(j), "scale": scale},
            ),
        )
    return result


def _readonly(values: Any) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class TrainedVAR:
    """Immutable coefficient handle of a fitted VAR.

    Attributes:
        lags: Lag count p.
        variable_names: One name per channel, in column order.
        params: Read-only coefficients, shape (1 + p·m, m); column j is the
            equation for channel j, rows follow ``coef_labels``.
        coef_labels: ``Bias``, then ``{v}(t-1)`` for every channel, and so on
            up to lag p.
    """

    lags: int
    variable_names: tuple[str, ...]
    params: np.ndarray
    coef_labels: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        check_order(self.lags, "lags")
        object.__setattr__(self, "variable_names", tuple(self.variable_names))
        object.__setattr__(self, "params", _readonly(self.params))
        if not self.coef_labels:
            object.__setattr__(self, "coef_labels", var_labels(self.variable_names, self.lags))
        else:
            object.__setattr__(self, "coef_labels", tuple(self.coef_labels))
        m = len(self.variable_names)
        expected = (1 + self.lags * m, m)
        if self.params.shape != expected:
            raise DimensionMismatchError(
                f"params must have shape {expected} for {m} variables and "
                f"lags={self.lags}, got {self.params.shape}"
            )
        if len(self.coef_labels) != expected[0]:
            raise DimensionMismatchError(
                f"Expected {expected[0]} coefficient labels, got {len(self.coef_labels)}"
            )

    @property
    def n_variables(self) -> int:
        return len(self.variable_names)

    def _check_width(self, data: np.ndarray) -> np.ndarray:
        data = check_array(data)
        if data.shape[1] != self.n_variables:
            raise DimensionMismatchError(
                f"Data has {data.shape[1]} columns, model has {self.n_variables} variables"
            )
        return data

    def predict(self, data: np.ndarray, steps: int = 1) -> np.ndarray:
        """Roll the model forward from the last ``lags`` rows of ``data``.

        Each prediction is pushed into a fixed-size window of the most recent
        ``lags`` rows, so step h uses predictions for every lag it cannot
        take from ``data``.

        Args:
            data: Recent observations, shape (n, m) with n >= lags.
            steps: Number of steps ahead.

        Returns:
            Predicted rows, shape (steps, m).
        """
        data = self._check_width(data)
        steps = check_order(steps, "steps")
        if data.shape[0] < self.lags:
            raise InvalidInputError(
                f"Need at least lags={self.lags} rows to predict, got {data.shape[0]}"
            )

        # window[0] is the most recent row
        window = data[-self.lags :][::-1].copy()
        predictions = np.empty((steps, self.n_variables))
        for h in range(steps):
            features = np.concatenate(([1.0], window.ravel()))
            predictions[h] = features @ self.params
            window = np.roll(window, 1, axis=0)
            window[0] = predictions[h]
        return predictions

    def one_step_predictions(self, data: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Static one-step predictions for every ``t >= lags`` of ``data``.

        Returns:
            Tuple ``(predicted, actual)``, both shape (n - lags, m).
        """
        data = self._check_width(data)
        X, Y = var_design(data, self.lags)
        return X @ self.params, Y

    def coef_table(self) -> dict[str, dict[str, float]]:
        """``{variable: {coef_label: coefficient}}``."""
        return {
            name: dict(zip(self.coef_labels, self.params[:, j].tolist()))
            for j, name in enumerate(self.variable_names)
        }


@dataclass(frozen=True, eq=False)
class VARResults:
    """Fitted VAR model with per-equation inference.

    Attributes:
        model: Coefficient handle used for prediction.
        std_errors: Shape (m, 1 + p·m); row j belongs to equation j.
        t_stats: Shape (m, 1 + p·m).
        pvalues: Shape (m, 1 + p·m).
        residuals: In-sample residuals, shape (n - p, m).
        fitted_values: In-sample fitted rows, shape (n - p, m).
        sigma: Residual covariance ``ResᵗRes / (n - p - k)``, shape (m, m).
        nobs: Number of rows used in the fit (n - p).
    """

    model: TrainedVAR
    std_errors: np.ndarray
    t_stats: np.ndarray
    pvalues: np.ndarray
    residuals: np.ndarray
    fitted_values: np.ndarray
    sigma: np.ndarray
    nobs: int

    @property
    def params(self) -> np.ndarray:
        return self.model.params

    @property
    def lags(self) -> int:
        return self.model.lags

    @property
    def variable_names(self) -> tuple[str, ...]:
        return self.model.variable_names

    @property
    def coef_labels(self) -> tuple[str, ...]:
        return self.model.coef_labels

    @property
    def n_variables(self) -> int:
        return self.model.n_variables

    def predict(self, data: np.ndarray, steps: int = 1) -> np.ndarray:
        return self.model.predict(data, steps)

    def one_step_predictions(self, data: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        return self.model.one_step_predictions(data)

    def coef_table(self) -> dict[str, dict[str, float]]:
        return self.model.coef_table()

    def pvalue_table(self) -> dict[str, dict[str, float]]:
        """``{variable: {coef_label: p-value}}``."""
        return {
            name: dict(zip(self.coef_labels, self.pvalues[j].tolist()))
            for j, name in enumerate(self.variable_names)
        }

    def summary(self) -> dict[str, Any]:
        return {
            "lags": self.lags,
            "n_variables": self.n_variables,
            "n_parameters": len(self.coef_labels),
            "nobs": self.nobs,
            "variable_names": list(self.variable_names),
            "coef_labels": list(self.coef_labels),
            "params": self.params.tolist(),
            "pvalues": self.pvalues.tolist(),
        }


class VAR:
    """VAR(p) estimator.

    Args:
        lags: Number of lags p. Must be >= 1.
        ridge: Tikhonov constant added to X'X.
        jitter: Width of the noise added to constant columns (0 disables).
        seed: Seed for the jitter generator.
        listener: Receives diagnostic events.

    Example:
        >>> rng = np.random.default_rng(1)
        >>> data = rng.standard_normal((200, 3)).cumsum(axis=0) * 0.1
        >>> res = VAR(lags=2).fit(data, ["a", "b", "c"])
        >>> res.params.shape
        (7, 3)
        >>> res.predict(data, steps=5).shape
        (5, 3)
    """

    def __init__(
        self,
        lags: int = 2,
        ridge: float = 1e-8,
        jitter: float = 1e-3,
        seed: Optional[int] = None,
        listener: Optional[EventListener] = None,
    ) -> None:
        self.lags = check_order(lags, "lags")
        if ridge < 0:
            raise InvalidInputError(f"ridge must be >= 0, got {ridge}")
        if jitter < 0:
            raise InvalidInputError(f"jitter must be >= 0, got {jitter}")
        self.ridge = float(ridge)
        self.jitter = float(jitter)
        self.seed = seed
        self.listener = listener
        self.results: Optional[VARResults] = None

    def fit(
        self, data: np.ndarray, variable_names: Optional[Sequence[str]] = None
    ) -> VARResults:
        """Fit all equations at once.

        Args:
            data: Observation matrix, shape (n, m).
            variable_names: One name per column (default ``Var_0, Var_1, ...``).

        Returns:
            VARResults; also stored on ``self.results``.

        Raises:
            InvalidInputError: Malformed data or too few rows for the
                ``1 + lags·m`` coefficients per equation.
            SingularMatrixError: The regularized system cannot be solved.
        """
        data = check_array(data)
        n, m = data.shape
        if variable_names is None:
            variable_names = [f"Var_{j}" for j in range(m)]
        elif len(variable_names) != m:
            raise DimensionMismatchError(
                f"Got {len(variable_names)} variable names for {m} columns"
            )
        variable_names = tuple(variable_names)

        k = 1 + self.lags * m
        nobs = n - self.lags
        df_resid = nobs - k
        if df_resid < 1:
            raise InvalidInputError(
                f"VAR({self.lags}) on {m} variables needs more than {k + self.lags} rows, got {n}"
            )

        if self.jitter > 0:
            data = jitter_constant_columns(
                data, self.jitter, np.random.default_rng(self.seed), self.listener
            )

        logger.debug("Fitting VAR(%d) on %d variables, %d rows", self.lags, m, n)
        X, Y = var_design(data, self.lags)
        solution = ols(X, Y, ridge=self.ridge, listener=self.listener)
        params = solution.beta

        fitted = X @ params
        residuals = Y - fitted
        sigma = residuals.T @ residuals / df_resid

        std_errors = np.empty((m, k))
        t_stats = np.empty((m, k))
        pvalues = np.empty((m, k))
        for j in range(m):
            std_errors[j], t_stats[j], pvalues[j] = coefficient_inference(
                params[:, j], solution.xtx_inv, sigma[j, j], df_resid, listener=self.listener
            )

        self.results = VARResults(
            model=TrainedVAR(lags=self.lags, variable_names=variable_names, params=params),
            std_errors=_readonly(std_errors),
            t_stats=_readonly(t_stats),
            pvalues=_readonly(pvalues),
            residuals=_readonly(residuals),
            fitted_values=_readonly(fitted),
            sigma=_readonly(sigma),
            nobs=nobs,
        )
        return self.results
