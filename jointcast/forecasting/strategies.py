"""Static and dynamic forecasting over a normalized test matrix.

Both strategies take a trained ARX handle, the test matrix in normalized
units, the scaler fitted on the training data and the column indices of the
target and exogenous channels. Both return predictions and actuals for the
target in original units.

Static (one-step-ahead):
    For every t in [order, n), predict y_t from the true lags
    y_{t-1}..y_{t-p} and the true exogenous row at t. No prediction feeds
    into another, so this measures pure one-step fit.

Dynamic (multi-step-ahead):
    Seed the lag history with the first ``order`` true values, then predict
    every later y_t from previously *predicted* lags while the exogenous
    inputs stay ground truth. Errors compound through the lag window.
    The combined sequence (seed values followed by predictions) has its first
    ``DYNAMIC_DROP`` entries removed, and so do the actuals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence, Union

import numpy as np

from jointcast.exceptions import DimensionMismatchError, InvalidInputError, NotFittedError
from jointcast.features.base import Transformer, check_is_fitted
from jointcast.features.utils import check_array
from jointcast.logging import get_logger
from jointcast.timeseries.arx import ARX, ARXResults, TrainedARX

from .window import LagWindow

logger = get_logger(__name__)

# Leading entries removed from both dynamic output sequences.
DYNAMIC_DROP = 2

STRATEGIES = ("static", "dynamic")

ModelLike = Union[ARX, ARXResults, TrainedARX]


@dataclass(frozen=True, eq=False)
class ForecastResult:
    """Predicted and actual target values in original units.

    Attributes:
        predicted: Forecasts, shape (n_out,).
        actual: Observed values aligned with ``predicted``, shape (n_out,).
        strategy: ``"static"`` or ``"dynamic"``.
        start_index: Row of the test matrix that ``predicted[0]`` refers to.
    """

    predicted: np.ndarray
    actual: np.ndarray
    strategy: str
    start_index: int

    def __len__(self) -> int:
        return len(self.predicted)

    def to_dict(self) -> dict[str, Any]:
        return {"predicted": self.predicted.tolist(), "actual": self.actual.tolist()}


def _trained(model: ModelLike) -> TrainedARX:
    if isinstance(model, TrainedARX):
        return model
    if isinstance(model, ARXResults):
        return model.model
    if isinstance(model, ARX):
        if model.results is None:
            raise NotFittedError("ARX must be fitted before forecasting")
        return model.results.model
    raise InvalidInputError(f"Cannot forecast with {type(model).__name__}")


def _prepare(
    model: ModelLike,
    data: np.ndarray,
    scaler: Transformer,
    target_index: int,
    exog_indices: Sequence[int],
) -> tuple[TrainedARX, np.ndarray, np.ndarray]:
    trained = _trained(model)
    data = check_array(data)
    check_is_fitted(scaler, ("n_features_in_",))
    if data.shape[1] != scaler.n_features_in_:
        raise DimensionMismatchError(
            f"Data has {data.shape[1]} columns but the scaler was fitted on "
            f"{scaler.n_features_in_}"
        )
    exog_indices = list(exog_indices)
    if len(exog_indices) != trained.n_exog:
        raise DimensionMismatchError(
            f"Model expects {trained.n_exog} exogenous channels, got {len(exog_indices)} indices"
        )
    n_features = data.shape[1]
    for idx in [target_index, *exog_indices]:
        if not 0 <= idx < n_features:
            raise DimensionMismatchError(f"Column index {idx} out of range for {n_features} columns")
    return trained, data[:, target_index], data[:, exog_indices]


def _result(
    predicted: np.ndarray,
    actual: np.ndarray,
    scaler: Transformer,
    target_index: int,
    strategy: str,
    start_index: int,
) -> ForecastResult:
    return ForecastResult(
        predicted=scaler.inverse_transform_column(predicted, target_index),
        actual=scaler.inverse_transform_column(actual, target_index),
        strategy=strategy,
        start_index=start_index,
    )


def static_forecast(
    model: ModelLike,
    data: np.ndarray,
    scaler: Transformer,
    target_index: int,
    exog_indices: Sequence[int],
) -> ForecastResult:
    """One-step-ahead predictions for every t in [order, n).

    Args:
        model: Fitted ARX, its results, or a :class:`TrainedARX`.
        data: Normalized test matrix, shape (n, n_features).
        scaler: Scaler fitted on the training matrix; used only to
            denormalize the target column.
        target_index: Column of the target channel.
        exog_indices: Columns of the exogenous channels, in coefficient order.

    Returns:
        ForecastResult of length ``max(n - order, 0)``.
    """
    trained, endog, exog = _prepare(model, data, scaler, target_index, exog_indices)
    p = trained.order
    n = len(endog)
    if n <= p:
        return _result(np.empty(0), np.empty(0), scaler, target_index, "static", p)

    predicted = np.empty(n - p)
    for t in range(p, n):
        predicted[t - p] = trained.predict_next(endog[t - p : t][::-1], exog[t])

    logger.debug("Static forecast: %d predictions from %d frames", len(predicted), n)
    return _result(predicted, endog[p:], scaler, target_index, "static", p)


def dynamic_forecast(
    model: ModelLike,
    data: np.ndarray,
    scaler: Transformer,
    target_index: int,
    exog_indices: Sequence[int],
) -> ForecastResult:
    """Multi-step rollout that feeds each prediction back as a lag input.

    Arguments are as for :func:`static_forecast`.

    Returns:
        ForecastResult of length ``n - DYNAMIC_DROP`` (empty when
        ``n <= order``). For ``order > DYNAMIC_DROP`` the leading
        ``order - DYNAMIC_DROP`` entries of ``predicted`` are seed values.
    """
    trained, endog, exog = _prepare(model, data, scaler, target_index, exog_indices)
    p = trained.order
    n = len(endog)
    if n <= p:
        return _result(np.empty(0), np.empty(0), scaler, target_index, "dynamic", DYNAMIC_DROP)

    rollout = endog.copy()
    window = LagWindow(p, endog[:p])
    for t in range(p, n):
        rollout[t] = trained.predict_next(window.lags(), exog[t])
        window.push(rollout[t])

    logger.debug("Dynamic forecast: %d predictions from %d frames", n - p, n)
    return _result(
        rollout[DYNAMIC_DROP:], endog[DYNAMIC_DROP:], scaler, target_index, "dynamic", DYNAMIC_DROP
    )


_DISPATCH: dict[str, Callable[..., ForecastResult]] = {
    "static": static_forecast,
    "dynamic": dynamic_forecast,
}


def forecast(
    strategy: str,
    model: ModelLike,
    data: np.ndarray,
    scaler: Transformer,
    target_index: int,
    exog_indices: Sequence[int],
) -> ForecastResult:
    """Run the named strategy (``"static"`` or ``"dynamic"``)."""
    try:
        runner = _DISPATCH[strategy]
    except KeyError:
        raise InvalidInputError(
            f"Unknown forecasting strategy {strategy!r}; expected one of {list(_DISPATCH)}"
        ) from None
    return runner(model, data, scaler, target_index, exog_indices)
