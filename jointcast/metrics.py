"""Forecast accuracy metrics.

All functions take ``(y_true, y_pred)`` as equal-length 1D sequences and
return a float. They are pure: no state, no logging.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from jointcast.exceptions import DimensionMismatchError, InvalidInputError, LengthMismatchError
from jointcast.features.utils import check_array


def _pair(y_true, y_pred) -> tuple[np.ndarray, np.ndarray]:
    y_true = np.asarray(y_true, dtype=np.float64)
    y_pred = np.asarray(y_pred, dtype=np.float64)
    if y_true.ndim != 1 or y_pred.ndim != 1:
        raise InvalidInputError(
            f"Expected 1D sequences, got shapes {y_true.shape} and {y_pred.shape}"
        )
    if len(y_true) != len(y_pred):
        raise LengthMismatchError(
            f"y_true has {len(y_true)} values but y_pred has {len(y_pred)}"
        )
    if len(y_true) == 0:
        raise InvalidInputError("Cannot score empty sequences")
    return y_true, y_pred


def mse(y_true, y_pred) -> float:
    """Mean Squared Error."""
    y_true, y_pred = _pair(y_true, y_pred)
    return float(np.mean((y_true - y_pred) ** 2))


def mae(y_true, y_pred) -> float:
    """Mean Absolute Error."""
    y_true, y_pred = _pair(y_true, y_pred)
    return float(np.mean(np.abs(y_true - y_pred)))


def theil_u(y_true, y_pred) -> float:
    """Theil's U statistic.

    ``U = sqrt(MSE) / (sqrt(mean(y_pred²)) + sqrt(mean(y_true²)))``, bounded
    in [0, 1]: 0 is a perfect forecast. Returns 0.0 when both series are
    identically zero.
    """
    y_true, y_pred = _pair(y_true, y_pred)
    denom = np.sqrt(np.mean(y_pred**2)) + np.sqrt(np.mean(y_true**2))
    if denom == 0.0:
        return 0.0
    return float(np.sqrt(np.mean((y_true - y_pred) ** 2)) / denom)


def correlation(y_true, y_pred) -> float:
    """Pearson correlation; 0.0 if either series has zero variance."""
    y_true, y_pred = _pair(y_true, y_pred)
    dt = y_true - y_true.mean()
    dp = y_pred - y_pred.mean()
    denom = np.sqrt(dt @ dt) * np.sqrt(dp @ dp)
    if denom == 0.0:
        return 0.0
    return float((dt @ dp) / denom)


def evaluate(y_true, y_pred) -> dict[str, float]:
    """All metrics for one forecast: ``mse``, ``mae``, ``theil_u``, ``correlation``."""
    return {
        "mse": mse(y_true, y_pred),
        "mae": mae(y_true, y_pred),
        "theil_u": theil_u(y_true, y_pred),
        "correlation": correlation(y_true, y_pred),
    }


def evaluate_columns(
    actual: np.ndarray, predicted: np.ndarray, names: Sequence[str]
) -> dict[str, dict[str, float]]:
    """Per-channel ``mse`` and ``correlation`` for matching (n, m) matrices."""
    actual = check_array(actual)
    predicted = check_array(predicted)
    if actual.shape != predicted.shape:
        raise LengthMismatchError(
            f"actual has shape {actual.shape} but predicted has {predicted.shape}"
        )
    if len(names) != actual.shape[1]:
        raise DimensionMismatchError(
            f"Got {len(names)} names for {actual.shape[1]} columns"
        )
    return {
        name: {
            "mse": mse(actual[:, j], predicted[:, j]),
            "correlation": correlation(actual[:, j], predicted[:, j]),
        }
        for j, name in enumerate(names)
    }
