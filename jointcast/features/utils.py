"""Utility helpers for feature transformers."""

from __future__ import annotations

from typing import Any

import numpy as np

from jointcast.exceptions import DimensionMismatchError, InvalidInputError


def check_array(
    X: Any,
    *,
    ensure_2d: bool = True,
    dtype: type | None = np.float64,
    allow_empty: bool = False,
) -> np.ndarray:
    """Validate an observation matrix (or a 1D series with ``ensure_2d=False``).

    Rejects jagged rows, non-numeric and complex values, NaN/inf, and
    (unless ``allow_empty``) arrays with no rows.
    """
    try:
        array = np.asarray(X, dtype=dtype)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(
            "Array cannot be converted to a rectangular numeric array "
            "(rows of inconsistent length or non-numeric values)."
        ) from exc
    if np.iscomplexobj(array):
        raise InvalidInputError("Complex data is not supported.")
    if ensure_2d and array.ndim != 2:
        raise InvalidInputError(f"Expected 2D array, got shape {array.shape}.")
    if not ensure_2d and array.ndim != 1:
        raise InvalidInputError(f"Expected 1D array, got shape {array.shape}.")
    if not allow_empty and (array.shape[0] == 0 or array.size == 0):
        raise InvalidInputError("Array is empty.")
    if not np.all(np.isfinite(array)):
        raise InvalidInputError("Array contains NaN or infinite values.")
    return array


def ensure_same_shape(X: np.ndarray, expected_features: int) -> None:
    """Validate input feature dimensionality."""
    if X.shape[1] != expected_features:
        raise DimensionMismatchError(
            f"Expected {expected_features} features, got {X.shape[1]}."
        )
