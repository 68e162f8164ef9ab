"""Base classes for feature transformers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from jointcast.exceptions import InvalidInputError, NotFittedError


class Transformer(ABC):
    """Minimal sklearn-style transformer interface."""

    @abstractmethod
    def fit(self, X: np.ndarray) -> "Transformer":
        """Fit transformer to data."""

    @abstractmethod
    def transform(self, X: np.ndarray) -> np.ndarray:
        """Apply the transformation to X."""

    @abstractmethod
    def inverse_transform(self, X: np.ndarray) -> np.ndarray:
        """Inverse transformation."""

    def fit_transform(self, X: np.ndarray) -> np.ndarray:
        """Fit and transform in a single call."""
        self.fit(X)
        return self.transform(X)

    def inverse_transform_column(self, values: Any, column: int) -> np.ndarray:
        """Denormalize a 1D sequence that belongs to a single fitted column.

        Args:
            values: Normalized values of one column, shape (n,).
            column: Index of that column in the fitted matrix.

        Returns:
            Values in original units, shape (n,).
        """
        check_is_fitted(self, ("n_features_in_",))
        if not 0 <= column < self.n_features_in_:
            raise InvalidInputError(
                f"column must be in [0, {self.n_features_in_}), got {column}."
            )
        values = np.asarray(values, dtype=np.float64)
        if values.ndim != 1:
            raise InvalidInputError(f"Expected 1D array, got shape {values.shape}.")
        return self._inverse_column(values, column)

    def _inverse_column(self, values: np.ndarray, column: int) -> np.ndarray:
        raise NotImplementedError(
            f"{self.__class__.__name__} does not support inverse_transform_column."
        )


def check_is_fitted(instance: Any, attributes: tuple[str, ...]) -> None:
    """Ensure transformer has been fitted."""
    missing = [attr for attr in attributes if not hasattr(instance, attr)]
    if missing:
        raise NotFittedError(
            f"{instance.__class__.__name__} instance is not fitted yet. "
            f"Missing attributes: {missing}"
        )
