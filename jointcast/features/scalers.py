"""Column scaling transforms for joint-angle observation matrices.

Both scalers are fitted once on training data and then reused, unchanged,
for every test sequence. Fitting a second scaler on the test data would
shift the test series into a different coordinate system than the one the
model was trained in.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from jointcast.exceptions import InvalidInputError

from .base import Transformer, check_is_fitted
from .utils import check_array, ensure_same_shape


@dataclass
class StandardScaler(Transformer):
    """Standardize columns by removing the mean and scaling to unit variance.

    Uses the population standard deviation (divide by N). Columns with zero
    variance keep a scale of 1, so transforming them only subtracts the mean.

    Examples
    --------
    >>> from jointcast.features import StandardScaler
    >>> import numpy as np
    >>> X = np.array([[1.0, 2.0], [3.0, 2.0]])
    >>> StandardScaler().fit_transform(X)
    array([[-1.,  0.],
           [ 1.,  0.]])
    """

    ddof: int = 0

    def fit(self, X: np.ndarray) -> "StandardScaler":
        X_checked = check_array(X)
        self.n_features_in_ = X_checked.shape[1]
        self.mean_ = X_checked.mean(axis=0)
        variance = X_checked.var(axis=0, ddof=self.ddof)
        # var() of a constant like 0.1 is ~1e-34, not 0; test the range instead.
        constant = np.ptp(X_checked, axis=0) == 0.0
        self.scale_ = np.where(constant, 1.0, np.sqrt(variance))
        return self

    def transform(self, X: np.ndarray) -> np.ndarray:
        check_is_fitted(self, ("mean_", "scale_", "n_features_in_"))
        X_checked = check_array(X)
        ensure_same_shape(X_checked, self.n_features_in_)
        return (X_checked - self.mean_) / self.scale_

    def inverse_transform(self, X: np.ndarray) -> np.ndarray:
        check_is_fitted(self, ("mean_", "scale_", "n_features_in_"))
        X_checked = check_array(X)
        ensure_same_shape(X_checked, self.n_features_in_)
        return X_checked * self.scale_ + self.mean_

    def _inverse_column(self, values: np.ndarray, column: int) -> np.ndarray:
        return values * self.scale_[column] + self.mean_[column]


@dataclass
class MinMaxScaler(Transformer):
    """Transform columns to a given feature range.

    Columns whose minimum equals their maximum are treated as having a range
    of 1.

    Examples
    --------
    >>> from jointcast.features import MinMaxScaler
    >>> import numpy as np
    >>> X = np.array([[0.0], [5.0]])
    >>> MinMaxScaler(feature_range=(-1, 1)).fit_transform(X)
    array([[-1.],
           [ 1.]])
    """

    feature_range: tuple[float, float] = (0.0, 1.0)
    clip: bool = False

    def fit(self, X: np.ndarray) -> "MinMaxScaler":
        X_checked = check_array(X)
        feature_min, feature_max = self.feature_range
        if feature_min >= feature_max:
            raise InvalidInputError("feature_range min must be less than max.")
        self.n_features_in_ = X_checked.shape[1]
        self.data_min_ = X_checked.min(axis=0)
        self.data_max_ = X_checked.max(axis=0)
        data_range = self.data_max_ - self.data_min_
        data_range[data_range == 0.0] = 1.0
        self.data_range_ = data_range
        self.scale_ = (feature_max - feature_min) / self.data_range_
        self.min_ = feature_min - self.data_min_ * self.scale_
        self.feature_range_ = (float(feature_min), float(feature_max))
        return self

    def transform(self, X: np.ndarray) -> np.ndarray:
        check_is_fitted(self, ("data_min_", "scale_", "min_", "n_features_in_"))
        X_checked = check_array(X)
        ensure_same_shape(X_checked, self.n_features_in_)
        X_transformed = X_checked * self.scale_ + self.min_
        if self.clip:
            X_transformed = np.clip(X_transformed, *self.feature_range_)
        return X_transformed

    def inverse_transform(self, X: np.ndarray) -> np.ndarray:
        check_is_fitted(self, ("data_min_", "scale_", "min_", "n_features_in_"))
        X_checked = check_array(X)
        ensure_same_shape(X_checked, self.n_features_in_)
        return (X_checked - self.min_) / self.scale_

    def _inverse_column(self, values: np.ndarray, column: int) -> np.ndarray:
        return (values - self.min_[column]) / self.scale_[column]


_SCALERS = {
    "standard": StandardScaler,
    "minmax": MinMaxScaler,
}

SCALER_KINDS = tuple(_SCALERS)


def make_scaler(kind: str = "standard") -> Transformer:
    """Create an unfitted scaler by name ("standard" or "minmax")."""
    try:
        return _SCALERS[kind.lower()]()
    except KeyError:
        raise InvalidInputError(
            f"Unknown scaler '{kind}'. Choose one of {sorted(_SCALERS)}."
        ) from None
