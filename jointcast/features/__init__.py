"""Observation-matrix scaling transforms."""

from .base import Transformer, check_is_fitted
from .scalers import SCALER_KINDS, MinMaxScaler, StandardScaler, make_scaler
from .utils import check_array

__all__ = [
    "Transformer",
    "StandardScaler",
    "MinMaxScaler",
    "make_scaler",
    "SCALER_KINDS",
    "check_array",
    "check_is_fitted",
]
