"""Forecasting strategies for trained ARX models."""

from .strategies import (
    DYNAMIC_DROP,
    STRATEGIES,
    ForecastResult,
    dynamic_forecast,
    forecast,
    static_forecast,
)
from .window import LagWindow

__all__ = [
    "LagWindow",
    "ForecastResult",
    "static_forecast",
    "dynamic_forecast",
    "forecast",
    "DYNAMIC_DROP",
    "STRATEGIES",
]
