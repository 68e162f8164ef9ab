"""Configuration objects for joint-angle forecasting and VAR models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from jointcast.exceptions import InvalidInputError
from jointcast.features.scalers import SCALER_KINDS
from jointcast.forecasting.strategies import STRATEGIES


def _check_positive_int(value: object, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidInputError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class ForecastConfig:
    """
    Configuration for fitting and forecasting one target channel.

    Args:
        target: Target channel name, e.g. "Hips_Xrotation".
        exog: Exogenous channel names, in coefficient order.
        order: Autoregressive order. Must be a positive integer. Defaults to 2.
        strategy: Forecasting strategy, "static" or "dynamic". Defaults to
            "static".
        scaler: Scaler variant, "standard" or "minmax". Defaults to "standard".
        ridge: Tikhonov constant added to X'X. Must be non-negative.
            Defaults to 1e-6.
    """

    target: str
    exog: tuple[str, ...] = field(default_factory=tuple)
    order: int = 2
    strategy: str = "static"
    scaler: str = "standard"
    ridge: float = 1e-6

    def __post_init__(self) -> None:
        object.__setattr__(self, "exog", tuple(self.exog))

    @property
    def channels(self) -> tuple[str, ...]:
        """Target followed by the exogenous channels."""
        return (self.target, *self.exog)

    def validate(self) -> "ForecastConfig":
        """Check every field; returns self so calls can be chained.

        Raises:
            InvalidInputError: On the first invalid field.
        """
        if not isinstance(self.target, str) or not self.target:
            raise InvalidInputError(f"target must be a channel name, got {self.target!r}")
        if not self.exog:
            raise InvalidInputError("exog must list at least one channel")
        if self.target in self.exog:
            raise InvalidInputError(f"target '{self.target}' is also listed in exog")
        if len(set(self.exog)) != len(self.exog):
            raise InvalidInputError(f"exog contains duplicate channels: {list(self.exog)}")
        _check_positive_int(self.order, "order")
        if self.strategy not in STRATEGIES:
            raise InvalidInputError(
                f"strategy must be one of {list(STRATEGIES)}, got {self.strategy!r}"
            )
        # make_scaler matches names case-insensitively
        if not isinstance(self.scaler, str) or self.scaler.lower() not in SCALER_KINDS:
            raise InvalidInputError(
                f"scaler must be one of {list(SCALER_KINDS)}, got {self.scaler!r}"
            )
        if self.ridge < 0:
            raise InvalidInputError(f"ridge must be >= 0, got {self.ridge}")
        return self


@dataclass(frozen=True)
class VARConfig:
    """
    Configuration for a vector autoregression.

    Args:
        lags: Number of lags. Must be a positive integer. Defaults to 2.
        ridge: Tikhonov constant added to X'X. Defaults to 1e-8.
        jitter: Width of the uniform noise added to constant columns; 0
            disables it. Defaults to 1e-3.
        seed: Seed for the jitter generator. Defaults to None.
    """

    lags: int = 2
    ridge: float = 1e-8
    jitter: float = 1e-3
    seed: Optional[int] = None

    def validate(self) -> "VARConfig":
        _check_positive_int(self.lags, "lags")
        if self.ridge < 0:
            raise InvalidInputError(f"ridge must be >= 0, got {self.ridge}")
        if self.jitter < 0:
            raise InvalidInputError(f"jitter must be >= 0, got {self.jitter}")
        return self
