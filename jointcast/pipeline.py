"""End-to-end fit/forecast flow for one target channel.

The pipeline owns the scaler and the ARX model for a :class:`ForecastConfig`.
The scaler is fitted once on the training matrix and then only applied, so
training and test data always share one normalization.

Example:
    >>> schema = ChannelSchema(["Hips_Xrotation", "Spine_Xrotation", "Neck_Xrotation"])
    >>> config = ForecastConfig(target="Hips_Xrotation",
    ...                         exog=("Spine_Xrotation", "Neck_Xrotation"))
    >>> pipe = JointAnglePipeline(config, schema)
    >>> pipe.fit(train)  # doctest: +SKIP
    >>> pipe.evaluate(test, strategy="dynamic")  # doctest: +SKIP
    {'mse': ..., 'mae': ..., 'theil_u': ..., 'correlation': ...}
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from jointcast import metrics
from jointcast.config import ForecastConfig
from jointcast.exceptions import NotFittedError
from jointcast.features import make_scaler
from jointcast.forecasting import ForecastResult, forecast
from jointcast.logging import EventListener, get_logger
from jointcast.schema import ChannelSchema
from jointcast.timeseries import ARX, ARXResults

logger = get_logger(__name__)


class JointAnglePipeline:
    """Scaler + ARX model + forecasting strategy for one target channel.

    Args:
        config: Target/exogenous channels and model settings.
        schema: Column layout of every matrix passed to the pipeline.
        listener: Receives diagnostic events from the model fit.
    """

    def __init__(
        self,
        config: ForecastConfig,
        schema: ChannelSchema,
        listener: Optional[EventListener] = None,
    ) -> None:
        self.config = config.validate()
        self.schema = schema
        self.listener = listener
        # Resolve channel names up front so a missing channel fails here.
        self.target_index = schema.index_of(config.target)
        self.exog_indices = schema.indices_of(config.exog)
        self.scaler = make_scaler(config.scaler)
        self.model = ARX(order=config.order, ridge=config.ridge, listener=listener)

    @property
    def results(self) -> Optional[ARXResults]:
        return self.model.results

    def fit(self, train_data: np.ndarray) -> ARXResults:
        """Fit the scaler on ``train_data`` and the ARX model on its normalized form."""
        data = self.schema.validate(train_data)
        normalized = self.scaler.fit_transform(data)
        endog, exog = self.schema.split(normalized, self.config.target, self.config.exog)
        logger.info(
            "Fitting %s on %d frames with %d exogenous channels",
            self.config.target,
            data.shape[0],
            len(self.config.exog),
        )
        return self.model.fit(
            endog, exog, endog_name=self.config.target, exog_names=self.config.exog
        )

    def forecast(self, test_data: np.ndarray, strategy: Optional[str] = None) -> ForecastResult:
        """Forecast the target over ``test_data`` in original units.

        Args:
            test_data: Raw test matrix laid out as ``schema``.
            strategy: Overrides ``config.strategy`` when given.

        Raises:
            NotFittedError: If :meth:`fit` has not been called.
        """
        if self.model.results is None:
            raise NotFittedError("JointAnglePipeline must be fitted before forecasting")
        data = self.schema.validate(test_data)
        normalized = self.scaler.transform(data)
        return forecast(
            strategy or self.config.strategy,
            self.model.results.model,
            normalized,
            self.scaler,
            self.target_index,
            self.exog_indices,
        )

    def evaluate(self, test_data: np.ndarray, strategy: Optional[str] = None) -> dict[str, float]:
        """Forecast ``test_data`` and score it with :func:`jointcast.metrics.evaluate`."""
        result = self.forecast(test_data, strategy)
        return metrics.evaluate(result.actual, result.predicted)
