"""General movement model: a full-body VAR over named joint channels.

Every channel in the list is predicted from the previous ``lags`` frames of
all channels. Coefficients and p-values are exposed as
``{channel: {coef_label: value}}`` tables so they can be exported, inspected
per joint, or applied to new recordings.

Example:
    >>> gom = GeneralMovementModel(channels=CORE_CHANNELS)
    >>> gom.fit(recording)  # doctest: +SKIP
    >>> gom.coef["Hips_Xrotation"]["Hips_Xrotation(t-1)"]  # doctest: +SKIP
    >>> gom.metrics()["Spine_Zrotation"]  # doctest: +SKIP
    {'mse': ..., 'correlation': ...}
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

import numpy as np

from jointcast.config import VARConfig
from jointcast.exceptions import InvalidInputError, NotFittedError, SchemaMismatchError
from jointcast.logging import EventListener, get_logger
from jointcast.metrics import evaluate_columns
from jointcast.schema import FULL_BODY_CHANNELS, ChannelSchema
from jointcast.timeseries.var import VAR, TrainedVAR, VARResults, var_labels

logger = get_logger(__name__)

Recording = Union[np.ndarray, Mapping[str, Sequence[float]]]


class GeneralMovementModel:
    """VAR-based model of whole-body joint-angle dynamics.

    Args:
        channels: Channel names, in column order. Defaults to
            ``FULL_BODY_CHANNELS``.
        config: VAR settings (lags, ridge, jitter, seed).
        listener: Receives diagnostic events from the fit.
    """

    def __init__(
        self,
        channels: Optional[Sequence[str]] = None,
        config: Optional[VARConfig] = None,
        listener: Optional[EventListener] = None,
    ) -> None:
        self.schema = ChannelSchema(channels if channels is not None else FULL_BODY_CHANNELS)
        self.config = (config or VARConfig()).validate()
        self.listener = listener
        self.coef_labels = var_labels(self.schema.names, self.config.lags)

        self.results: Optional[VARResults] = None
        self.model: Optional[TrainedVAR] = None
        self.predictions: Optional[np.ndarray] = None
        self.actuals: Optional[np.ndarray] = None
        self._pvalues: Optional[dict[str, dict[str, float]]] = None

    @property
    def channels(self) -> tuple[str, ...]:
        return self.schema.names

    @property
    def lags(self) -> int:
        return self.config.lags

    def to_matrix(self, recording: Recording) -> np.ndarray:
        """Arrange a recording as an (n_frames, n_channels) matrix.

        ``recording`` is either a matrix already in channel order or a
        ``{channel: values}`` mapping. Every channel of the model must be
        present in a mapping; extra channels are ignored.

        Raises:
            SchemaMismatchError: If a channel is missing or the matrix width
                differs from the channel count.
        """
        if isinstance(recording, Mapping):
            missing = [name for name in self.channels if name not in recording]
            if missing:
                raise SchemaMismatchError(f"Recording is missing channels: {missing}")
            schema, matrix = ChannelSchema.from_columns(recording)
            return schema.select(matrix, self.channels)
        return self.schema.validate(recording)

    def fit(self, recording: Recording) -> VARResults:
        """Fit the VAR and compute in-sample one-step predictions."""
        data = self.to_matrix(recording)
        logger.info("Fitting movement model on %d frames x %d channels", *data.shape)
        var = VAR(
            lags=self.config.lags,
            ridge=self.config.ridge,
            jitter=self.config.jitter,
            seed=self.config.seed,
            listener=self.listener,
        )
        self.results = var.fit(data, self.channels)
        self.model = self.results.model
        self._pvalues = self.results.pvalue_table()
        self.predictions, self.actuals = self.model.one_step_predictions(data)
        return self.results

    def _require_model(self) -> TrainedVAR:
        if self.model is None:
            raise NotFittedError("GeneralMovementModel must be fitted or imported first")
        return self.model

    @property
    def coef(self) -> dict[str, dict[str, float]]:
        return self._require_model().coef_table()

    @property
    def pvalues(self) -> dict[str, dict[str, float]]:
        self._require_model()
        if self._pvalues is None:
            raise NotFittedError("No p-values: the model was imported without them")
        return self._pvalues

    def predict(self, recording: Recording, steps: int = 1) -> np.ndarray:
        """Roll the model forward ``steps`` frames past the end of ``recording``."""
        return self._require_model().predict(self.to_matrix(recording), steps)

    def params_from_table(self, coef_table: Mapping[str, Mapping[str, float]]) -> np.ndarray:
        """Convert a ``{channel: {label: coef}}`` table to a params matrix.

        Raises:
            SchemaMismatchError: If the table lacks a channel or a label.
        """
        params = np.empty((len(self.coef_labels), len(self.channels)))
        for j, name in enumerate(self.channels):
            if name not in coef_table:
                raise SchemaMismatchError(f"Coefficient table has no equation for '{name}'")
            row = coef_table[name]
            missing = [label for label in self.coef_labels if label not in row]
            if missing:
                raise SchemaMismatchError(
                    f"Equation '{name}' is missing coefficients: {missing[:5]}"
                    + (" ..." if len(missing) > 5 else "")
                )
            params[:, j] = [row[label] for label in self.coef_labels]
        return params

    def predict_with_coefficients(
        self, recording: Recording, coef_table: Mapping[str, Mapping[str, float]]
    ) -> np.ndarray:
        """One-step predictions for ``t >= lags`` using an external coefficient table.

        Returns:
            Predicted rows, shape (n - lags, n_channels).
        """
        model = TrainedVAR(
            lags=self.lags,
            variable_names=self.channels,
            params=self.params_from_table(coef_table),
            coef_labels=self.coef_labels,
        )
        predicted, _ = model.one_step_predictions(self.to_matrix(recording))
        return predicted

    def metrics(self) -> dict[str, dict[str, float]]:
        """Per-channel in-sample ``mse`` and ``correlation``."""
        if self.predictions is None or self.actuals is None:
            raise NotFittedError("No in-sample predictions: call fit() first")
        return evaluate_columns(self.actuals, self.predictions, self.channels)

    def export(self) -> dict[str, Any]:
        """Plain-dict snapshot that :meth:`from_export` can rebuild."""
        model = self._require_model()
        return {
            "variables": list(self.channels),
            "coef_labels": list(self.coef_labels),
            "lags": model.lags,
            "coef": model.coef_table(),
            "pvalues": self._pvalues,
        }

    @classmethod
    def from_export(
        cls, payload: Mapping[str, Any], listener: Optional[EventListener] = None
    ) -> "GeneralMovementModel":
        """Rebuild a model from :meth:`export` output."""
        try:
            variables = payload["variables"]
            lags = payload["lags"]
            coef = payload["coef"]
        except KeyError as exc:
            raise InvalidInputError(f"Movement model export is missing {exc}") from None
        gom = cls(channels=variables, config=VARConfig(lags=lags), listener=listener)
        labels = payload.get("coef_labels")
        if labels is not None and tuple(labels) != gom.coef_labels:
            raise SchemaMismatchError("Exported coefficient labels do not match the channel list")
        gom.model = TrainedVAR(
            lags=lags,
            variable_names=gom.channels,
            params=gom.params_from_table(coef),
            coef_labels=gom.coef_labels,
        )
        gom._pvalues = payload.get("pvalues")
        return gom
