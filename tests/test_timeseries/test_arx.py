"""Tests for the ARX model."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from jointcast.exceptions import (
    DimensionMismatchError,
    InvalidInputError,
    NotFittedError,
)
from jointcast.logging import EventRecorder, get_logger
from jointcast.timeseries import ARX, TrainedARX, aic, bic


class TestARXFit:
    """Tests for ARX estimation."""

    def test_recovers_coefficients(self, arx_data):
        y, exog = arx_data
        res = ARX(order=2).fit(y, exog)

        np.testing.assert_allclose(res.coefficients, [0.4, -0.2, 0.6, -0.3], atol=0.05)
        assert res.stability_factor == 1.0
        assert not res.stabilized
        assert res.r_squared > 0.9
        assert 0.005 < res.mse < 0.02
        assert np.all(res.p_values == 0.001)

    def test_shapes(self, arx_data):
        y, exog = arx_data
        res = ARX(order=2).fit(y, exog)
        assert res.nobs == len(y) - 2
        assert res.df_resid == res.nobs - 4
        for arr in (res.coefficients, res.std_errors, res.t_stats, res.p_values):
            assert arr.shape == (4,)
        assert res.residuals.shape == (res.nobs,)
        assert res.fitted_values.shape == (res.nobs,)

    @pytest.mark.parametrize("order", [1, 2, 3, 4])
    def test_coefficient_count_matches_order(self, order, arx_data):
        y, exog = arx_data
        res = ARX(order=order).fit(y, exog)
        assert len(res.coefficients) == res.n_exog + res.order == 2 + order
        assert len(res.labels) == len(res.coefficients)

    def test_default_labels(self, arx_data):
        y, exog = arx_data
        res = ARX(order=2).fit(y, exog)
        assert res.labels == ("x0", "x1", "y_T-1", "y_T-2")

    def test_named_labels(self, arx_data):
        y, exog = arx_data
        res = ARX(order=2).fit(
            y,
            exog,
            endog_name="Hips_Xrotation",
            exog_names=["Spine_Xrotation", "Neck_Xrotation"],
        )
        assert res.labels == (
            "Spine_Xrotation",
            "Neck_Xrotation",
            "Hips_Xrotation_T-1",
            "Hips_Xrotation_T-2",
        )

    def test_wrong_number_of_exog_names(self, arx_data):
        y, exog = arx_data
        with pytest.raises(DimensionMismatchError, match="exogenous names"):
            ARX().fit(y, exog, exog_names=["only_one"])

    def test_information_criteria(self, arx_data):
        y, exog = arx_data
        res = ARX(order=2).fit(y, exog)
        assert res.aic == pytest.approx(aic(res.sse, res.nobs, 4))
        assert res.bic == pytest.approx(bic(res.sse, res.nobs, 4))
        assert res.mse == pytest.approx(res.sse / res.df_resid)

    def test_fitted_values_are_one_step_predictions(self, arx_data):
        y, exog = arx_data
        res = ARX(order=2).fit(y, exog)
        model = res.model
        for t in (2, 50, len(y) - 1):
            expected = model.predict_next([y[t - 1], y[t - 2]], exog[t])
            assert res.fitted_values[t - 2] == pytest.approx(expected)

    def test_deterministic(self, arx_data):
        y, exog = arx_data
        a = ARX(order=2).fit(y, exog)
        b = ARX(order=2).fit(y, exog)
        np.testing.assert_array_equal(a.coefficients, b.coefficients)
        np.testing.assert_array_equal(a.std_errors, b.std_errors)
        np.testing.assert_array_equal(a.p_values, b.p_values)

    def test_refit_replaces_results(self, arx_simulator, rng):
        model = ARX(order=2)
        first = model.fit(*arx_simulator(rng, n=200))
        second = model.fit(*arx_simulator(rng, n=300))
        assert model.results is second
        assert first.nobs == 198
        assert second.nobs == 298

    def test_results_are_read_only(self, arx_data):
        res = ARX().fit(*arx_data)
        with pytest.raises(ValueError):
            res.coefficients[0] = 1.0

    def test_ljung_box_on_residuals(self, arx_data):
        res = ARX().fit(*arx_data)
        stat, pvalue = res.ljung_box(lags=10)
        assert stat >= 0.0
        assert 0.0 <= pvalue <= 1.0


class TestLinearTrendScenario:
    """endog = 1..10 with an all-zero exogenous channel."""

    def test_exog_coefficient_is_zero(self):
        endog = np.arange(1.0, 11.0)
        exog = np.zeros((10, 1))
        res = ARX(order=2, listener=EventRecorder()).fit(endog, exog)
        assert abs(res.coefficients[0]) < 1e-9

    def test_ar_sum_near_one_after_correction(self):
        endog = np.arange(1.0, 11.0)
        exog = np.zeros((10, 1))
        recorder = EventRecorder()
        res = ARX(order=2, listener=recorder).fit(endog, exog)

        ar_sum = res.coefficients[1:].sum()
        assert abs(ar_sum - 1.0) < 0.01
        assert ar_sum == pytest.approx(0.995)
        assert res.stabilized
        assert len(recorder.of_kind("stability_correction")) == 1

    def test_correction_logged_as_warning(self, caplog):
        endog = np.arange(1.0, 11.0)
        exog = np.zeros((10, 1))
        events_logger = get_logger("jointcast.events")
        events_logger.propagate = True
        try:
            with caplog.at_level(logging.WARNING, logger="jointcast.events"):
                ARX(order=2).fit(endog, exog)
        finally:
            events_logger.propagate = False
        assert any("stability_correction" in r.getMessage() for r in caplog.records)
        assert all(r.levelno == logging.WARNING for r in caplog.records)


class TestDegenerateInputs:
    def test_duplicated_exog_columns(self, arx_simulator, rng):
        y, exog = arx_simulator(rng, beta=(0.4,))
        duplicated = np.column_stack([exog[:, 0], exog[:, 0]])
        res = ARX(order=2).fit(y, duplicated)
        assert np.all(np.isfinite(res.coefficients))
        assert np.all(np.isfinite(res.std_errors))
        assert res.coefficients[0] == pytest.approx(res.coefficients[1], abs=1e-4)
        assert res.coefficients[:2].sum() == pytest.approx(0.4, abs=0.05)

    def test_duplicated_exog_columns_in_raw_units(self, rng):
        n = 5000
        x = 1000.0 + 50.0 * rng.standard_normal(n)
        eps = 0.1 * rng.standard_normal(n)
        y = np.zeros(n)
        for t in range(2, n):
            y[t] = 0.001 * x[t] + 0.6 * y[t - 1] - 0.3 * y[t - 2] + eps[t]

        res = ARX(order=2, listener=EventRecorder()).fit(y, np.column_stack([x, x]))
        assert np.all(np.isfinite(res.coefficients))
        assert np.all(np.isfinite(res.std_errors))
        assert res.coefficients[0] == pytest.approx(res.coefficients[1], rel=1e-6)
        assert res.coefficients[:2].sum() == pytest.approx(0.001, abs=5e-4)
        np.testing.assert_allclose(res.coefficients[2:], [0.6, -0.3], atol=0.05)

    def test_too_few_observations(self):
        with pytest.raises(InvalidInputError, match="more observations"):
            ARX(order=2).fit(np.arange(4.0), np.ones((4, 1)))

    def test_length_mismatch(self):
        with pytest.raises(InvalidInputError):
            ARX().fit(np.ones(20), np.ones((19, 1)))

    def test_nan_input(self):
        y = np.ones(20)
        y[5] = np.nan
        with pytest.raises(InvalidInputError, match="NaN"):
            ARX().fit(y, np.ones((20, 1)))

    @pytest.mark.parametrize("order", [0, -2])
    def test_invalid_order(self, order):
        with pytest.raises(InvalidInputError, match="order"):
            ARX(order=order)

    def test_negative_ridge(self):
        with pytest.raises(InvalidInputError, match="ridge"):
            ARX(ridge=-1e-3)


class TestPrediction:
    def test_predict_next(self):
        model = TrainedARX(
            order=2, n_exog=1, coefficients=[0.5, 0.6, -0.3], labels=("x0", "y_T-1", "y_T-2")
        )
        assert model.predict_next([2.0, 1.0], [4.0]) == pytest.approx(2.9)

    def test_wrong_lag_length(self):
        model = TrainedARX(order=2, n_exog=1, coefficients=[0.5, 0.6, -0.3], labels=("a", "b", "c"))
        with pytest.raises(DimensionMismatchError, match="lagged"):
            model.predict_next([1.0], [4.0])

    def test_wrong_exog_length(self):
        model = TrainedARX(order=2, n_exog=1, coefficients=[0.5, 0.6, -0.3], labels=("a", "b", "c"))
        with pytest.raises(DimensionMismatchError, match="exogenous"):
            model.predict_next([1.0, 2.0], [4.0, 5.0])

    def test_coefficient_count_checked(self):
        with pytest.raises(DimensionMismatchError, match="coefficients"):
            TrainedARX(order=2, n_exog=1, coefficients=[0.5, 0.6], labels=("a", "b"))

    def test_predict_before_fit(self):
        with pytest.raises(NotFittedError):
            ARX().predict_next([1.0, 2.0], [3.0])

    def test_estimator_predict_matches_handle(self, arx_data):
        y, exog = arx_data
        model = ARX(order=2)
        res = model.fit(y, exog)
        lags, now = [y[-1], y[-2]], exog[-1]
        assert model.predict_next(lags, now) == res.model.predict_next(lags, now)


class TestSummary:
    def test_summary_record(self, arx_data):
        y, exog = arx_data
        summary = ARX(order=2).fit(y, exog, endog_name="Hips").summary()
        for key in (
            "coefficients",
            "std_errors",
            "t_stats",
            "p_values",
            "r_squared",
            "mse",
            "aic",
            "bic",
            "labels",
            "significance",
        ):
            assert key in summary
        assert summary["labels"][-1] == "Hips_T-2"
        assert len(summary["significance"]) == 4
        assert summary["significance"][0] == "***"
        assert isinstance(summary["coefficients"], list)
