"""Tests for the general movement model."""

import json

import numpy as np
import pytest

from jointcast import GeneralMovementModel, VARConfig
from jointcast.exceptions import InvalidInputError, NotFittedError, SchemaMismatchError
from jointcast.logging import EventRecorder
from jointcast.schema import FULL_BODY_CHANNELS

CHANNELS = ("Hips_Xrotation", "Spine_Xrotation", "Neck_Xrotation")


@pytest.fixture
def gom(recording):
    model = GeneralMovementModel(channels=CHANNELS, config=VARConfig(lags=2))
    model.fit(recording)
    return model


def test_defaults_to_full_body():
    model = GeneralMovementModel()
    assert model.channels == FULL_BODY_CHANNELS
    assert len(model.coef_labels) == 1 + 2 * len(FULL_BODY_CHANNELS)


def test_fit_tables(gom):
    assert list(gom.coef) == list(CHANNELS)
    assert list(gom.coef["Neck_Xrotation"]) == list(gom.coef_labels)
    assert gom.coef_labels[:2] == ("Bias", "Hips_Xrotation(t-1)")
    pvalues = [p for row in gom.pvalues.values() for p in row.values()]
    assert len(pvalues) == 3 * 7
    assert all(0.001 <= p <= 0.999 for p in pvalues)


def test_in_sample_predictions(gom, recording):
    assert gom.predictions.shape == (len(recording) - 2, 3)
    np.testing.assert_array_equal(gom.actuals, recording[2:])


def test_metrics(gom):
    scores = gom.metrics()
    assert set(scores) == set(CHANNELS)
    for channel in CHANNELS:
        assert scores[channel]["mse"] > 0.0
        assert scores[channel]["correlation"] > 0.5


def test_mapping_input_matches_matrix(recording):
    columns = {name: recording[:, j] for j, name in enumerate(CHANNELS)}
    shuffled = {"Head_Yrotation": np.zeros(len(recording))}
    for name in reversed(CHANNELS):
        shuffled[name] = columns[name]

    a = GeneralMovementModel(channels=CHANNELS).fit(recording)
    b = GeneralMovementModel(channels=CHANNELS).fit(shuffled)
    np.testing.assert_array_equal(a.params, b.params)


def test_missing_channel_in_mapping(recording):
    model = GeneralMovementModel(channels=CHANNELS)
    with pytest.raises(SchemaMismatchError, match="Neck_Xrotation"):
        model.fit({"Hips_Xrotation": recording[:, 0], "Spine_Xrotation": recording[:, 1]})


def test_wrong_matrix_width(recording):
    with pytest.raises(SchemaMismatchError):
        GeneralMovementModel(channels=CHANNELS).fit(recording[:, :2])


def test_predict_with_own_coefficients(gom, recording):
    predicted = gom.predict_with_coefficients(recording, gom.coef)
    np.testing.assert_allclose(predicted, gom.predictions)


def test_predict_with_incomplete_table(gom, recording):
    table = gom.coef
    del table["Spine_Xrotation"]["Bias"]
    with pytest.raises(SchemaMismatchError, match="Bias"):
        gom.predict_with_coefficients(recording, table)


def test_predict_steps(gom, recording):
    out = gom.predict(recording[-10:], steps=5)
    assert out.shape == (5, 3)
    assert np.all(np.isfinite(out))


def test_export_roundtrip(gom, recording):
    payload = json.loads(json.dumps(gom.export()))
    assert payload["variables"] == list(CHANNELS)
    assert payload["lags"] == 2

    rebuilt = GeneralMovementModel.from_export(payload)
    np.testing.assert_allclose(rebuilt.model.params, gom.model.params)
    assert rebuilt.pvalues == gom.pvalues
    np.testing.assert_allclose(
        rebuilt.predict(recording[-4:], steps=3), gom.predict(recording[-4:], steps=3)
    )


def test_export_missing_field(gom):
    payload = gom.export()
    del payload["coef"]
    with pytest.raises(InvalidInputError, match="coef"):
        GeneralMovementModel.from_export(payload)


def test_export_label_mismatch(gom):
    payload = gom.export()
    payload["coef_labels"] = payload["coef_labels"][::-1]
    with pytest.raises(SchemaMismatchError):
        GeneralMovementModel.from_export(payload)


def test_not_fitted():
    model = GeneralMovementModel(channels=CHANNELS)
    with pytest.raises(NotFittedError):
        model.coef
    with pytest.raises(NotFittedError):
        model.metrics()
    with pytest.raises(NotFittedError):
        model.export()


def test_constant_channel_is_jittered(recording):
    data = np.column_stack([recording, np.zeros(len(recording))])
    recorder = EventRecorder()
    model = GeneralMovementModel(
        channels=CHANNELS + ("Head_Zrotation",),
        config=VARConfig(lags=1, seed=0),
        listener=recorder,
    )
    res = model.fit(data)
    assert np.all(np.isfinite(res.params))
    assert len(recorder.of_kind("constant_column_jitter")) == 1
