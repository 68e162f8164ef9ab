"""Tests for configuration objects."""

import dataclasses

import pytest

from jointcast.config import ForecastConfig, VARConfig
from jointcast.exceptions import InvalidInputError
from jointcast.features import MinMaxScaler, StandardScaler, make_scaler


def make(**overrides):
    fields = {"target": "Hips_Xrotation", "exog": ["Spine_Xrotation"]}
    fields.update(overrides)
    return ForecastConfig(**fields)


def test_defaults():
    config = make().validate()
    assert config.order == 2
    assert config.strategy == "static"
    assert config.scaler == "standard"
    assert config.ridge == 1e-6
    assert config.exog == ("Spine_Xrotation",)
    assert config.channels == ("Hips_Xrotation", "Spine_Xrotation")


@pytest.mark.parametrize("name, expected", [("Standard", StandardScaler), ("MINMAX", MinMaxScaler)])
def test_scaler_name_case_insensitive(name, expected):
    config = make(scaler=name).validate()
    assert isinstance(make_scaler(config.scaler), expected)


def test_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        make().order = 3


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"target": ""}, "target"),
        ({"exog": []}, "at least one"),
        ({"exog": ["Hips_Xrotation"]}, "also listed"),
        ({"exog": ["a", "a"]}, "duplicate"),
        ({"order": 0}, "order"),
        ({"order": 1.5}, "order"),
        ({"order": True}, "order"),
        ({"strategy": "rolling"}, "strategy"),
        ({"scaler": "robust"}, "scaler"),
        ({"ridge": -1.0}, "ridge"),
    ],
)
def test_invalid_fields(overrides, message):
    with pytest.raises(InvalidInputError, match=message):
        make(**overrides).validate()


def test_var_config():
    config = VARConfig(lags=3, seed=5).validate()
    assert config.ridge == 1e-8
    assert config.jitter == 1e-3


@pytest.mark.parametrize(
    "overrides", [{"lags": 0}, {"ridge": -1e-9}, {"jitter": -0.1}]
)
def test_var_config_invalid(overrides):
    with pytest.raises(InvalidInputError):
        VARConfig(**overrides).validate()
