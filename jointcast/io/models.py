"""JSON import and export of trained model coefficients.

A trained model is serialized as its coefficients, their labels and its
order, tagged with the model kind:

    {
        "kind": "arx",
        "order": <integer>,
        "n_exog": <integer>,
        "labels": [<string>, ...],
        "coefficients": [<float>, ...]
    }

    {
        "kind": "var",
        "lags": <integer>,
        "variable_names": [<string>, ...],
        "coef_labels": [<string>, ...],
        "params": [[<float>, ...], ...]      # (1 + lags * m) rows, m columns
    }

Fit statistics are not part of the format; a loaded model can predict and
forecast but carries no inference results.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Union

from jointcast.exceptions import InvalidInputError, NotFittedError
from jointcast.timeseries.arx import ARX, ARXResults, TrainedARX
from jointcast.timeseries.var import VAR, TrainedVAR, VARResults

Model = Union[TrainedARX, TrainedVAR]
ModelLike = Union[ARX, ARXResults, TrainedARX, VAR, VARResults, TrainedVAR]


def _trained(model: ModelLike) -> Model:
    if isinstance(model, (ARX, VAR)):
        if model.results is None:
            raise NotFittedError(f"{type(model).__name__} must be fitted before export")
        return model.results.model
    if isinstance(model, (ARXResults, VARResults)):
        return model.model
    if isinstance(model, (TrainedARX, TrainedVAR)):
        return model
    raise InvalidInputError(f"Cannot export object of type {type(model).__name__}")


def model_to_dict(model: ModelLike) -> dict:
    """
    Convert a trained model to a JSON-serializable dict.

    Parameters
    ----------
    model : ARX, ARXResults, TrainedARX, VAR, VARResults or TrainedVAR
        Fitted model or its coefficient handle.

    Returns
    -------
    dict
        Object with a ``kind`` tag and the model's coefficients, labels and
        order (see module docstring).
    """
    trained = _trained(model)
    if isinstance(trained, TrainedARX):
        return {
            "kind": "arx",
            "order": trained.order,
            "n_exog": trained.n_exog,
            "labels": list(trained.labels),
            "coefficients": [float(c) for c in trained.coefficients],
        }
    return {
        "kind": "var",
        "lags": trained.lags,
        "variable_names": list(trained.variable_names),
        "coef_labels": list(trained.coef_labels),
        "params": trained.params.tolist(),
    }


def _field(obj: Dict[str, Any], key: str, kind: type) -> Any:
    if key not in obj:
        raise InvalidInputError(f"Model object is missing required field '{key}'.")
    value = obj[key]
    if kind is int and (isinstance(value, bool) or not isinstance(value, int)):
        raise InvalidInputError(f"Field '{key}' must be an integer, got {value!r}.")
    if kind is list and not isinstance(value, list):
        raise InvalidInputError(f"Field '{key}' must be a list, got {type(value).__name__}.")
    return value


def model_from_dict(obj: dict) -> Model:
    """
    Rebuild a coefficient handle from :func:`model_to_dict` output.

    Parameters
    ----------
    obj : dict
        Serialized model.

    Returns
    -------
    TrainedARX or TrainedVAR
        Handle ready for prediction.

    Raises
    ------
    InvalidInputError
        If the object is not a dict, has an unknown ``kind``, lacks a field,
        or its coefficients do not match its labels and order.
    """
    if not isinstance(obj, dict):
        raise InvalidInputError(f"Model object must be a dict, got {type(obj).__name__}.")
    kind = obj.get("kind")

    try:
        if kind == "arx":
            return TrainedARX(
                order=_field(obj, "order", int),
                n_exog=_field(obj, "n_exog", int),
                coefficients=[float(c) for c in _field(obj, "coefficients", list)],
                labels=tuple(_field(obj, "labels", list)),
            )
        if kind == "var":
            return TrainedVAR(
                lags=_field(obj, "lags", int),
                variable_names=tuple(_field(obj, "variable_names", list)),
                params=_field(obj, "params", list),
                coef_labels=tuple(_field(obj, "coef_labels", list)),
            )
    except InvalidInputError:
        raise
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Malformed {kind} model: {exc}") from exc

    raise InvalidInputError(f"Unknown model kind {kind!r}; expected 'arx' or 'var'.")


def dump_model(model: ModelLike, path: str) -> None:
    """
    Write a trained model to a JSON file.

    Parameters
    ----------
    model : ARX, ARXResults, TrainedARX, VAR, VARResults or TrainedVAR
        Model to write.
    path : str
        Path to output JSON file.
    """
    obj = model_to_dict(model)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2)


def load_model(path: str) -> Model:
    """
    Load a trained model from a JSON file.

    Parameters
    ----------
    path : str
        Path to input JSON file.

    Returns
    -------
    TrainedARX or TrainedVAR
        Loaded coefficient handle.

    Raises
    ------
    InvalidInputError
        If the file is not valid JSON or not a valid model object.
    FileNotFoundError
        If the file does not exist.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Model file not found: {path}")
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Invalid JSON in file {path}: {e}") from e

    return model_from_dict(obj)


__all__ = [
    "model_to_dict",
    "model_from_dict",
    "dump_model",
    "load_model",
]
