"""JSON import/export of trained ARX and VAR models."""

from .models import dump_model, load_model, model_from_dict, model_to_dict

__all__ = [
    "model_to_dict",
    "model_from_dict",
    "dump_model",
    "load_model",
]
