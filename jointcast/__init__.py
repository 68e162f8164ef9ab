"""jointcast - linear autoregressive forecasting of motion-capture joint angles."""

__version__ = "0.1.0"

# Configuration
from .config import ForecastConfig, VARConfig

# Errors
from .exceptions import (
    DimensionMismatchError,
    InvalidInputError,
    JointcastError,
    LengthMismatchError,
    NotFittedError,
    SchemaMismatchError,
    SingularMatrixError,
)

# Scalers
from .features import MinMaxScaler, StandardScaler, make_scaler

# Forecasting
from .forecasting import (
    DYNAMIC_DROP,
    ForecastResult,
    LagWindow,
    dynamic_forecast,
    forecast,
    static_forecast,
)

# Model export/import
from .io import dump_model, load_model, model_from_dict, model_to_dict

# Logging
from .logging import (
    DiagnosticEvent,
    EventRecorder,
    configure_logging,
    get_logger,
    set_log_level,
)

# Metrics
from .metrics import correlation, evaluate, evaluate_columns, mae, mse, theil_u
from .movement import GeneralMovementModel
from .pipeline import JointAnglePipeline

# Channel schema
from .schema import CORE_CHANNELS, FULL_BODY_CHANNELS, UPPER_BODY_CHANNELS, ChannelSchema

# Models
from .timeseries import ARX, VAR, ARXResults, TrainedARX, TrainedVAR, VARResults

__all__ = [
    "__version__",
    # Configuration
    "ForecastConfig",
    "VARConfig",
    # Errors
    "JointcastError",
    "InvalidInputError",
    "NotFittedError",
    "SingularMatrixError",
    "DimensionMismatchError",
    "LengthMismatchError",
    "SchemaMismatchError",
    # Scalers
    "StandardScaler",
    "MinMaxScaler",
    "make_scaler",
    # Schema
    "ChannelSchema",
    "FULL_BODY_CHANNELS",
    "UPPER_BODY_CHANNELS",
    "CORE_CHANNELS",
    # Models
    "ARX",
    "ARXResults",
    "TrainedARX",
    "VAR",
    "VARResults",
    "TrainedVAR",
    # Forecasting
    "LagWindow",
    "ForecastResult",
    "static_forecast",
    "dynamic_forecast",
    "forecast",
    "DYNAMIC_DROP",
    # Metrics
    "mse",
    "mae",
    "theil_u",
    "correlation",
    "evaluate",
    "evaluate_columns",
    # High-level
    "JointAnglePipeline",
    "GeneralMovementModel",
    # I/O
    "model_to_dict",
    "model_from_dict",
    "dump_model",
    "load_model",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
    "DiagnosticEvent",
    "EventRecorder",
]
