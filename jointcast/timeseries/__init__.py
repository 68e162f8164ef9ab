"""Linear autoregressive models for joint-angle channels.

This module provides the single-target ARX model, the vector autoregression,
and the least-squares and diagnostic routines they share.

Example:
    >>> from jointcast.timeseries import ARX
    >>> import numpy as np
    >>>
    >>> rng = np.random.default_rng(0)
    >>> exog = rng.standard_normal((400, 1))
    >>> y = np.zeros(400)
    >>> for t in range(2, 400):
    ...     y[t] = 0.6 * y[t-1] - 0.3 * y[t-2] + 0.4 * exog[t, 0] + 0.1 * rng.standard_normal()
    >>>
    >>> res = ARX(order=2).fit(y, exog, endog_name="Hips_Xrotation", exog_names=["Spine_Xrotation"])
    >>> print(f"R^2: {res.r_squared:.3f}")
    >>> print(res.summary()["labels"])

References:
    - Hamilton (1994): Time Series Analysis
    - Lütkepohl (2005): New Introduction to Multiple Time Series Analysis
"""

from __future__ import annotations

from .arx import ARX, ARXResults, TrainedARX, arx_labels
from .diagnostics import aic, bic, ljung_box, r_squared
from .estimation import (
    OLSSolution,
    coefficient_inference,
    coefficient_pvalues,
    ols,
    stabilize_ar,
)
from .utils import acf, arx_design, check_order, lag_matrix, var_design
from .var import VAR, TrainedVAR, VARResults, jitter_constant_columns, var_labels

__all__ = [
    # Models
    "ARX",
    "ARXResults",
    "TrainedARX",
    "VAR",
    "VARResults",
    "TrainedVAR",
    # Estimation
    "OLSSolution",
    "ols",
    "stabilize_ar",
    "coefficient_pvalues",
    "coefficient_inference",
    "jitter_constant_columns",
    # Utilities
    "check_order",
    "lag_matrix",
    "arx_design",
    "var_design",
    "arx_labels",
    "var_labels",
    "acf",
    # Diagnostics
    "aic",
    "bic",
    "r_squared",
    "ljung_box",
]
