"""Exception types raised by jointcast.

Each error also derives from the builtin a numpy/sklearn-style API would
raise, so ``except ValueError`` keeps working for callers that do not know
the package hierarchy.
"""

from __future__ import annotations

import numpy as np


class JointcastError(Exception):
    """Base class for all jointcast errors."""


class InvalidInputError(JointcastError, ValueError):
    """Malformed input: empty, jagged, non-finite or wrong-rank data, or an invalid option."""


class NotFittedError(JointcastError, RuntimeError):
    """The operation requires a prior call to ``fit``."""


class SingularMatrixError(JointcastError, np.linalg.LinAlgError):
    """The least-squares system could not be solved, even after regularization."""


class DimensionMismatchError(JointcastError, ValueError):
    """Vectors or matrices supplied at predict/transform time have the wrong size."""


class LengthMismatchError(JointcastError, ValueError):
    """Paired sequences given to a metric differ in length."""


class SchemaMismatchError(DimensionMismatchError):
    """A named channel is missing, or data does not match a channel schema."""
