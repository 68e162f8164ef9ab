"""Fixed-length lag history used by the dynamic forecaster."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from jointcast.exceptions import InvalidInputError
from jointcast.features.utils import check_array
from jointcast.timeseries.utils import check_order


class LagWindow:
    """Ring buffer of the last ``order`` values of a series.

    ``push`` overwrites the oldest slot in place, so a rollout of any length
    keeps exactly ``order`` values without reallocating.

    Args:
        order: Window length p.
        seed: Initial history in chronological order (oldest first); the last
            ``order`` values are kept.

    Example:
        >>> window = LagWindow(2, [1.0, 2.0])
        >>> window.lags()
        array([2., 1.])
        >>> window.push(3.0)
        >>> window.lags()
        array([3., 2.])
    """

    def __init__(self, order: int, seed: Sequence[float]) -> None:
        self.order = check_order(order)
        seed = check_array(seed, ensure_2d=False)
        if len(seed) < self.order:
            raise InvalidInputError(
                f"Seed needs at least {self.order} values, got {len(seed)}"
            )
        self._buffer = seed[-self.order :].copy()
        # Index of the oldest value, i.e. the next slot to overwrite.
        self._head = 0

    def __len__(self) -> int:
        return self.order

    def push(self, value: float) -> None:
        self._buffer[self._head] = value
        self._head = (self._head + 1) % self.order

    def lags(self) -> np.ndarray:
        """Current history, most recent first: ``[x_{t-1}, ..., x_{t-p}]``."""
        idx = (self._head - 1 - np.arange(self.order)) % self.order
        return self._buffer[idx]
