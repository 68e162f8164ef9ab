"""Named-channel schema for joint-angle observation matrices.

An observation matrix is addressed positionally: column ``j`` of row ``t``
is channel ``j`` at frame ``t``. :class:`ChannelSchema` keeps the ordered
channel names next to the matrix so that target/exogenous selection, the
scaler and the model coefficients all resolve columns by name and fail on a
missing channel instead of silently reading the wrong column.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

import numpy as np

from jointcast.exceptions import InvalidInputError, SchemaMismatchError
from jointcast.features.utils import check_array


class ChannelSchema:
    """Ordered, immutable list of unique channel names.

    Args:
        names: Channel names in column order, e.g.
            ``["Hips_Xrotation", "Spine_Yrotation"]``.

    Example:
        >>> schema = ChannelSchema(["Hips_Xrotation", "Spine_Yrotation", "Spine_Zrotation"])
        >>> schema.index_of("Spine_Zrotation")
        2
    """

    def __init__(self, names: Iterable[str]) -> None:
        names = tuple(names)
        if not names:
            raise InvalidInputError("ChannelSchema needs at least one channel.")
        for name in names:
            if not isinstance(name, str) or not name:
                raise InvalidInputError(f"Channel names must be non-empty strings, got {name!r}.")
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise InvalidInputError(f"Duplicate channel names: {duplicates}.")
        self._names = names
        self._index = {name: i for i, name in enumerate(names)}

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self):
        return iter(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChannelSchema):
            return NotImplemented
        return self._names == other._names

    def __hash__(self) -> int:
        return hash(self._names)

    def __repr__(self) -> str:
        return f"ChannelSchema({list(self._names)!r})"

    def index_of(self, name: str) -> int:
        """Column index of ``name``; raises SchemaMismatchError if absent."""
        try:
            return self._index[name]
        except KeyError:
            raise SchemaMismatchError(
                f"Channel '{name}' not found in schema with {len(self)} channels."
            ) from None

    def indices_of(self, names: Iterable[str]) -> list[int]:
        return [self.index_of(name) for name in names]

    def validate(self, data) -> np.ndarray:
        """Check ``data`` is a finite 2D matrix with one column per channel."""
        array = check_array(data)
        if array.shape[1] != len(self):
            raise SchemaMismatchError(
                f"Data has {array.shape[1]} columns but the schema names {len(self)} channels."
            )
        return array

    def select(self, data, names: Sequence[str]) -> np.ndarray:
        """Return the columns of ``data`` for ``names``, in that order."""
        array = self.validate(data)
        return array[:, self.indices_of(names)]

    def split(self, data, target: str, exog: Sequence[str]) -> tuple[np.ndarray, np.ndarray]:
        """Split ``data`` into the target series and the exogenous matrix.

        Returns:
            Tuple ``(endog, exog)`` with shapes (n,) and (n, len(exog)).
        """
        if target in exog:
            raise InvalidInputError(f"Target channel '{target}' is also listed as exogenous.")
        array = self.validate(data)
        return array[:, self.index_of(target)].copy(), array[:, self.indices_of(exog)]

    @classmethod
    def from_columns(cls, columns: Mapping[str, Sequence[float]]) -> tuple["ChannelSchema", np.ndarray]:
        """Build a schema and matrix from a ``{channel: values}`` mapping."""
        if not columns:
            raise InvalidInputError("No channels supplied.")
        lengths = {name: len(values) for name, values in columns.items()}
        if len(set(lengths.values())) != 1:
            raise InvalidInputError(f"Channels have unequal lengths: {lengths}.")
        schema = cls(columns.keys())
        matrix = check_array(np.column_stack([np.asarray(v, dtype=np.float64) for v in columns.values()]))
        return schema, matrix


def rotation_channels(joints: Iterable[str], axes: str = "XYZ") -> list[str]:
    """Expand joint names into ``{joint}_{axis}rotation`` channel names."""
    return [f"{joint}_{axis}rotation" for joint in joints for axis in axes]


FULL_BODY_CHANNELS: tuple[str, ...] = tuple(
    rotation_channels(
        [
            "Spine", "Spine1", "Spine2", "Spine3", "Hips", "Neck", "Head",
            "LeftArm", "LeftForeArm", "RightArm", "RightForeArm",
            "LeftShoulder", "LeftShoulder2", "RightShoulder", "RightShoulder2",
            "LeftUpLeg", "LeftLeg", "RightUpLeg", "RightLeg",
        ]
    )
)

UPPER_BODY_CHANNELS: tuple[str, ...] = tuple(
    rotation_channels(["Spine", "Neck", "LeftArm", "RightArm"])
)

CORE_CHANNELS: tuple[str, ...] = tuple(rotation_channels(["Hips", "Spine"]))
