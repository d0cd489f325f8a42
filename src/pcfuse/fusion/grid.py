"""Quantization of world positions into deduplication cells."""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

DEFAULT_DENSITY = 100.0


class GridKey(NamedTuple):
    """Integer cell coordinates. Equality compares all three axes."""

    ix: int
    iy: int
    iz: int

    @classmethod
    def from_position(cls, position, density: float = DEFAULT_DENSITY) -> GridKey:
        ix, iy, iz = grid_indices(np.asarray(position, dtype=np.float64).reshape(1, 3), density)[0]
        return cls(int(ix), int(iy), int(iz))


def round_half_away(x: np.ndarray) -> np.ndarray:
    """Round to nearest, ties away from zero (``np.rint`` rounds ties to even)."""
    return np.copysign(np.floor(np.abs(x) + 0.5), x)


def grid_indices(positions: np.ndarray, density: float = DEFAULT_DENSITY) -> np.ndarray:
    """(N, 3) world positions -> (N, 3) int64 cell indices."""
    return round_half_away(np.asarray(positions, dtype=np.float64) * density).astype(np.int64)
