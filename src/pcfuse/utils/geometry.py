"""3D geometry utilities: rotations and point measurements."""

from __future__ import annotations

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


def rotation_z(angle: float) -> np.ndarray:
    """4x4 homogeneous rotation by ``angle`` radians about the Z axis."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [c, -s, 0.0, 0.0],
        [s, c, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def distance(a, b) -> float:
    """Euclidean distance between two 3D points."""
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))


def nearest_vertex(positions: np.ndarray, query) -> tuple[int, float]:
    """Index of and distance to the point in ``positions`` closest to ``query``.

    Raises:
        ValueError: if ``positions`` is empty.
    """
    from scipy.spatial import cKDTree

    positions = np.asarray(positions, dtype=np.float64)
    if len(positions) == 0:
        raise ValueError("Cannot search an empty point set")
    dist, idx = cKDTree(positions).query(np.asarray(query, dtype=np.float64))
    return int(idx), float(dist)


def measure(positions: np.ndarray, p1, p2) -> tuple[np.ndarray, np.ndarray, float]:
    """Snap two query points to their nearest stored points and measure between them.

    Returns:
        (snapped_p1, snapped_p2, distance in scene units)
    """
    i1, d1 = nearest_vertex(positions, p1)
    i2, d2 = nearest_vertex(positions, p2)
    a = np.asarray(positions[i1], dtype=np.float64)
    b = np.asarray(positions[i2], dtype=np.float64)
    logger.debug(f"Snapped queries by {d1:.4f} and {d2:.4f}")
    return a, b, distance(a, b)
