"""Accumulated, deduplicated colored point set.

One writer (the fuser) and any number of readers. Every mutation and every
snapshot copy happens under the same lock, so a reader sees the store either
entirely before or entirely after a mutation. A whole frame's batch insert
is one mutation.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np

from .grid import GridKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vertex:
    position: tuple[float, float, float]
    color: tuple[float, float, float, float]


@dataclass(frozen=True)
class PointSnapshot:
    """Immutable copy of the store contents as parallel arrays.

    positions: (N, 3) float32 world coordinates.
    colors: (N, 4) float32 RGBA in [0, 1].
    """

    positions: np.ndarray
    colors: np.ndarray

    def __post_init__(self):
        if self.positions.shape[0] != self.colors.shape[0]:
            raise ValueError("positions and colors must have the same length")
        self.positions.flags.writeable = False
        self.colors.flags.writeable = False

    def __len__(self) -> int:
        return int(self.positions.shape[0])

    @classmethod
    def empty(cls) -> PointSnapshot:
        return cls(np.zeros((0, 3), dtype=np.float32), np.zeros((0, 4), dtype=np.float32))

    @classmethod
    def from_vertices(cls, vertices: Iterable[Vertex]) -> PointSnapshot:
        vertices = list(vertices)
        if not vertices:
            return cls.empty()
        positions = np.array([v.position for v in vertices], dtype=np.float32)
        colors = np.array([v.color for v in vertices], dtype=np.float32)
        return cls(positions, colors)

    def vertices(self) -> Iterator[Vertex]:
        for p, c in zip(self.positions.tolist(), self.colors.tolist()):
            yield Vertex(position=tuple(p), color=tuple(c))

    def with_colors(self, colors: np.ndarray) -> PointSnapshot:
        return PointSnapshot(self.positions.copy(), np.asarray(colors, dtype=np.float32))

    def subsample(self, stride: int = 10, offset: int = 9) -> PointSnapshot:
        """Keep every ``stride``-th point starting at ``offset`` (live preview thinning)."""
        if stride <= 1:
            return self
        return PointSnapshot(
            self.positions[offset::stride].copy(), self.colors[offset::stride].copy()
        )


class PointStore:
    """Mapping GridKey -> Vertex with insert-if-absent semantics."""

    def __init__(self):
        self._vertices: dict[GridKey, Vertex] = {}
        self._lock = threading.Lock()

    def insert_if_absent(self, key: GridKey, vertex: Vertex) -> bool:
        """Insert ``vertex`` unless ``key`` is taken. Returns True if inserted."""
        with self._lock:
            if key in self._vertices:
                return False
            self._vertices[key] = vertex
            return True

    def insert_many(self, items: Iterable[tuple[GridKey, Vertex]]) -> list[Vertex]:
        """Insert a batch atomically, first occurrence of each key winning.

        Returns the vertices that were actually inserted, in input order.
        """
        inserted: list[Vertex] = []
        with self._lock:
            for key, vertex in items:
                if key not in self._vertices:
                    self._vertices[key] = vertex
                    inserted.append(vertex)
        return inserted

    def contains(self, key: GridKey) -> bool:
        with self._lock:
            return key in self._vertices

    def get(self, key: GridKey) -> Vertex | None:
        with self._lock:
            return self._vertices.get(key)

    def clear(self) -> None:
        with self._lock:
            n = len(self._vertices)
            self._vertices.clear()
        logger.info(f"Cleared point store ({n} points)")

    def count(self) -> int:
        with self._lock:
            return len(self._vertices)

    def __len__(self) -> int:
        return self.count()

    def snapshot(self) -> PointSnapshot:
        """Consistent copy of all vertices; never aliases live storage."""
        with self._lock:
            vertices = list(self._vertices.values())
        return PointSnapshot.from_vertices(vertices)
