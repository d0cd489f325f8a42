"""Frame fusion: depth pixels -> deduplicated colored world points.

For every depth pixel with HIGH confidence and depth within range, the pixel
is unprojected through the inverse intrinsics at its measured depth, moved
to world space with the per-frame camera transform, quantized to a grid cell
and, when the cell is still empty, stored with the color sampled at the
matching color image pixel. The first observation of a cell wins, both
across frames and within one frame (row-major pixel order).
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import TYPE_CHECKING

import numpy as np

from pcfuse.core.contracts import ConfidenceLevel
from .config import FusionConfig
from .grid import GridKey, grid_indices, round_half_away
from .store import PointStore, Vertex
from .transform import build_camera_transform

if TYPE_CHECKING:
    from pcfuse.capture.frame import Frame

logger = logging.getLogger(__name__)


class FrameFuser:
    """Fuses frames into a ``PointStore``. Not re-entrant; see ``CaptureSession``."""

    def __init__(self, store: PointStore | None = None, config: FusionConfig | None = None):
        self.store = store if store is not None else PointStore()
        self.config = config or FusionConfig()

    def fuse(self, frame: Frame) -> list[Vertex]:
        """Fuse one frame and return the newly inserted vertices.

        Frames missing depth, confidence or color are skipped without touching
        the store.
        """
        missing = frame.missing_planes()
        if missing:
            logger.debug(f"Skipping frame at t={frame.timestamp:.3f}: missing {', '.join(missing)}")
            return []

        with ExitStack() as stack:
            stack.enter_context(frame.depth.locked())
            stack.enter_context(frame.confidence.locked())
            stack.enter_context(frame.color.locked())
            items = self._collect(frame)

        inserted = self.store.insert_many(items)
        logger.debug(
            f"Frame t={frame.timestamp:.3f}: {len(items)} candidate cells, "
            f"{len(inserted)} new, store={self.store.count()}"
        )
        return inserted

    def _collect(self, frame: Frame) -> list[tuple[GridKey, Vertex]]:
        """Compute (key, vertex) candidates in row-major pixel order. Planes must be locked."""
        depth = frame.depth.plane(0)
        height, width = depth.shape
        color_w, color_h = frame.color.size

        rows, cols = np.nonzero(self._confidence_mask(frame, width, height))
        d = depth[rows, cols].astype(np.float64)

        in_range = np.isfinite(d) & (d <= self.config.max_depth)
        rows, cols, d = rows[in_range], cols[in_range], d[in_range]
        if d.size == 0:
            return []

        # normalized image coordinates shared by unprojection and color lookup
        nx = cols / width
        ny = rows / height

        screen = np.stack([nx * color_w, ny * color_h, np.ones_like(nx)], axis=0)
        k_inv = np.linalg.inv(frame.intrinsics.matrix())
        local = (k_inv @ screen) * d

        transform = build_camera_transform(frame.pose)
        world = transform @ np.vstack([local, np.ones_like(d)])
        w = world[3]
        ok = np.isfinite(w) & (w > self.config.min_w)
        positions = np.zeros((d.size, 3))
        positions[ok] = (world[:3, ok] / w[ok]).T
        ok &= np.isfinite(positions).all(axis=1)
        if not ok.all():
            logger.debug(f"Dropped {int((~ok).sum())} points with degenerate geometry")

        positions, nx, ny = positions[ok], nx[ok], ny[ok]
        if positions.shape[0] == 0:
            return []

        indices = grid_indices(positions, self.config.grid_density)
        # np.unique sorts; the returned first-occurrence indices restore pixel order
        _, first = np.unique(indices, axis=0, return_index=True)
        first.sort()
        positions, indices, nx, ny = positions[first], indices[first], nx[first], ny[first]

        px = np.clip(round_half_away(nx * color_w).astype(np.intp), 0, color_w - 1)
        py = np.clip(round_half_away(ny * color_h).astype(np.intp), 0, color_h - 1)
        colors = frame.color.colors(px, py)

        return [
            (GridKey(*key), Vertex(position=tuple(pos), color=tuple(col)))
            for key, pos, col in zip(indices.tolist(), positions.tolist(), colors.tolist())
        ]

    def _confidence_mask(self, frame: Frame, width: int, height: int) -> np.ndarray:
        """HIGH-confidence mask at depth resolution.

        A confidence map with a different resolution is sampled through the
        same normalized coordinates as the color image.
        """
        confidence = frame.confidence.plane(0)
        if confidence.shape != (height, width):
            conf_h, conf_w = confidence.shape
            rows = np.clip(round_half_away(np.arange(height) / height * conf_h).astype(np.intp), 0, conf_h - 1)
            cols = np.clip(round_half_away(np.arange(width) / width * conf_w).astype(np.intp), 0, conf_w - 1)
            confidence = confidence[np.ix_(rows, cols)]
        return confidence == int(ConfidenceLevel.HIGH)
