"""Point cloud color modes and preview rendering."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import numpy as np

from pcfuse.fusion.store import PointSnapshot

ColorMode = Literal["original", "depth", "height"]
COLOR_MODES: tuple[str, ...] = ("original", "depth", "height")


def _normalize(values: np.ndarray) -> np.ndarray:
    if values.size == 0:
        return values
    lo, hi = float(values.min()), float(values.max())
    span = hi - lo
    if span <= 0:
        return np.zeros_like(values)
    return (values - lo) / span


def depth_colors(positions: np.ndarray) -> np.ndarray:
    """Blue (near origin) to red (far) by distance from the world origin."""
    t = _normalize(np.linalg.norm(positions, axis=1))
    colors = np.empty((len(t), 4), dtype=np.float32)
    colors[:, 0] = t
    colors[:, 1] = 0.2
    colors[:, 2] = 1.0 - t
    colors[:, 3] = 1.0
    return colors


def height_colors(positions: np.ndarray) -> np.ndarray:
    """Blue (low) through green to red (high) along world Y."""
    t = _normalize(positions[:, 1].astype(np.float32))
    low = t < 0.5
    lo_t = t * 2
    hi_t = (t - 0.5) * 2

    colors = np.empty((len(t), 4), dtype=np.float32)
    colors[:, 0] = np.where(low, 0.0, hi_t)
    colors[:, 1] = np.where(low, lo_t, 1.0 - hi_t)
    colors[:, 2] = np.where(low, 1.0 - lo_t, 0.0)
    colors[:, 3] = 1.0
    return colors


def colorize(snapshot: PointSnapshot, mode: ColorMode = "original") -> PointSnapshot:
    """Return a copy of ``snapshot`` recolored by ``mode``."""
    if mode == "original":
        return snapshot
    if mode == "depth":
        return snapshot.with_colors(depth_colors(snapshot.positions))
    if mode == "height":
        return snapshot.with_colors(height_colors(snapshot.positions))
    raise ValueError(f"Unknown color mode '{mode}', expected one of {COLOR_MODES}")


def plot_point_cloud(
    snapshot: PointSnapshot,
    title: str = "Point Cloud",
    stride: int = 10,
    save_path: Path | None = None,
):
    """Plot every ``stride``-th point in 3D with matplotlib."""
    import matplotlib.pyplot as plt

    preview = snapshot.subsample(stride=stride, offset=stride - 1) if stride > 1 else snapshot
    points = preview.positions

    fig = plt.figure(figsize=(10, 8))
    ax = fig.add_subplot(111, projection="3d")
    if len(points):
        ax.scatter(points[:, 0], points[:, 1], points[:, 2], c=preview.colors, s=0.5, alpha=0.6)
    ax.set_title(f"{title} ({len(points)}/{len(snapshot)} points)")
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")

    if save_path:
        fig.savefig(str(save_path), dpi=150, bbox_inches="tight")
    else:
        plt.show()
    plt.close(fig)
    return fig
