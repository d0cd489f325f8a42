"""I/O utilities: ASCII PLY writer and PLY reader for point snapshots."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import numpy as np

from pcfuse.fusion.store import PointSnapshot

logger = logging.getLogger(__name__)

PLY_PROPERTIES = (
    "property float x",
    "property float y",
    "property float z",
    "property uchar red",
    "property uchar green",
    "property uchar blue",
    "property uchar alpha",
)


class PlyExportError(RuntimeError):
    """Export could not be encoded; nothing was written."""


def color_bytes(colors: np.ndarray) -> np.ndarray:
    """[0, 1] float channels -> 0..255 by multiplying by 255 and truncating."""
    scaled = np.asarray(colors, dtype=np.float64) * 255.0
    scaled = np.nan_to_num(scaled, nan=0.0)
    return np.clip(np.trunc(scaled), 0, 255).astype(np.uint8)


def format_ply(snapshot: PointSnapshot) -> str:
    """Render a snapshot as ASCII PLY text."""
    header = [
        "ply",
        "format ascii 1.0",
        f"element vertex {len(snapshot)}",
        *PLY_PROPERTIES,
        "end_header",
    ]
    rgba = color_bytes(snapshot.colors).tolist()
    lines = []
    for (x, y, z), (r, g, b, a) in zip(snapshot.positions.astype(np.float32), rgba):
        lines.append(f"{x} {y} {z} {r} {g} {b} {a}")
    return "\n".join(header + lines) + "\n"


def encode_ply(snapshot: PointSnapshot) -> bytes:
    try:
        return format_ply(snapshot).encode("ascii")
    except UnicodeEncodeError as e:
        raise PlyExportError(f"Point cloud is not ASCII-encodable: {e}") from e


def write_ascii_ply(path: Path, snapshot: PointSnapshot) -> Path:
    """Write ``snapshot`` to ``path`` as ASCII PLY, all or nothing.

    The data goes to a temporary file in the same directory and is renamed
    into place only after a complete write.
    """
    path = Path(path)
    data = encode_ply(snapshot)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(f"Exported {len(snapshot)} points -> {path}")
    return path


def read_ply(path: Path) -> PointSnapshot:
    """Read positions and colors from a PLY file (ASCII or binary).

    Missing color properties default to white, missing alpha to opaque.
    """
    from plyfile import PlyData

    plydata = PlyData.read(str(path))
    vertex = plydata["vertex"]
    prop_names = {p.name for p in vertex.properties}

    positions = np.column_stack([
        np.asarray(vertex["x"], dtype=np.float32),
        np.asarray(vertex["y"], dtype=np.float32),
        np.asarray(vertex["z"], dtype=np.float32),
    ]).reshape(-1, 3)

    n = len(positions)
    colors = np.ones((n, 4), dtype=np.float32)
    for i, channel in enumerate(("red", "green", "blue", "alpha")):
        if channel in prop_names:
            colors[:, i] = np.asarray(vertex[channel], dtype=np.float32) / 255.0

    logger.info(f"Loaded {n} points from {Path(path).name}")
    return PointSnapshot(positions, colors)
