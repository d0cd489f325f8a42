"""On-disk recordings: one ``frame_XXXXX.npz`` per captured frame.

Keys per file:
    depth        (H, W) float32 meters            optional
    confidence   (H, W) uint8 ConfidenceLevel     optional
    luma         (Hc, Wc) uint8                   optional, together with chroma
    chroma       (Hc/2, Wc/2, 2) uint8 CbCr       optional, together with luma
    intrinsics   (3, 3) float, color image pixels required
    pose         (4, 4) float camera-to-world     required
    orientation  str Orientation value            required
    timestamp    float seconds                    required
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import numpy as np

from pcfuse.core.contracts import CameraIntrinsics, CameraPose, Orientation
from pcfuse.fusion.planes import PixelBuffer, YCbCrBuffer
from .frame import Frame

logger = logging.getLogger(__name__)

FRAME_GLOB = "frame_*.npz"
REQUIRED_KEYS = ("intrinsics", "pose", "orientation", "timestamp")


class RecordingError(ValueError):
    """A recording file is malformed."""


def frame_path(recording_dir: Path, index: int) -> Path:
    return Path(recording_dir) / f"frame_{index:05d}.npz"


def save_frame(
    path: Path,
    *,
    intrinsics: np.ndarray,
    pose: np.ndarray,
    orientation: Orientation | str = Orientation.LANDSCAPE_RIGHT,
    timestamp: float = 0.0,
    depth: np.ndarray | None = None,
    confidence: np.ndarray | None = None,
    luma: np.ndarray | None = None,
    chroma: np.ndarray | None = None,
) -> Path:
    """Write one frame; planes passed as None are left out of the file."""
    arrays: dict[str, np.ndarray] = {
        "intrinsics": np.asarray(intrinsics, dtype=np.float64).reshape(3, 3),
        "pose": np.asarray(pose, dtype=np.float64).reshape(4, 4),
        "orientation": np.array(Orientation(orientation).value),
        "timestamp": np.array(float(timestamp)),
    }
    if depth is not None:
        arrays["depth"] = np.asarray(depth, dtype=np.float32)
    if confidence is not None:
        arrays["confidence"] = np.asarray(confidence, dtype=np.uint8)
    if luma is not None and chroma is not None:
        arrays["luma"] = np.asarray(luma, dtype=np.uint8)
        arrays["chroma"] = np.asarray(chroma, dtype=np.uint8)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savez(path, **arrays)
    return path


def load_frame(path: Path) -> Frame:
    """Read one recorded frame into a ``Frame`` with packed plane buffers."""
    path = Path(path)
    try:
        data = np.load(path, allow_pickle=False)
    except (OSError, ValueError) as e:
        raise RecordingError(f"Cannot read frame file {path}: {e}") from e
    if not hasattr(data, "files"):
        raise RecordingError(f"{path.name} is not an .npz archive")
    with data:
        arrays = {key: data[key] for key in data.files}

    missing = [k for k in REQUIRED_KEYS if k not in arrays]
    if missing:
        raise RecordingError(f"{path.name} is missing required keys: {missing}")

    color = None
    if "luma" in arrays and "chroma" in arrays:
        try:
            color = YCbCrBuffer.from_planes(arrays["luma"], arrays["chroma"])
        except ValueError as e:
            raise RecordingError(f"{path.name}: {e}") from e

    if color is not None:
        color_w, color_h = color.size
    elif "depth" in arrays:
        color_h, color_w = arrays["depth"].shape
    else:
        color_w = color_h = 0

    try:
        orientation = Orientation(str(arrays["orientation"]))
    except ValueError as e:
        raise RecordingError(f"{path.name}: unknown orientation {arrays['orientation']!r}") from e

    depth = PixelBuffer.from_array(arrays["depth"].astype(np.float32)) if "depth" in arrays else None
    confidence = (
        PixelBuffer.from_array(arrays["confidence"].astype(np.uint8))
        if "confidence" in arrays else None
    )

    return Frame(
        intrinsics=CameraIntrinsics.from_matrix(arrays["intrinsics"], width=color_w, height=color_h),
        pose=CameraPose.from_matrix(arrays["pose"], orientation=orientation, frame_name=path.stem),
        depth=depth,
        confidence=confidence,
        color=color,
        timestamp=float(arrays["timestamp"]),
    )


def list_frames(recording_dir: Path) -> list[Path]:
    return sorted(Path(recording_dir).glob(FRAME_GLOB))


def iter_recording(recording_dir: Path, max_frames: int = 0) -> Iterator[Frame]:
    """Yield frames in file-name order. ``max_frames`` of 0 means all."""
    paths = list_frames(recording_dir)
    if max_frames > 0:
        paths = paths[:max_frames]
    logger.info(f"Reading {len(paths)} frames from {recording_dir}")
    for path in paths:
        yield load_frame(path)
