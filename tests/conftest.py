"""Shared pytest fixtures for pcfuse tests."""

from pathlib import Path

import numpy as np
import pytest

from pcfuse.capture.frame import Frame
from pcfuse.capture.recording import frame_path, save_frame
from pcfuse.core.contracts import CameraIntrinsics, CameraPose, ConfidenceLevel, Orientation
from pcfuse.fusion.planes import PixelBuffer, YCbCrBuffer

WHITE_Y, NEUTRAL_C = 235, 128


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Create a temporary data root with standard directory structure."""
    for subdir in ["raw/recording", "interim/s01_fuse_frames", "processed"]:
        (tmp_path / subdir).mkdir(parents=True, exist_ok=True)
    return tmp_path


def build_frame(
    depth: np.ndarray,
    confidence: np.ndarray | None = None,
    luma: np.ndarray | None = None,
    chroma: np.ndarray | None = None,
    color_size: tuple[int, int] | None = None,
    focal: float | None = None,
    pose: np.ndarray | None = None,
    orientation: Orientation = Orientation.LANDSCAPE_RIGHT,
    drop: tuple[str, ...] = (),
    timestamp: float = 0.0,
) -> Frame:
    """Frame from dense arrays.

    Defaults: all-HIGH confidence, a white color image the size of the depth
    map, focal length equal to the color width, principal point at the image
    center, identity pose.
    """
    depth = np.asarray(depth, dtype=np.float32)
    h, w = depth.shape
    if confidence is None:
        confidence = np.full((h, w), ConfidenceLevel.HIGH, dtype=np.uint8)
    cw, ch = color_size or (w, h)
    if luma is None:
        luma = np.full((ch, cw), WHITE_Y, dtype=np.uint8)
    if chroma is None:
        chroma = np.full((ch // 2, cw // 2, 2), NEUTRAL_C, dtype=np.uint8)
    f = focal if focal is not None else float(cw)

    return Frame(
        intrinsics=CameraIntrinsics(fx=f, fy=f, cx=cw / 2, cy=ch / 2, width=cw, height=ch),
        pose=CameraPose.from_matrix(np.eye(4) if pose is None else pose, orientation=orientation),
        depth=None if "depth" in drop else PixelBuffer.from_array(depth, row_padding=8),
        confidence=None if "confidence" in drop else PixelBuffer.from_array(
            np.asarray(confidence, dtype=np.uint8), row_padding=3
        ),
        color=None if "color" in drop else YCbCrBuffer.from_planes(luma, chroma, row_padding=5),
        timestamp=timestamp,
    )


@pytest.fixture
def make_frame():
    """Factory fixture wrapping ``build_frame``."""
    return build_frame


@pytest.fixture
def sample_recording(data_root: Path) -> Path:
    """Three complete frames of a wall 1 m away plus one frame without color."""
    recording_dir = data_root / "raw" / "recording"
    w, h, cw, ch = 8, 6, 16, 12
    intrinsics = np.array([[16.0, 0, cw / 2], [0, 16.0, ch / 2], [0, 0, 1]])
    depth = np.ones((h, w), dtype=np.float32)
    confidence = np.full((h, w), ConfidenceLevel.HIGH, dtype=np.uint8)
    confidence[0, :] = ConfidenceLevel.LOW
    luma = np.tile(np.linspace(16, 235, cw).astype(np.uint8), (ch, 1))
    chroma = np.full((ch // 2, cw // 2, 2), NEUTRAL_C, dtype=np.uint8)

    for i in range(4):
        pose = np.eye(4)
        pose[0, 3] = 0.1 * i
        save_frame(
            frame_path(recording_dir, i),
            intrinsics=intrinsics,
            pose=pose,
            orientation=Orientation.PORTRAIT,
            timestamp=i / 30.0,
            depth=depth,
            confidence=confidence,
            luma=None if i == 3 else luma,
            chroma=None if i == 3 else chroma,
        )
    return recording_dir
