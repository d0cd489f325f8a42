"""Create a synthetic depth recording for pipeline testing.

A camera slides sideways in front of a flat wall 1.5 m away. Every frame
has constant depth, a confidence map with a low-confidence border, and a
luma/chroma gradient so colors differ across the wall.

Usage:
    python scripts/create_synthetic_recording.py [num_frames]
"""

from pathlib import Path
import sys

import numpy as np

from pcfuse.capture.recording import frame_path, save_frame
from pcfuse.core.contracts import ConfidenceLevel, Orientation


def create_recording(
    output_dir: Path,
    num_frames: int = 20,
    depth_size: tuple[int, int] = (64, 48),
    color_size: tuple[int, int] = (256, 192),
    wall_distance: float = 1.5,
    step: float = 0.05,
) -> int:
    """Write ``num_frames`` frames. Returns number of frames written."""
    dw, dh = depth_size
    cw, ch = color_size

    depth = np.full((dh, dw), wall_distance, dtype=np.float32)
    confidence = np.full((dh, dw), ConfidenceLevel.HIGH, dtype=np.uint8)
    confidence[:2, :] = ConfidenceLevel.LOW
    confidence[-2:, :] = ConfidenceLevel.MEDIUM

    luma = np.tile(np.linspace(16, 235, cw, dtype=np.uint8), (ch, 1))
    chroma = np.zeros((ch // 2, cw // 2, 2), dtype=np.uint8)
    chroma[..., 0] = np.linspace(64, 192, ch // 2, dtype=np.uint8)[:, None]
    chroma[..., 1] = 128

    intrinsics = np.array([
        [cw * 0.8, 0.0, cw / 2],
        [0.0, cw * 0.8, ch / 2],
        [0.0, 0.0, 1.0],
    ])

    for i in range(num_frames):
        pose = np.eye(4)
        pose[0, 3] = i * step
        save_frame(
            frame_path(output_dir, i),
            intrinsics=intrinsics,
            pose=pose,
            orientation=Orientation.PORTRAIT,
            timestamp=i / 30.0,
            depth=depth,
            confidence=confidence,
            luma=luma,
            chroma=chroma,
        )

    print(f"Created {num_frames} frames in {output_dir} (depth {dw}x{dh}, color {cw}x{ch})")
    return num_frames


if __name__ == "__main__":
    output = Path("data/raw/recording")
    num_frames = int(sys.argv[1]) if len(sys.argv) > 1 else 20
    create_recording(output, num_frames=num_frames)
