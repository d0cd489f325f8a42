"""One synchronized capture: depth, confidence, color and camera."""

from __future__ import annotations

from dataclasses import dataclass

from pcfuse.core.contracts import CameraIntrinsics, CameraPose
from pcfuse.fusion.planes import PixelBuffer, YCbCrBuffer


@dataclass
class Frame:
    """Per-frame input handed over by the capture layer.

    Any of the three image planes may be None when the sensor did not deliver
    it; such frames are valid input and are skipped by the fuser.
    """

    intrinsics: CameraIntrinsics
    pose: CameraPose
    depth: PixelBuffer | None = None
    confidence: PixelBuffer | None = None
    color: YCbCrBuffer | None = None
    timestamp: float = 0.0

    def missing_planes(self) -> list[str]:
        return [
            name for name in ("depth", "confidence", "color")
            if getattr(self, name) is None
        ]

    @property
    def is_complete(self) -> bool:
        return not self.missing_planes()
