"""Common Pydantic models shared across fusion, capture and pipeline steps."""

from __future__ import annotations

from enum import Enum, IntEnum
from pathlib import Path
from typing import Any

import numpy as np
from pydantic import BaseModel, Field


class StepMeta(BaseModel):
    """Metadata attached to every step run for reproducibility."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class ConfidenceLevel(IntEnum):
    """Per-pixel depth confidence tiers reported by the sensor."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2


class Orientation(str, Enum):
    """Display orientation the color image was presented in."""

    LANDSCAPE_RIGHT = "landscape_right"
    LANDSCAPE_LEFT = "landscape_left"
    PORTRAIT = "portrait"
    PORTRAIT_UPSIDE_DOWN = "portrait_upside_down"


class CameraIntrinsics(BaseModel):
    """Camera intrinsic parameters (pinhole model), in color image pixels."""

    fx: float
    fy: float
    cx: float
    cy: float
    width: int
    height: int

    def matrix(self) -> np.ndarray:
        """Return the 3x3 projection matrix K."""
        return np.array([
            [self.fx, 0.0, self.cx],
            [0.0, self.fy, self.cy],
            [0.0, 0.0, 1.0],
        ])

    @classmethod
    def from_matrix(cls, k: np.ndarray, width: int, height: int) -> CameraIntrinsics:
        k = np.asarray(k, dtype=np.float64).reshape(3, 3)
        return cls(
            fx=float(k[0, 0]), fy=float(k[1, 1]),
            cx=float(k[0, 2]), cy=float(k[1, 2]),
            width=width, height=height,
        )


class CameraPose(BaseModel):
    """Camera extrinsic: 4x4 camera-to-world matrix stored as flat list (row-major).

    The matrix is expressed in the sensor's native (landscape-right) camera
    frame; ``orientation`` records how the frame was displayed.
    """

    frame_name: str = ""
    matrix_4x4: list[float] = Field(..., min_length=16, max_length=16)
    orientation: Orientation = Orientation.LANDSCAPE_RIGHT

    def matrix(self) -> np.ndarray:
        return np.array(self.matrix_4x4, dtype=np.float64).reshape(4, 4)

    @classmethod
    def from_matrix(
        cls,
        m: np.ndarray,
        orientation: Orientation = Orientation.LANDSCAPE_RIGHT,
        frame_name: str = "",
    ) -> CameraPose:
        flat = np.asarray(m, dtype=np.float64).reshape(16)
        return cls(frame_name=frame_name, matrix_4x4=flat.tolist(), orientation=orientation)


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "pcfuse_project"
    data_root: Path = Path("./data")
    steps: list[StepEntry] = Field(default_factory=list)


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: str
    depends_on: list[str] = Field(default_factory=list)
    enabled: bool = True
    inputs: dict[str, Any] = Field(default_factory=dict, description="Literal step inputs")


# Fix forward reference
PipelineConfig.model_rebuild()
