"""I/O contracts for Step 02: Recolor a point cloud."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class ColorizeInput(BaseModel):
    point_cloud_path: Path = Field(..., description="PLY produced by s01 (or any x/y/z PLY)")


class ColorizeOutput(BaseModel):
    colorized_path: Path = Field(..., description="Recolored ASCII PLY")
    mode: str = Field(..., description="Color mode applied")
    num_points: int = Field(..., description="Number of points written")
    preview_path: Optional[Path] = Field(None, description="Preview PNG, if rendered")
