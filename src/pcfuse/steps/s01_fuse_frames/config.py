"""Configuration for Step 01: Fuse recorded frames into a point cloud."""

from pydantic import BaseModel, Field

from pcfuse.fusion.config import FusionConfig


class FuseFramesConfig(BaseModel):
    fusion: FusionConfig = Field(default_factory=FusionConfig, description="Fusion tunables")
    max_frames: int = Field(0, ge=0, description="Maximum frames to read (0 = all)")
    frame_stride: int = Field(1, ge=1, description="Fuse every N-th recorded frame")
