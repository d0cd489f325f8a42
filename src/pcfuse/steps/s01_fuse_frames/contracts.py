"""I/O contracts for Step 01: Fuse recorded frames."""

from pathlib import Path

from pydantic import BaseModel, Field


class FuseFramesInput(BaseModel):
    recording_dir: Path = Field(..., description="Directory of frame_XXXXX.npz files")


class FuseFramesOutput(BaseModel):
    point_cloud_path: Path = Field(..., description="Path to the fused ASCII point_cloud.ply")
    metadata_path: Path = Field(..., description="Path to metadata.json")
    num_points: int = Field(..., description="Number of points in the fused cloud")
    num_frames: int = Field(..., description="Frames read from the recording")
    num_fused_frames: int = Field(..., description="Frames that contributed to fusion")
    num_skipped_frames: int = Field(0, description="Frames skipped for missing planes")
