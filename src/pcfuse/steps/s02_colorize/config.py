"""Configuration for Step 02: Recolor a point cloud."""

from pydantic import BaseModel, Field

from pcfuse.utils.visualization import ColorMode


class ColorizeConfig(BaseModel):
    mode: ColorMode = Field("height", description="Color mode: original|depth|height")
    save_preview: bool = Field(False, description="Also render a PNG preview (matplotlib)")
    preview_stride: int = Field(10, ge=1, description="Plot every N-th point in the preview")
