"""Tunables for frame fusion."""

from pydantic import BaseModel, Field

from .grid import DEFAULT_DENSITY


class FusionConfig(BaseModel):
    grid_density: float = Field(
        DEFAULT_DENSITY, gt=0, description="Grid cells per meter (100 = 1 cm dedup cells)"
    )
    max_depth: float = Field(
        2.0, gt=0, description="Pixels with depth strictly greater than this (meters) are dropped"
    )
    min_w: float = Field(
        1e-6, gt=0, description="Smallest accepted homogeneous w after the world transform"
    )
