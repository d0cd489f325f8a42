"""Step 02: Recolor a fused point cloud by distance or height."""

from __future__ import annotations

import logging
from typing import ClassVar

from pcfuse.core.step_base import BaseStep
from pcfuse.utils.io import read_ply, write_ascii_ply
from pcfuse.utils.visualization import colorize
from .config import ColorizeConfig
from .contracts import ColorizeInput, ColorizeOutput

logger = logging.getLogger(__name__)


class ColorizeStep(BaseStep[ColorizeInput, ColorizeOutput, ColorizeConfig]):
    name: ClassVar[str] = "colorize"
    input_type: ClassVar = ColorizeInput
    output_type: ClassVar = ColorizeOutput
    config_type: ClassVar = ColorizeConfig

    def validate_inputs(self, inputs: ColorizeInput) -> bool:
        if not inputs.point_cloud_path.exists():
            logger.error(f"PLY file not found: {inputs.point_cloud_path}")
            return False
        if inputs.point_cloud_path.suffix.lower() != ".ply":
            logger.error(f"Expected .ply file, got: {inputs.point_cloud_path.suffix}")
            return False
        return True

    def run(self, inputs: ColorizeInput) -> ColorizeOutput:
        output_dir = self.data_root / "processed" / "s02_colorize"
        output_dir.mkdir(parents=True, exist_ok=True)

        snapshot = read_ply(inputs.point_cloud_path)
        recolored = colorize(snapshot, self.config.mode)
        out_path = write_ascii_ply(output_dir / f"point_cloud_{self.config.mode}.ply", recolored)

        preview_path = None
        if self.config.save_preview:
            import matplotlib

            matplotlib.use("Agg")
            from pcfuse.utils.visualization import plot_point_cloud

            preview_path = output_dir / f"preview_{self.config.mode}.png"
            plot_point_cloud(
                recolored,
                title=f"{inputs.point_cloud_path.name} [{self.config.mode}]",
                stride=self.config.preview_stride,
                save_path=preview_path,
            )
            logger.info(f"Saved preview -> {preview_path}")

        return ColorizeOutput(
            colorized_path=out_path,
            mode=self.config.mode,
            num_points=len(recolored),
            preview_path=preview_path,
        )
