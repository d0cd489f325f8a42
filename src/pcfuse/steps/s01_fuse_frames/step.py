"""Step 01: Fuse a depth/confidence/color recording into a deduplicated point cloud."""

from __future__ import annotations

import json
import logging
from typing import ClassVar

from pcfuse.capture.recording import iter_recording, list_frames
from pcfuse.capture.session import CaptureSession, FrameOutcome
from pcfuse.core.step_base import BaseStep
from pcfuse.fusion.fuser import FrameFuser
from pcfuse.fusion.store import PointStore
from pcfuse.utils.io import write_ascii_ply
from .config import FuseFramesConfig
from .contracts import FuseFramesInput, FuseFramesOutput

logger = logging.getLogger(__name__)


class FuseFramesStep(BaseStep[FuseFramesInput, FuseFramesOutput, FuseFramesConfig]):
    """Replay a recording through a capture session and export the fused cloud."""

    name: ClassVar[str] = "fuse_frames"
    input_type: ClassVar = FuseFramesInput
    output_type: ClassVar = FuseFramesOutput
    config_type: ClassVar = FuseFramesConfig

    def validate_inputs(self, inputs: FuseFramesInput) -> bool:
        if not inputs.recording_dir.is_dir():
            logger.error(f"Recording directory not found: {inputs.recording_dir}")
            return False
        if not list_frames(inputs.recording_dir):
            logger.error(f"No frame_*.npz files in {inputs.recording_dir}")
            return False
        return True

    def run(self, inputs: FuseFramesInput) -> FuseFramesOutput:
        output_dir = self.data_root / "interim" / "s01_fuse_frames"
        output_dir.mkdir(parents=True, exist_ok=True)

        store = PointStore()
        session = CaptureSession(FrameFuser(store, self.config.fusion))
        session.start()

        # --- 1. Replay frames ---
        num_frames = 0
        for i, frame in enumerate(iter_recording(inputs.recording_dir, self.config.max_frames)):
            num_frames += 1
            if i % self.config.frame_stride:
                continue
            outcome = session.submit(frame)
            if outcome is not FrameOutcome.FUSED:
                logger.warning(f"Frame {frame.pose.frame_name}: {outcome.value}")
        session.stop()

        stats = session.stats()
        logger.info(
            f"Fused {stats[FrameOutcome.FUSED.value]}/{num_frames} frames, "
            f"{store.count()} points"
        )

        # --- 2. Export ---
        snapshot = store.snapshot()
        ply_path = write_ascii_ply(output_dir / "point_cloud.ply", snapshot)

        metadata = {
            "source": str(inputs.recording_dir),
            "num_points": len(snapshot),
            "num_frames": num_frames,
            "frame_stride": self.config.frame_stride,
            "fusion": self.config.fusion.model_dump(),
            "session": stats,
        }
        metadata_path = output_dir / "metadata.json"
        with open(metadata_path, "w") as f:
            json.dump(metadata, f, indent=2)

        return FuseFramesOutput(
            point_cloud_path=ply_path,
            metadata_path=metadata_path,
            num_points=len(snapshot),
            num_frames=num_frames,
            num_fused_frames=stats[FrameOutcome.FUSED.value],
            num_skipped_frames=stats[FrameOutcome.SKIPPED_MISSING_PLANES.value],
        )
