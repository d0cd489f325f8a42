"""Camera-to-world transform for unprojected depth pixels.

Unprojecting through the intrinsics yields points in image convention
(X right, Y down, Z forward). The pose is a camera-to-world transform in the
sensor's native camera convention (Y up, Z backward), so points go through
an axis flip first. The display orientation enters twice: once through the
view matrix the compositor used for the displayed image, and once through
the matching rotation about the viewing axis.
"""

from __future__ import annotations

import math

import numpy as np

from pcfuse.core.contracts import CameraPose, Orientation
from pcfuse.utils.geometry import rotation_z

AXIS_FLIP = np.diag([1.0, -1.0, -1.0, 1.0])

_ORIENTATION_ANGLES = {
    Orientation.LANDSCAPE_RIGHT: 0.0,
    Orientation.LANDSCAPE_LEFT: math.pi,
    Orientation.PORTRAIT: math.pi / 2,
    Orientation.PORTRAIT_UPSIDE_DOWN: -math.pi / 2,
}


def orientation_angle(orientation: Orientation) -> float:
    """Rotation about the viewing axis, in radians, for a display orientation."""
    return _ORIENTATION_ANGLES[Orientation(orientation)]


def orientation_rotation(orientation: Orientation) -> np.ndarray:
    return rotation_z(orientation_angle(orientation))


def view_matrix(pose: np.ndarray, orientation: Orientation) -> np.ndarray:
    """World-to-view matrix for the image as displayed in ``orientation``."""
    return np.linalg.inv(np.asarray(pose, dtype=np.float64) @ orientation_rotation(orientation))


def rotate_to_camera(orientation: Orientation) -> np.ndarray:
    """Axis flip followed by the orientation rotation."""
    return AXIS_FLIP @ orientation_rotation(orientation)


def build_camera_transform(pose: CameraPose | np.ndarray, orientation: Orientation | None = None) -> np.ndarray:
    """Compose the 4x4 transform mapping image-convention camera points to world.

    ``orientation`` defaults to the one recorded on a ``CameraPose``.
    """
    if isinstance(pose, CameraPose):
        if orientation is None:
            orientation = pose.orientation
        pose = pose.matrix()
    if orientation is None:
        orientation = Orientation.LANDSCAPE_RIGHT
    return np.linalg.inv(view_matrix(pose, orientation)) @ rotate_to_camera(orientation)
