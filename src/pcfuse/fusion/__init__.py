"""Frame-to-point-cloud fusion: plane sampling, color decoding, transforms, grid store."""

from .color import ycbcr_to_rgba
from .config import FusionConfig
from .grid import GridKey, grid_indices
from .planes import PixelBuffer, PlaneBuffer, PlaneDescriptor, YCbCrBuffer
from .store import PointSnapshot, PointStore, Vertex
from .transform import build_camera_transform
from .fuser import FrameFuser

__all__ = [
    "FrameFuser",
    "FusionConfig",
    "GridKey",
    "PixelBuffer",
    "PlaneBuffer",
    "PlaneDescriptor",
    "PointSnapshot",
    "PointStore",
    "Vertex",
    "YCbCrBuffer",
    "build_camera_transform",
    "grid_indices",
    "ycbcr_to_rgba",
]
