"""Typed access to packed multi-plane pixel buffers.

A buffer is one contiguous block of bytes holding one or more planes. Each
plane is described by its byte offset, pixel size, row stride and element
type, so rows may carry padding past ``width * itemsize`` bytes. Reads must
happen inside ``with buffer.locked():``; the lock is released on every exit
path, including exceptions.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

from .color import ycbcr_to_rgba


@dataclass(frozen=True)
class PlaneDescriptor:
    """Layout of one plane inside a packed buffer."""

    offset: int
    width: int
    height: int
    bytes_per_row: int
    dtype: str = "u1"
    components: int = 1

    @property
    def itemsize(self) -> int:
        return np.dtype(self.dtype).itemsize

    @property
    def nbytes(self) -> int:
        """Bytes spanned by the plane, ignoring padding after the last row."""
        if self.height == 0:
            return 0
        return (self.height - 1) * self.bytes_per_row + self.width * self.components * self.itemsize


def pack_planes(arrays: Sequence[np.ndarray], row_padding: int = 0) -> tuple[bytearray, list[PlaneDescriptor]]:
    """Pack 2D (or 2D x components) arrays back to back with padded rows.

    Returns the raw buffer and one descriptor per plane.
    """
    descriptors: list[PlaneDescriptor] = []
    chunks: list[bytes] = []
    offset = 0
    for arr in arrays:
        arr = np.ascontiguousarray(arr)
        height, width = arr.shape[:2]
        components = arr.shape[2] if arr.ndim == 3 else 1
        row_bytes = width * components * arr.itemsize
        bytes_per_row = row_bytes + row_padding

        plane = np.zeros((height, bytes_per_row), dtype=np.uint8)
        plane[:, :row_bytes] = arr.reshape(height, -1).view(np.uint8)
        chunks.append(plane.tobytes())

        descriptors.append(PlaneDescriptor(
            offset=offset, width=width, height=height, bytes_per_row=bytes_per_row,
            dtype=arr.dtype.str, components=components,
        ))
        offset += height * bytes_per_row
    return bytearray(b"".join(chunks)), descriptors


class PlaneBuffer:
    """A locked-read view over a packed multi-plane buffer."""

    def __init__(self, data: bytes | bytearray | memoryview, planes: Sequence[PlaneDescriptor]):
        if not planes:
            raise ValueError("A plane buffer needs at least one plane")
        for i, plane in enumerate(planes):
            if plane.offset + plane.nbytes > len(data):
                raise ValueError(f"Plane {i} extends past the end of the buffer")
            if plane.bytes_per_row < plane.width * plane.components * plane.itemsize:
                raise ValueError(f"Plane {i} row stride is shorter than one row")
        self._data = data
        self._planes = tuple(planes)
        self._lock = threading.RLock()
        self._lock_depth = 0
        self._views: tuple[np.ndarray, ...] | None = None

    @property
    def planes(self) -> tuple[PlaneDescriptor, ...]:
        return self._planes

    @property
    def width(self) -> int:
        return self._planes[0].width

    @property
    def height(self) -> int:
        return self._planes[0].height

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) of the first plane."""
        return self.width, self.height

    @property
    def is_locked(self) -> bool:
        return self._views is not None

    @contextmanager
    def locked(self) -> Iterator[PlaneBuffer]:
        """Hold the buffer's exclusive read lock for the duration of the block.

        Re-entrant within one thread; views are dropped on the outermost exit.
        """
        with self._lock:
            if self._lock_depth == 0:
                self._views = tuple(self._make_view(p) for p in self._planes)
            self._lock_depth += 1
            try:
                yield self
            finally:
                self._lock_depth -= 1
                if self._lock_depth == 0:
                    self._views = None

    def _make_view(self, plane: PlaneDescriptor) -> np.ndarray:
        itemsize = plane.itemsize
        if plane.components == 1:
            shape: tuple[int, ...] = (plane.height, plane.width)
            strides: tuple[int, ...] = (plane.bytes_per_row, itemsize)
        else:
            shape = (plane.height, plane.width, plane.components)
            strides = (plane.bytes_per_row, itemsize * plane.components, itemsize)
        view = np.ndarray(
            shape=shape, dtype=np.dtype(plane.dtype), buffer=self._data,
            offset=plane.offset, strides=strides,
        )
        view.flags.writeable = False
        return view

    def plane(self, index: int = 0) -> np.ndarray:
        """Strided read-only view of a plane. Only valid while locked."""
        if self._views is None:
            raise RuntimeError("Plane buffer must be locked before reading")
        return self._views[index]

    def value(self, col: int, row: int, plane: int = 0):
        """Sample at (col, row). The caller guarantees the coordinate is in range."""
        return self.plane(plane)[row, col]


class PixelBuffer(PlaneBuffer):
    """Single-plane buffer of scalar samples (depth, confidence)."""

    @classmethod
    def from_array(cls, arr: np.ndarray, row_padding: int = 0) -> PixelBuffer:
        if arr.ndim != 2:
            raise ValueError(f"Expected a 2D array, got shape {arr.shape}")
        data, planes = pack_planes([arr], row_padding=row_padding)
        return cls(data, planes)

    def to_array(self) -> np.ndarray:
        """Copy the plane out as a dense array (locks internally)."""
        with self.locked():
            return np.array(self.plane(0))


class YCbCrBuffer(PlaneBuffer):
    """Bi-planar 4:2:0 image: full resolution luma, half resolution interleaved CbCr."""

    LUMA = 0
    CHROMA = 1

    def __init__(self, data, planes: Sequence[PlaneDescriptor]):
        super().__init__(data, planes)
        if len(self.planes) != 2:
            raise ValueError("A YCbCr buffer needs a luma and a chroma plane")
        if self.planes[self.CHROMA].components != 2:
            raise ValueError("Chroma plane must interleave Cb and Cr")

    @classmethod
    def from_planes(cls, luma: np.ndarray, chroma: np.ndarray, row_padding: int = 0) -> YCbCrBuffer:
        luma = np.asarray(luma, dtype=np.uint8)
        chroma = np.asarray(chroma, dtype=np.uint8)
        h, w = luma.shape
        if chroma.shape != ((h + 1) // 2, (w + 1) // 2, 2):
            raise ValueError(
                f"Chroma plane shape {chroma.shape} does not match 4:2:0 luma {luma.shape}"
            )
        data, planes = pack_planes([luma, chroma], row_padding=row_padding)
        return cls(data, planes)

    def ycbcr(self, col: int, row: int) -> tuple[int, int, int]:
        """Raw (Y, Cb, Cr) at a full resolution pixel."""
        y = self.plane(self.LUMA)[row, col]
        cb, cr = self.plane(self.CHROMA)[row // 2, col // 2]
        return int(y), int(cb), int(cr)

    def color(self, col: int, row: int) -> np.ndarray:
        """Decoded RGBA in [0, 1] at a full resolution pixel."""
        return ycbcr_to_rgba(*self.ycbcr(col, row))

    def colors(self, cols: np.ndarray, rows: np.ndarray) -> np.ndarray:
        """Vectorized ``color`` for index arrays; returns (N, 4) float32."""
        y = self.plane(self.LUMA)[rows, cols]
        chroma = self.plane(self.CHROMA)[rows // 2, cols // 2]
        return ycbcr_to_rgba(y, chroma[..., 0], chroma[..., 1])
