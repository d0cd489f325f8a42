"""Capture session: gates incoming frames into the fuser.

Frames arrive at capture rate and may come from any thread. A frame is
fused only while capturing is on and no other frame is being fused; a frame
that arrives during a pass is dropped, never queued.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from enum import Enum
from typing import Callable

from pcfuse.fusion.fuser import FrameFuser
from pcfuse.fusion.store import PointStore, Vertex
from .frame import Frame

logger = logging.getLogger(__name__)


class FrameOutcome(str, Enum):
    FUSED = "fused"
    NOT_CAPTURING = "not_capturing"
    DROPPED_BUSY = "dropped_busy"
    SKIPPED_MISSING_PLANES = "skipped_missing_planes"


class CaptureSession:
    """Single-writer front end of a ``FrameFuser``.

    Args:
        fuser: fuser owning the point store.
        on_fused: called with the newly inserted vertices after each fused
            frame, still inside the pass (e.g. to refresh a preview).
    """

    def __init__(
        self,
        fuser: FrameFuser | None = None,
        on_fused: Callable[[list[Vertex]], None] | None = None,
    ):
        self.fuser = fuser or FrameFuser()
        self.on_fused = on_fused
        self._capturing = threading.Event()
        self._busy = threading.Lock()
        self._stats_lock = threading.Lock()
        self._stats: Counter[str] = Counter()

    @property
    def store(self) -> PointStore:
        return self.fuser.store

    @property
    def is_capturing(self) -> bool:
        return self._capturing.is_set()

    @property
    def is_processing(self) -> bool:
        return self._busy.locked()

    def start(self) -> None:
        self._capturing.set()
        logger.info("Capture started")

    def stop(self) -> None:
        """Stop accepting frames. An in-flight pass still completes."""
        self._capturing.clear()
        logger.info("Capture stopped")

    def toggle(self) -> bool:
        if self.is_capturing:
            self.stop()
        else:
            self.start()
        return self.is_capturing

    def clear(self) -> None:
        self.store.clear()

    def submit(self, frame: Frame) -> FrameOutcome:
        """Offer one frame. Never blocks on a running pass."""
        if not self.is_capturing:
            return self._record(FrameOutcome.NOT_CAPTURING)
        if not self._busy.acquire(blocking=False):
            logger.debug(f"Dropping frame at t={frame.timestamp:.3f}: fusion busy")
            return self._record(FrameOutcome.DROPPED_BUSY)
        try:
            if not frame.is_complete:
                return self._record(FrameOutcome.SKIPPED_MISSING_PLANES)
            inserted = self.fuser.fuse(frame)
            if self.on_fused is not None:
                self.on_fused(inserted)
            with self._stats_lock:
                self._stats["inserted_points"] += len(inserted)
            return self._record(FrameOutcome.FUSED)
        finally:
            self._busy.release()

    def _record(self, outcome: FrameOutcome) -> FrameOutcome:
        with self._stats_lock:
            self._stats[outcome.value] += 1
        return outcome

    def stats(self) -> dict[str, int]:
        """Counts per ``FrameOutcome`` value plus ``inserted_points``."""
        with self._stats_lock:
            counts = dict(self._stats)
        for outcome in FrameOutcome:
            counts.setdefault(outcome.value, 0)
        counts.setdefault("inserted_points", 0)
        return counts
