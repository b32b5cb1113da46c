"""Per-frame coalescing of high-frequency input.

The host calls ``tick()`` once per display refresh. Pointer moves go
through a :class:`FrameThrottle`: only the newest pending move survives
until the next tick. Wheel and trackpad deltas are summed by a
:class:`WheelAccumulator` and applied to the viewport as one update.
"""
from __future__ import annotations

import logging
from typing import Callable, Generic, Optional, Tuple, TypeVar

from .viewport import Viewport

logger = logging.getLogger(__name__)

T = TypeVar("T")
Point = Tuple[float, float]


class FrameThrottle(Generic[T]):
    """Single-slot buffer: ``submit`` overwrites, ``tick`` flushes at most once."""

    def __init__(self, handler: Callable[[T], None]) -> None:
        self._handler = handler
        self._pending: Optional[T] = None
        self._has_pending = False
        self.dropped = 0

    @property
    def pending(self) -> bool:
        return self._has_pending

    def submit(self, item: T) -> None:
        if self._has_pending:
            self.dropped += 1
        self._pending = item
        self._has_pending = True

    def tick(self) -> bool:
        if not self._has_pending:
            return False
        item = self._pending
        self._pending = None
        self._has_pending = False
        self._handler(item)
        return True

    def cancel(self) -> None:
        self._pending = None
        self._has_pending = False


class WheelAccumulator:
    """Sum zoom/pan deltas between ticks and apply them in one go."""

    def __init__(self, viewport: Viewport) -> None:
        self.viewport = viewport
        self.zoom_delta = 0.0
        self.pan_dx = 0.0
        self.pan_dy = 0.0
        self.cursor: Optional[Point] = None

    @property
    def pending(self) -> bool:
        return bool(self.zoom_delta or self.pan_dx or self.pan_dy)

    def add_zoom(self, delta: float, cursor: Optional[Point] = None) -> None:
        self.zoom_delta += float(delta)
        # The latest cursor anchors the combined zoom
        if cursor is not None:
            self.cursor = (float(cursor[0]), float(cursor[1]))

    def add_pan(self, dx: float, dy: float) -> None:
        self.pan_dx += float(dx)
        self.pan_dy += float(dy)

    def tick(self) -> bool:
        if not self.pending:
            return False
        if self.zoom_delta:
            self.viewport.wheel_zoom(self.zoom_delta, self.cursor)
        if self.pan_dx or self.pan_dy:
            self.viewport.pan_by(self.pan_dx, self.pan_dy)
        logger.debug("Wheel flush zoom=%.1f pan=(%.1f, %.1f)", self.zoom_delta, self.pan_dx, self.pan_dy)
        self.zoom_delta = 0.0
        self.pan_dx = 0.0
        self.pan_dy = 0.0
        self.cursor = None
        return True
