"""Geometry helpers for panels in the front-view layout.

A panel's stored ``width``/``height`` are board dimensions; what the front
view shows depends on orientation. Everything interactive (snapping,
selection, alignment, measuring) works on the *true* visible bounds derived
here, while hit testing uses an enlarged, clickable area.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .document import Panel

Point = Tuple[float, float]


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle in world millimetres (Y up)."""

    left: float
    bottom: float
    right: float
    top: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bottom

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2.0

    @property
    def center_y(self) -> float:
        return (self.bottom + self.top) / 2.0

    @property
    def center(self) -> Point:
        return (self.center_x, self.center_y)

    def contains(self, point: Point) -> bool:
        return self.left <= point[0] <= self.right and self.bottom <= point[1] <= self.top

    def intersects(self, other: "Bounds") -> bool:
        return not (
            other.right < self.left
            or other.left > self.right
            or other.top < self.bottom
            or other.bottom > self.top
        )

    def union(self, other: "Bounds") -> "Bounds":
        return Bounds(
            min(self.left, other.left),
            min(self.bottom, other.bottom),
            max(self.right, other.right),
            max(self.top, other.top),
        )

    def expanded(self, dx: float, dy: float) -> "Bounds":
        return Bounds(self.left - dx, self.bottom - dy, self.right + dx, self.top + dy)

    def translated(self, dx: float, dy: float) -> "Bounds":
        return Bounds(self.left + dx, self.bottom + dy, self.right + dx, self.top + dy)

    @classmethod
    def from_points(cls, a: Point, b: Point) -> "Bounds":
        return cls(min(a[0], b[0]), min(a[1], b[1]), max(a[0], b[0]), max(a[1], b[1]))


def true_dimensions(panel: Panel, thickness: float) -> Tuple[float, float]:
    """Return the (width, height) the panel occupies in the front view."""
    orientation = panel.orientation or "horizontal"
    if orientation == "horizontal":
        # Shelf: the front edge is visible
        return (float(panel.width), float(thickness))
    if orientation == "vertical":
        return (float(thickness), float(panel.height))
    return (float(panel.width), float(panel.height))


def panel_bounds(panel: Panel, thickness: float) -> Bounds:
    w, h = true_dimensions(panel, thickness)
    x, y = float(panel.x), float(panel.y)
    return Bounds(x, y, x + w, y + h)


def hit_area(panel: Panel, thickness: float, min_size: float = 80.0) -> Bounds:
    """Grow the true bounds symmetrically until each side is at least ``min_size``."""
    bounds = panel_bounds(panel, thickness)
    dx = max(0.0, (min_size - bounds.width) / 2.0)
    dy = max(0.0, (min_size - bounds.height) / 2.0)
    return bounds.expanded(dx, dy)


def union_bounds(items: Iterable[Bounds]) -> Optional[Bounds]:
    result: Optional[Bounds] = None
    for bounds in items:
        result = bounds if result is None else result.union(bounds)
    return result


def bounds_array(panels: Sequence[Panel], thickness: float) -> np.ndarray:
    """Stack true bounds into an ``(n, 4)`` array of ``left, bottom, right, top``."""
    if not panels:
        return np.zeros((0, 4), dtype=float)
    x = np.array([float(p.x) for p in panels])
    y = np.array([float(p.y) for p in panels])
    dims = np.array([true_dimensions(p, thickness) for p in panels], dtype=float)
    return np.column_stack((x, y, x + dims[:, 0], y + dims[:, 1]))


def panels_intersecting(panels: Sequence[Panel], thickness: float, rect: Bounds) -> List[str]:
    """Ids of panels whose true bounds touch or overlap ``rect``."""
    arr = bounds_array(panels, thickness)
    if arr.shape[0] == 0:
        return []
    mask = ~(
        (arr[:, 2] < rect.left)
        | (arr[:, 0] > rect.right)
        | (arr[:, 3] < rect.bottom)
        | (arr[:, 1] > rect.top)
    )
    return [panels[i].id for i in np.flatnonzero(mask)]


def hit_test(panels: Sequence[Panel], thickness: float, point: Point, min_size: float = 80.0) -> Optional[str]:
    """Return the topmost panel whose hit area contains ``point``.

    Panels later in the list are drawn on top, so they win.
    """
    for panel in reversed(panels):
        if hit_area(panel, thickness, min_size).contains(point):
            return panel.id
    return None


def panel_at(panels: Sequence[Panel], thickness: float, point: Point) -> Optional[str]:
    """Topmost panel whose *true* bounds contain ``point``."""
    for panel in reversed(panels):
        if panel_bounds(panel, thickness).contains(point):
            return panel.id
    return None


def panel_features(bounds: Bounds) -> List[Tuple[str, Point]]:
    """Corners, edge midpoints and center, labelled like object-snap kinds."""
    l, b, r, t = bounds.left, bounds.bottom, bounds.right, bounds.top
    cx, cy = bounds.center
    return [
        ("end", (l, b)),
        ("end", (r, b)),
        ("end", (r, t)),
        ("end", (l, t)),
        ("mid", (cx, b)),
        ("mid", (r, cy)),
        ("mid", (cx, t)),
        ("mid", (l, cy)),
        ("center", (cx, cy)),
    ]


def euclid_len(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Return the Euclidean distance between two points."""
    return float(math.hypot(float(p2[0]) - float(p1[0]), float(p2[1]) - float(p1[1])))


def round_half_up(value: float, step: float = 1.0) -> float:
    """Round to the nearest multiple of ``step``, halves going up (``Math.round`` semantics)."""
    if step <= 0:
        return value
    return math.floor(value / step + 0.5) * step
