# craftcut_playground/osnap.py
"""
Object-snap helpers for picking panel features (corners, edge midpoints,
centers) under the cursor.

``panel_snap_targets`` lists the features of every panel as ``(kind, point)``
tuples; ``osnap_pick`` returns the closest one within a tolerance and
``osnap_pick_on_axis`` does the same while the cursor is locked to a
horizontal or vertical line.
"""

from __future__ import annotations
from typing import Optional, Sequence, Tuple
import math

from .document import Panel
from .geometry import panel_bounds, panel_features

Point = Tuple[float, float]
Target = Tuple[str, Point]


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def panel_snap_targets(panels: Sequence[Panel], thickness: float) -> list[Target]:
    targets: list[Target] = []
    for panel in panels:
        targets.extend(panel_features(panel_bounds(panel, thickness)))
    return targets


def osnap_pick(p: Point, targets: Sequence[Target], tol: float = 8.0) -> Tuple[Point, Optional[str]]:
    """
    Return the closest snap point to ``p`` from the supplied targets.

    A snap is accepted only if it falls within ``tol`` units of ``p``;
    otherwise ``p`` comes back unchanged with a ``None`` kind.
    """
    px, py = float(p[0]), float(p[1])
    best_point: Point | None = None
    best_dist = float(tol)
    best_kind: Optional[str] = None

    for kind, (qx, qy) in targets:
        candidate = (float(qx), float(qy))
        dist = _distance((px, py), candidate)
        if dist <= best_dist:
            best_point = candidate
            best_dist = dist
            best_kind = kind

    if best_point is None:
        return ((px, py), None)
    return (best_point, best_kind)


def osnap_pick_on_axis(
    p: Point, axis: str, targets: Sequence[Target], tol: float = 8.0
) -> Tuple[Point, Optional[str]]:
    """
    Snap along a locked line: ``axis == "x"`` keeps ``p[1]`` and moves x to the
    nearest feature x within ``tol``; ``"y"`` does the converse.
    """
    px, py = float(p[0]), float(p[1])
    idx = 0 if axis == "x" else 1
    value = (px, py)[idx]
    best_value: Optional[float] = None
    best_dist = float(tol)
    best_kind: Optional[str] = None
    for kind, point in targets:
        dist = abs(float(point[idx]) - value)
        if dist <= best_dist:
            best_value = float(point[idx])
            best_dist = dist
            best_kind = kind
    if best_value is None:
        return ((px, py), None)
    return ((best_value, py) if idx == 0 else (px, best_value), best_kind)
