"""Gap read-outs between a panel and its neighbours.

``neighbour_gaps`` answers "how far is the nearest panel above/below/left/
right of this one" for the properties sidebar. ``distance_indicators`` gives
the short dimension lines drawn next to a panel while it is being dragged.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .geometry import Bounds, round_half_up

Point = Tuple[float, float]


@dataclass(frozen=True)
class NeighbourGap:
    distance: float
    panel_id: str


@dataclass(frozen=True)
class DistanceIndicator:
    start: Point
    end: Point
    distance: int
    orientation: str  # "horizontal" | "vertical"


def _overlap(a_lo: float, a_hi: float, b_lo: float, b_hi: float) -> bool:
    return max(a_lo, b_lo) < min(a_hi, b_hi)


def neighbour_gaps(target: Bounds, others: Sequence[Tuple[str, Bounds]]) -> Dict[str, Optional[NeighbourGap]]:
    """Nearest clear gap on each side of ``target`` (Y up, so "above" is larger y)."""
    best: Dict[str, Optional[NeighbourGap]] = {"above": None, "below": None, "left": None, "right": None}

    def consider(side: str, distance: float, pid: str) -> None:
        current = best[side]
        if current is None or distance < current.distance:
            best[side] = NeighbourGap(distance, pid)

    for pid, other in others:
        if _overlap(target.left, target.right, other.left, other.right):
            if other.bottom >= target.top:
                consider("above", other.bottom - target.top, pid)
            if other.top <= target.bottom:
                consider("below", target.bottom - other.top, pid)
        if _overlap(target.bottom, target.top, other.bottom, other.top):
            if other.right <= target.left:
                consider("left", target.left - other.right, pid)
            if other.left >= target.right:
                consider("right", other.left - target.right, pid)
    return best


def distance_indicators(moving: Bounds, others: Sequence[Bounds], max_distance: float = 200.0) -> List[DistanceIndicator]:
    """Dimension lines from ``moving`` to every neighbour closer than ``max_distance``."""
    out: List[DistanceIndicator] = []
    for other in others:
        if _overlap(moving.bottom, moving.top, other.bottom, other.top):
            y = (max(moving.bottom, other.bottom) + min(moving.top, other.top)) / 2.0
            if moving.right <= other.left:
                dist = other.left - moving.right
                if dist < max_distance:
                    out.append(DistanceIndicator((moving.right, y), (other.left, y), int(round_half_up(dist)), "horizontal"))
            elif moving.left >= other.right:
                dist = moving.left - other.right
                if dist < max_distance:
                    out.append(DistanceIndicator((other.right, y), (moving.left, y), int(round_half_up(dist)), "horizontal"))
        if _overlap(moving.left, moving.right, other.left, other.right):
            x = (max(moving.left, other.left) + min(moving.right, other.right)) / 2.0
            if moving.top <= other.bottom:
                dist = other.bottom - moving.top
                if dist < max_distance:
                    out.append(DistanceIndicator((x, moving.top), (x, other.bottom), int(round_half_up(dist)), "vertical"))
            elif moving.bottom >= other.top:
                dist = moving.bottom - other.top
                if dist < max_distance:
                    out.append(DistanceIndicator((x, other.top), (x, moving.bottom), int(round_half_up(dist)), "vertical"))
    return out
