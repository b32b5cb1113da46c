# craftcut_playground/dimensions.py
"""
Measurements: dataclasses, formatting and serialization for the
point-to-point measure tool.

Public API (minimal):
- DimStyle, MeasurePoint, Measurement
- measurement_between(p1, p2, style)
- format_length(value, style)
- measurement_label(distance, breakdown, style)
"""

from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Tuple, Optional, Dict, Any

from .geometry import euclid_len, round_half_up

Point = Tuple[float, float]

# ---- Style & Units ---------------------------------------------------------

@dataclass
class DimStyle:
    units: str = "mm"
    precision: int = 0
    breakdown_min: float = 10.0  # both legs must exceed this to show h × v
    color: str = "#3b82f6"

    def asdict(self) -> Dict[str, Any]:
        return asdict(self)

def format_length(L_model: float, style: DimStyle) -> str:
    suffix = f" {style.units}" if style.units else ""
    return f"{L_model:.{style.precision}f}{suffix}"

# ---- Measurement dataclasses -----------------------------------------------

@dataclass(frozen=True)
class MeasurePoint:
    x: float
    y: float
    panel_id: Optional[str] = None   # panel the click landed inside, if any
    snap: Optional[str] = None       # osnap kind the point snapped to

    @property
    def xy(self) -> Point:
        return (self.x, self.y)

@dataclass(frozen=True)
class Measurement:
    start: Point
    end: Point
    distance: int                      # Euclidean, rounded to the nearest mm
    dx: float = 0.0
    dy: float = 0.0
    breakdown: Optional[Tuple[int, int]] = None   # (horizontal, vertical)
    gap_between: Optional[Tuple[str, str]] = None  # panel ids for a gap read-out
    label: str = ""

    def asdict(self) -> Dict[str, Any]:
        return {
            "start": list(self.start),
            "end": list(self.end),
            "distance": self.distance,
            "dx": self.dx,
            "dy": self.dy,
            "breakdown": list(self.breakdown) if self.breakdown else None,
            "gap_between": list(self.gap_between) if self.gap_between else None,
            "label": self.label,
        }

# ---- Builders --------------------------------------------------------------

def measurement_label(distance: int, breakdown: Optional[Tuple[int, int]], style: DimStyle) -> str:
    lab = format_length(distance, style)
    if breakdown is not None:
        lab += f" ({breakdown[0]} × {breakdown[1]})"
    return lab

def measurement_between(
    p1: Point,
    p2: Point,
    style: Optional[DimStyle] = None,
    gap_between: Optional[Tuple[str, str]] = None,
) -> Measurement:
    style = style or DimStyle()
    dx = float(p2[0]) - float(p1[0])
    dy = float(p2[1]) - float(p1[1])
    distance = int(round_half_up(euclid_len(p1, p2)))
    breakdown = None
    if abs(dx) > style.breakdown_min and abs(dy) > style.breakdown_min:
        breakdown = (int(round_half_up(abs(dx))), int(round_half_up(abs(dy))))
    return Measurement(
        start=(float(p1[0]), float(p1[1])),
        end=(float(p2[0]), float(p2[1])),
        distance=distance,
        dx=dx,
        dy=dy,
        breakdown=breakdown,
        gap_between=gap_between,
        label=measurement_label(distance, breakdown, style),
    )
