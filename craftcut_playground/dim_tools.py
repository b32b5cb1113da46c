# craftcut_playground/dim_tools.py
"""
Measure tool. Framework-light: it exposes simple callbacks through a
``ToolContext``; integrate by forwarding pointer events from your canvas
to the active tool.

Click once to pick the start, move to preview, click again to finish.
A third click starts a new measurement.
"""

from __future__ import annotations
from typing import Tuple, Optional, Callable, List, Sequence
from dataclasses import dataclass

from .dimensions import DimStyle, MeasurePoint, Measurement, measurement_between
from .document import Panel
from .geometry import Bounds, panel_at, panel_bounds
from .osnap import osnap_pick, osnap_pick_on_axis, panel_snap_targets
from .tools import PointerEvent

Point = Tuple[float, float]

@dataclass
class ToolContext:
    get_panels: Callable[[], Sequence[Panel]]
    get_thickness: Callable[[], float]
    get_zoom: Callable[[], float]
    get_style: Callable[[], DimStyle]
    update_status: Callable[[str], None]
    world_from_event: Callable[[PointerEvent], Point]  # pointer event -> world (x,y)
    snap_pixels: float = 15.0

def facing_gap(a: Bounds, b: Bounds, p1: Point, p2: Point) -> Optional[Tuple[Point, Point]]:
    """Shortest axis-aligned segment between the facing edges of ``a`` and ``b``.

    The segment sits at the middle of the span both panels share on the
    other axis (or between the clicked points when they share none).
    Overlapping bounds have no facing edges and give ``None``.
    """
    options: List[Tuple[float, Point, Point]] = []
    if b.left >= a.right or a.left >= b.right:
        lo, hi = max(a.bottom, b.bottom), min(a.top, b.top)
        y = (lo + hi) / 2.0 if lo <= hi else (p1[1] + p2[1]) / 2.0
        x1, x2 = (a.right, b.left) if b.left >= a.right else (a.left, b.right)
        options.append((abs(x2 - x1), (x1, y), (x2, y)))
    if b.bottom >= a.top or a.bottom >= b.top:
        lo, hi = max(a.left, b.left), min(a.right, b.right)
        x = (lo + hi) / 2.0 if lo <= hi else (p1[0] + p2[0]) / 2.0
        y1, y2 = (a.top, b.bottom) if b.bottom >= a.top else (a.bottom, b.top)
        options.append((abs(y2 - y1), (x, y1), (x, y2)))
    if not options:
        return None
    _, start, end = min(options, key=lambda o: o[0])
    return start, end

class MeasureTool:
    def __init__(self, ctx: ToolContext):
        self.ctx = ctx
        self.start: Optional[MeasurePoint] = None
        self.preview: Optional[Point] = None
        self.result: Optional[Measurement] = None

    @property
    def active(self) -> bool:
        return self.start is not None and self.result is None

    def _tol(self) -> float:
        return self.ctx.snap_pixels / max(self.ctx.get_zoom(), 1e-9)

    def _targets(self):
        return panel_snap_targets(self.ctx.get_panels(), self.ctx.get_thickness())

    def pick(self, raw: Point) -> MeasurePoint:
        """Snap a click to panel features, remembering which panel it landed in."""
        panel_id = panel_at(self.ctx.get_panels(), self.ctx.get_thickness(), raw)
        p, kind = osnap_pick(raw, self._targets(), self._tol())
        return MeasurePoint(p[0], p[1], panel_id=panel_id, snap=kind)

    def constrain(self, raw: Point, free: bool = False) -> Point:
        if self.start is None:
            return raw
        if free:
            p, _ = osnap_pick(raw, self._targets(), self._tol())
            return p
        dx = abs(raw[0] - self.start.x)
        dy = abs(raw[1] - self.start.y)
        if dx >= dy:
            p, _ = osnap_pick_on_axis((raw[0], self.start.y), "x", self._targets(), self._tol())
        else:
            p, _ = osnap_pick_on_axis((self.start.x, raw[1]), "y", self._targets(), self._tol())
        return p

    # ---- world-space API -------------------------------------------------

    def press_at(self, raw: Point, free: bool = False) -> Optional[Measurement]:
        if self.start is None or self.result is not None:
            self.result = None
            self.start = self.pick(raw)
            self.preview = self.start.xy
            self.ctx.update_status("Measure: pick second point")
            return None

        end_id = panel_at(self.ctx.get_panels(), self.ctx.get_thickness(), raw)
        style = self.ctx.get_style()
        measurement: Optional[Measurement] = None
        if self.start.panel_id and end_id and end_id != self.start.panel_id:
            a = self._bounds_of(self.start.panel_id)
            b = self._bounds_of(end_id)
            seg = facing_gap(a, b, self.start.xy, raw) if a and b else None
            if seg is not None:
                measurement = measurement_between(seg[0], seg[1], style, gap_between=(self.start.panel_id, end_id))
        if measurement is None:
            end = self.constrain(raw, free)
            measurement = measurement_between(self.start.xy, end, style)
        self.result = measurement
        self.preview = None
        self.ctx.update_status(f"Measure: {measurement.label}")
        return measurement

    def move_to(self, raw: Point, free: bool = False) -> Optional[Measurement]:
        if not self.active:
            return None
        self.preview = self.constrain(raw, free)
        return measurement_between(self.start.xy, self.preview, self.ctx.get_style())

    def _bounds_of(self, panel_id: str) -> Optional[Bounds]:
        for panel in self.ctx.get_panels():
            if panel.id == panel_id:
                return panel_bounds(panel, self.ctx.get_thickness())
        return None

    # ---- event API -------------------------------------------------------

    def mouse_press(self, ev: PointerEvent):
        return self.press_at(self.ctx.world_from_event(ev), free=ev.alt)

    def mouse_move(self, ev: PointerEvent):
        return self.move_to(self.ctx.world_from_event(ev), free=ev.alt)

    def mouse_release(self, ev: PointerEvent):
        return None

    def key_press(self, key: str):
        if key == "Escape" and self.start is not None:
            self.deactivate()
            return True
        return False

    def deactivate(self):
        self.start = None
        self.preview = None
        self.result = None
        self.ctx.update_status("")
