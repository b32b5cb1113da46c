"""World <-> screen transforms for the layout canvas.

World space is Y-up millimetres with the floor at ``y = 0``. The canvas is
an SVG-like viewport: ``pan`` names the world point shown at the center of
the canvas and ``zoom`` is screen pixels per millimetre.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import EditorConfig
from .document import ViewState
from .geometry import Bounds

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


def world_to_screen_y(y: float) -> float:
    return -y


def screen_to_world_y(y: float) -> float:
    # Reflection is its own inverse
    return -y


@dataclass
class ViewBox:
    x: float
    y: float
    width: float
    height: float


class Viewport:
    """Zoom/pan state plus the transforms that depend on it."""

    def __init__(
        self,
        canvas_width: float = 800.0,
        canvas_height: float = 600.0,
        config: Optional[EditorConfig] = None,
        view_state: Optional[ViewState] = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.canvas_width = float(canvas_width)
        self.canvas_height = float(canvas_height)
        state = view_state or ViewState(zoom=self.config.default_zoom)
        self.zoom = self.clamp_zoom(state.zoom)
        self.pan_x = float(state.pan_x)
        self.pan_y = float(state.pan_y)

    # ------------------------------------------------------------------
    # State
    def clamp_zoom(self, zoom: float) -> float:
        return max(self.config.min_zoom, min(self.config.max_zoom, float(zoom)))

    def view_state(self) -> ViewState:
        return ViewState(zoom=self.zoom, pan_x=self.pan_x, pan_y=self.pan_y)

    def apply_view_state(self, state: ViewState) -> None:
        self.zoom = self.clamp_zoom(state.zoom)
        self.pan_x = float(state.pan_x)
        self.pan_y = float(state.pan_y)

    def resize(self, canvas_width: float, canvas_height: float) -> None:
        if canvas_width > 0 and canvas_height > 0:
            self.canvas_width = float(canvas_width)
            self.canvas_height = float(canvas_height)

    def world_threshold(self, pixels: float) -> float:
        """Convert a screen-space tolerance into world millimetres."""
        return float(pixels) / max(self.zoom, 1e-9)

    # ------------------------------------------------------------------
    # Transforms
    def view_box(self) -> ViewBox:
        width = self.canvas_width / self.zoom
        height = self.canvas_height / self.zoom
        return ViewBox(
            x=-self.pan_x / self.zoom - width / 2.0,
            y=-self.pan_y / self.zoom - height / 2.0,
            width=width,
            height=height,
        )

    def screen_to_world(self, sx: float, sy: float) -> Point:
        box = self.view_box()
        svg_x = box.x + sx / self.zoom
        svg_y = box.y + sy / self.zoom
        return (svg_x, screen_to_world_y(svg_y))

    def world_to_screen(self, wx: float, wy: float) -> Point:
        box = self.view_box()
        return ((wx - box.x) * self.zoom, (world_to_screen_y(wy) - box.y) * self.zoom)

    def visible_world_rect(self) -> Bounds:
        a = self.screen_to_world(0.0, 0.0)
        b = self.screen_to_world(self.canvas_width, self.canvas_height)
        return Bounds.from_points(a, b)

    # ------------------------------------------------------------------
    # Zoom / pan
    def zoom_at(self, factor: float, cursor: Optional[Point] = None) -> None:
        """Multiply zoom by ``factor`` keeping the world point under ``cursor`` fixed."""
        self._apply_zoom(self.zoom * float(factor), cursor)

    def wheel_zoom(self, delta: float, cursor: Optional[Point] = None) -> None:
        steps = -float(delta) / 120.0
        self.zoom_at(self.config.wheel_zoom_base ** steps, cursor)

    def _apply_zoom(self, target: float, cursor: Optional[Point]) -> None:
        target = self.clamp_zoom(target)
        if abs(target - self.zoom) <= 1e-12:
            return
        if cursor is None:
            cursor = (self.canvas_width / 2.0, self.canvas_height / 2.0)
        sx, sy = float(cursor[0]), float(cursor[1])
        box = self.view_box()
        svg_x = box.x + sx / self.zoom
        svg_y = box.y + sy / self.zoom
        # Solve (s - pan - canvas/2) / zoom' == svg for the new pan
        self.zoom = target
        self.pan_x = sx - self.canvas_width / 2.0 - svg_x * target
        self.pan_y = sy - self.canvas_height / 2.0 - svg_y * target

    def set_zoom(self, zoom: float) -> None:
        self._apply_zoom(zoom, None)

    def zoom_in(self) -> None:
        self._apply_zoom(self.zoom + self.config.zoom_step, None)

    def zoom_out(self) -> None:
        self._apply_zoom(self.zoom - self.config.zoom_step, None)

    def reset(self) -> None:
        self.zoom = self.clamp_zoom(self.config.default_zoom)
        self.pan_x = 0.0
        self.pan_y = 0.0

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += float(dx)
        self.pan_y += float(dy)

    def fit_to(self, bounds: Optional[Bounds]) -> None:
        """Zoom (never past 100 %) and center so ``bounds`` fills the canvas."""
        if bounds is None:
            self.reset()
            return
        margin = self.config.fit_margin
        content_w = max(bounds.width + 2.0 * margin, 1.0)
        content_h = max(bounds.height + 2.0 * margin, 1.0)
        fit = min(self.canvas_width / content_w, self.canvas_height / content_h, 1.0)
        self.zoom = self.clamp_zoom(fit)
        cx, cy = bounds.center
        self.pan_x = -cx * self.zoom
        self.pan_y = -world_to_screen_y(cy) * self.zoom
        logger.debug("Fit viewport to %s at zoom %.3f", bounds, self.zoom)
