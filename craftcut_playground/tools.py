"""Interactive tools for the CraftCut layout canvas."""
from __future__ import annotations

import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

Point = Tuple[float, float]


@dataclass(frozen=True)
class PointerEvent:
    """Toolkit-neutral pointer event in canvas pixels (Y down)."""

    x: float
    y: float
    button: str = "left"
    shift: bool = False
    ctrl: bool = False
    alt: bool = False
    meta: bool = False

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    @property
    def additive(self) -> bool:
        return self.shift or self.ctrl or self.meta


class GestureState(str, Enum):
    IDLE = "idle"
    PENDING_CLICK = "pending_click"
    DRAGGING = "dragging"
    EDITING = "editing"


class ClickGesture:
    """Tell a click, a drag and a double click apart.

    ``IDLE -> PENDING_CLICK`` on press. Moving past the drag threshold while
    the button is down turns it into ``DRAGGING``; a second press on the same
    target inside the double-click window turns it into ``EDITING``. A
    pending click that outlives the window falls back to ``IDLE``.
    """

    def __init__(
        self,
        drag_threshold: float = 4.0,
        double_click_window: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.drag_threshold = float(drag_threshold)
        self.double_click_window = float(double_click_window)
        self._clock = clock
        self.state = GestureState.IDLE
        self.target: Optional[str] = None
        self._press_pos: Optional[Point] = None
        self._press_time = 0.0
        self._down = False

    @property
    def button_down(self) -> bool:
        return self._down

    def press(self, target: Optional[str], pos: Point) -> GestureState:
        now = self._clock()
        if (
            self.state == GestureState.PENDING_CLICK
            and not self._down
            and target is not None
            and target == self.target
            and now - self._press_time <= self.double_click_window
        ):
            self.state = GestureState.EDITING
            self._down = True
            return self.state
        self.state = GestureState.PENDING_CLICK
        self.target = target
        self._press_pos = (float(pos[0]), float(pos[1]))
        self._press_time = now
        self._down = True
        return self.state

    def move(self, pos: Point) -> bool:
        """Feed a pointer move; returns ``True`` while dragging."""
        if not self._down or self._press_pos is None:
            return False
        if self.state == GestureState.PENDING_CLICK:
            dx = pos[0] - self._press_pos[0]
            dy = pos[1] - self._press_pos[1]
            if math.hypot(dx, dy) >= self.drag_threshold:
                self.state = GestureState.DRAGGING
        return self.state == GestureState.DRAGGING

    def release(self) -> GestureState:
        """End the press; returns the state the press was in."""
        was = self.state
        self._down = False
        if was == GestureState.DRAGGING:
            self.state = GestureState.IDLE
            self.target = None
        return was

    def expire(self) -> bool:
        """Drop a pending click whose double-click window has passed."""
        if self.state != GestureState.PENDING_CLICK or self._down:
            return False
        if self._clock() - self._press_time <= self.double_click_window:
            return False
        self.state = GestureState.IDLE
        self.target = None
        return True

    def finish_edit(self) -> None:
        if self.state == GestureState.EDITING:
            self.state = GestureState.IDLE
            self.target = None
            self._down = False

    def reset(self) -> None:
        self.state = GestureState.IDLE
        self.target = None
        self._press_pos = None
        self._down = False


class ToolBase:
    """Common interface every tool implements."""

    name = "base"

    def __init__(self, editor):
        self.editor = editor

    def mouse_press(self, event: PointerEvent):
        pass

    def mouse_move(self, event: PointerEvent):
        pass

    def mouse_release(self, event: PointerEvent):
        pass

    def key_press(self, key: str):
        pass

    def deactivate(self):
        pass


class SelectTool(ToolBase):
    """Hit-test panels, select them, drag them, or rubber-band select."""

    name = "select"

    def __init__(self, editor):
        super().__init__(editor)
        cfg = editor.config
        self.gesture = ClickGesture(cfg.drag_threshold, cfg.double_click_window, editor.clock)
        self._mode: Optional[str] = None  # "panel" | "marquee"
        self._press_world: Optional[Point] = None
        self._drag_started = False

    def mouse_press(self, event: PointerEvent):
        if event.button != "left":
            return
        point = self.editor.world_from_event(event)
        panel_id = self.editor.panel_under(point)
        state = self.gesture.press(panel_id, event.position)
        if state == GestureState.EDITING:
            self._mode = None
            self.editor.begin_label_edit(panel_id)
            return
        self._press_world = point
        self._drag_started = False
        if panel_id is None:
            self._mode = "marquee"
            self.editor.begin_marquee(point, additive=event.additive)
            return
        self._mode = "panel"
        if event.additive:
            self.editor.select(panel_id, additive=True)
        elif panel_id not in self.editor.selection:
            self.editor.select(panel_id)

    def mouse_move(self, event: PointerEvent):
        if self._mode is None:
            return
        if not self.gesture.move(event.position):
            return
        point = self.editor.world_from_event(event)
        if self._mode == "marquee":
            self.editor.update_marquee(point)
            return
        if not self._drag_started:
            self._drag_started = self.editor.begin_drag(self._press_world)
        if self._drag_started:
            self.editor.drag_to(point, disable_snap=event.alt)

    def mouse_release(self, event: PointerEvent):
        if self._mode is None:
            self.gesture.release()
            return
        self.gesture.release()
        if self._mode == "marquee":
            self.editor.end_marquee()
        elif self._drag_started:
            self.editor.end_drag()
        self._mode = None
        self._press_world = None
        self._drag_started = False

    def key_press(self, key: str):
        if key == "Escape" and self._mode is not None:
            if self._drag_started:
                self.editor.cancel_drag()
            elif self._mode == "marquee":
                self.editor.end_marquee()
            self.gesture.reset()
            self._mode = None
            self._drag_started = False
            return True
        return False

    def deactivate(self):
        if self._drag_started:
            self.editor.cancel_drag()
        elif self._mode == "marquee":
            self.editor.end_marquee()
        self.gesture.reset()
        self._mode = None
        self._press_world = None
        self._drag_started = False
