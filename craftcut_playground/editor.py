"""The layout editor: one open design plus everything needed to edit it.

:class:`Editor` is what a UI shell talks to. It owns the viewport, the
selection, the undo history, the snap engine and the active tool, and it
applies every command to an explicit :class:`~.document.PanelStore`.

Every command that changes panels or settings records one history entry
before it mutates anything, so one undo step is one user action. Commands
that cannot apply (missing ids, too small a selection) are ignored and
return ``False``/``None`` rather than raising.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .config import EditorConfig
from .dim_tools import MeasureTool, ToolContext
from .dimensions import DimStyle, Measurement
from .document import (
    Panel,
    PanelStore,
    ViewState,
    clean_panel_changes,
    generate_panel_id,
)
from .edit_ops import TRANSFORM_OPS, available_ops, minimum_selection
from .gaps import DistanceIndicator, NeighbourGap, distance_indicators, neighbour_gaps
from .geometry import Bounds, hit_test, panel_bounds, round_half_up, union_bounds
from .history import HistoryStore
from .selection import SelectionModel
from .snapping import SnapEngine, SnapGuide, SnapResult, stationary_bounds
from .throttle import FrameThrottle, WheelAccumulator
from .tools import PointerEvent, SelectTool
from .viewport import Viewport

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

RESIZE_HANDLES = ("n", "s", "e", "w", "ne", "nw", "se", "sw")

# Edges a user can pull, per orientation: only dimensions visible from the front
_RESIZABLE = {"horizontal": "ew", "vertical": "ns", "back": "nsew"}

_ARROWS = {
    "ArrowLeft": (-1, 0),
    "ArrowRight": (1, 0),
    "ArrowUp": (0, 1),
    "ArrowDown": (0, -1),
}


@dataclass
class _DragSession:
    ids: List[str]
    origins: Dict[str, Point]
    start_bounds: Bounds
    grab: Point


@dataclass
class _ResizeSession:
    panel_id: str
    handle: str
    press: Point
    start: Tuple[float, float, float, float]


class Editor:
    """Interaction engine for one design."""

    def __init__(
        self,
        store: Optional[PanelStore] = None,
        config: Optional[EditorConfig] = None,
        canvas_width: float = 800.0,
        canvas_height: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store or PanelStore()
        self.config = config or EditorConfig()
        self.clock = clock
        self.viewport = Viewport(canvas_width, canvas_height, self.config, self.store.view_state)
        self.selection = SelectionModel()
        self.history = HistoryStore(self.config.max_history)
        self.snapper = SnapEngine(self.config)
        self.style = DimStyle(units=self.store.settings.units or "mm", breakdown_min=self.config.measure_breakdown_min)

        self.clipboard: List[Panel] = []
        self._paste_count = 0
        self.guides: List[SnapGuide] = []
        self.indicators: List[DistanceIndicator] = []
        self.status_message = ""
        self.editing_panel_id: Optional[str] = None
        self.label_draft: Optional[str] = None
        self._drag: Optional[_DragSession] = None
        self._resize: Optional[_ResizeSession] = None

        self._tools: Dict[str, Any] = {
            "select": SelectTool(self),
            "measure": MeasureTool(
                ToolContext(
                    get_panels=lambda: self.store.panels,
                    get_thickness=lambda: self.store.thickness,
                    get_zoom=lambda: self.viewport.zoom,
                    get_style=lambda: self.style,
                    update_status=self.post_status_message,
                    world_from_event=self.world_from_event,
                    snap_pixels=self.config.snap_threshold,
                )
            ),
        }
        self._tool_name = "select"
        self._moves: FrameThrottle[PointerEvent] = FrameThrottle(self._dispatch_move)
        self.wheel_input = WheelAccumulator(self.viewport)
        self._sync_view()

    # ------------------------------------------------------------------
    # Basic accessors
    @property
    def panels(self) -> List[Panel]:
        return self.store.panels

    @property
    def thickness(self) -> float:
        return self.store.thickness

    def post_status_message(self, message: str) -> None:
        self.status_message = message
        if message:
            logger.info(message)

    def _push_history(self) -> None:
        # A command never lands inside an open drag or resize
        self._settle_gesture()
        self.history.save(self.store)

    def _settle_gesture(self) -> bool:
        """Cancel any open drag or resize; ``True`` if one was open."""
        cancelled = self.cancel_drag()
        return self.cancel_resize() or cancelled

    def _sync_view(self) -> None:
        self.store.view_state = self.viewport.view_state()

    def panel_under(self, point: Point) -> Optional[str]:
        return hit_test(self.store.panels, self.thickness, point, self.config.min_hit_size)

    def world_from_event(self, event: PointerEvent) -> Point:
        return self.viewport.screen_to_world(event.x, event.y)

    # ------------------------------------------------------------------
    # Panel commands
    def add_panel(self, orientation: str = "horizontal", **fields: Any) -> Panel:
        """Add a panel at the next staggered slot and select it."""
        n = len(self.store)
        values: Dict[str, Any] = {
            "label": f"Panel {n + 1}",
            "x": 50.0 + (n % 5) * 30.0,
            "y": 50.0 + (n // 5) * 30.0,
            "width": self.config.default_width,
            "height": self.config.default_height,
            "orientation": orientation,
        }
        values.update(fields)
        values = clean_panel_changes(values)
        self._push_history()
        panel = self.store.add(Panel(id=generate_panel_id(), **values))
        self.selection.select(panel.id)
        self.post_status_message(f"Added {panel.label}")
        return panel

    def update_panel(self, panel_id: str, **changes: Any) -> bool:
        """Apply a sidebar edit; invalid values raise ``ValueError``."""
        if panel_id not in self.store:
            logger.debug("update_panel: no panel %s", panel_id)
            return False
        cleaned = clean_panel_changes(changes)
        if not cleaned:
            return False
        self._push_history()
        self.store.update(panel_id, **cleaned)
        return True

    def rename(self, panel_id: str, label: str) -> bool:
        panel = self.store.get(panel_id)
        if panel is None or panel.label == label:
            return False
        return self.update_panel(panel_id, label=label)

    def delete(self, ids: Optional[Sequence[str]] = None) -> int:
        """Delete ``ids`` (default: the selection)."""
        targets = [p.id for p in self.store.find_many(ids if ids is not None else self.selection.ids())]
        if not targets:
            return 0
        self._push_history()
        removed = self.store.delete(targets)
        self.selection.discard(targets)
        self.post_status_message(f"Deleted {removed} {'panel' if removed == 1 else 'panels'}")
        return removed

    def _clones(self, sources: Sequence[Panel], offset: float) -> List[Panel]:
        clones = []
        for source in sources:
            clone = source.copy()
            clone.id = generate_panel_id()
            clone.label = f"{source.label} copy"
            clone.x = source.x + offset
            clone.y = source.y + offset
            clones.append(clone)
        return clones

    def duplicate(self) -> List[Panel]:
        sources = self.selection.selected_panels(self.store.panels)
        if not sources:
            return []
        self._push_history()
        added = self.store.add_many(self._clones(sources, self.config.paste_offset))
        self.selection.select_all(p.id for p in added)
        self.post_status_message(f"Duplicated {len(added)} {'panel' if len(added) == 1 else 'panels'}")
        return added

    def copy(self) -> int:
        sources = self.selection.selected_panels(self.store.panels)
        if not sources:
            return 0
        self.clipboard = [p.copy() for p in sources]
        self._paste_count = 0
        self.post_status_message(f"Copied {len(sources)} {'panel' if len(sources) == 1 else 'panels'}")
        return len(sources)

    def cut(self) -> int:
        copied = self.copy()
        if copied:
            self.delete()
        return copied

    def paste(self) -> List[Panel]:
        """Paste the clipboard; each further paste lands one offset further."""
        if not self.clipboard:
            return []
        self._paste_count += 1
        self._push_history()
        added = self.store.add_many(self._clones(self.clipboard, self.config.paste_offset * self._paste_count))
        self.selection.select_all(p.id for p in added)
        self.post_status_message(f"Pasted {len(added)} {'panel' if len(added) == 1 else 'panels'}")
        return added

    def nudge(self, dx: int, dy: int, large: bool = False) -> bool:
        """Move the selection by whole nudge steps (Y up)."""
        selected = self.selection.selected_panels(self.store.panels)
        if not selected or (dx == 0 and dy == 0):
            return False
        step = self.config.nudge_large if large else self.config.nudge
        self._push_history()
        for panel in selected:
            panel.x += dx * step
            panel.y += dy * step
        return True

    # ------------------------------------------------------------------
    # Transform ops
    def apply_op(self, name: str) -> bool:
        op = TRANSFORM_OPS.get(name)
        if op is None:
            raise ValueError(f"Unknown transform '{name}'")
        selected = self.selection.selected_panels(self.store.panels)
        if len(selected) < minimum_selection(name):
            logger.debug("%s needs %d panels, have %d", name, minimum_selection(name), len(selected))
            return False
        self._push_history()
        changed = op(selected, self.thickness)
        if not changed:
            self.history.drop_last()
            return False
        self.post_status_message(f"{name.replace('_', ' ').capitalize()} ({len(selected)} panels)")
        return True

    def available_ops(self) -> List[str]:
        return available_ops(len(self.selection.ids(self.store.panels)))

    def align_left(self) -> bool:
        return self.apply_op("align_left")

    def align_right(self) -> bool:
        return self.apply_op("align_right")

    def align_top(self) -> bool:
        return self.apply_op("align_top")

    def align_bottom(self) -> bool:
        return self.apply_op("align_bottom")

    def align_center_h(self) -> bool:
        return self.apply_op("align_center_h")

    def align_center_v(self) -> bool:
        return self.apply_op("align_center_v")

    def distribute_h(self) -> bool:
        return self.apply_op("distribute_h")

    def distribute_v(self) -> bool:
        return self.apply_op("distribute_v")

    def match_width(self) -> bool:
        return self.apply_op("match_width")

    def match_height(self) -> bool:
        return self.apply_op("match_height")

    # ------------------------------------------------------------------
    # Undo / redo
    def undo(self) -> bool:
        # Undo during a gesture only takes back the gesture itself
        if self._settle_gesture():
            return True
        if not self.history.undo(self.store):
            return False
        self.selection.prune(self.store.ids())
        self.post_status_message("Undo")
        return True

    def redo(self) -> bool:
        self._settle_gesture()
        if not self.history.redo(self.store):
            return False
        self.selection.prune(self.store.ids())
        self.post_status_message("Redo")
        return True

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    # ------------------------------------------------------------------
    # Selection
    def select(self, panel_id: Optional[str], additive: bool = False) -> None:
        if panel_id is not None and panel_id not in self.store:
            return
        self.selection.select(panel_id, additive)

    def toggle(self, panel_id: str) -> None:
        self.select(panel_id, additive=True)

    def select_all(self) -> None:
        self.selection.select_all(self.store.ids())

    def clear_selection(self) -> None:
        self.selection.clear()

    def selected_ids(self) -> List[str]:
        return self.selection.ids(self.store.panels)

    def selected_panels(self) -> List[Panel]:
        return self.selection.selected_panels(self.store.panels)

    def selection_bounds(self) -> Optional[Bounds]:
        return self.selection.bounds(self.store.panels, self.thickness)

    def begin_marquee(self, point: Point, additive: bool = False) -> None:
        self.selection.begin_marquee(point, additive)

    def update_marquee(self, point: Point) -> List[str]:
        return self.selection.update_marquee(point, self.store.panels, self.thickness)

    def end_marquee(self) -> Optional[Bounds]:
        return self.selection.end_marquee()

    def neighbour_gaps(self, panel_id: Optional[str] = None) -> Dict[str, Optional[NeighbourGap]]:
        """Gaps around ``panel_id`` (default: the primary selected panel)."""
        panel = self.store.get(panel_id or self.selection.primary)
        if panel is None:
            return {"above": None, "below": None, "left": None, "right": None}
        others = [(p.id, panel_bounds(p, self.thickness)) for p in self.store.panels if p.id != panel.id]
        return neighbour_gaps(panel_bounds(panel, self.thickness), others)

    # ------------------------------------------------------------------
    # Drag gesture
    @property
    def dragging(self) -> bool:
        return self._drag is not None

    def begin_drag(self, point: Point) -> bool:
        """Start moving the selection; ``point`` is the world grab point."""
        if self._drag is not None:
            return True
        selected = self.selection.selected_panels(self.store.panels)
        bounds = union_bounds(panel_bounds(p, self.thickness) for p in selected)
        if bounds is None:
            return False
        self._push_history()
        self._drag = _DragSession(
            ids=[p.id for p in selected],
            origins={p.id: (p.x, p.y) for p in selected},
            start_bounds=bounds,
            grab=(point[0] - bounds.left, point[1] - bounds.bottom),
        )
        return True

    def drag_to(self, point: Point, disable_snap: bool = False) -> Optional[SnapResult]:
        drag = self._drag
        if drag is None:
            return None
        raw_x = point[0] - drag.grab[0]
        raw_y = point[1] - drag.grab[1]
        stationary = stationary_bounds(self.store.panels, self.thickness, exclude=drag.ids)
        result = self.snapper.snap(
            drag.start_bounds.width,
            drag.start_bounds.height,
            raw_x,
            raw_y,
            stationary,
            zoom=self.viewport.zoom,
            disable=disable_snap,
        )
        dx = result.x - drag.start_bounds.left
        dy = result.y - drag.start_bounds.bottom
        for panel in self.store.find_many(drag.ids):
            ox, oy = drag.origins[panel.id]
            panel.x = ox + dx
            panel.y = oy + dy
        self.guides = result.guides
        self.indicators = distance_indicators(
            drag.start_bounds.translated(dx, dy), stationary, self.config.distance_indicator_max
        )
        return result

    def end_drag(self) -> bool:
        drag = self._drag
        if drag is None:
            return False
        self._drag = None
        self.guides = []
        self.indicators = []
        moved = any(
            (p.x, p.y) != drag.origins[p.id] for p in self.store.find_many(drag.ids)
        )
        if not moved:
            self.history.drop_last()
            return False
        self.post_status_message(f"Moved {len(drag.ids)} {'panel' if len(drag.ids) == 1 else 'panels'}")
        return True

    def cancel_drag(self) -> bool:
        """Put the dragged panels back where they started."""
        drag = self._drag
        if drag is None:
            return False
        self._drag = None
        for panel in self.store.find_many(drag.ids):
            panel.x, panel.y = drag.origins[panel.id]
        self.history.drop_last()
        self.guides = []
        self.indicators = []
        self.post_status_message("Move cancelled")
        return True

    # ------------------------------------------------------------------
    # Resize gesture
    def begin_resize(self, panel_id: str, handle: str, point: Point) -> bool:
        if handle not in RESIZE_HANDLES:
            raise ValueError(f"Unknown resize handle '{handle}'")
        panel = self.store.get(panel_id)
        if panel is None or self._resize is not None:
            return False
        self._push_history()
        self.selection.select(panel_id)
        self._resize = _ResizeSession(
            panel_id=panel_id,
            handle=handle,
            press=(float(point[0]), float(point[1])),
            start=(panel.x, panel.y, panel.width, panel.height),
        )
        return True

    def resize_to(self, point: Point) -> Optional[Panel]:
        session = self._resize
        if session is None:
            return None
        panel = self.store.get(session.panel_id)
        if panel is None:
            return None
        x, y, w, h = session.start
        dx = point[0] - session.press[0]
        dy = point[1] - session.press[1]
        grid = self.config.resize_grid
        minimum = self.config.min_panel_size
        allowed = _RESIZABLE.get(panel.orientation, "nsew")
        handle = session.handle
        new_x, new_y, new_w, new_h = x, y, w, h
        if "e" in handle and "e" in allowed:
            new_w = max(minimum, round_half_up(w + dx, grid))
        if "w" in handle and "w" in allowed:
            new_w = max(minimum, round_half_up(w - dx, grid))
            new_x = x + w - new_w
        if "n" in handle and "n" in allowed:
            new_h = max(minimum, round_half_up(h + dy, grid))
        if "s" in handle and "s" in allowed:
            new_h = max(minimum, round_half_up(h - dy, grid))
            new_y = y + h - new_h
        panel.x, panel.y, panel.width, panel.height = new_x, new_y, new_w, new_h
        return panel

    def end_resize(self) -> bool:
        session = self._resize
        if session is None:
            return False
        self._resize = None
        panel = self.store.get(session.panel_id)
        if panel is None or (panel.x, panel.y, panel.width, panel.height) == session.start:
            self.history.drop_last()
            return False
        self.post_status_message(f"Resized {panel.label} to {panel.width:g} × {panel.height:g}")
        return True

    def cancel_resize(self) -> bool:
        session = self._resize
        if session is None:
            return False
        self._resize = None
        panel = self.store.get(session.panel_id)
        if panel is not None:
            panel.x, panel.y, panel.width, panel.height = session.start
        self.history.drop_last()
        return True

    # ------------------------------------------------------------------
    # Inline label editing
    def begin_label_edit(self, panel_id: Optional[str]) -> bool:
        panel = self.store.get(panel_id)
        if panel is None:
            return False
        self.editing_panel_id = panel.id
        self.label_draft = panel.label
        return True

    def set_label_draft(self, text: str) -> None:
        if self.editing_panel_id is not None:
            self.label_draft = text

    def commit_label_edit(self, text: Optional[str] = None) -> bool:
        panel_id = self.editing_panel_id
        if panel_id is None:
            return False
        label = self.label_draft if text is None else text
        self._end_label_edit()
        return self.rename(panel_id, label or "")

    def cancel_label_edit(self) -> None:
        self._end_label_edit()

    def _end_label_edit(self) -> None:
        self.editing_panel_id = None
        self.label_draft = None
        tool = self._tools["select"]
        tool.gesture.finish_edit()

    # ------------------------------------------------------------------
    # Tools and pointer input
    def available_tools(self) -> List[str]:
        return list(self._tools)

    @property
    def tool_name(self) -> str:
        return self._tool_name

    @property
    def active_tool(self):
        return self._tools[self._tool_name]

    def set_tool(self, name: str) -> None:
        if name not in self._tools:
            raise ValueError(f"Unknown tool '{name}'")
        if name == self._tool_name:
            return
        self._moves.cancel()
        self.active_tool.deactivate()
        self._tool_name = name
        self.post_status_message("")

    def pointer_down(self, event: PointerEvent) -> None:
        if self.editing_panel_id is not None:
            self.commit_label_edit()
        self.active_tool.mouse_press(event)

    def pointer_move(self, event: PointerEvent) -> None:
        """Queue a move; only the latest one per frame is processed."""
        self._moves.submit(event)

    def pointer_up(self, event: PointerEvent) -> None:
        self._moves.tick()
        self.active_tool.mouse_release(event)

    def _dispatch_move(self, event: PointerEvent) -> None:
        self.active_tool.mouse_move(event)

    def wheel(self, delta_x: float, delta_y: float, cursor: Optional[Point] = None, zoom: bool = False) -> None:
        """Ctrl/cmd + wheel zooms about the cursor; a plain wheel pans."""
        if zoom:
            self.wheel_input.add_zoom(delta_y, cursor)
        else:
            self.wheel_input.add_pan(-delta_x, -delta_y)

    def on_frame(self) -> bool:
        """Run once per display refresh; returns ``True`` if anything changed."""
        moved = self._moves.tick()
        wheeled = self.wheel_input.tick()
        if wheeled:
            self._sync_view()
        self._tools["select"].gesture.expire()
        return moved or wheeled

    # ------------------------------------------------------------------
    # Measurement session
    def start_measure(self) -> None:
        self.set_tool("measure")
        self.post_status_message("Measure: pick first point")

    def measure_point(self, point: Point, free: bool = False) -> Optional[Measurement]:
        if self._tool_name != "measure":
            self.start_measure()
        return self._tools["measure"].press_at(point, free)

    def measure_move(self, point: Point, free: bool = False) -> Optional[Measurement]:
        if self._tool_name != "measure":
            return None
        return self._tools["measure"].move_to(point, free)

    def cancel_measure(self) -> None:
        self._tools["measure"].deactivate()
        self.set_tool("select")

    @property
    def measurement(self) -> Optional[Measurement]:
        return self._tools["measure"].result

    # ------------------------------------------------------------------
    # Viewport
    def view_state(self) -> ViewState:
        return self.viewport.view_state()

    def set_view_state(self, state: ViewState) -> None:
        self.viewport.apply_view_state(state)
        self._sync_view()

    def zoom_in(self) -> None:
        self.viewport.zoom_in()
        self._sync_view()

    def zoom_out(self) -> None:
        self.viewport.zoom_out()
        self._sync_view()

    def set_zoom(self, zoom: float) -> None:
        self.viewport.set_zoom(zoom)
        self._sync_view()

    def reset_view(self) -> None:
        self.viewport.reset()
        self._sync_view()

    def fit_to_content(self) -> None:
        self.viewport.fit_to(union_bounds(panel_bounds(p, self.thickness) for p in self.store.panels))
        self._sync_view()

    # ------------------------------------------------------------------
    # Keyboard
    def handle_key(
        self, key: str, ctrl: bool = False, shift: bool = False, alt: bool = False, meta: bool = False
    ) -> bool:
        """Run the shortcut bound to ``key``; returns ``True`` if one ran."""
        cmd = ctrl or meta
        k = key.lower() if len(key) == 1 else key

        if self.editing_panel_id is not None:
            if key == "Escape":
                self.cancel_label_edit()
                return True
            if key == "Enter":
                self.commit_label_edit()
                return True
            return False

        if cmd:
            if k == "z":
                return self.redo() if shift else self.undo()
            if k == "y":
                return self.redo()
            if k == "a":
                self.select_all()
                return True
            if k == "c":
                return self.copy() > 0
            if k == "x":
                return self.cut() > 0
            if k == "v":
                return bool(self.paste())
            if k == "d":
                return bool(self.duplicate())
            return False

        if key in ("Delete", "Backspace"):
            return self.delete() > 0
        if key == "Escape":
            if self.active_tool.key_press(key):
                return True
            if self._tool_name != "select":
                self.set_tool("select")
                return True
            self.clear_selection()
            return True
        if key in _ARROWS:
            dx, dy = _ARROWS[key]
            return self.nudge(dx, dy, large=shift)
        if k == "n":
            self.add_panel()
            return True
        if k == "m":
            if self._tool_name == "measure":
                self.set_tool("select")
            else:
                self.start_measure()
            return True
        if k == "v":
            self.set_tool("select")
            return True
        if key in ("+", "="):
            self.zoom_in()
            return True
        if key == "-":
            self.zoom_out()
            return True
        if key == "0":
            self.reset_view()
            return True
        if key == "1":
            self.set_zoom(1.0)
            return True
        if key == "2":
            self.set_zoom(0.5)
            return True
        if k == "f" and shift:
            self.fit_to_content()
            return True
        return False

    # ------------------------------------------------------------------
    # Persistence
    def to_record(self) -> Dict[str, Any]:
        self._sync_view()
        return self.store.to_record()

    def load_record(self, record: Dict[str, Any]) -> None:
        """Replace the design; history and selection start empty."""
        store = PanelStore.from_record(record)
        self.set_tool("select")
        self.store = store
        self.viewport.apply_view_state(store.view_state)
        self.style.units = store.settings.units or "mm"
        self.history.clear()
        self.selection.clear()
        self.clipboard = []
        self._drag = None
        self._resize = None
        self.guides = []
        self.indicators = []
        self._sync_view()
        self.post_status_message(f"Loaded {len(store)} panels")
