"""In-memory editing sessions wrapping the CraftCut layout editor."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from craftcut_playground.config import EditorConfig
from craftcut_playground.dimensions import Measurement
from craftcut_playground.edit_ops import TRANSFORM_OPS
from craftcut_playground.editor import Editor
from craftcut_playground.geometry import Bounds

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """One open design and its editor state."""

    id: str
    editor: Editor
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def touch(self) -> None:
        self.updated_at = _now()


class SessionStore:
    """Simple store backing the session routes."""

    def __init__(self, config: Optional[EditorConfig] = None) -> None:
        self.config = config or EditorConfig()
        self._items: Dict[str, Session] = {}

    def create(
        self,
        record: Optional[Dict[str, Any]] = None,
        canvas_width: float = 800.0,
        canvas_height: float = 600.0,
    ) -> Session:
        editor = Editor(config=self.config, canvas_width=canvas_width, canvas_height=canvas_height)
        if record is not None:
            editor.load_record(record)
        session = Session(id=str(uuid4()), editor=editor)
        self._items[session.id] = session
        logger.info("Opened session %s with %d panels", session.id, len(editor.panels))
        return session

    def list(self) -> List[Session]:
        return list(self._items.values())

    def get(self, session_id: str) -> Session:
        session = self._items.get(session_id)
        if session is None:
            raise KeyError(session_id)
        return session

    def delete(self, session_id: str) -> None:
        if self._items.pop(session_id, None) is None:
            raise KeyError(session_id)

    def clear(self) -> None:
        self._items.clear()


_store = SessionStore()


def store() -> SessionStore:
    return _store


# ----------------------------------------------------------------------
# Sessions

def create_session(payload: Dict[str, Any]) -> Dict[str, Any]:
    session = _store.create(
        record=payload.get("record"),
        canvas_width=payload.get("canvas_width", 800.0),
        canvas_height=payload.get("canvas_height", 600.0),
    )
    return serialize_session(session)


def list_sessions() -> List[Dict[str, Any]]:
    return [serialize_summary(item) for item in _store.list()]


def get_session(session_id: str) -> Dict[str, Any]:
    return serialize_session(_store.get(session_id))


def delete_session(session_id: str) -> None:
    _store.delete(session_id)


def get_record(session_id: str) -> Dict[str, Any]:
    return _store.get(session_id).editor.to_record()


def _edit(session_id: str) -> Tuple[Session, Editor]:
    session = _store.get(session_id)
    session.touch()
    return session, session.editor


# ----------------------------------------------------------------------
# Panels

def add_panel(session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    _, editor = _edit(session_id)
    fields = {key: value for key, value in payload.items() if value is not None}
    orientation = fields.pop("orientation", "horizontal")
    panel = editor.add_panel(orientation, **fields)
    return serialize_panel(editor, panel.id)


def update_panel(session_id: str, panel_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    _, editor = _edit(session_id)
    if panel_id not in editor.store:
        raise KeyError(panel_id)
    editor.update_panel(panel_id, **changes)
    return serialize_panel(editor, panel_id)


def delete_panel(session_id: str, panel_id: str) -> None:
    _, editor = _edit(session_id)
    if not editor.delete([panel_id]):
        raise KeyError(panel_id)


def neighbour_gaps(session_id: str, panel_id: str) -> Dict[str, Any]:
    editor = _store.get(session_id).editor
    if panel_id not in editor.store:
        raise KeyError(panel_id)
    gaps = editor.neighbour_gaps(panel_id)
    return {
        side: None if gap is None else {"distance": gap.distance, "panel_id": gap.panel_id}
        for side, gap in gaps.items()
    }


# ----------------------------------------------------------------------
# Selection

def set_selection(session_id: str, ids: List[str], additive: bool = False) -> Dict[str, Any]:
    session, editor = _edit(session_id)
    live_ids = [pid for pid in ids if pid in editor.store]
    editor.selection.select_many(live_ids, additive=additive)
    return serialize_session(session)


def marquee(session_id: str, start: Point, end: Point, additive: bool = False) -> Dict[str, Any]:
    session, editor = _edit(session_id)
    editor.begin_marquee(start, additive=additive)
    editor.update_marquee(end)
    editor.end_marquee()
    return serialize_session(session)


# ----------------------------------------------------------------------
# Gestures

def drag(session_id: str, phase: str, point: Optional[Point] = None, disable_snap: bool = False) -> Dict[str, Any]:
    session, editor = _edit(session_id)
    if phase == "begin":
        if point is None:
            raise ValueError("Drag begin requires a point")
        if not editor.begin_drag(point):
            raise ValueError("Nothing selected to drag")
    elif phase == "move":
        if point is None:
            raise ValueError("Drag move requires a point")
        if editor.drag_to(point, disable_snap=disable_snap) is None:
            raise ValueError("No drag in progress")
    elif phase == "end":
        editor.end_drag()
    elif phase == "cancel":
        editor.cancel_drag()
    else:
        raise ValueError(f"Unknown drag phase '{phase}'")
    return serialize_session(session)


def resize(
    session_id: str, phase: str, panel_id: Optional[str] = None, handle: Optional[str] = None, point: Optional[Point] = None
) -> Dict[str, Any]:
    session, editor = _edit(session_id)
    if phase == "begin":
        if panel_id is None or handle is None or point is None:
            raise ValueError("Resize begin requires panel_id, handle and point")
        if panel_id not in editor.store:
            raise KeyError(panel_id)
        editor.begin_resize(panel_id, handle, point)
    elif phase == "move":
        if point is None:
            raise ValueError("Resize move requires a point")
        if editor.resize_to(point) is None:
            raise ValueError("No resize in progress")
    elif phase == "end":
        editor.end_resize()
    elif phase == "cancel":
        editor.cancel_resize()
    else:
        raise ValueError(f"Unknown resize phase '{phase}'")
    return serialize_session(session)


# ----------------------------------------------------------------------
# Commands

_SIMPLE_COMMANDS = ("copy", "cut", "paste", "duplicate", "delete", "undo", "redo", "select_all", "clear_selection")


def run_command(session_id: str, name: str, args: Dict[str, Any]) -> Dict[str, Any]:
    session, editor = _edit(session_id)
    if name in TRANSFORM_OPS:
        result: Any = editor.apply_op(name)
    elif name == "nudge":
        result = editor.nudge(int(args.get("dx", 0)), int(args.get("dy", 0)), large=bool(args.get("large", False)))
    elif name in _SIMPLE_COMMANDS:
        result = getattr(editor, name)()
    else:
        raise ValueError(f"Unsupported command '{name}'")
    if isinstance(result, list):
        result = [panel.id for panel in result]
    return {"status": "ok", "command": name, "result": result, "session": serialize_session(session)}


def measure(session_id: str, action: str, point: Optional[Point] = None, free: bool = False) -> Dict[str, Any]:
    session, editor = _edit(session_id)
    preview: Optional[Measurement] = None
    if action == "point":
        if point is None:
            raise ValueError("Measure point requires a point")
        editor.measure_point(point, free=free)
    elif action == "move":
        if point is None:
            raise ValueError("Measure move requires a point")
        preview = editor.measure_move(point, free=free)
    elif action == "cancel":
        editor.cancel_measure()
    else:
        raise ValueError(f"Unknown measure action '{action}'")
    tool = editor.active_tool if editor.tool_name == "measure" else None
    start = getattr(tool, "start", None)
    return {
        "tool": editor.tool_name,
        "start": None if start is None else [start.x, start.y],
        "preview": None if preview is None else preview.asdict(),
        "result": None if editor.measurement is None else editor.measurement.asdict(),
        "status": editor.status_message,
    }


def viewport(session_id: str, action: str, args: Dict[str, Any]) -> Dict[str, Any]:
    _, editor = _edit(session_id)
    if action == "zoom_in":
        editor.zoom_in()
    elif action == "zoom_out":
        editor.zoom_out()
    elif action == "reset":
        editor.reset_view()
    elif action == "fit":
        editor.fit_to_content()
    elif action == "set_zoom":
        if "zoom" not in args:
            raise ValueError("set_zoom requires a zoom value")
        editor.set_zoom(float(args["zoom"]))
    elif action == "wheel":
        cursor = args.get("cursor")
        editor.wheel(
            float(args.get("delta_x", 0.0)),
            float(args.get("delta_y", 0.0)),
            cursor=tuple(cursor) if cursor else None,
            zoom=bool(args.get("zoom", False)),
        )
        editor.on_frame()
    elif action == "resize":
        if "width" not in args or "height" not in args:
            raise ValueError("resize requires width and height")
        editor.viewport.resize(float(args["width"]), float(args["height"]))
    else:
        raise ValueError(f"Unknown viewport action '{action}'")
    return serialize_viewport(editor)


# ----------------------------------------------------------------------
# Serialization

def _bounds(bounds: Optional[Bounds]) -> Optional[Dict[str, float]]:
    if bounds is None:
        return None
    return {"left": bounds.left, "bottom": bounds.bottom, "right": bounds.right, "top": bounds.top}


def serialize_panel(editor: Editor, panel_id: str) -> Dict[str, Any]:
    record = editor.store.to_record()
    for item in record["panels"]:
        if item["id"] == panel_id:
            return item
    raise KeyError(panel_id)


def serialize_viewport(editor: Editor) -> Dict[str, Any]:
    state = editor.view_state()
    box = editor.viewport.view_box()
    return {
        "zoom": state.zoom,
        "pan_x": state.pan_x,
        "pan_y": state.pan_y,
        "view_box": [box.x, box.y, box.width, box.height],
    }


def serialize_summary(session: Session) -> Dict[str, Any]:
    return {
        "id": session.id,
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
        "panel_count": len(session.editor.panels),
    }


def serialize_session(session: Session) -> Dict[str, Any]:
    editor = session.editor
    data = serialize_summary(session)
    data.update(
        {
            "record": editor.to_record(),
            "selection": editor.selected_ids(),
            "selection_bounds": _bounds(editor.selection_bounds()),
            "available_ops": editor.available_ops(),
            "can_undo": editor.can_undo,
            "can_redo": editor.can_redo,
            "tool": editor.tool_name,
            "status": editor.status_message,
            "guides": [
                {"axis": g.axis, "position": g.position, "start": g.start, "end": g.end, "kind": g.kind, "gap": g.gap}
                for g in editor.guides
            ],
            "indicators": [
                {"start": list(i.start), "end": list(i.end), "distance": i.distance, "orientation": i.orientation}
                for i in editor.indicators
            ],
        }
    )
    return data
