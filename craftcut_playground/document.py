"""Panel records and the explicit state object the editor mutates.

``PanelStore`` replaces a process-wide store: every engine command receives
the store it works on. ``to_record``/``from_record`` read and write the plain
persisted shape ``{panels, settings, viewState, stickyNotes}`` owned by the
host application.
"""
from __future__ import annotations

import copy
import logging
import math
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence

logger = logging.getLogger(__name__)

Orientation = Literal["horizontal", "vertical", "back"]
ZAlign = Literal["front", "back", "center"]

ORIENTATIONS = ("horizontal", "vertical", "back")
Z_ALIGNS = ("front", "back", "center")


def generate_panel_id() -> str:
    return f"panel_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


@dataclass
class EdgeBanding:
    top: bool = False
    bottom: bool = False
    left: bool = False
    right: bool = False


@dataclass
class Panel:
    """A rectangular board placed in world millimetres (``y`` is the bottom edge)."""

    id: str
    label: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = 600.0
    height: float = 400.0
    orientation: Orientation = "horizontal"
    quantity: int = 1
    depth: Optional[float] = None
    z_align: Optional[ZAlign] = None
    edge_banding: Optional[EdgeBanding] = None

    def copy(self) -> "Panel":
        return copy.deepcopy(self)


@dataclass
class Settings:
    thickness: float = 18.0
    furniture_depth: float = 400.0
    sheet_width: float = 2440.0
    sheet_height: float = 1220.0
    units: str = "mm"
    wood_color: str = "#E8D4B8"
    project_name: Optional[str] = None
    material_type: Optional[str] = None
    sheet_price: Optional[float] = None
    currency: Optional[str] = None
    edge_banding_price: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ViewState:
    zoom: float = 0.3
    pan_x: float = 0.0
    pan_y: float = 0.0


@dataclass
class StickyNote:
    id: str
    x: float = 0.0
    y: float = 0.0
    text: str = ""
    color: str = "#FEF08A"


_SETTINGS_KEYS = {
    "thickness": "thickness",
    "furnitureDepth": "furniture_depth",
    "sheetWidth": "sheet_width",
    "sheetHeight": "sheet_height",
    "units": "units",
    "woodColor": "wood_color",
    "projectName": "project_name",
    "materialType": "material_type",
    "sheetPrice": "sheet_price",
    "currency": "currency",
    "edgeBandingPrice": "edge_banding_price",
}


def _finite(value: Any, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return number


def _positive(value: Any, name: str) -> float:
    number = _finite(value, name)
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return number


def panel_from_dict(data: Dict[str, Any]) -> Panel:
    """Validate and convert one persisted panel mapping."""
    orientation = data.get("orientation") or "horizontal"
    if orientation not in ORIENTATIONS:
        raise ValueError(f"Unknown panel orientation '{orientation}'")
    z_align = data.get("zAlign", data.get("z_align"))
    if z_align is not None and z_align not in Z_ALIGNS:
        raise ValueError(f"Unknown z alignment '{z_align}'")
    depth = data.get("depth")
    banding = data.get("edgeBanding", data.get("edge_banding"))
    quantity = int(data.get("quantity", 1))
    if quantity < 1:
        raise ValueError(f"quantity must be >= 1, got {quantity}")
    return Panel(
        id=str(data.get("id") or generate_panel_id()),
        label=str(data.get("label", "")),
        x=_finite(data.get("x", 0.0), "x"),
        y=_finite(data.get("y", 0.0), "y"),
        width=_positive(data.get("width", 600.0), "width"),
        height=_positive(data.get("height", 400.0), "height"),
        orientation=orientation,
        quantity=quantity,
        depth=None if depth is None else _positive(depth, "depth"),
        z_align=z_align,
        edge_banding=EdgeBanding(**banding) if isinstance(banding, dict) else None,
    )


_EDITABLE = ("label", "x", "y", "width", "height", "orientation", "quantity", "depth", "z_align", "edge_banding")


def clean_panel_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a partial panel edit coming from the UI; raises ``ValueError``."""
    cleaned: Dict[str, Any] = {}
    for key, value in changes.items():
        if key not in _EDITABLE:
            raise ValueError(f"Panel field '{key}' cannot be edited")
        if key in ("x", "y"):
            cleaned[key] = _finite(value, key)
        elif key in ("width", "height"):
            cleaned[key] = _positive(value, key)
        elif key == "depth":
            cleaned[key] = None if value is None else _positive(value, key)
        elif key == "quantity":
            if int(value) < 1:
                raise ValueError(f"quantity must be >= 1, got {value!r}")
            cleaned[key] = int(value)
        elif key == "orientation":
            if value not in ORIENTATIONS:
                raise ValueError(f"Unknown panel orientation '{value}'")
            cleaned[key] = value
        elif key == "z_align":
            if value is not None and value not in Z_ALIGNS:
                raise ValueError(f"Unknown z alignment '{value}'")
            cleaned[key] = value
        elif key == "edge_banding":
            cleaned[key] = EdgeBanding(**value) if isinstance(value, dict) else value
        else:
            cleaned[key] = str(value)
    return cleaned


def panel_to_dict(panel: Panel) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": panel.id,
        "label": panel.label,
        "x": panel.x,
        "y": panel.y,
        "width": panel.width,
        "height": panel.height,
        "quantity": panel.quantity,
        "orientation": panel.orientation,
    }
    if panel.depth is not None:
        data["depth"] = panel.depth
    if panel.z_align is not None:
        data["zAlign"] = panel.z_align
    if panel.edge_banding is not None:
        eb = panel.edge_banding
        data["edgeBanding"] = {"top": eb.top, "bottom": eb.bottom, "left": eb.left, "right": eb.right}
    return data


def settings_from_dict(data: Dict[str, Any]) -> Settings:
    settings = Settings()
    for key, value in (data or {}).items():
        attr = _SETTINGS_KEYS.get(key)
        if attr is None:
            settings.extra[key] = value
            continue
        setattr(settings, attr, value)
    settings.thickness = _positive(settings.thickness, "thickness")
    settings.furniture_depth = _positive(settings.furniture_depth, "furnitureDepth")
    return settings


def settings_to_dict(settings: Settings) -> Dict[str, Any]:
    data: Dict[str, Any] = dict(settings.extra)
    for key, attr in _SETTINGS_KEYS.items():
        value = getattr(settings, attr)
        if value is not None:
            data[key] = value
    return data


class PanelStore:
    """Live panels, settings, view state and notes of one open design."""

    def __init__(
        self,
        panels: Optional[Iterable[Panel]] = None,
        settings: Optional[Settings] = None,
        view_state: Optional[ViewState] = None,
        sticky_notes: Optional[Iterable[StickyNote]] = None,
    ) -> None:
        self.panels: List[Panel] = list(panels or [])
        self.settings: Settings = settings or Settings()
        self.view_state: ViewState = view_state or ViewState()
        self.sticky_notes: List[StickyNote] = list(sticky_notes or [])

    # ------------------------------------------------------------------
    # Queries
    @property
    def thickness(self) -> float:
        return float(self.settings.thickness)

    def get(self, panel_id: Optional[str]) -> Optional[Panel]:
        for panel in self.panels:
            if panel.id == panel_id:
                return panel
        return None

    def ids(self) -> List[str]:
        return [panel.id for panel in self.panels]

    def find_many(self, ids: Iterable[str]) -> List[Panel]:
        """Return the live panels for ``ids`` in the given order, skipping stale ids."""
        lookup = {panel.id: panel for panel in self.panels}
        return [lookup[pid] for pid in ids if pid in lookup]

    def __len__(self) -> int:
        return len(self.panels)

    def __contains__(self, panel_id: object) -> bool:
        return any(panel.id == panel_id for panel in self.panels)

    # ------------------------------------------------------------------
    # Mutations
    def add(self, panel: Panel) -> Panel:
        if panel.id in self:
            panel.id = generate_panel_id()
        self.panels.append(panel)
        return panel

    def add_many(self, panels: Sequence[Panel]) -> List[Panel]:
        return [self.add(panel) for panel in panels]

    def update(self, panel_id: str, **changes: Any) -> bool:
        panel = self.get(panel_id)
        if panel is None:
            logger.debug("Ignoring update for missing panel %s", panel_id)
            return False
        for key, value in changes.items():
            if key == "id" or not hasattr(panel, key):
                continue
            setattr(panel, key, value)
        return True

    def update_many(self, updates: Dict[str, Dict[str, Any]]) -> int:
        return sum(1 for pid, changes in updates.items() if self.update(pid, **changes))

    def delete(self, ids: Iterable[str]) -> int:
        doomed = set(ids)
        before = len(self.panels)
        self.panels = [panel for panel in self.panels if panel.id not in doomed]
        return before - len(self.panels)

    def clear(self) -> None:
        self.panels = []
        self.settings = Settings()
        self.sticky_notes = []

    # ------------------------------------------------------------------
    # Persisted record
    def to_record(self) -> Dict[str, Any]:
        return {
            "panels": [panel_to_dict(panel) for panel in self.panels],
            "settings": settings_to_dict(self.settings),
            "viewState": {
                "zoom": self.view_state.zoom,
                "panX": self.view_state.pan_x,
                "panY": self.view_state.pan_y,
            },
            "stickyNotes": [
                {"id": note.id, "x": note.x, "y": note.y, "text": note.text, "color": note.color}
                for note in self.sticky_notes
            ],
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PanelStore":
        """Build a store from a persisted record, rejecting malformed numbers."""
        if not isinstance(record, dict):
            raise ValueError("Design record must be a mapping")
        panels = [panel_from_dict(item) for item in record.get("panels", [])]
        seen = set()
        for panel in panels:
            if panel.id in seen:
                raise ValueError(f"Duplicate panel id '{panel.id}'")
            seen.add(panel.id)
        settings = settings_from_dict(record.get("settings", {}))
        view = record.get("viewState") or {}
        view_state = ViewState(
            zoom=_positive(view.get("zoom", 0.3), "zoom"),
            pan_x=_finite(view.get("panX", 0.0), "panX"),
            pan_y=_finite(view.get("panY", 0.0), "panY"),
        )
        notes = [
            StickyNote(
                id=str(item.get("id") or uuid.uuid4().hex),
                x=_finite(item.get("x", 0.0), "note x"),
                y=_finite(item.get("y", 0.0), "note y"),
                text=str(item.get("text", "")),
                color=str(item.get("color", "#FEF08A")),
            )
            for item in record.get("stickyNotes", [])
        ]
        logger.info("Loaded design with %d panels", len(panels))
        return cls(panels=panels, settings=settings, view_state=view_state, sticky_notes=notes)
