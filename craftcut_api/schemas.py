"""Request/response models for the session routes.

Numbers are validated here, at the boundary: NaN, infinities and
non-positive sizes never reach the editor.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

Orientation = Literal["horizontal", "vertical", "back"]
ZAlign = Literal["front", "back", "center"]


class SessionCreate(BaseModel):
    record: Optional[Dict[str, Any]] = Field(default=None, description="Persisted design to open")
    canvas_width: float = Field(default=800.0, gt=0, allow_inf_nan=False)
    canvas_height: float = Field(default=600.0, gt=0, allow_inf_nan=False)


class SessionSummary(BaseModel):
    id: str
    created_at: str
    updated_at: str
    panel_count: int


class GuideModel(BaseModel):
    axis: str
    position: float
    start: float
    end: float
    kind: str
    gap: Optional[float] = None


class IndicatorModel(BaseModel):
    start: List[float]
    end: List[float]
    distance: int
    orientation: str


class SessionResponse(SessionSummary):
    record: Dict[str, Any]
    selection: List[str]
    selection_bounds: Optional[Dict[str, float]] = None
    available_ops: List[str]
    can_undo: bool
    can_redo: bool
    tool: str
    status: str
    guides: List[GuideModel]
    indicators: List[IndicatorModel]


class EdgeBandingModel(BaseModel):
    top: bool = False
    bottom: bool = False
    left: bool = False
    right: bool = False


class PanelCreate(BaseModel):
    orientation: Orientation = "horizontal"
    label: Optional[str] = None
    x: Optional[float] = Field(default=None, allow_inf_nan=False)
    y: Optional[float] = Field(default=None, allow_inf_nan=False)
    width: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    height: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    quantity: Optional[int] = Field(default=None, ge=1)
    depth: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    z_align: Optional[ZAlign] = None


class PanelUpdate(PanelCreate):
    orientation: Optional[Orientation] = None
    edge_banding: Optional[EdgeBandingModel] = None


class PointModel(BaseModel):
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


class SelectionRequest(BaseModel):
    ids: List[str] = Field(default_factory=list)
    additive: bool = False


class MarqueeRequest(BaseModel):
    start: PointModel
    end: PointModel
    additive: bool = False


class DragRequest(BaseModel):
    phase: Literal["begin", "move", "end", "cancel"]
    point: Optional[PointModel] = None
    disable_snap: bool = False


class ResizeRequest(BaseModel):
    phase: Literal["begin", "move", "end", "cancel"]
    panel_id: Optional[str] = None
    handle: Optional[str] = None
    point: Optional[PointModel] = None


class CommandRequest(BaseModel):
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("command name must not be empty")
        return value


class MeasureRequest(BaseModel):
    action: Literal["point", "move", "cancel"]
    point: Optional[PointModel] = None
    free: bool = False


class ViewportRequest(BaseModel):
    action: Literal["zoom_in", "zoom_out", "reset", "fit", "set_zoom", "wheel", "resize"]
    args: Dict[str, Any] = Field(default_factory=dict)


class ViewportResponse(BaseModel):
    zoom: float
    pan_x: float
    pan_y: float
    view_box: List[float]
