from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, status

from ..adapters import sessions as session_adapter
from ..schemas import (
    CommandRequest,
    DragRequest,
    MarqueeRequest,
    MeasureRequest,
    PanelCreate,
    PanelUpdate,
    ResizeRequest,
    SelectionRequest,
    SessionCreate,
    SessionResponse,
    SessionSummary,
    ViewportRequest,
    ViewportResponse,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _not_found(what: str, exc: KeyError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found: {exc.args[0]}")


def _bad_request(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/", response_model=List[SessionSummary])
async def list_sessions() -> List[SessionSummary]:
    return [SessionSummary(**item) for item in session_adapter.list_sessions()]


@router.post("/", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(body: SessionCreate) -> SessionResponse:
    try:
        data = session_adapter.create_session(body.model_dump())
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return SessionResponse(**data)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    try:
        data = session_adapter.get_session(session_id)
    except KeyError as exc:
        raise _not_found("Session", exc) from exc
    return SessionResponse(**data)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str) -> None:
    try:
        session_adapter.delete_session(session_id)
    except KeyError as exc:
        raise _not_found("Session", exc) from exc


@router.get("/{session_id}/record")
async def get_record(session_id: str) -> Dict[str, Any]:
    try:
        return session_adapter.get_record(session_id)
    except KeyError as exc:
        raise _not_found("Session", exc) from exc


@router.post("/{session_id}/panels", status_code=status.HTTP_201_CREATED)
async def add_panel(session_id: str, body: PanelCreate) -> Dict[str, Any]:
    try:
        return session_adapter.add_panel(session_id, body.model_dump())
    except KeyError as exc:
        raise _not_found("Session", exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc


@router.patch("/{session_id}/panels/{panel_id}")
async def update_panel(session_id: str, panel_id: str, body: PanelUpdate) -> Dict[str, Any]:
    try:
        return session_adapter.update_panel(session_id, panel_id, body.model_dump(exclude_unset=True))
    except KeyError as exc:
        raise _not_found("Panel", exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc


@router.delete("/{session_id}/panels/{panel_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_panel(session_id: str, panel_id: str) -> None:
    try:
        session_adapter.delete_panel(session_id, panel_id)
    except KeyError as exc:
        raise _not_found("Panel", exc) from exc


@router.get("/{session_id}/panels/{panel_id}/gaps")
async def panel_gaps(session_id: str, panel_id: str) -> Dict[str, Any]:
    try:
        return session_adapter.neighbour_gaps(session_id, panel_id)
    except KeyError as exc:
        raise _not_found("Panel", exc) from exc


@router.post("/{session_id}/selection", response_model=SessionResponse)
async def set_selection(session_id: str, body: SelectionRequest) -> SessionResponse:
    try:
        data = session_adapter.set_selection(session_id, body.ids, additive=body.additive)
    except KeyError as exc:
        raise _not_found("Session", exc) from exc
    return SessionResponse(**data)


@router.post("/{session_id}/selection/marquee", response_model=SessionResponse)
async def marquee(session_id: str, body: MarqueeRequest) -> SessionResponse:
    try:
        data = session_adapter.marquee(session_id, body.start.as_tuple(), body.end.as_tuple(), additive=body.additive)
    except KeyError as exc:
        raise _not_found("Session", exc) from exc
    return SessionResponse(**data)


@router.post("/{session_id}/drag", response_model=SessionResponse)
async def drag(session_id: str, body: DragRequest) -> SessionResponse:
    point = body.point.as_tuple() if body.point else None
    try:
        data = session_adapter.drag(session_id, body.phase, point, disable_snap=body.disable_snap)
    except KeyError as exc:
        raise _not_found("Session", exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return SessionResponse(**data)


@router.post("/{session_id}/resize", response_model=SessionResponse)
async def resize(session_id: str, body: ResizeRequest) -> SessionResponse:
    point = body.point.as_tuple() if body.point else None
    try:
        data = session_adapter.resize(session_id, body.phase, body.panel_id, body.handle, point)
    except KeyError as exc:
        raise _not_found("Panel", exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return SessionResponse(**data)


@router.post("/{session_id}/commands")
async def run_command(session_id: str, body: CommandRequest) -> Dict[str, Any]:
    try:
        return session_adapter.run_command(session_id, body.name, body.args)
    except KeyError as exc:
        raise _not_found("Session", exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc


@router.post("/{session_id}/undo", response_model=SessionResponse)
async def undo(session_id: str) -> SessionResponse:
    try:
        data = session_adapter.run_command(session_id, "undo", {})
    except KeyError as exc:
        raise _not_found("Session", exc) from exc
    return SessionResponse(**data["session"])


@router.post("/{session_id}/redo", response_model=SessionResponse)
async def redo(session_id: str) -> SessionResponse:
    try:
        data = session_adapter.run_command(session_id, "redo", {})
    except KeyError as exc:
        raise _not_found("Session", exc) from exc
    return SessionResponse(**data["session"])


@router.post("/{session_id}/measure")
async def measure(session_id: str, body: MeasureRequest) -> Dict[str, Any]:
    point = body.point.as_tuple() if body.point else None
    try:
        return session_adapter.measure(session_id, body.action, point, free=body.free)
    except KeyError as exc:
        raise _not_found("Session", exc) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc


@router.post("/{session_id}/viewport", response_model=ViewportResponse)
async def viewport(session_id: str, body: ViewportRequest) -> ViewportResponse:
    try:
        data = session_adapter.viewport(session_id, body.action, body.args)
    except KeyError as exc:
        raise _not_found("Session", exc) from exc
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ViewportResponse(**data)
