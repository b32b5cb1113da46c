"""Selection state for the layout canvas.

The selection keeps insertion order (the first selected panel is the
reference for match-size commands) but behaves as a set. Ids of panels that
no longer exist are tolerated and filtered out whenever the selection is
read against the live panel list.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .document import Panel
from .geometry import Bounds, panel_bounds, panels_intersecting, union_bounds

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class SelectionModel:
    def __init__(self) -> None:
        self._ids: Dict[str, None] = {}
        self._marquee_origin: Optional[Point] = None
        self._marquee_rect: Optional[Bounds] = None
        self._marquee_base: List[str] = []

    # ------------------------------------------------------------------
    # Queries
    def __contains__(self, panel_id: object) -> bool:
        return panel_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    @property
    def primary(self) -> Optional[str]:
        return next(iter(self._ids), None)

    def ids(self, panels: Optional[Sequence[Panel]] = None) -> List[str]:
        """Selected ids in selection order; with ``panels``, only live ones."""
        if panels is None:
            return list(self._ids)
        live = {p.id for p in panels}
        return [pid for pid in self._ids if pid in live]

    def selected_panels(self, panels: Sequence[Panel]) -> List[Panel]:
        lookup = {p.id: p for p in panels}
        return [lookup[pid] for pid in self._ids if pid in lookup]

    def bounds(self, panels: Sequence[Panel], thickness: float) -> Optional[Bounds]:
        """Union of the selected panels' true bounds, or ``None`` when empty."""
        return union_bounds(panel_bounds(p, thickness) for p in self.selected_panels(panels))

    @property
    def marquee_rect(self) -> Optional[Bounds]:
        return self._marquee_rect

    @property
    def marquee_active(self) -> bool:
        return self._marquee_origin is not None

    # ------------------------------------------------------------------
    # Commands
    def select(self, panel_id: Optional[str], additive: bool = False) -> None:
        """Replace the selection with ``panel_id`` or, when additive, toggle it."""
        if panel_id is None:
            if not additive:
                self.clear()
            return
        if not additive:
            self._ids = {panel_id: None}
            return
        if panel_id in self._ids:
            del self._ids[panel_id]
        else:
            self._ids[panel_id] = None

    def select_many(self, ids: Iterable[str], additive: bool = False) -> None:
        if not additive:
            self._ids = {}
        for pid in ids:
            self._ids[pid] = None

    def select_all(self, ids: Iterable[str]) -> None:
        self._ids = {pid: None for pid in ids}

    def clear(self) -> None:
        self._ids = {}

    def discard(self, ids: Iterable[str]) -> None:
        for pid in ids:
            self._ids.pop(pid, None)

    def prune(self, existing: Iterable[str]) -> None:
        live = set(existing)
        stale = [pid for pid in self._ids if pid not in live]
        if stale:
            logger.debug("Dropping %d stale selection ids", len(stale))
            self.discard(stale)

    # ------------------------------------------------------------------
    # Marquee
    def begin_marquee(self, origin: Point, additive: bool = False) -> None:
        """Start a rubber-band selection.

        Without the additive modifier the current selection is dropped as the
        marquee starts; with it, the prior selection stays as the base.
        """
        self._marquee_origin = (float(origin[0]), float(origin[1]))
        self._marquee_rect = None
        self._marquee_base = list(self._ids) if additive else []
        if not additive:
            self.clear()

    def update_marquee(self, point: Point, panels: Sequence[Panel], thickness: float) -> List[str]:
        if self._marquee_origin is None:
            return self.ids()
        rect = Bounds.from_points(self._marquee_origin, point)
        self._marquee_rect = rect
        hits = panels_intersecting(panels, thickness, rect)
        self.select_many(self._marquee_base + hits)
        return self.ids()

    def end_marquee(self) -> Optional[Bounds]:
        rect = self._marquee_rect
        self._marquee_origin = None
        self._marquee_rect = None
        self._marquee_base = []
        return rect
