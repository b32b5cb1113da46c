"""
Smart snapping for dragged panels.

Given the true size of the panel being dragged and its raw (unsnapped)
position, ``SnapEngine.snap`` returns the position to apply plus the guides
that explain it:

* point snap: the mover's left/center/right (bottom/center/top) lines onto
  the same features of stationary panels, plus the floor at ``y = 0``;
* equal spacing: centering the mover between two neighbours, or extending a
  repeating gap past either end of a row;
* grid: any axis that found nothing rounds to the snap grid.

Each axis is resolved independently and greedily; the nearest match wins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .config import EditorConfig
from .document import Panel
from .geometry import Bounds, panel_bounds, round_half_up

logger = logging.getLogger(__name__)

Span = Tuple[float, float]


@dataclass(frozen=True)
class SnapGuide:
    """Transient alignment indicator, valid for one drag gesture.

    For ``edge``/``center``/``floor`` guides, ``axis == "x"`` is a vertical
    line at ``x = position`` running from ``start`` to ``end`` in y (and the
    other way round for ``"y"``). ``spacing`` guides on axis ``"x"`` are
    horizontal gap markers at ``y = position`` from ``start`` to ``end`` in x,
    with the gap size in ``gap``.
    """

    axis: str
    position: float
    start: float
    end: float
    kind: str = "edge"
    gap: Optional[float] = None


@dataclass
class SnapResult:
    x: float
    y: float
    guides: List[SnapGuide] = field(default_factory=list)

    @property
    def snapped_x(self) -> bool:
        return any(g.axis == "x" for g in self.guides)

    @property
    def snapped_y(self) -> bool:
        return any(g.axis == "y" for g in self.guides)


@dataclass
class _Feature:
    value: float
    kind: str
    source: Optional[Bounds]


@dataclass
class _PointMatch:
    position: float
    distance: float
    feature: _Feature


@dataclass
class _SpacingMatch:
    position: float
    distance: float
    segments: List[Span]
    gap: float


def _axis_span(bounds: Bounds, axis: str) -> Span:
    return (bounds.left, bounds.right) if axis == "x" else (bounds.bottom, bounds.top)


def _perp_span(bounds: Bounds, axis: str) -> Span:
    return (bounds.bottom, bounds.top) if axis == "x" else (bounds.left, bounds.right)


def stationary_bounds(panels: Iterable[Panel], thickness: float, exclude: Iterable[str] = ()) -> List[Bounds]:
    skip = set(exclude)
    return [panel_bounds(p, thickness) for p in panels if p.id not in skip]


def snap_features(stationary: Sequence[Bounds], axis: str) -> List[_Feature]:
    """Lines a moving edge may land on, in a stable order (floor last)."""
    features: List[_Feature] = []
    for bounds in stationary:
        lo, hi = _axis_span(bounds, axis)
        features.append(_Feature(lo, "edge", bounds))
        features.append(_Feature((lo + hi) / 2.0, "center", bounds))
        features.append(_Feature(hi, "edge", bounds))
    if axis == "y":
        features.append(_Feature(0.0, "floor", None))
    return features


def nearest_point_snap(raw: float, size: float, features: Sequence[_Feature], threshold: float) -> Optional[_PointMatch]:
    """Best (feature, moving edge) pair within ``threshold``.

    Edges are scanned low/center/high, features in order; the first pair at
    the minimum distance wins.
    """
    if not features:
        return None
    offsets = np.array([0.0, size / 2.0, size])
    values = np.array([f.value for f in features])
    dist = np.abs((raw + offsets)[:, None] - values[None, :])
    edge_idx, feat_idx = np.unravel_index(int(np.argmin(dist)), dist.shape)
    best = float(dist[edge_idx, feat_idx])
    if best > threshold:
        return None
    feature = features[feat_idx]
    return _PointMatch(position=feature.value - float(offsets[edge_idx]), distance=best, feature=feature)


def equal_spacing_candidates(
    stationary: Sequence[Bounds],
    axis: str,
    size: float,
    perp: Span,
    tolerance: float = 1.0,
) -> List[_SpacingMatch]:
    """Positions along ``axis`` that make the mover's neighbouring gaps equal.

    Only panels overlapping the mover's ``perp`` span take part. Distances
    are left at zero; the caller fills them in against the raw position.
    """
    row = [b for b in stationary if max(perp[0], _perp_span(b, axis)[0]) < min(perp[1], _perp_span(b, axis)[1])]
    row.sort(key=lambda b: _axis_span(b, axis)[0])
    spans = [_axis_span(b, axis) for b in row]
    out: List[_SpacingMatch] = []

    # Centered between two neighbours
    for (a_lo, a_hi), (b_lo, b_hi) in zip(spans, spans[1:]):
        gap = b_lo - a_hi
        if gap < size:
            continue
        pos = a_hi + (gap - size) / 2.0
        before = pos - a_hi
        after = b_lo - (pos + size)
        if abs(before - after) < tolerance:
            out.append(_SpacingMatch(pos, 0.0, [(a_hi, pos), (pos + size, b_lo)], before))

    # Repeating rhythm extended past the ends of the row
    if len(spans) >= 2:
        gaps = [b[0] - a[1] for a, b in zip(spans, spans[1:])]
        start = 0
        while start < len(gaps):
            ref = gaps[start]
            end = start
            if ref > 0:
                while end + 1 < len(gaps) and abs(gaps[end + 1] - ref) < tolerance:
                    end += 1
                first, last = start, end + 1
                segments = [(spans[i][1], spans[i + 1][0]) for i in range(first, last)]
                if last == len(spans) - 1:
                    pos = spans[last][1] + ref
                    out.append(_SpacingMatch(pos, 0.0, segments + [(spans[last][1], pos)], ref))
                if first == 0:
                    pos = spans[first][0] - ref - size
                    out.append(_SpacingMatch(pos, 0.0, [(pos + size, spans[first][0])] + segments, ref))
            start = end + 1
    return out


class SnapEngine:
    """Resolve a dragged panel's position against its stationary neighbours."""

    def __init__(self, config: Optional[EditorConfig] = None) -> None:
        self.config = config or EditorConfig()

    def snap(
        self,
        width: float,
        height: float,
        raw_x: float,
        raw_y: float,
        stationary: Sequence[Bounds],
        zoom: float = 1.0,
        disable: bool = False,
    ) -> SnapResult:
        grid = self.config.snap_grid
        if disable:
            return SnapResult(round_half_up(raw_x, grid), round_half_up(raw_y, grid), [])

        threshold = self.config.snap_threshold / max(zoom, 1e-9)
        point_x = nearest_point_snap(raw_x, width, snap_features(stationary, "x"), threshold)
        point_y = nearest_point_snap(raw_y, height, snap_features(stationary, "y"), threshold)

        y_for_row = point_y.position if point_y else raw_y
        x_for_row = point_x.position if point_x else raw_x
        spacing_x = self._pick_spacing(
            equal_spacing_candidates(
                stationary, "x", width, (y_for_row, y_for_row + height), self.config.equal_spacing_tolerance
            ),
            raw_x,
            threshold,
        )
        spacing_y = self._pick_spacing(
            equal_spacing_candidates(
                stationary, "y", height, (x_for_row, x_for_row + width), self.config.equal_spacing_tolerance
            ),
            raw_y,
            threshold,
        )

        match_x = self._prefer(point_x, spacing_x)
        match_y = self._prefer(point_y, spacing_y)

        x = match_x.position if match_x else round_half_up(raw_x, grid)
        y = match_y.position if match_y else round_half_up(raw_y, grid)
        moving = Bounds(x, y, x + width, y + height)

        guides: List[SnapGuide] = []
        if match_x is not None:
            guides.extend(self._guides_for("x", match_x, moving))
        if match_y is not None:
            guides.extend(self._guides_for("y", match_y, moving))
        logger.debug("snap raw=(%.1f, %.1f) -> (%.1f, %.1f) guides=%d", raw_x, raw_y, x, y, len(guides))
        return SnapResult(x, y, guides)

    # ------------------------------------------------------------------
    def _pick_spacing(self, candidates: Sequence[_SpacingMatch], raw: float, threshold: float) -> Optional[_SpacingMatch]:
        best: Optional[_SpacingMatch] = None
        for cand in candidates:
            cand.distance = abs(cand.position - raw)
            if cand.distance > threshold:
                continue
            if best is None or cand.distance < best.distance:
                best = cand
        return best

    def _prefer(self, point: Optional[_PointMatch], spacing: Optional[_SpacingMatch]):
        if spacing is None:
            return point
        if point is None:
            return spacing
        if spacing.distance <= point.distance + self.config.equal_spacing_priority:
            return spacing
        return point

    def _guides_for(self, axis: str, match, moving: Bounds) -> List[SnapGuide]:
        perp_lo, perp_hi = _perp_span(moving, axis)
        if isinstance(match, _SpacingMatch):
            mid = (perp_lo + perp_hi) / 2.0
            return [
                SnapGuide(axis, mid, lo, hi, kind="spacing", gap=hi - lo)
                for lo, hi in match.segments
            ]
        feature = match.feature
        if feature.source is not None:
            src_lo, src_hi = _perp_span(feature.source, axis)
            perp_lo, perp_hi = min(perp_lo, src_lo), max(perp_hi, src_hi)
        return [SnapGuide(axis, feature.value, perp_lo, perp_hi, kind=feature.kind)]
