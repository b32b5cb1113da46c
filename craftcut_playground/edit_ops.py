"""Alignment, distribution and size-matching over a selection of panels.

All operations mutate the given panels in place and work on true bounds,
except the match-size ops which copy the stored board dimension. Alignment
and matching need at least two panels, distribution needs three; smaller
inputs are ignored. Each function returns ``True`` when it changed anything.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from .document import Panel
from .geometry import panel_bounds, true_dimensions

MIN_ALIGN = 2
MIN_DISTRIBUTE = 3


def _move(panel: Panel, x: float | None = None, y: float | None = None) -> bool:
    changed = False
    if x is not None and panel.x != x:
        panel.x = x
        changed = True
    if y is not None and panel.y != y:
        panel.y = y
        changed = True
    return changed


def align_left(panels: Sequence[Panel], thickness: float) -> bool:
    if len(panels) < MIN_ALIGN:
        return False
    target = min(panel_bounds(p, thickness).left for p in panels)
    return any([_move(p, x=target) for p in panels])


def align_right(panels: Sequence[Panel], thickness: float) -> bool:
    if len(panels) < MIN_ALIGN:
        return False
    target = max(panel_bounds(p, thickness).right for p in panels)
    return any([_move(p, x=target - true_dimensions(p, thickness)[0]) for p in panels])


def align_top(panels: Sequence[Panel], thickness: float) -> bool:
    if len(panels) < MIN_ALIGN:
        return False
    target = max(panel_bounds(p, thickness).top for p in panels)
    return any([_move(p, y=target - true_dimensions(p, thickness)[1]) for p in panels])


def align_bottom(panels: Sequence[Panel], thickness: float) -> bool:
    if len(panels) < MIN_ALIGN:
        return False
    target = min(panel_bounds(p, thickness).bottom for p in panels)
    return any([_move(p, y=target) for p in panels])


def align_center_h(panels: Sequence[Panel], thickness: float) -> bool:
    """Line up horizontal centers on the middle of the selection's x span."""
    if len(panels) < MIN_ALIGN:
        return False
    bounds = [panel_bounds(p, thickness) for p in panels]
    mid = (min(b.left for b in bounds) + max(b.right for b in bounds)) / 2.0
    return any([_move(p, x=mid - b.width / 2.0) for p, b in zip(panels, bounds)])


def align_center_v(panels: Sequence[Panel], thickness: float) -> bool:
    """Line up vertical centers on the middle of the selection's y span."""
    if len(panels) < MIN_ALIGN:
        return False
    bounds = [panel_bounds(p, thickness) for p in panels]
    mid = (min(b.bottom for b in bounds) + max(b.top for b in bounds)) / 2.0
    return any([_move(p, y=mid - b.height / 2.0) for p, b in zip(panels, bounds)])


def _distribute(panels: Sequence[Panel], thickness: float, axis: int) -> bool:
    if len(panels) < MIN_DISTRIBUTE:
        return False
    pos = (lambda p: p.x) if axis == 0 else (lambda p: p.y)
    ordered = sorted(panels, key=pos)
    sizes = [true_dimensions(p, thickness)[axis] for p in ordered]
    first, last = ordered[0], ordered[-1]
    outer = (pos(last) + sizes[-1]) - pos(first)
    # Negative gaps are allowed and simply overlap the panels
    gap = (outer - sum(sizes)) / (len(ordered) - 1)
    cursor = pos(first) + sizes[0] + gap
    changed = False
    for panel, size in zip(ordered[1:-1], sizes[1:-1]):
        if axis == 0:
            changed = _move(panel, x=cursor) or changed
        else:
            changed = _move(panel, y=cursor) or changed
        cursor += size + gap
    return changed


def distribute_h(panels: Sequence[Panel], thickness: float) -> bool:
    return _distribute(panels, thickness, 0)


def distribute_v(panels: Sequence[Panel], thickness: float) -> bool:
    return _distribute(panels, thickness, 1)


def match_width(panels: Sequence[Panel], thickness: float = 0.0) -> bool:
    if len(panels) < MIN_ALIGN:
        return False
    reference = panels[0].width
    changed = False
    for panel in panels[1:]:
        if panel.width != reference:
            panel.width = reference
            changed = True
    return changed


def match_height(panels: Sequence[Panel], thickness: float = 0.0) -> bool:
    if len(panels) < MIN_ALIGN:
        return False
    reference = panels[0].height
    changed = False
    for panel in panels[1:]:
        if panel.height != reference:
            panel.height = reference
            changed = True
    return changed


TransformOp = Callable[[Sequence[Panel], float], bool]

TRANSFORM_OPS: Dict[str, TransformOp] = {
    "align_left": align_left,
    "align_right": align_right,
    "align_top": align_top,
    "align_bottom": align_bottom,
    "align_center_h": align_center_h,
    "align_center_v": align_center_v,
    "distribute_h": distribute_h,
    "distribute_v": distribute_v,
    "match_width": match_width,
    "match_height": match_height,
}


def minimum_selection(op_name: str) -> int:
    return MIN_DISTRIBUTE if op_name.startswith("distribute") else MIN_ALIGN


def available_ops(selection_count: int) -> List[str]:
    """Names of the transform ops enabled for a selection of this size."""
    return [name for name in TRANSFORM_OPS if selection_count >= minimum_selection(name)]
