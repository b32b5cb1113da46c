"""Command line interface for working on saved CraftCut designs."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from .config import load_config
from .edit_ops import TRANSFORM_OPS
from .editor import Editor
from .geometry import panel_bounds, union_bounds
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def _read_design(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValueError(f"'{path}' is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"'{path}' must contain a design object")
    return data


def _write_design(path: Path, record: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(record, handle, indent=2)


def _open_editor(args: argparse.Namespace) -> Editor:
    editor = Editor(config=load_config(args.config))
    editor.load_record(_read_design(Path(args.design)))
    return editor


def _select(editor: Editor, ids: Optional[List[str]]) -> List[str]:
    if ids:
        missing = [pid for pid in ids if pid not in editor.store]
        if missing:
            raise ValueError(f"Unknown panel id(s): {', '.join(missing)}")
        editor.selection.select_all(ids)
    else:
        editor.select_all()
    return editor.selected_ids()


def _save(editor: Editor, args: argparse.Namespace) -> Path:
    out_path = Path(args.output or args.design)
    _write_design(out_path, editor.to_record())
    return out_path


def _cmd_info(args: argparse.Namespace) -> None:
    editor = _open_editor(args)
    thickness = editor.thickness
    bounds = union_bounds(panel_bounds(p, thickness) for p in editor.panels)
    print(f"Panels: {len(editor.panels)} (thickness {thickness:g} mm)")
    if bounds is not None:
        print(
            f"Bounds: x {bounds.left:g}..{bounds.right:g}, y {bounds.bottom:g}..{bounds.top:g}"
            f" ({bounds.width:g} × {bounds.height:g} mm)"
        )
    for panel in editor.panels:
        b = panel_bounds(panel, thickness)
        w, h = b.width, b.height
        print(f"  - {panel.id} '{panel.label}' {panel.orientation} at ({panel.x:g}, {panel.y:g}) {w:g} × {h:g}")


def _cmd_gaps(args: argparse.Namespace) -> None:
    editor = _open_editor(args)
    if args.panel not in editor.store:
        raise ValueError(f"Unknown panel id '{args.panel}'")
    gaps = editor.neighbour_gaps(args.panel)
    for side in ("above", "below", "left", "right"):
        gap = gaps[side]
        if gap is None:
            print(f"{side:>6}: -")
        else:
            print(f"{side:>6}: {gap.distance:g} mm to {gap.panel_id}")


def _cmd_align(args: argparse.Namespace) -> None:
    editor = _open_editor(args)
    ids = _select(editor, args.ids)
    changed = editor.apply_op(args.op)
    if not changed:
        print(f"{args.op}: nothing to change ({len(ids)} panels)")
        return
    out_path = _save(editor, args)
    print(f"{args.op}: updated {len(ids)} panels -> {out_path}")


def _cmd_distribute(args: argparse.Namespace) -> None:
    args.op = f"distribute_{args.axis}"
    _cmd_align(args)


def _cmd_measure(args: argparse.Namespace) -> None:
    editor = _open_editor(args)
    free = not args.constrain
    editor.measure_point((args.x1, args.y1), free=free)
    measurement = editor.measure_point((args.x2, args.y2), free=free)
    if measurement is None:  # pragma: no cover - second click always finishes
        raise ValueError("Measurement did not complete")
    sx, sy = measurement.start
    ex, ey = measurement.end
    print(f"{measurement.label} from ({sx:g}, {sy:g}) to ({ex:g}, {ey:g})")
    if measurement.gap_between:
        a, b = measurement.gap_between
        print(f"gap between {a} and {b}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="craftcut",
        description="CraftCut layout command line interface",
    )
    parser.add_argument("--config", help="Editor config JSON with overrides")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)")
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Summarise a design file")
    info.add_argument("design", help="Path to the design JSON")
    info.set_defaults(func=_cmd_info)

    gaps = sub.add_parser("gaps", help="Show clear gaps around a panel")
    gaps.add_argument("design", help="Path to the design JSON")
    gaps.add_argument("panel", help="Panel id")
    gaps.set_defaults(func=_cmd_gaps)

    align_ops = sorted(name for name in TRANSFORM_OPS if not name.startswith("distribute"))
    align = sub.add_parser("align", help="Align or match panels")
    align.add_argument("design", help="Path to the design JSON")
    align.add_argument("op", choices=align_ops, help="Operation to apply")
    align.add_argument("--ids", nargs="+", help="Panel ids (default: all panels)")
    align.add_argument("--output", help="Write the result here instead of in place")
    align.set_defaults(func=_cmd_align)

    distribute = sub.add_parser("distribute", help="Space panels evenly")
    distribute.add_argument("design", help="Path to the design JSON")
    distribute.add_argument("axis", choices=["h", "v"], help="Horizontal or vertical")
    distribute.add_argument("--ids", nargs="+", help="Panel ids (default: all panels)")
    distribute.add_argument("--output", help="Write the result here instead of in place")
    distribute.set_defaults(func=_cmd_distribute)

    measure = sub.add_parser("measure", help="Measure between two world points")
    measure.add_argument("design", help="Path to the design JSON")
    measure.add_argument("x1", type=float)
    measure.add_argument("y1", type=float)
    measure.add_argument("x2", type=float)
    measure.add_argument("y2", type=float)
    measure.add_argument("--constrain", action="store_true", help="Lock to the dominant axis")
    measure.set_defaults(func=_cmd_measure)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(getattr(logging, str(args.log_level).upper(), logging.WARNING))
    try:
        args.func(args)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
