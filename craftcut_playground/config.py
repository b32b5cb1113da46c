"""Tunable constants for the layout editor.

Every number the interaction code depends on lives on :class:`EditorConfig`
so a host application can override it from a JSON file without touching
the engine.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class EditorConfig:
    # Viewport
    min_zoom: float = 0.05
    max_zoom: float = 3.0
    default_zoom: float = 0.3
    zoom_step: float = 0.1
    wheel_zoom_base: float = 1.2
    fit_margin: float = 50.0

    # Snapping (threshold is in screen pixels)
    snap_threshold: float = 15.0
    snap_grid: float = 10.0
    equal_spacing_tolerance: float = 1.0
    equal_spacing_priority: float = 5.0

    # Editing
    resize_grid: float = 10.0
    min_panel_size: float = 50.0
    nudge: float = 10.0
    nudge_large: float = 50.0
    paste_offset: float = 40.0
    default_width: float = 600.0
    default_height: float = 400.0
    max_history: int = 50

    # Interaction ergonomics
    min_hit_size: float = 80.0
    drag_threshold: float = 4.0
    double_click_window: float = 0.3
    measure_breakdown_min: float = 10.0
    distance_indicator_max: float = 200.0

    def asdict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Optional[str | Path] = None) -> EditorConfig:
    """Return an :class:`EditorConfig` with overrides read from ``path``.

    A missing file yields the defaults. Keys that are not config fields are
    skipped with a warning.
    """
    config = EditorConfig()
    if path is None:
        return config
    config_path = Path(path)
    if not config_path.exists():
        logger.info("No editor config at %s, using defaults", config_path)
        return config
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid editor config '{config_path}': {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Editor config '{config_path}' must contain a JSON object")

    known = {f.name for f in fields(EditorConfig)}
    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown editor config key '%s'", key)
            continue
        current = getattr(config, key)
        try:
            setattr(config, key, type(current)(value))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Config key '{key}' expects {type(current).__name__}, got {value!r}") from exc
    if config.min_zoom <= 0 or config.min_zoom > config.max_zoom:
        raise ValueError("Config zoom limits must satisfy 0 < min_zoom <= max_zoom")
    logger.debug("Loaded editor config from %s", config_path)
    return config
