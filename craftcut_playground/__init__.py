"""CraftCut layout engine: snapping, selection, alignment, undo and measuring
for a front-view furniture panel editor."""

from .config import EditorConfig, load_config
from .document import Panel, PanelStore, Settings, ViewState
from .editor import Editor
from .geometry import Bounds, hit_area, panel_bounds, true_dimensions
from .history import HistoryStore
from .selection import SelectionModel
from .snapping import SnapEngine, SnapGuide, SnapResult
from .viewport import Viewport

__all__ = [
    "Bounds",
    "Editor",
    "EditorConfig",
    "HistoryStore",
    "Panel",
    "PanelStore",
    "SelectionModel",
    "Settings",
    "SnapEngine",
    "SnapGuide",
    "SnapResult",
    "ViewState",
    "Viewport",
    "hit_area",
    "load_config",
    "panel_bounds",
    "true_dimensions",
]
