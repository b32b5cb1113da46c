# Third-party imports
import pytest

# CraftCut imports
from craftcut_playground.config import EditorConfig
from craftcut_playground.document import Panel, PanelStore, Settings
from craftcut_playground.editor import Editor


class FakeClock:
    """Manually advanced replacement for time.monotonic"""

    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_panel():
    """Factory for panels; defaults to a 100 x 100 back panel whose true size equals its stored size"""

    def _make(pid, x=0.0, y=0.0, width=100.0, height=100.0, orientation="back", **kwargs):
        label = kwargs.pop("label", pid)
        return Panel(id=pid, label=label, x=x, y=y, width=width, height=height, orientation=orientation, **kwargs)

    return _make


@pytest.fixture
def make_editor(clock):
    """Factory for an editor at 100 % zoom so screen (sx, sy) maps to world (sx - 400, 300 - sy)"""

    def _make(panels=(), thickness=18.0, config=None):
        store = PanelStore(panels=list(panels), settings=Settings(thickness=thickness))
        editor = Editor(store=store, config=config or EditorConfig(), canvas_width=800, canvas_height=600, clock=clock)
        editor.set_zoom(1.0)
        return editor

    return _make


@pytest.fixture
def two_panel_record():
    """Persisted design with two back panels separated by a 30 mm gap"""
    return {
        "panels": [
            {"id": "a", "label": "Left side", "x": 0, "y": 0, "width": 50, "height": 100, "orientation": "back"},
            {"id": "b", "label": "Right side", "x": 80, "y": 0, "width": 50, "height": 100, "orientation": "back"},
        ],
        "settings": {"thickness": 18, "furnitureDepth": 400},
        "viewState": {"zoom": 1.0, "panX": 0, "panY": 0},
        "stickyNotes": [],
    }
