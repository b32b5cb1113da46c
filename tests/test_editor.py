# Third-party imports
import pytest

# CraftCut imports
from craftcut_playground.config import EditorConfig
from craftcut_playground.document import ViewState
from craftcut_playground.geometry import Bounds


@pytest.fixture
def editor(make_editor, make_panel):
    return make_editor([make_panel("a", x=0, y=0), make_panel("b", x=200, y=0), make_panel("c", x=400, y=300)])


class TestPanelCommands:
    def test_add_panel_staggers_and_selects(self, make_editor):
        editor = make_editor()
        first = editor.add_panel()
        assert (first.x, first.y) == (50.0, 50.0)
        assert first.label == "Panel 1"
        assert first.orientation == "horizontal"
        assert editor.selected_ids() == [first.id]
        for _ in range(4):
            editor.add_panel()
        sixth = editor.add_panel("vertical")
        assert (sixth.x, sixth.y) == (50.0, 80.0)
        assert editor.can_undo

    def test_add_panel_rejects_bad_size_without_history(self, make_editor):
        editor = make_editor()
        with pytest.raises(ValueError):
            editor.add_panel(width=0)
        assert not editor.can_undo
        assert len(editor.panels) == 0

    def test_update_panel(self, editor):
        assert editor.update_panel("a", width=250, label="Side")
        assert editor.store.get("a").width == 250
        assert not editor.update_panel("ghost", width=250)
        with pytest.raises(ValueError):
            editor.update_panel("a", height=-1)

    def test_delete_selection_and_undo(self, editor):
        editor.select("a")
        editor.select("b", additive=True)
        assert editor.handle_key("Delete")
        assert editor.store.ids() == ["c"]
        assert editor.selected_ids() == []
        assert editor.handle_key("z", ctrl=True)
        assert editor.store.ids() == ["a", "b", "c"]

    def test_delete_with_nothing_selected(self, editor):
        assert editor.delete() == 0
        assert not editor.can_undo

    def test_paste_cascades(self, editor):
        editor.select("a")
        assert editor.handle_key("c", meta=True)
        first = editor.paste()
        second = editor.paste()
        assert (first[0].x, first[0].y) == (40.0, 40.0)
        assert (second[0].x, second[0].y) == (80.0, 80.0)
        assert first[0].label == "a copy"
        assert editor.selected_ids() == [second[0].id]
        assert len({p.id for p in editor.panels}) == 5

    def test_cut_then_paste(self, editor):
        editor.select("a")
        assert editor.cut() == 1
        assert "a" not in editor.store
        pasted = editor.paste()
        assert pasted[0].width == 100
        assert (pasted[0].x, pasted[0].y) == (40.0, 40.0)

    def test_duplicate_selects_the_copies(self, editor):
        editor.select_all()
        assert editor.handle_key("d", ctrl=True)
        assert len(editor.panels) == 6
        assert len(editor.selected_ids()) == 3
        assert all(p.label.endswith(" copy") for p in editor.selected_panels())

    def test_paste_with_empty_clipboard(self, editor):
        assert editor.paste() == []
        assert not editor.handle_key("v", ctrl=True)


class TestNudge:
    @pytest.mark.parametrize(
        "key, shift, expected",
        [
            ("ArrowUp", False, (0.0, 10.0)),
            ("ArrowDown", False, (0.0, -10.0)),
            ("ArrowLeft", False, (-10.0, 0.0)),
            ("ArrowRight", True, (50.0, 0.0)),
        ],
    )
    def test_arrow_keys_move_in_world_axes(self, editor, key, shift, expected):
        editor.select("a")
        assert editor.handle_key(key, shift=shift)
        panel = editor.store.get("a")
        assert (panel.x, panel.y) == expected

    def test_nudge_without_selection(self, editor):
        assert not editor.handle_key("ArrowUp")
        assert not editor.can_undo


class TestTransforms:
    def test_align_records_one_step(self, editor):
        editor.select_all()
        assert editor.align_top()
        assert [p.y for p in editor.panels] == [300.0, 300.0, 300.0]
        editor.undo()
        assert [p.y for p in editor.panels] == [0.0, 0.0, 300.0]

    def test_too_small_selection_is_ignored(self, editor):
        editor.select("a")
        assert not editor.distribute_h()
        assert not editor.can_undo
        assert editor.available_ops() == []

    def test_no_change_leaves_no_history(self, editor):
        editor.select("a")
        editor.select("b", additive=True)
        assert not editor.align_bottom()
        assert not editor.can_undo

    def test_unknown_op(self, editor):
        with pytest.raises(ValueError):
            editor.apply_op("rotate")

    def test_available_ops_follow_live_selection(self, editor):
        editor.select_all()
        assert len(editor.available_ops()) == 10
        editor.delete(["c"])
        assert "distribute_h" not in editor.available_ops()


class TestHistoryKeys:
    def test_redo_shortcuts(self, editor):
        editor.select("a")
        editor.nudge(1, 0)
        editor.handle_key("z", ctrl=True)
        assert editor.store.get("a").x == 0
        assert editor.handle_key("Z", ctrl=True, shift=True)
        assert editor.store.get("a").x == 10
        editor.undo()
        assert editor.handle_key("y", ctrl=True)
        assert editor.store.get("a").x == 10
        assert not editor.can_redo

    def test_undo_prunes_selection(self, make_editor):
        editor = make_editor()
        panel = editor.add_panel()
        editor.undo()
        assert panel.id not in editor.selected_ids()
        assert len(editor.selection) == 0


class TestDrag:
    @pytest.fixture
    def row(self, make_editor, make_panel):
        return make_editor([make_panel("a", height=20), make_panel("m", x=300, height=20)])

    def test_drag_snaps_and_shows_guides(self, row):
        row.select("m")
        assert row.begin_drag((350.0, 10.0))
        result = row.drag_to((148.0, 10.0))
        assert (result.x, result.y) == (100.0, 0.0)
        assert row.store.get("m").x == 100.0
        assert row.guides
        assert any(i.distance == 0 for i in row.indicators)
        assert row.end_drag()
        assert row.guides == []
        assert row.can_undo

    def test_alt_drag_uses_grid_only(self, row):
        row.select("m")
        row.begin_drag((350.0, 10.0))
        result = row.drag_to((148.0, 13.0), disable_snap=True)
        assert (result.x, result.y) == (100.0, 0.0)
        assert result.guides == []

    def test_drag_without_movement_leaves_no_history(self, row):
        row.select("m")
        row.begin_drag((350.0, 10.0))
        row.drag_to((350.0, 10.0))
        assert not row.end_drag()
        assert not row.can_undo

    def test_cancel_restores_positions(self, row):
        row.select_all()
        row.begin_drag((50.0, 10.0))
        row.drag_to((500.0, 400.0))
        assert row.cancel_drag()
        assert [(p.x, p.y) for p in row.panels] == [(0.0, 0.0), (300.0, 0.0)]
        assert not row.can_undo

    def test_undo_mid_drag_takes_back_only_the_drag(self, row):
        row.select("m")
        row.nudge(1, 0)
        row.begin_drag((360.0, 10.0))
        row.drag_to((560.0, 10.0), disable_snap=True)
        assert row.store.get("m").x == 510.0
        assert row.handle_key("z", ctrl=True)
        assert row.store.get("m").x == 310.0
        assert not row.dragging
        assert row.drag_to((660.0, 10.0)) is None
        assert not row.end_drag()
        assert row.undo()
        assert row.store.get("m").x == 300.0
        assert not row.can_undo

    def test_commands_close_an_open_drag_first(self, make_editor):
        editor = make_editor()
        panel = editor.add_panel()
        editor.begin_drag((100.0, 100.0))
        editor.drag_to((300.0, 100.0), disable_snap=True)
        editor.add_panel()
        assert not editor.dragging
        assert (panel.x, panel.y) == (50.0, 50.0)
        assert editor.undo()
        assert [(p.x, p.y) for p in editor.panels] == [(50.0, 50.0)]
        assert editor.undo()
        assert editor.panels == []

    def test_nothing_selected(self, row):
        assert not row.begin_drag((0.0, 0.0))
        assert row.drag_to((10.0, 10.0)) is None


class TestResize:
    @pytest.fixture
    def board(self, make_editor, make_panel):
        return make_editor([make_panel("p", width=600, height=400)])

    def test_east_handle_rounds_to_grid(self, board):
        assert board.begin_resize("p", "e", (600.0, 200.0))
        board.resize_to((653.0, 200.0))
        assert board.store.get("p").width == 650.0
        assert board.end_resize()
        assert board.can_undo

    def test_west_handle_keeps_right_edge(self, board):
        board.begin_resize("p", "w", (0.0, 200.0))
        panel = board.resize_to((-47.0, 200.0))
        assert (panel.x, panel.width) == (-50.0, 650.0)
        assert panel.x + panel.width == 600.0

    def test_minimum_size(self, board):
        board.begin_resize("p", "ne", (600.0, 400.0))
        panel = board.resize_to((-500.0, -500.0))
        assert (panel.width, panel.height) == (50.0, 50.0)

    def test_shelf_ignores_vertical_handles(self, make_editor, make_panel):
        editor = make_editor([make_panel("s", width=600, height=300, orientation="horizontal")])
        editor.begin_resize("s", "n", (300.0, 18.0))
        editor.resize_to((300.0, 200.0))
        assert editor.store.get("s").height == 300
        assert not editor.end_resize()
        assert not editor.can_undo

    def test_nudge_mid_resize_restores_size_first(self, board):
        board.begin_resize("p", "e", (600.0, 200.0))
        board.resize_to((653.0, 200.0))
        assert board.handle_key("ArrowRight")
        panel = board.store.get("p")
        assert (panel.x, panel.width) == (10.0, 600)
        assert not board.end_resize()
        assert board.undo()
        assert (board.store.get("p").x, board.store.get("p").width) == (0.0, 600)
        assert not board.can_undo

    def test_cancel_and_unknown_handle(self, board):
        board.begin_resize("p", "se", (600.0, 0.0))
        board.resize_to((700.0, -100.0))
        assert board.cancel_resize()
        panel = board.store.get("p")
        assert (panel.x, panel.y, panel.width, panel.height) == (0.0, 0.0, 600, 400)
        with pytest.raises(ValueError):
            board.begin_resize("p", "middle", (0.0, 0.0))


class TestViewAndKeys:
    def test_zoom_keys(self, editor):
        editor.handle_key("2")
        assert editor.viewport.zoom == pytest.approx(0.5)
        editor.handle_key("+")
        assert editor.viewport.zoom == pytest.approx(0.6)
        editor.handle_key("0")
        assert editor.viewport.zoom == pytest.approx(EditorConfig().default_zoom)
        editor.handle_key("1")
        assert editor.store.view_state.zoom == pytest.approx(1.0)

    def test_wheel_zoom_and_pan_apply_on_frame(self, editor):
        editor.wheel(0.0, -120.0, cursor=(400.0, 300.0), zoom=True)
        editor.wheel(10.0, 20.0)
        assert editor.viewport.zoom == pytest.approx(1.0)
        assert editor.on_frame()
        assert editor.viewport.zoom == pytest.approx(1.2)
        assert (editor.viewport.pan_x, editor.viewport.pan_y) == (pytest.approx(-10.0), pytest.approx(-20.0))
        assert editor.store.view_state.zoom == pytest.approx(1.2)

    def test_fit_to_content(self, editor):
        assert editor.handle_key("F", shift=True)
        cx, cy = editor.viewport.screen_to_world(400, 300)
        assert (cx, cy) == (pytest.approx(250.0), pytest.approx(200.0))

    def test_tool_switching(self, editor):
        assert editor.available_tools() == ["select", "measure"]
        editor.handle_key("m")
        assert editor.tool_name == "measure"
        editor.handle_key("m")
        assert editor.tool_name == "select"
        editor.handle_key("m")
        editor.handle_key("v")
        assert editor.tool_name == "select"
        with pytest.raises(ValueError):
            editor.set_tool("lasso")

    def test_escape_clears_selection(self, editor):
        editor.select_all()
        assert editor.handle_key("Escape")
        assert editor.selected_ids() == []

    def test_select_all_and_new_panel_keys(self, editor):
        editor.handle_key("a", ctrl=True)
        assert len(editor.selected_ids()) == 3
        editor.handle_key("n")
        assert len(editor.panels) == 4
        assert not editor.handle_key("q")

    def test_neighbour_gaps(self, editor):
        gaps = editor.neighbour_gaps("a")
        assert gaps["right"].panel_id == "b"
        assert gaps["right"].distance == pytest.approx(100.0)
        assert gaps["above"] is None
        assert editor.neighbour_gaps("ghost")["left"] is None

    def test_selection_bounds(self, editor):
        editor.select("a")
        editor.select("c", additive=True)
        assert editor.selection_bounds() == Bounds(0.0, 0.0, 500.0, 400.0)


class TestPersistence:
    def test_load_record_resets_session_state(self, editor, two_panel_record):
        editor.select_all()
        editor.nudge(1, 0)
        editor.load_record(two_panel_record)
        assert editor.store.ids() == ["a", "b"]
        assert not editor.can_undo
        assert editor.selected_ids() == []

    def test_to_record_carries_view_state(self, editor):
        editor.set_view_state(ViewState(zoom=0.8, pan_x=12.0, pan_y=-4.0))
        record = editor.to_record()
        assert record["viewState"] == {"zoom": 0.8, "panX": 12.0, "panY": -4.0}
        assert [p["id"] for p in record["panels"]] == ["a", "b", "c"]

    def test_bad_record_leaves_design_untouched(self, editor):
        with pytest.raises(ValueError):
            editor.load_record({"panels": [{"id": "x", "width": -1, "height": 5}]})
        assert editor.store.ids() == ["a", "b", "c"]
