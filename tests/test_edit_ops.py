# Third-party imports
import pytest

# CraftCut imports
from craftcut_playground import edit_ops
from craftcut_playground.geometry import panel_bounds


class TestAlign:
    def test_align_left_uses_leftmost_edge(self, make_panel):
        panels = [make_panel("a", x=30), make_panel("b", x=10, y=200), make_panel("c", x=70, y=400)]
        assert edit_ops.align_left(panels, 18.0)
        assert [p.x for p in panels] == [10.0, 10.0, 10.0]

    def test_align_right_works_on_true_width(self, make_panel):
        """A vertical side is only one board thick in the front view"""
        side = make_panel("side", x=0, width=300, height=700, orientation="vertical")
        back = make_panel("back", x=100, width=400, height=700)
        assert edit_ops.align_right([side, back], 18.0)
        assert panel_bounds(side, 18.0).right == pytest.approx(500.0)
        assert side.x == pytest.approx(482.0)

    def test_align_top_and_bottom(self, make_panel):
        shelf = make_panel("s", y=50, width=500, orientation="horizontal")
        back = make_panel("b", y=0, height=200)
        assert edit_ops.align_top([shelf, back], 18.0)
        assert shelf.y == pytest.approx(182.0)
        assert edit_ops.align_bottom([shelf, back], 18.0)
        assert shelf.y == pytest.approx(0.0)

    def test_align_centers(self, make_panel):
        a = make_panel("a", x=0, y=0, width=100, height=100)
        b = make_panel("b", x=300, y=500, width=50, height=50)
        assert edit_ops.align_center_h([a, b], 18.0)
        assert panel_bounds(a, 18.0).center_x == pytest.approx(175.0)
        assert panel_bounds(b, 18.0).center_x == pytest.approx(175.0)
        assert edit_ops.align_center_v([a, b], 18.0)
        assert panel_bounds(a, 18.0).center_y == pytest.approx(275.0)

    def test_single_panel_is_ignored(self, make_panel):
        panel = make_panel("a", x=42)
        assert not edit_ops.align_left([panel], 18.0)
        assert panel.x == 42

    def test_already_aligned_reports_no_change(self, make_panel):
        panels = [make_panel("a", x=0), make_panel("b", x=0, y=300)]
        assert not edit_ops.align_left(panels, 18.0)


class TestDistribute:
    def test_equal_gaps_between_outer_panels(self, make_panel):
        panels = [make_panel("a", x=0, width=40), make_panel("b", x=30, width=40), make_panel("c", x=160, width=40)]
        assert edit_ops.distribute_h(panels, 18.0)
        assert [p.x for p in panels] == [0.0, 80.0, 160.0]

    def test_order_follows_position_not_selection(self, make_panel):
        panels = [make_panel("c", x=160, width=40), make_panel("a", x=0, width=40), make_panel("b", x=30, width=40)]
        edit_ops.distribute_h(panels, 18.0)
        assert {p.id: p.x for p in panels} == {"a": 0.0, "b": 80.0, "c": 160.0}

    def test_negative_gap_overlaps(self, make_panel):
        panels = [make_panel("a", x=0), make_panel("b", x=10), make_panel("c", x=100)]
        edit_ops.distribute_h(panels, 18.0)
        assert panels[1].x == pytest.approx(50.0)

    def test_vertical_distribution(self, make_panel):
        shelves = [
            make_panel("s%d" % i, y=y, width=500, orientation="horizontal") for i, y in enumerate((0, 100, 582))
        ]
        assert edit_ops.distribute_v(shelves, 18.0)
        assert shelves[1].y == pytest.approx(291.0)

    def test_needs_three_panels(self, make_panel):
        panels = [make_panel("a", x=0), make_panel("b", x=500)]
        assert not edit_ops.distribute_h(panels, 18.0)


class TestMatchSize:
    def test_match_width_copies_from_first(self, make_panel):
        panels = [make_panel("ref", width=640), make_panel("b", width=300), make_panel("c", width=120)]
        assert edit_ops.match_width(panels)
        assert [p.width for p in panels] == [640, 640, 640]

    def test_match_height_keeps_positions(self, make_panel):
        panels = [make_panel("ref", height=720), make_panel("b", x=5, y=7, height=300)]
        assert edit_ops.match_height(panels)
        assert (panels[1].x, panels[1].y, panels[1].height) == (5, 7, 720)


class TestAvailability:
    @pytest.mark.parametrize(
        "count, expected",
        [(0, 0), (1, 0), (2, 8), (3, 10)],
    )
    def test_available_ops_by_selection_size(self, count, expected):
        assert len(edit_ops.available_ops(count)) == expected

    def test_minimum_selection(self):
        assert edit_ops.minimum_selection("distribute_v") == 3
        assert edit_ops.minimum_selection("match_width") == 2
