# Third-party imports
import pytest

# CraftCut imports
from craftcut_playground.document import (
    EdgeBanding,
    PanelStore,
    clean_panel_changes,
    panel_from_dict,
)


class TestRecord:
    def test_round_trip_keeps_panels_settings_and_view(self, two_panel_record):
        store = PanelStore.from_record(two_panel_record)
        assert store.ids() == ["a", "b"]
        assert store.thickness == pytest.approx(18.0)
        assert store.view_state.zoom == pytest.approx(1.0)

        record = store.to_record()
        assert record["panels"][1]["x"] == 80
        assert record["settings"]["furnitureDepth"] == 400
        assert record["viewState"] == {"zoom": 1.0, "panX": 0.0, "panY": 0.0}

    def test_unknown_settings_survive(self, two_panel_record):
        two_panel_record["settings"]["hingeBrand"] = "Blum"
        record = PanelStore.from_record(two_panel_record).to_record()
        assert record["settings"]["hingeBrand"] == "Blum"

    def test_optional_panel_fields(self):
        panel = panel_from_dict(
            {"id": "p", "width": 500, "height": 300, "zAlign": "front", "edgeBanding": {"top": True}, "depth": 320}
        )
        assert panel.z_align == "front"
        assert panel.edge_banding == EdgeBanding(top=True)
        assert panel.depth == pytest.approx(320.0)
        assert panel.orientation == "horizontal"

    def test_missing_id_is_generated(self):
        assert panel_from_dict({"width": 10, "height": 10}).id.startswith("panel_")

    @pytest.mark.parametrize(
        "bad",
        [
            {"id": "p", "width": 0, "height": 10},
            {"id": "p", "width": 10, "height": -5},
            {"id": "p", "width": 10, "height": 10, "x": float("nan")},
            {"id": "p", "width": 10, "height": 10, "orientation": "diagonal"},
            {"id": "p", "width": 10, "height": 10, "quantity": 0},
        ],
    )
    def test_malformed_panels_are_rejected(self, bad):
        with pytest.raises(ValueError):
            panel_from_dict(bad)

    def test_duplicate_ids_are_rejected(self, two_panel_record):
        two_panel_record["panels"][1]["id"] = "a"
        with pytest.raises(ValueError, match="Duplicate"):
            PanelStore.from_record(two_panel_record)

    def test_non_mapping_record(self):
        with pytest.raises(ValueError):
            PanelStore.from_record(["not", "a", "record"])


class TestStore:
    def test_add_renames_colliding_id(self, make_panel):
        store = PanelStore(panels=[make_panel("a")])
        added = store.add(make_panel("a"))
        assert added.id != "a"
        assert len(store) == 2

    def test_update_ignores_missing_and_id(self, make_panel):
        store = PanelStore(panels=[make_panel("a")])
        assert not store.update("ghost", x=5)
        assert store.update("a", id="zzz", x=5)
        assert store.get("a").x == 5

    def test_find_many_skips_stale(self, make_panel):
        store = PanelStore(panels=[make_panel("a"), make_panel("b")])
        assert [p.id for p in store.find_many(["b", "ghost", "a"])] == ["b", "a"]

    def test_delete_counts(self, make_panel):
        store = PanelStore(panels=[make_panel("a"), make_panel("b")])
        assert store.delete(["a", "ghost"]) == 1
        assert store.ids() == ["b"]


class TestCleanChanges:
    def test_valid_changes_are_coerced(self):
        cleaned = clean_panel_changes({"x": "12.5", "quantity": "2", "edge_banding": {"left": True}})
        assert cleaned["x"] == pytest.approx(12.5)
        assert cleaned["quantity"] == 2
        assert cleaned["edge_banding"] == EdgeBanding(left=True)

    @pytest.mark.parametrize(
        "changes",
        [{"width": 0}, {"x": float("inf")}, {"orientation": "diagonal"}, {"id": "new"}, {"z_align": "side"}],
    )
    def test_invalid_changes_raise(self, changes):
        with pytest.raises(ValueError):
            clean_panel_changes(changes)
