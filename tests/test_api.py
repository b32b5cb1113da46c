# Third-party imports
import pytest
from fastapi.testclient import TestClient

# CraftCut imports
from craftcut_api.adapters import sessions as session_adapter
from craftcut_api.main import app


@pytest.fixture
def client():
    session_adapter.store().clear()
    with TestClient(app) as test_client:
        yield test_client
    session_adapter.store().clear()


@pytest.fixture
def session_id(client, two_panel_record):
    response = client.post("/sessions/", json={"record": two_panel_record})
    assert response.status_code == 201
    return response.json()["id"]


class TestSessions:
    def test_index(self, client):
        body = client.get("/").json()
        assert body["name"] == "craftcut-api"
        assert body["session_count"] == 0

    def test_create_list_get_delete(self, client, session_id):
        listed = client.get("/sessions/").json()
        assert [item["id"] for item in listed] == [session_id]
        assert listed[0]["panel_count"] == 2

        body = client.get(f"/sessions/{session_id}").json()
        assert body["tool"] == "select"
        assert body["can_undo"] is False
        assert [p["id"] for p in body["record"]["panels"]] == ["a", "b"]

        assert client.delete(f"/sessions/{session_id}").status_code == 204
        assert client.get(f"/sessions/{session_id}").status_code == 404

    def test_empty_session(self, client):
        body = client.post("/sessions/", json={}).json()
        assert body["record"]["panels"] == []

    def test_bad_record_is_400(self, client):
        response = client.post("/sessions/", json={"record": {"panels": [{"id": "x", "width": 0, "height": 5}]}})
        assert response.status_code == 400

    def test_unknown_session_is_404(self, client):
        assert client.get("/sessions/nope/record").status_code == 404
        assert client.post("/sessions/nope/commands", json={"name": "undo"}).status_code == 404


class TestPanels:
    def test_add_and_patch(self, client, session_id):
        created = client.post(f"/sessions/{session_id}/panels", json={"orientation": "back", "width": 300})
        assert created.status_code == 201
        panel = created.json()
        assert panel["label"] == "Panel 3"
        assert panel["width"] == 300

        patched = client.patch(f"/sessions/{session_id}/panels/{panel['id']}", json={"label": "Door", "x": 500})
        assert patched.json()["label"] == "Door"
        assert patched.json()["x"] == 500

    @pytest.mark.parametrize("payload", [{"width": 0}, {"height": -3}, {"orientation": "diagonal"}, {"quantity": 0}])
    def test_invalid_panel_is_422(self, client, session_id, payload):
        assert client.post(f"/sessions/{session_id}/panels", json=payload).status_code == 422

    def test_patch_unknown_panel_is_404(self, client, session_id):
        assert client.patch(f"/sessions/{session_id}/panels/ghost", json={"x": 1}).status_code == 404

    def test_delete_panel(self, client, session_id):
        assert client.delete(f"/sessions/{session_id}/panels/a").status_code == 204
        assert client.delete(f"/sessions/{session_id}/panels/a").status_code == 404

    def test_gaps(self, client, session_id):
        gaps = client.get(f"/sessions/{session_id}/panels/a/gaps").json()
        assert gaps["right"] == {"distance": 30.0, "panel_id": "b"}
        assert gaps["left"] is None


class TestInteraction:
    def test_selection_and_ops(self, client, session_id):
        body = client.post(f"/sessions/{session_id}/selection", json={"ids": ["a", "b", "ghost"]}).json()
        assert body["selection"] == ["a", "b"]
        assert "align_left" in body["available_ops"]
        assert "distribute_h" not in body["available_ops"]

        result = client.post(f"/sessions/{session_id}/commands", json={"name": "align_right"}).json()
        assert result["result"] is True
        assert [p["x"] for p in result["session"]["record"]["panels"]] == [80.0, 80.0]

        undone = client.post(f"/sessions/{session_id}/undo").json()
        assert [p["x"] for p in undone["record"]["panels"]] == [0.0, 80.0]
        assert undone["can_redo"] is True

    def test_additive_selection_only_adds(self, client, session_id):
        url = f"/sessions/{session_id}/selection"
        client.post(url, json={"ids": ["a"]})
        body = client.post(url, json={"ids": ["a", "b"], "additive": True}).json()
        assert body["selection"] == ["a", "b"]
        body = client.post(url, json={"ids": ["b", "b"]}).json()
        assert body["selection"] == ["b"]

    def test_marquee(self, client, session_id):
        body = client.post(
            f"/sessions/{session_id}/selection/marquee",
            json={"start": {"x": 60, "y": -10}, "end": {"x": 200, "y": 10}},
        ).json()
        assert body["selection"] == ["b"]
        assert body["selection_bounds"] == {"left": 80.0, "bottom": 0.0, "right": 130.0, "top": 100.0}

    def test_drag_gesture(self, client, session_id):
        client.post(f"/sessions/{session_id}/selection", json={"ids": ["b"]})
        url = f"/sessions/{session_id}/drag"
        assert client.post(url, json={"phase": "begin", "point": {"x": 100, "y": 50}}).status_code == 200
        moving = client.post(url, json={"phase": "move", "point": {"x": 72, "y": 50}}).json()
        assert moving["record"]["panels"][1]["x"] == 50.0
        assert moving["guides"]
        done = client.post(url, json={"phase": "end"}).json()
        assert done["guides"] == []
        assert done["can_undo"] is True

    def test_drag_errors(self, client, session_id):
        url = f"/sessions/{session_id}/drag"
        assert client.post(url, json={"phase": "begin", "point": {"x": 0, "y": 0}}).status_code == 400
        assert client.post(url, json={"phase": "move"}).status_code == 400
        assert client.post(url, json={"phase": "spin"}).status_code == 422

    def test_resize_gesture(self, client, session_id):
        url = f"/sessions/{session_id}/resize"
        client.post(url, json={"phase": "begin", "panel_id": "a", "handle": "n", "point": {"x": 25, "y": 100}})
        body = client.post(url, json={"phase": "move", "point": {"x": 25, "y": 163}}).json()
        assert body["record"]["panels"][0]["height"] == 160.0
        assert client.post(url, json={"phase": "end"}).json()["can_undo"] is True
        bad = client.post(url, json={"phase": "begin", "panel_id": "a", "handle": "middle", "point": {"x": 0, "y": 0}})
        assert bad.status_code == 400

    def test_unknown_command_is_400(self, client, session_id):
        response = client.post(f"/sessions/{session_id}/commands", json={"name": "explode"})
        assert response.status_code == 400
        assert client.post(f"/sessions/{session_id}/commands", json={"name": "  "}).status_code == 422

    def test_nudge_and_paste_commands(self, client, session_id):
        client.post(f"/sessions/{session_id}/selection", json={"ids": ["a"]})
        nudged = client.post(f"/sessions/{session_id}/commands", json={"name": "nudge", "args": {"dx": 0, "dy": 1}})
        assert nudged.json()["session"]["record"]["panels"][0]["y"] == 10.0
        client.post(f"/sessions/{session_id}/commands", json={"name": "copy"})
        pasted = client.post(f"/sessions/{session_id}/commands", json={"name": "paste"}).json()
        assert len(pasted["result"]) == 1
        assert pasted["session"]["panel_count"] == 3

    def test_measure(self, client, session_id):
        url = f"/sessions/{session_id}/measure"
        first = client.post(url, json={"action": "point", "point": {"x": 25, "y": 50}}).json()
        assert first["tool"] == "measure"
        assert first["start"] == [25.0, 50.0]
        second = client.post(url, json={"action": "point", "point": {"x": 105, "y": 50}}).json()
        assert second["result"]["distance"] == 30
        assert second["result"]["gap_between"] == ["a", "b"]
        cancelled = client.post(url, json={"action": "cancel"}).json()
        assert cancelled["tool"] == "select"
        assert client.post(url, json={"action": "point"}).status_code == 400

    def test_viewport(self, client, session_id):
        url = f"/sessions/{session_id}/viewport"
        body = client.post(url, json={"action": "set_zoom", "args": {"zoom": 2.0}}).json()
        assert body["zoom"] == pytest.approx(2.0)
        body = client.post(url, json={"action": "wheel", "args": {"delta_x": 10, "delta_y": 20}}).json()
        assert (body["pan_x"], body["pan_y"]) == (pytest.approx(-10.0), pytest.approx(-20.0))
        assert client.post(url, json={"action": "set_zoom", "args": {}}).status_code == 400
        assert client.post(url, json={"action": "teleport"}).status_code == 422
