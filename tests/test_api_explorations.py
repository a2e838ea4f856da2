"""Tests for the /api/v1/explorations endpoints."""

from __future__ import annotations

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from conftest import PARENT, FakeLineageApi, link_name
from lineage_explorer.api.app import create_app
from lineage_explorer.graph.models import Direction


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def client(fake_api: FakeLineageApi) -> Generator[TestClient, None, None]:
    app = create_app()
    with TestClient(app, raise_server_exceptions=True) as c:
        c.app.state.client_factory = lambda token: fake_api
        yield c


@pytest.fixture()
def exploration(client: TestClient) -> dict:
    resp = client.post("/api/v1/explorations", json={"parent": PARENT, "fqn": "R0"})
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _expand(client: TestClient, session_id: str, fqn: str, direction: str):
    return client.post(
        f"/api/v1/explorations/{session_id}/expand",
        json={"fqn": fqn, "direction": direction},
    )


def _nodes_by_id(graph: dict) -> dict[str, dict]:
    return {n["resourceId"]: n for n in graph["nodes"]}


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestStartExploration:
    def test_root_only_graph(self, exploration):
        graph = exploration["graph"]
        assert graph["root"] == "R0"
        assert graph["edges"] == []
        root = _nodes_by_id(graph)["R0"]
        assert root["isRoot"] is True
        assert root["isUpstreamFetched"] is False
        assert root["isDownstreamFetched"] is False
        assert root["showUpStreamIcon"] is False
        assert root["showDownStreamIcon"] is False

    def test_requires_fqn(self, client):
        resp = client.post("/api/v1/explorations", json={"parent": PARENT})
        assert resp.status_code == 400

    def test_get_returns_same_graph(self, client, exploration):
        resp = client.get(f"/api/v1/explorations/{exploration['id']}")
        assert resp.status_code == 200
        assert resp.json()["graph"] == exploration["graph"]

    def test_unknown_session_404(self, client):
        resp = client.get("/api/v1/explorations/nope")
        assert resp.status_code == 404
        assert resp.json() == {"message": "Exploration 'nope' not found."}


class TestExpand:
    def test_expand_root_both(self, client, fake_api, exploration):
        fake_api.add_link("s1", "R0", "D1", process="p1")
        fake_api.add_link("s2", "R0", "D2", process="p2")
        fake_api.add_link("t1", "U1", "R0", process="p3")

        resp = _expand(client, exploration["id"], "R0", "both")

        assert resp.status_code == 200
        data = resp.json()
        assert len(data["delta"]["nodes"]) == 3
        assert len(data["delta"]["edges"]) == 3
        assert all(e["process"] for e in data["delta"]["edges"])
        assert data["node"]["isUpstreamFetched"] is True
        assert data["node"]["isDownstreamFetched"] is True

        graph = client.get(f"/api/v1/explorations/{exploration['id']}").json()["graph"]
        assert len(graph["nodes"]) == 4
        d1 = _nodes_by_id(graph)["D1"]
        assert d1["showUpStreamIcon"] is True
        assert d1["showDownStreamIcon"] is True

    def test_expand_neighbour_then_rediscover_root(self, client, fake_api, exploration):
        fake_api.add_link("r0-r1", "R0", "R1", process="p1")
        sid = exploration["id"]

        _expand(client, sid, "R0", "downstream")
        resp = _expand(client, sid, "R1", "upstream")

        assert resp.status_code == 200
        assert resp.json()["delta"] == {"nodes": [], "edges": []}
        assert resp.json()["node"]["showUpStreamIcon"] is False
        graph = client.get(f"/api/v1/explorations/{sid}").json()["graph"]
        assert sorted(_nodes_by_id(graph)) == ["R0", "R1"]
        assert [e["id"] for e in graph["edges"]] == [link_name("r0-r1")]

    def test_backend_failure_leaves_graph(self, client, fake_api, exploration):
        fake_api.add_link("s1", "R0", "D1")
        fake_api.fail_all_links = True
        sid = exploration["id"]

        resp = _expand(client, sid, "R0", "downstream")

        assert resp.status_code == 500
        assert "details" in resp.json()
        graph = client.get(f"/api/v1/explorations/{sid}").json()["graph"]
        assert len(graph["nodes"]) == 1
        assert graph["edges"] == []
        root = _nodes_by_id(graph)["R0"]
        assert root["isDownstreamFetched"] is False
        assert root["expansionState"] == "collapsed"

    def test_bad_direction_is_400(self, client, exploration):
        resp = _expand(client, exploration["id"], "R0", "sideways")
        assert resp.status_code == 400
        assert "sideways" in resp.json()["message"]

    def test_unknown_node_is_404(self, client, exploration):
        resp = _expand(client, exploration["id"], "ghost", "both")
        assert resp.status_code == 404
        assert "ghost" in resp.json()["message"]

    def test_loading_node_is_409(self, client, exploration):
        model = client.app.state.explorations.get(exploration["id"]).model
        root = model.node("R0")
        root.state = root.state.begin_loading(Direction.UPSTREAM)

        resp = _expand(client, exploration["id"], "R0", "downstream")

        assert resp.status_code == 409
        assert resp.json() == {"message": "Node 'R0' is already loading."}


class TestEndExploration:
    def test_delete_discards_graph(self, client, exploration):
        sid = exploration["id"]
        assert client.delete(f"/api/v1/explorations/{sid}").status_code == 204
        assert client.get(f"/api/v1/explorations/{sid}").status_code == 404

    def test_delete_unknown_404(self, client):
        assert client.delete("/api/v1/explorations/nope").status_code == 404
