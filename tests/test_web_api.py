"""Tests for the FastAPI shell."""

from __future__ import annotations

from fastapi.testclient import TestClient

from repoviz.config import RepoVizConfig
from repoviz.github import GitHubClient
from repoviz.view_state import ViewStateEngine
from repoviz.web.server import build_engine, create_app

DEMO_URL = "https://github.com/octo/demo"


def _client(source) -> TestClient:
    return TestClient(create_app(ViewStateEngine(source)))


def test_index_serves_page(fake_source) -> None:
    response = _client(fake_source).get("/")
    assert response.status_code == 200
    assert "forceSimulation" in response.text


def test_page_keys_links_by_endpoint_id_and_only_relayouts_on_new_graph(fake_source) -> None:
    page = _client(fake_source).get("/").text
    assert "endpoint(d.source) + \"->\" + endpoint(d.target)" in page
    assert "d.source + \"->\" + d.target" not in page
    assert "if (!relayout) return;" in page


def test_initial_state_is_empty(fake_source) -> None:
    payload = _client(fake_source).get("/api/state").json()
    assert payload["status"] == "idle"
    assert payload["graph"]["nodes"] == []
    assert payload["tree"]["id"] == "/"
    assert payload["tree"]["name"] == "root"


def test_visualize_then_search(fake_source) -> None:
    client = _client(fake_source)

    payload = client.post("/api/visualize", json={"url": DEMO_URL}).json()
    assert payload["status"] == "resolved"
    assert payload["counts"]["nodes"] == 3

    payload = client.post("/api/search", json={"term": "READ"}).json()
    assert [n["id"] for n in payload["graph"]["nodes"]] == ["README.md"]
    assert payload["counts"]["nodes"] == 3
    assert len(payload["tree"]["children"]) == 2


def test_visualize_malformed_url_reports_error(fake_source) -> None:
    response = _client(fake_source).post("/api/visualize", json={"url": "nope"})
    assert response.status_code == 200
    assert response.json()["status"] == "failed"
    assert "Invalid GitHub repository URL" in response.json()["error"]
    assert fake_source.calls == []


def test_visualize_requires_url(fake_source) -> None:
    response = _client(fake_source).post("/api/visualize", json={})
    assert response.status_code == 422


def test_select_and_clear(fake_source) -> None:
    client = _client(fake_source)
    client.post("/api/visualize", json={"url": DEMO_URL})

    payload = client.post("/api/select", json={"node_id": "src"}).json()
    assert payload["selected_node_id"] == "src"
    assert payload["selected_node"]["group"] == "tree"

    payload = client.delete("/api/select").json()
    assert payload["selected_node_id"] is None


def test_toggles(fake_source) -> None:
    client = _client(fake_source)
    assert client.post("/api/toggle/labels").json()["show_labels"] is False
    assert client.post("/api/toggle/tree").json()["tree_visible"] is True
    assert client.post("/api/toggle/theme").json()["theme"] == "light"
    assert client.post("/api/toggle/bogus").status_code == 404


def test_info_and_tree(fake_source) -> None:
    client = _client(fake_source)
    assert client.get("/api/info").status_code == 404

    client.post("/api/visualize", json={"url": DEMO_URL})

    info = client.get("/api/info").json()
    assert info["name"] == "demo"
    assert info["owner"] == "octo"
    tree = client.get("/api/tree").json()
    assert [c["name"] for c in tree["children"]] == ["README.md", "src"]


def test_build_engine_from_config() -> None:
    config = RepoVizConfig(github_token="abc", branch="dev", theme="light", show_labels=False)
    engine = build_engine(config)
    assert isinstance(engine._data_source, GitHubClient)
    assert engine._data_source.token == "abc"
    assert engine._data_source.branch == "dev"
    assert engine.theme.value == "light"
    assert engine.show_labels is False
