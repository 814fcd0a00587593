"""CLI tests -- the GitHub client is replaced by in-memory sources."""

from __future__ import annotations

import json
import urllib.request

import pytest
from typer.testing import CliRunner

from conftest import FakeDataSource
from repoviz.cli import app
from repoviz.errors import NotFound
from repoviz.github import GitHubClient
from repoviz.models import RepoInfo
from repoviz.view_state import ViewStateEngine
from repoviz.web import server

runner = CliRunner()
DEMO_URL = "https://github.com/octo/demo"


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ("GITHUB_TOKEN", "REPOVIZ_API_URL", "REPOVIZ_BRANCH"):
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


@pytest.fixture
def use_source(monkeypatch):
    def _use(source):
        monkeypatch.setattr(server, "build_engine", lambda config: ViewStateEngine(source))
    return _use


def test_graph_summary(use_source, fake_source) -> None:
    use_source(fake_source)
    result = runner.invoke(app, ["graph", DEMO_URL])
    assert result.exit_code == 0, result.output
    assert "3 nodes" in result.output
    assert "1 edges" in result.output


def test_graph_json_with_search(use_source, fake_source) -> None:
    use_source(fake_source)
    result = runner.invoke(app, ["graph", DEMO_URL, "--json", "--search", "index"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output[result.output.index("{"):])
    assert [n["id"] for n in payload["nodes"]] == ["src/index.js"]
    assert payload["links"] == []


def test_graph_malformed_url(use_source, fake_source) -> None:
    use_source(fake_source)
    result = runner.invoke(app, ["graph", "not-a-url"])
    assert result.exit_code == 1
    assert "Invalid GitHub repository URL" in result.output


def test_graph_fetch_failure(use_source) -> None:
    use_source(FakeDataSource(errors={"demo": NotFound("gone")}))
    result = runner.invoke(app, ["graph", DEMO_URL])
    assert result.exit_code == 1
    assert "Failed to fetch repository data" in result.output


def test_tree(use_source, fake_source) -> None:
    use_source(fake_source)
    result = runner.invoke(app, ["tree", DEMO_URL])
    assert result.exit_code == 0, result.output
    assert "octo/demo" in result.output
    assert "README.md" in result.output
    assert "index.js" in result.output


def test_info(monkeypatch) -> None:
    def fake_info(self, owner, name):
        return RepoInfo(name=name, owner=owner, stargazers_count=5, forks_count=1, description=None)

    monkeypatch.setattr(GitHubClient, "_repo_info_sync", fake_info)
    result = runner.invoke(app, ["info", DEMO_URL])
    assert result.exit_code == 0, result.output
    assert "Stars: 5" in result.output
    assert "No description" in result.output


def test_info_not_found(monkeypatch) -> None:
    def fake_info(self, owner, name):
        raise NotFound("404")

    monkeypatch.setattr(GitHubClient, "_repo_info_sync", fake_info)
    result = runner.invoke(app, ["info", DEMO_URL])
    assert result.exit_code == 1


def test_info_unreadable_response(monkeypatch) -> None:
    class _Garbled:
        def read(self):
            return b"\xff\xfe bad"

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return None

    monkeypatch.setattr(urllib.request, "urlopen", lambda req, timeout=None: _Garbled())
    result = runner.invoke(app, ["info", DEMO_URL])
    assert result.exit_code == 1
    assert not isinstance(result.exception, UnicodeDecodeError)
    assert "Failed to fetch repository data" in result.output


def test_config_shows_values_and_masks_token(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "supersecret")
    result = runner.invoke(app, ["config"])
    assert result.exit_code == 0, result.output
    assert "api_url" in result.output
    assert "supersecret" not in result.output

    result = runner.invoke(app, ["config", "port"])
    assert "port = 8000" in result.output


def test_config_unknown_key() -> None:
    result = runner.invoke(app, ["config", "nope"])
    assert result.exit_code == 1
    assert "Unknown config key" in result.output
