"""Shared fixtures: in-memory data sources standing in for the GitHub API."""

from __future__ import annotations

import asyncio

import pytest

from repoviz.errors import RepoVizError
from repoviz.models import Entry, RepoInfo, RepoStructure


def entries(*specs: tuple[str, str]) -> list[Entry]:
    """``entries(("src", "tree"), ("src/a.js", "blob"))`` -> list of Entry."""
    return [Entry(path=path, kind=kind) for path, kind in specs]


class FakeDataSource:
    """Serves canned listings keyed by repo name; records every call."""

    def __init__(
        self,
        listings: dict[str, list[Entry]] | None = None,
        errors: dict[str, RepoVizError] | None = None,
    ) -> None:
        self.listings = listings or {}
        self.errors = errors or {}
        self.calls: list[tuple[str, str, str]] = []

    async def fetch_repo_structure(self, owner: str, name: str) -> RepoStructure:
        self.calls.append(("structure", owner, name))
        if name in self.errors:
            raise self.errors[name]
        return RepoStructure(entries=list(self.listings.get(name, [])))

    async def fetch_repo_info(self, owner: str, name: str) -> RepoInfo:
        self.calls.append(("info", owner, name))
        return RepoInfo(
            name=name,
            owner=owner,
            stargazers_count=42,
            forks_count=7,
            description=f"The {name} repository",
            default_branch="main",
        )


class GatedDataSource(FakeDataSource):
    """Like FakeDataSource, but each structure fetch waits for its gate."""

    def __init__(self, listings: dict[str, list[Entry]]) -> None:
        super().__init__(listings)
        self.gates: dict[str, asyncio.Event] = {name: asyncio.Event() for name in listings}

    async def fetch_repo_structure(self, owner: str, name: str) -> RepoStructure:
        await self.gates[name].wait()
        return await super().fetch_repo_structure(owner, name)


SCENARIO = entries(
    ("README.md", "blob"),
    ("src", "tree"),
    ("src/index.js", "blob"),
)


@pytest.fixture
def scenario_entries() -> list[Entry]:
    return list(SCENARIO)


@pytest.fixture
def fake_source() -> FakeDataSource:
    return FakeDataSource(
        listings={
            "demo": list(SCENARIO),
            "other": entries(
                ("docs", "tree"),
                ("docs/guide.md", "blob"),
                ("lib", "commit"),
            ),
        }
    )
