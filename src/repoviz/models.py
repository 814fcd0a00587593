"""Pydantic models for repoviz's data pipeline."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import MalformedEntry


class EntryKind(str, Enum):
    """Kinds of entries a repository listing can report."""

    tree = "tree"
    blob = "blob"
    commit = "commit"  # submodule
    tag = "tag"


# ---------------------------------------------------------------------------
# Data source records
# ---------------------------------------------------------------------------

class Entry(BaseModel):
    """One file-or-directory record from the repository listing."""

    model_config = ConfigDict(frozen=True)

    path: str
    kind: str = EntryKind.blob.value
    sha: str | None = None
    size: int | None = None
    mode: str | None = None

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> Entry:
        """Convert a raw GitHub tree item (``type`` instead of ``kind``)."""
        path = item.get("path") if isinstance(item, Mapping) else None
        if not isinstance(path, str) or not path:
            raise MalformedEntry(f"Listing entry has no path: {item!r}")
        kind = item.get("kind") or item.get("type") or EntryKind.blob.value
        return cls(
            path=path,
            kind=str(kind),
            sha=item.get("sha"),
            size=item.get("size"),
            mode=item.get("mode"),
        )


class RepoStructure(BaseModel):
    """Flat recursive listing of a repository's tree."""

    entries: list[Entry] = Field(default_factory=list)
    sha: str | None = None
    truncated: bool = False


class RepoInfo(BaseModel):
    """Repository metadata shown in the info dialog."""

    name: str
    owner: str
    stargazers_count: int = 0
    forks_count: int = 0
    description: str | None = None
    full_name: str | None = None
    html_url: str | None = None
    default_branch: str | None = None
    language: str | None = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> RepoInfo:
        owner = payload.get("owner") or {}
        return cls(
            name=payload.get("name", ""),
            owner=owner.get("login", "") if isinstance(owner, Mapping) else str(owner),
            stargazers_count=payload.get("stargazers_count") or 0,
            forks_count=payload.get("forks_count") or 0,
            description=payload.get("description"),
            full_name=payload.get("full_name"),
            html_url=payload.get("html_url"),
            default_branch=payload.get("default_branch"),
            language=payload.get("language"),
        )


# ---------------------------------------------------------------------------
# Graph projection
# ---------------------------------------------------------------------------

class GraphNode(BaseModel):
    """A node in the force graph. Carries no layout state."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    group: str


class GraphEdge(BaseModel):
    """Directed edge: ``target`` is a direct child of directory ``source``."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str


class Graph(BaseModel):
    """Immutable node/edge set handed to the renderer."""

    model_config = ConfigDict(frozen=True)

    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()

    @classmethod
    def empty(cls) -> Graph:
        return cls()

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def get_node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_payload(self) -> dict[str, list[dict[str, str]]]:
        """Plain ``{nodes, links}`` dict in the shape force-graph libraries expect."""
        return {
            "nodes": [n.model_dump() for n in self.nodes],
            "links": [e.model_dump() for e in self.edges],
        }


# ---------------------------------------------------------------------------
# Tree projection
# ---------------------------------------------------------------------------

class TreeNode(BaseModel):
    """A node in the hierarchical tree view.

    ``id`` is the cumulative path prefix; intermediate directories are
    synthesized even when the listing never mentions them.
    """

    id: str
    name: str
    group: str = EntryKind.tree.value
    children: list[TreeNode] = Field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def find(self, node_id: str) -> TreeNode | None:
        for node in iter_nodes(self):
            if node.id == node_id:
                return node
        return None


def iter_nodes(tree: TreeNode) -> Iterator[TreeNode]:
    """Depth-first, pre-order walk over *tree* (root included)."""
    stack = [tree]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))
