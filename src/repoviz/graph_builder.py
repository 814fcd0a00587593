"""Graph builder -- turns a flat repository listing into nodes and edges."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .models import Entry, Graph, GraphEdge, GraphNode

logger = logging.getLogger(__name__)


def split_path(path: str) -> tuple[str, str]:
    """Return ``(parent_path, name)`` for a slash-delimited *path*.

    ``parent_path`` is empty for top-level entries.
    """
    parent, sep, name = path.rpartition("/")
    if not sep:
        return "", path
    return parent, name


def _coerce(item: Entry | Mapping[str, Any]) -> Entry:
    if isinstance(item, Entry):
        return item
    return Entry.from_api(item)


def build_graph(entries: Iterable[Entry | Mapping[str, Any]]) -> Graph:
    """Build the force graph for *entries*.

    Nodes come out in entry order. An edge ``parent -> child`` is only
    emitted when the parent directory was seen earlier in the same pass;
    the listing API puts directories before their contents, and a child
    that arrives before its parent simply gets no edge.

    Raises :class:`~repoviz.errors.MalformedEntry` when an entry has no path.
    """
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []
    seen: set[str] = set()
    dropped = 0

    for item in entries:
        entry = _coerce(item)
        if entry.path in seen:
            logger.debug("Skipping duplicate entry %s", entry.path)
            continue

        parent, name = split_path(entry.path)
        nodes.append(GraphNode(id=entry.path, name=name, group=entry.kind))
        seen.add(entry.path)

        if parent:
            if parent in seen:
                edges.append(GraphEdge(source=parent, target=entry.path))
            else:
                dropped += 1

    if dropped:
        logger.debug("Dropped %d edge(s) whose parent was listed after the child", dropped)

    return Graph(nodes=tuple(nodes), edges=tuple(edges))
