"""View-state engine -- the single source of truth for what is on screen.

Derived views follow two recompute rules:

* ``graph -> tree`` whenever a new graph is set;
* ``(graph, search_term) -> filtered_view`` lazily, memoized on the graph
  object's identity and the term.

Mutation happens only through the methods below, one at a time, from a
single event loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import GENERIC_FETCH_MESSAGE, RepoVizError
from .github import RepoDataSource, parse_repo_url
from .graph_builder import build_graph
from .models import Graph, GraphNode, RepoInfo, TreeNode
from .render import RendererConfig, Theme, render_payload
from .tree_builder import build_tree

logger = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    idle = "idle"
    pending = "pending"
    resolved = "resolved"
    failed = "failed"


@dataclass
class ViewPreferences:
    """Initial user preferences; they persist across visualize actions."""

    show_labels: bool = True
    tree_visible: bool = False
    theme: Theme = Theme.dark


class ViewStateEngine:
    """Holds the current graph, tree, filter, selection and toggles."""

    def __init__(
        self,
        data_source: RepoDataSource,
        preferences: ViewPreferences | None = None,
        renderer: RendererConfig | None = None,
    ) -> None:
        prefs = preferences or ViewPreferences()
        self._data_source = data_source
        self._renderer = renderer or RendererConfig(theme=prefs.theme)

        self._graph: Graph = Graph.empty()
        self._tree: TreeNode = build_tree(())
        self.search_term: str = ""
        self.selected_node_id: str | None = None
        self.show_labels: bool = prefs.show_labels
        self.tree_visible: bool = prefs.tree_visible
        self.theme: Theme = prefs.theme

        self.repo_url: str = ""
        self.repo_info: RepoInfo | None = None
        self.status: FetchStatus = FetchStatus.idle
        self.error: str | None = None

        # Bumped on every visualize action; responses carrying an older
        # number are discarded.
        self._request_seq: int = 0
        self._filtered_memo: tuple[Graph, str, Graph] | None = None

    # ------------------------------------------------------------------
    # Graph / tree
    # ------------------------------------------------------------------

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def tree(self) -> TreeNode:
        return self._tree

    def set_graph(self, graph: Graph, tree: TreeNode | None = None) -> None:
        """Replace the graph wholesale, rebuild the tree, clear the selection.

        *tree* may be passed when the caller already built it from the same
        listing; otherwise it is derived from ``graph.nodes``.
        """
        self._graph = graph
        self._tree = tree if tree is not None else build_tree(graph.nodes)
        self.selected_node_id = None
        self._filtered_memo = None

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def set_search_term(self, term: str) -> None:
        self.search_term = term or ""

    def filtered_view(self) -> Graph:
        """Current graph restricted to nodes whose name contains the search term.

        An empty term returns the graph object itself. Edges survive only if
        both endpoints do.
        """
        graph, term = self._graph, self.search_term
        memo = self._filtered_memo
        if memo is not None and memo[0] is graph and memo[1] == term:
            return memo[2]

        if not term:
            view = graph
        else:
            needle = term.casefold()
            nodes = tuple(n for n in graph.nodes if needle in n.name.casefold())
            keep = {n.id for n in nodes}
            edges = tuple(
                e for e in graph.edges if e.source in keep and e.target in keep
            )
            view = Graph(nodes=nodes, edges=edges)

        self._filtered_memo = (graph, term, view)
        return view

    # ------------------------------------------------------------------
    # Selection & toggles
    # ------------------------------------------------------------------

    def select(self, node_id: str) -> None:
        """Record *node_id* as selected. Membership is not checked."""
        self.selected_node_id = node_id

    def clear_selection(self) -> None:
        self.selected_node_id = None

    def selected_node(self) -> GraphNode | None:
        """The selected node, or None when nothing (or an unknown id) is selected."""
        if self.selected_node_id is None:
            return None
        return self._graph.get_node(self.selected_node_id)

    def toggle_labels(self) -> bool:
        self.show_labels = not self.show_labels
        return self.show_labels

    def toggle_tree(self) -> bool:
        self.tree_visible = not self.tree_visible
        return self.tree_visible

    def toggle_theme(self) -> Theme:
        self.theme = self.theme.toggled()
        return self.theme

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def visualize(self, repo_url: str) -> bool:
        """Fetch *repo_url* and replace graph, tree and info together.

        Returns True when this call's result was applied. Errors are turned
        into ``self.error``; the previous graph and tree stay in place.
        """
        self._request_seq += 1
        seq = self._request_seq
        self.repo_url = repo_url

        try:
            owner, name = parse_repo_url(repo_url)
        except RepoVizError as exc:
            logger.info("Rejected repository URL %r: %s", repo_url, exc)
            self.status = FetchStatus.failed
            self.error = exc.user_message
            return False

        self.status = FetchStatus.pending
        self.error = None
        logger.info("Fetching %s/%s (request %d)", owner, name, seq)

        try:
            structure, info = await asyncio.gather(
                self._data_source.fetch_repo_structure(owner, name),
                self._data_source.fetch_repo_info(owner, name),
            )
            graph = build_graph(structure.entries)
            tree = build_tree(graph.nodes)
        except RepoVizError as exc:
            if self._is_stale(seq):
                return False
            logger.error("Could not visualize %s/%s: %s", owner, name, exc)
            self._fail(exc.user_message)
            return False
        except Exception:
            if self._is_stale(seq):
                return False
            logger.exception("Unexpected error visualizing %s/%s", owner, name)
            self._fail(GENERIC_FETCH_MESSAGE)
            return False

        if self._is_stale(seq):
            return False

        self.set_graph(graph, tree=tree)
        self.repo_info = info
        self.status = FetchStatus.resolved
        logger.info(
            "Loaded %s/%s: %d nodes, %d edges",
            owner, name, len(graph.nodes), len(graph.edges),
        )
        return True

    def _is_stale(self, seq: int) -> bool:
        if seq != self._request_seq:
            logger.debug("Discarding response for request %d (latest is %d)", seq, self._request_seq)
            return True
        return False

    def _fail(self, message: str) -> None:
        self.status = FetchStatus.failed
        self.error = message

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view of everything the shell displays."""
        view = self.filtered_view()
        return {
            "repo_url": self.repo_url,
            "status": self.status.value,
            "error": self.error,
            "search_term": self.search_term,
            "selected_node_id": self.selected_node_id,
            "selected_node": node.model_dump() if (node := self.selected_node()) else None,
            "show_labels": self.show_labels,
            "tree_visible": self.tree_visible,
            "theme": self.theme.value,
            "info": self.repo_info.model_dump() if self.repo_info else None,
            "counts": {
                "nodes": len(self._graph.nodes),
                "edges": len(self._graph.edges),
                "visible_nodes": len(view.nodes),
                "visible_edges": len(view.edges),
            },
            "graph": render_payload(
                view,
                self._renderer,
                selected_id=self.selected_node_id,
                show_labels=self.show_labels,
                theme=self.theme,
            ),
            "tree": self._tree.model_dump(),
        }
