"""repoviz - force-directed visualization of GitHub repository trees."""

from .errors import (  # noqa: F401 -- public re-exports
    DataSourceError,
    MalformedEntry,
    MalformedUrl,
    NetworkError,
    NotFound,
    RateLimited,
    RepoVizError,
)
from .graph_builder import build_graph
from .models import Entry, Graph, GraphEdge, GraphNode, RepoInfo, RepoStructure, TreeNode
from .tree_builder import build_tree
from .view_state import FetchStatus, ViewPreferences, ViewStateEngine

__version__ = "0.1.0"

__all__ = [
    "build_graph",
    "build_tree",
    "ViewStateEngine",
    "ViewPreferences",
    "FetchStatus",
    "Entry",
    "Graph",
    "GraphEdge",
    "GraphNode",
    "RepoInfo",
    "RepoStructure",
    "TreeNode",
    "RepoVizError",
    "MalformedUrl",
    "MalformedEntry",
    "DataSourceError",
    "NotFound",
    "RateLimited",
    "NetworkError",
]
