"""Tree builder -- derives the nested tree view from a flat path list."""

from __future__ import annotations

from collections.abc import Iterable

from .models import Entry, EntryKind, GraphNode, TreeNode

# No listed path can produce this id: empty segments are dropped and
# prefixes are joined without a leading slash.
ROOT_ID = "/"
ROOT_NAME = "root"


def _path_of(item: GraphNode | Entry) -> str:
    if isinstance(item, Entry):
        return item.path
    return item.id


def _group_of(item: GraphNode | Entry) -> str:
    if isinstance(item, Entry):
        return item.kind
    return item.group


def build_tree(items: Iterable[GraphNode | Entry]) -> TreeNode:
    """Build a single-rooted tree from graph nodes (or raw entries).

    Every directory implied by a path gets its own ``TreeNode`` whether or
    not it was listed. Children keep first-seen order and are never
    duplicated, so rebuilding from the same input gives an equal tree.
    """
    root = TreeNode(id=ROOT_ID, name=ROOT_NAME)
    # Keyed by prefix; "" is the synthetic root.
    by_prefix: dict[str, TreeNode] = {"": root}

    for item in items:
        parts = [p for p in _path_of(item).split("/") if p]
        if not parts:
            continue
        prefix = ""
        parent = root
        for depth, part in enumerate(parts):
            prefix = f"{prefix}/{part}" if prefix else part
            node = by_prefix.get(prefix)
            if node is None:
                is_last = depth == len(parts) - 1
                node = TreeNode(
                    id=prefix,
                    name=part,
                    group=_group_of(item) if is_last else EntryKind.tree.value,
                )
                by_prefix[prefix] = node
                parent.children.append(node)
            parent = node

    return root
