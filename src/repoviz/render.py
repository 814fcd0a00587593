"""Renderer configuration and the JSON projection handed to the browser.

The force layout itself runs in the page (d3-force). This module only
decides how a canonical ``GraphNode`` should look: color by group, radius,
labels, selection highlight. Positions and velocities never come back
into Python.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .models import EntryKind, Graph, GraphNode


class Theme(str, Enum):
    dark = "dark"
    light = "light"

    def toggled(self) -> Theme:
        return Theme.light if self is Theme.dark else Theme.dark


DEFAULT_COLOR_KEY = "default"

PALETTES: dict[Theme, dict[str, str]] = {
    Theme.dark: {
        EntryKind.tree.value: "#38bdf8",
        EntryKind.blob.value: "#a3e635",
        EntryKind.commit.value: "#f472b6",
        EntryKind.tag.value: "#facc15",
        DEFAULT_COLOR_KEY: "#94a3b8",
    },
    Theme.light: {
        EntryKind.tree.value: "#0369a1",
        EntryKind.blob.value: "#4d7c0f",
        EntryKind.commit.value: "#be185d",
        EntryKind.tag.value: "#a16207",
        DEFAULT_COLOR_KEY: "#475569",
    },
}

# Radii in canvas pixels
TREE_R = 6.0
LEAF_R = 4.0
OTHER_R = 5.0


def default_node_radius(node: GraphNode) -> float:
    if node.group == EntryKind.tree.value:
        return TREE_R
    if node.group == EntryKind.blob.value:
        return LEAF_R
    return OTHER_R


@dataclass
class RendererConfig:
    """Declarative renderer settings passed in at construction."""

    theme: Theme = Theme.dark
    palettes: dict[Theme, dict[str, str]] = field(default_factory=lambda: dict(PALETTES))
    node_radius: Callable[[GraphNode], float] = default_node_radius
    selected_scale: float = 1.8

    def node_color(self, group: str, theme: Theme | None = None) -> str:
        """Color token for *group*, falling back to the palette default."""
        palette = self.palettes[theme or self.theme]
        return palette.get(group, palette[DEFAULT_COLOR_KEY])


def render_payload(
    view: Graph,
    config: RendererConfig,
    *,
    selected_id: str | None = None,
    show_labels: bool = True,
    theme: Theme | None = None,
) -> dict[str, Any]:
    """Project *view* into the ``{nodes, links}`` document the page renders."""
    nodes: list[dict[str, Any]] = []
    for node in view.nodes:
        radius = config.node_radius(node)
        if node.id == selected_id:
            radius *= config.selected_scale
        nodes.append({
            "id": node.id,
            "name": node.name,
            "group": node.group,
            "color": config.node_color(node.group, theme),
            "radius": radius,
        })
    return {
        "nodes": nodes,
        "links": [{"source": e.source, "target": e.target} for e in view.edges],
        "show_labels": show_labels,
        "selected_id": selected_id,
        "theme": (theme or config.theme).value,
    }
