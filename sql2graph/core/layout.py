"""
Initial node placement for graph visualization.

Colors cycle through a fixed palette and nodes are spread evenly on a
circle, so identical node orderings always produce identical layouts.
"""

import math

from .models import GraphModel

PALETTE = [
    "#3b82f6",  # blue
    "#10b981",  # green
    "#f59e0b",  # amber
    "#ef4444",  # red
    "#8b5cf6",  # purple
    "#ec4899",  # pink
    "#06b6d4",  # cyan
    "#84cc16",  # lime
]

CENTER_X = 400.0
CENTER_Y = 300.0
RADIUS = 200.0


def node_color(index: int) -> str:
    return PALETTE[index % len(PALETTE)]


def node_position(index: int, count: int) -> tuple[float, float]:
    """Position of node `index` out of `count` on the layout circle."""
    angle = 2 * math.pi * index / count
    return (
        CENTER_X + RADIUS * math.cos(angle),
        CENTER_Y + RADIUS * math.sin(angle),
    )


def assign_node_layout(model: GraphModel) -> GraphModel:
    """Assign color and circle position to every node in place."""
    count = len(model.nodes)
    for index, node in enumerate(model.nodes):
        node.color = node_color(index)
        node.x, node.y = node_position(index, count)
    return model
