"""Tests for node color and position assignment."""

import math

import pytest

from sql2graph.core import PALETTE, assign_node_layout
from sql2graph.core.models import GraphModel, NodeType


def _model(count):
    return GraphModel(nodes=[NodeType(label=f"N{i}") for i in range(count)])


def test_positions_follow_circle_formula():
    model = assign_node_layout(_model(5))

    for index, node in enumerate(model.nodes):
        angle = 2 * math.pi * index / 5
        assert node.x == pytest.approx(400 + 200 * math.cos(angle))
        assert node.y == pytest.approx(300 + 200 * math.sin(angle))
        assert node.color == PALETTE[index]


def test_colors_cycle_through_palette():
    model = assign_node_layout(_model(10))

    assert len(PALETTE) == 8
    assert model.nodes[8].color == PALETTE[0]
    assert model.nodes[9].color == PALETTE[1]


def test_single_node_sits_right_of_center():
    node = assign_node_layout(_model(1)).nodes[0]

    assert (node.x, node.y) == pytest.approx((600.0, 300.0))
    assert node.color == "#3b82f6"


def test_layout_is_deterministic_and_ignores_previous_values():
    first = assign_node_layout(_model(4))
    second = _model(4)
    for node in second.nodes:
        node.x, node.y, node.color = -1.0, -1.0, "#000000"

    assign_node_layout(second)

    assert [(n.x, n.y, n.color) for n in first.nodes] == [
        (n.x, n.y, n.color) for n in second.nodes
    ]


def test_empty_model():
    assert assign_node_layout(GraphModel()).nodes == []
