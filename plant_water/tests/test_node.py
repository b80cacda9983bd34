"""
Tests for segment nodes.
"""

import pytest
import numpy as np
from plant_water.core.graph import Graph
from plant_water.core.node import Node
from plant_water.core.errors import (
    NullReferenceError,
    IndexOutOfRangeError,
    InvalidParameterError,
    InvalidGeometryError,
    CrossGraphReferenceError,
    NotFoundError,
)


def test_derived_metrics():
    """Test length, area and volume of a segment."""
    graph = Graph()
    nid = graph.add_node((1, 1, 1), (1, 4, 5), radius=0.5)
    node = graph.get_node(nid)
    
    np.testing.assert_allclose(node.direction(), [0, 3, 4])
    assert node.length() == pytest.approx(5.0)
    assert node.area() == pytest.approx(2.5)
    assert node.volume() == pytest.approx(np.pi * 0.25 * 5.0)


def test_invalid_construction():
    """Test the construction contract."""
    with pytest.raises(NullReferenceError):
        Node(None, 0, (0, 0, 0), (0, 1, 0), 1.0)
    
    graph = Graph()
    with pytest.raises(InvalidGeometryError):
        graph.add_node((1, 2, 3), (1, 2, 3), radius=1.0)
    with pytest.raises(InvalidParameterError):
        graph.add_node((0, 0, 0), (0, 1, 0), radius=0.0)
    with pytest.raises(InvalidParameterError):
        graph.add_node((0, 0, 0), (0, 1, 0), radius=-2.0)
    with pytest.raises(InvalidParameterError):
        graph.add_node((0, 0), (0, 1, 0), radius=1.0)
    
    assert graph.num_nodes == 0


def test_add_adjacent_is_idempotent():
    """Test that adding an existing neighbour is a no-op."""
    graph = Graph()
    a = graph.get_node(graph.add_node((0, 0, 0), (0, 1, 0), 0.1))
    b = graph.get_node(graph.add_node((0, 0, 0), (1, 0, 0), 0.1))
    
    a.add_adjacent(b)
    a.add_adjacent(b)
    
    assert a.adjacency == [b.id]
    assert a.degree == 1
    assert a.is_adjacent(b)
    assert not b.is_adjacent(a)


def test_cross_graph_reference():
    """Test that nodes of different graphs cannot be linked."""
    g1 = Graph()
    g2 = Graph()
    a = g1.get_node(g1.add_node((0, 0, 0), (0, 1, 0), 0.1))
    b = g2.get_node(g2.add_node((0, 0, 0), (0, 1, 0), 0.1))
    
    assert a.id == b.id
    with pytest.raises(CrossGraphReferenceError):
        a.add_adjacent(b)
    assert a.degree == 0


def test_remove_adjacent():
    """Test neighbour removal and its failure mode."""
    graph = Graph()
    a = graph.get_node(graph.add_node((0, 0, 0), (0, 1, 0), 0.1))
    b = graph.get_node(graph.add_node((0, 0, 0), (1, 0, 0), 0.1))
    
    with pytest.raises(NotFoundError):
        a.remove_adjacent(b)
    
    a.add_adjacent(b)
    a.remove_adjacent(b)
    assert a.degree == 0


def test_get_adjacent_bounds():
    """Test adjacency indexing."""
    graph = Graph()
    for _ in range(3):
        graph.add_node((0, 0, 0), (0, 1, 0), 0.1)
    graph.add_connection(0, 1)
    graph.add_connection(0, 2)
    node = graph.get_node(0)
    
    assert node.get_adjacent(0) == 1
    assert node.get_adjacent(1) == 2
    with pytest.raises(IndexOutOfRangeError):
        node.get_adjacent(2)
    with pytest.raises(IndexOutOfRangeError):
        node.get_adjacent(-1)


def test_rotation_maps_reference_axis():
    """Test that the rotation takes +y onto the segment direction."""
    graph = Graph()
    directions = [(1, 0, 0), (0, 2, 0), (0, -3, 0), (1, 1, 1)]
    for d in directions:
        graph.add_node((0, 0, 0), d, 0.1)
    
    for node in graph.nodes:
        rotated = node.rotation().apply([0.0, 1.0, 0.0])
        expected = node.direction() / node.length()
        np.testing.assert_allclose(rotated, expected, atol=1e-12)


def test_endpoints_are_read_only():
    """Test that heads and tails can only be changed by the graph."""
    graph = Graph()
    node = graph.get_node(graph.add_node((0, 0, 0), (0, 1, 0), 0.1))
    
    with pytest.raises(ValueError):
        node.head[0] = 5.0
    with pytest.raises(ValueError):
        node.tail[1] = 5.0
    np.testing.assert_array_equal(node.head, [0, 0, 0])


def test_graph_tags_are_unique():
    """Test that every graph gets its own ownership tag."""
    from plant_water.core.ids import GRAPH_IDS, IDGenerator
    
    upcoming = GRAPH_IDS.peek_next_id()
    first, second = Graph(), Graph()
    
    assert first.graph_id == upcoming
    assert second.graph_id == upcoming + 1
    
    ids = IDGenerator(start_id=5)
    assert [ids.next_id(), ids.next_id()] == [5, 6]
    assert ids.peek_next_id() == 7
