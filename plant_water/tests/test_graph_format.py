"""
Tests for graph file formats (text and JSON).
"""

import json
import logging

import pytest
import numpy as np
from plant_water.io import (
    parse_graph_text,
    load_graph_text,
    format_graph_text,
    save_graph_text,
    save_json,
    load_json,
)
from plant_water.core.errors import (
    ParseError,
    IndexOutOfRangeError,
    InvalidParameterError,
    TopologyError,
)

SMALL_PLANT = "\n".join([
    "verts 3",
    "0,0.0,0.01,0.0,0.001,0",
    "1,0.01,0.01,0.0,0.001,1",
    "2,-0.01,0.01,0.0,0.002,1",
    "edges 2",
    "0,1",
    "0,2",
]) + "\n"


def test_parse_small_plant():
    """Test parsing a three-node, two-edge plant."""
    graph = parse_graph_text(SMALL_PLANT)
    
    assert graph.num_nodes == 3
    assert graph.num_edges == 2
    assert graph.root_id == 0
    assert graph.metadata["units"] == "m"
    
    assert graph.get_node(0).adjacency == [1, 2]
    assert graph.get_node(1).adjacency == [0]
    assert graph.get_node(2).adjacency == [0]
    
    assert not graph.get_node(0).is_on_leaf
    assert graph.get_node(1).is_on_leaf
    assert graph.get_node(2).radius == pytest.approx(0.2)


def test_parse_scales_to_centimetres():
    """Test that directions are scaled from metres and re-anchored."""
    graph = parse_graph_text(SMALL_PLANT)
    
    root = graph.get_node(0)
    np.testing.assert_array_equal(root.head, [0, 0, 0])
    np.testing.assert_allclose(root.tail, [0, 1, 0])
    
    branch = graph.get_node(1)
    np.testing.assert_array_equal(branch.head, root.tail)
    np.testing.assert_allclose(branch.tail, [1, 2, 0])
    assert branch.length() == pytest.approx(np.sqrt(2))


def test_parse_other_units():
    """Test that directions given in centimetres are not rescaled."""
    graph = parse_graph_text(SMALL_PLANT, units="cm")
    
    np.testing.assert_allclose(graph.get_node(1).direction(), [0.01, 0.01, 0])
    
    with pytest.raises(InvalidParameterError):
        parse_graph_text(SMALL_PLANT, units="furlong")


def test_root_is_shortest_direction():
    """Test that the root is the vertex with the shortest direction."""
    text = "\n".join([
        "verts 3",
        "0,0.0,0.03,0.0,0.001,1",
        "1,0.0,0.02,0.0,0.001,0",
        "2,0.0,0.01,0.0,0.001,0",
        "edges 2",
        "2,1",
        "1,0",
    ])
    graph = parse_graph_text(text)
    
    assert graph.root_id == 2
    np.testing.assert_array_equal(graph.root.head, [0, 0, 0])
    np.testing.assert_allclose(graph.get_node(0).tail, [0, 6, 0])


def test_parse_ignores_comments_and_blank_lines():
    """Test that comments and blank lines are skipped."""
    text = "# a small plant\n\n" + SMALL_PLANT.replace("edges 2", "\nedges 2")
    graph = parse_graph_text(text)
    assert graph.num_nodes == 3


@pytest.mark.parametrize("text", [
    "vertices 3\n",
    "verts three\n",
    "verts 0\nedges 0\n",
    "verts 2\n0,0,0.01,0,0.001,0\n",
    "verts 1\n0,0,0.01,0,0.001\nedges 0\n",
    "verts 1\n0,0,abc,0,0.001,0\nedges 0\n",
    "verts 1\n0,0,0.01,0,0.001,0\nedgez 0\n",
    "verts 2\n0,0,0.01,0,0.001,0\n1,0,0.02,0,0.001,0\nedges 1\n0\n",
    "verts 2\n0,0,0.01,0,0.001,0\n1,0,0.02,0,0.001,0\nedges 1\n0,x\n",
    "verts 2\n0,0,0.01,0,0.001,0\n1,0,0.02,0,0.001,0\nedges 1\n",
])
def test_malformed_input(text):
    """Test that malformed input raises a parse error."""
    with pytest.raises(ParseError):
        parse_graph_text(text)


def test_parse_error_reports_line():
    """Test that parse errors carry the offending line number."""
    with pytest.raises(ParseError) as excinfo:
        parse_graph_text("verts 1\n0,0,abc,0,0.001,0\nedges 0\n")
    assert excinfo.value.line_number == 2
    assert str(excinfo.value).startswith("line 2:")


def test_edge_out_of_range():
    """Test that an edge to a missing vertex is an index error."""
    text = SMALL_PLANT.replace("0,2\n", "0,5\n")
    with pytest.raises(IndexOutOfRangeError):
        parse_graph_text(text)


def test_disconnected_plant():
    """Test that a vertex without edges is a topology error."""
    text = SMALL_PLANT.replace("edges 2\n0,1\n0,2\n", "edges 1\n0,1\n")
    with pytest.raises(TopologyError):
        parse_graph_text(text)


def test_mismatched_vertex_id_warns(caplog):
    """Test that vertex labels out of order only produce a warning."""
    text = SMALL_PLANT.replace("1,0.01,0.01", "7,0.01,0.01")
    with caplog.at_level(logging.WARNING, logger="plant_water"):
        graph = parse_graph_text(text)
    
    assert graph.num_nodes == 3
    assert "labelled 7" in caplog.text


def test_text_roundtrip(y_graph_text, temp_dir):
    """Test saving and reloading the text format."""
    graph = parse_graph_text(y_graph_text)
    filepath = temp_dir / "plant.graph"
    
    save_graph_text(graph, filepath)
    loaded = load_graph_text(filepath)
    
    assert loaded.metadata["source"] == str(filepath)
    assert loaded.num_nodes == graph.num_nodes
    assert loaded.edges() == graph.edges()
    assert loaded.root_id == graph.root_id
    for a, b in zip(loaded.nodes, graph.nodes):
        np.testing.assert_allclose(a.tail, b.tail)
        assert a.radius == pytest.approx(b.radius)
        assert a.is_on_leaf == b.is_on_leaf


def test_format_graph_text(y_graph_text):
    """Test the text layout of a formatted graph."""
    graph = parse_graph_text(y_graph_text)
    lines = format_graph_text(graph).splitlines()
    
    assert lines[0] == "verts 4"
    assert lines[5] == "edges 3"
    assert lines[6:] == ["0,1", "1,2", "1,3"]
    assert lines[3].endswith(",1")


def test_json_roundtrip(y_graph, temp_dir):
    """Test saving and loading JSON."""
    filepath = temp_dir / "plant.json"
    
    save_json(y_graph, filepath)
    loaded = load_json(filepath)
    
    assert loaded.num_nodes == y_graph.num_nodes
    assert loaded.edges() == y_graph.edges()
    assert loaded.metadata["name"] == "Y"
    np.testing.assert_array_equal(loaded.get_node(3).tail, y_graph.get_node(3).tail)


def test_json_errors(y_graph, temp_dir):
    """Test invalid JSON documents."""
    broken = temp_dir / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ParseError):
        load_json(broken)
    
    data = y_graph.to_dict()
    data["schema_version"] = "9.9"
    future = temp_dir / "future.json"
    future.write_text(json.dumps(data))
    with pytest.raises(ParseError):
        load_json(future)
    
    data = y_graph.to_dict()
    data["nodes"][0]["adjacency"].append(3)
    cyclic = temp_dir / "cyclic.json"
    cyclic.write_text(json.dumps(data))
    with pytest.raises(TopologyError):
        load_json(cyclic)


def test_saved_graph_reloads_with_same_root(temp_dir):
    """Test a round trip of a leafless three-node plant built in code."""
    from plant_water.core.graph import Graph
    
    graph = Graph()
    graph.add_node((0, 0, 0), (0, 3, 0), 0.2)
    graph.add_node((0, 0, 0), (0, 1, 0), 0.3)
    graph.add_node((0, 0, 0), (2, 2, 0), 0.1)
    graph.add_connection(1, 0)
    graph.add_connection(0, 2)
    graph.set_root(1)
    graph.recompute_heads_and_tails()
    filepath = temp_dir / "three.graph"
    
    save_graph_text(graph, filepath)
    loaded = load_graph_text(filepath)
    
    assert loaded.num_nodes == 3
    assert loaded.root_id == 1
    assert not any(node.is_on_leaf for node in loaded.nodes)
    for node in loaded.nodes:
        for j in node.adjacency:
            assert loaded.get_node(j).is_adjacent(node)


def test_json_snapshot_checks(y_graph, temp_dir):
    """Test that snapshots without usable node records are rejected."""
    empty = temp_dir / "empty.json"
    empty.write_text(json.dumps({"schema_version": "1.0", "nodes": []}))
    with pytest.raises(ParseError):
        load_json(empty)
    
    data = y_graph.to_dict()
    del data["nodes"][2]["radius"]
    partial = temp_dir / "partial.json"
    partial.write_text(json.dumps(data))
    with pytest.raises(ParseError):
        load_json(partial)
    
    listing = temp_dir / "listing.json"
    listing.write_text("[1, 2, 3]")
    with pytest.raises(ParseError):
        load_json(listing)


def test_load_graph_dispatches_on_suffix(y_graph_text, temp_dir):
    """Test that load_graph and save_graph pick the format from the suffix."""
    from plant_water.io import load_graph, save_graph
    
    graph = parse_graph_text(y_graph_text)
    snapshot = temp_dir / "plant.JSON"
    text = temp_dir / "plant.graph"
    
    save_graph(graph, snapshot)
    save_graph(graph, text)
    
    assert snapshot.read_text().lstrip().startswith("{")
    assert text.read_text().startswith("verts 4")
    from_json = load_graph(snapshot)
    from_text = load_graph(text)
    assert from_json.metadata["source"] == str(snapshot)
    assert from_json.edges() == from_text.edges() == graph.edges()
    for a, b in zip(from_json.nodes, from_text.nodes):
        np.testing.assert_allclose(a.tail, b.tail)
