import pytest
import numpy as np
from pathlib import Path
import tempfile

from plant_water.core.graph import Graph


def build_chain(num_nodes=5, radius=0.1, leaf_last=True):
    """Straight chain of unit-length segments along +y, root = node 0."""
    graph = Graph(metadata={"name": f"chain-{num_nodes}"})
    for i in range(num_nodes):
        graph.add_node(
            (0.0, 0.0, 0.0),
            (0.0, 1.0, 0.0),
            radius=radius,
            is_on_leaf=leaf_last and i == num_nodes - 1,
        )
    for i in range(num_nodes - 1):
        graph.add_connection(i, i + 1)
    graph.recompute_heads_and_tails()
    return graph


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def chain_graph():
    """Five-node chain, last node on a leaf."""
    return build_chain(5)


@pytest.fixture
def y_graph():
    """
    Y-shaped plant: stem (0) -> trunk (1) -> two leaf twigs (2, 3).
    """
    graph = Graph(metadata={"name": "Y"})
    graph.add_node((0, 0, 0), (0, 2.0, 0), radius=0.2)
    graph.add_node((0, 0, 0), (0, 1.5, 0), radius=0.15)
    graph.add_node((0, 0, 0), (0.7, 0.7, 0), radius=0.05, is_on_leaf=True)
    graph.add_node((0, 0, 0), (-0.7, 0.7, 0), radius=0.05, is_on_leaf=True)
    graph.add_connection(0, 1)
    graph.add_connection(1, 2)
    graph.add_connection(1, 3)
    graph.recompute_heads_and_tails()
    return graph


@pytest.fixture
def y_graph_text():
    """Text description of a small Y-shaped plant (metres)."""
    return "\n".join([
        "verts 4",
        "0,0.0,0.01,0.0,0.002,0",
        "1,0.0,0.02,0.0,0.0015,0",
        "2,0.008,0.008,0.0,0.0005,1",
        "3,-0.008,0.008,0.0,0.0005,1",
        "edges 3",
        "0,1",
        "1,2",
        "1,3",
    ]) + "\n"


@pytest.fixture
def make_chain():
    """Factory for straight chains of arbitrary length."""
    return build_chain
