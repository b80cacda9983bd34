"""
Adapter for converting between Graph and NetworkX graphs.

NetworkX is used for topology checks and for handing vascular graphs to
external analysis code.
"""

import networkx as nx
from typing import Dict, Hashable, Optional, Tuple
from ..core.graph import Graph
from ..core.errors import InvalidParameterError, NotFoundError


def to_networkx_graph(graph: Graph) -> nx.Graph:
    """
    Convert a vascular Graph to a NetworkX graph.

    NetworkX node labels are the graph IDs. The resulting graph has node
    attributes:
    - 'head', 'tail': [x, y, z] end points as lists
    - 'radius': float radius
    - 'length': float segment length
    - 'volume': float cylinder volume
    - 'is_on_leaf': bool transpiration flag
    - 'is_root': bool

    Parameters
    ----------
    graph : Graph
        The vascular graph to convert

    Returns
    -------
    G : nx.Graph
        NetworkX graph representation
    """
    G = nx.Graph(**graph.metadata)

    for node in graph.nodes:
        G.add_node(
            node.id,
            head=node.head.tolist(),
            tail=node.tail.tolist(),
            radius=node.radius,
            length=node.length(),
            volume=node.volume(),
            is_on_leaf=node.is_on_leaf,
            is_root=node.id == graph.root_id,
        )

    G.add_edges_from(graph.edges())

    return G


def from_networkx_graph(
    G: nx.Graph,
    root: Optional[Hashable] = None,
    recompute: bool = False,
) -> Tuple[Graph, Dict[Hashable, int]]:
    """
    Convert a NetworkX graph to a vascular Graph.

    Every NetworkX node must carry 'head', 'tail' and 'radius' attributes;
    'is_on_leaf' defaults to False. Nodes get IDs in ``G.nodes`` order.

    Parameters
    ----------
    G : nx.Graph
        NetworkX graph
    root : hashable, optional
        Label of the root node. If None, a node flagged 'is_root' is used,
        falling back to the first node
    recompute : bool
        Whether to re-anchor heads and tails after conversion

    Returns
    -------
    graph : Graph
        Vascular graph
    node_id_map : dict
        Mapping from NetworkX labels to graph IDs
    """
    graph = Graph(metadata=dict(G.graph))
    node_id_map: Dict[Hashable, int] = {}

    for label, data in G.nodes(data=True):
        missing = [key for key in ("head", "tail", "radius") if key not in data]
        if missing:
            raise InvalidParameterError(
                f"NetworkX node {label!r} is missing attributes {missing}"
            )
        node_id_map[label] = graph.add_node(
            data["head"],
            data["tail"],
            data["radius"],
            data.get("is_on_leaf", False),
        )

    for u, v in G.edges():
        graph.add_connection(node_id_map[u], node_id_map[v])

    if root is None:
        flagged = [label for label, is_root in G.nodes(data="is_root") if is_root]
        if flagged:
            root = flagged[0]
    if root is not None:
        if root not in node_id_map:
            raise NotFoundError(f"Root {root!r} is not a node of the NetworkX graph")
        graph.set_root(node_id_map[root])

    if recompute:
        graph.recompute_heads_and_tails()

    return graph, node_id_map
