"""
Core vascular graph data structure.
"""

import logging
from collections import deque
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

from .types import Vector3Like
from .node import Node, MIN_SEGMENT_LENGTH
from .ids import GRAPH_IDS
from .errors import (
    NullReferenceError,
    IndexOutOfRangeError,
    InvalidParameterError,
    InvalidGeometryError,
    NotFoundError,
    TopologyError,
)

logger = logging.getLogger(__name__)


class Graph:
    """
    Rooted tree of cylindrical segments (a vascular graph).

    The graph owns its nodes in an arena indexed by stable integer IDs
    ``0..N-1``. IDs are assigned in insertion order and only change when
    :meth:`reset_ids` or :meth:`remove_node` is called explicitly.

    Example
    -------
    >>> graph = Graph()
    >>> trunk = graph.add_node((0, 0, 0), (0, 1, 0), radius=0.1)
    >>> branch = graph.add_node((0, 0, 0), (1, 1, 0), radius=0.05, is_on_leaf=True)
    >>> graph.add_connection(trunk, branch)
    >>> graph.recompute_heads_and_tails()
    """

    def __init__(self, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize an empty graph.

        Parameters
        ----------
        metadata : dict, optional
            Free-form metadata (name, source file, units, ...)
        """
        self.graph_id = GRAPH_IDS.next_id()
        self.metadata = metadata or {}
        self._nodes: List[Node] = []
        self._root_id: Optional[int] = None

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes))

    def __repr__(self) -> str:
        return f"Graph(num_nodes={self.num_nodes}, root={self._root_id})"

    @property
    def num_nodes(self) -> int:
        """Number of nodes."""
        return len(self._nodes)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        """All nodes ordered by ID."""
        return tuple(self._nodes)

    @property
    def root(self) -> Optional[Node]:
        """Transport origin of the tree (``None`` for an empty graph)."""
        if self._root_id is None:
            return None
        return self._nodes[self._root_id]

    @property
    def root_id(self) -> Optional[int]:
        """ID of the root node."""
        return self._root_id

    def set_root(self, node_id: int) -> None:
        """Designate the node with ID ``node_id`` as root."""
        self._check_id(node_id)
        self._root_id = node_id

    def _check_id(self, node_id: int) -> None:
        if not isinstance(node_id, (int, np.integer)) or not 0 <= node_id < self.num_nodes:
            raise IndexOutOfRangeError(
                f"Node ID {node_id} not in [0, {self.num_nodes})",
                context={"node_id": node_id, "num_nodes": self.num_nodes},
            )

    def get_node(self, node_id: int) -> Node:
        """Get node by ID."""
        self._check_id(node_id)
        return self._nodes[node_id]

    def get_node_id(self, node: Node) -> int:
        """Get the ID of a node of this graph."""
        if node is None:
            raise NullReferenceError("Cannot look up the ID of a null node")
        if (
            node.graph_id != self.graph_id
            or not 0 <= node.id < self.num_nodes
            or self._nodes[node.id] is not node
        ):
            raise NotFoundError(
                f"Node {node.id} does not belong to this graph",
                context={"graph_id": self.graph_id, "node_graph_id": node.graph_id},
            )
        return node.id

    def neighbors(self, node_id: int) -> List[int]:
        """IDs adjacent to ``node_id``."""
        return list(self.get_node(node_id).adjacency)

    def edges(self) -> List[Tuple[int, int]]:
        """Unique undirected connections as ``(i, j)`` with ``i < j``."""
        return [
            (node.id, j)
            for node in self._nodes
            for j in node.adjacency
            if node.id < j
        ]

    @property
    def num_edges(self) -> int:
        """Number of undirected connections."""
        return sum(node.degree for node in self._nodes) // 2

    def add_node(
        self,
        head: Vector3Like,
        tail: Vector3Like,
        radius: float,
        is_on_leaf: bool = False,
    ) -> int:
        """
        Append a disconnected node.

        The first node added becomes the root.

        Parameters
        ----------
        head, tail : sequence of float
            End points of the segment
        radius : float
            Segment radius (> 0)
        is_on_leaf : bool
            Whether the segment transpires

        Returns
        -------
        node_id : int
            ID of the new node
        """
        node = Node(self.graph_id, self.num_nodes, head, tail, radius, is_on_leaf)
        self._nodes.append(node)
        if self._root_id is None:
            self._root_id = node.id
        return node.id

    def add_connection(self, id1: int, id2: int) -> None:
        """Connect two nodes (no-op if already connected)."""
        self._check_id(id1)
        self._check_id(id2)
        if id1 == id2:
            raise InvalidParameterError(
                f"Cannot connect node {id1} to itself",
                context={"node_id": id1},
            )
        n1 = self._nodes[id1]
        n2 = self._nodes[id2]
        n1.add_adjacent(n2)
        n2.add_adjacent(n1)

    def remove_connection(self, id1: int, id2: int) -> None:
        """
        Remove the connection between two nodes.

        Heads and tails are not recomputed.
        """
        self._check_id(id1)
        self._check_id(id2)
        n1 = self._nodes[id1]
        n2 = self._nodes[id2]
        n1.remove_adjacent(n2)
        n2.remove_adjacent(n1)

    def remove_node(self, node_id: int) -> None:
        """
        Remove a node and splice the tree back together.

        The children of the removed node are attached to its parent. If
        the root is removed, its first neighbour becomes the new root and
        adopts the other neighbours; an isolated root is replaced by node 0.
        Nodes with a higher ID are renumbered down by one and heads/tails
        are recomputed.
        """
        self._check_id(node_id)
        parents = self.bfs_parents()
        node = self._nodes[node_id]
        neighbours = list(node.adjacency)

        if node_id in parents:
            parent_id = parents[node_id]
            if parent_id is None:
                anchor = neighbours[0] if neighbours else None
            else:
                anchor = parent_id
            for nid in neighbours:
                self._nodes[nid].remove_adjacent(node)
            if anchor is not None:
                for nid in neighbours:
                    if nid != anchor:
                        self.add_connection(anchor, nid)
            if parent_id is None:
                self._root_id = anchor
        else:
            for nid in neighbours:
                self._nodes[nid].remove_adjacent(node)

        del self._nodes[node_id]
        for other in self._nodes:
            if other.id > node_id:
                other.id -= 1
            other.adjacency = [j - 1 if j > node_id else j for j in other.adjacency]
        if self._root_id is not None and self._root_id > node_id:
            self._root_id -= 1
        if not self._nodes:
            self._root_id = None
            return
        if self._root_id is None:
            # An isolated root was removed from a graph under construction.
            self._root_id = 0
            logger.warning("Removed isolated root %d, node 0 is the new root", node_id)

        logger.debug("Removed node %d, %d nodes left", node_id, self.num_nodes)
        # Graphs still under construction may have loose nodes.
        if len(self.bfs_parents()) == self.num_nodes:
            self.recompute_heads_and_tails()

    def bfs_parents(self) -> Dict[int, Optional[int]]:
        """
        Breadth-first parent of every node reachable from the root.

        The root maps to ``None``. Iteration order of the returned dict
        is the BFS visiting order.
        """
        if self._root_id is None:
            return {}
        parents: Dict[int, Optional[int]] = {self._root_id: None}
        queue = deque([self._root_id])
        while queue:
            nid = queue.popleft()
            for cid in self._nodes[nid].adjacency:
                if cid in parents:
                    continue
                parents[cid] = nid
                queue.append(cid)
        return parents

    def bfs_order(self) -> List[int]:
        """Node IDs in breadth-first order from the root."""
        return list(self.bfs_parents())

    def reset_ids(self) -> None:
        """
        Renumber nodes in breadth-first order from the root.

        The root becomes node 0.
        """
        order = self.bfs_order()
        if len(order) != self.num_nodes:
            raise TopologyError(
                f"Cannot renumber: {self.num_nodes - len(order)} nodes are "
                f"unreachable from the root",
            )
        mapping = {old: new for new, old in enumerate(order)}
        self._nodes = [self._nodes[old] for old in order]
        for node in self._nodes:
            node.id = mapping[node.id]
            node.adjacency = [mapping[j] for j in node.adjacency]
        self._root_id = 0

    def recompute_heads_and_tails(self, keep_tail: bool = False) -> None:
        """
        Re-anchor every segment to the tail of its BFS parent.

        For each child reached from a node ``n`` the child head is set to
        ``n.tail``. Unless ``keep_tail`` is set, the child tail is moved
        along so that the segment keeps its original direction and length.
        The root head stays where it is.

        Raises
        ------
        TopologyError
            If a node is unreachable from the root or a cycle is found
        InvalidGeometryError
            If ``keep_tail`` would make a segment degenerate

        The graph is left untouched when an error is raised.
        """
        if self._root_id is None:
            return
        root = self._nodes[self._root_id]
        tails: Dict[int, np.ndarray] = {self._root_id: root._tail}
        parents: Dict[int, Optional[int]] = {self._root_id: None}
        updates: List[Tuple[int, np.ndarray, np.ndarray]] = []
        queue = deque([self._root_id])
        while queue:
            nid = queue.popleft()
            for cid in self._nodes[nid].adjacency:
                if cid in parents:
                    if cid != parents[nid]:
                        raise TopologyError(
                            f"Cycle detected through nodes {nid} and {cid}",
                            context={"node_ids": (nid, cid)},
                        )
                    continue
                child = self._nodes[cid]
                head = tails[nid].copy()
                tail = child._tail.copy() if keep_tail else head + child.direction()
                if np.linalg.norm(tail - head) <= MIN_SEGMENT_LENGTH:
                    raise InvalidGeometryError(
                        f"Node {cid}: head and tail would coincide at {head.tolist()}",
                        context={"node_id": cid},
                    )
                updates.append((cid, head, tail))
                tails[cid] = tail
                parents[cid] = nid
                queue.append(cid)

        if len(parents) != self.num_nodes:
            unreachable = sorted(set(range(self.num_nodes)) - set(parents))
            raise TopologyError(
                f"{len(unreachable)} nodes are unreachable from root {self._root_id}",
                context={"unreachable": unreachable[:20]},
            )

        # Nothing is moved until the whole tree has been checked.
        for cid, head, tail in updates:
            self._nodes[cid]._set_endpoints(head, tail)

    def validate(self) -> None:
        """
        Check that the graph is a single connected tree.

        Raises
        ------
        TopologyError
            If the graph is empty, disconnected or has a cycle
        """
        import networkx as nx
        from ..adapters.networkx_adapter import to_networkx_graph

        if self.num_nodes == 0:
            raise TopologyError("Graph has no nodes")
        G = to_networkx_graph(self)
        if not nx.is_connected(G):
            components = nx.number_connected_components(G)
            raise TopologyError(
                f"Graph is split into {components} components",
                context={"num_components": components},
            )
        if not nx.is_tree(G):
            raise TopologyError(
                f"Graph has {G.number_of_edges()} edges for {G.number_of_nodes()} "
                f"nodes and contains a cycle",
            )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "schema_version": "1.0",
            "root_id": self._root_id,
            "nodes": [node.to_dict() for node in self._nodes],
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Graph":
        """Create from dictionary."""
        graph = cls(metadata=d.get("metadata", {}))
        records = sorted(d["nodes"], key=lambda n: n["id"])
        for expected, record in enumerate(records):
            if record["id"] != expected:
                raise IndexOutOfRangeError(
                    f"Node IDs must be contiguous, expected {expected} got {record['id']}",
                )
            graph.add_node(
                record["head"],
                record["tail"],
                record["radius"],
                record.get("is_on_leaf", False),
            )
        for record in records:
            for j in record.get("adjacency", []):
                graph.add_connection(record["id"], j)
        if d.get("root_id") is not None:
            graph.set_root(d["root_id"])
        return graph
