"""
Segment node of a vascular graph.
"""

from typing import List, Optional
import numpy as np
from scipy.spatial.transform import Rotation

from .types import Vector3Like, REFERENCE_AXIS, as_vector3, rotation_between
from .errors import (
    NullReferenceError,
    IndexOutOfRangeError,
    InvalidParameterError,
    InvalidGeometryError,
    CrossGraphReferenceError,
    NotFoundError,
)

MIN_SEGMENT_LENGTH = 1e-16


class Node:
    """
    Rigid cylindrical segment of a vascular graph.

    A node is a piece of stem, branch or leaf-bearing twig going from
    ``head`` to ``tail`` with constant ``radius``. Neighbours are stored
    as node IDs of the owning graph.

    Nodes are created by :meth:`Graph.add_node`; the graph is the only
    writer of ``id`` and of the adjacency IDs.

    Parameters
    ----------
    graph_id : int
        Ownership tag of the graph this node belongs to
    node_id : int
        Position of the node in the owning graph
    head, tail : sequence of float
        End points of the cylinder
    radius : float
        Cylinder radius (> 0)
    is_on_leaf : bool
        Whether the segment transpires (loses water)
    """

    def __init__(
        self,
        graph_id: Optional[int],
        node_id: int,
        head: Vector3Like,
        tail: Vector3Like,
        radius: float,
        is_on_leaf: bool = False,
    ):
        if graph_id is None:
            raise NullReferenceError("Node requires an owning graph")

        head = as_vector3(head, "head")
        tail = as_vector3(tail, "tail")
        if np.linalg.norm(tail - head) <= MIN_SEGMENT_LENGTH:
            raise InvalidGeometryError(
                f"Node {node_id}: head and tail coincide at {head.tolist()}",
                context={"node_id": node_id},
            )
        if not radius > 0:
            raise InvalidParameterError(
                f"Node {node_id}: radius must be positive, got {radius}",
                context={"node_id": node_id, "radius": radius},
            )

        self.graph_id = graph_id
        self.id = node_id
        self._head = head
        self._tail = tail
        self.radius = float(radius)
        self.is_on_leaf = bool(is_on_leaf)
        self.adjacency: List[int] = []

    def __repr__(self) -> str:
        return (
            f"Node(id={self.id}, radius={self.radius:g}, "
            f"length={self.length():g}, leaf={self.is_on_leaf}, "
            f"adjacent={self.adjacency})"
        )

    @property
    def head(self) -> np.ndarray:
        """Start point of the segment (read-only view)."""
        view = self._head.view()
        view.flags.writeable = False
        return view

    @property
    def tail(self) -> np.ndarray:
        """End point of the segment (read-only view)."""
        view = self._tail.view()
        view.flags.writeable = False
        return view

    def _set_endpoints(self, head: np.ndarray, tail: np.ndarray) -> None:
        """Move the segment. Only the owning graph calls this."""
        if np.linalg.norm(tail - head) <= MIN_SEGMENT_LENGTH:
            raise InvalidGeometryError(
                f"Node {self.id}: head and tail would coincide at {head.tolist()}",
                context={"node_id": self.id},
            )
        self._head = np.array(head, dtype=float)
        self._tail = np.array(tail, dtype=float)

    def direction(self) -> np.ndarray:
        """Vector from head to tail."""
        return self._tail - self._head

    def length(self) -> float:
        """Segment length."""
        return float(np.linalg.norm(self.direction()))

    def area(self) -> float:
        """Lateral cross-section area (length x radius)."""
        return self.length() * self.radius

    def volume(self) -> float:
        """Cylinder volume."""
        return float(np.pi * self.radius ** 2 * self.length())

    def rotation(self) -> Rotation:
        """Rotation taking the reference axis (0, 1, 0) onto the segment direction."""
        return rotation_between(REFERENCE_AXIS, self.direction())

    @property
    def degree(self) -> int:
        """Number of adjacent nodes."""
        return len(self.adjacency)

    def get_adjacent(self, i: int) -> int:
        """ID of the ``i``-th adjacent node."""
        if not 0 <= i < self.degree:
            raise IndexOutOfRangeError(
                f"Node {self.id}: adjacency index {i} not in [0, {self.degree})",
                context={"node_id": self.id, "index": i},
            )
        return self.adjacency[i]

    def is_adjacent(self, other: "Node") -> bool:
        """Check whether ``other`` is a neighbour of this node."""
        return other.graph_id == self.graph_id and other.id in self.adjacency

    def add_adjacent(self, other: "Node") -> None:
        """
        Add ``other`` as a neighbour.

        Adding an existing neighbour is a no-op. Only the forward link is
        stored; :meth:`Graph.add_connection` keeps the relation symmetric.
        """
        if other is None:
            raise NullReferenceError(f"Node {self.id}: cannot add a null neighbour")
        if other.graph_id != self.graph_id:
            raise CrossGraphReferenceError(
                f"Node {self.id} and node {other.id} belong to different graphs",
                context={"graph_ids": (self.graph_id, other.graph_id)},
            )
        if other.id == self.id:
            raise InvalidParameterError(f"Node {self.id}: self-loops are not allowed")
        if other.id not in self.adjacency:
            self.adjacency.append(other.id)

    def remove_adjacent(self, other: "Node") -> None:
        """Remove ``other`` from the neighbours."""
        if other is None:
            raise NullReferenceError(f"Node {self.id}: cannot remove a null neighbour")
        if not self.is_adjacent(other):
            raise NotFoundError(
                f"Node {other.id} is not adjacent to node {self.id}",
                context={"node_id": self.id, "other_id": other.id},
            )
        self.adjacency.remove(other.id)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "head": self._head.tolist(),
            "tail": self._tail.tolist(),
            "radius": self.radius,
            "is_on_leaf": self.is_on_leaf,
            "adjacency": list(self.adjacency),
        }
