"""
Line-oriented text format for vascular graphs.

::

    verts <N>
    <id>,<dx>,<dy>,<dz>,<radius>,<isLeaf 0|1>     (N lines, ID order)
    edges <M>
    <id1>,<id2>                                  (M lines)

Directions and radii are stored in file units (metres) and scaled to the
working unit on load. Every segment starts at the origin; heads and tails
are then re-anchored from the root by breadth-first propagation.
"""

import logging
import re
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import numpy as np

from ..core.graph import Graph
from ..core.errors import ParseError
from ..utils.units import FILE_UNIT, length_scale

logger = logging.getLogger(__name__)

_VERTS_HEADER = re.compile(r"^verts\s+(\d+)$")
_EDGES_HEADER = re.compile(r"^edges\s+(\d+)$")


def _content_lines(text: str) -> Iterator[Tuple[int, str]]:
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if line and not line.startswith("#"):
            yield number, line


def _next_line(lines: Iterator[Tuple[int, str]], what: str) -> Tuple[int, str]:
    try:
        return next(lines)
    except StopIteration:
        raise ParseError(f"unexpected end of input while reading {what}") from None


def _read_header(lines: Iterator[Tuple[int, str]], pattern: "re.Pattern", what: str) -> int:
    number, line = _next_line(lines, f"'{what}' header")
    match = pattern.match(line)
    if match is None:
        raise ParseError(f"expected '{what} <count>', got {line!r}", line_number=number)
    return int(match.group(1))


def _split_record(line: str, number: int, n_fields: int, what: str) -> List[str]:
    fields = [f.strip() for f in line.split(",")]
    if len(fields) != n_fields:
        raise ParseError(
            f"{what} record needs {n_fields} fields, got {len(fields)}",
            line_number=number,
        )
    return fields


def parse_graph_text(
    text: str,
    units: str = FILE_UNIT,
    metadata: Optional[dict] = None,
) -> Graph:
    """
    Build a graph from its text description.

    The root is the vertex whose direction has the smallest magnitude.

    Parameters
    ----------
    text : str
        Graph description
    units : str
        Length unit of the directions and radii in ``text``. Default: 'm'
    metadata : dict, optional
        Metadata attached to the returned graph

    Returns
    -------
    graph : Graph
        Connected tree with heads and tails recomputed

    Raises
    ------
    ParseError
        If a header or record is malformed
    IndexOutOfRangeError
        If an edge references a missing vertex
    TopologyError
        If the edges do not form a single tree
    """
    scale = length_scale(units)
    lines = _content_lines(text)
    graph = Graph(metadata=dict(metadata or {}, units=units))

    n_verts = _read_header(lines, _VERTS_HEADER, "verts")
    if n_verts == 0:
        raise ParseError("graph has no vertices")

    root_id = -1
    root_norm = np.inf
    for i in range(n_verts):
        number, line = _next_line(lines, f"vertex {i}")
        fields = _split_record(line, number, 6, "vertex")
        try:
            file_id = int(fields[0])
            direction = np.array([float(v) for v in fields[1:4]])
            radius = float(fields[4])
            on_leaf = int(fields[5]) != 0
        except ValueError as e:
            raise ParseError(f"invalid vertex record: {e}", line_number=number) from e

        if file_id != i:
            logger.warning(
                "Line %d: vertex labelled %d is stored as node %d", number, file_id, i
            )

        graph.add_node(np.zeros(3), scale * direction, scale * radius, on_leaf)
        norm2 = float(direction @ direction)
        if norm2 < root_norm:
            root_id = i
            root_norm = norm2

    graph.set_root(root_id)

    n_edges = _read_header(lines, _EDGES_HEADER, "edges")
    for i in range(n_edges):
        number, line = _next_line(lines, f"edge {i}")
        fields = _split_record(line, number, 2, "edge")
        try:
            id1, id2 = int(fields[0]), int(fields[1])
        except ValueError as e:
            raise ParseError(f"invalid edge record: {e}", line_number=number) from e
        graph.add_connection(id1, id2)

    leftover = sum(1 for _ in lines)
    if leftover:
        logger.warning("Ignoring %d trailing lines after the edge list", leftover)

    graph.recompute_heads_and_tails()

    logger.info(
        "Loaded graph: %d nodes, %d edges, root %d",
        graph.num_nodes, graph.num_edges, root_id,
    )
    return graph


def load_graph_text(filepath: Union[str, Path], units: str = FILE_UNIT) -> Graph:
    """
    Load a vascular graph from a text file.

    Example
    -------
    >>> from plant_water import load_graph_text
    >>> graph = load_graph_text("plant.graph")
    """
    filepath = Path(filepath)
    with open(filepath, "r") as f:
        text = f.read()
    return parse_graph_text(text, units=units, metadata={"source": str(filepath)})


def format_graph_text(graph: Graph, units: str = FILE_UNIT) -> str:
    """Render a graph in the text format (directions in ``units``)."""
    scale = length_scale(units)
    lines = [f"verts {graph.num_nodes}"]
    for node in graph.nodes:
        dx, dy, dz = node.direction() / scale
        lines.append(
            f"{node.id},{dx:.17g},{dy:.17g},{dz:.17g},"
            f"{node.radius / scale:.17g},{int(node.is_on_leaf)}"
        )
    edges = graph.edges()
    lines.append(f"edges {len(edges)}")
    lines.extend(f"{i},{j}" for i, j in edges)
    return "\n".join(lines) + "\n"


def save_graph_text(graph: Graph, filepath: Union[str, Path], units: str = FILE_UNIT) -> None:
    """Save a vascular graph to a text file."""
    filepath = Path(filepath)
    with open(filepath, "w") as f:
        f.write(format_graph_text(graph, units=units))
