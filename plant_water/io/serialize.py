"""
Graph snapshots and format dispatch.

A snapshot is the JSON form of :meth:`Graph.to_dict`: geometry in working
units (cm), adjacency by node ID, and the root. Water model state is never
stored; it is rebuilt from the graph.

:func:`load_graph` and :func:`save_graph` pick JSON or the ``verts``/``edges``
text format from the file suffix.
"""

import json
import logging
from pathlib import Path
from typing import Union

from ..core.graph import Graph
from ..core.errors import ParseError
from ..utils.units import FILE_UNIT
from .graph_format import load_graph_text, save_graph_text

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"
JSON_SUFFIXES = (".json",)

_NODE_KEYS = ("id", "head", "tail", "radius")


def _check_snapshot(data, source: str) -> None:
    if not isinstance(data, dict):
        raise ParseError(f"{source}: snapshot must be a JSON object")
    version = data.get("schema_version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise ParseError(f"{source}: unsupported schema version {version!r}")
    nodes = data.get("nodes")
    if not isinstance(nodes, list) or not nodes:
        raise ParseError(f"{source}: snapshot has no 'nodes' list")
    for position, record in enumerate(nodes):
        missing = [key for key in _NODE_KEYS if key not in record]
        if missing:
            raise ParseError(f"{source}: node record {position} lacks {missing}")


def save_json(graph: Graph, filepath: Union[str, Path], indent: int = 2) -> None:
    """
    Write a graph snapshot.

    Example
    -------
    >>> save_json(graph, "plant.json")
    """
    with open(filepath, "w") as f:
        json.dump(graph.to_dict(), f, indent=indent)
    logger.debug("Saved %d-node snapshot to %s", graph.num_nodes, filepath)


def load_json(filepath: Union[str, Path]) -> Graph:
    """
    Read a graph snapshot and check that it is a single tree.

    Raises
    ------
    ParseError
        If the file is not valid JSON or misses required fields
    TopologyError
        If the stored adjacency is not a tree
    """
    source = str(filepath)
    with open(filepath, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"{source}: invalid JSON ({e.msg})", line_number=e.lineno) from e

    _check_snapshot(data, source)
    graph = Graph.from_dict(data)
    graph.metadata.setdefault("source", source)
    graph.validate()
    return graph


def is_json_path(filepath: Union[str, Path]) -> bool:
    """Whether ``filepath`` names a JSON snapshot."""
    return Path(filepath).suffix.lower() in JSON_SUFFIXES


def load_graph(filepath: Union[str, Path], units: str = FILE_UNIT) -> Graph:
    """
    Load a graph from a snapshot or a text file.

    ``units`` applies to text files only; snapshots are always in
    working units.
    """
    if is_json_path(filepath):
        return load_json(filepath)
    return load_graph_text(filepath, units=units)


def save_graph(graph: Graph, filepath: Union[str, Path], units: str = FILE_UNIT) -> None:
    """Save a graph as a snapshot or a text file, by suffix."""
    if is_json_path(filepath):
        save_json(graph, filepath)
    else:
        save_graph_text(graph, filepath, units=units)
