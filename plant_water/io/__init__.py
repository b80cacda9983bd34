"""I/O functions for saving and loading vascular graphs."""

from .graph_format import parse_graph_text, load_graph_text, format_graph_text, save_graph_text
from .serialize import save_json, load_json, load_graph, save_graph

__all__ = [
    "parse_graph_text",
    "load_graph_text",
    "format_graph_text",
    "save_graph_text",
    "save_json",
    "load_json",
    "load_graph",
    "save_graph",
]
