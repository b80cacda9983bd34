"""Plotting helpers for vascular graphs and simulation results."""

from .network_plots import plot_graph, plot_water_history

__all__ = ["plot_graph", "plot_water_history"]
