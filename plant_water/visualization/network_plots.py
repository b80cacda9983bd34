"""Graph and water visualization functions for debugging and inspection."""

from typing import Optional, Sequence
import numpy as np
import matplotlib
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401

from ..core.graph import Graph
from ..core.errors import InvalidParameterError


def plot_graph(
    graph: Graph,
    water: Optional[Sequence[float]] = None,
    ax: Optional[plt.Axes] = None,
    show: bool = True,
    title: Optional[str] = None,
    cmap: str = "viridis",
) -> plt.Axes:
    """
    Plot a vascular graph in 3D, one line per segment from head to tail.
    
    Parameters
    ----------
    graph : Graph
        Graph to plot
    water : sequence of float, optional
        Per-node water used to color the segments
    ax : matplotlib Axes3D, optional
        Existing axes
    show : bool
        Whether to call plt.show()
    title : str, optional
        Plot title
    cmap : str
        Colormap name used with ``water``
        
    Returns
    -------
    ax : matplotlib Axes3D
        Axes object
    """
    if ax is None:
        fig = plt.figure(figsize=(12, 10))
        ax = fig.add_subplot(111, projection='3d')
    
    if water is not None:
        water = np.asarray(water, dtype=float)
        if water.shape != (graph.num_nodes,):
            raise InvalidParameterError(
                f"Expected {graph.num_nodes} water values, got {water.size}"
            )
        norm = matplotlib.colors.Normalize(vmin=water.min(), vmax=water.max())
        colormap = matplotlib.colormaps[cmap]
    
    max_radius = max((node.radius for node in graph.nodes), default=1.0)
    for node in graph.nodes:
        head, tail = node.head, node.tail
        if water is not None:
            color = colormap(norm(water[node.id]))
        else:
            color = 'green' if node.is_on_leaf else 'saddlebrown'
        ax.plot(
            [head[0], tail[0]], [head[1], tail[1]], [head[2], tail[2]],
            color=color, linewidth=1.0 + 4.0 * node.radius / max_radius, alpha=0.8,
        )
    
    root = graph.root
    if root is not None:
        ax.scatter(*root.head, c='black', s=20)
    
    if water is not None:
        mappable = matplotlib.cm.ScalarMappable(norm=norm, cmap=colormap)
        mappable.set_array(water)
        ax.figure.colorbar(mappable, ax=ax, label='Water')
    
    ax.set_xlabel('X (cm)')
    ax.set_ylabel('Y (cm)')
    ax.set_zlabel('Z (cm)')
    
    if title:
        ax.set_title(title)
    
    if show:
        plt.show()
    
    return ax


def plot_water_history(
    times: Sequence[float],
    totals: Sequence[float],
    ax: Optional[plt.Axes] = None,
    show: bool = True,
    title: Optional[str] = "Total water",
) -> plt.Axes:
    """
    Plot total water against time.
    
    Returns
    -------
    ax : matplotlib Axes
        Axes object
    """
    if len(times) != len(totals):
        raise InvalidParameterError(
            f"times and totals differ in length ({len(times)} vs {len(totals)})"
        )
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 5))
    
    ax.plot(times, totals, color='tab:blue', linewidth=2)
    ax.set_xlabel('Time')
    ax.set_ylabel('Water')
    ax.grid(True, alpha=0.3)
    
    if title:
        ax.set_title(title)
    
    if show:
        plt.show()
    
    return ax
