"""
Smoke tests for plotting helpers.
"""

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import pytest
import numpy as np
from plant_water.visualization import plot_graph, plot_water_history
from plant_water.analysis.water_model import WaterModel
from plant_water.core.errors import InvalidParameterError


def test_plot_graph(y_graph):
    """Test plotting the tree geometry."""
    ax = plot_graph(y_graph, show=False, title="Y")
    
    assert len(ax.lines) == y_graph.num_nodes
    assert ax.get_title() == "Y"
    plt.close("all")


def test_plot_graph_with_water(y_graph):
    """Test coloring segments by water."""
    model = WaterModel(y_graph, loss_rate=0.3, initial_water=4.0)
    model.evaluate(1.0)
    
    ax = plot_graph(y_graph, water=model.water, show=False)
    assert len(ax.lines) == y_graph.num_nodes
    
    with pytest.raises(InvalidParameterError):
        plot_graph(y_graph, water=np.ones(2), show=False)
    plt.close("all")


def test_plot_water_history():
    """Test plotting total water over time."""
    ax = plot_water_history([0.0, 0.1, 0.2], [4.0, 3.9, 3.8], show=False)
    assert len(ax.lines) == 1
    
    with pytest.raises(InvalidParameterError):
        plot_water_history([0.0, 0.1], [4.0], show=False)
    plt.close("all")
