"""
Plant Water - water transport simulation in plant vascular graphs

A plant's vascular structure is modelled as a tree of rigid cylindrical
segments. Water moves between adjacent segments through Poiseuille
conductances and leaves the plant through leaf segments, giving a linear
ODE ``d(water)/dt = S @ water`` that is solved either in closed form
(eigendecomposition) or by implicit BDF6 stepping.

Example Usage:
    from plant_water import load_graph_text, WaterModel

    graph = load_graph_text("plant.graph")
    model = WaterModel(graph, loss_rate=0.3, initial_water=4.0)

    for k in range(1, 101):
        model.evaluate(0.1 * k)
    print(model.water)
"""

__version__ = "1.0.0"

from .core.node import Node
from .core.graph import Graph
from .core.errors import (
    ErrorCode,
    PlantWaterError,
    NullReferenceError,
    IndexOutOfRangeError,
    InvalidParameterError,
    InvalidGeometryError,
    CrossGraphReferenceError,
    NotFoundError,
    ParseError,
    NumericalFailureError,
    TopologyError,
    OperationResult,
    OperationStatus,
)

from .config import SimulationConfig, PhysicalConstants, load_config

from .analysis.system import assemble_system_matrix
from .analysis.water_model import WaterModel, EvaluationMode, ModelState

from .io.graph_format import parse_graph_text, load_graph_text, save_graph_text
from .io.serialize import save_json, load_json, load_graph, save_graph

from .api.simulate import run_simulation
from .api.session import SimulationSession

__all__ = [
    "Node",
    "Graph",
    "ErrorCode",
    "PlantWaterError",
    "NullReferenceError",
    "IndexOutOfRangeError",
    "InvalidParameterError",
    "InvalidGeometryError",
    "CrossGraphReferenceError",
    "NotFoundError",
    "ParseError",
    "NumericalFailureError",
    "TopologyError",
    "OperationResult",
    "OperationStatus",
    "SimulationConfig",
    "PhysicalConstants",
    "load_config",
    "assemble_system_matrix",
    "WaterModel",
    "EvaluationMode",
    "ModelState",
    "parse_graph_text",
    "load_graph_text",
    "save_graph_text",
    "save_json",
    "load_json",
    "load_graph",
    "save_graph",
    "run_simulation",
    "SimulationSession",
]
