"""Water transport system assembly and evaluation."""

from .system import (
    NodeProperties,
    flow_resistance,
    compute_node_properties,
    loss_rate_vector,
    normalize_dead_edges,
    assemble_conductance,
    assemble_system_matrix,
    initial_water_distribution,
)
from .water_model import (
    WaterModel,
    EvaluationMode,
    ModelState,
    STEP_TOLERANCE,
    BDF6_ALPHA,
    BDF6_BETA,
)

__all__ = [
    "NodeProperties",
    "flow_resistance",
    "compute_node_properties",
    "loss_rate_vector",
    "normalize_dead_edges",
    "assemble_conductance",
    "assemble_system_matrix",
    "initial_water_distribution",
    "WaterModel",
    "EvaluationMode",
    "ModelState",
    "STEP_TOLERANCE",
    "BDF6_ALPHA",
    "BDF6_BETA",
]
