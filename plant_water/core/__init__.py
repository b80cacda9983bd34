"""Core data structures for vascular graphs."""

from .types import as_vector3, rotation_between, REFERENCE_AXIS
from .node import Node
from .graph import Graph
from .ids import IDGenerator
from .errors import (
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

__all__ = [
    "as_vector3",
    "rotation_between",
    "REFERENCE_AXIS",
    "Node",
    "Graph",
    "IDGenerator",
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
]
