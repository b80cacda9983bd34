"""
Error taxonomy and operation result types for the water transport model.

Core operations raise one of the exceptions below. The outer API converts
them into an :class:`OperationResult` so interactive callers can report the
failure instead of crashing.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional
from enum import Enum


class ErrorCode(Enum):
    """Standard error codes."""
    NULL_REFERENCE = "NULL_REFERENCE"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    INVALID_GEOMETRY = "INVALID_GEOMETRY"
    CROSS_GRAPH_REFERENCE = "CROSS_GRAPH_REFERENCE"
    NOT_FOUND = "NOT_FOUND"
    PARSE_ERROR = "PARSE_ERROR"
    NUMERICAL_FAILURE = "NUMERICAL_FAILURE"
    TOPOLOGY_ERROR = "TOPOLOGY_ERROR"


class PlantWaterError(Exception):
    """
    Base class for every error raised by the library.
    
    Parameters
    ----------
    message : str
        Human readable description
    context : dict, optional
        Extra information about the failure (IDs, matrix size, ...)
    """
    
    code: ErrorCode = ErrorCode.INVALID_PARAMETER
    
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
    
    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context,
        }


class NullReferenceError(PlantWaterError):
    """A required object reference is missing."""
    code = ErrorCode.NULL_REFERENCE


class IndexOutOfRangeError(PlantWaterError, IndexError):
    """An ID or index is outside its valid bounds."""
    code = ErrorCode.INDEX_OUT_OF_RANGE


class InvalidParameterError(PlantWaterError, ValueError):
    """A parameter has an invalid value (negative time, id1 == id2, ...)."""
    code = ErrorCode.INVALID_PARAMETER


class InvalidGeometryError(PlantWaterError, ValueError):
    """A segment is degenerate (head and tail coincide)."""
    code = ErrorCode.INVALID_GEOMETRY


class CrossGraphReferenceError(PlantWaterError):
    """Two nodes that belong to different graphs were linked."""
    code = ErrorCode.CROSS_GRAPH_REFERENCE


class NotFoundError(PlantWaterError, LookupError):
    """An adjacency or node lookup failed."""
    code = ErrorCode.NOT_FOUND


class ParseError(PlantWaterError, ValueError):
    """A serialized graph description is malformed."""
    code = ErrorCode.PARSE_ERROR
    
    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message, context)
        self.line_number = line_number


class NumericalFailureError(PlantWaterError, ArithmeticError):
    """An eigendecomposition or factorization did not succeed."""
    code = ErrorCode.NUMERICAL_FAILURE


class TopologyError(PlantWaterError):
    """The node/adjacency set is not a single connected tree."""
    code = ErrorCode.TOPOLOGY_ERROR


class OperationStatus(Enum):
    """Status of an operation."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class OperationResult:
    """
    Structured result from a high level operation.
    """
    
    status: OperationStatus
    message: str = ""
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    error_codes: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    
    def is_success(self) -> bool:
        """Check if operation was successful."""
        return self.status == OperationStatus.SUCCESS
    
    def is_failure(self) -> bool:
        """Check if operation failed."""
        return self.status == OperationStatus.FAILURE
    
    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)
    
    def add_error(self, error: str, code: Optional[ErrorCode] = None) -> None:
        """Add an error message with optional error code."""
        self.errors.append(error)
        if code is not None:
            self.error_codes.append(code.value)
    
    def to_dict(self) -> dict:
        """Convert to dictionary for serialization (JSON-safe)."""
        return {
            "status": self.status.value,
            "message": self.message,
            "warnings": self.warnings,
            "errors": self.errors,
            "error_codes": self.error_codes,
            "metadata": self.metadata,
        }
    
    @classmethod
    def success(cls, message: str = "", **kwargs) -> "OperationResult":
        """Create a success result."""
        return cls(status=OperationStatus.SUCCESS, message=message, **kwargs)
    
    @classmethod
    def failure(cls, message: str = "", **kwargs) -> "OperationResult":
        """Create a failure result."""
        return cls(status=OperationStatus.FAILURE, message=message, **kwargs)
    
    @classmethod
    def from_error(cls, error: PlantWaterError) -> "OperationResult":
        """Create a failure result describing a library error."""
        result = cls.failure(str(error), metadata={"context": error.context})
        result.add_error(str(error), code=error.code)
        return result
