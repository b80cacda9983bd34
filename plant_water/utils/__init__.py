"""Utility functions for the water transport library."""

from .units import (
    WORKING_UNIT,
    FILE_UNIT,
    convert_length,
    length_scale,
    to_working_length,
    from_working_length,
)

__all__ = [
    'WORKING_UNIT',
    'FILE_UNIT',
    'convert_length',
    'length_scale',
    'to_working_length',
    'from_working_length',
]
