"""
Unit conversion utilities.

Graph files store lengths in metres. The water model works in centimetres,
the unit its flow-resistance and pressure constants are expressed in.
"""

from typing import Union
import numpy as np

from ..core.errors import InvalidParameterError

WORKING_UNIT = "cm"
FILE_UNIT = "m"

_TO_METERS = {
    "m": 1.0,
    "cm": 0.01,
    "mm": 0.001,
    "um": 1e-6,
}


def _meters_per(unit: str) -> float:
    if unit not in _TO_METERS:
        raise InvalidParameterError(
            f"Unknown unit '{unit}'. Supported: {list(_TO_METERS.keys())}"
        )
    return _TO_METERS[unit]


def convert_length(value: Union[float, np.ndarray], from_unit: str, to_unit: str) -> Union[float, np.ndarray]:
    """
    Convert length between any supported units.
    
    Parameters
    ----------
    value : float or ndarray
        Length value(s) to convert
    from_unit : str
        Source unit
    to_unit : str
        Target unit
        
    Returns
    -------
    float or ndarray
        Length in target unit
        
    Examples
    --------
    >>> convert_length(1.5, 'm', 'cm')
    150.0
    """
    if from_unit == to_unit:
        return value
    return value * (_meters_per(from_unit) / _meters_per(to_unit))


def length_scale(from_unit: str = FILE_UNIT, to_unit: str = WORKING_UNIT) -> float:
    """Factor that converts lengths from ``from_unit`` to ``to_unit``."""
    return float(convert_length(1.0, from_unit, to_unit))


def to_working_length(value: Union[float, np.ndarray], from_unit: str = FILE_UNIT) -> Union[float, np.ndarray]:
    """Convert length to the working unit (centimetres)."""
    return convert_length(value, from_unit, WORKING_UNIT)


def from_working_length(value: Union[float, np.ndarray], to_unit: str = FILE_UNIT) -> Union[float, np.ndarray]:
    """Convert length from the working unit (centimetres)."""
    return convert_length(value, WORKING_UNIT, to_unit)
