"""
Tests for length unit conversion.
"""

import pytest
import numpy as np
from plant_water.utils import (
    convert_length,
    length_scale,
    to_working_length,
    from_working_length,
)
from plant_water.core.errors import InvalidParameterError


def test_convert_length():
    """Test conversions between supported units."""
    assert convert_length(1.5, 'm', 'cm') == pytest.approx(150.0)
    assert convert_length(20.0, 'mm', 'cm') == pytest.approx(2.0)
    assert convert_length(3.0, 'cm', 'cm') == 3.0
    np.testing.assert_allclose(convert_length(np.array([1.0, 2.0]), 'cm', 'm'), [0.01, 0.02])


def test_working_units():
    """Test conversion to and from centimetres."""
    assert length_scale() == pytest.approx(100.0)
    assert length_scale('mm') == pytest.approx(0.1)
    assert to_working_length(0.02) == pytest.approx(2.0)
    assert from_working_length(2.0) == pytest.approx(0.02)


def test_unknown_unit():
    """Test that unknown units are rejected."""
    with pytest.raises(InvalidParameterError):
        convert_length(1.0, 'm', 'inch')
