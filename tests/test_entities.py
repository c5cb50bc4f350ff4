# tests/test_entities.py

"""Tests for coordinate utilities."""

import math

import pytest

from core.exceptions import InvalidLocationError
from spatial.entities import calculate_distance_3d, is_finite_position, validate_position


class TestValidatePosition:
    """Test position normalization."""

    def test_three_dimensions(self):
        """3-tuples pass through as floats."""
        assert validate_position((1, 2, 3)) == (1.0, 2.0, 3.0)

    def test_two_dimensions(self):
        """2D positions get z = 0."""
        assert validate_position([1.5, -2.0]) == (1.5, -2.0, 0.0)

    def test_one_dimension(self):
        """1D positions get y = z = 0."""
        assert validate_position((7.0,)) == (7.0, 0.0, 0.0)

    def test_dict_position(self):
        """Dicts with x/y/z keys are accepted; missing axes default to 0."""
        assert validate_position({"x": 1, "y": 2, "z": 3}) == (1.0, 2.0, 3.0)
        assert validate_position({"X": 4}) == (4.0, 0.0, 0.0)

    @pytest.mark.parametrize("position", [(), (1, 2, 3, 4), {"y": 1.0}, "1,2,3", 5])
    def test_malformed_position(self, position):
        """Malformed positions raise InvalidLocationError."""
        with pytest.raises(InvalidLocationError):
            validate_position(position)

    def test_non_finite_position(self):
        """NaN and infinite coordinates are rejected."""
        with pytest.raises(InvalidLocationError):
            validate_position((0.0, math.nan, 0.0))
        with pytest.raises(ValueError):
            validate_position((math.inf,))


class TestDistance:
    """Test distance helpers."""

    def test_distance_3d(self):
        """3D Euclidean distance."""
        assert calculate_distance_3d((0.0, 0.0, 0.0), (1.0, 2.0, 2.0)) == 3.0

    def test_is_finite_position(self):
        """Finite check covers all three axes."""
        assert is_finite_position(1.0, 2.0, 3.0)
        assert not is_finite_position(1.0, 2.0, math.inf)
