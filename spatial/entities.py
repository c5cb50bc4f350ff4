# spatial/entities.py

"""Coordinate utilities for the spatial layer."""

import math
from typing import Any

from core.exceptions import InvalidLocationError


# Type alias for position
Position = tuple[float, float, float]


def validate_position(position: Any) -> Position:
    """Validate and normalize position to (x, y, z) tuple.

    One- and two-dimensional data is padded with zeros, so it lives on the
    y = 0 and z = 0 planes respectively.

    Args:
        position: Position data (list, tuple, or dict with x/y/z keys)

    Returns:
        Normalized (x, y, z) tuple

    Raises:
        InvalidLocationError: If position format is invalid or not finite
    """
    if isinstance(position, (list, tuple)):
        if not 1 <= len(position) <= 3:
            raise InvalidLocationError(
                f"Position must have 1 to 3 coordinates, got {len(position)}"
            )
        coords = [float(value) for value in position]
        coords.extend([0.0] * (3 - len(coords)))
    elif isinstance(position, dict):
        x = position.get("x", position.get("X"))
        if x is None:
            raise InvalidLocationError("Position dict must have an 'x' key")
        y = position.get("y", position.get("Y", 0.0))
        z = position.get("z", position.get("Z", 0.0))
        coords = [float(x), float(y), float(z)]
    else:
        raise InvalidLocationError(f"Invalid position type: {type(position)}")

    if not all(math.isfinite(value) for value in coords):
        raise InvalidLocationError(f"Position must be finite, got {tuple(coords)}")
    return (coords[0], coords[1], coords[2])


def is_finite_position(x: float, y: float, z: float) -> bool:
    """Check that all three coordinates are finite numbers."""
    return math.isfinite(x) and math.isfinite(y) and math.isfinite(z)


def calculate_distance_3d(pos1: Position, pos2: Position) -> float:
    """Calculate 3D Euclidean distance between two positions.

    Args:
        pos1: First position (x, y, z)
        pos2: Second position (x, y, z)

    Returns:
        3D distance in same units as positions
    """
    dx = pos2[0] - pos1[0]
    dy = pos2[1] - pos1[1]
    dz = pos2[2] - pos1[2]
    return (dx * dx + dy * dy + dz * dz) ** 0.5
