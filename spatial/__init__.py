# spatial/__init__.py

"""Spatial layer for COMPARTMAP - Locatable entities and the compartment index."""

from .entities import (
    Position,
    calculate_distance_3d,
    is_finite_position,
    validate_position,
)
from .index import SpatialIndex, SpatialIndexIterator
from .keys import CompartmentKey, compartment_key, normalize_compartment_size
from .locatable import Locatable, MovementEvent, MovementListener, Point

__all__ = [
    "SpatialIndex",
    "SpatialIndexIterator",
    "Locatable",
    "MovementEvent",
    "MovementListener",
    "Point",
    "Position",
    "CompartmentKey",
    "compartment_key",
    "normalize_compartment_size",
    "validate_position",
    "is_finite_position",
    "calculate_distance_3d",
]
