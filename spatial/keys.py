# spatial/keys.py

"""Compartment keys: mapping coordinates onto the integer grid."""

import math
from typing import Iterator

from core.exceptions import InvalidConfigurationError

from .entities import Position


# Integer triple identifying one cubic compartment
CompartmentKey = tuple[int, int, int]


def normalize_compartment_size(size: float) -> float:
    """Return the usable edge length for a configured compartment size.

    Negative sizes are taken by absolute value. Zero and non-finite sizes
    cannot partition space.

    Raises:
        InvalidConfigurationError: If the size is zero, NaN or infinite
    """
    size = abs(float(size))
    if size == 0.0 or not math.isfinite(size):
        raise InvalidConfigurationError(f"Compartment size must be non-zero and finite, got {size}")
    return size


def compartment_key(x: float, y: float, z: float, size: float) -> CompartmentKey:
    """Get the key of the compartment containing (x, y, z).

    Uses floor division so that each compartment is the half-open cube
    [i*size, (i+1)*size) on every axis, including below zero.
    """
    return (math.floor(x / size), math.floor(y / size), math.floor(z / size))


def key_bounds(
    center: Position,
    radius: float,
    size: float,
) -> tuple[CompartmentKey, CompartmentKey]:
    """Get the lowest and highest keys of the box [center - radius, center + radius].

    Args:
        center: Box center (x, y, z)
        radius: Half the box edge length
        size: Compartment edge length

    Returns:
        (low_key, high_key) tuple; inclusive on both ends

    Raises:
        OverflowError, ValueError: If the box bounds are not finite
    """
    low = compartment_key(center[0] - radius, center[1] - radius, center[2] - radius, size)
    high = compartment_key(center[0] + radius, center[1] + radius, center[2] + radius, size)
    return low, high


def count_keys(low: CompartmentKey, high: CompartmentKey) -> int:
    """Count the keys in the inclusive box between two keys."""
    count = 1
    for lo, hi in zip(low, high):
        if hi < lo:
            return 0
        count *= hi - lo + 1
    return count


def keys_in_bounds(low: CompartmentKey, high: CompartmentKey) -> Iterator[CompartmentKey]:
    """Yield every key in the inclusive box between two keys, each once."""
    for cx in range(low[0], high[0] + 1):
        for cy in range(low[1], high[1] + 1):
            for cz in range(low[2], high[2] + 1):
                yield (cx, cy, cz)


def key_in_bounds(key: CompartmentKey, low: CompartmentKey, high: CompartmentKey) -> bool:
    """Check whether a key lies inside the inclusive box between two keys."""
    return (
        low[0] <= key[0] <= high[0]
        and low[1] <= key[1] <= high[1]
        and low[2] <= key[2] <= high[2]
    )
