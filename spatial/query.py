# spatial/query.py

"""Range and nearest-neighbor queries over a compartment grid.

A range query first narrows the search to the compartments overlapping the
query's bounding box, then filters their members by exact distance. These
functions do no locking; SpatialIndex calls them while holding its lock.
"""

from typing import TYPE_CHECKING, Iterable, Optional

from .entities import Position
from .keys import CompartmentKey, count_keys, key_bounds, key_in_bounds, keys_in_bounds

if TYPE_CHECKING:
    from .locatable import Locatable


# Members of one compartment, keyed by id() so membership is by identity
Compartment = dict[int, "Locatable"]


def collect_compartments(
    compartments: dict[CompartmentKey, Compartment],
    center: Position,
    radius: float,
    size: float,
    tracer=None,
) -> list[Compartment]:
    """Find every populated compartment that may hold a point within radius.

    Walks the keys of the bounding box [center - radius, center + radius] in
    whole-compartment steps. When that box holds more keys than there are
    populated compartments (or is unbounded), the populated compartments are
    filtered by key instead, so the cost never exceeds a full scan.

    Args:
        compartments: Key to compartment mapping of the index
        center: Query center (x, y, z)
        radius: Query radius
        size: Compartment edge length
        tracer: Optional structlog logger receiving one event per key visited

    Returns:
        Populated compartments, each exactly once
    """
    if not compartments or not radius >= 0.0:
        return []

    try:
        low, high = key_bounds(center, radius, size)
    except (OverflowError, ValueError):
        # Infinite radius (or a center at infinity) reaches every compartment
        low = high = None

    visited = []
    if low is None or count_keys(low, high) > len(compartments):
        for key, compartment in compartments.items():
            if low is not None and not key_in_bounds(key, low, high):
                continue
            if tracer is not None:
                tracer.debug("compartment.visited", key=key, populated=True)
            visited.append(compartment)
        return visited

    for key in keys_in_bounds(low, high):
        compartment = compartments.get(key)
        if tracer is not None:
            tracer.debug(
                "compartment.visited",
                key=key,
                populated=compartment is not None,
            )
        if compartment is not None:
            visited.append(compartment)
    return visited


def filter_within(
    compartments: Iterable[Compartment],
    center: Position,
    radius: float,
) -> list["Locatable"]:
    """Keep the members of the given compartments no farther than radius."""
    cx, cy, cz = center
    return [
        item
        for compartment in compartments
        for item in compartment.values()
        if item.distance_to(cx, cy, cz) <= radius
    ]


def select_nearest(
    candidates: Iterable["Locatable"],
    center: Position,
) -> Optional["Locatable"]:
    """Pick the candidate closest to center; ties go to the first one seen."""
    cx, cy, cz = center
    nearest = None
    best = float("inf")
    for item in candidates:
        distance = item.distance_to(cx, cy, cz)
        if distance < best:
            best = distance
            nearest = item
    return nearest
