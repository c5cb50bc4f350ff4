# spatial/index.py

"""Compartment-grid spatial index for efficient proximity queries."""

import threading
from typing import Any, Iterator, Optional

from core.config import config
from core.exceptions import ConcurrentModificationError, InvalidLocationError
from core.logging import get_logger

from .entities import Position, is_finite_position, validate_position
from .keys import CompartmentKey, compartment_key, normalize_compartment_size
from .locatable import Locatable, MovementEvent
from .query import Compartment, collect_compartments, filter_within, select_nearest


class SpatialIndex:
    """Grid-of-compartments index for Locatable entities.

    Space is cut into cubic compartments of a fixed edge length; each stored
    entity sits in the compartment containing its current coordinates, so a
    range query only examines the compartments near its center. The index
    registers itself as a movement listener on every stored entity and moves
    entities between compartments as they report their movement.

    All operations hold one re-entrant lock. Movement notifications arrive
    synchronously on whichever thread moved the entity, possibly one already
    inside the index. Smaller compartments mean more of them but fewer
    entities to scan in each; the best size depends on the data.
    """

    def __init__(
        self,
        compartment_size: Optional[float] = None,
        *,
        trace: Optional[bool] = None,
        logger: Optional[Any] = None,
    ):
        """Initialize an empty index.

        Args:
            compartment_size: Compartment edge length; negative values are
                taken by absolute value. Defaults to the configured size (1.5).
            trace: Log every compartment visited by range queries. Defaults
                to the ``trace_queries`` setting.
            logger: structlog logger to use instead of the module logger

        Raises:
            InvalidConfigurationError: If the size is zero or not finite
        """
        if compartment_size is None:
            compartment_size = config.compartment_size
        if trace is None:
            trace = config.trace_queries

        self._compartment_size = normalize_compartment_size(compartment_size)
        self._compartments: dict[CompartmentKey, Compartment] = {}
        self._size = 0
        self._version = 0
        self._lock = threading.RLock()

        self.logger = logger if logger is not None else get_logger(f"{__name__}.SpatialIndex")
        self.trace = trace
        self.logger.debug(
            "spatial_index.created",
            compartment_size=self._compartment_size,
            trace=trace,
        )

    @property
    def compartment_size(self) -> float:
        """Edge length of every compartment."""
        return self._compartment_size

    @property
    def version(self) -> int:
        """Structural modification counter; only ever increases."""
        return self._version

    def size(self) -> int:
        """Get total number of entities in index.

        Returns:
            Number of indexed entities
        """
        return self._size

    def is_empty(self) -> bool:
        """Check whether the index holds no entities."""
        return self._size == 0

    def __len__(self) -> int:
        return self._size

    def compartment_count(self) -> int:
        """Get the number of populated compartments."""
        with self._lock:
            return len(self._compartments)

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, Locatable) or not is_finite_position(item.x, item.y, item.z):
            return False
        with self._lock:
            compartment = self._compartments.get(self._key_of(item))
            return compartment is not None and id(item) in compartment

    # Mutation

    def store(self, item: Locatable) -> None:
        """Add an entity to the index.

        The index subscribes to the entity's movement, so the entity may be
        moved freely while stored. Storing an entity that is already stored
        has no effect.

        Args:
            item: Entity to add

        Raises:
            InvalidLocationError: If the entity's coordinates are not finite
        """
        x, y, z = item.x, item.y, item.z
        if not is_finite_position(x, y, z):
            raise InvalidLocationError(f"Cannot index non-finite position ({x}, {y}, {z})")

        with self._lock:
            key = compartment_key(x, y, z, self._compartment_size)
            compartment = self._compartments.get(key)
            if compartment is None:
                compartment = {}
                self._compartments[key] = compartment
            if id(item) in compartment:
                return

            compartment[id(item)] = item
            item.add_movement_listener(self)
            self._size += 1
            self._version += 1

    def remove(self, item: Locatable) -> None:
        """Remove an entity from the index.

        Removing an entity that is not stored does nothing.

        Args:
            item: Entity to remove
        """
        with self._lock:
            # Unsubscribe first so no move is reported halfway through removal.
            # A move already in flight on another thread may still arrive; it
            # then finds the entity gone and is ignored.
            item.remove_movement_listener(self)
            if not is_finite_position(item.x, item.y, item.z):
                return

            key = self._key_of(item)
            compartment = self._compartments.get(key)
            if compartment is None or compartment.pop(id(item), None) is None:
                return

            if not compartment:
                del self._compartments[key]
            self._size -= 1
            self._version += 1

    def clear(self) -> None:
        """Remove every entity from the index."""
        with self._lock:
            for compartment in self._compartments.values():
                for item in compartment.values():
                    item.remove_movement_listener(self)
            removed = self._size
            self._compartments.clear()
            self._size = 0
            self._version += 1

        self.logger.info("spatial_index.cleared", removed=removed)

    def location_moved(self, event: MovementEvent) -> None:
        """Move an entity to its new compartment after it reports a move.

        Args:
            event: Movement notification carrying the prior coordinates
        """
        item = event.location
        with self._lock:
            old_key = compartment_key(event.x, event.y, event.z, self._compartment_size)
            new_key = self._key_of(item)
            if old_key == new_key:
                return

            old_compartment = self._compartments.get(old_key)
            if old_compartment is None or old_compartment.pop(id(item), None) is None:
                # Removed from the index between the move and this notification
                self.logger.debug(
                    "spatial_index.stale_move_ignored",
                    old_key=old_key,
                    new_key=new_key,
                )
                return

            if not old_compartment:
                del self._compartments[old_key]
            self._version += 1

            if not item.has_movement_listener(self):
                # Removed while this move was being delivered; remove() looked
                # in the new compartment and missed it, so finish the removal
                self._size -= 1
                self.logger.debug("spatial_index.removed_during_move", old_key=old_key)
                return

            new_compartment = self._compartments.get(new_key)
            if new_compartment is None:
                new_compartment = {}
                self._compartments[new_key] = new_compartment
            new_compartment[id(item)] = item
            self._version += 1

    # Queries

    def get_all_within(self, center: Any, radius: float) -> list[Locatable]:
        """Find entities no farther than radius from center.

        To walk a large share of the index, iterating is far cheaper than a
        query with a large radius.

        Args:
            center: Locatable, or 1 to 3 coordinates (tuple, list or x/y/z dict)
            radius: Maximum distance, inclusive

        Returns:
            List of entities within radius, in no particular order
        """
        point = self._resolve_center(center)
        with self._lock:
            compartments = collect_compartments(
                self._compartments,
                point,
                radius,
                self._compartment_size,
                tracer=self.logger if self.trace else None,
            )
            return filter_within(compartments, point, radius)

    def nearest_to(self, center: Any, radius: float) -> Optional[Locatable]:
        """Find the entity closest to center, but no farther than radius.

        Args:
            center: Locatable, or 1 to 3 coordinates (tuple, list or x/y/z dict)
            radius: Maximum distance, inclusive

        Returns:
            The nearest entity, or None if nothing lies within radius
        """
        point = self._resolve_center(center)
        with self._lock:
            return select_nearest(self.get_all_within(point, radius), point)

    # Iteration

    def iterate(self) -> "SpatialIndexIterator":
        """Iterate over every stored entity, in no particular order.

        The index must not be modified until iteration completes; the next
        step after a modification raises ConcurrentModificationError.
        """
        with self._lock:
            return SpatialIndexIterator(self)

    def __iter__(self) -> "SpatialIndexIterator":
        return self.iterate()

    # Internals

    def _key_of(self, item: Locatable) -> CompartmentKey:
        return compartment_key(item.x, item.y, item.z, self._compartment_size)

    @staticmethod
    def _resolve_center(center: Any) -> Position:
        if isinstance(center, Locatable):
            return center.position
        return validate_position(center)


class SpatialIndexIterator:
    """Single-pass, fail-fast iterator over a SpatialIndex.

    Snapshots the index version when created and re-checks it under the
    index lock on every step, so the lock is never held between steps.
    """

    def __init__(self, index: SpatialIndex):
        self._index = index
        self._version = index._version
        self._remaining = index._size
        self._compartments = iter(index._compartments.values())
        self._members: Optional[Iterator[Locatable]] = None
        self._exhausted = False

    def __iter__(self) -> "SpatialIndexIterator":
        return self

    def __next__(self) -> Locatable:
        if self._exhausted:
            raise StopIteration

        with self._index._lock:
            if self._version != self._index._version:
                raise ConcurrentModificationError(
                    "SpatialIndex must not be modified while iterating over it"
                )
            if self._remaining <= 0:
                self._exhausted = True
                raise StopIteration

            while True:
                if self._members is not None:
                    item = next(self._members, None)
                    if item is not None:
                        self._remaining -= 1
                        return item
                self._members = iter(next(self._compartments).values())
