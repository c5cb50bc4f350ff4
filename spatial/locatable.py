# spatial/locatable.py

"""Locatable entities: point-like objects that report their own movement.

A spatial container registers itself as a movement listener on every entity
it stores. The entity keeps its listeners in a weak set, so it never owns the
containers observing it; the container stays the active party and the entity
the passive source of events.
"""

import math
import threading
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol

from core.exceptions import InvalidLocationError

from .entities import Position, is_finite_position


@dataclass(frozen=True)
class MovementEvent:
    """Notification that a location changed.

    Carries the coordinates the location had *before* the move; the new
    coordinates are read from the location itself.
    """

    x: float
    y: float
    z: float
    location: "Locatable"

    @property
    def old_position(self) -> Position:
        """Prior (x, y, z) of the moved location."""
        return (self.x, self.y, self.z)


class MovementListener(Protocol):
    """Anything that wants to hear about a location changing."""

    def location_moved(self, event: MovementEvent) -> None: ...


class Locatable(ABC):
    """A coordinate in 3D space that can be stored in a SpatialIndex.

    Subclasses supply the coordinates and the distance function. Identity is
    object identity; two locatables at the same coordinates are distinct, so
    subclasses should not override ``__eq__``.
    """

    def __init__(self):
        self._listeners: "weakref.WeakSet[MovementListener]" = weakref.WeakSet()
        self._lock = threading.Lock()

    @property
    @abstractmethod
    def x(self) -> float:
        """Distance along the X axis."""

    @property
    @abstractmethod
    def y(self) -> float:
        """Distance along the Y axis."""

    @property
    @abstractmethod
    def z(self) -> float:
        """Distance along the Z axis (above/below the X/Y plane)."""

    @abstractmethod
    def distance_to(self, x: float, y: float, z: float) -> float:
        """Distance from this location to (x, y, z); symmetric and non-negative."""

    @property
    def position(self) -> Position:
        """Current (x, y, z) tuple."""
        return (self.x, self.y, self.z)

    def distance_to_location(self, location: "Locatable") -> float:
        """Distance from this location to another."""
        return self.distance_to(location.x, location.y, location.z)

    def add_movement_listener(self, listener: MovementListener) -> None:
        """Notify ``listener`` whenever this location changes.

        Adding the same listener twice has no further effect.
        """
        with self._lock:
            self._listeners.add(listener)

    def remove_movement_listener(self, listener: MovementListener) -> None:
        """Stop notifying ``listener``; unknown listeners are ignored."""
        with self._lock:
            self._listeners.discard(listener)

    def has_movement_listener(self, listener: MovementListener) -> bool:
        """Check whether ``listener`` is currently notified of moves."""
        with self._lock:
            return listener in self._listeners

    def has_movement_listeners(self) -> bool:
        """Check whether anything is observing this location."""
        with self._lock:
            return len(self._listeners) > 0

    def _notify_moved(self, old_x: float, old_y: float, old_z: float) -> None:
        """Deliver a MovementEvent to every listener, synchronously.

        The listener set is copied under the lock and notified outside it, so
        a listener may add or remove listeners (or move this location again)
        without deadlocking.
        """
        with self._lock:
            listeners = list(self._listeners)
        if not listeners:
            return

        event = MovementEvent(old_x, old_y, old_z, self)
        for listener in listeners:
            listener.location_moved(event)


class Point(Locatable):
    """Mutable point with Euclidean distance; extend it with your own data."""

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        super().__init__()
        self._check_finite(x, y, z)
        self._x = float(x)
        self._y = float(y)
        self._z = float(z)

    def __repr__(self) -> str:
        return f"Point({self._x!r}, {self._y!r}, {self._z!r})"

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    @property
    def z(self) -> float:
        return self._z

    def distance_to(self, x: float, y: float, z: float) -> float:
        dx = self._x - x
        dy = self._y - y
        dz = self._z - z
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def set_cartesian(self, x: float, y: float, z: float) -> "Point":
        """Move to (x, y, z), notifying listeners if the position changed.

        Raises:
            InvalidLocationError: If any coordinate is not finite
        """
        self._check_finite(x, y, z)
        with self._lock:
            old_x, old_y, old_z = self._x, self._y, self._z
            self._x = float(x)
            self._y = float(y)
            self._z = float(z)
            changed = (old_x, old_y, old_z) != (self._x, self._y, self._z)
        if changed:
            self._notify_moved(old_x, old_y, old_z)
        return self

    def translate(self, dx: float, dy: float, dz: float) -> "Point":
        """Move by the given offsets."""
        return self.set_cartesian(self._x + dx, self._y + dy, self._z + dz)

    def set_spherical(self, phi: float, theta: float, rho: float) -> "Point":
        """Move to spherical coordinates.

        Args:
            phi: Angle around the equator (longitude) in radians
            theta: Angle above/below the equator (latitude) in radians
            rho: Distance from the origin
        """
        r_vect = rho * math.cos(theta)
        return self.set_cartesian(
            r_vect * math.cos(phi),
            r_vect * math.sin(phi),
            rho * math.sin(theta),
        )

    @property
    def phi(self) -> float:
        """Angle around the equator (longitude) in radians."""
        return math.atan2(self._y, self._x)

    @property
    def theta(self) -> float:
        """Angle above/below the equator (latitude) in radians."""
        if self._x == 0 and self._y == 0:
            # atan(z / 0) is undefined on the polar axis
            return 0.0
        return math.atan(self._z / math.hypot(self._x, self._y))

    @property
    def rho(self) -> float:
        """Distance from the origin."""
        return math.sqrt(self._x * self._x + self._y * self._y + self._z * self._z)

    def spherical(self) -> tuple[float, float, float]:
        """Get (phi, theta, rho)."""
        return (self.phi, self.theta, self.rho)

    @staticmethod
    def _check_finite(x: float, y: float, z: float) -> None:
        if not is_finite_position(x, y, z):
            raise InvalidLocationError(f"Coordinates must be finite, got ({x}, {y}, {z})")
