# core/exceptions.py

"""Exception hierarchy for the COMPARTMAP spatial index."""


class CompartmapException(Exception):
    """Base exception for all COMPARTMAP errors."""

    pass


# Spatial Index Exceptions
class SpatialIndexException(CompartmapException):
    """Base exception for spatial index operations."""

    pass


class ConcurrentModificationError(SpatialIndexException, RuntimeError):
    """Raised when the index is structurally modified during iteration."""

    pass


class InvalidConfigurationError(SpatialIndexException, ValueError):
    """Raised when a compartment size cannot partition space."""

    pass


# Location Exceptions
class LocationException(CompartmapException):
    """Base exception for coordinate handling."""

    pass


class InvalidLocationError(LocationException, ValueError):
    """Raised when coordinates are malformed or not finite."""

    pass
