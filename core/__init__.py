"""Core services shared by the spatial index: settings, logging, errors."""

from .config import CompartmapConfig
from .exceptions import (
    CompartmapException,
    ConcurrentModificationError,
    InvalidConfigurationError,
    InvalidLocationError,
    LocationException,
    SpatialIndexException,
)
from .logging import configure_logging, get_logger

__all__ = [
    # Configuration
    "CompartmapConfig",
    # Logging
    "configure_logging",
    "get_logger",
    # Exceptions
    "CompartmapException",
    "SpatialIndexException",
    "ConcurrentModificationError",
    "InvalidConfigurationError",
    "LocationException",
    "InvalidLocationError",
]
