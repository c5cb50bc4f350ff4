"""Pytest configuration and shared fixtures."""

import random

import pytest

from spatial import Point, SpatialIndex


class MovementRecorder:
    """Movement listener that keeps every event it receives."""

    def __init__(self):
        self.events = []

    def location_moved(self, event):
        self.events.append(event)


@pytest.fixture
def index():
    """Create a spatial index with compartment size 2.0."""
    return SpatialIndex(2.0)


@pytest.fixture
def scenario(index):
    """Index holding the points (0,0,0), (1,1,1) and (5,5,5)."""
    origin = Point(0.0, 0.0, 0.0)
    near = Point(1.0, 1.0, 1.0)
    far = Point(5.0, 5.0, 5.0)
    for point in (origin, near, far):
        index.store(point)
    return index, origin, near, far


@pytest.fixture
def rng():
    """Seeded random generator so failures are reproducible."""
    return random.Random(20240611)


@pytest.fixture
def random_points(rng):
    """Factory for points drawn uniformly from a cube centered on the origin."""

    def make(count: int, extent: float = 20.0) -> list[Point]:
        half = extent / 2.0
        return [
            Point(
                rng.random() * extent - half,
                rng.random() * extent - half,
                rng.random() * extent - half,
            )
            for _ in range(count)
        ]

    return make


@pytest.fixture
def recorder():
    """Create a movement recorder."""
    return MovementRecorder()
