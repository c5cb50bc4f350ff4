# tests/test_iteration.py

"""Tests for fail-fast iteration over the spatial index."""

import threading

import pytest

from core.exceptions import ConcurrentModificationError
from spatial import Point, SpatialIndex, SpatialIndexIterator


@pytest.fixture
def populated(index, random_points):
    """Index holding 100 random points."""
    points = random_points(100)
    for point in points:
        index.store(point)
    return index, points


class TestIteration:
    """Test iteration without concurrent modification."""

    def test_iterate_empty_index(self, index):
        """Iterating an empty index yields nothing."""
        assert list(index) == []

    def test_iterate_yields_each_entity_once(self, populated):
        """Iteration yields exactly size() entities, each once."""
        index, points = populated

        items = list(index.iterate())

        assert len(items) == index.size()
        assert {id(item) for item in items} == {id(point) for point in points}

    def test_iterator_is_single_pass(self, populated):
        """An iterator cannot be restarted; a fresh one is required."""
        index, points = populated
        iterator = iter(index)

        assert isinstance(iterator, SpatialIndexIterator)
        assert iter(iterator) is iterator
        assert len(list(iterator)) == len(points)
        assert list(iterator) == []
        assert len(list(index)) == len(points)

    def test_queries_do_not_invalidate_iteration(self, populated):
        """Read-only queries between steps are allowed."""
        index, points = populated

        count = 0
        for item in index:
            assert index.nearest_to(item, 1e-6) is item
            count += 1

        assert count == len(points)

    def test_move_within_compartment_keeps_iterator_valid(self):
        """Moves that stay inside a compartment are not structural."""
        index = SpatialIndex(10.0)
        points = [Point(float(i), 1.0, 1.0) for i in range(5)]
        for point in points:
            index.store(point)

        count = 0
        for item in index:
            item.translate(0.0, 0.5, 0.0)
            count += 1

        assert count == 5

    def test_exhausted_iterator_stays_exhausted(self, populated):
        """After completion, later mutations do not affect the iterator."""
        index, _ = populated
        iterator = index.iterate()
        list(iterator)

        index.store(Point(0.0, 0.0, 0.0))

        with pytest.raises(StopIteration):
            next(iterator)


class TestConcurrentModification:
    """Test that structural changes during iteration fail fast."""

    def test_store_during_iteration(self, populated):
        """Storing while iterating fails on the next step."""
        index, _ = populated
        iterator = iter(index)
        next(iterator)

        index.store(Point(0.0, 0.0, 0.0))

        with pytest.raises(ConcurrentModificationError):
            next(iterator)

    def test_remove_during_iteration(self, populated):
        """Removing while iterating fails on the next step."""
        index, points = populated

        with pytest.raises(ConcurrentModificationError):
            for item in index:
                index.remove(item)

        assert index.size() == len(points) - 1

    def test_clear_during_iteration(self, populated):
        """Clearing while iterating fails on the next step."""
        index, _ = populated
        iterator = iter(index)
        next(iterator)

        index.clear()

        with pytest.raises(ConcurrentModificationError):
            next(iterator)

    def test_move_across_compartments_during_iteration(self, populated):
        """Reassigning an entity to another compartment invalidates iteration."""
        index, _ = populated
        iterator = iter(index)
        item = next(iterator)

        item.translate(1000.0, 0.0, 0.0)

        with pytest.raises(ConcurrentModificationError):
            next(iterator)

    def test_mutation_from_another_thread(self, populated):
        """A mutation on another thread between steps is detected."""
        index, points = populated
        iterator = iter(index)
        next(iterator)

        worker = threading.Thread(target=index.remove, args=(points[0],))
        worker.start()
        worker.join()

        with pytest.raises(ConcurrentModificationError):
            next(iterator)

    def test_failure_is_not_fatal_to_index(self, populated):
        """After a failed iteration, a fresh one works."""
        index, _ = populated
        iterator = iter(index)
        next(iterator)
        index.store(Point(0.0, 0.0, 0.0))

        with pytest.raises(ConcurrentModificationError):
            next(iterator)
        # Still invalid on later attempts
        with pytest.raises(ConcurrentModificationError):
            next(iterator)

        assert len(list(index)) == index.size()

    def test_concurrent_modification_is_runtime_error(self, populated):
        """Callers may catch the failure as a RuntimeError."""
        index, _ = populated
        iterator = iter(index)
        index.clear()

        with pytest.raises(RuntimeError):
            next(iterator)
