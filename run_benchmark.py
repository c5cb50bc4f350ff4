#!/usr/bin/env python3
"""CLI runner that checks the COMPARTMAP spatial index for speed and correctness.

Each round fills an index with random points, then times a range query, a full
iteration, and a self-locating proximity search for every stored point.
"""

import argparse
import random
import sys
import time

from core.config import config
from core.logging import configure_logging, get_logger
from spatial import Point, SpatialIndex, calculate_distance_3d

logger = get_logger(__name__)

ACCURACIES = (0.000_001, 0.000_01, 0.000_1, 0.001, 0.01, 0.1, 1.0)


def format_ms(seconds: float) -> str:
    """Format a duration in milliseconds."""
    return f"{seconds * 1000.0:.3f} ms"


def run_round(
    rng: random.Random,
    count: int,
    extent: float,
    search: float,
    compartment_size: float,
) -> bool:
    """Run one benchmark round; returns True if every check passed."""
    ok = True
    half = extent / 2.0

    def random_coord() -> float:
        return rng.random() * extent - half

    index = SpatialIndex(compartment_size)
    stored = []
    start = time.perf_counter()
    for _ in range(count):
        point = Point(random_coord(), random_coord(), random_coord())
        index.store(point)
        stored.append(point)
    print(f"\tStore {count} elements: {format_ms(time.perf_counter() - start)}")

    # Range query versus a full linear scan
    center = Point(random_coord(), random_coord(), random_coord())
    start = time.perf_counter()
    result = index.get_all_within(center, search)
    search_time = time.perf_counter() - start

    start = time.perf_counter()
    expected = [
        point for point in stored
        if calculate_distance_3d(point.position, center.position) <= search
    ]
    scan_time = time.perf_counter() - start

    print(
        f"\tLocate {len(result)} from {index.size()} elements no more than "
        f"{search} units of {center}: {format_ms(search_time)} "
        f"(linear scan {format_ms(scan_time)})"
    )
    if {id(point) for point in result} != {id(point) for point in expected}:
        print(f"\tFAIL: Range query found {len(result)} elements, expected {len(expected)}")
        ok = False

    # Iteration
    found = 0
    start = time.perf_counter()
    for _ in index:
        found += 1
    iterate_time = time.perf_counter() - start
    if found == index.size() == count:
        print(f"\tIterate all items: {format_ms(iterate_time)}")
    else:
        print(f"\tFAIL: Iterated {found} instead of {count} items: {format_ms(iterate_time)}")
        ok = False

    # Every element must be the nearest element to itself
    accuracy = rng.choice(ACCURACIES)
    failed_none = 0
    failed_wrong = 0
    start = time.perf_counter()
    for item in index:
        check = index.nearest_to(item, accuracy)
        if check is None:
            failed_none += 1
        elif check is not item:
            failed_wrong += 1
    verify_time = time.perf_counter() - start

    if failed_none == 0 and failed_wrong == 0:
        print(
            f"\tAll elements located by proximity searches (range {accuracy}): "
            f"{format_ms(verify_time)}"
        )
    else:
        ok = False
        if failed_none:
            print(f"\tFAIL: {failed_none} elements could not be located by proximity search")
        if failed_wrong:
            print(f"\tFAIL: {failed_wrong} elements were not the expected proximity search result")

    # The iterator must reproduce every stored element
    missing = {id(point) for point in stored}
    for item in index:
        missing.discard(id(item))
    if missing:
        print(f"\tFAIL: Iterator did not find {len(missing)} expected elements.")
        ok = False
    else:
        print("\tIterator reproduced all expected elements.")

    return ok


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="COMPARTMAP benchmark - Time and verify the spatial index",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # 10 rounds of 1,000,000 points
  %(prog)s --rounds 3 --count 50000 # Quicker run
  %(prog)s --compartment-size 2.0   # Coarser compartments
        """,
    )

    parser.add_argument(
        "--rounds",
        type=int,
        default=10,
        help="Number of rounds to run (default: 10)",
    )

    parser.add_argument(
        "--count",
        type=int,
        default=1_000_000,
        help="Points stored per round (default: 1000000)",
    )

    parser.add_argument(
        "--extent",
        type=float,
        default=100.0,
        help="Edge length of the cube points are drawn from (default: 100.0)",
    )

    parser.add_argument(
        "--search",
        type=float,
        default=5.0,
        help="Radius of the timed range query (default: 5.0)",
    )

    parser.add_argument(
        "--compartment-size",
        type=float,
        default=config.compartment_size,
        help=f"Compartment edge length (default: {config.compartment_size})",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible runs",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=config.log_level,
        help=f"Log level (default: {config.log_level})",
    )

    args = parser.parse_args()

    configure_logging(args.log_level)
    rng = random.Random(args.seed)

    logger.info(
        "benchmark.starting",
        rounds=args.rounds,
        count=args.count,
        compartment_size=args.compartment_size,
    )

    failures = 0
    for i in range(args.rounds):
        print(f"{time.strftime('%Y-%m-%d %H:%M:%S')}: Test #{i + 1}")
        if not run_round(rng, args.count, args.extent, args.search, args.compartment_size):
            failures += 1

    print(f"Total tests run:  {args.rounds}")
    print(f"Total tests OK:   {args.rounds - failures}")
    print(f"Total tests FAIL: {failures}")

    logger.info("benchmark.finished", failures=failures)
    sys.exit(0 if failures == 0 else 1)


if __name__ == "__main__":
    main()
