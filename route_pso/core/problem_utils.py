# core/problem_utils.py
# -*- coding: utf-8 -*-
"""
Shared problem utilities for single-depot delivery routing.

Holds the point representation, warehouse lookup and the permutation
operators used by the PSO engine:
- Fisher-Yates shuffling of a route.
- Swap mutation (exchange two random positions).
- 2-opt local search (first-improvement segment reversal).

Operators receive the random source and the distance matrix explicitly,
so the engine remains the only owner of its PRNG stream.
"""

import logging
from typing import Any, Callable, List, NamedTuple, Optional, Sequence

logger = logging.getLogger(__name__)

# A 2-opt move must shorten the tour by more than this to be applied
TWO_OPT_EPSILON = 0.001
# Upper bound on the number of 2-opt improvement passes per call
TWO_OPT_MAX_PASSES = 100


class Point(NamedTuple):
    """A delivery location (or the warehouse) on the Euclidean plane."""
    x: float
    y: float
    lat: Optional[float] = None
    lon: Optional[float] = None
    is_warehouse: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Point":
        """Builds a Point from a mapping; accepts the camelCase ``isWarehouse`` key."""
        is_warehouse = data.get('is_warehouse', data.get('isWarehouse', False))
        lat = data.get('lat')
        lon = data.get('lon')
        return cls(
            x=float(data['x']),
            y=float(data['y']),
            lat=float(lat) if lat is not None else None,
            lon=float(lon) if lon is not None else None,
            is_warehouse=bool(is_warehouse),
        )

    def to_dict(self) -> dict:
        return {
            'x': self.x,
            'y': self.y,
            'lat': self.lat,
            'lon': self.lon,
            'is_warehouse': self.is_warehouse,
        }


def as_point(value: Any) -> Point:
    """
    Coerces a Point, a mapping or an (x, y) pair into a Point.

    Raises:
        TypeError: if the value cannot be interpreted as a point.
    """
    if isinstance(value, Point):
        return value
    if isinstance(value, dict):
        return Point.from_dict(value)
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return Point(float(value[0]), float(value[1]))
    raise TypeError(f"Cannot interpret {value!r} as a Point.")


def find_warehouse_index(points: Sequence[Point]) -> int:
    """
    Returns the index of the first point flagged as warehouse.

    Falls back to index 0 (with a warning in the log) when no point
    carries the flag.
    """
    for idx, point in enumerate(points):
        if point.is_warehouse:
            return idx
    logger.warning("No warehouse flagged among %d points; using index 0 as warehouse.", len(points))
    return 0


def delivery_indices(num_points: int, warehouse_idx: int) -> List[int]:
    """All point indices except the warehouse, in ascending order."""
    return [idx for idx in range(num_points) if idx != warehouse_idx]


def is_valid_route(route: Sequence[int], num_points: int, warehouse_idx: int) -> bool:
    """True when ``route`` is a permutation of exactly the delivery indices."""
    return sorted(route) == delivery_indices(num_points, warehouse_idx)


def shuffle_route(route: Sequence[int], rand: Callable[[], float]) -> List[int]:
    """Returns a Fisher-Yates shuffled copy of ``route`` driven by ``rand``."""
    shuffled = list(route)
    for j in range(len(shuffled) - 1, 0, -1):
        k = int(rand() * (j + 1))
        shuffled[j], shuffled[k] = shuffled[k], shuffled[j]
    return shuffled


# --- Permutation Mutation Operators ---

def swap_mutation(route: Sequence[int], rand: Callable[[], float]) -> List[int]:
    """
    Exchanges two uniformly random positions of a copy of ``route``.

    The two positions may coincide, in which case the copy is unchanged.
    """
    route_copy = list(route)
    size = len(route_copy)
    if size == 0:
        return route_copy
    idx1 = int(rand() * size)
    idx2 = int(rand() * size)
    route_copy[idx1], route_copy[idx2] = route_copy[idx2], route_copy[idx1]
    return route_copy


def reverse_segment(route: List[int], i: int, j: int) -> None:
    """Reverses ``route[i..j]`` (inclusive) in place."""
    route[i:j + 1] = route[i:j + 1][::-1]


def two_opt_mutation(route: Sequence[int], distance_matrix, warehouse_idx: int) -> List[int]:
    """
    Applies first-improvement 2-opt local search to a warehouse-anchored tour.

    For every segment ``[i, j]`` with ``j >= i + 2`` the two edges entering
    and leaving the segment are compared against the edges obtained by
    reversing it; the warehouse stands in for the missing neighbour at the
    route ends. The first reversal that shortens the tour by more than
    ``TWO_OPT_EPSILON`` is applied and the scan restarts. The number of
    passes is capped at ``min(n * n, TWO_OPT_MAX_PASSES)``.

    Args:
        route: Visiting order of the delivery points (warehouse excluded).
        distance_matrix: Square numpy array of pairwise distances.
        warehouse_idx: Index of the warehouse in the distance matrix.

    Returns:
        A new route whose fitness is never greater than the input's.
        Routes shorter than 4 points are returned as an unchanged copy.
    """
    n = len(route)
    new_route = list(route)
    if n < 4:
        return new_route

    max_passes = min(n * n, TWO_OPT_MAX_PASSES)
    passes = 0
    improved = True
    while improved and passes < max_passes:
        improved = False
        passes += 1
        for i in range(n - 1):
            before = warehouse_idx if i == 0 else new_route[i - 1]
            first = new_route[i]
            for j in range(i + 2, n):
                last = new_route[j]
                after = warehouse_idx if j == n - 1 else new_route[j + 1]
                current_dist = distance_matrix[before, first] + distance_matrix[last, after]
                reversed_dist = distance_matrix[before, last] + distance_matrix[first, after]
                if reversed_dist < current_dist - TWO_OPT_EPSILON:
                    reverse_segment(new_route, i, j)
                    improved = True
                    break
            if improved:
                break

    return new_route
