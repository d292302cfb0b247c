# core/distance_calculator.py
# -*- coding: utf-8 -*-
"""
Distance and fitness computations.

Route fitness is always Euclidean and read from a precomputed distance
matrix. The haversine helper is only used for reporting the approximate
real-world length of a tour when points carry geographic coordinates.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from .problem_utils import Point

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def euclidean_distance(p1: Point, p2: Point) -> float:
    dx = p1.x - p2.x
    dy = p1.y - p2.y
    return math.sqrt(dx * dx + dy * dy)


def compute_distance_matrix(points: Sequence[Point]) -> np.ndarray:
    """
    Precomputes all pairwise Euclidean distances.

    Args:
        points: The full point set, warehouse included.

    Returns:
        np.ndarray: Symmetric (n, n) float array with a zero diagonal.
    """
    coords = np.array([(p.x, p.y) for p in points], dtype=float).reshape(-1, 2)
    diff = coords[:, np.newaxis, :] - coords[np.newaxis, :, :]
    return np.sqrt((diff ** 2).sum(axis=-1))


def calculate_route_fitness(route: Sequence[int], distance_matrix: np.ndarray, warehouse_idx: int) -> float:
    """
    Length of the closed tour warehouse -> route... -> warehouse.

    An empty route has length 0.
    """
    if len(route) == 0:
        return 0.0
    tour = np.array([warehouse_idx, *route, warehouse_idx], dtype=int)
    return float(distance_matrix[tour[:-1], tour[1:]].sum())


def route_length_from_points(route: Sequence[int], points: Sequence[Point], warehouse_idx: int) -> float:
    """Same as calculate_route_fitness but computed leg by leg from the coordinates."""
    if len(route) == 0:
        return 0.0
    tour = [warehouse_idx, *route, warehouse_idx]
    return sum(euclidean_distance(points[a], points[b]) for a, b in zip(tour, tour[1:]))


def haversine(coord1, coord2) -> float:
    """
    Calculates the great-circle distance between two (lat, lon) pairs in degrees.

    Returns:
        float: Distance in kilometers, or float('inf') for malformed input.
    """
    if not coord1 or not coord2 or len(coord1) != 2 or len(coord2) != 2:
        logger.warning("Invalid coordinates provided to haversine: %s, %s", coord1, coord2)
        return float('inf')

    lat1, lon1 = math.radians(coord1[0]), math.radians(coord1[1])
    lat2, lon2 = math.radians(coord2[0]), math.radians(coord2[1])

    dlon = lon2 - lon1
    dlat = lat2 - lat1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def geographic_tour_length(tour: Sequence[int], points: Sequence[Point]) -> Optional[float]:
    """
    Great-circle length in km of a closed tour given as point indices.

    Returns None unless every point on the tour has both lat and lon.
    """
    if len(tour) < 2:
        return 0.0
    if any(points[idx].lat is None or points[idx].lon is None for idx in tour):
        return None
    return sum(
        haversine((points[a].lat, points[a].lon), (points[b].lat, points[b].lon))
        for a, b in zip(tour, tour[1:])
    )
