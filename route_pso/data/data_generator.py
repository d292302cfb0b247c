# data/data_generator.py
# -*- coding: utf-8 -*-
"""
Synthetic delivery instances for the single-depot routing problem.

Generates a warehouse at the centre of a rectangular area plus uniformly
distributed delivery points. Points can optionally be given geographic
coordinates around a centre latitude/longitude, using the flat
km-to-degree approximation (1 degree of latitude ~ 111 km).
"""

import logging
import math
from typing import List, Optional

import numpy as np

from route_pso.core.problem_utils import Point

logger = logging.getLogger(__name__)

KM_PER_DEGREE = 111.0


def project_to_geographic(x: float, y: float, width: float, height: float,
                          center_latitude: float, center_longitude: float,
                          radius_km: float) -> tuple:
    """
    Maps canvas coordinates to (lat, lon) around a centre point.

    The canvas centre lands on the given centre coordinate and the
    larger half-extent of the canvas spans ``radius_km``.
    """
    half_extent = max(width, height) / 2.0
    scale_km = radius_km / half_extent if half_extent > 0 else 0.0
    dx_km = (x - width / 2.0) * scale_km
    # Canvas y grows downwards, latitude grows northwards
    dy_km = (height / 2.0 - y) * scale_km

    delta_lat = dy_km / KM_PER_DEGREE
    cos_center_lat = math.cos(math.radians(center_latitude))
    if abs(cos_center_lat) < 1e-6:
        delta_lon = 0.0
    else:
        delta_lon = dx_km / (KM_PER_DEGREE * cos_center_lat)

    lat = max(-90.0, min(90.0, center_latitude + delta_lat))
    lon = (center_longitude + delta_lon + 180.0) % 360.0 - 180.0
    return lat, lon


def generate_points(num_points: int, width: float = 100.0, height: float = 100.0,
                    seed: Optional[int] = None,
                    center_latitude: Optional[float] = None,
                    center_longitude: Optional[float] = None,
                    radius_km: float = 5.0) -> List[Point]:
    """
    Generates a warehouse plus ``num_points`` random delivery points.

    Args:
        num_points: Number of delivery points (warehouse not included).
        width: Width of the area; x is drawn uniformly from [0, width).
        height: Height of the area; y is drawn uniformly from [0, height).
        seed: Optional seed for numpy's generator, for reproducible instances.
        center_latitude: If given together with ``center_longitude``, every
            point also gets lat/lon around this centre.
        center_longitude: See ``center_latitude``.
        radius_km: Real-world half extent of the area for the projection.

    Returns:
        List of Points; index 0 is the warehouse at the area centre.

    Raises:
        ValueError: for negative counts or dimensions.
    """
    if num_points < 0:
        raise ValueError("num_points must be non-negative.")
    if width < 0 or height < 0:
        raise ValueError("width and height must be non-negative.")

    rng = np.random.default_rng(seed)
    xs = rng.uniform(0.0, width, size=num_points)
    ys = rng.uniform(0.0, height, size=num_points)

    raw_points = [(width / 2.0, height / 2.0, True)]
    raw_points.extend((float(x), float(y), False) for x, y in zip(xs, ys))

    geographic = center_latitude is not None and center_longitude is not None
    points = []
    for x, y, is_warehouse in raw_points:
        lat = lon = None
        if geographic:
            lat, lon = project_to_geographic(x, y, width, height, center_latitude, center_longitude, radius_km)
        points.append(Point(x=x, y=y, lat=lat, lon=lon, is_warehouse=is_warehouse))

    logger.info("Generated warehouse + %d delivery points on a %.1f x %.1f area.", num_points, width, height)
    return points
