#   -*- coding: utf-8 -*-

from .data_generator import generate_points
from .point_loader import (
    PointDataError,
    load_points,
    load_points_csv,
    load_tsplib_points,
    save_points_csv,
)

__all__ = [
    "generate_points",
    "PointDataError",
    "load_points",
    "load_points_csv",
    "load_tsplib_points",
    "save_points_csv",
]
