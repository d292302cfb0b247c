# data/point_loader.py
# -*- coding: utf-8 -*-
"""
Loading and saving point sets.

Two input formats are supported:
- TSPLIB / Solomon-style text files with a ``NODE_COORD_SECTION``;
  node 1 is the warehouse.
- CSV files with ``x`` and ``y`` columns and optional ``lat``, ``lon``
  and ``is_warehouse`` columns (read and written with pandas).
"""

import logging
import os
import warnings
from typing import List, Sequence

import pandas as pd

from route_pso.core.problem_utils import Point

logger = logging.getLogger(__name__)

CSV_COLUMNS = ['x', 'y', 'lat', 'lon', 'is_warehouse']
_SECTION_ENDS = ('DEMAND_SECTION', 'DEPOT_SECTION', 'TIME_WINDOW_SECTION', 'SERVICE_TIME_SECTION', 'EOF')


class PointDataError(ValueError):
    """Raised when a point file is missing required content."""


def load_tsplib_points(filename: str) -> List[Point]:
    """
    Loads node coordinates from a TSPLIB / Solomon-style instance file.

    Only ``NODE_COORD_SECTION`` is read; lines that are not
    ``<id> <x> <y>`` are skipped with a warning. The node with id 1
    becomes the warehouse.

    Raises:
        PointDataError: if the file has no coordinate section or no nodes.
    """
    with open(filename, 'r', encoding='utf-8') as f:
        lines = f.readlines()

    node_coord_start = None
    for i, line in enumerate(lines):
        if line.strip() == 'NODE_COORD_SECTION':
            node_coord_start = i + 1
            break
    if node_coord_start is None:
        raise PointDataError(f"{filename}: NODE_COORD_SECTION not found.")

    nodes = []
    for line in lines[node_coord_start:]:
        stripped = line.strip()
        if not stripped:
            continue
        if stripped in _SECTION_ENDS:
            break
        parts = stripped.split()
        if len(parts) != 3:
            warnings.warn(f"{filename}: skipping malformed coordinate line {stripped!r}.")
            continue
        try:
            nodes.append((int(parts[0]), float(parts[1]), float(parts[2])))
        except ValueError:
            warnings.warn(f"{filename}: skipping malformed coordinate line {stripped!r}.")

    if not nodes:
        raise PointDataError(f"{filename}: no node coordinates found.")

    nodes.sort(key=lambda node: node[0])
    points = [Point(x=x, y=y, is_warehouse=(node_id == 1)) for node_id, x, y in nodes]
    if not any(p.is_warehouse for p in points):
        warnings.warn(f"{filename}: no node with id 1; the first node will act as warehouse.")
    logger.info("Loaded %d nodes from %s.", len(points), filename)
    return points


def load_points_csv(filename: str) -> List[Point]:
    """
    Loads points from a CSV file with at least ``x`` and ``y`` columns.

    Raises:
        PointDataError: if required columns are missing.
    """
    df = pd.read_csv(filename)
    missing = [col for col in ('x', 'y') if col not in df.columns]
    if missing:
        raise PointDataError(f"{filename}: missing column(s) {', '.join(missing)}.")

    points = []
    for row in df.itertuples(index=False):
        lat = getattr(row, 'lat', None)
        lon = getattr(row, 'lon', None)
        is_warehouse = getattr(row, 'is_warehouse', False)
        points.append(Point(
            x=float(row.x),
            y=float(row.y),
            lat=None if lat is None or pd.isna(lat) else float(lat),
            lon=None if lon is None or pd.isna(lon) else float(lon),
            is_warehouse=False if pd.isna(is_warehouse) else _as_bool(is_warehouse),
        ))
    logger.info("Loaded %d points from %s.", len(points), filename)
    return points


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1', 'on')
    return bool(value)


def save_points_csv(points: Sequence[Point], filename: str) -> None:
    """Writes points to CSV in the layout read by ``load_points_csv``."""
    df = pd.DataFrame([p.to_dict() for p in points], columns=CSV_COLUMNS)
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    df.to_csv(filename, index=False)
    logger.info("Saved %d points to %s.", len(points), filename)


def load_points(filename: str) -> List[Point]:
    """Dispatches on the file extension: ``.csv`` via pandas, anything else as TSPLIB."""
    if filename.lower().endswith('.csv'):
        return load_points_csv(filename)
    return load_tsplib_points(filename)
