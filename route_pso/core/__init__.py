# core/__init__.py
# -*- coding: utf-8 -*-
"""
__init__.py for the core package.

Exposes key components from the core modules:
- problem_utils (Point, warehouse lookup, mutation operators)
- distance_calculator (distance matrix, route fitness, haversine)
- random_source (seeded / default random sources)
- config (parameter defaults, validation, INI files)
- route_optimizer (run_optimization - the headless driver)
"""

from .problem_utils import (
    Point,
    as_point,
    find_warehouse_index,
    delivery_indices,
    is_valid_route,
    shuffle_route,
    swap_mutation,
    two_opt_mutation,
)
from .distance_calculator import (
    compute_distance_matrix,
    calculate_route_fitness,
    route_length_from_points,
    haversine,
    geographic_tour_length,
)
from .random_source import LCGRandom, make_random_source
from .config import (
    PSOConfigError,
    DEFAULT_PSO_PARAMS,
    DEFAULT_DATA_PARAMS,
    build_pso_params,
    build_data_params,
    load_config,
    save_config,
)

__all__ = [
    'Point',
    'as_point',
    'find_warehouse_index',
    'delivery_indices',
    'is_valid_route',
    'shuffle_route',
    'swap_mutation',
    'two_opt_mutation',
    'compute_distance_matrix',
    'calculate_route_fitness',
    'route_length_from_points',
    'haversine',
    'geographic_tour_length',
    'LCGRandom',
    'make_random_source',
    'PSOConfigError',
    'DEFAULT_PSO_PARAMS',
    'DEFAULT_DATA_PARAMS',
    'build_pso_params',
    'build_data_params',
    'load_config',
    'save_config',
]

# route_optimizer imports the algorithm package, which in turn imports
# from core; import it via ``route_pso.core.route_optimizer`` directly.
