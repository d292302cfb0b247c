# -*- coding: utf-8 -*-
"""
route_pso: discrete Particle Swarm Optimization for single-depot delivery routes.

Sub-packages:
    core      - points, distances, random sources, configuration, headless driver.
    algorithm - the swap-sequence PSO engine.
    data      - random instance generation and point file loading.
    utils     - text reports.

Typical use:

    from route_pso import PSOEngine, generate_points

    engine = PSOEngine(generate_points(15, seed=1), {'random_seed': 42})
    for _ in range(engine.config['iterations']):
        snapshot = engine.step()
"""

from .algorithm import PSOEngine
from .core import Point, PSOConfigError
from .data import generate_points

__version__ = "1.0.0"

__all__ = [
    "PSOEngine",
    "Point",
    "PSOConfigError",
    "generate_points",
    "__version__",
]
