# algorithm/__init__.py
# -*- coding: utf-8 -*-
"""
__init__.py for the algorithm package.

Exposes the discrete PSO engine and its swap-sequence helpers:
from route_pso.algorithm import PSOEngine
"""

from .pso_optimizer import (
    PSOEngine,
    Particle,
    SwapOperation,
    SwapVelocity,
    get_swap_sequence,
    apply_swap_sequence,
    generate_random_swap_sequence,
)

__all__ = [
    'PSOEngine',
    'Particle',
    'SwapOperation',
    'SwapVelocity',
    'get_swap_sequence',
    'apply_swap_sequence',
    'generate_random_swap_sequence',
]
