# core/route_optimizer.py
# -*- coding: utf-8 -*-
"""
Headless driver for the PSO route engine.

The engine itself has no stop condition; this module plays the role of
the external driver: it builds the engine, calls ``step()`` exactly
``iterations`` times, records the swarm diversity after every step and
collects a results dictionary for reporting.
"""

import logging
import time as pytime
from typing import Any, Callable, Dict, Optional, Sequence

from route_pso.algorithm.pso_optimizer import PSOEngine

logger = logging.getLogger(__name__)


def run_optimization(
    points: Sequence[Any],
    pso_params: Optional[Dict[str, Any]] = None,
    on_step: Optional[Callable[[Dict[str, Any]], None]] = None,
) -> Dict[str, Any]:
    """
    Runs a complete PSO optimisation over ``points``.

    Args:
        points: Point set, one of them flagged as warehouse.
        pso_params: Engine parameters merged over the defaults.
        on_step: Optional callback receiving every step snapshot.

    Returns:
        Dictionary with keys:
            'best_route': closed tour (warehouse first and last)
            'best_distance': float
            'initial_distance': global best before the first step
            'improvement_pct': relative improvement over the initial best
            'convergence_history': list of floats, length iterations + 1
            'diversity_history': diversity after construction and each step
            'iterations': number of steps performed
            'total_computation_time': seconds
            'algorithm_name': 'pso_optimizer'
            'algorithm_params': validated parameters used
            'points': the Point list the engine optimised over

    Raises:
        PSOConfigError: for invalid parameters or an empty point set.
    """
    start_time = pytime.time()
    engine = PSOEngine(points, pso_params)
    iterations = engine.config['iterations']
    logger.info("--- Starting PSO optimisation: %d points, %d iterations ---", len(engine.points), iterations)

    initial_distance = engine.global_best_fitness
    diversity_history = [engine.diversity()]
    report_every = iterations // 10 or 1

    for _ in range(iterations):
        snapshot = engine.step()
        diversity_history.append(engine.diversity())
        if on_step is not None:
            on_step(snapshot)
        if snapshot['iteration'] % report_every == 0:
            logger.info("  Iteration %d/%d: best distance=%.4f, diversity=%.3f",
                        snapshot['iteration'], iterations,
                        snapshot['global_best_fitness'], diversity_history[-1])

    total_time = pytime.time() - start_time
    final = engine.result()
    best_distance = final['global_best_fitness']
    if initial_distance > 0:
        improvement_pct = (initial_distance - best_distance) / initial_distance * 100.0
    else:
        improvement_pct = 0.0

    logger.info("PSO finished after %d iterations in %.4f seconds. Best distance: %.4f",
                iterations, total_time, best_distance)

    return {
        'best_route': engine.best_route(),
        'best_distance': best_distance,
        'initial_distance': initial_distance,
        'improvement_pct': improvement_pct,
        'convergence_history': final['convergence_history'],
        'diversity_history': diversity_history,
        'iterations': final['iteration'],
        'total_computation_time': total_time,
        'algorithm_name': 'pso_optimizer',
        'algorithm_params': dict(engine.config),
        'points': list(engine.points),
    }
