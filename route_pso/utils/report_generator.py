# utils/report_generator.py
# -*- coding: utf-8 -*-
"""
Generates formatted text reports summarising a PSO route optimisation run.
"""

import logging
import math
import textwrap
from typing import Any, Dict, Optional

from route_pso.core.distance_calculator import geographic_tour_length

logger = logging.getLogger(__name__)


def format_float(value: Any, precision: int = 4) -> str:
    """
    Safely formats a numerical value to a specified precision string.
    Handles None, NaN, Infinity, and non-numeric types gracefully.

    Args:
        value: The value to format (int, float, None, or other).
        precision: The number of decimal places for floats.

    Returns:
        The formatted string representation.
    """
    if isinstance(value, (int, float)):
        if math.isnan(value):
            return "NaN"
        if value == float('inf'):
            return "Infinity"
        if value == float('-inf'):
            return "-Infinity"
        formatted = f"{value:.{precision}f}"
        # Avoid "-0.0000"
        if formatted.startswith('-') and float(formatted) == 0.0:
            return f"{0.0:.{precision}f}"
        return formatted
    if value is None:
        return "N/A"
    return str(value)


def generate_route_report(result_data: Dict[str, Any], title: Optional[str] = None) -> str:
    """
    Builds the statistics report for a run produced by ``run_optimization``.

    Args:
        result_data: Results dictionary from ``core.route_optimizer.run_optimization``.
        title: Optional heading; defaults to the algorithm name.

    Returns:
        Multi-line report string.
    """
    heading = title or f"Route Optimisation Report ({result_data.get('algorithm_name', 'pso_optimizer')})"
    best_route = result_data.get('best_route', [])
    points = result_data.get('points') or []
    diversity_history = result_data.get('diversity_history') or []
    final_diversity = diversity_history[-1] if diversity_history else None
    runtime_ms = result_data.get('total_computation_time', 0.0) * 1000.0

    lines = [
        "=" * 60,
        heading,
        "=" * 60,
        f"Delivery points:        {max(len(points) - 1, 0)}",
        f"Iterations:             {result_data.get('iterations', 0)}",
        f"Best distance:          {format_float(result_data.get('best_distance'), 2)}",
        f"Initial best distance:  {format_float(result_data.get('initial_distance'), 2)}",
        f"Improvement:            {format_float(result_data.get('improvement_pct'), 1)} %",
        f"Runtime:                {format_float(runtime_ms, 0)} ms",
    ]
    if final_diversity is not None:
        lines.append(f"Swarm diversity:        {format_float(final_diversity * 100.0, 1)} %")

    if points and best_route:
        geo_length = geographic_tour_length(best_route, points)
        if geo_length is not None:
            lines.append(f"Approx. tour length:    {format_float(geo_length, 2)} km")

    params = result_data.get('algorithm_params') or {}
    if params:
        lines.append("")
        lines.append("Parameters:")
        for key in sorted(params):
            lines.append(f"  {key}: {params[key]}")

    lines.append("")
    lines.append("Best tour:")
    tour_text = " -> ".join(str(idx) for idx in best_route) if best_route else "N/A"
    lines.extend(textwrap.wrap(tour_text, width=76, initial_indent="  ", subsequent_indent="  "))
    lines.append("=" * 60)

    logger.debug("Report generated for %d-stop tour.", len(best_route))
    return "\n".join(lines)
