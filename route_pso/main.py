# main.py
# -*- coding: utf-8 -*-
"""
Command-line entry point for the route PSO optimiser.

Loads parameters (INI file and/or command-line overrides), builds or
loads a point set, runs the optimisation and prints the statistics
report. Exits with status 1 on configuration or data errors.
"""

import argparse
import logging
import sys
from typing import List, Optional

from route_pso.core.config import PSOConfigError, build_data_params, build_pso_params, load_config
from route_pso.core.route_optimizer import run_optimization
from route_pso.data.data_generator import generate_points
from route_pso.data.point_loader import PointDataError, load_points
from route_pso.utils.report_generator import generate_route_report

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="route-pso",
        description="Optimise a single-depot delivery tour with discrete PSO.",
    )
    parser.add_argument("--config", help="INI file with [PSO] and [DATA_GENERATION] sections")
    parser.add_argument("--points", help="Point file (.csv or TSPLIB/Solomon text) instead of random points")
    parser.add_argument("--num-points", type=int, help="Number of random delivery points")
    parser.add_argument("--seed", type=int, help="Seed for both point generation and the PSO engine")
    parser.add_argument("--iterations", type=int, help="Number of PSO iterations")
    parser.add_argument("--swarm-size", type=int, help="Number of particles")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s"
    )

    try:
        if args.config:
            pso_params, data_params = load_config(args.config)
        else:
            pso_params, data_params = build_pso_params(), build_data_params()

        pso_overrides = {}
        if args.iterations is not None:
            pso_overrides['iterations'] = args.iterations
        if args.swarm_size is not None:
            pso_overrides['swarm_size'] = args.swarm_size
        if args.seed is not None:
            pso_overrides['random_seed'] = args.seed
            data_params['seed'] = args.seed
        if args.num_points is not None:
            data_params['num_points'] = args.num_points
        pso_params = build_pso_params({**pso_params, **pso_overrides})
        data_params = build_data_params(data_params)

        if args.points:
            points = load_points(args.points)
        else:
            points = generate_points(**data_params)

        results = run_optimization(points, pso_params)
    except (PSOConfigError, PointDataError, OSError) as e:
        logger.critical("Optimisation aborted: %s", e)
        return 1

    print(generate_route_report(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
