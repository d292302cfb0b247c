# algorithm/pso_optimizer.py
# -*- coding: utf-8 -*-
"""
Discrete Particle Swarm Optimization (PSO) for single-depot delivery routing.

Each particle holds a permutation of the delivery point indices (the
warehouse is the fixed start and end of every tour). Velocities are
weighted swap sequences:

    v(t+1) = w*v(t) + c1*r1*(pbest - x(t)) + c2*r2*(gbest - x(t))

where ``pbest - x`` is the swap sequence turning x into pbest. The three
terms are merged by swap key, the heaviest ``velocity_clamp`` swaps are
kept, and applying the velocity fires each swap with probability equal
to its weight. 2-opt and swap mutations, a decaying inertia weight and
stagnation-triggered reinitialisation keep the swarm moving.

The engine is stepped by its caller, one generation per ``step()`` call.
"""

import heapq
import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from route_pso.core.config import PSOConfigError, build_pso_params
from route_pso.core.distance_calculator import calculate_route_fitness, compute_distance_matrix
from route_pso.core.problem_utils import (
    Point,
    as_point,
    delivery_indices,
    find_warehouse_index,
    shuffle_route,
    swap_mutation,
    two_opt_mutation,
)
from route_pso.core.random_source import make_random_source

logger = logging.getLogger(__name__)

# Inertia weight reached at the last configured iteration when adaptive
FINAL_INERTIA = 0.4
# Global best changes smaller than this count as stagnation
STAGNATION_TOLERANCE = 0.001
# Share of the swarm (lowest indices first) reshuffled on global stagnation
REINIT_FRACTION = 0.3
# Personal-best stagnation length that triggers a forced swap mutation
PARTICLE_STAGNATION_LIMIT = 10
# Probability of picking 2-opt over swap once a mutation is triggered
TWO_OPT_PROBABILITY = 0.7

INITIAL_VELOCITY_SWAPS = 3
REINIT_VELOCITY_SWAPS = 5


class SwapOperation(NamedTuple):
    """Exchange of positions i and j, fired with probability ``weight``."""
    i: int
    j: int
    weight: float

    def to_dict(self) -> dict:
        return {'i': self.i, 'j': self.j, 'weight': self.weight}


# --- Helper Functions for Permutation PSO Operations ---

def get_swap_sequence(perm1: Sequence[int], perm2: Sequence[int]) -> List[SwapOperation]:
    """
    Calculates the swaps that transform permutation perm1 into perm2.

    Scans positions left to right; wherever the working copy differs from
    perm2 the wanted element is swapped into place. Every swap gets weight
    1.0. Replaying the whole sequence reproduces perm2 exactly.

    Args:
        perm1: The starting permutation.
        perm2: The target permutation (same elements as perm1).

    Returns:
        At most ``len(perm1) - 1`` swap operations.
    """
    working_perm = list(perm1)
    element_to_index = {element: i for i, element in enumerate(working_perm)}
    swaps = []

    for i, target_element in enumerate(perm2):
        current_element = working_perm[i]
        if current_element == target_element:
            continue
        j = element_to_index.get(target_element)
        if j is None:
            continue
        working_perm[i], working_perm[j] = working_perm[j], working_perm[i]
        element_to_index[current_element] = j
        element_to_index[target_element] = i
        swaps.append(SwapOperation(i, j, 1.0))

    return swaps


def apply_swap_sequence(perm: Sequence[int], swaps: Sequence[SwapOperation],
                        rand: Callable[[], float]) -> List[int]:
    """
    Replays ``swaps`` on a copy of ``perm``, each one firing when
    ``rand() < weight``. Weights above 1 always fire. Swaps whose indices
    fall outside the permutation are skipped.
    """
    new_perm = list(perm)
    size = len(new_perm)
    for swap in swaps:
        if rand() < swap.weight:
            if swap.i < size and swap.j < size:
                new_perm[swap.i], new_perm[swap.j] = new_perm[swap.j], new_perm[swap.i]
    return new_perm


def generate_random_swap_sequence(route_length: int, count: int,
                                  rand: Callable[[], float]) -> List[SwapOperation]:
    """Draws ``count`` random swaps; draws with i == j are dropped."""
    swaps = []
    for _ in range(count):
        i = int(rand() * route_length)
        j = int(rand() * route_length)
        if i != j:
            swaps.append(SwapOperation(i, j, rand()))
    return swaps


class SwapVelocity:
    """
    Bounded, key-merged collection of weighted swaps.

    Swaps are merged by their ``(i, j)`` key, summing weights on
    collision; ``top`` keeps the ``capacity`` heaviest entries, ties in
    insertion order.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._weights: Dict[Tuple[int, int], float] = {}

    def merge(self, swaps: Sequence[SwapOperation], scale: float) -> None:
        for swap in swaps:
            key = (swap.i, swap.j)
            scaled = swap.weight * scale
            if key in self._weights:
                self._weights[key] += scaled
            else:
                self._weights[key] = scaled

    def top(self) -> List[SwapOperation]:
        heaviest = heapq.nlargest(self.capacity, self._weights.items(), key=lambda item: item[1])
        return [SwapOperation(i, j, weight) for (i, j), weight in heaviest]

    def __len__(self):
        return len(self._weights)


# --- Particle Class ---
class Particle:
    """
    One candidate tour plus its search memory.

    Attributes:
        position: Current visiting order of the delivery points.
        velocity: Ordered list of SwapOperation.
        personal_best: Best position this particle has visited.
        personal_best_fitness: Tour length of ``personal_best``.
        current_fitness: Tour length of ``position`` at its last evaluation.
        stagnation_counter: Steps since ``personal_best`` last improved.
    """

    def __init__(self, position: List[int], velocity: List[SwapOperation], fitness: float):
        self.position = list(position)
        self.velocity = list(velocity)
        self.personal_best = list(position)
        self.personal_best_fitness = fitness
        self.current_fitness = fitness
        self.stagnation_counter = 0

    def update_personal_best(self) -> bool:
        """Adopts the current position as personal best on strict improvement."""
        if self.current_fitness < self.personal_best_fitness:
            self.personal_best_fitness = self.current_fitness
            self.personal_best = list(self.position)
            self.stagnation_counter = 0
            return True
        self.stagnation_counter += 1
        return False

    def to_dict(self) -> dict:
        return {
            'position': list(self.position),
            'velocity': [swap.to_dict() for swap in self.velocity],
            'personal_best': list(self.personal_best),
            'personal_best_fitness': self.personal_best_fitness,
            'current_fitness': self.current_fitness,
            'stagnation_counter': self.stagnation_counter,
        }

    def __repr__(self):
        return (f"Particle(fitness={self.current_fitness:.4f}, "
                f"pbest={self.personal_best_fitness:.4f}, stagnation={self.stagnation_counter})")


class PSOEngine:
    """
    Swap-sequence PSO over warehouse-anchored tours.

    Args:
        points: Points (or dicts / (x, y) pairs); the first one flagged
            ``is_warehouse`` is the depot, index 0 when none is flagged.
        config: PSO parameters, see ``core.config.DEFAULT_PSO_PARAMS``.
            camelCase keys are accepted.

    Raises:
        PSOConfigError: for an empty point list or invalid parameters.
    """

    def __init__(self, points: Sequence[Any], config: Optional[Dict[str, Any]] = None):
        if not points:
            raise PSOConfigError("At least one point (the warehouse) is required.")
        self.config = build_pso_params(config)
        self.points: List[Point] = [as_point(p) for p in points]

        self.random = make_random_source(self.config['random_seed'])
        self.warehouse_idx = find_warehouse_index(self.points)
        self.initial_inertia = self.config['inertia_weight']

        self.particles: List[Particle] = []
        self.global_best: List[int] = []
        self.global_best_fitness = float('inf')
        self.convergence_history: List[float] = []
        self.current_iteration = 0
        self.stagnation_counter = 0
        self.last_best_fitness = float('inf')

        self.distance_matrix = compute_distance_matrix(self.points)
        self._initialize_swarm()
        logger.info(
            "PSO engine initialised: %d points, swarm=%d, baseline distance=%.4f",
            len(self.points), self.config['swarm_size'], self.global_best_fitness,
        )

    # --- Initialisation ---

    def _initialize_swarm(self) -> None:
        base_route = delivery_indices(len(self.points), self.warehouse_idx)
        for _ in range(self.config['swarm_size']):
            route = shuffle_route(base_route, self.random)
            fitness = self.route_fitness(route)
            velocity = generate_random_swap_sequence(len(route), INITIAL_VELOCITY_SWAPS, self.random)
            self.particles.append(Particle(route, velocity, fitness))

            if fitness < self.global_best_fitness:
                self.global_best_fitness = fitness
                self.global_best = list(route)

        self.convergence_history.append(self.global_best_fitness)
        self.last_best_fitness = self.global_best_fitness

    # --- Fitness & Control ---

    def route_fitness(self, route: Sequence[int]) -> float:
        return calculate_route_fitness(route, self.distance_matrix, self.warehouse_idx)

    def current_inertia(self) -> float:
        """
        Linearly moves from the initial inertia to FINAL_INERTIA over the
        configured iterations and stays there if stepping continues.
        """
        if not self.config['adaptive_inertia']:
            return self.config['inertia_weight']
        progress = min(self.current_iteration / self.config['iterations'], 1.0)
        return self.initial_inertia - (self.initial_inertia - FINAL_INERTIA) * progress

    def _handle_global_stagnation(self) -> None:
        if abs(self.global_best_fitness - self.last_best_fitness) < STAGNATION_TOLERANCE:
            self.stagnation_counter += 1
        else:
            self.stagnation_counter = 0
            self.last_best_fitness = self.global_best_fitness

        if self.stagnation_counter <= self.config['stagnation_threshold']:
            return

        reinit_count = int(self.config['swarm_size'] * REINIT_FRACTION)
        logger.info(
            "Iteration %d: global best stagnant for %d steps, reinitialising %d particles.",
            self.current_iteration, self.stagnation_counter, reinit_count,
        )
        for particle in self.particles[:reinit_count]:
            particle.position = shuffle_route(particle.position, self.random)
            particle.velocity = generate_random_swap_sequence(
                len(particle.position), REINIT_VELOCITY_SWAPS, self.random)
            particle.stagnation_counter = 0
        self.stagnation_counter = 0

    def _combine_velocity(self, particle: Particle, cognitive: List[SwapOperation],
                          social: List[SwapOperation], inertia: float) -> List[SwapOperation]:
        velocity = SwapVelocity(self.config['velocity_clamp'])
        velocity.merge(particle.velocity, inertia)
        r1 = self.random()
        velocity.merge(cognitive, self.config['cognitive_coeff'] * r1)
        r2 = self.random()
        velocity.merge(social, self.config['social_coeff'] * r2)
        return velocity.top()

    def _mutate(self, route: List[int]) -> List[int]:
        if self.random() < self.config['mutation_rate']:
            if self.config['use_2opt_mutation'] and self.random() < TWO_OPT_PROBABILITY:
                return two_opt_mutation(route, self.distance_matrix, self.warehouse_idx)
            return swap_mutation(route, self.random)
        return route

    # --- Public Interface ---

    def step(self) -> Dict[str, Any]:
        """Runs one generation over the whole swarm and returns the new snapshot."""
        self.current_iteration += 1
        inertia = self.current_inertia()
        self._handle_global_stagnation()

        for particle in self.particles:
            cognitive_swaps = get_swap_sequence(particle.position, particle.personal_best)
            social_swaps = get_swap_sequence(particle.position, self.global_best)
            particle.velocity = self._combine_velocity(particle, cognitive_swaps, social_swaps, inertia)

            new_position = apply_swap_sequence(particle.position, particle.velocity, self.random)
            particle.position = self._mutate(new_position)

            particle.current_fitness = self.route_fitness(particle.position)
            particle.update_personal_best()

            if particle.current_fitness < self.global_best_fitness:
                self.global_best_fitness = particle.current_fitness
                self.global_best = list(particle.position)

            if particle.stagnation_counter > PARTICLE_STAGNATION_LIMIT:
                particle.position = swap_mutation(particle.position, self.random)
                particle.stagnation_counter = 0

        self.convergence_history.append(self.global_best_fitness)
        logger.debug("Iteration %d: best=%.4f inertia=%.3f",
                     self.current_iteration, self.global_best_fitness, inertia)
        return self.result()

    def result(self) -> Dict[str, Any]:
        """Deep-copied snapshot of the swarm, global best and history."""
        return {
            'global_best': list(self.global_best),
            'global_best_fitness': self.global_best_fitness,
            'iteration': len(self.convergence_history) - 1,
            'particles': [particle.to_dict() for particle in self.particles],
            'convergence_history': list(self.convergence_history),
        }

    def best_route(self) -> List[int]:
        """The global best as a closed tour starting and ending at the warehouse."""
        return [self.warehouse_idx, *self.global_best, self.warehouse_idx]

    def diversity(self) -> float:
        """
        Mean normalised Hamming distance over all particle pairs.

        Returns 0.0 for swarms of fewer than two particles or empty routes.
        """
        num_particles = len(self.particles)
        route_length = len(self.particles[0].position) if self.particles else 0
        if num_particles < 2 or route_length == 0:
            return 0.0

        total = 0.0
        for a in range(num_particles):
            pos_a = self.particles[a].position
            for b in range(a + 1, num_particles):
                pos_b = self.particles[b].position
                differences = sum(1 for x, y in zip(pos_a, pos_b) if x != y)
                total += differences / route_length

        pair_count = num_particles * (num_particles - 1) / 2
        return total / pair_count

    def add_point(self, point: Any) -> int:
        """
        Adds a delivery point to the live swarm.

        The point is appended, the distance matrix recomputed, and the new
        index inserted at a random position into every particle's position
        and personal best (same position for both) and into the global
        best; all affected fitness values are re-evaluated. A particle whose
        re-evaluated position beats its re-evaluated personal best adopts it
        as personal best (its stagnation counter is left as is), and the best
        personal best replaces the global best when shorter.

        Returns:
            The index of the new point.
        """
        new_point = as_point(point)
        if new_point.is_warehouse:
            logger.warning("Added point is flagged as warehouse; keeping warehouse at index %d "
                           "and routing the new point as a delivery.", self.warehouse_idx)
        self.points.append(new_point)
        self.distance_matrix = compute_distance_matrix(self.points)
        new_idx = len(self.points) - 1

        for particle in self.particles:
            insert_pos = int(self.random() * (len(particle.position) + 1))
            particle.position.insert(insert_pos, new_idx)
            particle.personal_best.insert(insert_pos, new_idx)
            particle.current_fitness = self.route_fitness(particle.position)
            particle.personal_best_fitness = self.route_fitness(particle.personal_best)
            if particle.current_fitness < particle.personal_best_fitness:
                particle.personal_best_fitness = particle.current_fitness
                particle.personal_best = list(particle.position)

        insert_pos = int(self.random() * (len(self.global_best) + 1))
        self.global_best.insert(insert_pos, new_idx)
        self.global_best_fitness = self.route_fitness(self.global_best)

        for particle in self.particles:
            if particle.personal_best_fitness < self.global_best_fitness:
                self.global_best_fitness = particle.personal_best_fitness
                self.global_best = list(particle.personal_best)

        self.stagnation_counter = 0
        self.last_best_fitness = self.global_best_fitness
        logger.info("Added point %d; global best re-evaluated to %.4f.", new_idx, self.global_best_fitness)
        return new_idx

    def __repr__(self):
        return (f"PSOEngine(points={len(self.points)}, swarm={len(self.particles)}, "
                f"iteration={self.current_iteration}, best={self.global_best_fitness:.4f})")
