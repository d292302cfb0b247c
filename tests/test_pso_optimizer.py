import math

import pytest

from route_pso.algorithm.pso_optimizer import (
    FINAL_INERTIA,
    PSOEngine,
    SwapOperation,
    SwapVelocity,
    apply_swap_sequence,
    generate_random_swap_sequence,
    get_swap_sequence,
)
from route_pso.core.config import PSOConfigError
from route_pso.core.distance_calculator import calculate_route_fitness, route_length_from_points
from route_pso.core.problem_utils import Point, is_valid_route
from route_pso.core.random_source import LCGRandom
from route_pso.data.data_generator import generate_points


def _always(value=0.0):
    return lambda: value


def _config(**overrides):
    config = {
        'swarm_size': 10,
        'iterations': 50,
        'inertia_weight': 0.7,
        'cognitive_coeff': 1.5,
        'social_coeff': 1.5,
        'velocity_clamp': 5,
        'random_seed': 42,
    }
    config.update(overrides)
    return config


# --- Swap sequences ---

def test_swap_sequence_reconstructs_target():
    source = [5, 2, 7, 1, 3, 6, 4]
    target = [1, 2, 3, 4, 5, 6, 7]
    swaps = get_swap_sequence(source, target)
    assert len(swaps) <= len(source) - 1
    assert all(swap.weight == 1.0 for swap in swaps)
    assert apply_swap_sequence(source, swaps, _always(0.0)) == target


def test_swap_sequence_of_identical_routes_is_empty():
    assert get_swap_sequence([3, 1, 2], [3, 1, 2]) == []


def test_apply_swap_sequence_respects_weights():
    swaps = [SwapOperation(0, 1, 0.5)]
    assert apply_swap_sequence([1, 2, 3], swaps, _always(0.4)) == [2, 1, 3]
    assert apply_swap_sequence([1, 2, 3], swaps, _always(0.6)) == [1, 2, 3]


def test_apply_swap_sequence_skips_out_of_range_swaps():
    swaps = [SwapOperation(0, 7, 2.0)]
    assert apply_swap_sequence([1, 2, 3], swaps, _always(0.0)) == [1, 2, 3]


def test_random_swap_sequence_drops_self_swaps():
    swaps = generate_random_swap_sequence(1, 3, LCGRandom(3))
    assert swaps == []
    swaps = generate_random_swap_sequence(10, 5, LCGRandom(3))
    assert len(swaps) <= 5
    assert all(swap.i != swap.j and 0 <= swap.weight < 1 for swap in swaps)


def test_swap_velocity_merges_by_key_and_keeps_heaviest():
    velocity = SwapVelocity(capacity=2)
    velocity.merge([SwapOperation(0, 1, 1.0), SwapOperation(2, 3, 1.0)], 0.5)
    velocity.merge([SwapOperation(0, 1, 1.0), SwapOperation(4, 5, 1.0)], 0.2)
    velocity.merge([SwapOperation(6, 7, 1.0)], 0.6)
    top = velocity.top()
    assert len(velocity) == 4
    assert [(swap.i, swap.j) for swap in top] == [(0, 1), (6, 7)]
    assert top[0].weight == pytest.approx(0.7)


def test_swap_velocity_ties_keep_insertion_order():
    velocity = SwapVelocity(capacity=3)
    velocity.merge([SwapOperation(0, 1, 1.0), SwapOperation(1, 2, 1.0), SwapOperation(2, 3, 1.0),
                    SwapOperation(3, 4, 1.0)], 1.0)
    assert [(swap.i, swap.j) for swap in velocity.top()] == [(0, 1), (1, 2), (2, 3)]


# --- Engine construction ---

def test_engine_initial_state(random_points):
    engine = PSOEngine(random_points, _config())
    snapshot = engine.result()
    assert len(snapshot['particles']) == 10
    assert snapshot['iteration'] == 0
    assert snapshot['convergence_history'] == [snapshot['global_best_fitness']]
    assert snapshot['global_best_fitness'] == min(p['current_fitness'] for p in snapshot['particles'])
    for particle in snapshot['particles']:
        assert is_valid_route(particle['position'], len(random_points), 0)
        assert particle['personal_best'] == particle['position']
        assert len(particle['velocity']) <= 3


def test_engine_rejects_invalid_configuration(random_points):
    with pytest.raises(PSOConfigError):
        PSOEngine(random_points, _config(swarm_size=0))
    with pytest.raises(PSOConfigError):
        PSOEngine(random_points, _config(iterations=0))
    with pytest.raises(PSOConfigError):
        PSOEngine(random_points, _config(velocity_clamp=0))
    with pytest.raises(PSOConfigError):
        PSOEngine([], _config())


def test_engine_accepts_camel_case_config(random_points):
    engine = PSOEngine(random_points, {'swarmSize': 4, 'iterations': 5, 'randomSeed': 1,
                                       'use2OptMutation': False})
    assert engine.config['swarm_size'] == 4
    assert engine.config['use_2opt_mutation'] is False


def test_engine_without_warehouse_flag_uses_index_zero():
    points = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
    engine = PSOEngine(points, _config(swarm_size=3))
    assert engine.warehouse_idx == 0
    assert engine.best_route()[0] == 0 and engine.best_route()[-1] == 0


# --- Stepping ---

def test_positions_stay_permutations_and_history_is_monotone(random_points):
    engine = PSOEngine(random_points, _config(mutation_rate=0.3, stagnation_threshold=3))
    for _ in range(40):
        snapshot = engine.step()
        for particle in snapshot['particles']:
            assert is_valid_route(particle['position'], len(random_points), 0)
            assert is_valid_route(particle['personal_best'], len(random_points), 0)
            assert snapshot['global_best_fitness'] <= particle['current_fitness'] + 1e-9
            assert len(particle['velocity']) <= 5
            assert particle['stagnation_counter'] <= 10
    history = snapshot['convergence_history']
    assert len(history) == 41
    assert all(later <= earlier for earlier, later in zip(history, history[1:]))


def test_same_seed_gives_identical_runs(random_points):
    engine_a = PSOEngine(random_points, _config(random_seed=7))
    engine_b = PSOEngine(random_points, _config(random_seed=7))
    for _ in range(30):
        snapshot_a = engine_a.step()
        snapshot_b = engine_b.step()
    assert snapshot_a['convergence_history'] == snapshot_b['convergence_history']
    assert snapshot_a['global_best'] == snapshot_b['global_best']
    assert snapshot_a['particles'] == snapshot_b['particles']


def test_square_converges_to_perimeter_tour(square_points):
    engine = PSOEngine(square_points, _config(swarm_size=30, iterations=200, random_seed=3))
    for _ in range(200):
        snapshot = engine.step()
    assert snapshot['global_best_fitness'] == pytest.approx(300 + 100 * math.sqrt(2), abs=1e-6)
    assert snapshot['iteration'] == 200


def test_single_particle_single_iteration(square_points):
    engine = PSOEngine(square_points, _config(swarm_size=1, iterations=1))
    snapshot = engine.step()
    assert len(snapshot['convergence_history']) == 2
    assert snapshot['iteration'] == 1


def test_engine_keeps_stepping_past_configured_iterations(square_points):
    engine = PSOEngine(square_points, _config(swarm_size=3, iterations=2))
    for _ in range(5):
        snapshot = engine.step()
    assert snapshot['iteration'] == 5


def test_result_is_a_deep_copy(random_points):
    engine = PSOEngine(random_points, _config())
    snapshot = engine.step()
    snapshot['global_best'].clear()
    snapshot['particles'][0]['position'].clear()
    snapshot['convergence_history'].append(-1.0)
    fresh = engine.result()
    assert len(fresh['global_best']) == len(random_points) - 1
    assert len(fresh['particles'][0]['position']) == len(random_points) - 1
    assert fresh['convergence_history'][-1] != -1.0
    assert fresh['iteration'] == 1


def test_global_stagnation_reinitialises_leading_particles(caplog):
    points = [Point(0, 0, is_warehouse=True), Point(1, 0), Point(0, 1)]
    engine = PSOEngine(points, _config(swarm_size=10, stagnation_threshold=0))
    with caplog.at_level("INFO", logger="route_pso.algorithm.pso_optimizer"):
        engine.step()
    assert "reinitialising 3 particles" in caplog.text
    assert engine.stagnation_counter == 0


def test_adaptive_inertia_decays_to_floor(random_points):
    engine = PSOEngine(random_points, _config(inertia_weight=0.9, iterations=10))
    assert engine.current_inertia() == pytest.approx(0.9)
    engine.current_iteration = 5
    assert engine.current_inertia() == pytest.approx(0.65)
    engine.current_iteration = 10
    assert engine.current_inertia() == pytest.approx(FINAL_INERTIA)


def test_constant_inertia_when_not_adaptive(random_points):
    engine = PSOEngine(random_points, _config(inertia_weight=0.9, adaptive_inertia=False))
    engine.current_iteration = 25
    assert engine.current_inertia() == pytest.approx(0.9)


# --- Diversity ---

def test_diversity_is_zero_for_single_particle(random_points):
    engine = PSOEngine(random_points, _config(swarm_size=1))
    assert engine.diversity() == 0.0


def test_diversity_is_zero_for_identical_swarm():
    points = [Point(0, 0, is_warehouse=True), Point(5, 5)]
    engine = PSOEngine(points, _config(swarm_size=6))
    assert engine.diversity() == 0.0


def test_diversity_in_unit_interval(random_points):
    engine = PSOEngine(random_points, _config(swarm_size=15))
    assert 0.0 < engine.diversity() <= 1.0
    for particle in engine.particles:
        particle.position = list(engine.particles[0].position)
    assert engine.diversity() == 0.0


# --- Point insertion ---

def test_add_point_extends_every_route():
    points = [Point(50, 50, is_warehouse=True), Point(10, 10), Point(90, 20)]
    engine = PSOEngine(points, _config(swarm_size=8))
    for _ in range(3):
        engine.step()
    lengths_before = [len(p.position) for p in engine.particles]

    new_idx = engine.add_point(Point(70, 80))

    assert new_idx == 3
    assert engine.distance_matrix.shape == (4, 4)
    for particle, before in zip(engine.particles, lengths_before):
        assert len(particle.position) == before + 1
        assert is_valid_route(particle.position, 4, 0)
        assert is_valid_route(particle.personal_best, 4, 0)
        assert particle.current_fitness == pytest.approx(
            route_length_from_points(particle.position, engine.points, 0))
        assert particle.personal_best_fitness == pytest.approx(
            calculate_route_fitness(particle.personal_best, engine.distance_matrix, 0))
    assert is_valid_route(engine.global_best, 4, 0)
    assert engine.global_best_fitness == pytest.approx(engine.route_fitness(engine.global_best))
    assert engine.global_best_fitness <= min(p.personal_best_fitness for p in engine.particles) + 1e-9
    assert engine.global_best_fitness <= min(p.current_fitness for p in engine.particles) + 1e-9
    for particle in engine.particles:
        assert particle.personal_best_fitness <= particle.current_fitness + 1e-9

    snapshot = engine.step()
    for particle in snapshot['particles']:
        assert is_valid_route(particle['position'], 4, 0)


@pytest.mark.parametrize("seed", range(20))
def test_add_point_keeps_bests_ordered_after_search(seed):
    engine = PSOEngine(generate_points(6, seed=seed), _config(swarm_size=20, random_seed=seed))
    for _ in range(5):
        engine.step()

    engine.add_point(Point(37.0, 81.0))

    for particle in engine.particles:
        assert particle.personal_best_fitness <= particle.current_fitness + 1e-9
        assert particle.personal_best_fitness == pytest.approx(engine.route_fitness(particle.personal_best))
        assert engine.global_best_fitness <= particle.current_fitness + 1e-9
        assert engine.global_best_fitness <= particle.personal_best_fitness + 1e-9
    assert engine.global_best_fitness == pytest.approx(engine.route_fitness(engine.global_best))


def test_add_point_accepts_dicts(square_points):
    engine = PSOEngine(square_points, _config(swarm_size=2))
    engine.add_point({'x': 25.0, 'y': 75.0})
    assert engine.points[-1] == Point(25.0, 75.0)
    assert all(5 in particle.position for particle in engine.particles)
