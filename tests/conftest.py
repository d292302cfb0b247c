import pytest

from route_pso.core.problem_utils import Point


@pytest.fixture
def square_points():
    """Warehouse at the centre of a 100 x 100 square, deliveries at its corners."""
    return [
        Point(50.0, 50.0, is_warehouse=True),
        Point(0.0, 0.0),
        Point(100.0, 0.0),
        Point(100.0, 100.0),
        Point(0.0, 100.0),
    ]


@pytest.fixture
def random_points():
    from route_pso.data.data_generator import generate_points
    return generate_points(12, seed=123)
