import pytest

from potential_path_planner.config import OptimizerParams
from potential_path_planner.geometry import Position
from potential_path_planner.models import Obstacle, Path, PathPoint
from potential_path_planner.path_generator import seed_path
from potential_path_planner.path_optimizer import (
    OptimizerState,
    PathOptimizer,
    clean_path,
    optimize_path,
)


def _line(n, spacing=1.0):
    return Path.from_xy([(i * spacing, 0.0) for i in range(n)], step_distance=spacing)


class TestCleanPath:
    def test_keeps_evenly_spaced_points(self):
        path = _line(11)
        clean_path(path, 1.0)
        assert len(path) == 11

    def test_merges_clumped_points(self):
        path = Path.from_xy([(0, 0), (1, 0), (1.1, 0), (1.2, 0), (2.5, 0), (4, 0)])
        clean_path(path, 1.0)
        xs = [p.x for p in path]
        assert xs == [0, 1, 2.5, 4]

    def test_never_removes_endpoints(self):
        path = Path.from_xy([(0, 0), (0.01, 0), (0.02, 0), (0.03, 0), (0.04, 0)])
        clean_path(path, 1.0, min_points=2)
        assert len(path) == 2
        assert path.start.x == 0.0
        assert path.end.x == 0.04

    @pytest.mark.parametrize("min_points", [2, 3, 5])
    def test_respects_minimum_point_count(self, min_points):
        path = Path.from_xy([(0, 0)] * 8 + [(0.1, 0)])
        clean_path(path, 1.0, min_points=min_points)
        assert len(path) == min_points
        assert path.end.x == 0.1

    def test_zero_step_is_a_no_op(self):
        path = Path.from_xy([(0, 0), (0, 0), (0, 0)])
        clean_path(path, 0.0)
        assert len(path) == 3


def test_zero_obstacles_converge_immediately():
    path = seed_path(Position(0.0, 0.0), Position(10.0, 0.0), 10)
    optimizer = PathOptimizer()
    optimizer.optimize(path, [])

    assert optimizer.state is OptimizerState.CONVERGED
    assert optimizer.last_result.iterations == 0
    assert [p.x for p in path] == pytest.approx([float(i) for i in range(11)])
    assert all(p.height == 0.0 for p in path)


def test_relaxation_clears_unsafe_region():
    obstacle = Obstacle.at(5.0, 0.5, 1.0)
    path = seed_path(Position(0.0, 0.0), Position(10.0, 0.0), 10, [obstacle])
    optimizer = PathOptimizer()
    optimizer.optimize(path, [obstacle])

    assert optimizer.last_result.converged
    assert optimizer.last_result.iterations <= optimizer.params.max_iterations
    for idx in path.interior_indices():
        p = path[idx]
        assert obstacle.distance_to(p.x, p.y) >= obstacle.radius + optimizer.params.safety_margin
        assert p.height == 0.0
    assert (path.start.x, path.start.y) == (0.0, 0.0)
    assert (path.end.x, path.end.y) == (10.0, 0.0)


def test_second_call_is_idempotent():
    obstacle = Obstacle.at(4.0, -0.3, 0.8)
    path = seed_path(Position(0.0, 0.0), Position(8.0, 0.0), 8, [obstacle])
    optimize_path(path, [obstacle])
    before = path.copy()

    optimizer = PathOptimizer()
    optimizer.optimize(path, [obstacle])

    assert optimizer.last_result.iterations == 0
    assert [(p.x, p.y) for p in path] == [(p.x, p.y) for p in before]
    assert all(p.height == 0.0 for p in path)


@pytest.mark.parametrize("budget", [1, 7, 40])
def test_loop_is_bounded(budget, caplog):
    obstacle = Obstacle.at(5.0, 0.1, 1.5)
    path = seed_path(Position(0.0, 0.0), Position(10.0, 0.0), 20, [obstacle])
    optimizer = PathOptimizer(OptimizerParams(max_iterations=budget))
    optimizer.optimize(path, [obstacle])

    assert optimizer.state is OptimizerState.EXHAUSTED
    assert optimizer.last_result.iterations == budget
    assert "did not converge" in caplog.text
    assert all(p.height == 0.0 for p in path)


def test_fallback_pushes_away_from_nearest_obstacle():
    obstacle = Obstacle.at(5.0, 0.2, 1.0)
    path = seed_path(Position(0.0, 0.0), Position(10.0, 0.0), 10, [obstacle])
    before = obstacle.distance_to(path[5].x, path[5].y)

    optimizer = PathOptimizer(OptimizerParams(max_iterations=1, fallback_push_fraction=0.25))
    optimizer.optimize(path, [obstacle])

    after = obstacle.distance_to(path[5].x, path[5].y)
    # one relaxation step plus the fallback push
    assert after == pytest.approx(before + 0.05 + 0.25)


def test_point_on_obstacle_center_escapes_sideways():
    obstacle = Obstacle.at(2.0, 0.0, 0.5)
    path = Path([PathPoint(0.0, 0.0), PathPoint(2.0, 0.0), PathPoint(4.0, 0.0)], step_distance=2.0)
    optimizer = PathOptimizer()
    optimizer.optimize(path, [obstacle])

    assert abs(path[1].y) > 0.0
    assert obstacle.distance_to(path[1].x, path[1].y) >= obstacle.radius + optimizer.params.safety_margin


def test_two_point_path_is_left_alone():
    path = Path.from_xy([(0, 0), (5, 0)])
    optimize_path(path, [Obstacle.at(2.5, 0.0, 1.0)])
    assert [(p.x, p.y) for p in path] == [(0.0, 0.0), (5.0, 0.0)]
