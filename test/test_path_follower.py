import logging

import numpy as np
import pytest

from potential_path_planner.config import FollowerParams
from potential_path_planner.geometry import Position
from potential_path_planner.models import Path, RobotState
from potential_path_planner.path_follower import PathFollower, follow_step, integrate
from potential_path_planner.spline_utils import CatmullRomSpline


@pytest.fixture
def curve():
    return CatmullRomSpline(Path.from_xy([(float(i), 0.0) for i in range(11)]))


@pytest.fixture
def state(curve):
    robot = RobotState(position=Position(0.0, 0.0), target_speed=2.0)
    robot.start_following(curve)
    return robot


def test_control_runs_on_accumulated_time(state):
    follower = PathFollower()

    first = follower.follow_step(state, 0.01)
    np.testing.assert_array_equal(first, [0.0, 0.0])
    assert state.path_progress == 0.0

    second = follower.follow_step(state, 0.01)
    assert np.linalg.norm(second) == pytest.approx(2.0)
    assert state.path_progress > 0.0
    assert state.control_timer == 0.0


def test_small_ticks_accumulate(state):
    follower = PathFollower()
    for _ in range(3):
        follower.follow_step(state, 0.005)
    assert state.path_progress == 0.0

    follower.follow_step(state, 0.005)
    assert state.path_progress > 0.0


def test_velocity_is_held_between_control_steps(state):
    follower = PathFollower()
    follower.follow_step(state, 0.02)
    progress = state.path_progress
    held = follower.follow_step(state, 0.01)

    assert state.path_progress == progress
    np.testing.assert_allclose(held, [2.0, 0.0])


def test_each_control_step_covers_speed_times_interval(state, curve):
    follower = PathFollower()
    previous = curve.evaluate(state.path_progress)
    for _ in range(20):
        before = state.path_progress
        follower.follow_step(state, 0.02)
        assert state.path_progress > before
        assert state.speed == pytest.approx(2.0)

        current = curve.evaluate(state.path_progress)
        assert current.distance_to(previous) == pytest.approx(0.04, abs=1e-6)
        previous = current


def test_reaches_end_and_stops(state, curve, caplog):
    caplog.set_level(logging.INFO)
    follower = PathFollower()

    ticks = 0
    while state.following_path and ticks < 1200:
        follower.tick(state, 0.01)
        ticks += 1

    assert not state.following_path
    assert state.path_progress == 1.0
    np.testing.assert_array_equal(state.velocity, [0.0, 0.0])
    assert state.position.distance_to(curve.evaluate(1.0)) < 0.1
    assert "Path complete" in caplog.text
    assert follower.exhausted_searches == 0


def test_velocity_is_kept_for_one_interval_after_the_end(curve):
    state = RobotState(position=Position(9.99, 0.0), target_speed=2.0)
    state.start_following(curve)
    state.path_progress = 0.999
    follower = PathFollower()

    follower.follow_step(state, 0.02)
    assert state.path_progress == 1.0
    assert state.following_path
    assert state.speed == pytest.approx(2.0)

    follower.follow_step(state, 0.02)
    assert not state.following_path
    assert state.speed == 0.0


def test_negative_dt_rejected(state):
    with pytest.raises(ValueError):
        PathFollower().follow_step(state, -0.01)
    with pytest.raises(ValueError):
        integrate(state, float("nan"))


def test_idle_robot_has_zero_velocity():
    robot = RobotState(velocity=np.array([1.0, 1.0]))
    velocity = follow_step(robot, 0.05)
    np.testing.assert_array_equal(velocity, [0.0, 0.0])
    np.testing.assert_array_equal(robot.velocity, [0.0, 0.0])


def test_zero_speed_still_advances_progress(curve):
    robot = RobotState(target_speed=0.0)
    robot.start_following(curve)
    follow_step(robot, 0.02)

    assert robot.path_progress == pytest.approx(0.001)
    assert robot.speed == 0.0


def test_exhausted_search_is_reported(state, caplog):
    params = FollowerParams(search_increment=1e-5, max_search_iterations=2)
    follower = PathFollower(params)
    follower.follow_step(state, 0.02)

    assert follower.exhausted_searches == 1
    assert state.path_progress == pytest.approx(2e-5)
    assert "step limit" in caplog.text


def test_tracking_gain_steers_back_toward_curve(curve):
    robot = RobotState(position=Position(0.0, 1.0), target_speed=2.0)
    robot.start_following(curve)
    follower = PathFollower(FollowerParams(tracking_gain=1.0))
    velocity = follower.follow_step(robot, 0.02)

    assert velocity[1] < 0.0
    assert np.linalg.norm(velocity) == pytest.approx(2.0)


def test_integrate_moves_by_velocity(state):
    state.velocity = np.array([2.0, -1.0])
    position = integrate(state, 0.5)
    assert position == Position(1.0, -0.5, 0.0)
    assert state.position == position
