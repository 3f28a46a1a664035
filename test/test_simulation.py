import numpy as np
import pytest

from potential_path_planner.accuracy_utils import AccuracyCalculator
from potential_path_planner.field_grid import FIELD_LENGTH, FIELD_WIDTH, sample_field
from potential_path_planner.geometry import Position
from potential_path_planner.models import Obstacle
from potential_path_planner.path_recorder import PathRecorder
from potential_path_planner.simulation import main, run_simulation
from potential_path_planner.spline_utils import CatmullRomSpline


def test_straight_run_arrives():
    result = run_simulation(Position(0.0, 0.0), Position(10.0, 0.0))

    assert result.arrived
    assert result.final_position.distance_to(Position(10.0, 0.0)) < 0.1
    assert result.accuracy > 95.0
    assert result.elapsed == pytest.approx(5.0, abs=0.1)
    assert result.max_curvature == pytest.approx(0.0)


def test_run_around_obstacle():
    obstacle = Obstacle.at(8.0, 4.5, 1.0)
    result = run_simulation(Position(2.0, 2.0), Position(14.0, 6.0), [obstacle])

    assert result.arrived
    assert result.final_position.distance_to(Position(14.0, 6.0)) < 0.15
    assert result.accuracy > 90.0
    assert len(result.trace) > 10
    margin = 0.3
    for idx in result.path.interior_indices():
        p = result.path[idx]
        assert obstacle.distance_to(p.x, p.y) >= obstacle.radius + margin


def test_run_times_out():
    result = run_simulation(Position(0.0, 0.0), Position(10.0, 0.0), max_time=1.0)
    assert not result.arrived
    assert result.ticks == 100


def test_bad_dt_rejected():
    with pytest.raises(ValueError):
        run_simulation(Position(0.0, 0.0), Position(1.0, 0.0), dt=0.0)


def test_cli(capsys):
    code = main(["--start", "0", "0", "--target", "6", "0", "--segments", "6", "--obstacle", "3", "0.6", "0.5"])
    assert code == 0
    assert "Arrived" in capsys.readouterr().out


class TestFieldGrid:
    def test_grid_values(self):
        obstacle = Obstacle.at(5.0, 4.0, 1.0)
        grid = sample_field([obstacle], resolution=1.0, bounds=(0.0, 0.0, 10.0, 8.0))

        assert grid.values.shape == (9, 11)
        assert grid.value_at_index(5, 4) == pytest.approx(obstacle.field_scale / 2.0)
        assert grid.peak == pytest.approx(obstacle.field_scale / 2.0)
        assert grid.value_at_index(0, 0) == 0.0

    def test_default_bounds_cover_field(self):
        grid = sample_field([])
        assert grid.xs[-1] == pytest.approx(FIELD_LENGTH)
        assert grid.ys[-1] == pytest.approx(FIELD_WIDTH)
        assert grid.peak == 0.0

    def test_empty_bounds_rejected(self):
        with pytest.raises(ValueError):
            sample_field([], bounds=(1.0, 0.0, 1.0, 5.0))


class TestPathRecorder:
    def test_records_after_interval(self):
        recorder = PathRecorder(record_interval=0.1)
        assert recorder.record(Position(0.0, 0.0)) == 1
        assert recorder.record(Position(0.05, 0.0)) == 1
        assert recorder.record(Position(0.1, 0.0)) == 2
        assert recorder.get_path().shape == (2, 2)

    def test_reset(self):
        recorder = PathRecorder()
        recorder.record(Position(1.0, 1.0))
        recorder.reset()
        assert recorder.get_path().shape == (0, 2)


class TestAccuracyCalculator:
    def test_trace_on_curve_is_perfect(self):
        curve = CatmullRomSpline([(0.0, 0.0), (10.0, 0.0)])
        trace = np.array([[x, 0.0] for x in np.linspace(0.0, 10.0, 1000)])
        assert AccuracyCalculator.calculate_accuracy(trace, curve) == pytest.approx(100.0)

    def test_offset_trace(self):
        curve = CatmullRomSpline([(0.0, 0.0), (10.0, 0.0)])
        trace = np.array([[float(x), 0.1] for x in range(11)])
        assert AccuracyCalculator.mean_deviation(trace, curve) == pytest.approx(0.1, abs=1e-3)
        assert AccuracyCalculator.calculate_accuracy(trace, curve) == pytest.approx(90.0, abs=0.1)

    def test_short_trace(self):
        curve = CatmullRomSpline([(0.0, 0.0), (10.0, 0.0)])
        assert AccuracyCalculator.calculate_accuracy(np.zeros((1, 2)), curve) == 100.0
