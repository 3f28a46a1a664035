from .config import (
    FieldKind,
    FieldParams,
    FollowerParams,
    OptimizerParams,
    PlannerConfig,
    PrunerParams,
    load_config,
)
from .geometry import ORIGIN, Position
from .models import Obstacle, Path, PathPoint, RobotState, snapshot_obstacles
from .potential_field import (
    CosineBumpField,
    GaussianField,
    PotentialField,
    gradient_at,
    make_field,
    potential_at,
)
from .path_optimizer import OptimizerState, PathOptimizer, clean_path, optimize_path
from .path_pruner import prune_path
from .spline_utils import CatmullRomSpline, sample_spline
from .path_generator import PotentialPathPlanner, generate_path
from .path_follower import PathFollower, follow_step
from .field_grid import sample_field
from .path_recorder import PathRecorder
from .accuracy_utils import AccuracyCalculator
from .simulation import run_simulation

__all__ = [
    'FieldKind',
    'FieldParams',
    'FollowerParams',
    'OptimizerParams',
    'PlannerConfig',
    'PrunerParams',
    'load_config',
    'ORIGIN',
    'Position',
    'Obstacle',
    'Path',
    'PathPoint',
    'RobotState',
    'snapshot_obstacles',
    'CosineBumpField',
    'GaussianField',
    'PotentialField',
    'gradient_at',
    'make_field',
    'potential_at',
    'OptimizerState',
    'PathOptimizer',
    'clean_path',
    'optimize_path',
    'prune_path',
    'CatmullRomSpline',
    'sample_spline',
    'PotentialPathPlanner',
    'generate_path',
    'PathFollower',
    'follow_step',
    'sample_field',
    'PathRecorder',
    'AccuracyCalculator',
    'run_simulation',
]
