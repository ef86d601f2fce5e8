from .exercises import EXERCISES, Side, UnknownExerciseError, get_exercise
from .pose_utils import Keypoint, Pose, angle_between, pose_from_keypoints
from .progress import (
    HttpProgressStore,
    InMemoryProgressStore,
    JsonFileProgressStore,
    ProgressStore,
    ProgressStoreError,
    QueuedProgressStore,
)
from .rep_logic import Phase, RepEvent, RepState, reset_rep_state, update_rep_state
from .scoring import ScoreResult, evaluate
from .session import ExerciseSession, TickResult
