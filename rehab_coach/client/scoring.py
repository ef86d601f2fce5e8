# client/scoring.py

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .exercises import SIDE_PRIORITY, AngleSpec, ExerciseDefinition, Side
from .pose_utils import Pose, angle_between, is_finite_point

# A joint must be strictly above this to be used
CONFIDENCE_THRESHOLD = 0.5

IN_RANGE_ACCURACY = 90.0
OUT_OF_RANGE_CEILING = 70.0
LOW_CONFIDENCE_ACCURACY = 10.0


@dataclass(frozen=True)
class ScoreResult:
    accuracy: float
    feedback: str
    engaged: bool
    side: Optional[Side] = None
    angle: Optional[float] = None


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def select_side(pose: Pose, exercise: ExerciseDefinition) -> Optional[Tuple[Side, AngleSpec]]:
    """
    First side (left, then right) whose three joints are all present
    with confidence > CONFIDENCE_THRESHOLD and finite coordinates.
    """
    for side in SIDE_PRIORITY:
        spec = exercise.angle_specs_by_side.get(side)
        if spec is None:
            continue
        usable = True
        for joint in spec.joints:
            kp = pose.get(joint)
            if kp is None or not kp.confidence > CONFIDENCE_THRESHOLD or not is_finite_point(kp):
                usable = False
                break
        if usable:
            return side, spec
    return None


def score_angle(angle: float, exercise: ExerciseDefinition, spec: AngleSpec) -> Tuple[float, str, bool]:
    """Map a joint angle to (accuracy, feedback, engaged) against the spec's range."""
    target = spec.acceptable

    if target.contains(angle):
        # Flat plateau inside the range
        return IN_RANGE_ACCURACY, exercise.in_range_feedback, True

    if angle < target.min:
        accuracy = OUT_OF_RANGE_CEILING * (angle / target.min)
        return _clamp(accuracy, 0.0, OUT_OF_RANGE_CEILING), exercise.below_range_feedback, False

    accuracy = OUT_OF_RANGE_CEILING * (2.0 - angle / target.max)
    return _clamp(accuracy, 0.0, OUT_OF_RANGE_CEILING), exercise.above_range_feedback, False


def low_confidence_result(exercise: ExerciseDefinition) -> ScoreResult:
    return ScoreResult(
        accuracy=LOW_CONFIDENCE_ACCURACY,
        feedback=exercise.low_confidence_feedback,
        engaged=False,
    )


def evaluate(pose: Pose, exercise: ExerciseDefinition) -> ScoreResult:
    """
    Score one pose observation for the given exercise.

    Never raises: a missing or low-confidence body part is an expected
    outcome and yields the low-confidence result (accuracy 10, not engaged).
    """
    selected = select_side(pose, exercise)
    if selected is None:
        return low_confidence_result(exercise)

    side, spec = selected
    angle = angle_between(
        pose[spec.joint_a].xy,
        pose[spec.vertex].xy,
        pose[spec.joint_c].xy,
    )
    if not math.isfinite(angle):
        return low_confidence_result(exercise)

    accuracy, feedback, engaged = score_angle(angle, exercise, spec)
    return ScoreResult(
        accuracy=float(accuracy),
        feedback=feedback,
        engaged=engaged,
        side=side,
        angle=angle,
    )
