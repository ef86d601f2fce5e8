# client/exercises.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple


class Side(str, Enum):
    LEFT = "left"
    RIGHT = "right"

    def joint(self, joint: str) -> str:
        """Anatomical joint name on this side, e.g. Side.LEFT.joint("knee") -> "left_knee"."""
        return f"{self.value}_{joint}"


# Left is tried first, then right
SIDE_PRIORITY: Tuple[Side, ...] = (Side.LEFT, Side.RIGHT)


class UnknownExerciseError(ValueError):
    """Raised when an exercise id has no entry in the catalog."""

    def __init__(self, exercise_id: str):
        self.exercise_id = exercise_id
        super().__init__(f"Unknown exercise id: {exercise_id!r}")


@dataclass(frozen=True)
class AngleRange:
    min: float
    max: float

    def __post_init__(self):
        if self.min <= 0:
            raise ValueError(f"AngleRange.min must be positive, got {self.min}")
        if self.min > self.max:
            raise ValueError(f"AngleRange.min ({self.min}) is above max ({self.max})")

    def contains(self, angle: float) -> bool:
        return self.min <= angle <= self.max


@dataclass(frozen=True)
class AngleSpec:
    joint_a: str
    vertex: str
    joint_c: str
    acceptable: AngleRange

    @property
    def joints(self) -> Tuple[str, str, str]:
        return (self.joint_a, self.vertex, self.joint_c)


@dataclass(frozen=True)
class ExerciseDefinition:
    id: str
    name: str
    angle_specs_by_side: Mapping[Side, AngleSpec]

    # Feedback phrases
    in_range_feedback: str
    below_range_feedback: str
    above_range_feedback: str
    body_part: str

    # Display metadata
    target_area: str = ""
    short_description: str = ""
    instructions: Tuple[str, ...] = field(default_factory=tuple)

    # Replaces the "Position your <body part>" phrase when set
    out_of_view_feedback: Optional[str] = None

    @property
    def low_confidence_feedback(self) -> str:
        if self.out_of_view_feedback:
            return self.out_of_view_feedback
        return f"Position your {self.body_part} in camera view"

    @property
    def acceptable(self) -> AngleRange:
        # Both sides share one logical range
        return self.angle_specs_by_side[SIDE_PRIORITY[0]].acceptable


def side_redundant(joint_a: str, vertex: str, joint_c: str,
                   min_angle: float, max_angle: float) -> Dict[Side, AngleSpec]:
    """Same logical angle defined once per body side."""
    acceptable = AngleRange(min_angle, max_angle)
    return {
        side: AngleSpec(
            joint_a=side.joint(joint_a),
            vertex=side.joint(vertex),
            joint_c=side.joint(joint_c),
            acceptable=acceptable,
        )
        for side in SIDE_PRIORITY
    }


# ----------------- Exercise catalog -----------------
EXERCISES: Dict[str, ExerciseDefinition] = {
    "knee-extension": ExerciseDefinition(
        id="knee-extension",
        name="Knee Extension",
        target_area="Knee Recovery",
        short_description="Strengthens quadriceps muscles to improve knee stability",
        instructions=(
            "Sit on a chair with your back straight and feet flat on the floor",
            "Slowly extend one leg straight out in front of you until it's parallel to the floor",
            "Hold for 3-5 seconds at full extension",
            "Slowly lower your leg back to the starting position",
            "Complete 10-15 repetitions, then switch to the other leg",
        ),
        # hip -> knee <- ankle, fully extended knee
        angle_specs_by_side=side_redundant("hip", "knee", "ankle", 160.0, 180.0),
        in_range_feedback="Good knee extension!",
        below_range_feedback="Extend your knee more",
        above_range_feedback="Don't hyperextend your knee",
        body_part="leg",
    ),
    "shoulder-flexion": ExerciseDefinition(
        id="shoulder-flexion",
        name="Shoulder Flexion",
        target_area="Shoulder Mobility",
        short_description="Improves range of motion in the shoulder joint",
        instructions=(
            "Stand or sit with your arm by your side and palm facing inward",
            "Slowly raise your arm forward and upward until it's pointing to the ceiling",
            "Hold the position for 2-3 seconds",
            "Slowly lower your arm back to the starting position",
            "Repeat 10-12 times for each arm",
        ),
        angle_specs_by_side=side_redundant("elbow", "shoulder", "hip", 160.0, 180.0),
        in_range_feedback="Great shoulder position!",
        below_range_feedback="Raise your arm higher",
        above_range_feedback="Don't overextend your shoulder",
        body_part="arm",
    ),
    "hip-bridge": ExerciseDefinition(
        id="hip-bridge",
        name="Hip Bridge",
        target_area="Lower Back & Hip",
        short_description="Strengthens core, glutes, and lower back muscles",
        instructions=(
            "Lie on your back with knees bent and feet flat on the floor",
            "Place your arms at your sides with palms down",
            "Squeeze your glutes and lift your hips toward the ceiling",
            "Create a straight line from shoulders to knees",
            "Hold for 3-5 seconds at the top",
            "Lower your hips back to the starting position",
            "Repeat for 10-15 repetitions",
        ),
        angle_specs_by_side=side_redundant("shoulder", "hip", "knee", 160.0, 180.0),
        in_range_feedback="Perfect hip position!",
        below_range_feedback="Raise your hips higher",
        above_range_feedback="Lower your hips slightly",
        body_part="body",
        out_of_view_feedback="Position yourself in camera view",
    ),
    "ankle-dorsiflexion": ExerciseDefinition(
        id="ankle-dorsiflexion",
        name="Ankle Dorsiflexion",
        target_area="Ankle Mobility",
        short_description="Improves ankle flexibility and strengthens shin muscles",
        instructions=(
            "Sit on a chair with your feet flat on the floor",
            "Keeping your heel on the ground, lift your forefoot and toes upward",
            "Hold the position for 3-5 seconds",
            "Slowly lower your foot back to the starting position",
            "Repeat 10-15 times for each foot",
        ),
        angle_specs_by_side=side_redundant("knee", "ankle", "foot_index", 80.0, 100.0),
        in_range_feedback="Good ankle flexion!",
        below_range_feedback="Flex your ankle more",
        above_range_feedback="Reduce your ankle flexion slightly",
        body_part="foot",
    ),
}


def get_exercise(exercise_id: str) -> ExerciseDefinition:
    try:
        return EXERCISES[exercise_id]
    except KeyError:
        raise UnknownExerciseError(exercise_id) from None
