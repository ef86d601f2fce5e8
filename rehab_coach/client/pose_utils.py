# client/pose_utils.py

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Sequence, Union

import numpy as np


@dataclass(frozen=True)
class Keypoint:
    name: str
    x: float
    y: float
    confidence: float = 0.0

    @property
    def xy(self):
        return (self.x, self.y)


# One observation instant, keyed by joint name
Pose = Dict[str, Keypoint]

Point = Union[Sequence[float], np.ndarray]


def angle_between(a: Point, b: Point, c: Point) -> float:
    """
    Returns the angle (in degrees) at point b formed by points a-b-c.

    Always in [0, 180]: the long way round is folded back (360 - angle).
    Coincident or collinear points are not an error, they give 0 or 180.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    c = np.asarray(c, dtype=float)

    radians = np.arctan2(c[1] - b[1], c[0] - b[0]) - np.arctan2(a[1] - b[1], a[0] - b[0])
    angle = abs(np.degrees(radians))

    if angle > 180.0:
        angle = 360.0 - angle
    return float(angle)


def pose_from_keypoints(keypoints: Iterable[Mapping[str, Any]]) -> Pose:
    """
    Build a Pose from the list-of-dicts shape pose estimators emit:
      {"name": "left_knee", "x": 312.0, "y": 240.5, "score": 0.93}

    "confidence" is accepted in place of "score". Entries without a name
    are dropped; a repeated name keeps the last entry.
    """
    pose: Pose = {}
    for kp in keypoints:
        name = kp.get("name")
        if not name:
            continue
        score = kp.get("confidence", kp.get("score"))
        pose[name] = Keypoint(
            name=name,
            x=float(kp.get("x", 0.0)),
            y=float(kp.get("y", 0.0)),
            confidence=float(score) if score is not None else 0.0,
        )
    return pose


def is_finite_point(kp: Keypoint) -> bool:
    return math.isfinite(kp.x) and math.isfinite(kp.y)
