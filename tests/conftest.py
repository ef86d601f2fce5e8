import math

import pytest

from rehab_coach.client.pose_utils import Keypoint
from rehab_coach.client.progress import InMemoryProgressStore


def make_pose(joint_a, vertex, joint_c, angle_deg, confidence=0.9, length=100.0, origin=(200.0, 200.0)):
    """Three keypoints whose angle at vertex is angle_deg."""
    ox, oy = origin
    theta = math.radians(angle_deg)
    return {
        joint_a: Keypoint(joint_a, ox + length, oy, confidence),
        vertex: Keypoint(vertex, ox, oy, confidence),
        joint_c: Keypoint(joint_c, ox + length * math.cos(theta), oy + length * math.sin(theta), confidence),
    }


def knee_pose(angle_deg, confidence=0.9, side="left"):
    return make_pose(f"{side}_hip", f"{side}_knee", f"{side}_ankle", angle_deg, confidence)


@pytest.fixture
def store():
    return InMemoryProgressStore()
