"""Synthetic MediaPipe-layout landmark builders for tests."""

import numpy as np

from rehab_coach.core.landmarks import LandmarkSet, MEDIAPIPE_LAYOUT


# Patient standing, facing the camera, arms hanging (normalized coords, y grows downwards)
STANDING = {
    "nose": (0.5, 0.15),
    "left_shoulder": (0.6, 0.3), "right_shoulder": (0.4, 0.3),
    "left_elbow": (0.62, 0.45), "right_elbow": (0.38, 0.45),
    "left_wrist": (0.63, 0.6), "right_wrist": (0.37, 0.6),
    "left_hip": (0.56, 0.6), "right_hip": (0.44, 0.6),
    "left_knee": (0.56, 0.75), "right_knee": (0.44, 0.75),
    "left_ankle": (0.56, 0.9), "right_ankle": (0.44, 0.9),
}

RIGHT_HAND_RAISED = {
    "right_elbow": (0.4, 0.18),
    "right_wrist": (0.4, 0.05),
}

ARMS_ABDUCTED = {
    "left_elbow": (0.7, 0.29), "left_wrist": (0.8, 0.28),
    "right_elbow": (0.3, 0.29), "right_wrist": (0.2, 0.28),
}

DEEP_SQUAT = {
    "left_hip": (0.36, 0.7), "left_knee": (0.56, 0.7), "left_ankle": (0.56, 0.9),
    "right_hip": (0.24, 0.7), "right_knee": (0.44, 0.7), "right_ankle": (0.44, 0.9),
}


def make_landmarks(*poses, visibility=None, **overrides) -> LandmarkSet:
    """
    Build a LandmarkSet from the standing pose plus overrides.

    Args:
        poses: Dicts of joint -> (x, y) applied in order over STANDING
        visibility: Dict of joint -> visibility (default 1.0 everywhere)
        overrides: joint=(x, y) keyword overrides applied last
    """
    data = np.zeros((len(MEDIAPIPE_LAYOUT), 4), dtype=float)
    data[:, 0:2] = 0.5
    data[:, 3] = 1.0

    points = dict(STANDING)
    for pose in poses:
        points.update(pose)
    points.update(overrides)

    for name, (x, y) in points.items():
        idx = MEDIAPIPE_LAYOUT[name]
        data[idx, 0] = x
        data[idx, 1] = y

    for name, value in (visibility or {}).items():
        data[MEDIAPIPE_LAYOUT[name], 3] = value

    return LandmarkSet(data, MEDIAPIPE_LAYOUT)
