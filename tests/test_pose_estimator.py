"""
Tests for MoveNet output handling (no model weights required)
"""

import numpy as np
import pytest

from rehab_coach.core.landmarks import MOVENET_LAYOUT
from rehab_coach.core.pose_estimator import PoseEstimator


def _person(score, knee_y=0.7):
    row = np.zeros(56, dtype=np.float32)
    keypoints = row[:51].reshape((17, 3))
    keypoints[:, 2] = 0.9
    keypoints[MOVENET_LAYOUT["left_knee"]] = [knee_y, 0.4, 0.9]
    row[55] = score
    return row


def test_missing_model():
    with pytest.raises(FileNotFoundError):
        PoseEstimator("/nonexistent/movenet.onnx")


def test_selects_most_confident_person():
    persons = np.zeros((6, 56), dtype=np.float32)
    persons[0] = _person(0.5, knee_y=0.1)
    persons[3] = _person(0.8, knee_y=0.7)
    landmarks = PoseEstimator.select_primary(persons)
    assert landmarks is not None
    assert landmarks.point("left_knee") == pytest.approx((0.4, 0.7))
    assert landmarks.visibility("left_knee") == pytest.approx(0.9)


def test_low_scores_mean_nobody():
    persons = np.zeros((6, 56), dtype=np.float32)
    persons[0] = _person(0.29)
    assert PoseEstimator.select_primary(persons) is None


def test_threshold_is_inclusive():
    persons = np.zeros((6, 56), dtype=np.float32)
    persons[2] = _person(PoseEstimator.MIN_DETECTION_SCORE)
    assert PoseEstimator.select_primary(persons) is not None
