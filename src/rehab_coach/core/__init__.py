"""
Core Processing Module
======================
Contains landmarks, pose estimation, session state and the coaching loop.
"""

from .landmarks import LandmarkSet, MEDIAPIPE_LAYOUT, MOVENET_LAYOUT, SKELETON_CONNECTIONS
from .pose_estimator import PoseEstimator
from .session import ExerciseSession, SessionEvent, SessionStatus
from .streamer import CameraStream
from .exercise_coach import ExerciseCoach, FrameResult

__all__ = [
    'LandmarkSet',
    'MEDIAPIPE_LAYOUT',
    'MOVENET_LAYOUT',
    'SKELETON_CONNECTIONS',
    'PoseEstimator',
    'ExerciseSession',
    'SessionEvent',
    'SessionStatus',
    'CameraStream',
    'ExerciseCoach',
    'FrameResult',
]
