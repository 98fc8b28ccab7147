"""
RehabCoach - Telehealth Exercise Adherence
==========================================
Real-time pose evaluation, rep/set counting and rewards for prescribed physical-therapy exercises.
"""

# core must load before exercises: evaluators depend on core.landmarks
from .core import ExerciseCoach, ExerciseSession, LandmarkSet, PoseEstimator, CameraStream
from .exercises import ExerciseType, AngleCalculator, EvaluationResult, get_evaluator
from .clinic import ClinicService, ClinicStore, Prescription, User

__version__ = "1.0.0"
__all__ = [
    "ExerciseCoach",
    "ExerciseSession",
    "LandmarkSet",
    "PoseEstimator",
    "CameraStream",
    "ExerciseType",
    "AngleCalculator",
    "EvaluationResult",
    "get_evaluator",
    "ClinicService",
    "ClinicStore",
    "Prescription",
    "User",
]
