"""
base.py - Base classes and utilities for exercise evaluation
=============================================================
Contains common functionality shared across all exercise types.
"""

import enum
from dataclasses import dataclass, field
from math import atan2, degrees
from typing import Dict, Iterable, Tuple

import numpy as np

from ..core.landmarks import LandmarkSet


class ExerciseType(enum.Enum):
    """Enum for the prescribable exercise types"""
    RIGHT_HAND_RAISE = "Right Hand Raise"
    SHOULDER_ABDUCTION = "Shoulder Abduction"
    SQUAT = "Squat"

    @classmethod
    def from_name(cls, name: str) -> "ExerciseType":
        """Resolve a display name (case-insensitive) to an ExerciseType."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for exercise in cls:
            if exercise.value.lower() == key or exercise.name.lower() == key:
                return exercise
        known = ", ".join(e.value for e in cls)
        raise ValueError(f"Unknown exercise '{name}'. Expected one of: {known}")


class AngleCalculator:
    """Utility class for calculating angles from landmarks."""

    @staticmethod
    def calculate_angle(a: Tuple[float, float],
                        b: Tuple[float, float],
                        c: Tuple[float, float]) -> float:
        """
        Calculate angle ABC (at point B) in degrees.

        Args:
            a, b, c: Points as (x, y) normalized coordinates

        Returns:
            Angle in degrees (0-180)
        """
        a, b, c = np.array(a, dtype=float), np.array(b, dtype=float), np.array(c, dtype=float)
        radians = np.arctan2(c[1] - b[1], c[0] - b[0]) - np.arctan2(a[1] - b[1], a[0] - b[0])
        angle = float(np.abs(radians * 180.0 / np.pi))
        if angle > 180:
            angle = 360 - angle
        return angle

    @staticmethod
    def calculate_arm_elevation_angle(shoulder: Tuple[float, float],
                                      wrist: Tuple[float, float]) -> float:
        """
        Calculate how high the arm is raised (0-180°).
        0° = arm straight down, 90° = arm out to the side, 180° = overhead.

        Args:
            shoulder: (x, y) normalized coordinates
            wrist: (x, y) normalized coordinates

        Returns:
            Elevation angle in degrees
        """
        shoulder_x, shoulder_y = shoulder
        wrist_x, wrist_y = wrist

        # y grows downwards in images
        dy = wrist_y - shoulder_y
        dx = wrist_x - shoulder_x

        if dx == 0 and dy == 0:
            return 0.0
        return degrees(atan2(abs(dx), dy))

    @staticmethod
    def calculate_height_difference(upper: Tuple[float, float],
                                    lower: Tuple[float, float]) -> float:
        """
        Calculate height difference (upper_y - lower_y).

        Returns:
            Positive if the second point is higher in the image than the first
        """
        _, upper_y = upper
        _, lower_y = lower
        return upper_y - lower_y


@dataclass
class EvaluationResult:
    """Per-frame verdict produced by an exercise evaluator."""
    is_correct: bool
    accuracy: float
    feedback: str
    joint_status: Dict[str, str] = field(default_factory=dict)
    angles: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "is_correct": self.is_correct,
            "accuracy": self.accuracy,
            "feedback": self.feedback,
            "joint_status": dict(self.joint_status),
            "angles": dict(self.angles),
        }


class BaseEvaluator:
    """
    Shared plumbing for rule-based exercise evaluators.

    Subclasses set `exercise_type` and implement `evaluate`.
    """

    exercise_type: ExerciseType = None

    # ===== CONFIGURATION =====
    MIN_VISIBILITY = 0.5
    NOT_VISIBLE_FEEDBACK = "Step into the frame so your joints are visible"

    STATUS_GOOD = "good"
    STATUS_ADJUST = "adjust"
    STATUS_NOT_VISIBLE = "not_visible"

    def __init__(self):
        self.angle_calculator = AngleCalculator()

    def evaluate(self, landmarks: LandmarkSet) -> EvaluationResult:
        raise NotImplementedError

    @property
    def instruction(self) -> str:
        """Default coaching cue shown while the pose is not yet correct."""
        return "Perform exercise"

    def _visible(self, landmarks: LandmarkSet, names: Iterable[str]) -> bool:
        return landmarks.is_visible(names, self.MIN_VISIBILITY)

    def _not_visible_result(self, landmarks: LandmarkSet, names: Iterable[str]) -> EvaluationResult:
        joint_status = {}
        for name in names:
            visible = self._visible(landmarks, (name,))
            joint_status[name] = self.STATUS_GOOD if visible else self.STATUS_NOT_VISIBLE
        return EvaluationResult(
            is_correct=False,
            accuracy=0.0,
            feedback=self.NOT_VISIBLE_FEEDBACK,
            joint_status=joint_status,
        )

    @staticmethod
    def _progress(value: float, start: float, target: float) -> float:
        """Fraction of the way from `start` to `target`, clamped to [0, 1]."""
        if target == start:
            return 1.0
        return float(np.clip((value - start) / (target - start), 0.0, 1.0))

    @staticmethod
    def _score(fraction: float) -> float:
        if not np.isfinite(fraction):
            return 0.0
        return round(float(np.clip(fraction, 0.0, 1.0)) * 100.0, 1)
