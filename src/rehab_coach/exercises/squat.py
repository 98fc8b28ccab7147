"""
squat.py - Squat Evaluation Logic
=================================
Grades squat depth from the knee angle, with a torso-lean check.
"""

from typing import Dict, List

import numpy as np

from ..core.landmarks import LandmarkSet
from .base import BaseEvaluator, EvaluationResult, ExerciseType


class SquatEvaluator(BaseEvaluator):
    """Evaluates the Squat using the hip-knee-ankle angle of the visible leg(s)."""

    exercise_type = ExerciseType.SQUAT

    # ===== CONFIGURATION =====
    STANDING_KNEE_ANGLE = 170   # Legs straight
    TARGET_KNEE_ANGLE = 90      # Thighs parallel to the floor
    CORRECT_KNEE_ANGLE = 110    # At or below this the squat counts
    SHALLOW_KNEE_ANGLE = 150    # Above this the patient has barely bent
    MIN_TORSO_ANGLE = 45        # Shoulder-hip-knee; below this the chest has dropped
    TORSO_LEAN_FACTOR = 0.8

    SIDES = ("left", "right")

    @property
    def instruction(self) -> str:
        return "Bend your knees and lower your hips"

    def evaluate(self, landmarks: LandmarkSet) -> EvaluationResult:
        joint_status: Dict[str, str] = {}
        angles: Dict[str, float] = {}
        knee_angles: List[float] = []
        torso_angles: List[float] = []

        for side in self.SIDES:
            hip, knee, ankle = f"{side}_hip", f"{side}_knee", f"{side}_ankle"
            if not self._visible(landmarks, (hip, knee, ankle)):
                continue

            knee_angle = self.angle_calculator.calculate_angle(
                landmarks.point(hip), landmarks.point(knee), landmarks.point(ankle))
            angles[knee] = knee_angle
            knee_angles.append(knee_angle)

            shoulder = f"{side}_shoulder"
            if self._visible(landmarks, (shoulder,)):
                torso_angle = self.angle_calculator.calculate_angle(
                    landmarks.point(shoulder), landmarks.point(hip), landmarks.point(knee))
                angles[hip] = torso_angle
                torso_angles.append(torso_angle)

        if not knee_angles:
            names = [f"{side}_{joint}" for side in self.SIDES for joint in ("hip", "knee", "ankle")]
            return self._not_visible_result(landmarks, names)

        knee_angle = float(np.mean(knee_angles))
        is_correct = knee_angle <= self.CORRECT_KNEE_ANGLE
        leaning = bool(torso_angles) and min(torso_angles) < self.MIN_TORSO_ANGLE

        for side in self.SIDES:
            knee = f"{side}_knee"
            if knee in angles:
                joint_status[knee] = self.STATUS_GOOD if is_correct else self.STATUS_ADJUST
                joint_status[f"{side}_ankle"] = self.STATUS_GOOD
            else:
                joint_status[knee] = self.STATUS_NOT_VISIBLE
                joint_status[f"{side}_ankle"] = self.STATUS_NOT_VISIBLE
            hip = f"{side}_hip"
            if hip in angles:
                joint_status[hip] = self.STATUS_ADJUST if angles[hip] < self.MIN_TORSO_ANGLE else self.STATUS_GOOD
            elif knee in angles:
                joint_status[hip] = self.STATUS_GOOD
            else:
                joint_status[hip] = self.STATUS_NOT_VISIBLE

        fraction = self._progress(knee_angle, self.STANDING_KNEE_ANGLE, self.TARGET_KNEE_ANGLE)
        if leaning:
            fraction *= self.TORSO_LEAN_FACTOR

        if not is_correct:
            if knee_angle > self.SHALLOW_KNEE_ANGLE:
                feedback = self.instruction
            else:
                feedback = "Go a little lower"
        elif leaning:
            feedback = "Keep your chest up"
        else:
            feedback = "Great depth! Now stand back up"

        return EvaluationResult(
            is_correct=is_correct,
            accuracy=self._score(fraction),
            feedback=feedback,
            joint_status=joint_status,
            angles=angles,
        )
