"""
shoulder_abduction.py - Shoulder Abduction Evaluation Logic
===========================================================
Grades a bilateral raise of both arms out to the side.
"""

from typing import Dict

from ..core.landmarks import LandmarkSet
from .base import BaseEvaluator, EvaluationResult, ExerciseType


class ShoulderAbductionEvaluator(BaseEvaluator):
    """Evaluates Shoulder Abduction: both wrists raised above their shoulders."""

    exercise_type = ExerciseType.SHOULDER_ABDUCTION

    # ===== CONFIGURATION =====
    TARGET_ABDUCTION = 90       # Arm horizontal
    SYMMETRY_TOLERANCE = 15     # Allowed left/right elevation difference
    MAX_SYMMETRY_PENALTY = 0.5
    ELBOW_STRAIGHT_ANGLE = 150
    BENT_ELBOW_FACTOR = 0.9

    SIDES = ("left", "right")

    @property
    def instruction(self) -> str:
        return "Raise both arms out to the side"

    def evaluate(self, landmarks: LandmarkSet) -> EvaluationResult:
        required = [f"{side}_{joint}" for side in self.SIDES for joint in ("shoulder", "wrist")]
        if not self._visible(landmarks, required):
            elbows = [f"{side}_elbow" for side in self.SIDES]
            return self._not_visible_result(landmarks, required + elbows)

        angles: Dict[str, float] = {}
        joint_status: Dict[str, str] = {}
        raised = {}
        bent_elbows = []

        for side in self.SIDES:
            shoulder = landmarks.point(f"{side}_shoulder")
            wrist = landmarks.point(f"{side}_wrist")

            elevation = self.angle_calculator.calculate_arm_elevation_angle(shoulder, wrist)
            angles[f"{side}_abduction"] = elevation
            raised[side] = self.angle_calculator.calculate_height_difference(shoulder, wrist) > 0

            joint_status[f"{side}_shoulder"] = self.STATUS_GOOD
            joint_status[f"{side}_wrist"] = self.STATUS_GOOD if raised[side] else self.STATUS_ADJUST

            elbow_name = f"{side}_elbow"
            if self._visible(landmarks, (elbow_name,)):
                elbow_angle = self.angle_calculator.calculate_angle(
                    shoulder, landmarks.point(elbow_name), wrist)
                angles[elbow_name] = elbow_angle
                if elbow_angle < self.ELBOW_STRAIGHT_ANGLE:
                    bent_elbows.append(side)
                    joint_status[elbow_name] = self.STATUS_ADJUST
                else:
                    joint_status[elbow_name] = self.STATUS_GOOD
            else:
                joint_status[elbow_name] = self.STATUS_NOT_VISIBLE

        is_correct = raised["left"] and raised["right"]

        fraction = sum(
            self._progress(angles[f"{side}_abduction"], 0, self.TARGET_ABDUCTION)
            for side in self.SIDES
        ) / len(self.SIDES)

        asymmetry = abs(angles["left_abduction"] - angles["right_abduction"])
        uneven = asymmetry > self.SYMMETRY_TOLERANCE
        if uneven:
            penalty = min((asymmetry - self.SYMMETRY_TOLERANCE) / 90.0, self.MAX_SYMMETRY_PENALTY)
            fraction *= 1.0 - penalty
        for _ in bent_elbows:
            fraction *= self.BENT_ELBOW_FACTOR

        if not is_correct:
            lagging = [side for side in self.SIDES if not raised[side]]
            if len(lagging) == len(self.SIDES):
                feedback = self.instruction
            else:
                feedback = f"Raise your {lagging[0]} arm higher"
        elif uneven:
            feedback = "Keep both arms level"
        elif bent_elbows:
            feedback = "Keep your elbows straight"
        else:
            feedback = "Great! Hold both arms up"

        return EvaluationResult(
            is_correct=is_correct,
            accuracy=self._score(fraction),
            feedback=feedback,
            joint_status=joint_status,
            angles=angles,
        )
