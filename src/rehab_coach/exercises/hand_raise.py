"""
hand_raise.py - Right Hand Raise Evaluation Logic
=================================================
Grades a single-arm overhead raise of the right arm.
"""

from ..core.landmarks import LandmarkSet
from .base import BaseEvaluator, EvaluationResult, ExerciseType


class HandRaiseEvaluator(BaseEvaluator):
    """Evaluates the Right Hand Raise: right wrist held above the right shoulder."""

    exercise_type = ExerciseType.RIGHT_HAND_RAISE

    # ===== CONFIGURATION =====
    TARGET_ELEVATION = 160      # Arm close to vertical
    ELBOW_STRAIGHT_ANGLE = 150  # Below this the elbow counts as bent
    ELBOW_BENT_FLOOR = 90       # Straightness score is 0 at this elbow angle
    ELEVATION_WEIGHT = 0.7
    STRAIGHTNESS_WEIGHT = 0.3

    SHOULDER = "right_shoulder"
    ELBOW = "right_elbow"
    WRIST = "right_wrist"

    @property
    def instruction(self) -> str:
        return "Raise right hand"

    def evaluate(self, landmarks: LandmarkSet) -> EvaluationResult:
        """
        Evaluate one frame.

        Args:
            landmarks: Landmarks of the patient for this frame

        Returns:
            EvaluationResult with right-arm joint status and angles
        """
        if not self._visible(landmarks, (self.SHOULDER, self.WRIST)):
            return self._not_visible_result(landmarks, (self.SHOULDER, self.ELBOW, self.WRIST))

        shoulder = landmarks.point(self.SHOULDER)
        wrist = landmarks.point(self.WRIST)

        elevation = self.angle_calculator.calculate_arm_elevation_angle(shoulder, wrist)
        is_correct = self.angle_calculator.calculate_height_difference(shoulder, wrist) > 0

        angles = {"right_elevation": elevation}
        joint_status = {
            self.SHOULDER: self.STATUS_GOOD,
            self.WRIST: self.STATUS_GOOD if is_correct else self.STATUS_ADJUST,
        }

        elevation_score = self._progress(elevation, 0, self.TARGET_ELEVATION)
        elbow_bent = False

        if self._visible(landmarks, (self.ELBOW,)):
            elbow_angle = self.angle_calculator.calculate_angle(
                shoulder, landmarks.point(self.ELBOW), wrist)
            angles["right_elbow"] = elbow_angle
            elbow_bent = elbow_angle < self.ELBOW_STRAIGHT_ANGLE
            joint_status[self.ELBOW] = self.STATUS_ADJUST if elbow_bent else self.STATUS_GOOD

            straightness = self._progress(elbow_angle, self.ELBOW_BENT_FLOOR, 180)
            accuracy = self._score(self.ELEVATION_WEIGHT * elevation_score +
                                   self.STRAIGHTNESS_WEIGHT * straightness)
        else:
            joint_status[self.ELBOW] = self.STATUS_NOT_VISIBLE
            accuracy = self._score(elevation_score)

        if not is_correct:
            feedback = self.instruction
        elif elbow_bent:
            feedback = "Straighten your right arm"
        else:
            feedback = "Good! Hold your right hand up"

        return EvaluationResult(
            is_correct=is_correct,
            accuracy=accuracy,
            feedback=feedback,
            joint_status=joint_status,
            angles=angles,
        )
