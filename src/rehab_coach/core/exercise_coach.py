"""
exercise_coach.py - Real-Time Exercise Coaching
===============================================
Feeds each frame's landmarks into the active evaluator and session, and drives feedback, logging and rewards.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from ..exercises import BaseEvaluator, EvaluationResult, get_evaluator
from ..clinic import ClinicService, Prescription, User
from .landmarks import LandmarkSet
from .pose_estimator import PoseEstimator
from .session import ExerciseSession, SessionEvent


STATUS_CORRECT = "correct"
STATUS_INCORRECT = "incorrect"
STATUS_NO_PERSON = "no_person"
STATUS_COMPLETED = "completed"


@dataclass
class FrameResult:
    """What the coach decided for one frame."""
    status: str
    feedback: str
    event: SessionEvent = SessionEvent.NONE
    evaluation: Optional[EvaluationResult] = None
    landmarks: Optional[LandmarkSet] = None
    session: Dict = field(default_factory=dict)
    points_earned: int = 0

    def to_dict(self) -> Dict:
        return {
            "status": self.status,
            "feedback": self.feedback,
            "event": self.event.value,
            "evaluation": self.evaluation.to_dict() if self.evaluation else None,
            "session": dict(self.session),
            "points_earned": self.points_earned,
        }


class ExerciseCoach:
    """
    Main coaching loop for one patient working through one prescription.
    Handles evaluation, set/rep progression and the clinic side effects.
    """

    # ===== CONFIGURATION =====
    NO_PERSON_FEEDBACK = "No person detected."
    COMPLETED_FEEDBACK = "🎉 Exercise completed!"
    DEBUG_INTERVAL_SECONDS = 3.0

    def __init__(self,
                 clinic: Optional[ClinicService] = None,
                 pose_estimator: Optional[PoseEstimator] = None,
                 rep_interval: Optional[float] = None,
                 require_release: bool = False,
                 debug: bool = False):
        """
        Initialize the coach.

        Args:
            clinic: Clinic service for rep logs and rewards (None = no side effects)
            pose_estimator: Estimator used by process_frame
            rep_interval: Seconds between counted reps (default: ExerciseSession.REP_INTERVAL_SECONDS)
            require_release: Require an incorrect frame between two reps
            debug: Print throttled per-frame evaluation details
        """
        self.clinic = clinic
        self.pose_estimator = pose_estimator
        self.rep_interval = rep_interval
        self.require_release = require_release
        self.debug = debug

        self.prescription: Optional[Prescription] = None
        self.patient: Optional[User] = None
        self.evaluator: Optional[BaseEvaluator] = None
        self.session: Optional[ExerciseSession] = None

        self.points_earned = 0
        self.last_debug_output = 0.0

    @property
    def is_active(self) -> bool:
        return self.session is not None

    def start(self, prescription: Prescription, patient: Optional[User] = None) -> ExerciseSession:
        """
        Begin a session for a prescription.

        Args:
            prescription: What to perform (exercise, sets, reps)
            patient: Who is performing it; required for logging and rewards

        Returns:
            The new ExerciseSession

        Raises:
            ValueError: If the prescription was already completed
        """
        if prescription.is_completed and not prescription.is_sample:
            raise ValueError(f"Prescription {prescription.id} is already completed")

        self.prescription = prescription
        self.patient = patient
        self.evaluator = get_evaluator(prescription.exercise)
        self.session = ExerciseSession(
            prescription.sets,
            prescription.reps,
            rep_interval=self.rep_interval,
            require_release=self.require_release,
        )
        self.points_earned = 0

        print(f"▶️  [ExerciseCoach] {prescription.exercise.value} - "
              f"{prescription.sets} sets x {prescription.reps} reps")
        return self.session

    def stop(self):
        """Release the active session."""
        if self.session is not None:
            print(f"⏹️  [ExerciseCoach] Session stopped after {self.session.total_reps} reps")
        self.prescription = None
        self.patient = None
        self.evaluator = None
        self.session = None

    def reset(self):
        """Restart the active session from set 1."""
        if self.session is None:
            raise RuntimeError("No active exercise session")
        self.session.reset()
        self.points_earned = 0
        print("🔄 [ExerciseCoach] Session reset")

    def _print_debug(self, evaluation: EvaluationResult):
        current_time = time.time()
        if current_time - self.last_debug_output < self.DEBUG_INTERVAL_SECONDS:
            return
        self.last_debug_output = current_time

        angles = " | ".join(f"{name}: {value:.1f}°" for name, value in evaluation.angles.items())
        print(f"🔍 [ExerciseCoach] correct={evaluation.is_correct} "
              f"accuracy={evaluation.accuracy:.1f} {angles}")

    def _event_feedback(self, event: SessionEvent) -> str:
        session = self.session
        if event is SessionEvent.REP:
            return f"✅ Rep {session.current_reps}/{session.reps}"
        if event is SessionEvent.SET_COMPLETE:
            return f"✅ Set {session.current_set - 1} completed! Start set {session.current_set}"
        return self.COMPLETED_FEEDBACK

    def _record_rep(self):
        session = self.session
        exercise = self.prescription.exercise
        print(f"💪 [ExerciseCoach] {exercise.value} Rep {session.last_rep_number}/{session.reps} "
              f"- Set {session.last_rep_set}/{session.sets}")

        if self.clinic is None or self.patient is None:
            return
        self.clinic.log_exercise_rep(
            self.patient.uid, self.patient.email, exercise,
            session.last_rep_number, session.last_rep_set, session.total_reps,
        )

    def _finish_exercise(self) -> int:
        print(f"🎉 [ExerciseCoach] {self.prescription.exercise.value} completed "
              f"({self.session.total_reps} reps)")

        if self.clinic is None or self.patient is None:
            return 0
        points = self.clinic.complete_exercise(
            self.patient.uid, self.patient.email, self.prescription.id,
            self.prescription.exercise, self.session.total_reps,
        )
        self.points_earned += points
        return points

    def process_landmarks(self, landmarks: Optional[LandmarkSet],
                          timestamp: Optional[float] = None) -> FrameResult:
        """
        Process one frame's landmarks.

        Args:
            landmarks: The patient's landmarks, or None if nobody was detected
            timestamp: Frame time in seconds (defaults to now)

        Returns:
            FrameResult with status, feedback and session snapshot
        """
        if self.session is None:
            raise RuntimeError("No active exercise session; call start() first")

        if self.session.is_completed:
            return FrameResult(
                status=STATUS_COMPLETED,
                feedback=self.COMPLETED_FEEDBACK,
                landmarks=landmarks,
                session=self.session.snapshot(),
            )

        if landmarks is None:
            return FrameResult(
                status=STATUS_NO_PERSON,
                feedback=self.NO_PERSON_FEEDBACK,
                session=self.session.snapshot(),
            )

        if timestamp is None:
            timestamp = time.time()

        evaluation = self.evaluator.evaluate(landmarks)
        if self.debug:
            self._print_debug(evaluation)

        event = self.session.update(evaluation.is_correct, timestamp)
        points = 0

        if event is SessionEvent.NONE:
            feedback = evaluation.feedback
        else:
            feedback = self._event_feedback(event)
            self._record_rep()
            if event is SessionEvent.EXERCISE_COMPLETE:
                points = self._finish_exercise()

        if event is SessionEvent.EXERCISE_COMPLETE:
            status = STATUS_COMPLETED
        else:
            status = STATUS_CORRECT if evaluation.is_correct else STATUS_INCORRECT

        return FrameResult(
            status=status,
            feedback=feedback,
            event=event,
            evaluation=evaluation,
            landmarks=landmarks,
            session=self.session.snapshot(),
            points_earned=points,
        )

    def process_frame(self, frame: np.ndarray, timestamp: Optional[float] = None) -> FrameResult:
        """
        Run pose estimation on a camera frame and process the result.

        Args:
            frame: BGR image from OpenCV
            timestamp: Frame time in seconds (defaults to now)
        """
        if self.pose_estimator is None:
            raise RuntimeError("ExerciseCoach was created without a pose estimator")
        if self.session is None:
            raise RuntimeError("No active exercise session; call start() first")

        landmarks = self.pose_estimator.detect_primary(frame)
        return self.process_landmarks(landmarks, timestamp)
