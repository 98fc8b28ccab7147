"""
Tests for the per-frame coaching loop and its clinic side effects
"""

import numpy as np
import pytest

from rehab_coach.clinic import ClinicService, Prescription
from rehab_coach.core import ExerciseCoach, SessionEvent
from rehab_coach.core.exercise_coach import (
    STATUS_COMPLETED, STATUS_CORRECT, STATUS_INCORRECT, STATUS_NO_PERSON,
)
from landmark_factory import RIGHT_HAND_RAISED, make_landmarks


class StubEstimator:
    """Returns a fixed LandmarkSet (or None) for every frame."""

    def __init__(self, landmarks):
        self.landmarks = landmarks
        self.frames = 0

    def detect_primary(self, frame):
        self.frames += 1
        return self.landmarks


@pytest.fixture
def clinic():
    return ClinicService()


@pytest.fixture
def patient(clinic):
    return clinic.create_patient_account("pat@example.com", doctor_id="doc-1")


def _prescribe(clinic, patient, exercise="Right Hand Raise", sets=1, reps=2):
    return clinic.assign_prescription("doc-1", patient.uid, patient.email, exercise, sets, reps)


class TestCoachingLoop:

    def test_requires_started_session(self):
        coach = ExerciseCoach()
        with pytest.raises(RuntimeError):
            coach.process_landmarks(make_landmarks())

    def test_no_person(self, clinic, patient):
        coach = ExerciseCoach(clinic=clinic)
        coach.start(_prescribe(clinic, patient), patient)
        result = coach.process_landmarks(None, timestamp=0.0)
        assert result.status == STATUS_NO_PERSON
        assert result.feedback == "No person detected."
        assert result.evaluation is None

    def test_incorrect_pose_shows_instruction(self, clinic, patient):
        coach = ExerciseCoach(clinic=clinic)
        coach.start(_prescribe(clinic, patient), patient)
        result = coach.process_landmarks(make_landmarks(), timestamp=0.0)
        assert result.status == STATUS_INCORRECT
        assert result.event is SessionEvent.NONE
        assert result.feedback == "Raise right hand"
        assert clinic.get_exercise_history(patient.uid) == []

    def test_full_session_logs_reps_and_awards_points(self, clinic, patient):
        prescription = _prescribe(clinic, patient, sets=1, reps=2)
        coach = ExerciseCoach(clinic=clinic)
        coach.start(prescription, patient)
        raised = make_landmarks(RIGHT_HAND_RAISED)

        first = coach.process_landmarks(raised, timestamp=0.0)
        assert first.event is SessionEvent.REP
        assert first.status == STATUS_CORRECT
        assert first.feedback == "✅ Rep 1/2"

        held = coach.process_landmarks(raised, timestamp=0.5)
        assert held.event is SessionEvent.NONE
        assert held.feedback == "Good! Hold your right hand up"

        last = coach.process_landmarks(raised, timestamp=1.5)
        assert last.event is SessionEvent.EXERCISE_COMPLETE
        assert last.status == STATUS_COMPLETED
        assert last.feedback == "🎉 Exercise completed!"
        assert last.points_earned == 10

        assert patient.points == 10
        assert coach.points_earned == 10
        assert prescription.is_completed
        assert prescription.total_reps_completed == 2

        history = clinic.get_exercise_history(patient.uid)
        feedback = [entry.feedback for entry in history]
        assert "Rep 1 - Set 1" in feedback
        assert "Rep 2 - Set 1" in feedback
        assert "Exercise completed! Total reps: 2" in feedback
        assert clinic.get_patient_prescriptions(patient.uid) == []

    def test_set_completion_feedback(self, clinic, patient):
        coach = ExerciseCoach(clinic=clinic)
        coach.start(_prescribe(clinic, patient, sets=2, reps=1), patient)
        result = coach.process_landmarks(make_landmarks(RIGHT_HAND_RAISED), timestamp=0.0)
        assert result.event is SessionEvent.SET_COMPLETE
        assert result.feedback == "✅ Set 1 completed! Start set 2"
        assert result.session["current_set"] == 2

    def test_frames_after_completion(self, clinic, patient):
        coach = ExerciseCoach(clinic=clinic)
        coach.start(_prescribe(clinic, patient, sets=1, reps=1), patient)
        coach.process_landmarks(make_landmarks(RIGHT_HAND_RAISED), timestamp=0.0)
        after = coach.process_landmarks(make_landmarks(RIGHT_HAND_RAISED), timestamp=5.0)
        assert after.status == STATUS_COMPLETED
        assert after.event is SessionEvent.NONE
        assert patient.points == 10

    def test_without_clinic_has_no_side_effects(self):
        prescription = Prescription(id="sample1", doctor_id=None, patient_id=None,
                                    patient_email=None, exercise="Squat", sets=1, reps=1)
        coach = ExerciseCoach()
        coach.start(prescription)
        result = coach.process_landmarks(make_landmarks(), timestamp=0.0)
        assert result.status == STATUS_INCORRECT
        assert coach.points_earned == 0

    def test_sample_prescription_rewards_without_closing(self, clinic, patient):
        sample = clinic.sample_prescriptions()[0]
        coach = ExerciseCoach(clinic=clinic)
        coach.start(Prescription(id=sample.id, doctor_id=None, patient_id=patient.uid,
                                 patient_email=patient.email, exercise=sample.exercise,
                                 sets=1, reps=1), patient)
        result = coach.process_landmarks(make_landmarks(RIGHT_HAND_RAISED), timestamp=0.0)
        assert result.points_earned == 10
        assert patient.points == 10

    def test_completing_again_after_reset_pays_nothing(self, clinic, patient):
        prescription = _prescribe(clinic, patient, sets=1, reps=1)
        coach = ExerciseCoach(clinic=clinic)
        coach.start(prescription, patient)
        raised = make_landmarks(RIGHT_HAND_RAISED)

        assert coach.process_landmarks(raised, timestamp=0.0).points_earned == 10
        coach.reset()
        again = coach.process_landmarks(raised, timestamp=5.0)
        assert again.event is SessionEvent.EXERCISE_COMPLETE
        assert again.points_earned == 0
        assert clinic.complete_exercise(patient.uid, patient.email, prescription.id,
                                        prescription.exercise, 1) == 0

        assert patient.points == 10
        completions = [e for e in clinic.get_exercise_history(patient.uid) if e.completed]
        assert len(completions) == 1

    def test_start_refuses_completed_prescription(self, clinic, patient):
        prescription = _prescribe(clinic, patient, sets=1, reps=1)
        clinic.complete_exercise(patient.uid, patient.email, prescription.id, prescription.exercise, 1)
        with pytest.raises(ValueError):
            ExerciseCoach(clinic=clinic).start(prescription, patient)

    def test_reset_and_stop(self, clinic, patient):
        coach = ExerciseCoach(clinic=clinic)
        coach.start(_prescribe(clinic, patient, sets=1, reps=3), patient)
        coach.process_landmarks(make_landmarks(RIGHT_HAND_RAISED), timestamp=0.0)
        coach.reset()
        assert coach.session.total_reps == 0
        coach.stop()
        assert not coach.is_active
        with pytest.raises(RuntimeError):
            coach.reset()

    def test_to_dict(self, clinic, patient):
        coach = ExerciseCoach(clinic=clinic)
        coach.start(_prescribe(clinic, patient), patient)
        data = coach.process_landmarks(make_landmarks(RIGHT_HAND_RAISED), timestamp=0.0).to_dict()
        assert data["event"] == "rep"
        assert data["evaluation"]["is_correct"] is True
        assert data["session"]["total_reps"] == 1


class TestProcessFrame:

    def test_uses_pose_estimator(self, clinic, patient):
        estimator = StubEstimator(make_landmarks(RIGHT_HAND_RAISED))
        coach = ExerciseCoach(clinic=clinic, pose_estimator=estimator)
        coach.start(_prescribe(clinic, patient), patient)
        result = coach.process_frame(np.zeros((480, 640, 3), dtype=np.uint8), timestamp=0.0)
        assert estimator.frames == 1
        assert result.event is SessionEvent.REP

    def test_nobody_in_frame(self, clinic, patient):
        coach = ExerciseCoach(clinic=clinic, pose_estimator=StubEstimator(None))
        coach.start(_prescribe(clinic, patient), patient)
        result = coach.process_frame(np.zeros((480, 640, 3), dtype=np.uint8))
        assert result.status == STATUS_NO_PERSON

    def test_without_estimator(self, clinic, patient):
        coach = ExerciseCoach(clinic=clinic)
        coach.start(_prescribe(clinic, patient), patient)
        with pytest.raises(RuntimeError):
            coach.process_frame(np.zeros((10, 10, 3), dtype=np.uint8))
