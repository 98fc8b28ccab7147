"""
service.py - Clinic Operations
==============================
Patient roster, prescriptions, exercise history, rewards and chat for clinicians and patients.

Responsibilities:
- Assigning and completing prescriptions
- Logging counted reps and awarding points
- Patient/clinician chat with live subscribers

Does NOT handle:
- Authentication
- Pose evaluation
- Rendering
"""

import time
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from ..exercises.base import ExerciseType
from .models import (
    ROLE_DOCTOR, ROLE_PATIENT,
    ChatMessage, ExerciseLog, Prescription, User, new_id,
)
from .store import ClinicStore


ChatCallback = Callable[[List[ChatMessage]], None]


def format_currency(points: int) -> str:
    """Reward points as rupees (100 points = ₹1)."""
    return f"₹{points / 100:.2f}"


class ClinicService:
    """
    Clinic operations on top of a ClinicStore.
    """

    # ===== CONFIGURATION =====
    POINTS_PER_EXERCISE = 10
    SAMPLE_PRESCRIPTIONS = (
        ("sample1", ExerciseType.RIGHT_HAND_RAISE, 3, 10),
        ("sample2", ExerciseType.SHOULDER_ABDUCTION, 2, 15),
        ("sample3", ExerciseType.SQUAT, 3, 12),
    )

    def __init__(self, store: Optional[ClinicStore] = None):
        self.store = store if store is not None else ClinicStore()
        self._chat_subscribers: Dict[str, List[ChatCallback]] = defaultdict(list)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def _find_user_by_email(self, email: str, role: Optional[str] = None) -> Optional[User]:
        for user in self.store.users.values():
            if user.email == email and (role is None or user.role == role):
                return user
        return None

    def get_user(self, uid: str) -> User:
        user = self.store.users.get(uid)
        if user is None:
            raise LookupError(f"User {uid} not found")
        return user

    def create_doctor_account(self, email: str) -> User:
        if self._find_user_by_email(email) is not None:
            raise ValueError(f"An account already exists for {email}")
        doctor = User(uid=new_id(), email=email, role=ROLE_DOCTOR)
        self.store.users[doctor.uid] = doctor
        return doctor

    def create_patient_account(self, email: str, doctor_id: Optional[str] = None) -> User:
        """
        Register a patient, optionally linked to the creating clinician.

        Raises:
            ValueError: If the email is empty or already registered
        """
        email = (email or "").strip()
        if not email:
            raise ValueError("Patient email is required")
        if self._find_user_by_email(email) is not None:
            raise ValueError(f"An account already exists for {email}")

        patient = User(uid=new_id(), email=email, role=ROLE_PATIENT, doctor_id=doctor_id)
        self.store.users[patient.uid] = patient
        print(f"➕ [ClinicService] Created patient {email}")
        return patient

    def get_patients(self) -> List[User]:
        return [user for user in self.store.users.values() if user.role == ROLE_PATIENT]

    def find_patient(self, email: str) -> Optional[User]:
        return self._find_user_by_email(email, ROLE_PATIENT)

    def link_patient_to_doctor(self, patient_email: str, doctor_id: str) -> User:
        """
        Link an existing patient to a clinician. An existing link is overwritten.

        Raises:
            LookupError: If no patient has that email
        """
        patient = self.find_patient(patient_email)
        if patient is None:
            raise LookupError("Patient not found with that email.")
        patient.doctor_id = doctor_id
        return patient

    # ------------------------------------------------------------------
    # Prescriptions
    # ------------------------------------------------------------------

    def assign_prescription(self, doctor_id: str, patient_id: str, patient_email: str,
                            exercise, sets: int, reps: int) -> Prescription:
        prescription = Prescription(
            id=new_id(),
            doctor_id=doctor_id,
            patient_id=patient_id,
            patient_email=patient_email,
            exercise=exercise,
            sets=sets,
            reps=reps,
        )
        self.store.prescriptions[prescription.id] = prescription
        print(f"📋 [ClinicService] Assigned {prescription.exercise.value} "
              f"({prescription.sets}x{prescription.reps}) to {patient_email}")
        return prescription

    def get_patient_prescriptions(self, patient_id: str) -> List[Prescription]:
        """Open (not yet completed) prescriptions of a patient, oldest first."""
        open_items = [
            p for p in self.store.prescriptions.values()
            if p.patient_id == patient_id and not p.is_completed
        ]
        return sorted(open_items, key=lambda p: p.assigned_at)

    def sample_prescriptions(self) -> List[Prescription]:
        return [
            Prescription(id=pid, doctor_id=None, patient_id=None, patient_email=None,
                         exercise=exercise, sets=sets, reps=reps)
            for pid, exercise, sets, reps in self.SAMPLE_PRESCRIPTIONS
        ]

    def get_prescriptions_or_samples(self, patient_id: str) -> List[Prescription]:
        """The patient's open prescriptions, or the sample set if there are none."""
        return self.get_patient_prescriptions(patient_id) or self.sample_prescriptions()

    # ------------------------------------------------------------------
    # Exercise history and rewards
    # ------------------------------------------------------------------

    def log_exercise_rep(self, patient_id: str, patient_email: str, exercise,
                         rep_count: int, set_count: int, total_reps: int) -> ExerciseLog:
        entry = ExerciseLog(
            id=new_id(),
            patient_id=patient_id,
            patient_email=patient_email,
            exercise=ExerciseType.from_name(exercise).value,
            feedback=f"Rep {rep_count} - Set {set_count}",
            is_correct=True,
            rep_count=rep_count,
            set_count=set_count,
            total_reps=total_reps,
        )
        self.store.exercise_logs.append(entry)
        return entry

    def complete_exercise(self, patient_id: str, patient_email: str, prescription_id: str,
                          exercise, total_reps: int) -> int:
        """
        Log completion, close the prescription and award points.

        Sample prescriptions are logged and rewarded but never stored as completed.
        A prescription that is already completed earns nothing and is not logged again.

        Returns:
            Points earned

        Raises:
            LookupError: If the patient or a non-sample prescription doesn't exist
        """
        patient = self.get_user(patient_id)

        prescription = None
        if prescription_id and not prescription_id.startswith("sample"):
            prescription = self.store.prescriptions.get(prescription_id)
            if prescription is None:
                raise LookupError(f"Prescription {prescription_id} not found")
            if prescription.is_completed:
                print(f"⚠️  [ClinicService] Prescription {prescription_id} was already completed; "
                      f"no points awarded")
                return 0

        exercise_name = ExerciseType.from_name(exercise).value
        self.store.exercise_logs.append(ExerciseLog(
            id=new_id(),
            patient_id=patient_id,
            patient_email=patient_email,
            exercise=exercise_name,
            feedback=f"Exercise completed! Total reps: {total_reps}",
            is_correct=True,
            completed=True,
        ))

        if prescription is not None:
            prescription.is_completed = True
            prescription.completed_at = time.time()
            prescription.total_reps_completed = total_reps

        patient.points += self.POINTS_PER_EXERCISE
        print(f"🏆 [ClinicService] {patient_email} completed {exercise_name}: "
              f"+{self.POINTS_PER_EXERCISE} points ({patient.points} total)")
        return self.POINTS_PER_EXERCISE

    def get_exercise_history(self, patient_id: str) -> List[ExerciseLog]:
        """Exercise log entries for a patient, newest first."""
        entries = [log for log in reversed(self.store.exercise_logs) if log.patient_id == patient_id]
        return sorted(entries, key=lambda log: log.timestamp, reverse=True)

    def patient_report(self, patient_id: str) -> List[Dict]:
        """History rows for the clinician's report view."""
        rows = []
        for log in self.get_exercise_history(patient_id):
            rows.append({
                "exercise": log.exercise or "Unknown Exercise",
                "date": time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(log.timestamp)),
                "icon": "✅" if log.is_correct else "⚠️",
                "feedback": log.feedback,
                "is_correct": log.is_correct,
                "completed": log.completed,
            })
        return rows

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    def get_messages(self, patient_id: str) -> List[ChatMessage]:
        """Messages of one patient's conversation, oldest first."""
        messages = [m for m in self.store.messages if m.patient_id == patient_id]
        return sorted(messages, key=lambda m: m.timestamp)

    def send_message(self, sender_id: str, sender_name: str, text: str,
                     message_type: str, patient_id: str) -> ChatMessage:
        text = (text or "").strip()
        if not text:
            raise ValueError("Message text is empty")

        message = ChatMessage(
            id=new_id(),
            sender_id=sender_id,
            sender_name=sender_name,
            text=text,
            type=message_type,
            patient_id=patient_id,
        )
        self.store.messages.append(message)
        self._notify_chat(patient_id)
        return message

    def subscribe_to_chat(self, patient_id: str, callback: ChatCallback) -> Callable[[], None]:
        """
        Receive a patient's full conversation now and after every new message.

        Returns:
            A function that cancels the subscription
        """
        subscribers = self._chat_subscribers[patient_id]
        subscribers.append(callback)
        callback(self.get_messages(patient_id))

        def unsubscribe():
            if callback in subscribers:
                subscribers.remove(callback)

        return unsubscribe

    def _notify_chat(self, patient_id: str):
        messages = self.get_messages(patient_id)
        for callback in list(self._chat_subscribers.get(patient_id, ())):
            callback(messages)
