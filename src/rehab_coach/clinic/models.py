"""
models.py - Clinic Records
==========================
Plain records for users, prescriptions, exercise logs and chat messages.
"""

import time
import uuid
from dataclasses import dataclass, field, asdict
from typing import Dict, Optional

from ..exercises.base import ExerciseType


ROLE_PATIENT = "patient"
ROLE_DOCTOR = "doctor"


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class User:
    uid: str
    email: str
    role: str = ROLE_PATIENT
    doctor_id: Optional[str] = None
    points: int = 0

    @property
    def display_name(self) -> str:
        return self.email.split("@")[0]


@dataclass
class Prescription:
    """An exercise a clinician assigned to a patient: `sets` x `reps`."""
    id: str
    doctor_id: Optional[str]
    patient_id: Optional[str]
    patient_email: Optional[str]
    exercise: ExerciseType
    sets: int
    reps: int
    is_completed: bool = False
    assigned_at: float = field(default_factory=time.time)
    completed_at: Optional[float] = None
    total_reps_completed: Optional[int] = None

    def __post_init__(self):
        self.exercise = ExerciseType.from_name(self.exercise)
        if int(self.sets) < 1 or int(self.reps) < 1:
            raise ValueError(f"Sets and reps must be at least 1, got sets={self.sets}, reps={self.reps}")
        self.sets = int(self.sets)
        self.reps = int(self.reps)

    @property
    def is_sample(self) -> bool:
        return self.id.startswith("sample")

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["exercise"] = self.exercise.value
        return data


@dataclass
class ExerciseLog:
    id: str
    patient_id: str
    patient_email: str
    exercise: str
    feedback: str
    is_correct: bool = True
    rep_count: Optional[int] = None
    set_count: Optional[int] = None
    total_reps: Optional[int] = None
    completed: bool = False
    timestamp: float = field(default_factory=time.time)


@dataclass
class ChatMessage:
    id: str
    sender_id: str
    sender_name: str
    text: str
    type: str
    patient_id: str
    timestamp: float = field(default_factory=time.time)
