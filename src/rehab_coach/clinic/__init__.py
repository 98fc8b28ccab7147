"""
Clinic Module
=============
Prescriptions, exercise history, rewards and chat around the pose-evaluation core.
"""

from .models import User, Prescription, ExerciseLog, ChatMessage, ROLE_PATIENT, ROLE_DOCTOR
from .store import ClinicStore
from .service import ClinicService, format_currency

__all__ = [
    'User',
    'Prescription',
    'ExerciseLog',
    'ChatMessage',
    'ROLE_PATIENT',
    'ROLE_DOCTOR',
    'ClinicStore',
    'ClinicService',
    'format_currency',
]
