"""
store.py - In-Process Clinic Store
==================================
Holds clinic records in memory, with optional pickle snapshots on disk.
"""

import pickle
from typing import Dict, List

from .models import ChatMessage, ExerciseLog, Prescription, User


class ClinicStore:
    """
    In-memory collections of users, prescriptions, exercise logs and messages.

    Logs and messages keep insertion order.
    """

    SNAPSHOT_KEYS = ("users", "prescriptions", "exercise_logs", "messages")

    def __init__(self):
        self.users: Dict[str, User] = {}
        self.prescriptions: Dict[str, Prescription] = {}
        self.exercise_logs: List[ExerciseLog] = []
        self.messages: List[ChatMessage] = []

    def save(self, output_path: str):
        """
        Save the current store to a pickle file.

        Args:
            output_path: Path to save pickle file
        """
        snapshot = {key: getattr(self, key) for key in self.SNAPSHOT_KEYS}
        with open(output_path, 'wb') as f:
            pickle.dump(snapshot, f)
        print(f"💾 [ClinicStore] Saved {len(self.users)} users, "
              f"{len(self.prescriptions)} prescriptions to {output_path}")

    @classmethod
    def load(cls, input_path: str) -> "ClinicStore":
        """
        Load a store from a pickle snapshot.

        Args:
            input_path: Path to pickle file

        Returns:
            ClinicStore populated from the snapshot

        Raises:
            FileNotFoundError: If the snapshot doesn't exist
            ValueError: If the snapshot format is invalid
        """
        try:
            with open(input_path, 'rb') as f:
                snapshot = pickle.load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Clinic store not found at {input_path}")
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError) as e:
            raise ValueError(f"Failed to load clinic store: {str(e)}")

        if not isinstance(snapshot, dict):
            raise ValueError("Clinic store snapshot must be a dictionary")
        missing = [key for key in cls.SNAPSHOT_KEYS if key not in snapshot]
        if missing:
            raise ValueError(f"Clinic store snapshot is missing: {', '.join(missing)}")

        store = cls()
        store.users = dict(snapshot["users"])
        store.prescriptions = dict(snapshot["prescriptions"])
        store.exercise_logs = list(snapshot["exercise_logs"])
        store.messages = list(snapshot["messages"])

        for uid, user in store.users.items():
            if not isinstance(user, User):
                raise ValueError(f"Entry for user {uid} is not a User record")

        print(f"✅ [ClinicStore] Loaded {len(store.users)} users from {input_path}")
        return store
