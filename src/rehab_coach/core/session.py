"""
session.py - Exercise Session State
===================================
Set/rep progression for one prescribed exercise, debounced by a time threshold.
"""

import enum
import time
from typing import Dict, Optional


class SessionStatus(enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class SessionEvent(enum.Enum):
    """What a single update did to the session."""
    NONE = "none"
    REP = "rep"
    SET_COMPLETE = "set_complete"
    EXERCISE_COMPLETE = "exercise_complete"


class ExerciseSession:
    """
    Counts reps and sets from a stream of per-frame correctness verdicts.

    A correct frame counts as a rep only if more than `rep_interval` seconds
    have passed since the previous rep. With `require_release`, the pose must
    also have been incorrect at least once since the previous rep.
    """

    # ===== CONFIGURATION =====
    REP_INTERVAL_SECONDS = 1.0

    def __init__(self, sets: int, reps: int,
                 rep_interval: Optional[float] = None,
                 require_release: bool = False):
        if int(sets) < 1 or int(reps) < 1:
            raise ValueError(f"Sets and reps must be at least 1, got sets={sets}, reps={reps}")

        self.sets = int(sets)
        self.reps = int(reps)
        self.rep_interval = self.REP_INTERVAL_SECONDS if rep_interval is None else float(rep_interval)
        if self.rep_interval < 0:
            raise ValueError(f"Rep interval must be non-negative, got {rep_interval}")
        self.require_release = require_release
        self.reset()

    def reset(self):
        """Reset the session to the first rep of the first set."""
        self.current_set = 1
        self.current_reps = 0
        self.total_reps = 0
        self.last_rep_time = None
        self.status = SessionStatus.ACTIVE
        # Set and in-set number of the most recently counted rep
        self.last_rep_set = 0
        self.last_rep_number = 0
        self._released = True

    @property
    def is_completed(self) -> bool:
        return self.status is SessionStatus.COMPLETED

    @property
    def target_reps(self) -> int:
        return self.sets * self.reps

    @property
    def completed_reps(self) -> int:
        return (self.current_set - 1) * self.reps + self.current_reps

    @property
    def progress(self) -> float:
        """Percentage of the prescription done, 0-100."""
        return min(self.completed_reps / self.target_reps * 100.0, 100.0)

    def update(self, is_correct: bool, timestamp: Optional[float] = None) -> SessionEvent:
        """
        Feed one frame's verdict into the session.

        Args:
            is_correct: Whether the evaluator judged the pose correct
            timestamp: Frame time in seconds (defaults to now)

        Returns:
            The SessionEvent this frame produced
        """
        if self.status is SessionStatus.COMPLETED:
            return SessionEvent.NONE

        if timestamp is None:
            timestamp = time.time()

        if not is_correct:
            self._released = True
            return SessionEvent.NONE

        if self.require_release and not self._released:
            return SessionEvent.NONE

        if self.last_rep_time is not None and timestamp - self.last_rep_time <= self.rep_interval:
            return SessionEvent.NONE

        self.current_reps += 1
        self.total_reps += 1
        self.last_rep_time = timestamp
        self.last_rep_set = self.current_set
        self.last_rep_number = self.current_reps
        self._released = False

        if self.current_reps < self.reps:
            return SessionEvent.REP

        if self.current_set >= self.sets:
            self.status = SessionStatus.COMPLETED
            return SessionEvent.EXERCISE_COMPLETE

        self.current_set += 1
        self.current_reps = 0
        return SessionEvent.SET_COMPLETE

    def snapshot(self) -> Dict:
        return {
            "status": self.status.value,
            "current_set": self.current_set,
            "sets": self.sets,
            "current_reps": self.current_reps,
            "reps": self.reps,
            "total_reps": self.total_reps,
            "progress": self.progress,
        }
