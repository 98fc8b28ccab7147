"""
Tests for the set/rep session state machine
"""

import pytest

from rehab_coach.core.session import ExerciseSession, SessionEvent, SessionStatus


class TestRepDebounce:

    def test_first_correct_frame_counts_immediately(self):
        session = ExerciseSession(sets=1, reps=5)
        assert session.update(True, timestamp=100.0) is SessionEvent.REP
        assert session.current_reps == 1
        assert session.total_reps == 1

    def test_reps_inside_interval_are_ignored(self):
        session = ExerciseSession(sets=1, reps=5)
        session.update(True, timestamp=0.0)
        assert session.update(True, timestamp=0.5) is SessionEvent.NONE
        # The interval must be strictly exceeded
        assert session.update(True, timestamp=1.0) is SessionEvent.NONE
        assert session.update(True, timestamp=1.01) is SessionEvent.REP
        assert session.current_reps == 2

    def test_incorrect_frames_never_count(self):
        session = ExerciseSession(sets=1, reps=5)
        for t in range(10):
            assert session.update(False, timestamp=float(t)) is SessionEvent.NONE
        assert session.total_reps == 0

    def test_custom_interval(self):
        session = ExerciseSession(sets=1, reps=5, rep_interval=0.0)
        session.update(True, timestamp=1.0)
        assert session.update(True, timestamp=1.001) is SessionEvent.REP

    def test_require_release(self):
        session = ExerciseSession(sets=1, reps=5, require_release=True)
        assert session.update(True, timestamp=0.0) is SessionEvent.REP
        # Holding the pose does not count again
        assert session.update(True, timestamp=5.0) is SessionEvent.NONE
        assert session.update(False, timestamp=6.0) is SessionEvent.NONE
        assert session.update(True, timestamp=7.0) is SessionEvent.REP

    def test_default_holds_count_repeatedly(self):
        session = ExerciseSession(sets=1, reps=5)
        session.update(True, timestamp=0.0)
        assert session.update(True, timestamp=1.5) is SessionEvent.REP


class TestSetProgression:

    def test_full_prescription(self):
        session = ExerciseSession(sets=2, reps=2)
        events = [session.update(True, timestamp=t) for t in (0.0, 2.0, 4.0, 6.0)]
        assert events == [
            SessionEvent.REP,
            SessionEvent.SET_COMPLETE,
            SessionEvent.REP,
            SessionEvent.EXERCISE_COMPLETE,
        ]
        assert session.status is SessionStatus.COMPLETED
        assert session.is_completed
        assert session.total_reps == 4
        assert session.progress == pytest.approx(100.0)

    def test_set_complete_resets_reps(self):
        session = ExerciseSession(sets=3, reps=2)
        session.update(True, timestamp=0.0)
        assert session.update(True, timestamp=2.0) is SessionEvent.SET_COMPLETE
        assert session.current_set == 2
        assert session.current_reps == 0
        assert session.last_rep_set == 1
        assert session.last_rep_number == 2

    def test_completed_session_ignores_updates(self):
        session = ExerciseSession(sets=1, reps=1)
        assert session.update(True, timestamp=0.0) is SessionEvent.EXERCISE_COMPLETE
        assert session.update(True, timestamp=10.0) is SessionEvent.NONE
        assert session.total_reps == 1
        assert session.current_set == 1

    def test_progress(self):
        session = ExerciseSession(sets=3, reps=10)
        for i in range(12):
            session.update(True, timestamp=i * 2.0)
        assert session.current_set == 2
        assert session.current_reps == 2
        assert session.progress == pytest.approx(40.0)

    def test_reset(self):
        session = ExerciseSession(sets=1, reps=1)
        session.update(True, timestamp=0.0)
        session.reset()
        assert session.status is SessionStatus.ACTIVE
        assert session.total_reps == 0
        assert session.current_set == 1
        assert session.update(True, timestamp=0.1) is SessionEvent.EXERCISE_COMPLETE

    def test_snapshot(self):
        session = ExerciseSession(sets=2, reps=3)
        session.update(True, timestamp=0.0)
        snapshot = session.snapshot()
        assert snapshot["status"] == "active"
        assert snapshot["current_reps"] == 1
        assert snapshot["sets"] == 2


class TestValidation:

    @pytest.mark.parametrize("sets,reps", [(0, 10), (3, 0), (-1, 5)])
    def test_invalid_prescription(self, sets, reps):
        with pytest.raises(ValueError):
            ExerciseSession(sets=sets, reps=reps)

    def test_negative_interval(self):
        with pytest.raises(ValueError):
            ExerciseSession(sets=1, reps=1, rep_interval=-1)
