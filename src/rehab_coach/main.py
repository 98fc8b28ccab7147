"""
main.py - Exercise Session Runner
Camera -> MoveNet -> pose evaluation -> rep/set counting, with a live OpenCV overlay
"""

import argparse
import os
import sys
import time
from collections import deque
from typing import Optional, Union

import cv2
import numpy as np

from .clinic import ClinicService, ClinicStore, Prescription, User, format_currency
from .core import CameraStream, ExerciseCoach, FrameResult, PoseEstimator, SKELETON_CONNECTIONS
from .core.exercise_coach import STATUS_COMPLETED, STATUS_CORRECT, STATUS_NO_PERSON
from .core.session import SessionEvent
from .exercises import ExerciseType

# ============================================================================
# 🔧 CONFIGURATION
# ============================================================================

# Path to the MoveNet MultiPose model file (.onnx, .tflite or SavedModel directory)
MOVENET_MODEL_PATH = os.path.abspath(os.path.join(os.getcwd(), 'models', 'movenet_multipose.onnx'))

# Camera index or video file
VIDEO_SOURCE = "0"

DEFAULT_EXERCISE = ExerciseType.RIGHT_HAND_RAISE.value
DEFAULT_SETS = 3
DEFAULT_REPS = 10

# Doctor id recorded on prescriptions created from the command line
CLI_DOCTOR_ID = "cli"

# Seconds the completion screen stays up before the runner exits
COMPLETION_HOLD_SECONDS = 3.0

# ============================================================================


class SessionRunner:
    """
    Runs one prescribed exercise against a camera or video file.
    """

    # ===== VISUALIZATION CONFIG =====
    COLOR_SKELETON = (255, 0, 0)
    COLOR_JOINT_GOOD = (0, 255, 0)
    COLOR_JOINT_ADJUST = (0, 200, 255)
    COLOR_TEXT = (255, 255, 255)
    COLOR_FEEDBACK_GOOD = (40, 120, 40)
    COLOR_FEEDBACK_WARN = (20, 110, 140)
    COLOR_FEEDBACK_ERROR = (40, 40, 150)
    COLOR_PROGRESS = (180, 180, 0)

    FONT = cv2.FONT_HERSHEY_SIMPLEX
    FONT_SCALE_LARGE = 0.8
    FONT_SCALE_MEDIUM = 0.6
    FONT_THICKNESS = 2
    MIN_JOINT_VISIBILITY = 0.3

    WINDOW_NAME = "RehabCoach - Exercise Session"

    def __init__(self,
                 model_path: str,
                 video_source: Union[int, str],
                 prescription: Prescription,
                 clinic: Optional[ClinicService] = None,
                 patient: Optional[User] = None,
                 rep_interval: Optional[float] = None,
                 require_release: bool = False,
                 debug: bool = False):
        print("\n" + "=" * 70)
        print("🏥  REHABCOACH: Exercise Session")
        print("⚡ Model: MoveNet MultiPose")
        print("=" * 70 + "\n")

        if isinstance(video_source, str) and not os.path.exists(video_source):
            raise FileNotFoundError(f"Video not found: {video_source}")

        self.pose_estimator = PoseEstimator(model_path)
        self.coach = ExerciseCoach(
            clinic=clinic,
            pose_estimator=self.pose_estimator,
            rep_interval=rep_interval,
            require_release=require_release,
            debug=debug,
        )
        self.clinic = clinic
        self.patient = patient
        self.prescription = prescription

        print(f"🎥 Opening video source: {video_source}")
        self.streamer = CameraStream(video_source)
        print(f"✅ Video opened: {self.streamer.width}x{self.streamer.height} @ {self.streamer.fps:.1f} FPS")

        self.processing_times = deque(maxlen=100)
        self.last_feedback = ""

    def _draw_skeleton(self, frame: np.ndarray, result: FrameResult):
        landmarks = result.landmarks
        if landmarks is None:
            return

        h, w = frame.shape[:2]
        joint_status = result.evaluation.joint_status if result.evaluation else {}

        def pixel(name):
            x, y = landmarks.point(name)
            return int(x * w), int(y * h)

        def drawable(name):
            return landmarks.is_visible((name,), self.MIN_JOINT_VISIBILITY)

        for name_a, name_b in SKELETON_CONNECTIONS:
            if drawable(name_a) and drawable(name_b):
                cv2.line(frame, pixel(name_a), pixel(name_b), self.COLOR_SKELETON, 2)

        joints = {name for connection in SKELETON_CONNECTIONS for name in connection}
        for name in joints:
            if not drawable(name):
                continue
            status = joint_status.get(name, "good")
            color = self.COLOR_JOINT_ADJUST if status == "adjust" else self.COLOR_JOINT_GOOD
            cv2.circle(frame, pixel(name), 5, color, -1)

    def _feedback_color(self, result: FrameResult):
        if result.status == STATUS_NO_PERSON:
            return self.COLOR_FEEDBACK_ERROR
        if result.status in (STATUS_CORRECT, STATUS_COMPLETED) or result.event is not SessionEvent.NONE:
            return self.COLOR_FEEDBACK_GOOD
        return self.COLOR_FEEDBACK_WARN

    def _render_frame(self, frame: np.ndarray, result: FrameResult, fps: float) -> np.ndarray:
        """
        Render frame with session information.
        """
        output = frame.copy()
        h, w = output.shape[:2]
        session = result.session

        self._draw_skeleton(output, result)

        # Header
        title = f"{self.prescription.exercise.value} - Set {session['current_set']}/{session['sets']}"
        cv2.rectangle(output, (10, 10), (430, 110), (0, 0, 0), -1)
        cv2.putText(output, title, (20, 40), self.FONT, self.FONT_SCALE_LARGE,
                    self.COLOR_TEXT, self.FONT_THICKNESS)
        cv2.putText(output, f"Reps: {session['current_reps']}/{session['reps']}  "
                            f"Total: {session['total_reps']}",
                    (20, 70), self.FONT, self.FONT_SCALE_MEDIUM, self.COLOR_TEXT, 1)
        accuracy = result.evaluation.accuracy if result.evaluation else 0.0
        cv2.putText(output, f"Accuracy: {accuracy:.0f}%  FPS: {fps:.1f}",
                    (20, 95), self.FONT, self.FONT_SCALE_MEDIUM, (200, 200, 200), 1)

        # Progress bar
        bar_x1, bar_x2, bar_y = 10, w - 10, h - 90
        cv2.rectangle(output, (bar_x1, bar_y), (bar_x2, bar_y + 15), (60, 60, 60), -1)
        filled = bar_x1 + int((bar_x2 - bar_x1) * session["progress"] / 100.0)
        cv2.rectangle(output, (bar_x1, bar_y), (filled, bar_y + 15), self.COLOR_PROGRESS, -1)

        # Feedback box
        cv2.rectangle(output, (10, h - 65), (w - 10, h - 10), self._feedback_color(result), -1)
        # Hershey fonts cannot draw emoji
        text = result.feedback.encode("ascii", "ignore").decode().strip()
        cv2.putText(output, text, (25, h - 28), self.FONT, self.FONT_SCALE_LARGE,
                    self.COLOR_TEXT, self.FONT_THICKNESS)

        if self.patient is not None and self.clinic is not None:
            points = self.patient.points
            cv2.putText(output, f"Points: {points} ({format_currency(points)})",
                        (w - 300, 40), self.FONT, self.FONT_SCALE_MEDIUM, (0, 215, 255), 2)

        return output

    def run(self, display: bool = True, save_output: Optional[str] = None) -> FrameResult:
        """
        Main processing loop.

        Returns:
            The last FrameResult
        """
        writer = None
        if save_output:
            fourcc = cv2.VideoWriter_fourcc(*'mp4v')
            writer = cv2.VideoWriter(save_output, fourcc, self.streamer.fps,
                                     (self.streamer.width, self.streamer.height))
            print(f"💾 Saving output to: {save_output}")

        if display:
            cv2.namedWindow(self.WINDOW_NAME, cv2.WINDOW_NORMAL)
            cv2.resizeWindow(self.WINDOW_NAME, self.streamer.width, self.streamer.height)

        self.coach.start(self.prescription, self.patient)

        print("▶️  SESSION STARTED...")
        print("   • ESC = Exit")
        print("   • R = Restart session\n")

        frame_count = 0
        start_time = time.time()
        last_fps_time = time.time()
        fps_frames = 0
        current_fps = 0.0
        completed_at = None
        result = None

        self.streamer.start()

        try:
            while self.streamer.more():
                item = self.streamer.read()
                if item is None:
                    continue
                timestamp, frame = item

                frame_count += 1
                loop_start = time.time()

                result = self.coach.process_frame(frame, timestamp)
                self.processing_times.append(time.time() - loop_start)

                if result.feedback != self.last_feedback and result.event is not SessionEvent.NONE:
                    print(f"   {result.feedback}")
                self.last_feedback = result.feedback

                fps_frames += 1
                if time.time() - last_fps_time >= 1.0:
                    current_fps = fps_frames / (time.time() - last_fps_time)
                    fps_frames = 0
                    last_fps_time = time.time()

                output_frame = self._render_frame(frame, result, current_fps)

                if display:
                    cv2.imshow(self.WINDOW_NAME, output_frame)

                    key = cv2.waitKey(1) & 0xFF
                    if key == 27:  # ESC
                        print("\n⏹️  Stopped by user.")
                        break
                    elif key == ord('r') or key == ord('R'):
                        self.coach.reset()
                        completed_at = None

                if writer:
                    writer.write(output_frame)

                if self.coach.session.is_completed:
                    if completed_at is None:
                        completed_at = time.time()
                    elif time.time() - completed_at >= COMPLETION_HOLD_SECONDS or not display:
                        break

                if frame_count % 30 == 0:
                    avg_process = np.mean(self.processing_times) * 1000 if self.processing_times else 0
                    snapshot = result.session
                    print(f"Frame {frame_count:5d} | "
                          f"FPS: {current_fps:5.1f} | "
                          f"Process: {avg_process:5.1f}ms | "
                          f"Set {snapshot['current_set']}/{snapshot['sets']} | "
                          f"Reps {snapshot['current_reps']}/{snapshot['reps']} | "
                          f"Progress: {snapshot['progress']:5.1f}%")

        except KeyboardInterrupt:
            print("\n⏹️  Interrupted by user.")

        finally:
            total_time = time.time() - start_time
            avg_fps = frame_count / total_time if total_time > 0 else 0
            session = self.coach.session

            print("\n" + "=" * 70)
            print("📊 SESSION SUMMARY")
            print("=" * 70)
            print(f"Exercise: {self.prescription.exercise.value}")
            print(f"Total frames processed: {frame_count}")
            print(f"Average FPS: {avg_fps:.2f}")
            if session is not None:
                print(f"Reps counted: {session.total_reps}/{session.target_reps}")
                print(f"Completed: {'yes' if session.is_completed else 'no'}")
            if self.coach.points_earned:
                print(f"Points earned: +{self.coach.points_earned}")
            print("=" * 70 + "\n")

            self.coach.stop()
            self.streamer.stop()
            if writer:
                writer.release()
            if display:
                cv2.destroyAllWindows()

        return result


def _parse_source(value: str) -> Union[int, str]:
    return int(value) if value.isdigit() else value


def _prepare_patient(clinic: ClinicService, email: str) -> User:
    patient = clinic.find_patient(email)
    if patient is None:
        patient = clinic.create_patient_account(email, doctor_id=CLI_DOCTOR_ID)
    return patient


def main(argv=None):
    """Main entry point with command-line argument parsing."""
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding='utf-8')

    parser = argparse.ArgumentParser(
        description="RehabCoach: real-time exercise evaluation session"
    )

    parser.add_argument('--video', type=str, default=VIDEO_SOURCE,
                        help='Camera index or video file path')
    parser.add_argument('--model', type=str, default=MOVENET_MODEL_PATH,
                        help='Path to MoveNet MultiPose model (.onnx, .tflite or SavedModel)')
    parser.add_argument('--exercise', type=str, default=DEFAULT_EXERCISE,
                        choices=[e.value for e in ExerciseType],
                        help='Exercise to perform')
    parser.add_argument('--sets', type=int, default=DEFAULT_SETS,
                        help='Number of sets')
    parser.add_argument('--reps', type=int, default=DEFAULT_REPS,
                        help='Reps per set')
    parser.add_argument('--patient', type=str, default=None,
                        help='Patient email; enables rep logging and rewards')
    parser.add_argument('--store', type=str, default=None,
                        help='Clinic store pickle file (loaded if present, saved on exit)')
    parser.add_argument('--rep-interval', type=float, default=None,
                        help='Minimum seconds between counted reps')
    parser.add_argument('--require-release', action='store_true',
                        help='Require leaving the pose between reps')
    parser.add_argument('--output', type=str, default=None,
                        help='Optional: path to save output video')
    parser.add_argument('--no-display', action='store_true',
                        help='Run without displaying video window')
    parser.add_argument('--debug', action='store_true',
                        help='Print per-frame evaluation details')

    args = parser.parse_args(argv)

    try:
        clinic = None
        patient = None
        if args.patient or args.store:
            if args.store and os.path.exists(args.store):
                store = ClinicStore.load(args.store)
            else:
                store = ClinicStore()
            clinic = ClinicService(store)

        if clinic is not None and args.patient:
            patient = _prepare_patient(clinic, args.patient)
            prescription = clinic.assign_prescription(
                CLI_DOCTOR_ID, patient.uid, patient.email,
                args.exercise, args.sets, args.reps,
            )
        else:
            prescription = Prescription(
                id="sample-cli", doctor_id=None, patient_id=None, patient_email=None,
                exercise=args.exercise, sets=args.sets, reps=args.reps,
            )

        try:
            runner = SessionRunner(
                model_path=args.model,
                video_source=_parse_source(args.video),
                prescription=prescription,
                clinic=clinic,
                patient=patient,
                rep_interval=args.rep_interval,
                require_release=args.require_release,
                debug=args.debug,
            )
            runner.run(display=not args.no_display, save_output=args.output)
        finally:
            # Keep rep logs written before a failure
            if clinic is not None and args.store:
                clinic.store.save(args.store)

    except Exception as e:
        print(f"\n❌ Error: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
