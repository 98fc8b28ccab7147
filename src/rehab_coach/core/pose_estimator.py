"""
pose_estimator.py - MoveNet Pose Estimation
============================================
Handles MoveNet model loading and pose inference for the patient in front of the camera.
"""

import os
from typing import Optional

import cv2
import numpy as np

from .landmarks import LandmarkSet, MOVENET_LAYOUT


class PoseEstimator:
    """
    Handles MoveNet MultiPose model loading and inference.
    Returns landmarks for the most confident person in a frame.
    """

    # ===== CONFIGURATION =====
    INPUT_SIZE = 256
    MIN_DETECTION_SCORE = 0.3
    KEYPOINT_VALUES = len(MOVENET_LAYOUT) * 3
    SCORE_INDEX = 55

    def __init__(self, model_path: str):
        """
        Initialize the pose estimator with MoveNet model.

        Args:
            model_path: Path to a .onnx file, a .tflite file, or a SavedModel directory
        """
        if not os.path.exists(model_path):
            raise FileNotFoundError(f"MoveNet model not found at: {model_path}")

        self.model_path = model_path

        if model_path.endswith('.onnx'):
            import onnxruntime as ort
            print(f"🔹 [PoseEstimator] Loading MoveNet MultiPose ONNX model: {model_path}")
            providers = ['CPUExecutionProvider']
            self.ort_session = ort.InferenceSession(model_path, providers=providers)
            self.model_type = 'onnx'
        elif model_path.endswith('.tflite'):
            import tensorflow as tf
            print(f"🔹 [PoseEstimator] Loading MoveNet MultiPose TFLite model: {model_path}")
            self.interpreter = tf.lite.Interpreter(model_path=model_path)
            self.interpreter.allocate_tensors()
            self.input_details = self.interpreter.get_input_details()
            self.output_details = self.interpreter.get_output_details()
            self.model_type = 'tflite'
        else:
            import tensorflow as tf
            print(f"🔹 [PoseEstimator] Loading MoveNet MultiPose SavedModel: {model_path}")
            self._tf = tf
            self.model = tf.saved_model.load(model_path)
            self.movenet = self.model.signatures['serving_default']
            self.model_type = 'tf'

        print("✅ [PoseEstimator] Model loaded successfully!")

    def _preprocess_frame(self, frame: np.ndarray) -> np.ndarray:
        """
        Preprocess frame for MoveNet inference.

        Args:
            frame: BGR image from OpenCV

        Returns:
            Preprocessed array ready for inference
        """
        img = cv2.resize(frame, (self.INPUT_SIZE, self.INPUT_SIZE))
        img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)

        if self.model_type == 'tflite':
            return np.expand_dims(img.astype(self.input_details[0]['dtype']), axis=0)
        return np.expand_dims(img.astype(np.int32), axis=0)

    def infer_poses(self, frame: np.ndarray) -> np.ndarray:
        """
        Run MoveNet inference on frame.

        Returns:
            Array (6, 56): per person 17 x [y, x, score], then [ymin, xmin, ymax, xmax, score]
        """
        input_data = self._preprocess_frame(frame)

        if self.model_type == 'onnx':
            input_name = self.ort_session.get_inputs()[0].name
            output = self.ort_session.run(None, {input_name: input_data})[0][0]
        elif self.model_type == 'tflite':
            self.interpreter.set_tensor(self.input_details[0]['index'], input_data)
            self.interpreter.invoke()
            output = self.interpreter.get_tensor(self.output_details[0]['index'])[0]
        else:
            input_tensor = self._tf.convert_to_tensor(input_data)
            output = self.movenet(input_tensor)['output_0'].numpy()[0]

        return output

    @classmethod
    def select_primary(cls, persons: np.ndarray) -> Optional[LandmarkSet]:
        """Pick the highest-scoring detection scoring at least MIN_DETECTION_SCORE."""
        best = None
        best_score = -1.0
        for person_data in persons:
            score = float(person_data[cls.SCORE_INDEX])
            if score < cls.MIN_DETECTION_SCORE:
                continue
            if score > best_score:
                best = person_data
                best_score = score

        if best is None:
            return None

        keypoints = np.asarray(best[:cls.KEYPOINT_VALUES]).reshape((len(MOVENET_LAYOUT), 3))
        return LandmarkSet.from_movenet(keypoints)

    def detect_primary(self, frame: np.ndarray) -> Optional[LandmarkSet]:
        """
        Detect the patient in a frame.

        Args:
            frame: BGR image from OpenCV

        Returns:
            LandmarkSet of the most confident person, or None if nobody is detected
        """
        return self.select_primary(self.infer_poses(frame))
