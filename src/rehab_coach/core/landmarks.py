"""
landmarks.py - Skeletal Landmark Sets
=====================================
Named access to per-frame pose landmarks, independent of the model that produced them.
"""

from typing import Any, Dict, Iterable, List, Sequence, Tuple

import numpy as np


# MediaPipe Pose (33 points), as sent by browser clients
MEDIAPIPE_LAYOUT: Dict[str, int] = {
    "nose": 0,
    "left_eye_inner": 1, "left_eye": 2, "left_eye_outer": 3,
    "right_eye_inner": 4, "right_eye": 5, "right_eye_outer": 6,
    "left_ear": 7, "right_ear": 8,
    "mouth_left": 9, "mouth_right": 10,
    "left_shoulder": 11, "right_shoulder": 12,
    "left_elbow": 13, "right_elbow": 14,
    "left_wrist": 15, "right_wrist": 16,
    "left_pinky": 17, "right_pinky": 18,
    "left_index": 19, "right_index": 20,
    "left_thumb": 21, "right_thumb": 22,
    "left_hip": 23, "right_hip": 24,
    "left_knee": 25, "right_knee": 26,
    "left_ankle": 27, "right_ankle": 28,
    "left_heel": 29, "right_heel": 30,
    "left_foot_index": 31, "right_foot_index": 32,
}

# MoveNet MultiPose (17 points)
MOVENET_LAYOUT: Dict[str, int] = {
    "nose": 0,
    "left_eye": 1, "right_eye": 2,
    "left_ear": 3, "right_ear": 4,
    "left_shoulder": 5, "right_shoulder": 6,
    "left_elbow": 7, "right_elbow": 8,
    "left_wrist": 9, "right_wrist": 10,
    "left_hip": 11, "right_hip": 12,
    "left_knee": 13, "right_knee": 14,
    "left_ankle": 15, "right_ankle": 16,
}

# Body skeleton for drawing, shared by both layouts
SKELETON_CONNECTIONS: List[Tuple[str, str]] = [
    ("left_shoulder", "right_shoulder"),
    ("left_shoulder", "left_elbow"), ("left_elbow", "left_wrist"),
    ("right_shoulder", "right_elbow"), ("right_elbow", "right_wrist"),
    ("left_shoulder", "left_hip"), ("right_shoulder", "right_hip"),
    ("left_hip", "right_hip"),
    ("left_hip", "left_knee"), ("left_knee", "left_ankle"),
    ("right_hip", "right_knee"), ("right_knee", "right_ankle"),
]


def _field(landmark: Any, name: str, default: float = None) -> float:
    if isinstance(landmark, dict):
        value = landmark.get(name, default)
    else:
        value = getattr(landmark, name, default)
    if value is None:
        if default is None:
            raise ValueError(f"Landmark is missing required field '{name}'")
        return default
    return float(value)


class LandmarkSet:
    """
    One person's landmarks for one frame.

    Stores an (N, 4) array of [x, y, z, visibility] in normalized image
    coordinates (y grows downwards) plus a joint-name -> row layout.
    """

    def __init__(self, data: np.ndarray, layout: Dict[str, int]):
        data = np.asarray(data, dtype=float)
        expected = max(layout.values()) + 1
        if data.ndim != 2 or data.shape != (expected, 4):
            raise ValueError(f"Expected landmark array of shape ({expected}, 4), got {data.shape}")
        self.data = data
        self.layout = layout

    @classmethod
    def from_array(cls, data: np.ndarray, layout: Dict[str, int] = MEDIAPIPE_LAYOUT) -> "LandmarkSet":
        return cls(data, layout)

    @classmethod
    def from_mediapipe(cls, landmarks: Sequence[Any]) -> "LandmarkSet":
        """
        Build from MediaPipe pose landmarks.

        Args:
            landmarks: 33 items, each a dict or an object exposing x, y, z, visibility.
                       Missing z defaults to 0 and missing visibility to 1.

        Returns:
            LandmarkSet using MEDIAPIPE_LAYOUT
        """
        landmarks = list(landmarks)
        if len(landmarks) != len(MEDIAPIPE_LAYOUT):
            raise ValueError(f"Expected {len(MEDIAPIPE_LAYOUT)} MediaPipe landmarks, got {len(landmarks)}")

        rows = [
            [_field(lm, "x"), _field(lm, "y"), _field(lm, "z", 0.0), _field(lm, "visibility", 1.0)]
            for lm in landmarks
        ]
        return cls(np.array(rows, dtype=float), MEDIAPIPE_LAYOUT)

    @classmethod
    def from_movenet(cls, keypoints: np.ndarray) -> "LandmarkSet":
        """
        Build from MoveNet keypoints.

        Args:
            keypoints: Array (17, 3) with rows [y, x, score]

        Returns:
            LandmarkSet using MOVENET_LAYOUT
        """
        keypoints = np.asarray(keypoints, dtype=float)
        if keypoints.shape != (len(MOVENET_LAYOUT), 3):
            raise ValueError(f"Expected MoveNet keypoints of shape (17, 3), got {keypoints.shape}")

        data = np.zeros((len(MOVENET_LAYOUT), 4), dtype=float)
        data[:, 0] = keypoints[:, 1]
        data[:, 1] = keypoints[:, 0]
        data[:, 3] = keypoints[:, 2]
        return cls(data, MOVENET_LAYOUT)

    def __len__(self) -> int:
        return self.data.shape[0]

    def has(self, name: str) -> bool:
        return name in self.layout

    def _row(self, name: str) -> np.ndarray:
        if name not in self.layout:
            raise KeyError(f"Unknown joint '{name}' for this landmark layout")
        return self.data[self.layout[name]]

    def point(self, name: str) -> Tuple[float, float]:
        """(x, y) of a joint."""
        row = self._row(name)
        return float(row[0]), float(row[1])

    def visibility(self, name: str) -> float:
        return float(self._row(name)[3])

    def is_visible(self, names: Iterable[str], min_visibility: float = 0.5) -> bool:
        """True if every named joint exists, has finite values and is confidently visible."""
        for name in names:
            if name not in self.layout:
                return False
            row = self._row(name)
            if not np.all(np.isfinite(row[[0, 1, 3]])) or row[3] <= min_visibility:
                return False
        return True

    def to_list(self) -> List[Dict]:
        """Serializable form, ordered by joint index."""
        names = sorted(self.layout, key=self.layout.get)
        return [
            {
                "name": name,
                "x": float(self.data[idx, 0]),
                "y": float(self.data[idx, 1]),
                "z": float(self.data[idx, 2]),
                "visibility": float(self.data[idx, 3]),
            }
            for name, idx in ((n, self.layout[n]) for n in names)
        ]
