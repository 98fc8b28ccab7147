"""
streamer.py - Threaded Camera Stream
====================================
Reads frames from a camera or video file in a separate thread so pose evaluation never blocks on I/O.
"""

import threading
import time
from queue import Queue, Empty, Full
from typing import Optional, Tuple, Union

import cv2
import numpy as np


class CameraStream:
    """
    Reads timestamped frames from a video source using a separate thread.

    Live cameras keep only the newest frame so evaluation always runs on
    what the patient is doing now. Video files keep every frame and are
    timestamped with the file's own clock, so rep debouncing follows video time.
    """

    def __init__(self, source: Union[int, str], queue_size: int = 128):
        self.source = source
        self.cap = cv2.VideoCapture(source)

        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open video source: {source}")

        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.fps = self.cap.get(cv2.CAP_PROP_FPS) or 30.0

        self.live = isinstance(source, int)
        self.queue = Queue(maxsize=1 if self.live else queue_size)
        self.stopped = False
        self.thread = None

    def start(self):
        """Start the background frame reading thread."""
        if self.thread is not None:
            return self

        self.stopped = False
        self.thread = threading.Thread(target=self._update, name="CameraStreamThread", daemon=True)
        self.thread.start()
        return self

    def _timestamp(self) -> float:
        if self.live:
            return time.time()
        return self.cap.get(cv2.CAP_PROP_POS_MSEC) / 1000.0

    def _put_latest(self, item):
        try:
            self.queue.put_nowait(item)
        except Full:
            try:
                self.queue.get_nowait()
            except Empty:
                pass
            self.queue.put_nowait(item)

    def _update(self):
        """Internal loop to read frames from source."""
        while not self.stopped:
            if not self.live and self.queue.full():
                time.sleep(0.001)
                continue

            ret, frame = self.cap.read()
            if not ret:
                self.stopped = True
                break

            item = (self._timestamp(), frame)
            if self.live:
                self._put_latest(item)
            else:
                self.queue.put(item)

        self.cap.release()

    def read(self) -> Optional[Tuple[float, np.ndarray]]:
        """Return the next (timestamp, frame) pair, or None if nothing arrived in time."""
        try:
            return self.queue.get(timeout=1.0)
        except Empty:
            return None

    def more(self) -> bool:
        """Check if there are more frames in the queue or if still running."""
        return not self.queue.empty() or not self.stopped

    def stop(self):
        """Stop the background thread and release resources."""
        self.stopped = True
        if self.thread:
            self.thread.join(timeout=2.0)
        if self.cap.isOpened():
            self.cap.release()
