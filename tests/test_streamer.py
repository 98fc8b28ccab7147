"""
Tests for the threaded camera/video reader
"""

from queue import Queue

import cv2
import numpy as np
import pytest

from rehab_coach.core.streamer import CameraStream


FRAME_COUNT = 10
WIDTH, HEIGHT = 64, 48


@pytest.fixture
def video_path(tmp_path):
    path = str(tmp_path / "session.avi")
    writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*'MJPG'), 10.0, (WIDTH, HEIGHT))
    for i in range(FRAME_COUNT):
        frame = np.full((HEIGHT, WIDTH, 3), i * 20, dtype=np.uint8)
        writer.write(frame)
    writer.release()
    return path


def _read_all(stream):
    items = []
    while stream.more():
        item = stream.read()
        if item is not None:
            items.append(item)
    return items


def test_bad_source():
    with pytest.raises(RuntimeError):
        CameraStream("/nonexistent/session.avi")


def test_video_file_frames_and_timestamps(video_path):
    stream = CameraStream(video_path)
    assert not stream.live
    assert (stream.width, stream.height) == (WIDTH, HEIGHT)

    stream.start()
    items = _read_all(stream)
    stream.stop()

    assert len(items) == FRAME_COUNT
    timestamps = [timestamp for timestamp, _ in items]
    assert timestamps == sorted(timestamps)
    assert timestamps[-1] > timestamps[0]
    # 10 FPS file: video clock, not wall clock
    assert timestamps[-1] < 5.0

    _, frame = items[0]
    assert frame.shape == (HEIGHT, WIDTH, 3)
    assert not stream.more()


def test_latest_frame_replaces_older(video_path):
    stream = CameraStream(video_path)
    stream.queue = Queue(maxsize=1)
    stream._put_latest((1.0, "older"))
    stream._put_latest((2.0, "newer"))
    assert stream.queue.qsize() == 1
    assert stream.read() == (2.0, "newer")
    stream.stop()
