import cv2
import numpy as np
import pytest

from emocam.boot import PipelineDependencies
from emocam.config import Settings
from emocam.models import DetectedRegion
from emocam.runtime import VisionRuntime

LABELS = ["happy", "sad", "angry"]


class ContourLocator:
    """Stands in for the Haar cascade: every bright blob is a face."""
    def __init__(self):
        self.calls = 0

    def load(self, data):
        return True

    def detect(self, gray, scope):
        self.calls += 1
        _, mask = cv2.threshold(gray, 127, 255, cv2.THRESH_BINARY)
        scope.track(mask)
        contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        out = []
        for c in contours:
            x, y, w, h = cv2.boundingRect(c)
            out.append(DetectedRegion(x=x, y=y, width=w, height=h))
        return sorted(out, key=lambda r: (r.y, r.x))


class StubClassifier:
    input_names = ["images"]
    output_names = ["output0"]

    def __init__(self, logits=(2.0, 0.0, 0.0), error=None):
        self.logits = logits
        self.error = error
        self.calls = 0
        self.last_input = None

    def run(self, tensor):
        self.calls += 1
        self.last_input = tensor
        if self.error is not None:
            raise self.error
        return np.asarray(self.logits, dtype=np.float32)


class DummySource:
    """Frame source replaying a fixed frame."""
    def __init__(self, frame=None, deny_times=0):
        self.frame = frame
        self.deny_times = deny_times
        self.reads = 0
        self.opened = False
        self.released = False

    def open(self):
        from emocam.camera import CameraAccessDenied
        if self.deny_times > 0:
            self.deny_times -= 1
            raise CameraAccessDenied("denied")
        self.opened = True

    def read(self):
        self.reads += 1
        return self.frame

    def release(self):
        self.released = True


def draw_face(frame, x, y, w, h):
    cv2.rectangle(frame, (x, y), (x + w - 1, y + h - 1), (255, 255, 255), cv2.FILLED)
    return frame


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def face_frame():
    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    return draw_face(frame, 100, 60, 100, 120)


@pytest.fixture
def deps(settings):
    return PipelineDependencies(
        runtime=VisionRuntime(settings),
        locator=ContourLocator(),
        classifier=StubClassifier(),
        labels=list(LABELS),
    )
