"""
OpenCV vision runtime: grayscale conversion, Haar face locator, per-frame handle scope.

The locator and intermediate buffers are touched on every frame; everything an
iteration allocates is tracked in a HandleScope and released when the
iteration ends, whatever the outcome.
"""
from __future__ import annotations
import logging
import os
import tempfile
from typing import Any, List

import cv2
import numpy as np

from emocam.config import Settings
from emocam.models import DetectedRegion

logger = logging.getLogger(__name__)

FRONTAL_FACE_CASCADE = "haarcascade_frontalface_default.xml"


class HandleScope:
    """Tracks buffers allocated during one iteration and releases them on exit."""
    def __init__(self):
        self._handles: List[Any] = []
        self.released = 0

    def track(self, handle):
        self._handles.append(handle)
        return handle

    @property
    def open_handles(self) -> int:
        return len(self._handles)

    def close(self):
        while self._handles:
            handle = self._handles.pop()
            release = getattr(handle, "release", None)
            if callable(release):
                release()
            self.released += 1

    def __enter__(self) -> "HandleScope":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class FaceLocator:
    """Haar cascade wrapper: load(bytes) then detect(gray)."""
    def __init__(self, scale_factor: float = 1.1, min_neighbors: int = 3):
        self.scale_factor = float(scale_factor)
        self.min_neighbors = int(min_neighbors)
        self._cascade = cv2.CascadeClassifier()
        self.loaded = False

    def load(self, data: bytes) -> bool:
        """Load cascade XML bytes. Returns False when OpenCV rejects them."""
        # CascadeClassifier only loads from a path
        fd, path = tempfile.mkstemp(suffix=".xml", prefix="cascade_")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            try:
                self.loaded = bool(self._cascade.load(path)) and not self._cascade.empty()
            except cv2.error:
                logger.exception("[runtime] OpenCV rejected the cascade data")
                self.loaded = False
        finally:
            try:
                os.unlink(path)
            except OSError:
                logger.warning(f"[runtime] failed to cleanup cascade tmp file: {path}")
        logger.debug(f"[runtime] cascade loaded={self.loaded} bytes={len(data)}")
        return self.loaded

    def detect(self, gray: np.ndarray, scope: HandleScope) -> list[DetectedRegion]:
        if not self.loaded:
            raise RuntimeError("Face locator used before a cascade was loaded")
        faces = scope.track(self._cascade.detectMultiScale(
            gray, self.scale_factor, self.min_neighbors, 0, (0, 0), (0, 0)
        ))
        regions: list[DetectedRegion] = []
        for (x, y, w, h) in faces:
            if w <= 0 or h <= 0:
                continue
            regions.append(DetectedRegion(x=max(0, int(x)), y=max(0, int(y)), width=int(w), height=int(h)))
        return regions


class VisionRuntime:
    """Handle on an initialized OpenCV build."""
    def __init__(self, settings: Settings):
        self.s = settings

    def to_grayscale(self, frame: np.ndarray) -> np.ndarray:
        if frame.ndim == 2:
            return frame.copy()
        if frame.shape[2] == 4:
            return cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)

    def create_detector(self) -> FaceLocator:
        return FaceLocator(self.s.DETECT_SCALE_FACTOR, self.s.DETECT_MIN_NEIGHBORS)

    def default_cascade_path(self) -> str:
        return os.path.join(cv2.data.haarcascades, FRONTAL_FACE_CASCADE)

    def scope(self) -> HandleScope:
        return HandleScope()


def load_runtime(settings: Settings) -> VisionRuntime:
    """
    Initialize OpenCV for the pipeline.

    Raises:
        RuntimeError: the installed OpenCV build lacks cascade support.
    """
    if not hasattr(cv2, "CascadeClassifier"):
        raise RuntimeError("OpenCV build has no CascadeClassifier (objdetect module missing)")
    cv2.setUseOptimized(True)
    if settings.CV_THREADS >= 0:
        cv2.setNumThreads(settings.CV_THREADS)
    logger.debug(f"[runtime] OpenCV {cv2.__version__} ready threads={cv2.getNumThreads()}")
    return VisionRuntime(settings)
