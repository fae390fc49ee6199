"""
Camera frame source (OpenCV VideoCapture).
"""
from __future__ import annotations
import logging
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class CameraAccessDenied(RuntimeError):
    """The camera could not be opened (permission denied or device busy)."""


class FrameSource:
    def __init__(self, index: int = 0, width: int = 0, height: int = 0):
        self.index = int(index)
        self.width = int(width)
        self.height = int(height)
        self._cap = None

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    def open(self) -> None:
        if self._cap is not None:
            return
        cap = cv2.VideoCapture(self.index)
        if not cap.isOpened():
            cap.release()
            raise CameraAccessDenied(f"Could not open camera index {self.index}")
        if self.width > 0:
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        if self.height > 0:
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._cap = cap
        logger.debug(f"[camera] opened index={self.index}")

    def read(self) -> Optional[np.ndarray]:
        """Latest frame (read-only), or None while the device has nothing to give."""
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None
        frame.setflags(write=False)
        return frame

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.debug(f"[camera] released index={self.index}")
