# emocam/live.py
"""
Live (real-time) emotion window.

Boots the pipeline, waits for the user to start the camera, then shows every
processed frame next to a small dashboard:
- Status pill (green dot while streaming)
- Detected emotion + confidence bar
Keys: 's' / space start the camera, 'q' / Esc quit.
"""

from __future__ import annotations

import logging
from typing import Optional

import cv2
import numpy as np

from emocam.boot import BootError, BootSequencer
from emocam.camera import FrameSource
from emocam.config import Settings
from emocam.models import DisplayState
from emocam.pipeline import PipelineScheduler
from emocam.visual import emotion_style

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Window layout
# -----------------------------------------------------------------------------
PANEL_WIDTH = 280
PLACEHOLDER_SIZE = (480, 640)      # (h, w) shown before the camera streams
BG_COLOR = (42, 23, 15)            # #0f172a
MUTED_COLOR = (184, 163, 148)
STREAMING_DOT = (94, 197, 34)
IDLE_DOT = (8, 179, 234)
BAR_BG = (85, 65, 51)

QUIT_KEYS = (ord("q"), 27)
START_KEYS = (ord("s"), ord(" "))


def _put(img, text, org, scale=0.5, color=(255, 255, 255), thickness=1):
    cv2.putText(img, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)


def compose_dashboard(surface: Optional[np.ndarray], display: DisplayState,
                      panel_width: int = PANEL_WIDTH) -> np.ndarray:
    """Render the video area plus the side panel into one BGR image."""
    if surface is None:
        video = np.full((*PLACEHOLDER_SIZE, 3), BG_COLOR, dtype=np.uint8)
        h, w = PLACEHOLDER_SIZE
        _put(video, "Waiting for camera input...", (w // 2 - 130, h // 2), 0.6, MUTED_COLOR)
    else:
        video = surface.copy()
        h, w = video.shape[:2]

    # status pill
    dot = STREAMING_DOT if display.streaming else IDLE_DOT
    (tw, _), _ = cv2.getTextSize(display.status, cv2.FONT_HERSHEY_SIMPLEX, 0.45, 1)
    cv2.rectangle(video, (10, 10), (40 + tw, 36), (0, 0, 0), cv2.FILLED)
    cv2.circle(video, (22, 23), 5, dot, cv2.FILLED)
    _put(video, display.status, (32, 28), 0.45)

    panel = np.full((h, panel_width, 3), BG_COLOR, dtype=np.uint8)
    accent = emotion_style(display.label if display.label != "-" else None)
    _put(panel, "DETECTED EMOTION", (16, 32), 0.45, MUTED_COLOR)
    name = "Waiting..." if display.label == "-" else display.label.capitalize()
    _put(panel, name, (16, 72), 0.9, accent, 2)

    conf = max(0.0, min(1.0, float(display.confidence)))
    _put(panel, "Confidence", (16, 110), 0.45, MUTED_COLOR)
    _put(panel, f"{conf * 100:.1f}%", (panel_width - 80, 110), 0.45, MUTED_COLOR)
    bar_x0, bar_x1 = 16, panel_width - 16
    cv2.rectangle(panel, (bar_x0, 120), (bar_x1, 128), BAR_BG, cv2.FILLED)
    fill = bar_x0 + int((bar_x1 - bar_x0) * conf)
    if fill > bar_x0:
        cv2.rectangle(panel, (bar_x0, 120), (fill, 128), accent, cv2.FILLED)

    hint = "q: quit" if display.streaming else "s: start camera   q: quit"
    _put(panel, hint, (16, h - 16), 0.4, MUTED_COLOR)
    return np.hstack([video, panel])


# -----------------------------------------------------------------------------
# LiveApp: boot -> start action -> scheduler loop
# -----------------------------------------------------------------------------
class LiveApp:
    def __init__(self, settings: Settings, source: Optional[FrameSource] = None):
        self.s = settings
        self.display = DisplayState()
        self.boot = BootSequencer(settings, self.display)
        self.source = source if source is not None else FrameSource(
            settings.CAMERA_INDEX, settings.FRAME_WIDTH, settings.FRAME_HEIGHT
        )
        self.scheduler: Optional[PipelineScheduler] = None

    def _show(self, surface: Optional[np.ndarray]) -> int:
        cv2.imshow(self.s.WINDOW_NAME, compose_dashboard(surface, self.display))
        return cv2.waitKey(1) & 0xFF

    def _hold(self, surface: Optional[np.ndarray] = None) -> None:
        """Keep the last picture (e.g. an error) on screen until the user quits."""
        while self._show(surface) not in QUIT_KEYS:
            pass

    def _wait_for_start(self) -> bool:
        pending = self.s.AUTOSTART
        while True:
            if pending and self.boot.start_camera(self.source):
                return True
            key = self._show(None)
            if key in QUIT_KEYS:
                return False
            pending = key in START_KEYS

    def _on_refresh(self) -> bool:
        return self._show(self.scheduler.surface) not in QUIT_KEYS

    def run(self) -> int:
        """Returns a process exit code: 0 on a clean quit, 1 after a fatal error."""
        try:
            try:
                self.boot.run()
            except BootError:
                self._hold()
                return 1

            if not self._wait_for_start():
                return 0

            self.scheduler = PipelineScheduler(self.boot.deps, self.display, self.source, self.s.INPUT_SIZE)
            self.scheduler.run(self._on_refresh)
            if self.scheduler.failed:
                self._hold(self.scheduler.surface)
                return 1
            return 0
        finally:
            self.source.release()
            cv2.destroyAllWindows()


def run_live_app(settings: Settings, camera_index: Optional[int] = None) -> int:
    """Open the live emotion window. Press 'q' to quit."""
    if camera_index is not None:
        settings = settings.model_copy(update={"CAMERA_INDEX": camera_index})
    return LiveApp(settings).run()
