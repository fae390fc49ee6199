# emocam/boot.py
"""
One-shot boot sequence: OpenCV -> Haar cascade -> emotion model + labels.

Each step updates the status line; the first failure is final (no retry) and
leaves the sequencer in the Error phase. Camera start is a separate,
user-triggered action that may be retried after a denial.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional
import logging

from emocam.assets import fetch_asset, parse_labels
from emocam.camera import CameraAccessDenied, FrameSource
from emocam.classifier import EmotionClassifier, load_classifier
from emocam.config import Settings
from emocam.models import BootPhase, DisplayState
from emocam.runtime import FaceLocator, VisionRuntime, load_runtime

logger = logging.getLogger(__name__)


class BootError(RuntimeError):
    """A boot step failed; the pipeline cannot start this session."""


@dataclass
class PipelineDependencies:
    """Everything an iteration reads. Each field is set once, during boot."""
    runtime: Optional[VisionRuntime] = None
    locator: Optional[FaceLocator] = None
    classifier: Optional[EmotionClassifier] = None
    labels: Optional[List[str]] = field(default=None)

    def populate(self, name: str, value) -> None:
        if getattr(self, name) is not None:
            raise RuntimeError(f"Pipeline dependency '{name}' is already set")
        setattr(self, name, value)

    def is_ready(self) -> bool:
        return (self.runtime is not None and self.locator is not None
                and self.classifier is not None and self.labels is not None)


class BootSequencer:
    def __init__(self, settings: Settings,
                 display: Optional[DisplayState] = None,
                 on_status: Optional[Callable[[DisplayState], None]] = None):
        self.s = settings
        self.display = display if display is not None else DisplayState()
        self.deps = PipelineDependencies()
        self._on_status = on_status
        self._ran = False

    @property
    def phase(self) -> BootPhase:
        return self.display.phase

    def _enter(self, phase: BootPhase, status: str) -> None:
        self.display.phase = phase
        self.display.status = status
        logger.info(f"[boot] {phase}: {status}")
        if self._on_status is not None:
            self._on_status(self.display)

    # ---- steps ----
    def _load_detector(self) -> FaceLocator:
        runtime = self.deps.runtime
        location = self.s.CASCADE_URL or runtime.default_cascade_path()
        data = fetch_asset(location, timeout=self.s.FETCH_TIMEOUT)
        locator = runtime.create_detector()
        if not locator.load(data):
            raise RuntimeError(f"Haar cascade load() failed for {location}")
        return locator

    def _load_classifier(self) -> tuple[EmotionClassifier, List[str]]:
        model = fetch_asset(self.s.MODEL_URL, timeout=self.s.FETCH_TIMEOUT)
        classifier = load_classifier(model, self.s.execution_providers())
        labels = parse_labels(fetch_asset(self.s.LABELS_URL, timeout=self.s.FETCH_TIMEOUT))
        return classifier, labels

    def run(self) -> PipelineDependencies:
        """
        Execute the boot steps in order.

        Raises:
            BootError: a step failed; the display shows the failure.
            RuntimeError: called more than once.
        """
        if self._ran:
            raise RuntimeError("Boot sequence already executed")
        self._ran = True

        try:
            self._enter("Initializing", "Loading OpenCV...")
            self.deps.populate("runtime", load_runtime(self.s))

            self._enter("LoadingDetector", "Loading Haar Cascade...")
            self.deps.populate("locator", self._load_detector())

            self._enter("LoadingClassifier", "Loading emotion model...")
            classifier, labels = self._load_classifier()
            self.deps.populate("classifier", classifier)
            self.deps.populate("labels", labels)
        except Exception as e:
            logger.exception(f"[boot] failed during {self.phase}")
            self._enter("Error", f"Initialization Failed: {e}")
            raise BootError(str(e)) from e

        self._enter("Ready", "Ready to Start")
        return self.deps

    def start_camera(self, source: FrameSource) -> bool:
        """
        User-triggered camera start.

        Returns False when access is denied; the action may be retried.
        """
        if self.phase not in ("Ready", "CameraDenied"):
            raise RuntimeError(f"Camera cannot start in phase {self.phase}")
        self._enter(self.phase, "Requesting camera access...")
        try:
            source.open()
        except CameraAccessDenied:
            logger.exception("[boot] camera access denied")
            self._enter("CameraDenied", "Camera access denied")
            return False
        self.display.streaming = True
        self._enter("Streaming", "System Active")
        return True
