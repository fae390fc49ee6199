# emocam/pipeline.py
"""
Per-frame pipeline and its refresh-driven scheduler.

process_frame is the loop body: detect -> select -> normalize -> classify ->
postprocess -> plan overlay. PipelineScheduler runs it once per display refresh.
"""
from __future__ import annotations
from typing import Callable, Optional
import logging

import numpy as np

from emocam.boot import PipelineDependencies
from emocam.camera import FrameSource
from emocam.models import DisplayState, FrameOutcome
from emocam.regions import select_region
from emocam.runtime import HandleScope
from emocam.scores import postprocess
from emocam.tensor import INPUT_SIZE, crop_region, normalize_region
from emocam.visual import draw_overlay, plan_overlay

logger = logging.getLogger(__name__)


def process_frame(deps: PipelineDependencies, frame: np.ndarray, scope: HandleScope,
                  input_size: int = INPUT_SIZE) -> FrameOutcome:
    """
    Run detection and classification on one frame.

    Does not touch any surface: returns detections, the prediction for the
    largest face (if any) and the overlay commands to draw.
    """
    gray = scope.track(deps.runtime.to_grayscale(frame))
    regions = deps.locator.detect(gray, scope)
    selected = select_region(regions)

    prediction = None
    if selected is not None:
        chip = crop_region(frame, selected)
        tensor = scope.track(normalize_region(chip, input_size))
        logits = deps.classifier.run(tensor)
        prediction = postprocess(logits, deps.labels)

    return FrameOutcome(
        regions=regions,
        selected=selected,
        prediction=prediction,
        commands=plan_overlay(regions, selected, prediction),
    )


class PipelineScheduler:
    """Refresh-driven loop; stops for good on the first iteration error."""
    def __init__(self, deps: PipelineDependencies, display: DisplayState,
                 source: Optional[FrameSource] = None, input_size: int = INPUT_SIZE):
        self.deps = deps
        self.display = display
        self.source = source
        self.input_size = input_size
        self.surface: Optional[np.ndarray] = None
        self.last_outcome: Optional[FrameOutcome] = None
        self.failed = False
        self.frames_processed = 0
        self.skipped = 0

    def _ready_frame(self) -> Optional[np.ndarray]:
        if not self.deps.is_ready() or self.source is None:
            return None
        frame = self.source.read()
        if frame is None or frame.ndim < 2 or frame.shape[0] == 0 or frame.shape[1] == 0:
            return None
        return frame

    def tick(self) -> bool:
        """One iteration. Returns True when the loop should be rescheduled."""
        if self.failed:
            return False
        try:
            frame = self._ready_frame()
            if frame is None:
                self.skipped += 1
                return True

            surface = frame.copy()
            with self.deps.runtime.scope() as scope:
                outcome = process_frame(self.deps, frame, scope, self.input_size)
                draw_overlay(surface, outcome.commands)

            self.surface = surface
            self.last_outcome = outcome
            if outcome.prediction is not None:
                self.display.label = outcome.prediction.label
                self.display.confidence = outcome.prediction.confidence
            self.frames_processed += 1
            logger.debug(f"[scheduler] frame={self.frames_processed} faces={len(outcome.regions)} "
                         f"label={outcome.prediction.label if outcome.prediction else None}")
            return True
        except Exception as e:
            logger.exception("[scheduler] iteration failed; stopping")
            self.display.status = f"Error: {e}"
            self.failed = True
            return False

    def run(self, on_refresh: Callable[[], bool]) -> None:
        """
        Tick once per display refresh until an iteration fails or on_refresh
        reports the host window is gone.
        """
        logger.debug("[scheduler] loop start")
        while self.tick():
            if not on_refresh():
                break
        logger.debug(f"[scheduler] loop end processed={self.frames_processed} "
                     f"skipped={self.skipped} failed={self.failed}")
