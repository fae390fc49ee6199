
import math
import numpy as np
import pytest
from emocam.boot import PipelineDependencies
from emocam.models import DisplayState
from emocam.pipeline import PipelineScheduler, process_frame
from emocam.runtime import HandleScope, VisionRuntime
from conftest import ContourLocator, DummySource, StubClassifier, draw_face

class RecordingRuntime(VisionRuntime):
    def __init__(self, settings):
        super().__init__(settings)
        self.scopes = []
    def scope(self):
        sc = HandleScope()
        self.scopes.append(sc)
        return sc

def test_skip_when_classifier_missing(deps, face_frame):
    deps.classifier = None
    src = DummySource(face_frame)
    sched = PipelineScheduler(deps, DisplayState(), src)
    assert sched.tick() is True
    assert deps.locator.calls == 0 and src.reads == 0
    assert sched.skipped == 1 and sched.surface is None

def test_skip_without_source_or_pixels(deps):
    sched = PipelineScheduler(deps, DisplayState(), None)
    assert sched.tick() is True
    sched.source = DummySource(np.zeros((0, 0, 3), dtype=np.uint8))
    assert sched.tick() is True
    sched.source = DummySource(None)
    assert sched.tick() is True
    assert deps.locator.calls == 0 and sched.skipped == 3

def test_end_to_end_single_face(deps, face_frame):
    display = DisplayState(status="System Active")
    sched = PipelineScheduler(deps, display, DummySource(face_frame))
    assert sched.tick() is True

    assert display.label == "happy"
    assert display.confidence == pytest.approx(math.exp(2) / (math.exp(2) + 2), abs=1e-5)
    assert display.status == "System Active"
    tensor = deps.classifier.last_input
    assert tensor.shape == (3, 64, 64) and np.allclose(tensor, 1.0)
    out = sched.last_outcome
    assert len(out.regions) == 1
    assert (out.selected.x, out.selected.y, out.selected.width, out.selected.height) == (100, 60, 100, 120)
    # frame untouched, surface annotated
    assert not np.array_equal(sched.surface, face_frame)
    assert sched.frames_processed == 1

def test_largest_face_is_classified(deps):
    frame = np.zeros((240, 320, 3), dtype=np.uint8)
    draw_face(frame, 10, 10, 20, 20)
    draw_face(frame, 150, 100, 60, 60)
    with HandleScope() as scope:
        out = process_frame(deps, frame, scope)
    assert len(out.regions) == 2
    assert out.selected.x == 150 and deps.classifier.calls == 1
    assert [c.kind for c in out.commands] == ["box", "box", "label"]
    assert out.commands[-1].text == "happy 79%"

def test_no_face_skips_inference(deps):
    display = DisplayState()
    sched = PipelineScheduler(deps, display, DummySource(np.zeros((60, 80, 3), dtype=np.uint8)))
    assert sched.tick() is True
    assert deps.locator.calls == 1 and deps.classifier.calls == 0
    assert display.label == "-" and sched.last_outcome.prediction is None

def test_iteration_error_stops_for_good(settings, face_frame):
    runtime = RecordingRuntime(settings)
    clf = StubClassifier(error=RuntimeError("boom"))
    deps = PipelineDependencies(runtime=runtime, locator=ContourLocator(), classifier=clf, labels=["happy"])
    display = DisplayState()
    sched = PipelineScheduler(deps, display, DummySource(face_frame))

    refreshes = {"n": 0}
    def on_refresh():
        refreshes["n"] += 1
        return True
    sched.run(on_refresh)

    assert sched.failed and display.status == "Error: boom"
    assert refreshes["n"] == 0 and clf.calls == 1
    # every handle of the failed iteration was released
    assert runtime.scopes[0].open_handles == 0 and runtime.scopes[0].released >= 2
    assert sched.tick() is False and clf.calls == 1

def test_run_until_window_closes(deps, face_frame):
    sched = PipelineScheduler(deps, DisplayState(), DummySource(face_frame))
    left = {"n": 3}
    def on_refresh():
        left["n"] -= 1
        return left["n"] > 0
    sched.run(on_refresh)
    assert sched.frames_processed == 3 and not sched.failed
