
import numpy as np
import pytest
import emocam.camera as camera
from emocam.camera import CameraAccessDenied, FrameSource

class DummyCap:
    def __init__(self, opened=True):
        self.opened = opened
        self.released = False
        self.props = {}
    def isOpened(self): return self.opened
    def set(self, prop, value): self.props[prop] = value
    def read(self): return True, np.zeros((48, 64, 3), dtype=np.uint8)
    def release(self): self.released = True

def test_open_denied(monkeypatch):
    cap = DummyCap(opened=False)
    monkeypatch.setattr(camera.cv2, "VideoCapture", lambda idx: cap)
    src = FrameSource(3)
    with pytest.raises(CameraAccessDenied):
        src.open()
    assert cap.released and not src.is_open

def test_read_frames(monkeypatch):
    cap = DummyCap()
    monkeypatch.setattr(camera.cv2, "VideoCapture", lambda idx: cap)
    src = FrameSource(0, width=640)
    assert src.read() is None
    src.open()
    assert cap.props == {camera.cv2.CAP_PROP_FRAME_WIDTH: 640}
    frame = src.read()
    assert frame.shape == (48, 64, 3)
    assert not frame.flags.writeable
    src.release()
    assert cap.released and src.read() is None
