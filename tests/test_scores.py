
import math
import numpy as np
import pytest
from emocam.scores import postprocess, softmax, top_class

VECTORS = [[0.0], [2.0, 0.0, 0.0], [1000.0, -1000.0, 3.0], [-5.5, -5.5, -7.0, 12.25], [1e-9] * 7]

@pytest.mark.parametrize("logits", VECTORS)
def test_softmax_is_distribution(logits):
    p = softmax(logits)
    assert len(p) == len(logits)
    assert abs(p.sum() - 1.0) < 1e-5
    assert np.all(p >= 0.0) and np.all(p <= 1.0)

@pytest.mark.parametrize("c", [-100.0, -1.5, 0.0, 3.0, 500.0])
def test_softmax_shift_invariant(c):
    logits = np.array([0.3, -1.2, 2.5, 0.0])
    assert np.allclose(softmax(logits), softmax(logits + c), atol=1e-9)

def test_softmax_rejects_bad_input():
    with pytest.raises(ValueError):
        softmax([])
    with pytest.raises(ValueError):
        softmax([1.0, float("nan")])

def test_top_class_leftmost_tie():
    idx, label, conf = top_class([0.5, 0.5], ["a", "b"])
    assert idx == 0 and label == "a" and conf == 0.5

def test_top_class_label_fallback():
    assert top_class([0.1, 0.2, 0.0, 0.7], ["a", "b"])[1] == "class_3"

def test_postprocess():
    pred = postprocess(np.array([2.0, 0.0, 0.0], dtype=np.float32), ["happy", "sad", "angry"])
    assert pred.index == 0 and pred.label == "happy"
    assert pred.confidence == pytest.approx(math.exp(2) / (math.exp(2) + 2), abs=1e-6)
    assert sum(pred.probabilities) == pytest.approx(1.0)
