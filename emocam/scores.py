"""
Logits -> probabilities -> (label, confidence).
"""
from __future__ import annotations
from typing import Sequence
import numpy as np

from emocam.models import Prediction


def softmax(logits) -> np.ndarray:
    """
    Numerically stable softmax over a 1-D score vector.

    Raises:
        ValueError: empty vector or non-finite entries.
    """
    x = np.asarray(logits, dtype=np.float64).reshape(-1)
    if x.size == 0:
        raise ValueError("softmax needs at least one score")
    if not np.all(np.isfinite(x)):
        raise ValueError("softmax scores must be finite")
    exps = np.exp(x - x.max())
    return exps / exps.sum()


def top_class(probs, labels: Sequence[str]) -> tuple[int, str, float]:
    """Leftmost argmax; missing labels become class_<index>."""
    p = np.asarray(probs, dtype=np.float64).reshape(-1)
    idx = int(np.argmax(p))
    label = labels[idx] if idx < len(labels) else f"class_{idx}"
    return idx, label, float(p[idx])


def postprocess(logits, labels: Sequence[str]) -> Prediction:
    probs = softmax(logits)
    idx, label, conf = top_class(probs, labels)
    return Prediction(index=idx, label=label, confidence=conf, probabilities=[float(v) for v in probs])
