"""
ONNX Runtime emotion classifier wrapper.
"""
from __future__ import annotations
import logging
from typing import Sequence, Union

import numpy as np
import onnxruntime as ort

logger = logging.getLogger(__name__)


class EmotionClassifier:
    """InferenceSession with a tensor-in, logits-out interface."""
    def __init__(self, session):
        self.session = session
        self.input_names = [i.name for i in session.get_inputs()]
        self.output_names = [o.name for o in session.get_outputs()]
        if not self.input_names or not self.output_names:
            raise RuntimeError("Classifier model declares no inputs or outputs")

    def run(self, tensor: np.ndarray) -> np.ndarray:
        """
        Classify one (3, H, W) tensor.

        Returns:
            1-D float32 logits, one per class.
        """
        batch = np.asarray(tensor, dtype=np.float32)[np.newaxis, ...]
        out = self.session.run([self.output_names[0]], {self.input_names[0]: batch})[0]
        return np.asarray(out, dtype=np.float32).reshape(-1)


def load_classifier(model: Union[bytes, str], providers: Sequence[str]) -> EmotionClassifier:
    """Create an InferenceSession from model bytes or a path."""
    available = set(ort.get_available_providers())
    chosen = [p for p in providers if p in available]
    if not chosen:
        logger.warning(f"[classifier] none of {list(providers)} available ({sorted(available)}); using CPU")
        chosen = ["CPUExecutionProvider"]
    session = ort.InferenceSession(model, providers=chosen)
    clf = EmotionClassifier(session)
    logger.debug(f"[classifier] session ready providers={chosen} inputs={clf.input_names} outputs={clf.output_names}")
    return clf
