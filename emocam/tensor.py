"""
Face crop -> classifier input tensor.
"""
from __future__ import annotations
import cv2
import numpy as np

from emocam.models import DetectedRegion

INPUT_SIZE = 64


def crop_region(frame: np.ndarray, region: DetectedRegion) -> np.ndarray:
    """
    Cut a region out of a frame, clamped to the frame bounds.

    Raises:
        ValueError: the clamped region has no pixels.
    """
    h, w = frame.shape[:2]
    x0 = max(0, min(region.x, w)); y0 = max(0, min(region.y, h))
    x1 = max(x0, min(region.x + region.width, w)); y1 = max(y0, min(region.y + region.height, h))
    chip = frame[y0:y1, x0:x1]
    if chip.size == 0:
        raise ValueError(f"Region {region.x},{region.y},{region.width}x{region.height} is outside the frame {w}x{h}")
    return chip


def normalize_region(pixels: np.ndarray, size: int = INPUT_SIZE) -> np.ndarray:
    """
    Resize a BGR crop to size x size and lay it out as the classifier expects.

    Returns:
        float32 array of shape (3, size, size), R then G then B planes,
        values divided by 255.
    """
    resized = cv2.resize(pixels, (size, size), interpolation=cv2.INTER_LINEAR)
    if resized.ndim == 2:
        rgb = cv2.cvtColor(resized, cv2.COLOR_GRAY2RGB)
    elif resized.shape[2] == 4:
        rgb = cv2.cvtColor(resized, cv2.COLOR_BGRA2RGB)
    else:
        rgb = cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
    chw = np.transpose(rgb, (2, 0, 1)).astype(np.float32) / 255.0
    return np.ascontiguousarray(chw, dtype=np.float32)
