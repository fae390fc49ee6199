"""
Region selection: pick the face to classify.
"""
from __future__ import annotations
from typing import Iterable, Optional

from emocam.models import DetectedRegion


def select_region(regions: Iterable[DetectedRegion]) -> Optional[DetectedRegion]:
    """
    Return the region with the largest area, or None when there is none.

    Ties keep the earliest region; no identity is carried between frames.
    """
    best: Optional[DetectedRegion] = None
    best_area = 0
    for r in regions:
        if r.area > best_area:
            best_area = r.area
            best = r
    return best
