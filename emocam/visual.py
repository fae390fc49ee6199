"""Overlay rendering.

- plan_overlay: turn detections + prediction into drawing commands (pure)
- draw_overlay: apply the commands to a BGR render surface in place
- emotion_style: accent colour for an emotion label (used by the dashboard)
"""
from __future__ import annotations
import cv2
import numpy as np
from typing import List, Optional, Sequence, Tuple

from emocam.models import BoxCommand, DetectedRegion, LabelCommand, OverlayCommand, Prediction

BOX_COLOR = (212, 182, 6)          # #06b6d4 in BGR
BOX_THICKNESS = 3
LABEL_ALPHA = 0.8
LABEL_TEXT_COLOR = (255, 255, 255)
LABEL_FONT = cv2.FONT_HERSHEY_SIMPLEX
LABEL_FONT_SCALE = 0.6
LABEL_FONT_THICKNESS = 2
LABEL_PADDING = 10
LABEL_HEIGHT = 30
LABEL_RADIUS = 8
LABEL_OFFSET = 35                  # background top sits this far above the box
LABEL_BASELINE_OFFSET = 14         # text baseline sits this far above the box

# (keywords, BGR accent)
_EMOTION_STYLES: List[Tuple[Tuple[str, ...], Tuple[int, int, int]]] = [
    (("happy", "joy"), (21, 204, 250)),      # yellow
    (("sad",), (250, 165, 96)),              # blue
    (("angry",), (113, 113, 248)),           # red
    (("neutral",), (175, 163, 156)),         # gray
    (("surprise",), (182, 114, 244)),        # pink
]
DEFAULT_STYLE = (255, 255, 255)


def emotion_style(label: Optional[str]) -> Tuple[int, int, int]:
    e = (label or "").lower()
    for keys, color in _EMOTION_STYLES:
        if any(k in e for k in keys):
            return color
    return DEFAULT_STYLE


def format_label(prediction: Prediction) -> str:
    pct = int(prediction.confidence * 100 + 0.5)
    return f"{prediction.label} {pct}%"


def plan_overlay(regions: Sequence[DetectedRegion],
                 selected: Optional[DetectedRegion] = None,
                 prediction: Optional[Prediction] = None) -> List[OverlayCommand]:
    """One box per region, then a label on the selected region when classified."""
    commands: List[OverlayCommand] = [BoxCommand(region=r) for r in regions]
    if selected is not None and prediction is not None:
        commands.append(LabelCommand(region=selected, text=format_label(prediction)))
    return commands


def _fill_rounded_rect(img: np.ndarray, p0: Tuple[int, int], p1: Tuple[int, int],
                       radius: int, color: Tuple[int, int, int]) -> None:
    (x0, y0), (x1, y1) = p0, p1
    r = max(0, min(radius, (x1 - x0) // 2, (y1 - y0) // 2))
    cv2.rectangle(img, (x0 + r, y0), (x1 - r, y1), color, cv2.FILLED)
    cv2.rectangle(img, (x0, y0 + r), (x1, y1 - r), color, cv2.FILLED)
    for cx, cy in ((x0 + r, y0 + r), (x1 - r, y0 + r), (x0 + r, y1 - r), (x1 - r, y1 - r)):
        cv2.circle(img, (cx, cy), r, color, cv2.FILLED, cv2.LINE_AA)


def _draw_label(surface: np.ndarray, region: DetectedRegion, text: str) -> None:
    (tw, _th), _base = cv2.getTextSize(text, LABEL_FONT, LABEL_FONT_SCALE, LABEL_FONT_THICKNESS)
    x0, y0 = region.x, region.y - LABEL_OFFSET
    x1, y1 = x0 + tw + LABEL_PADDING * 2, y0 + LABEL_HEIGHT

    # translucent background: blend a filled copy back onto the surface
    layer = surface.copy()
    _fill_rounded_rect(layer, (x0, y0), (x1, y1), LABEL_RADIUS, BOX_COLOR)
    cv2.addWeighted(layer, LABEL_ALPHA, surface, 1.0 - LABEL_ALPHA, 0, dst=surface)

    cv2.putText(surface, text, (x0 + LABEL_PADDING, region.y - LABEL_BASELINE_OFFSET),
                LABEL_FONT, LABEL_FONT_SCALE, LABEL_TEXT_COLOR, LABEL_FONT_THICKNESS, cv2.LINE_AA)


def draw_overlay(surface: np.ndarray, commands: Sequence[OverlayCommand]) -> np.ndarray:
    """Draw commands onto a BGR surface (modified in place and returned)."""
    for cmd in commands:
        r = cmd.region
        if isinstance(cmd, BoxCommand):
            cv2.rectangle(surface, (r.x, r.y), (r.x + r.width, r.y + r.height), BOX_COLOR, BOX_THICKNESS)
        elif isinstance(cmd, LabelCommand):
            _draw_label(surface, r, cmd.text)
    return surface
