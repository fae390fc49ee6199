"""
Pydantic data models shared by the pipeline and the live window.
"""
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Optional, Literal, Union

BootPhase = Literal[
    "Initializing",
    "LoadingDetector",
    "LoadingClassifier",
    "Ready",
    "Streaming",
    "Error",
    "CameraDenied",
]


class DetectedRegion(BaseModel):
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @property
    def area(self) -> int:
        return self.width * self.height


class Prediction(BaseModel):
    index: int
    label: str
    confidence: float
    probabilities: List[float] = Field(default_factory=list)


class DisplayState(BaseModel):
    """Last result plus the status line shown to the user."""
    label: str = "-"
    confidence: float = 0.0
    status: str = "Initializing system..."
    phase: BootPhase = "Initializing"
    streaming: bool = False


# overlay commands


class BoxCommand(BaseModel):
    kind: Literal["box"] = "box"
    region: DetectedRegion


class LabelCommand(BaseModel):
    kind: Literal["label"] = "label"
    region: DetectedRegion
    text: str


OverlayCommand = Union[BoxCommand, LabelCommand]


class FrameOutcome(BaseModel):
    regions: List[DetectedRegion] = Field(default_factory=list)
    selected: Optional[DetectedRegion] = None
    prediction: Optional[Prediction] = None
    commands: List[OverlayCommand] = Field(default_factory=list)
