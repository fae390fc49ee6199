"""
Configuration for the live emotion pipeline.
"""
from pydantic import BaseModel
import os

# Short aliases accepted in EXECUTION_PROVIDERS -> onnxruntime provider names
PROVIDER_ALIASES = {
    "cpu": "CPUExecutionProvider",
    "wasm": "CPUExecutionProvider",
    "cuda": "CUDAExecutionProvider",
    "tensorrt": "TensorrtExecutionProvider",
    "coreml": "CoreMLExecutionProvider",
    "directml": "DmlExecutionProvider",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """
    Runtime settings with environment-variable overrides.
    """
    CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))
    FRAME_WIDTH: int = int(os.getenv("FRAME_WIDTH", "0"))
    FRAME_HEIGHT: int = int(os.getenv("FRAME_HEIGHT", "0"))

    # Asset locations: http(s) URLs or local paths. Empty cascade -> OpenCV bundled one.
    CASCADE_URL: str = os.getenv("CASCADE_URL", "")
    MODEL_URL: str = os.getenv("MODEL_URL", "models/emotion_yolo11n_cls.onnx")
    LABELS_URL: str = os.getenv("LABELS_URL", "models/classes.json")
    FETCH_TIMEOUT: float = float(os.getenv("FETCH_TIMEOUT", "30"))

    EXECUTION_PROVIDERS: str = os.getenv("EXECUTION_PROVIDERS", "cpu")
    INPUT_SIZE: int = int(os.getenv("INPUT_SIZE", "64"))
    DETECT_SCALE_FACTOR: float = float(os.getenv("DETECT_SCALE_FACTOR", "1.1"))
    DETECT_MIN_NEIGHBORS: int = int(os.getenv("DETECT_MIN_NEIGHBORS", "3"))
    CV_THREADS: int = int(os.getenv("CV_THREADS", "-1"))

    WINDOW_NAME: str = os.getenv("WINDOW_NAME", "Emotion Detection (q to quit)")
    AUTOSTART: bool = os.getenv("AUTOSTART", "0").strip().lower() in ("1", "true", "yes", "on")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __init__(self, **data):
        super().__init__(**data)
        # Normalize LOG_LEVEL: strip comments/extra words, upper-case, validate
        parts = (self.LOG_LEVEL or "").split()
        level = parts[0].upper() if parts else "INFO"
        if level not in LOG_LEVELS:
            level = "INFO"
        object.__setattr__(self, "LOG_LEVEL", level)

    def execution_providers(self) -> list[str]:
        """Resolve EXECUTION_PROVIDERS into onnxruntime provider names, order kept."""
        out: list[str] = []
        for raw in (self.EXECUTION_PROVIDERS or "").split(","):
            name = raw.strip()
            if not name:
                continue
            name = PROVIDER_ALIASES.get(name.lower(), name)
            if name not in out:
                out.append(name)
        return out or ["CPUExecutionProvider"]
