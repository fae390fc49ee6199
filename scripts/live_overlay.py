"""Run the live emotion window.

Usage:
    python scripts/live_overlay.py --model models/emotion.onnx --labels models/classes.json

Press 's' to start the camera, 'q' to quit the window.
"""
from __future__ import annotations
import argparse
import logging
import sys

from emocam.config import Settings
from emocam.live import run_live_app


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Real-time facial emotion recognition from a webcam")
    p.add_argument("--camera", type=int, default=None, help="Camera index")
    p.add_argument("--cascade", default=None, help="Haar cascade path or URL (default: OpenCV bundled)")
    p.add_argument("--model", default=None, help="ONNX classifier path or URL")
    p.add_argument("--labels", default=None, help="Class label JSON path or URL")
    p.add_argument("--providers", default=None, help="Comma separated execution providers, e.g. cpu,cuda")
    p.add_argument("--autostart", action="store_true", help="Start the camera without waiting for 's'")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    args = p.parse_args(argv)

    overrides = {
        "CAMERA_INDEX": args.camera,
        "CASCADE_URL": args.cascade,
        "MODEL_URL": args.model,
        "LABELS_URL": args.labels,
        "EXECUTION_PROVIDERS": args.providers,
        "LOG_LEVEL": args.log_level,
    }
    settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    if args.autostart:
        settings.AUTOSTART = True

    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return run_live_app(settings)


if __name__ == "__main__":
    sys.exit(main())
