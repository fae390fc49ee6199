"""
Asset delivery: cascade, classifier weights and class labels.

Locations are http(s) URLs (fetched with requests) or local paths.
"""
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import List

import requests

logger = logging.getLogger(__name__)


class AssetFetchError(RuntimeError):
    """An asset could not be fetched in full."""


def _is_url(location: str) -> bool:
    return location.lower().startswith(("http://", "https://"))


def fetch_asset(location: str, timeout: float = 30.0) -> bytes:
    """
    Fetch an asset and return its bytes.

    Raises:
        AssetFetchError: network error, non-2xx status, missing file or empty body.
    """
    logger.debug(f"[assets] fetch {location}")
    if _is_url(location):
        try:
            resp = requests.get(location, timeout=timeout)
        except requests.RequestException as e:
            raise AssetFetchError(f"Could not fetch {location}: {e}") from e
        if not resp.ok:
            raise AssetFetchError(f"Could not fetch {location}: HTTP {resp.status_code}")
        data = resp.content
    else:
        path = Path(location)
        if not path.is_file():
            raise AssetFetchError(f"Asset not found: {location}")
        data = path.read_bytes()

    if not data:
        raise AssetFetchError(f"Asset is empty: {location}")
    logger.debug(f"[assets] fetched {location} bytes={len(data)}")
    return data


def parse_labels(data: bytes) -> List[str]:
    """
    Decode a JSON array of class names.

    Raises:
        ValueError: not JSON, not a list, or a non-string entry.
    """
    try:
        labels = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Class labels are not valid JSON: {e}") from e
    if not isinstance(labels, list) or not all(isinstance(x, str) for x in labels):
        raise ValueError("Class labels must be a JSON array of strings")
    return labels
