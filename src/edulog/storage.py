"""Storage and naming utilities."""

from __future__ import annotations

import logging
import os
from datetime import datetime

from .models import AudioBlob

logger = logging.getLogger("edulog")

EXTENSIONS = {
    "audio/wav": ".wav",
    "audio/webm": ".webm",
    "audio/ogg": ".ogg",
    "audio/mpeg": ".mp3",
}


def timestamp_slug(dt: datetime | None = None) -> str:
    now = dt or datetime.now()
    return now.strftime("%Y-%m-%d_%H%M%S")


def build_recording_basename(dt: datetime | None = None) -> str:
    return f"{timestamp_slug(dt)}--recording"


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def ensure_structure(base_dir: str) -> dict:
    root = base_dir or os.getcwd()
    paths = {
        "root": root,
        "recordings": os.path.join(root, "Recordings"),
        "logs": os.path.join(root, "Logs"),
    }
    for path in paths.values():
        ensure_dir(path)
    return paths


def write_playback_file(directory: str, basename: str, blob: AudioBlob) -> str:
    ensure_dir(directory)
    ext = EXTENSIONS.get(blob.media_type, ".bin")
    path = os.path.join(directory, f"{basename}{ext}")
    with open(path, "wb") as handle:
        handle.write(blob.data)
    return path


def discard_playback_file(path: str | None) -> None:
    if not path:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    logger.debug("Discarded playback file %s", path)
