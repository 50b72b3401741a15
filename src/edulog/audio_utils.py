"""Audio helpers."""

from __future__ import annotations

import io
import os
import wave
from typing import List, Tuple

import numpy as np

MEDIA_TYPES = {
    ".wav": "audio/wav",
    ".webm": "audio/webm",
    ".ogg": "audio/ogg",
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
}


def encode_wav(
    chunks: List[np.ndarray],
    sample_rate_hz: int,
    channels: int,
) -> bytes:
    if chunks:
        data = np.concatenate(chunks, axis=0)
    else:
        data = np.zeros((0, channels), dtype=np.int16)
    if data.dtype != np.int16:
        data = data.astype(np.int16)

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as handle:
        handle.setnchannels(channels)
        handle.setsampwidth(2)
        handle.setframerate(sample_rate_hz)
        handle.writeframes(data.tobytes())
    return buffer.getvalue()


def wav_duration_seconds(data: bytes) -> float:
    with wave.open(io.BytesIO(data), "rb") as handle:
        frames = handle.getnframes()
        rate = handle.getframerate()
    if rate <= 0:
        return 0.0
    return frames / float(rate)


def read_wav(path: str) -> Tuple[np.ndarray, int]:
    with wave.open(path, "rb") as handle:
        channels = handle.getnchannels()
        sampwidth = handle.getsampwidth()
        framerate = handle.getframerate()
        raw = handle.readframes(handle.getnframes())

    if sampwidth != 2:
        raise ValueError("Only 16-bit PCM is supported for playback.")

    data = np.frombuffer(raw, dtype=np.int16)
    return data.reshape(-1, channels), framerate


def guess_media_type(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    return MEDIA_TYPES.get(ext, "application/octet-stream")
