"""Microphone capture for a single recording."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from .audio_utils import encode_wav, read_wav
from .errors import CaptureUnavailable
from .models import AudioBlob

logger = logging.getLogger("edulog")


def _import_sounddevice():
    try:
        import sounddevice as sd
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise RuntimeError("sounddevice is required for recording.") from exc
    return sd


def list_input_devices() -> List[Dict[str, Any]]:
    sd = _import_sounddevice()
    devices = sd.query_devices()
    return [d for d in devices if d.get("max_input_channels", 0) > 0]


def select_preferred_device(
    candidates: List[Dict[str, Any]],
    prefer_name: Optional[str] = None,
) -> Dict[str, Any]:
    if not candidates:
        raise RuntimeError("No input devices found.")
    if prefer_name:
        preferred = [
            d for d in candidates if prefer_name.lower() in d.get("name", "").lower()
        ]
        if preferred:
            return preferred[0]
    return candidates[0]


def find_input_device(prefer_name: Optional[str] = None) -> dict:
    candidates = list_input_devices()
    return select_preferred_device(candidates, prefer_name=prefer_name)


@dataclass
class RecordingHandle:
    stream: Any
    sample_rate_hz: int
    channels: int
    device_name: Optional[str] = None
    chunks: List[Any] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)
    active: bool = False


class Recorder:
    """Wraps a sounddevice input stream behind acquire/begin/finalize."""

    def __init__(
        self,
        sample_rate_hz: int = 44100,
        channels: int = 1,
        device_name: Optional[str] = None,
    ) -> None:
        self.sample_rate_hz = sample_rate_hz
        self.channels = channels
        self.device_name = device_name

    def acquire(self) -> RecordingHandle:
        try:
            sd = _import_sounddevice()
            device = find_input_device(self.device_name)
        except Exception as exc:
            raise CaptureUnavailable(str(exc)) from exc

        handle = RecordingHandle(
            stream=None,
            sample_rate_hz=self.sample_rate_hz,
            channels=self.channels,
            device_name=device.get("name"),
        )

        def _callback(indata, _frames, _time, status):
            if status:
                logger.debug("Input stream status: %s", status)
            with handle.lock:
                handle.chunks.append(indata.copy())

        try:
            handle.stream = sd.InputStream(
                samplerate=self.sample_rate_hz,
                channels=self.channels,
                dtype="int16",
                device=device.get("index"),
                callback=_callback,
            )
        except Exception as exc:
            raise CaptureUnavailable(f"Could not open input device: {exc}") from exc
        logger.info("Capture acquired: %s", handle.device_name)
        return handle

    def begin(self, handle: RecordingHandle) -> None:
        try:
            handle.stream.start()
        except Exception as exc:
            handle.stream.close()
            raise CaptureUnavailable(f"Could not start input stream: {exc}") from exc
        handle.active = True

    def finalize(self, handle: Optional[RecordingHandle]) -> Optional[AudioBlob]:
        if handle is None or not handle.active:
            return None
        handle.active = False
        try:
            handle.stream.stop()
        finally:
            handle.stream.close()

        with handle.lock:
            chunks = list(handle.chunks)
            handle.chunks.clear()
        frames = sum(len(chunk) for chunk in chunks)
        data = encode_wav(chunks, handle.sample_rate_hz, handle.channels)
        logger.info("Capture finalized: %d frames", frames)
        return AudioBlob(
            data=data,
            media_type="audio/wav",
            duration_seconds=frames / float(handle.sample_rate_hz),
        )


def play_recording(path: str) -> None:
    sd = _import_sounddevice()
    data, sample_rate = read_wav(path)
    sd.play(data, samplerate=sample_rate)
