"""Configuration handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
import yaml

from .client import DEFAULT_URL


@dataclass
class AudioConfig:
    sample_rate_hz: int = 44100
    channels: int = 1


@dataclass
class ServiceConfig:
    url: str = DEFAULT_URL
    timeout_seconds: float = 60.0
    field_name: str = "file"


@dataclass
class SessionConfig:
    tick_interval_ms: int = 1000
    keep_audio_on_failure: bool = False


@dataclass
class Config:
    base_dir: str = ""
    device_name: Optional[str] = None
    debug_logging: bool = False
    audio: AudioConfig = field(default_factory=AudioConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    session: SessionConfig = field(default_factory=SessionConfig)


def load_config(path: str) -> Config:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    audio = AudioConfig(**(data.get("audio") or {}))
    service = ServiceConfig(**(data.get("service") or {}))
    session = SessionConfig(**(data.get("session") or {}))

    return Config(
        base_dir=data.get("base_dir") or "",
        device_name=data.get("device_name"),
        debug_logging=bool(data.get("debug_logging", False)),
        audio=audio,
        service=service,
        session=session,
    )


def save_config(path: str, config: Config) -> None:
    data = {
        "base_dir": config.base_dir,
        "device_name": config.device_name,
        "debug_logging": config.debug_logging,
        "audio": {
            "sample_rate_hz": config.audio.sample_rate_hz,
            "channels": config.audio.channels,
        },
        "service": {
            "url": config.service.url,
            "timeout_seconds": config.service.timeout_seconds,
            "field_name": config.service.field_name,
        },
        "session": {
            "tick_interval_ms": config.session.tick_interval_ms,
            "keep_audio_on_failure": config.session.keep_audio_on_failure,
        },
    }
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
