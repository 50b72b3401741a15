"""Data models for Edulog."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Tuple


class Phase(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    SUBMITTING = "submitting"
    REPORTING = "reporting"


@dataclass
class Metrics:
    duration_sec: Optional[float] = None
    sps: Optional[float] = None
    rms: Optional[float] = None
    sil: Optional[float] = None
    f0r: Optional[float] = None


@dataclass
class SegmentMetrics:
    label: str
    start: float
    end: float
    rms: Optional[float] = None
    sil: Optional[float] = None


@dataclass
class AnalysisPayload:
    metrics: Metrics = field(default_factory=Metrics)
    score: Optional[float] = None
    segments: List[SegmentMetrics] = field(default_factory=list)


@dataclass
class AudioBlob:
    data: bytes
    media_type: str = "audio/wav"
    duration_seconds: float = 0.0
    filename: str = "recording.wav"


@dataclass(frozen=True)
class MetricCard:
    title: str
    value: str
    subtitle: str
    label: str


@dataclass(frozen=True)
class ChartPanel:
    title: str
    unit: str
    axis: Tuple[float, float]
    bars: Tuple[float, ...]
    x_labels: Tuple[int, ...]
    label: str
    value_text: str
    has_data: bool
    range_text: Optional[str] = None
    outlier: bool = False


@dataclass(frozen=True)
class ReportModel:
    score: Optional[float]
    score_text: str
    score_bar_percent: Optional[float]
    grade: str
    summary: Optional[str]
    duration_text: str
    approx_rate: Optional[int]
    rate_label: str
    loudness_label: str
    silence_label: str
    pitch_label: str
    cards: Tuple[MetricCard, ...]
    charts: Tuple[ChartPanel, ...]
    feedback: Tuple[str, ...]


@dataclass(frozen=True)
class SubmissionResult:
    payload: Optional[AnalysisPayload] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.payload is not None


@dataclass(frozen=True)
class SessionState:
    phase: Phase = Phase.IDLE
    elapsed_seconds: int = 0
    error_message: Optional[str] = None
    playback_path: Optional[str] = None
    report: Optional[ReportModel] = None
    generation: int = 0
