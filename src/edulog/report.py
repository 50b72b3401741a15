"""Report derivation from an analysis payload.

Every function here is total over missing metrics: an absent input yields
``UNKNOWN`` (labels) or ``None`` (numbers) and never a zero default. The
chart series are illustrative only. The payload carries one scalar per
metric, so bar heights are that scalar's normalized value scaled by a fixed
multiplier vector per panel.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from .models import (
    AnalysisPayload,
    ChartPanel,
    MetricCard,
    ReportModel,
    SegmentMetrics,
)

UNKNOWN = "unknown"
ADEQUATE = "adequate"
MISSING_VALUE = "–"

# Policy constant: syllables per second to words per minute.
WORDS_PER_SYLLABLE = 0.7

RATE_FAST_WPM = 150
RATE_SLOW_WPM = 110
LOUDNESS_QUIET_DB = -22
LOUDNESS_LOUD_DB = -14
SILENCE_LOW_PCT = 5
SILENCE_HIGH_PCT = 35
PITCH_FLAT = 4
PITCH_VARIED = 10

RATE_AXIS = (0.0, 200.0)
LOUDNESS_AXIS = (-40.0, 0.0)
PITCH_AXIS = (0.0, 24.0)

RATE_MULTIPLIERS = (0.8, 1.0, 0.9, 1.1, 0.95)
LOUDNESS_MULTIPLIERS = (0.4, 0.7, 0.3, 0.9, 0.5, 0.8)
PITCH_MULTIPLIERS = (0.4, 0.9, 1.0, 0.8, 0.5)

BAR_MIN = 0.05
BAR_MAX = 1.0
PLACEHOLDER_LEVEL = 0.4
MIN_AXIS_SECONDS = 10

GRADE_BANDS = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))

SUMMARY_SENTENCES = (
    "전반적으로 매우 안정적인 발표입니다. 지금의 발표 패턴을 유지하면서 내용 완성도를 높여 보세요.",
    "기본기가 잘 잡혀 있는 발표입니다. 속도와 음량을 조금만 더 다듬으면 더 좋은 발표가 될 수 있습니다.",
    "발표의 흐름은 유지되고 있지만, 말 속도·음량·침묵 사용에서 개선 여지가 있습니다.",
    "발표의 기본적인 구조는 있지만, 말하는 리듬과 전달 방식에서 여러 개선 포인트가 보입니다.",
    "발표를 시작하는 단계로 보입니다. 간단한 스크립트로부터 천천히 발표 연습을 시작해 보세요.",
)

RATE_ADVICE = {
    "fast": "발화 속도가 전체적으로 다소 빠릅니다. 문장과 문장 사이에 1초 정도의 멈춤을 넣어 청중에게 생각할 시간을 주세요.",
    "slow": "발화 속도가 전체적으로 다소 느립니다. 핵심 문장은 조금 더 경쾌한 속도로 말해보면 전달력이 좋아집니다.",
    ADEQUATE: "발화 속도가 전체적으로 적절한 편입니다. 현재 속도를 유지해 보세요.",
}

LOUDNESS_ADVICE = {
    "quiet": "전체적인 음량이 조금 작은 편입니다. 강조하고 싶은 문장에서는 목소리를 한 단계만 더 키워 보세요.",
    "loud": "전체적인 음량이 다소 큰 편입니다. 문장 끝에서는 볼륨을 살짝 낮춰 주면 더 안정감 있게 들립니다.",
    ADEQUATE: "전체적인 음량이 적절한 범위입니다. 중요한 부분에서만 살짝 더 키우면 좋겠습니다.",
}

SILENCE_ADVICE = {
    "too little pause": "침묵(쉼)의 비율이 매우 낮습니다. 문단이 끝날 때 1초 정도 숨을 고르는 멈춤을 넣어주면 이야기가 더 또렷해집니다.",
    "too much pause": "침묵 비율이 높은 편입니다. 말이 끊기는 구간이 자주 느껴질 수 있으니, 불필요한 정적은 조금 줄여 보세요.",
    ADEQUATE: "침묵 사용이 전체적으로 적절합니다. 문장 사이의 여유가 있어 듣기 편한 편입니다.",
}

PITCH_ADVICE = {
    "monotonous": "피치(고저)의 변화가 적어서 다소 단조롭게 들릴 수 있습니다. 중요한 키워드를 말할 때는 톤을 살짝 올리거나 내려 변화를 줘 보세요.",
    "highly varied": "피치 변화가 큰 편입니다. 에너지는 좋지만, 일부 구간에서는 톤이 급격하게 변하지 않도록 조금 더 안정적으로 조절해 보세요.",
    ADEQUATE: "피치 변화가 적당한 편이라 듣는 사람에게 자연스럽게 전달됩니다. 현재 톤을 기본으로 유지해 보세요.",
}

# Segment feedback only calls out the extremes.
SEGMENT_LOUDNESS_ADVICE = {
    "quiet": "음량이 전반적으로 작습니다. 중요한 단어나 결론 부분에서는 목소리를 한 단계 더 키워 보세요.",
    "loud": "음량이 다소 큰 편입니다. 문장을 마무리할 때 살짝 볼륨을 낮추면 안정감이 생깁니다.",
}

SEGMENT_SILENCE_ADVICE = {
    "too little pause": "침묵이 거의 없어 호흡이 급해 보일 수 있습니다. 문장과 문단 사이에 짧은 멈춤을 의도적으로 넣어 보세요.",
    "too much pause": "침묵 비율이 높은 편입니다. 말이 끊기는 느낌을 줄이기 위해, 말할 내용을 미리 정리한 뒤 끊김 없는 문장을 연습해 보세요.",
}

LABEL_TEXT = {
    "fast": "조금 빠른 편",
    "slow": "조금 느린 편",
    "quiet": "조금 작은 편",
    "loud": "조금 큰 편",
    "too little pause": "쉼이 부족한 편",
    "too much pause": "쉼이 많은 편",
    "monotonous": "단조로운 편",
    "highly varied": "변화가 많은 편",
    ADEQUATE: "적정",
    UNKNOWN: "데이터 부족",
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def grade(score: Optional[float]) -> str:
    if score is None:
        return UNKNOWN
    for threshold, letter in GRADE_BANDS:
        if score >= threshold:
            return letter
    return "E"


def score_bar_percent(score: Optional[float]) -> Optional[float]:
    if score is None:
        return None
    return clamp(score, 0.0, 100.0)


def summary_sentence(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    for idx, (threshold, _letter) in enumerate(GRADE_BANDS):
        if score >= threshold:
            return SUMMARY_SENTENCES[idx]
    return SUMMARY_SENTENCES[-1]


def approx_rate(sps: Optional[float]) -> Optional[int]:
    """Approximate words per minute from syllables per second."""
    if sps is None:
        return None
    return round_half_up(sps * 60 * WORDS_PER_SYLLABLE)


def _three_way(
    value: Optional[float], low: float, high: float, low_label: str, high_label: str
) -> str:
    if value is None:
        return UNKNOWN
    if value < low:
        return low_label
    if value > high:
        return high_label
    return ADEQUATE


def rate_label(wpm: Optional[float]) -> str:
    return _three_way(wpm, RATE_SLOW_WPM, RATE_FAST_WPM, "slow", "fast")


def loudness_label(rms: Optional[float]) -> str:
    return _three_way(rms, LOUDNESS_QUIET_DB, LOUDNESS_LOUD_DB, "quiet", "loud")


def silence_label(sil: Optional[float]) -> str:
    return _three_way(
        sil, SILENCE_LOW_PCT, SILENCE_HIGH_PCT, "too little pause", "too much pause"
    )


def pitch_label(f0r: Optional[float]) -> str:
    return _three_way(f0r, PITCH_FLAT, PITCH_VARIED, "monotonous", "highly varied")


def format_time(seconds: int) -> str:
    hours, rest = divmod(int(seconds), 3600)
    mins, secs = divmod(rest, 60)
    return f"{hours:02d}:{mins:02d}:{secs:02d}"


def format_duration(seconds: Optional[float]) -> str:
    if seconds is None:
        return MISSING_VALUE
    if seconds <= 0:
        return "0초"
    if seconds < 60:
        return f"{round_half_up(seconds)}초"
    mins = int(seconds // 60)
    secs = round_half_up(seconds % 60)
    if secs == 0:
        return f"{mins}분"
    return f"{mins}분 {secs}초"


def x_axis_labels(duration_sec: Optional[float]) -> Tuple[int, ...]:
    total = duration_sec if duration_sec and duration_sec > 0 else MIN_AXIS_SECONDS
    x_max = max(MIN_AXIS_SECONDS, round_half_up(total))
    return (
        0,
        round_half_up(x_max * 0.25),
        round_half_up(x_max * 0.5),
        round_half_up(x_max * 0.75),
        x_max,
    )


def synthetic_bars(
    normalized: Optional[float], multipliers: Sequence[float]
) -> Tuple[float, ...]:
    level = PLACEHOLDER_LEVEL if normalized is None else normalized
    return tuple(clamp(level * factor, BAR_MIN, BAR_MAX) for factor in multipliers)


def rate_panel(wpm: Optional[int], duration_sec: Optional[float]) -> ChartPanel:
    normalized = None
    range_text = None
    if wpm is not None:
        normalized = clamp(wpm / RATE_AXIS[1], 0.0, 1.0)
        range_text = (
            f"최소 약 {round_half_up(wpm * 0.8)} WPM · 평균 {wpm} WPM · "
            f"최대 약 {round_half_up(wpm * 1.2)} WPM"
        )
    return ChartPanel(
        title="WPM 추이",
        unit="WPM",
        axis=RATE_AXIS,
        bars=synthetic_bars(normalized, RATE_MULTIPLIERS),
        x_labels=x_axis_labels(duration_sec),
        label=rate_label(wpm),
        value_text=str(wpm) if wpm is not None else MISSING_VALUE,
        has_data=wpm is not None,
        range_text=range_text,
    )


def loudness_panel(rms: Optional[float], duration_sec: Optional[float]) -> ChartPanel:
    normalized = None
    range_text = None
    if rms is not None:
        low, high = LOUDNESS_AXIS
        normalized = (rms - low) / (high - low)
        range_text = (
            f"최소 약 {rms - 4:.1f} dBFS · 평균 {rms:.1f} dBFS · "
            f"최대 약 {rms + 4:.1f} dBFS"
        )
    return ChartPanel(
        title="음량 파형",
        unit="dBFS",
        axis=LOUDNESS_AXIS,
        bars=synthetic_bars(normalized, LOUDNESS_MULTIPLIERS),
        x_labels=x_axis_labels(duration_sec),
        label=loudness_label(rms),
        value_text=f"{rms:.1f}" if rms is not None else MISSING_VALUE,
        has_data=rms is not None,
        range_text=range_text,
    )


def pitch_panel(f0r: Optional[float], duration_sec: Optional[float]) -> ChartPanel:
    normalized = None
    clamped = None
    if f0r is not None:
        clamped = clamp(f0r, PITCH_AXIS[0], PITCH_AXIS[1])
        normalized = clamped / PITCH_AXIS[1]
    return ChartPanel(
        title="피치 분포",
        unit="st",
        axis=PITCH_AXIS,
        bars=synthetic_bars(normalized, PITCH_MULTIPLIERS),
        x_labels=x_axis_labels(duration_sec),
        label=pitch_label(f0r),
        value_text=f"{clamped:.1f}" if clamped is not None else MISSING_VALUE,
        has_data=f0r is not None,
        range_text=f"피치 범위 {clamped:.1f}" if clamped is not None else None,
        outlier=f0r is not None and f0r > PITCH_AXIS[1],
    )


def _segment_range(seg: SegmentMetrics) -> str:
    return f"{round_half_up(seg.start)}~{round_half_up(seg.end)}초"


def segment_feedback(seg: SegmentMetrics) -> List[str]:
    prefix = f"{seg.label} 구간({_segment_range(seg)})"
    lines: List[str] = []
    advice = SEGMENT_LOUDNESS_ADVICE.get(loudness_label(seg.rms))
    if advice:
        lines.append(f"{prefix}: {advice}")
    advice = SEGMENT_SILENCE_ADVICE.get(silence_label(seg.sil))
    if advice:
        lines.append(f"{prefix}: {advice}")
    return lines


def feedback_lines(payload: AnalysisPayload) -> List[str]:
    m = payload.metrics
    lines: List[str] = []

    global_checks = (
        (rate_label(approx_rate(m.sps)), RATE_ADVICE),
        (loudness_label(m.rms), LOUDNESS_ADVICE),
        (silence_label(m.sil), SILENCE_ADVICE),
        (pitch_label(m.f0r), PITCH_ADVICE),
    )
    for label, table in global_checks:
        if label != UNKNOWN:
            lines.append(table[label])

    for seg in payload.segments:
        lines.extend(segment_feedback(seg))
    return lines


def metric_cards(payload: AnalysisPayload) -> Tuple[MetricCard, ...]:
    m = payload.metrics
    wpm = approx_rate(m.sps)
    return (
        MetricCard(
            title="발화 속도 (WPM)",
            value=str(wpm) if wpm is not None else MISSING_VALUE,
            subtitle="적정 범위: 120~150",
            label=rate_label(wpm),
        ),
        MetricCard(
            title="평균 음량 (dBFS)",
            value=f"{m.rms:.1f}" if m.rms is not None else MISSING_VALUE,
            subtitle="적정 범위: -18.0 ~ -12.0",
            label=loudness_label(m.rms),
        ),
        MetricCard(
            title="침묵 비율",
            value=f"{m.sil:.1f}%" if m.sil is not None else MISSING_VALUE,
            subtitle="전체 시간 대비",
            label=silence_label(m.sil),
        ),
    )


def build_report(payload: AnalysisPayload) -> ReportModel:
    m = payload.metrics
    score = payload.score
    wpm = approx_rate(m.sps)
    return ReportModel(
        score=score,
        score_text=str(round_half_up(score)) if score is not None else MISSING_VALUE,
        score_bar_percent=score_bar_percent(score),
        grade=grade(score),
        summary=summary_sentence(score),
        duration_text=format_duration(m.duration_sec),
        approx_rate=wpm,
        rate_label=rate_label(wpm),
        loudness_label=loudness_label(m.rms),
        silence_label=silence_label(m.sil),
        pitch_label=pitch_label(m.f0r),
        cards=metric_cards(payload),
        charts=(
            rate_panel(wpm, m.duration_sec),
            loudness_panel(m.rms, m.duration_sec),
            pitch_panel(m.f0r, m.duration_sec),
        ),
        feedback=tuple(feedback_lines(payload)),
    )
