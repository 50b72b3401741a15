import pytest

from edulog.models import AnalysisPayload, Metrics, SegmentMetrics
from edulog.payload_io import parse_payload
from edulog.report import (
    LOUDNESS_MULTIPLIERS,
    PITCH_MULTIPLIERS,
    RATE_MULTIPLIERS,
    SUMMARY_SENTENCES,
    UNKNOWN,
    approx_rate,
    build_report,
    feedback_lines,
    format_duration,
    format_time,
    grade,
    loudness_label,
    loudness_panel,
    pitch_label,
    pitch_panel,
    rate_label,
    rate_panel,
    score_bar_percent,
    silence_label,
    summary_sentence,
    x_axis_labels,
)


@pytest.mark.parametrize(
    "score,expected",
    [
        (100, "A"),
        (90, "A"),
        (89.999, "B"),
        (80, "B"),
        (79.99, "C"),
        (70, "C"),
        (60, "D"),
        (59.5, "E"),
        (-5, "E"),
        (130, "A"),
        (None, UNKNOWN),
    ],
)
def test_grade_boundaries(score, expected):
    assert grade(score) == expected


def test_grade_is_monotonic():
    order = ["E", "D", "C", "B", "A"]
    ranks = [order.index(grade(s / 10)) for s in range(-100, 1200)]
    assert ranks == sorted(ranks)


def test_score_bar_is_clamped_but_grade_uses_raw_score():
    assert score_bar_percent(130) == 100.0
    assert score_bar_percent(-20) == 0.0
    assert score_bar_percent(None) is None
    assert grade(-20) == "E"


def test_summary_sentence_follows_grade_bands():
    assert summary_sentence(95) == SUMMARY_SENTENCES[0]
    assert summary_sentence(85) == SUMMARY_SENTENCES[1]
    assert summary_sentence(75) == SUMMARY_SENTENCES[2]
    assert summary_sentence(65) == SUMMARY_SENTENCES[3]
    assert summary_sentence(10) == SUMMARY_SENTENCES[4]
    assert summary_sentence(None) is None


def test_approx_rate():
    assert approx_rate(0.0) == 0
    assert approx_rate(None) is None
    assert approx_rate(3.0) == 126
    assert approx_rate(4.5) == 189
    values = [approx_rate(x / 10) for x in range(0, 80)]
    assert values == sorted(values)


@pytest.mark.parametrize(
    "fn,value,expected",
    [
        (rate_label, 151, "fast"),
        (rate_label, 150, "adequate"),
        (rate_label, 110, "adequate"),
        (rate_label, 109, "slow"),
        (loudness_label, -22.5, "quiet"),
        (loudness_label, -22, "adequate"),
        (loudness_label, -13.9, "loud"),
        (silence_label, 4.9, "too little pause"),
        (silence_label, 35, "adequate"),
        (silence_label, 35.1, "too much pause"),
        (pitch_label, 3.9, "monotonous"),
        (pitch_label, 10.5, "highly varied"),
        (pitch_label, 30, "highly varied"),
    ],
)
def test_labels_thresholds(fn, value, expected):
    assert fn(value) == expected


@pytest.mark.parametrize(
    "fn", [rate_label, loudness_label, silence_label, pitch_label]
)
def test_labels_unknown_when_absent(fn):
    assert fn(None) == UNKNOWN


def test_rate_panel_uses_fixed_multipliers():
    panel = rate_panel(100, 20)
    assert panel.bars == pytest.approx([0.5 * f for f in RATE_MULTIPLIERS])
    assert panel.x_labels == (0, 5, 10, 15, 20)
    assert panel.range_text == "최소 약 80 WPM · 평균 100 WPM · 최대 약 120 WPM"
    assert panel.has_data


def test_loudness_panel_normalizes_over_axis():
    panel = loudness_panel(-20.0, None)
    assert panel.bars == pytest.approx([0.5 * f for f in LOUDNESS_MULTIPLIERS])
    assert len(panel.bars) == 6
    assert panel.value_text == "-20.0"


def test_bars_clamped_to_panel_range():
    quiet = loudness_panel(-60.0, 10)
    assert all(bar == 0.05 for bar in quiet.bars)
    fast = rate_panel(400, 10)
    assert max(fast.bars) == 1.0
    assert min(fast.bars) == pytest.approx(0.8)


def test_pitch_outlier_clamped_for_chart_only():
    panel = pitch_panel(30.0, 10)
    assert panel.outlier
    assert panel.value_text == "24.0"
    assert panel.bars == pytest.approx([min(f, 1.0) for f in PITCH_MULTIPLIERS])
    assert panel.label == "highly varied"


def test_missing_metric_panel_is_flagged():
    panel = pitch_panel(None, 10)
    assert not panel.has_data
    assert panel.value_text == "–"
    assert panel.label == UNKNOWN
    assert len(panel.bars) == 5


def test_x_axis_labels_floor_at_ten_seconds():
    assert x_axis_labels(None) == (0, 3, 5, 8, 10)
    assert x_axis_labels(4) == (0, 3, 5, 8, 10)
    assert x_axis_labels(61.6) == (0, 16, 31, 47, 62)


def test_format_helpers():
    assert format_time(3725) == "01:02:05"
    assert format_duration(None) == "–"
    assert format_duration(0) == "0초"
    assert format_duration(18.4) == "18초"
    assert format_duration(120) == "2분"
    assert format_duration(125.2) == "2분 5초"


def test_feedback_global_before_segments_in_input_order():
    payload = AnalysisPayload(
        metrics=Metrics(sps=4.5, rms=-30),
        score=50,
        segments=[
            SegmentMetrics(label="intro", start=0, end=10, rms=-25, sil=20),
            SegmentMetrics(label="middle", start=10, end=20, rms=-16, sil=20),
            SegmentMetrics(label="outro", start=20, end=30.6, rms=-10, sil=40),
        ],
    )
    lines = feedback_lines(payload)

    assert len(lines) == 5
    assert lines[0].startswith("발화 속도가 전체적으로 다소 빠릅니다")
    assert lines[1].startswith("전체적인 음량이 조금 작은 편")
    assert lines[2].startswith("intro 구간(0~10초)")
    assert lines[3].startswith("outro 구간(20~31초): 음량이 다소 큰 편")
    assert lines[4].startswith("outro 구간(20~31초): 침묵 비율이 높은 편")
    assert not any("middle" in line for line in lines)


def test_scenario_all_adequate():
    payload = parse_payload(
        {"metrics": {"sps": 3.0, "rms": -16, "sil": 20, "f0r": 7}, "scores": {"Score": 92}}
    )
    report = build_report(payload)

    assert report.grade == "A"
    assert report.approx_rate == 126
    assert report.rate_label == "adequate"
    assert report.loudness_label == "adequate"
    assert report.silence_label == "adequate"
    assert report.pitch_label == "adequate"
    assert len(report.feedback) == 4
    assert report.feedback[0].startswith("발화 속도가 전체적으로 적절한 편")
    assert report.summary == SUMMARY_SENTENCES[0]


def test_scenario_only_fast_rate():
    report = build_report(parse_payload({"metrics": {"sps": 4.5}}))

    assert report.approx_rate == 189
    assert report.rate_label == "fast"
    assert report.grade == UNKNOWN
    assert report.loudness_label == UNKNOWN
    assert report.silence_label == UNKNOWN
    assert report.pitch_label == UNKNOWN
    assert report.feedback == (
        "발화 속도가 전체적으로 다소 빠릅니다. 문장과 문장 사이에 1초 정도의 멈춤을 넣어 청중에게 생각할 시간을 주세요.",
    )


def test_scenario_quiet_segment_without_pauses():
    report = build_report(
        parse_payload(
            {"segments": [{"label": "intro", "start": 0, "end": 10, "rms": -25, "sil": 2}]}
        )
    )

    assert len(report.feedback) == 2
    assert all(line.startswith("intro 구간(0~10초): ") for line in report.feedback)
    assert "음량이 전반적으로 작습니다" in report.feedback[0]
    assert "침묵이 거의 없어" in report.feedback[1]


def test_build_report_is_deterministic():
    data = {
        "metrics": {"duration_sec": 33, "sps": 2.2, "rms": -12, "sil": 3, "f0r": 2},
        "scores": {"Score": 64.4},
        "segments": [{"label": "a", "start": 0, "end": 11, "rms": -30, "sil": 50}],
    }
    assert build_report(parse_payload(data)) == build_report(parse_payload(data))


def test_build_report_empty_payload_never_raises():
    report = build_report(AnalysisPayload())
    assert report.feedback == ()
    assert report.score_text == "–"
    assert report.duration_text == "–"
    assert [card.value for card in report.cards] == ["–", "–", "–"]


def test_missing_duration_is_not_shown_as_zero():
    report = build_report(parse_payload({"metrics": {"sps": 3.0}, "scores": {"Score": 92}}))
    assert report.duration_text == "–"

    report = build_report(parse_payload({"metrics": {"duration_sec": 0}}))
    assert report.duration_text == "0초"
