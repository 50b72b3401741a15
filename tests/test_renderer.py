from edulog.payload_io import parse_payload
from edulog.renderer import render_report
from edulog.report import build_report


def test_render_report_includes_sections():
    payload = parse_payload(
        {
            "metrics": {"duration_sec": 18, "sps": 3.0, "rms": -16, "sil": 20, "f0r": 7},
            "scores": {"Score": 92.4},
            "segments": [{"label": "intro", "start": 0, "end": 6, "rms": -30, "sil": 20}],
        }
    )
    text = render_report(build_report(payload), audio_path="/tmp/take.wav")

    assert "# 분석 결과" in text
    assert "녹음 시간: 18초" in text
    assert "- 점수: 92" in text
    assert "- 등급: A" in text
    assert "발화 속도 (WPM): 126" in text
    assert "### WPM 추이" in text
    assert "### 피치 분포" in text
    assert "- intro 구간(0~6초)" in text
    assert "- Audio: take.wav" in text


def test_render_report_marks_missing_data():
    text = render_report(build_report(parse_payload({})))

    assert "- 등급: –" in text
    assert "WPM 데이터를 계산하기에 충분한 길이가 아닙니다." in text
    assert "분석 결과를 바탕으로 한 피드백이 여기에 표시됩니다." in text
    assert "녹음 다시 듣기" not in text
