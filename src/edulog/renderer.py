"""Markdown report rendering."""

from __future__ import annotations

import os
from typing import List, Optional

from .models import ChartPanel, ReportModel
from .report import LABEL_TEXT

BAR_WIDTH = 20


def _clean_text(value: str) -> str:
    return " ".join(value.split())


def _label_text(label: str) -> str:
    return LABEL_TEXT.get(label, label)


def _progress_bar(percent: Optional[float]) -> str:
    if percent is None:
        return "[" + " " * BAR_WIDTH + "]"
    filled = int(round(percent / 100 * BAR_WIDTH))
    return "[" + "#" * filled + "-" * (BAR_WIDTH - filled) + "]"


def render_chart(panel: ChartPanel) -> List[str]:
    lines: List[str] = []
    lines.append(f"### {panel.title}")
    lines.append("")
    lines.append(f"- 평균: {panel.value_text} {panel.unit}")
    lines.append(f"- 현재: {_label_text(panel.label)}")
    if panel.outlier:
        lines.append(f"- 표시 범위({panel.axis[1]:g})를 넘는 값입니다.")
    lines.append("")
    lines.append("```text")
    for height in panel.bars:
        lines.append("█" * max(1, int(round(height * BAR_WIDTH))))
    lines.append(" ".join(f"{t}s" for t in panel.x_labels))
    lines.append("```")
    lines.append("")
    if panel.has_data and panel.range_text:
        lines.append(panel.range_text)
    else:
        lines.append(f"{panel.unit} 데이터를 계산하기에 충분한 길이가 아닙니다.")
    lines.append("")
    return lines


def render_report(report: ReportModel, audio_path: Optional[str] = None) -> str:
    lines: List[str] = []
    lines.append("# 분석 결과")
    lines.append("")
    lines.append(f"녹음 시간: {report.duration_text}")
    lines.append("")
    lines.append("## 종합 점수")
    lines.append("")
    lines.append(f"- 점수: {report.score_text}")
    lines.append(f"- 등급: {report.grade if report.grade != 'unknown' else '–'}")
    lines.append(f"- {_progress_bar(report.score_bar_percent)}")
    if report.summary:
        lines.append("")
        lines.append(report.summary)
    lines.append("")

    lines.append("## 핵심 지표")
    lines.append("")
    for card in report.cards:
        lines.append(
            f"- {card.title}: {card.value} ({_label_text(card.label)}, "
            f"{card.subtitle})"
        )
    lines.append("")

    lines.append("## 그래프")
    lines.append("")
    for panel in report.charts:
        lines.extend(render_chart(panel))

    lines.append("## 개선 피드백")
    lines.append("")
    if report.feedback:
        for line in report.feedback:
            lines.append(f"- {_clean_text(line)}")
    else:
        lines.append("분석 결과를 바탕으로 한 피드백이 여기에 표시됩니다.")
    lines.append("")

    if audio_path:
        lines.append("## 녹음 다시 듣기")
        lines.append("")
        lines.append(f"- Audio: {os.path.basename(audio_path)}")
        lines.append("")
    return "\n".join(lines)
