"""Analysis payload parsing."""

from __future__ import annotations

import json
import math
from typing import Any, Dict, List, Optional, Union

from .errors import PayloadMalformed
from .models import AnalysisPayload, Metrics, SegmentMetrics

METRIC_KEYS = ("duration_sec", "sps", "rms", "sil", "f0r")


def _number(value: Any) -> Optional[float]:
    # bool is an int subclass; the service never sends flags as metrics
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def _mapping(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise PayloadMalformed(f"'{key}' must be an object.")
    return value


def _parse_segments(raw: Any) -> List[SegmentMetrics]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise PayloadMalformed("'segments' must be a list.")

    segments: List[SegmentMetrics] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise PayloadMalformed(f"Segment {idx} must be an object.")
        start = _number(item.get("start"))
        end = _number(item.get("end"))
        if start is None or end is None:
            raise PayloadMalformed(f"Segment {idx} needs numeric start/end.")
        label = item.get("label")
        segments.append(
            SegmentMetrics(
                label=str(label) if label not in (None, "") else f"구간 {idx + 1}",
                start=start,
                end=end,
                rms=_number(item.get("rms")),
                sil=_number(item.get("sil")),
            )
        )
    return segments


def parse_payload(data: Union[str, bytes, Dict[str, Any]]) -> AnalysisPayload:
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except (ValueError, UnicodeDecodeError) as exc:
            raise PayloadMalformed(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise PayloadMalformed("Payload must be a JSON object.")

    metrics_raw = _mapping(data, "metrics")
    scores_raw = _mapping(data, "scores")
    metrics = Metrics(**{key: _number(metrics_raw.get(key)) for key in METRIC_KEYS})

    return AnalysisPayload(
        metrics=metrics,
        score=_number(scores_raw.get("Score")),
        segments=_parse_segments(data.get("segments")),
    )


def load_payload(path: str) -> AnalysisPayload:
    with open(path, "r", encoding="utf-8") as handle:
        return parse_payload(handle.read())
