"""Failure types surfaced to the session."""

from __future__ import annotations

from typing import Optional


class EdulogError(Exception):
    pass


class CaptureUnavailable(EdulogError):
    """Microphone permission denied or no usable input device."""


class SubmissionFailed(EdulogError):
    """Non-success response or transport error from the analysis service."""

    def __init__(self, status: Optional[int], body: str) -> None:
        self.status = status
        self.body = body
        if status is None:
            super().__init__(body)
        else:
            super().__init__(f"HTTP {status}: {body}")


class PayloadMalformed(EdulogError):
    """Response body does not have the metrics/scores/segments shape."""


def describe_error(exc: BaseException) -> str:
    if isinstance(exc, CaptureUnavailable):
        return "마이크 권한을 확인해주세요."
    if isinstance(exc, SubmissionFailed):
        if exc.status is not None:
            return f"서버 오류 ({exc.status}) : {exc.body}"
        return f"요청 실패: {exc.body}"
    if isinstance(exc, PayloadMalformed):
        return f"요청 실패: {exc}"
    return f"요청 실패: {exc}"
