"""Client for the remote speech analysis service."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .errors import PayloadMalformed, SubmissionFailed
from .models import AnalysisPayload, AudioBlob
from .payload_io import parse_payload

logger = logging.getLogger("edulog")

DEFAULT_URL = "http://localhost:8000/api/analyze"


class AnalysisClient:
    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout_seconds: float = 60.0,
        field_name: str = "file",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.field_name = field_name
        self.transport = transport

    def submit(self, blob: AudioBlob) -> AnalysisPayload:
        files = {self.field_name: (blob.filename, blob.data, blob.media_type)}
        logger.info(
            "Submitting %d bytes (%s) to %s", len(blob.data), blob.media_type, self.url
        )
        try:
            with httpx.Client(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                r = client.post(self.url, files=files)
        except httpx.HTTPError as exc:
            logger.warning("Submission transport error: %s", exc)
            raise SubmissionFailed(None, str(exc) or type(exc).__name__) from exc

        logger.info("Analysis service status: %s", r.status_code)
        if not r.is_success:
            raise SubmissionFailed(r.status_code, r.text)
        try:
            return parse_payload(r.content)
        except PayloadMalformed:
            logger.warning("Malformed analysis payload: %.200s", r.text)
            raise
