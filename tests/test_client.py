import json

import httpx
import pytest

from edulog.client import AnalysisClient
from edulog.errors import PayloadMalformed, SubmissionFailed
from edulog.models import AudioBlob

URL = "http://analysis.test/api/analyze"


def _client(handler) -> AnalysisClient:
    return AnalysisClient(url=URL, transport=httpx.MockTransport(handler))


def test_submit_posts_single_file_field():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = request.read()
        seen["type"] = request.headers["content-type"]
        body = {"metrics": {"sps": 3.0}, "scores": {"Score": 81}, "segments": []}
        return httpx.Response(200, json=body)

    payload = _client(handler).submit(AudioBlob(data=b"RIFFdata"))

    assert payload.score == 81.0
    assert payload.metrics.sps == 3.0
    assert seen["type"].startswith("multipart/form-data")
    assert b'name="file"; filename="recording.wav"' in seen["body"]
    assert b"audio/wav" in seen["body"]


def test_submit_non_success_status():
    client = _client(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(SubmissionFailed) as info:
        client.submit(AudioBlob(data=b"x"))

    assert info.value.status == 500
    assert info.value.body == "boom"


def test_submit_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SubmissionFailed) as info:
        _client(handler).submit(AudioBlob(data=b"x"))

    assert info.value.status is None
    assert "connection refused" in info.value.body


def test_submit_malformed_body():
    client = _client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(PayloadMalformed):
        client.submit(AudioBlob(data=b"x"))


def test_submit_wrong_shape_is_malformed():
    body = json.dumps({"segments": "none"})
    client = _client(lambda request: httpx.Response(200, text=body))

    with pytest.raises(PayloadMalformed):
        client.submit(AudioBlob(data=b"x"))
