"""Shared fixtures: a stand-in for `requests.post` so no LM Studio server is needed.

Usage:
    def test_x(fake_post):
        fake_post.respond(FakeResponse(chunks=[b"data: [DONE]\\n"]))
        ...
        assert fake_post.calls[0]["json"]["model"] == "m"
"""

from __future__ import annotations

import json

import pytest
import requests


class FakeResponse:
    """Just enough of `requests.Response` for the backend: status, json, iter_content."""

    def __init__(
        self,
        status_code: int = 200,
        body: bytes | str = b"",
        chunks: list[bytes] | None = None,
        reason: str = "OK",
        raise_after: Exception | None = None,
    ):
        self.status_code = status_code
        self.reason = reason
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        self._chunks = chunks if chunks is not None else [self._body]
        self._raise_after = raise_after
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def close(self):
        self.closed = True

    def json(self):
        return json.loads(self._body.decode("utf-8"))

    def iter_content(self, chunk_size=None):
        for c in self._chunks:
            yield c
        if self._raise_after is not None:
            raise self._raise_after


class PostRecorder:
    """Records every `requests.post` call and answers with a canned response/exception."""

    def __init__(self):
        self.calls: list[dict] = []
        self._answer: FakeResponse | Exception = FakeResponse()

    def respond(self, answer: FakeResponse | Exception) -> None:
        self._answer = answer

    @property
    def response(self) -> FakeResponse:
        assert isinstance(self._answer, FakeResponse)
        return self._answer

    def __call__(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if isinstance(self._answer, Exception):
            raise self._answer
        return self._answer


@pytest.fixture
def fake_post(monkeypatch) -> PostRecorder:
    rec = PostRecorder()
    monkeypatch.setattr(requests, "post", rec)
    return rec


def sse_event(**choice) -> bytes:
    """One `data:` event carrying `{"choices": [choice]}`, blank-line terminated."""
    body = json.dumps({"choices": [choice]}, ensure_ascii=False)
    return b"data: " + body.encode("utf-8") + b"\n\n"
