"""Shared fixtures: isolate tests from the developer's environment."""

import json

import httpx
import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for name in ("SAFECOMMS_API_KEY", "SAFECOMMS_BASE_URL", "SAFECOMMS_TIMEOUT", "SAFECOMMS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SAFECOMMS_CONFIG", str(tmp_path / "missing.yaml"))


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, status=200, body=None, headers=None, content=None):
        self.status = status
        self.body = body
        self.headers = headers or {}
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status, content=self.content, headers=self.headers)
        return httpx.Response(self.status, json=self.body, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)


@pytest.fixture
def recorder_factory():
    return Recorder
