"""
Pytest configuration and shared fixtures.
"""

import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from delayqueue import Client, Handler, HandlerRegistry


def make_response(
    body: Any,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """Build a real requests.Response carrying a JSON (or raw str) body."""
    resp = requests.Response()
    resp.status_code = status_code
    content = body if isinstance(body, str) else json.dumps(body)
    resp._content = content.encode("utf-8")
    resp.encoding = "utf-8"
    resp.headers.update(headers or {})
    return resp


class FakeServer:
    """Stands in for requests.post; records calls and replays queued responses."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.responses: List[Any] = []

    def reply(self, body: Any, status_code: int = 200, headers: Optional[Dict[str, str]] = None):
        self.responses.append(make_response(body, status_code, headers))

    def fail(self, exc: Exception):
        self.responses.append(exc)

    def post(self, url, json=None, **kwargs):
        self.calls.append({"url": url, "json": json, **kwargs})
        if not self.responses:
            raise AssertionError(f"unexpected request to {url}")
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def paths(self) -> List[str]:
        return [call["url"].split("9277", 1)[1] for call in self.calls]


class EchoHandler(Handler):
    performed: List[Dict[str, Any]] = []

    def perform(self):
        EchoHandler.performed.append(dict(self.body))


class NotAHandler:
    pass


@pytest.fixture
def server(monkeypatch) -> FakeServer:
    fake = FakeServer()
    monkeypatch.setattr(requests, "post", fake.post)
    return fake


@pytest.fixture
def registry() -> HandlerRegistry:
    reg = HandlerRegistry()
    reg.register(EchoHandler, name="H")
    reg.register(NotAHandler, name="Plain")
    EchoHandler.performed = []
    return reg


@pytest.fixture
def client(registry: HandlerRegistry) -> Client:
    return Client("http://127.0.0.1:9277/", registry=registry)
