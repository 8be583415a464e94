"""
Shared ASGI fixtures.

Drives middleware directly with a hand-built scope and records every
message sent, so tests can assert on exact wire behavior.
"""

from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

from panicguard.common.runtime import ErrorReporter
from panicguard.infra.metrics import RequestMetrics


def make_scope(
    method: str = "GET",
    path: str = "/api/v1/namespaces/default/pods/nginx",
    query: bytes = b"",
    headers: Optional[List[Tuple[bytes, bytes]]] = None,
) -> Dict[str, Any]:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": query,
        "root_path": "",
        "headers": headers or [(b"user-agent", b"pytest")],
        "client": ("127.0.0.1", 51234),
        "server": ("testserver", 80),
    }


async def receive() -> Dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


class SendRecorder:
    """Collects ASGI messages sent by the app under test."""

    def __init__(self) -> None:
        self.messages: List[Dict[str, Any]] = []

    async def __call__(self, message: Dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def status(self) -> Optional[int]:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return message["status"]
        return None

    @property
    def headers(self) -> Dict[bytes, bytes]:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return {k.lower(): v for k, v in message["headers"]}
        return {}

    @property
    def body(self) -> bytes:
        return b"".join(m.get("body", b"") for m in self.messages if m["type"] == "http.response.body")


@pytest.fixture
def sent() -> SendRecorder:
    return SendRecorder()


@pytest.fixture
def resolver() -> MagicMock:
    return MagicMock()


@pytest.fixture
def metrics() -> MagicMock:
    return MagicMock(spec=RequestMetrics)


@pytest.fixture
def reporter() -> ErrorReporter:
    reporter = ErrorReporter(0.0)
    reporter.handle_error = MagicMock(return_value=True)  # type: ignore[method-assign]
    return reporter


@pytest.fixture
def scope_factory():
    return make_scope


@pytest.fixture
def asgi_receive():
    return receive


@pytest.fixture
def recorder_factory():
    return SendRecorder
