"""
Tests for the audit id middleware, the request logging wrapper
and the shared response writer.
"""

import logging

import pytest

from panicguard.common.audit import HEADER_AUDIT_ID, get_audit_id
from panicguard.common.middlewares import AuditIdMiddleware
from panicguard.common.writer import ResponseWriter, pending_headers
from panicguard.filters.httplog import RequestLoggingMiddleware, default_stacktrace_pred

HTTPLOG_LOGGER = "panicguard.filters.httplog"


def status_app(status):
    async def app(scope, receive, send):
        await send({"type": "http.response.start", "status": status, "headers": []})
        await send({"type": "http.response.body", "body": b"", "more_body": False})

    return app


class TestAuditIdMiddleware:
    """Tests for AuditIdMiddleware."""

    @pytest.mark.asyncio
    async def test_generates_audit_id(self, scope_factory, asgi_receive, sent):
        seen = {}

        async def app(scope, receive, send):
            seen["ctx"] = get_audit_id()
            seen["pending"] = pending_headers(scope).get(HEADER_AUDIT_ID)
            await status_app(200)(scope, receive, send)

        await AuditIdMiddleware(app)(scope_factory(), asgi_receive, sent)

        audit_id = sent.headers[b"audit-id"].decode()
        assert len(audit_id) == 32
        assert seen == {"ctx": audit_id, "pending": audit_id}

    @pytest.mark.asyncio
    async def test_reuses_incoming_header(self, scope_factory, asgi_receive, sent):
        scope = scope_factory(headers=[(b"audit-id", b"from-client")])

        await AuditIdMiddleware(status_app(204))(scope, asgi_receive, sent)

        assert sent.headers[b"audit-id"] == b"from-client"


class TestResponseWriter:
    """Tests for ResponseWriter."""

    @pytest.mark.asyncio
    async def test_tracks_state(self, scope_factory, sent):
        writer = ResponseWriter(scope_factory(), sent)
        assert writer.started is False

        await writer.send({"type": "http.response.start", "status": 201, "headers": []})
        await writer.send({"type": "http.response.body", "body": b"x", "more_body": False})

        assert writer.started is True
        assert writer.status_code == 201
        assert len(sent.messages) == 2

    @pytest.mark.asyncio
    async def test_app_headers_win(self, scope_factory, sent):
        scope = scope_factory()
        pending_headers(scope)["x-extra"] = "pending"
        pending_headers(scope)["content-type"] = "pending/type"
        writer = ResponseWriter(scope, sent)

        await writer.send({"type": "http.response.start", "status": 200, "headers": [(b"content-type", b"app/type")]})

        assert sent.headers[b"content-type"] == b"app/type"
        assert sent.headers[b"x-extra"] == b"pending"

    @pytest.mark.asyncio
    async def test_error(self, scope_factory, sent):
        writer = ResponseWriter(scope_factory(), sent)

        await writer.error("nope", 418)

        assert sent.status == 418
        assert sent.body == b"nope\n"
        assert sent.headers[b"content-type"] == b"text/plain; charset=utf-8"


class TestRequestLoggingMiddleware:
    """Tests for RequestLoggingMiddleware."""

    @pytest.mark.asyncio
    async def test_logs_one_line(self, scope_factory, asgi_receive, sent, caplog):
        caplog.set_level(logging.INFO)

        await RequestLoggingMiddleware(status_app(200))(scope_factory(path="/api/v1/pods"), asgi_receive, sent)

        records = [r for r in caplog.records if r.name == HTTPLOG_LOGGER]
        assert len(records) == 1
        assert records[0].levelno == logging.INFO
        message = records[0].getMessage()
        assert "URI=/api/v1/pods" in message
        assert "resp=200" in message
        assert 'userAgent="pytest"' in message

    @pytest.mark.asyncio
    async def test_server_error_logs_stack(self, scope_factory, asgi_receive, sent, caplog):
        caplog.set_level(logging.INFO)

        await RequestLoggingMiddleware(status_app(503))(scope_factory(), asgi_receive, sent)

        records = [r for r in caplog.records if r.name == HTTPLOG_LOGGER]
        assert records[0].levelno == logging.ERROR
        assert "stack:" in records[0].getMessage()

    @pytest.mark.asyncio
    async def test_logs_and_reraises(self, scope_factory, asgi_receive, sent, caplog):
        caplog.set_level(logging.INFO)

        async def broken(scope, receive, send):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await RequestLoggingMiddleware(broken)(scope_factory(), asgi_receive, sent)

        records = [r for r in caplog.records if r.name == HTTPLOG_LOGGER]
        assert "resp=0" in records[0].getMessage()

    def test_default_stacktrace_pred(self):
        assert default_stacktrace_pred(500) is True
        assert default_stacktrace_pred(100) is True
        assert default_stacktrace_pred(101) is False
        assert default_stacktrace_pred(200) is False
        assert default_stacktrace_pred(404) is False
