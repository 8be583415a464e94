# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import logging
from typing import Optional

from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from panicguard.common.audit import HEADER_AUDIT_ID
from panicguard.common.runtime import ErrorReporter, error_reporter
from panicguard.common.writer import ResponseWriter
from panicguard.domain.request_info import RequestInfoResolver, request_uri
from panicguard.filters.classify import FailureKind, classify
from panicguard.filters.httplog import RequestLoggingMiddleware, StacktracePred
from panicguard.filters.stack import current_stack
from panicguard.infra.metrics import RequestMetrics, request_metrics

logger = logging.getLogger(__name__)

PANIC_MESSAGE = "This request caused apiserver to panic. Look in the logs for details."


async def handle_panic(
    writer: ResponseWriter,
    request: Request,
    err: Exception,
    *,
    resolver: RequestInfoResolver,
    metrics: RequestMetrics,
    reporter: ErrorReporter,
) -> None:
    """处理一次失控异常：先无条件记栈，再按 abort / 普通失败分流

    原始异常和调用栈只进日志，不会写进响应。
    """

    audit_id = writer.headers.get(HEADER_AUDIT_ID, "")
    method = request.method
    uri = request_uri(request.scope)

    logger.error(
        "As soon as the panic occurs, immediately output the error stack, "
        "method: %s, URI: %s, auditID: %s, current error: %r, error stack: %s",
        method, uri, audit_id, err, current_stack(err),
    )

    if classify(err) is FailureKind.ABORT:
        logger.error(
            "Encountered an AbortHandler error, method: %s, URI: %s, auditID: %s, current error: %r",
            method, uri, audit_id, err,
        )

        # 连接由 server 自己断开，这里不写响应
        try:
            info = resolver.resolve(request)
        except Exception:  # noqa: BLE001
            metrics.record_request_abort(request, None)
        else:
            metrics.record_request_abort(request, info)

        # 上报可能被限频，放在指标之后
        reporter.handle_error(
            f"timeout or abort while handling, method: {method}, URI: {uri!r}, auditID: {audit_id!r}"
        )
        return

    if writer.started:
        logger.error(
            "apiserver panic'd on method: %s, URI: %s, auditID: %s (response already started, status %s kept)",
            method, uri, audit_id, writer.status_code,
        )
        return

    await writer.error(PANIC_MESSAGE, 500)
    logger.error("apiserver panic'd on method: %s, URI: %s, auditID: %s", method, uri, audit_id)


class PanicRecoveryMiddleware:
    """把请求内的失控异常拦在本请求里：记日志、分类、上报，必要时回一个安全的 500"""

    def __init__(
        self,
        app: ASGIApp,
        resolver: RequestInfoResolver,
        *,
        metrics: Optional[RequestMetrics] = None,
        reporter: Optional[ErrorReporter] = None,
        stacktrace_pred: Optional[StacktracePred] = None,
    ) -> None:
        self.app = RequestLoggingMiddleware(app, stacktrace_pred)
        self.resolver = resolver
        self.metrics = metrics if metrics is not None else request_metrics
        self.reporter = reporter if reporter is not None else error_reporter

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        writer = ResponseWriter(scope, send)
        request = Request(scope, receive)

        async def on_crash(err: Exception) -> None:
            await handle_panic(
                writer,
                request,
                err,
                resolver=self.resolver,
                metrics=self.metrics,
                reporter=self.reporter,
            )

        async with self.reporter.handle_crash(on_crash):
            await self.app(scope, receive, writer.send)


def with_panic_recovery(
    app: ASGIApp,
    resolver: RequestInfoResolver,
    *,
    metrics: Optional[RequestMetrics] = None,
    reporter: Optional[ErrorReporter] = None,
) -> PanicRecoveryMiddleware:
    return PanicRecoveryMiddleware(app, resolver, metrics=metrics, reporter=reporter)
