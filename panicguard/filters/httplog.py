# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""请求日志包装：每个请求结束时记一行，异常状态码附带写响应头那一刻的调用栈"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from panicguard.common.audit import HEADER_AUDIT_ID
from panicguard.common.writer import pending_headers
from panicguard.domain.request_info import request_uri
from panicguard.filters.stack import current_stack

logger = logging.getLogger(__name__)

StacktracePred = Callable[[int], bool]


def default_stacktrace_pred(status: int) -> bool:
    return (status < 200 or status >= 500) and status != 101


class RequestLoggingMiddleware:
    def __init__(self, app: ASGIApp, stacktrace_pred: Optional[StacktracePred] = None) -> None:
        self.app = app
        self.stacktrace_pred = stacktrace_pred or default_stacktrace_pred

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.monotonic()
        status = 0
        stack: Optional[str] = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status, stack
            if message["type"] == "http.response.start":
                status = int(message["status"])
                if self.stacktrace_pred(status):
                    stack = current_stack()
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            self._log(scope, status, time.monotonic() - started, stack)

    @staticmethod
    def _log(scope: Scope, status: int, elapsed: float, stack: Optional[str]) -> None:
        headers = Headers(scope=scope)
        client = scope.get("client")
        args = (
            scope.get("method", ""),
            request_uri(scope),
            elapsed * 1000,
            headers.get("user-agent", ""),
            pending_headers(scope).get(HEADER_AUDIT_ID, ""),
            f"{client[0]}:{client[1]}" if client else "",
            status,
        )
        fmt = 'HTTP verb=%s URI=%s latency=%.3fms userAgent="%s" audit-ID="%s" srcIP="%s" resp=%d'
        if stack is not None:
            logger.error(fmt + " stack: %s", *args, stack)
        else:
            logger.info(fmt, *args)
